from __future__ import annotations

import asyncio

import pytest
from kungfu import Ok, Error

from grocer import checkout as K
from grocer.errors import (
    CheckoutBusy,
    PaymentUnresolved,
    PreconditionFailure,
    StepFailure,
    TransportFailure,
    EMPTY_OR_STALE_CART,
    NO_DELIVERY_SLOT,
)

START_PATH = "/cart/checkout/start"
PAYMENT_PATH = "/cart/checkout/initiate_payment"


def confirm_path(order_id: str) -> str:
    return f"/cart/checkout/order/{order_id}/confirm"


@pytest.fixture
def ready_client(client):
    client.cart = {
        "mts": 17,
        "state_token": "tok-1",
        "selected_slot": {"slot_id": "slot-9"},
        "total_count": 7,
        "checkout_total_price": 2350,
    }
    client.responses[("POST", START_PATH)] = {"order_id": "O1"}
    client.responses[("POST", PAYMENT_PATH)] = {"status": "PENDING"}
    client.responses[("POST", confirm_path("O1"))] = {
        "order_id": "O1",
        "total_price": 23.5,
        "total_count": 7,
        "delivery_slot": {
            "window_start": "2024-01-01T10:00:00.000+01:00",
            "window_end": "2024-01-01T11:00:00.000+01:00",
        },
    }
    return client


@pytest.fixture
def orchestrator(client, settings) -> K.CheckoutOrchestrator:
    return K.CheckoutOrchestrator(client, settings=settings)


@pytest.mark.asyncio
async def test_happy_path(ready_client, orchestrator) -> None:
    result = await orchestrator.checkout()

    assert isinstance(result, Ok)
    order = result.value
    assert order.order_id == "O1"
    assert order.total_price == 23.5
    assert order.total_count == 7
    assert order.delivery_window == K.DeliveryWindow(start="2024-01-01 10:00", end="2024-01-01 11:00")

    assert ready_client.requests == [
        ("POST", START_PATH, {"mts": 17, "oos_article_ids": {}, "state_token": "tok-1"}, False),
        ("POST", PAYMENT_PATH, {"app_return_url": "nl.picnic-supermarkt://payment", "order_id": "O1"}, False),
        ("POST", confirm_path("O1"), {}, False),
    ]


@pytest.mark.asyncio
async def test_custom_return_url(ready_client, settings) -> None:
    orchestrator = K.CheckoutOrchestrator(ready_client, return_url="app://back", settings=settings)
    await orchestrator.checkout()

    assert ready_client.requests[1][2] == {"app_return_url": "app://back", "order_id": "O1"}


@pytest.mark.asyncio
async def test_missing_delivery_window_is_omitted(ready_client, orchestrator) -> None:
    ready_client.responses[("POST", confirm_path("O1"))] = {"order_id": "O1", "total_price": 1.0}

    result = await orchestrator.checkout()
    assert result.value.delivery_window is None
    assert result.value.total_count is None


@pytest.mark.parametrize(
    "cart,reason",
    (
        ({}, EMPTY_OR_STALE_CART),
        ({"mts": 1}, EMPTY_OR_STALE_CART),
        ({"state_token": "t"}, EMPTY_OR_STALE_CART),
        ({"mts": 1, "state_token": "t"}, NO_DELIVERY_SLOT),
        ({"mts": 1, "state_token": "t", "selected_slot": {}}, NO_DELIVERY_SLOT),
    ),
)
@pytest.mark.asyncio
async def test_precondition_failure_makes_no_writes(client, orchestrator, cart, reason) -> None:
    client.cart = cart

    result = await orchestrator.checkout()

    assert isinstance(result, Error)
    assert result.value == PreconditionFailure(reason)
    assert client.requests == []


@pytest.mark.asyncio
async def test_start_without_order_id_stops(ready_client, orchestrator) -> None:
    ready_client.responses[("POST", START_PATH)] = {"error": "cart changed"}

    result = await orchestrator.checkout()

    assert isinstance(result, Error)
    assert result.value == StepFailure(K.START, "no order_id returned", details={"error": "cart changed"})
    assert [r[1] for r in ready_client.requests] == [START_PATH]


@pytest.mark.asyncio
async def test_confirm_without_order_id_fails(ready_client, orchestrator) -> None:
    ready_client.responses[("POST", confirm_path("O1"))] = {"status": "unknown"}

    result = await orchestrator.checkout()

    assert isinstance(result.value, StepFailure)
    assert result.value.step == K.CONFIRM


@pytest.mark.asyncio
async def test_cart_read_fault_is_transport_failure(client, orchestrator) -> None:
    client.failures["get_shopping_cart"] = ConnectionError("offline")

    with pytest.raises(TransportFailure) as info:
        await orchestrator.checkout()
    assert info.value.step == K.READ_CART
    assert isinstance(info.value.__cause__, ConnectionError)
    assert client.requests == []


@pytest.mark.asyncio
async def test_start_fault_is_transport_failure(ready_client, orchestrator) -> None:
    ready_client.responses[("POST", START_PATH)] = ConnectionError("reset")

    with pytest.raises(TransportFailure) as info:
        await orchestrator.checkout()
    assert info.value.step == K.START
    assert not isinstance(info.value, PaymentUnresolved)


@pytest.mark.asyncio
async def test_payment_fault_is_unresolved(ready_client, orchestrator, caplog) -> None:
    ready_client.responses[("POST", PAYMENT_PATH)] = TimeoutError("gateway timeout")

    with pytest.raises(PaymentUnresolved) as info:
        await orchestrator.checkout()

    assert info.value.order_id == "O1"
    assert info.value.step == K.PAYMENT
    assert "reconcile" in str(info.value)
    assert [r[1] for r in ready_client.requests] == [START_PATH, PAYMENT_PATH]
    assert "Payment initiation failed for order O1" in caplog.text


@pytest.mark.asyncio
async def test_overlapping_checkout_is_rejected(ready_client, settings) -> None:
    guard = K.CheckoutGuard()
    orchestrator = K.CheckoutOrchestrator(ready_client, guard=guard, settings=settings)
    gate = asyncio.Event()
    real_cart = ready_client.get_shopping_cart

    async def slow_cart():
        await gate.wait()
        return await real_cart()

    ready_client.get_shopping_cart = slow_cart

    first = asyncio.create_task(orchestrator.checkout("household"))
    for _ in range(5):
        await asyncio.sleep(0)
    assert guard.busy("household")

    second = await orchestrator.checkout("household")
    assert isinstance(second, Error)
    assert second.value == CheckoutBusy("household")

    other = asyncio.create_task(orchestrator.checkout("neighbour"))
    gate.set()
    assert isinstance(await first, Ok)
    assert isinstance(await other, Ok)


@pytest.mark.asyncio
async def test_waiting_guard_serializes(ready_client, settings) -> None:
    guard = K.CheckoutGuard(K.OnBusy.WAIT)
    orchestrator = K.CheckoutOrchestrator(ready_client, guard=guard, settings=settings)

    results = await asyncio.gather(orchestrator.checkout(), orchestrator.checkout())

    assert all(isinstance(r, Ok) for r in results)
    starts = [r for r in ready_client.requests if r[1] == START_PATH]
    assert len(starts) == 2
    assert not guard.busy(K.DEFAULT_ACCOUNT)


@pytest.mark.asyncio
async def test_guard_forgets_idle_accounts(ready_client, settings) -> None:
    guard = K.CheckoutGuard(K.OnBusy.WAIT)
    orchestrator = K.CheckoutOrchestrator(ready_client, guard=guard, settings=settings)

    await asyncio.gather(*(orchestrator.checkout(f"acct-{n % 3}") for n in range(6)))
    assert len(guard) == 0

    ready_client.responses[("POST", START_PATH)] = ConnectionError("reset")
    with pytest.raises(TransportFailure):
        await orchestrator.checkout("acct-x")
    assert len(guard) == 0
    assert not guard.busy("acct-x")
