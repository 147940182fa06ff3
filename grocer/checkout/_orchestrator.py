"""
Checkout orchestration — read cart, start, initiate payment, confirm.

Each step needs the previous step's output, so they run as one chain and
the first Error ends it. Transport faults are raised as TransportFailure
tagged with the step that was running. Once checkout start has returned an
order id there is no way back: the upstream protocol has no abort call.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable

from kungfu import Result, Ok, Error

from grocer import chain as C
from grocer._types import Json
from grocer.checkout._guard import CheckoutGuard, OnBusy
from grocer.checkout._types import CheckoutSession, CheckoutResult, DeliveryWindow
from grocer.client import GroceryClient
from grocer.config import OnBusyMode, Settings, get_settings
from grocer.errors import (
    CheckoutBusy,
    PaymentUnresolved,
    PreconditionFailure,
    StepFailure,
    TransportFailure,
)

log = logging.getLogger("grocer.checkout")

READ_CART = "read cart"
START = "checkout start"
PAYMENT = "initiate payment"
CONFIRM = "order confirm"

DEFAULT_ACCOUNT = "default"

type CheckoutError = PreconditionFailure | StepFailure | CheckoutBusy


class CheckoutOrchestrator:
    """
    Places the order for the current cart.

    Holds no cart state: every call re-reads the cart, since a stale token
    or slot would check out the wrong contents.

    Example:
        orchestrator = CheckoutOrchestrator(client)
        match await orchestrator.checkout():
            case Ok(order):
                print(order.order_id, order.total_price)
            case Error(PreconditionFailure(reason=reason)):
                print(reason)
    """

    def __init__(
        self,
        client: GroceryClient,
        *,
        return_url: str | None = None,
        guard: CheckoutGuard | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = get_settings() if settings is None else settings
        self._client = client
        self._return_url = return_url or settings.payment_return_url
        if guard is None:
            on_busy = OnBusy.WAIT if settings.checkout_on_busy is OnBusyMode.wait else OnBusy.FAIL
            guard = CheckoutGuard(on_busy)
        self._guard = guard

    async def checkout(
        self, account: str = DEFAULT_ACCOUNT
    ) -> Result[CheckoutResult, CheckoutError]:
        """
        Run the four checkout steps for account.

        Overlapping calls for the same account are serialized or rejected
        by the guard.
        """
        return await self._guard.run(account, self._run)

    async def _run(self) -> Result[CheckoutResult, PreconditionFailure | StepFailure]:
        flow = (
            C.step(READ_CART, self._read_cart)
            .then(lambda session: C.step(START, lambda: self._start(session)))
            .then(lambda order_id: C.step(PAYMENT, lambda: self._initiate_payment(order_id)))
            .then(lambda order_id: C.step(CONFIRM, lambda: self._confirm(order_id)))
        )

        result = await C.run(flow)
        match result:
            case Ok(done):
                log.info("Order %s confirmed", done.value.order_id)
                return Ok(done.value)
            case Error(e):
                log.warning("Checkout stopped at %s: %s", e.step_failed, e.error)
                return Error(e.error)

    # ───────────────────────────────────────────────────────────────────────
    # Steps
    # ───────────────────────────────────────────────────────────────────────

    async def _read_cart(self) -> Result[CheckoutSession, PreconditionFailure]:
        cart = await _transport(READ_CART, self._client.get_shopping_cart())
        return CheckoutSession.from_cart(cart)

    async def _start(self, session: CheckoutSession) -> Result[str, StepFailure]:
        response = await _transport(
            START,
            self._client.send_request("POST", "/cart/checkout/start", session.start_body()),
        )
        order_id = _field(response, "order_id")
        if not order_id:
            return Error(StepFailure(START, "no order_id returned", details=response))
        log.info("Checkout started, order %s (slot %s)", order_id, session.slot_id)
        return Ok(str(order_id))

    async def _initiate_payment(self, order_id: str) -> Result[str, StepFailure]:
        # Response is not inspected; confirmation decides the outcome
        try:
            await self._client.send_request(
                "POST",
                "/cart/checkout/initiate_payment",
                {"app_return_url": self._return_url, "order_id": order_id},
            )
        except Exception as e:
            log.error("Payment initiation failed for order %s: %s", order_id, e)
            raise PaymentUnresolved(order_id, str(e)) from e
        return Ok(order_id)

    async def _confirm(self, order_id: str) -> Result[CheckoutResult, StepFailure]:
        response = await _transport(
            CONFIRM,
            self._client.send_request("POST", f"/cart/checkout/order/{order_id}/confirm", {}),
        )
        confirmed = _field(response, "order_id")
        if not confirmed:
            return Error(StepFailure(CONFIRM, "no order_id in confirmation", details=response))
        return Ok(
            CheckoutResult(
                order_id=str(confirmed),
                total_price=_field(response, "total_price"),
                total_count=_field(response, "total_count"),
                delivery_window=DeliveryWindow.from_slot(_field(response, "delivery_slot")),
            )
        )


async def _transport(step: str, call: Awaitable[Json]) -> Json:
    try:
        return await call
    except Exception as e:
        raise TransportFailure(step, str(e)) from e


def _field(response: Json, name: str) -> Json:
    return response.get(name) if isinstance(response, dict) else None


__all__ = (
    "CheckoutOrchestrator",
    "CheckoutError",
    "DEFAULT_ACCOUNT",
    "READ_CART",
    "START",
    "PAYMENT",
    "CONFIRM",
)
