"""
Checkout types.
"""

from __future__ import annotations

from dataclasses import dataclass

from kungfu import Result, Ok, Error

from grocer._types import Json
from grocer.errors import PreconditionFailure, EMPTY_OR_STALE_CART, NO_DELIVERY_SLOT
from grocer.shape import format_timestamp

# ═══════════════════════════════════════════════════════════════════════════════
# Session — Derived Per Call, Never Cached
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class CheckoutSession:
    """
    View of the live cart for one checkout attempt.

    mts (mutation token) and state_token prove the request targets the
    cart state we just read.
    """

    mts: Json
    state_token: str
    slot_id: str
    total_count: int | None
    checkout_total_price: float | None

    @classmethod
    def from_cart(cls, cart: Json) -> Result[CheckoutSession, PreconditionFailure]:
        body = cart if isinstance(cart, dict) else {}
        mts = body.get("mts")
        state_token = body.get("state_token")
        if not mts or not state_token:
            return Error(PreconditionFailure(EMPTY_OR_STALE_CART))

        slot = body.get("selected_slot")
        slot_id = slot.get("slot_id") if isinstance(slot, dict) else None
        if not slot_id:
            return Error(PreconditionFailure(NO_DELIVERY_SLOT))

        return Ok(
            cls(
                mts=mts,
                state_token=str(state_token),
                slot_id=str(slot_id),
                total_count=body.get("total_count"),
                checkout_total_price=body.get("checkout_total_price"),
            )
        )

    def start_body(self) -> dict[str, Json]:
        # Empty out-of-stock map: strict availability, no substitutions
        return {"mts": self.mts, "oos_article_ids": {}, "state_token": self.state_token}


# ═══════════════════════════════════════════════════════════════════════════════
# Result
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class DeliveryWindow:
    start: str | None
    end: str | None

    @classmethod
    def from_slot(cls, slot: Json) -> DeliveryWindow | None:
        if not isinstance(slot, dict):
            return None
        return cls(
            start=format_timestamp(slot.get("window_start")),
            end=format_timestamp(slot.get("window_end")),
        )


@dataclass(frozen=True, slots=True)
class CheckoutResult:
    order_id: str
    total_price: float | None
    total_count: int | None
    delivery_window: DeliveryWindow | None


__all__ = ("CheckoutSession", "DeliveryWindow", "CheckoutResult")
