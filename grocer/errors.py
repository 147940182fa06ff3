"""
Error taxonomy.

Business failures are frozen dataclasses returned inside `Error(...)`.
Transport faults are exceptions and are raised.
"""

from __future__ import annotations

from dataclasses import dataclass

from grocer._types import Json

# ═══════════════════════════════════════════════════════════════════════════════
# Returned — Expected Business Outcomes
# ═══════════════════════════════════════════════════════════════════════════════


@dataclass(frozen=True, slots=True)
class NotFound:
    """Requested entity is absent from the current data."""

    entity: str
    id: str
    suggestion: str

    def __str__(self) -> str:
        return f"{self.entity} '{self.id}' not found"


@dataclass(frozen=True, slots=True)
class InvalidServings:
    recipe_id: str
    servings: int | float

    def __str__(self) -> str:
        return f"Invalid servings {self.servings} for recipe '{self.recipe_id}'"


@dataclass(frozen=True, slots=True)
class PreconditionFailure:
    """Checkout refused before any write call was issued."""

    reason: str

    def __str__(self) -> str:
        return self.reason


@dataclass(frozen=True, slots=True)
class StepFailure:
    """
    A checkout step got an answer missing an expected field.

    details holds the raw response for diagnosis.
    """

    step: str
    message: str
    details: Json = None

    def __str__(self) -> str:
        return f"{self.step}: {self.message}"


@dataclass(frozen=True, slots=True)
class CheckoutBusy:
    """Another checkout for the same account is in flight."""

    account: str

    def __str__(self) -> str:
        return f"Checkout already in progress for account '{self.account}'"


EMPTY_OR_STALE_CART = "empty or stale cart"
NO_DELIVERY_SLOT = "no delivery slot selected"

# ═══════════════════════════════════════════════════════════════════════════════
# Raised — Transport Faults
# ═══════════════════════════════════════════════════════════════════════════════


class TransportFailure(Exception):
    """The external collaborator call itself failed during a checkout step."""

    def __init__(self, step: str, message: str) -> None:
        super().__init__(f"{step}: {message}")
        self.step = step
        self.message = message


class PaymentUnresolved(TransportFailure):
    """
    Payment initiation failed after the order was created.

    The order exists upstream but its payment state is unknown; it has to be
    reconciled against the external service by hand.
    """

    def __init__(self, order_id: str, message: str) -> None:
        super().__init__(
            "initiate payment",
            f"{message} (order {order_id} exists, payment state unknown; "
            "reconcile with the grocery service)",
        )
        self.order_id = order_id


__all__ = (
    "NotFound",
    "InvalidServings",
    "PreconditionFailure",
    "StepFailure",
    "CheckoutBusy",
    "EMPTY_OR_STALE_CART",
    "NO_DELIVERY_SLOT",
    "TransportFailure",
    "PaymentUnresolved",
)
