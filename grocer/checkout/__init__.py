"""
Checkout — place the order for the current cart.

    from grocer import checkout as K

    orchestrator = K.CheckoutOrchestrator(client)
    result = await orchestrator.checkout(account="household-1")
"""

from __future__ import annotations

from grocer.checkout._types import CheckoutSession, DeliveryWindow, CheckoutResult
from grocer.checkout._guard import OnBusy, CheckoutGuard
from grocer.checkout._orchestrator import (
    CheckoutOrchestrator,
    CheckoutError,
    DEFAULT_ACCOUNT,
    READ_CART,
    START,
    PAYMENT,
    CONFIRM,
)

__all__ = (
    "CheckoutSession",
    "DeliveryWindow",
    "CheckoutResult",
    "OnBusy",
    "CheckoutGuard",
    "CheckoutOrchestrator",
    "CheckoutError",
    "DEFAULT_ACCOUNT",
    "READ_CART",
    "START",
    "PAYMENT",
    "CONFIRM",
)
