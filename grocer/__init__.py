"""
grocer — recipe-to-cart and checkout orchestration over a grocery API.

    from grocer import recipes as R    # Recipe discovery + cart filling
    from grocer import checkout as K   # Four-step order placement
    from grocer import cache as C      # TTL cache with single-flight refresh
    from grocer import tree            # Shape search in untyped payloads
"""

from grocer import cache
from grocer import chain
from grocer import tree
from grocer import shape
from grocer import recipes
from grocer import checkout
from grocer.catalog import Catalog
from grocer.client import GroceryClient
from grocer.config import Settings, get_settings, configure_logging
from grocer.errors import (
    NotFound,
    InvalidServings,
    PreconditionFailure,
    StepFailure,
    CheckoutBusy,
    TransportFailure,
    PaymentUnresolved,
)
from grocer._types import Json, JsonObject, Lazy

__version__ = "0.1.0"

__all__ = (
    "cache",
    "chain",
    "tree",
    "shape",
    "recipes",
    "checkout",
    "Catalog",
    "GroceryClient",
    "Settings",
    "get_settings",
    "configure_logging",
    "NotFound",
    "InvalidServings",
    "PreconditionFailure",
    "StepFailure",
    "CheckoutBusy",
    "TransportFailure",
    "PaymentUnresolved",
    "Json",
    "JsonObject",
    "Lazy",
)
