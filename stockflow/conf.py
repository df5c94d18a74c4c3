"""
Stockflow configuration.

Usage in settings.py:
    STOCKFLOW = {
        "CATALOG": "myproject.inventory.adapters.ProductCatalog",
        "PRINCIPAL_DIRECTORY": "stockflow.adapters.users.DjangoUserDirectory",
        "APPROVER_ROLES": ("super-admin", "admin"),
        "OVERDRAW_POLICY": "reject",
        "UNKNOWN_PRODUCT_POLICY": "skip",
    }
"""

from dataclasses import dataclass
from typing import Any

from django.conf import settings


OVERDRAW_REJECT = 'reject'
OVERDRAW_CLAMP = 'clamp'

UNKNOWN_PRODUCT_SKIP = 'skip'
UNKNOWN_PRODUCT_FAIL = 'fail'


@dataclass
class StockflowSettings:
    """Stockflow configuration settings."""

    # Product/warehouse lookup backend (dotted path)
    CATALOG: str = ""

    # Principal/role lookup backend (dotted path)
    PRINCIPAL_DIRECTORY: str = "stockflow.adapters.users.DjangoUserDirectory"

    # Roles allowed to approve or reject requests
    APPROVER_ROLES: tuple = ("super-admin", "admin")

    # "reject" fails an out movement that exceeds on-hand,
    # "clamp" floors on-hand at zero and flags the ledger divergence
    OVERDRAW_POLICY: str = OVERDRAW_REJECT

    # "skip" drops batch lines with unknown products, "fail" aborts the request
    UNKNOWN_PRODUCT_POLICY: str = UNKNOWN_PRODUCT_SKIP

    # Reject decisions must carry a reason
    REJECTION_REASON_REQUIRED: bool = False

    # Prefixes for generated batch references (e.g. TR-1718000000000)
    TRANSFER_REFERENCE_PREFIX: str = "TR"
    ADJUSTMENT_REFERENCE_PREFIX: str = "ADJ"


def get_stockflow_settings() -> StockflowSettings:
    """Load settings from Django settings."""
    user_settings: dict[str, Any] = getattr(settings, "STOCKFLOW", {})
    return StockflowSettings(**{
        k: v for k, v in user_settings.items()
        if k in StockflowSettings.__dataclass_fields__
    })


class _LazySettings:
    """Lazy proxy that re-reads settings on every attribute access."""

    def __getattr__(self, name):
        return getattr(get_stockflow_settings(), name)


stockflow_settings = _LazySettings()
