"""
Stockflow Protocols.

Defines interfaces for external system integration.
"""

from stockflow.protocols.catalog import (
    Catalog,
    ProductInfo,
    WarehouseInfo,
)
from stockflow.protocols.principals import (
    Principal,
    PrincipalDirectory,
)

__all__ = [
    "Catalog",
    "ProductInfo",
    "WarehouseInfo",
    "Principal",
    "PrincipalDirectory",
]
