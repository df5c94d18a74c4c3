"""
Catalog Protocol — Interface for product and warehouse master data.

Stockflow defines this protocol, the inventory/catalog system implements it.
Stockflow only reads from it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol, runtime_checkable


@dataclass(frozen=True)
class ProductInfo:
    """Basic product information."""

    id: str
    name: str
    unit: str = "un"  # "un", "kg", "m2", etc.


@dataclass(frozen=True)
class WarehouseInfo:
    """Basic warehouse information."""

    id: str
    name: str
    code: str | None = None


@runtime_checkable
class Catalog(Protocol):
    """
    Protocol for master-data lookups.

    Implementations should return None for unknown ids rather than raise.
    """

    def get_product(self, product_id: str) -> ProductInfo | None:
        """
        Look up a product.

        Args:
            product_id: Opaque product identifier

        Returns:
            ProductInfo or None if not found
        """
        ...

    def get_warehouse(self, warehouse_id: str) -> WarehouseInfo | None:
        """
        Look up a warehouse.

        Args:
            warehouse_id: Opaque warehouse identifier

        Returns:
            WarehouseInfo or None if not found
        """
        ...
