"""
Noop Catalog — Stub adapter for local development.

This adapter implements the Catalog protocol with trivial defaults:
- Every product and warehouse id exists
- Names are the ids themselves

Usage in settings.py:
    STOCKFLOW = {
        "CATALOG": "stockflow.adapters.noop.NoopCatalog",
    }

WARNING: Do NOT use in production. Unknown-product skipping and
NotFound errors never trigger with this adapter.
"""

from __future__ import annotations

from stockflow.protocols.catalog import ProductInfo, WarehouseInfo


class NoopCatalog:
    """
    No-operation catalog for development.

    Every lookup succeeds with placeholder data, so requests can be
    exercised without a running inventory master-data service.
    """

    def get_product(self, product_id: str) -> ProductInfo | None:
        """
        Look up a product. Always found.

        Args:
            product_id: Product identifier (any string).

        Returns:
            ProductInfo with name=product_id.
        """
        return ProductInfo(id=str(product_id), name=str(product_id))

    def get_warehouse(self, warehouse_id: str) -> WarehouseInfo | None:
        """
        Look up a warehouse. Always found.

        Args:
            warehouse_id: Warehouse identifier (any string).

        Returns:
            WarehouseInfo with name=warehouse_id.
        """
        return WarehouseInfo(id=str(warehouse_id), name=str(warehouse_id))
