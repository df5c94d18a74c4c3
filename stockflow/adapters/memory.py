"""
In-memory Catalog — dict-backed adapter for development and testing.

Usage in settings.py:
    STOCKFLOW = {
        "CATALOG": "stockflow.adapters.memory.InMemoryCatalog",
    }

    from stockflow.adapters import get_catalog
    get_catalog().add_product("P-001", "Wet blue hide")
    get_catalog().add_warehouse("W-01", "Main warehouse")

Contents live in the process only. Not for production.
"""

from __future__ import annotations

import threading

from stockflow.protocols.catalog import ProductInfo, WarehouseInfo


class InMemoryCatalog:
    """Catalog whose products and warehouses are registered at runtime."""

    def __init__(self):
        self._lock = threading.Lock()
        self._products: dict[str, ProductInfo] = {}
        self._warehouses: dict[str, WarehouseInfo] = {}

    def add_product(self, product_id: str, name: str | None = None, unit: str = "un") -> ProductInfo:
        info = ProductInfo(id=str(product_id), name=name or str(product_id), unit=unit)
        with self._lock:
            self._products[info.id] = info
        return info

    def add_warehouse(self, warehouse_id: str, name: str | None = None,
                      code: str | None = None) -> WarehouseInfo:
        info = WarehouseInfo(id=str(warehouse_id), name=name or str(warehouse_id), code=code)
        with self._lock:
            self._warehouses[info.id] = info
        return info

    def clear(self) -> None:
        with self._lock:
            self._products.clear()
            self._warehouses.clear()

    def get_product(self, product_id: str) -> ProductInfo | None:
        return self._products.get(str(product_id))

    def get_warehouse(self, warehouse_id: str) -> WarehouseInfo | None:
        return self._warehouses.get(str(warehouse_id))
