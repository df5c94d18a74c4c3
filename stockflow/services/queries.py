"""
Stock queries — read-only operations.

All methods are classmethod on Stock and use no locking.
"""

import logging

from django.db.models import F, Sum
from django.db.models.functions import Coalesce

from stockflow.models.movement import StockMovement
from stockflow.models.position import StockPosition

logger = logging.getLogger('stockflow')


class StockQueries:
    """Read-only stock query methods."""

    @classmethod
    def position(cls, product_id, warehouse_id) -> StockPosition | None:
        """Position of a product at a warehouse, or None if never stocked."""
        return StockPosition.objects.for_key(str(product_id), str(warehouse_id)).first()

    @classmethod
    def on_hand(cls, product_id, warehouse_id=None) -> int:
        """
        On-hand quantity.

        Args:
            product_id: Product id
            warehouse_id: Specific warehouse (None = all warehouses)
        """
        qs = StockPosition.objects.filter(product_id=str(product_id))
        if warehouse_id is not None:
            qs = qs.filter(warehouse_id=str(warehouse_id))
        return qs.aggregate(
            t=Coalesce(Sum('quantity_on_hand'), 0)
        )['t']

    @classmethod
    def positions(cls, warehouse_id=None, include_empty: bool = False):
        """List positions with filters."""
        if warehouse_id is not None:
            qs = StockPosition.objects.at_warehouse(str(warehouse_id))
        else:
            qs = StockPosition.objects.all()
        if not include_empty:
            qs = qs.exclude(quantity_on_hand=0)
        return qs

    @classmethod
    def ledger(cls, product_id=None, warehouse_id=None, reference: str | None = None,
               request_id=None):
        """Ledger entries, oldest first, with filters."""
        qs = StockMovement.objects.all()
        if product_id is not None:
            qs = qs.filter(product_id=str(product_id))
        if warehouse_id is not None:
            qs = qs.filter(warehouse_id=str(warehouse_id))
        if reference:
            qs = qs.filter(reference=reference)
        if request_id is not None:
            qs = qs.filter(request_id=request_id)
        return qs

    @classmethod
    def ledger_total(cls, product_id, warehouse_id) -> int:
        """Sum of ledger quantities for a (product, warehouse)."""
        return cls.ledger(product_id, warehouse_id).aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    @classmethod
    def divergent_positions(cls, product_id=None, warehouse_id=None):
        """
        Positions whose on-hand differs from their ledger sum.

        Each row is annotated with ledger_quantity. Divergences come from
        clamped decrements and mismatched adjustment counts; every other
        position must be consistent.
        """
        qs = StockPosition.objects.all()
        if product_id is not None:
            qs = qs.filter(product_id=str(product_id))
        if warehouse_id is not None:
            qs = qs.filter(warehouse_id=str(warehouse_id))

        return (
            qs.annotate(ledger_quantity=Coalesce(Sum('movements__quantity'), 0))
            .exclude(ledger_quantity=F('quantity_on_hand'))
            .order_by('product_id', 'warehouse_id')
        )
