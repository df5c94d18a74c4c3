"""
StockPosition model — current on-hand quantity per product and warehouse.
"""

import logging

from django.db import models
from django.db.models import Sum
from django.db.models.functions import Coalesce
from django.utils.translation import gettext_lazy as _

logger = logging.getLogger('stockflow')


class StockPositionManager(models.Manager):
    """Manager with helper methods for StockPosition queries."""

    def for_key(self, product_id, warehouse_id):
        """Filter the (unique) position of a product at a warehouse."""
        return self.filter(product_id=product_id, warehouse_id=warehouse_id)

    def at_warehouse(self, warehouse_id):
        """Filter by warehouse."""
        return self.filter(warehouse_id=warehouse_id)


class StockPosition(models.Model):
    """
    Current stock of a product at a warehouse.

    Key: (product_id, warehouse_id). location_id is an attribute, one bin
    per warehouse.

    Rules:
    - Materialized projection of StockMovement: sum(quantity) == on hand
    - quantity_available = max(0, on_hand - reserved)
    - Created lazily by MovementExecutor, mutated only by it, never deleted
    """

    product_id = models.CharField(
        max_length=64,
        verbose_name=_('Product'),
    )
    warehouse_id = models.CharField(
        max_length=64,
        verbose_name=_('Warehouse'),
    )
    location_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        verbose_name=_('Location'),
    )

    quantity_on_hand = models.IntegerField(default=0, verbose_name=_('On hand'))
    quantity_available = models.IntegerField(default=0, verbose_name=_('Available'))
    quantity_reserved = models.IntegerField(default=0, verbose_name=_('Reserved'))

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockPositionManager()

    class Meta:
        verbose_name = _('Stock position')
        verbose_name_plural = _('Stock positions')
        ordering = ['product_id', 'warehouse_id']
        constraints = [
            models.UniqueConstraint(
                fields=['product_id', 'warehouse_id'],
                name='unique_position_product_warehouse',
            )
        ]
        indexes = [
            models.Index(fields=['warehouse_id'], name='stockflow_pos_warehouse_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def key(self) -> tuple[str, str]:
        return (self.product_id, self.warehouse_id)

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def apply(self, delta: int, clamp: bool = False) -> int:
        """
        Apply a signed delta to on-hand and recompute available.

        With clamp=True a decrement past zero floors on-hand at zero.
        Does not save.

        Returns:
            Quantity that could not be decremented (0 unless clamped)
        """
        new_quantity = self.quantity_on_hand + delta
        clamped = 0
        if new_quantity < 0 and clamp:
            clamped = -new_quantity
            new_quantity = 0
        self.quantity_on_hand = new_quantity
        self.recompute_available()
        return clamped

    def set_on_hand(self, quantity: int) -> None:
        """Set on-hand directly (adjustments). Does not save."""
        self.quantity_on_hand = quantity
        self.recompute_available()

    def recompute_available(self) -> None:
        self.quantity_available = max(0, self.quantity_on_hand - self.quantity_reserved)

    def ledger_total(self) -> int:
        """Sum of all ledger entries posted against this position."""
        return self.movements.aggregate(
            t=Coalesce(Sum('quantity'), 0)
        )['t']

    def divergence(self) -> int:
        """
        Ledger sum minus on-hand. Zero when the position is consistent.

        Use for integrity audits. Non-zero values come from clamped
        decrements or adjustments whose expected count did not match.
        """
        difference = self.ledger_total() - self.quantity_on_hand
        if difference:
            logger.warning(
                "stock.position.divergent",
                extra={
                    "position_id": self.pk,
                    "product_id": self.product_id,
                    "warehouse_id": self.warehouse_id,
                    "on_hand": self.quantity_on_hand,
                    "difference": difference,
                },
            )
        return difference

    def delete(self, *args, **kwargs):
        """Prevent deletion — positions are never deleted."""
        raise ValueError("Stock positions cannot be deleted.")

    def __str__(self) -> str:
        return f"{self.product_id} @ {self.warehouse_id}: {self.quantity_on_hand}"
