"""
StockMovement model — Immutable ledger of quantity changes.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockflow.models.enums import MovementType


class StockMovement(models.Model):
    """
    Immutable record of one signed quantity change.

    Rules:
    - NEVER update() or delete()
    - Corrections are new entries with inverse quantity
    - Always posted against an existing StockPosition

    Only MovementExecutor creates entries.
    """

    position = models.ForeignKey(
        'stockflow.StockPosition',
        on_delete=models.PROTECT,
        related_name='movements',
        verbose_name=_('Position'),
    )
    product_id = models.CharField(max_length=64, verbose_name=_('Product'))
    warehouse_id = models.CharField(max_length=64, verbose_name=_('Warehouse'))
    location_id = models.CharField(
        max_length=64,
        null=True,
        blank=True,
        verbose_name=_('Location'),
    )

    type = models.CharField(
        max_length=20,
        choices=MovementType.choices,
        verbose_name=_('Type'),
    )
    quantity = models.IntegerField(
        verbose_name=_('Quantity'),
        help_text=_('Positive = increase, negative = decrease'),
    )
    unit_cost = models.DecimalField(
        max_digits=12,
        decimal_places=4,
        null=True,
        blank=True,
        verbose_name=_('Unit cost'),
    )

    reason = models.CharField(max_length=255, blank=True, default='', verbose_name=_('Reason'))
    reference = models.CharField(
        max_length=100,
        blank=True,
        default='',
        db_index=True,
        verbose_name=_('Reference'),
        help_text=_('Groups entries of one operation, e.g. TR-1718000000000'),
    )
    created_by = models.CharField(max_length=150, blank=True, default='', verbose_name=_('Created by'))
    request = models.ForeignKey(
        'stockflow.StockMovementRequest',
        on_delete=models.PROTECT,
        null=True,
        blank=True,
        related_name='movements',
        verbose_name=_('Request'),
    )
    created_at = models.DateTimeField(default=timezone.now, db_index=True, verbose_name=_('Created at'))

    class Meta:
        verbose_name = _('Stock movement')
        verbose_name_plural = _('Stock movements')
        ordering = ['created_at', 'id']
        indexes = [
            models.Index(fields=['product_id', 'warehouse_id'], name='stockflow_mov_key_idx'),
        ]

    def save(self, *args, **kwargs):
        """Insert only — ledger entries are immutable."""
        if self.pk:
            raise ValueError(
                "Stock movements are immutable. "
                "To correct, post a new entry with the inverse quantity."
            )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — ledger entries are immutable."""
        raise ValueError(
            "Stock movements are immutable. "
            "To reverse, post a new entry with the inverse quantity."
        )

    def __str__(self) -> str:
        signal = '+' if self.quantity > 0 else ''
        return f"{signal}{self.quantity} {self.product_id}@{self.warehouse_id} | {self.reason}"
