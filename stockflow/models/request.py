"""
StockMovementRequest model — A proposed stock change awaiting approval.
"""

from django.db import models
from django.utils import timezone
from django.utils.translation import gettext_lazy as _

from stockflow.models.enums import RequestStatus, RequestType


class StockMovementRequestQuerySet(models.QuerySet):

    def pending(self):
        return self.filter(status=RequestStatus.PENDING)

    def decided(self):
        return self.exclude(status=RequestStatus.PENDING)


class StockMovementRequest(models.Model):
    """
    Pending change of stock, decided once by an approver.

    LIFECYCLE:

        ┌─────────┐   approve()   ┌──────────┐
        │ PENDING │ ────────────► │ APPROVED │
        └─────────┘               └──────────┘
             │
             │ reject()           ┌──────────┐
             └──────────────────► │ REJECTED │
                                  └──────────┘

    Rules:
    - Status changes only through StockRequests.transition (compare-and-set)
    - Once decided, payload and status are immutable
    - Never deleted (audit trail)

    The payload is stored in canonical form; parsed_payload() returns the
    typed variant for request_type.
    """

    request_type = models.CharField(
        max_length=20,
        choices=RequestType.choices,
        verbose_name=_('Request type'),
    )
    status = models.CharField(
        max_length=20,
        choices=RequestStatus.choices,
        default=RequestStatus.PENDING,
        db_index=True,
        verbose_name=_('Status'),
    )
    payload = models.JSONField(default=dict, verbose_name=_('Payload'))

    requested_by = models.CharField(max_length=150, verbose_name=_('Requested by'))
    requested_at = models.DateTimeField(default=timezone.now, verbose_name=_('Requested at'))
    decided_by = models.CharField(
        max_length=150,
        blank=True,
        default='',
        verbose_name=_('Decided by'),
        help_text=_('Approver or rejecter'),
    )
    decided_at = models.DateTimeField(null=True, blank=True, verbose_name=_('Decided at'))

    notes = models.TextField(blank=True, default='', verbose_name=_('Notes'))
    rejection_reason = models.TextField(blank=True, default='', verbose_name=_('Rejection reason'))
    updated_at = models.DateTimeField(auto_now=True)

    objects = StockMovementRequestQuerySet.as_manager()

    class Meta:
        verbose_name = _('Stock movement request')
        verbose_name_plural = _('Stock movement requests')
        ordering = ['-requested_at']
        indexes = [
            models.Index(fields=['status', 'request_type'], name='stockflow_req_status_idx'),
        ]

    # ══════════════════════════════════════════════════════════════
    # PROPERTIES
    # ══════════════════════════════════════════════════════════════

    @property
    def is_pending(self) -> bool:
        return self.status == RequestStatus.PENDING

    @property
    def approved_by(self) -> str | None:
        return self.decided_by if self.status == RequestStatus.APPROVED else None

    @property
    def approved_at(self):
        return self.decided_at if self.status == RequestStatus.APPROVED else None

    # ══════════════════════════════════════════════════════════════
    # METHODS
    # ══════════════════════════════════════════════════════════════

    def parsed_payload(self):
        """Typed payload variant (MovementPayload, TransferPayload or AdjustmentPayload)."""
        from stockflow.services.validation import validate_payload
        return validate_payload(self.request_type, self.payload)

    def save(self, *args, **kwargs):
        """Save a pending request. Decided requests are immutable."""
        if self.pk:
            stored = (
                type(self).objects
                .filter(pk=self.pk)
                .values_list('status', flat=True)
                .first()
            )
            if stored is not None and stored != RequestStatus.PENDING:
                raise ValueError(
                    f"Request {self.pk} is {stored} and can no longer be changed."
                )
            if stored is not None and self.status != stored:
                raise ValueError(
                    "Request status changes go through StockRequests.transition()."
                )
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        """Prevent deletion — requests are kept for audit."""
        raise ValueError("Stock movement requests cannot be deleted.")

    def __str__(self) -> str:
        return f"#{self.pk} {self.request_type} [{self.status}]"
