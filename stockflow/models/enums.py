"""
Enums for Stockflow models.
"""

from django.db import models
from django.utils.translation import gettext_lazy as _


class RequestType(models.TextChoices):
    """
    Shape of a stock movement request.

    MOVEMENT:   Direct in/out of one product at one warehouse.
    TRANSFER:   One or more lines moved from one warehouse to another.
    ADJUSTMENT: One or more lines counted at a warehouse (expected vs actual).
    """
    MOVEMENT = 'movement', _('Movement')
    TRANSFER = 'transfer', _('Transfer')
    ADJUSTMENT = 'adjustment', _('Adjustment')


class RequestStatus(models.TextChoices):
    """Request lifecycle status. APPROVED and REJECTED are terminal."""
    PENDING = 'pending', _('Pending')
    APPROVED = 'approved', _('Approved')
    REJECTED = 'rejected', _('Rejected')


class MovementType(models.TextChoices):
    """Type of a ledger entry."""
    IN = 'in', _('Stock in')
    OUT = 'out', _('Stock out')
    TRANSFER = 'transfer', _('Transfer')
    ADJUSTMENT = 'adjustment', _('Adjustment')
