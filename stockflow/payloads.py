"""
Request payloads — one typed variant per request type.

Payloads are built only by services.validation.validate_payload, which
normalizes every accepted external shape into these dataclasses.
as_dict() gives the canonical form stored in StockMovementRequest.payload.
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal

from stockflow.models.enums import MovementType, RequestType


def _cost(value: Decimal | None) -> str | None:
    return None if value is None else str(value)


@dataclass(frozen=True)
class MovementPayload:
    """Direct in/out of one product at one warehouse."""

    product_id: str
    warehouse_id: str
    direction: str  # MovementType.IN or MovementType.OUT
    quantity: int
    location_id: str | None = None
    reason: str = ''
    reference: str = ''
    unit_cost: Decimal | None = None

    request_type = RequestType.MOVEMENT

    @property
    def signed_quantity(self) -> int:
        return self.quantity if self.direction == MovementType.IN else -self.quantity

    def as_dict(self) -> dict:
        return {
            'productId': self.product_id,
            'warehouseId': self.warehouse_id,
            'type': str(self.direction),
            'quantity': self.quantity,
            'locationId': self.location_id,
            'reason': self.reason,
            'reference': self.reference,
            'unitCost': _cost(self.unit_cost),
        }


@dataclass(frozen=True)
class TransferLine:
    product_id: str
    quantity: int
    from_location_id: str | None = None
    to_location_id: str | None = None
    reason: str = ''
    unit_cost: Decimal | None = None

    def as_dict(self) -> dict:
        return {
            'productId': self.product_id,
            'quantity': self.quantity,
            'fromLocationId': self.from_location_id,
            'toLocationId': self.to_location_id,
            'reason': self.reason,
            'unitCost': _cost(self.unit_cost),
        }


@dataclass(frozen=True)
class TransferPayload:
    """Ordered lines moved from one warehouse to another."""

    from_warehouse_id: str
    to_warehouse_id: str
    lines: tuple[TransferLine, ...]
    reference: str = ''

    request_type = RequestType.TRANSFER

    def as_dict(self) -> dict:
        return {
            'fromWarehouseId': self.from_warehouse_id,
            'toWarehouseId': self.to_warehouse_id,
            'lines': [line.as_dict() for line in self.lines],
            'reference': self.reference,
        }


@dataclass(frozen=True)
class AdjustmentLine:
    product_id: str
    expected_quantity: int
    actual_quantity: int
    location_id: str | None = None
    notes: str = ''

    @property
    def difference(self) -> int:
        return self.actual_quantity - self.expected_quantity

    def as_dict(self) -> dict:
        return {
            'productId': self.product_id,
            'expectedQuantity': self.expected_quantity,
            'actualQuantity': self.actual_quantity,
            'locationId': self.location_id,
            'notes': self.notes,
        }


@dataclass(frozen=True)
class AdjustmentPayload:
    """Counted lines at one warehouse (expected vs actual)."""

    warehouse_id: str
    lines: tuple[AdjustmentLine, ...]
    reason: str = ''
    reference: str = ''

    request_type = RequestType.ADJUSTMENT

    def as_dict(self) -> dict:
        return {
            'warehouseId': self.warehouse_id,
            'lines': [line.as_dict() for line in self.lines],
            'reason': self.reason,
            'reference': self.reference,
        }


Payload = MovementPayload | TransferPayload | AdjustmentPayload
