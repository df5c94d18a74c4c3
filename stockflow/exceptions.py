"""
Exceptions for Stockflow.

All errors are StockError with a structured code for programmatic handling.
Each code belongs to one error kind, which is what API callers branch on.
"""

from decimal import Decimal
from typing import Any


UNAUTHORIZED = 'Unauthorized'
NOT_FOUND = 'NotFound'
CONFLICT = 'Conflict'
INVALID_REQUEST = 'InvalidRequest'
INSUFFICIENT_STOCK = 'InsufficientStock'
INVALID_STATE = 'InvalidState'


class StockError(Exception):
    """
    Structured exception for stock request operations.

    Usage:
        try:
            stock.decide(request_id, user, 'approve')
        except StockError as e:
            if e.kind == 'InsufficientStock':
                print(f"Short by {e.data['shortfall']} units")

    Attributes:
        code: Error code for programmatic handling
        message: Human-readable message
        data: Additional context data
    """

    _default_messages = {
        'UNAUTHENTICATED': 'Authentication required',
        'PRINCIPAL_NOT_FOUND': 'User not found',
        'FORBIDDEN': 'Insufficient permissions',
        'REQUEST_NOT_FOUND': 'Request not found',
        'PRODUCT_NOT_FOUND': 'Product not found',
        'WAREHOUSE_NOT_FOUND': 'Warehouse not found',
        'UNKNOWN_PRODUCT': 'Line references an unknown product',
        'CONFLICT': 'Request is not in the expected status',
        'INVALID_REQUEST': 'Invalid request data',
        'INSUFFICIENT_STOCK': 'Insufficient stock in source warehouse',
        'INVALID_STATE': 'Operation not valid for current stock state',
        'POSITION_NOT_FOUND': 'No stock position to decrement',
        'NEGATIVE_ON_HAND': 'Movement would leave a negative on-hand quantity',
        'QUANTITY_OUT_OF_RANGE': 'Quantity exceeds the supported range',
    }

    _kinds = {
        'UNAUTHENTICATED': UNAUTHORIZED,
        'PRINCIPAL_NOT_FOUND': UNAUTHORIZED,
        'FORBIDDEN': UNAUTHORIZED,
        'REQUEST_NOT_FOUND': NOT_FOUND,
        'PRODUCT_NOT_FOUND': NOT_FOUND,
        'WAREHOUSE_NOT_FOUND': NOT_FOUND,
        'UNKNOWN_PRODUCT': NOT_FOUND,
        'CONFLICT': CONFLICT,
        'INVALID_REQUEST': INVALID_REQUEST,
        'INSUFFICIENT_STOCK': INSUFFICIENT_STOCK,
        'INVALID_STATE': INVALID_STATE,
        'POSITION_NOT_FOUND': INVALID_STATE,
        'NEGATIVE_ON_HAND': INVALID_STATE,
        'QUANTITY_OUT_OF_RANGE': INVALID_STATE,
    }

    def __init__(self, code: str, message: str | None = None, **data):
        self.code = code
        self.message = message or self._default_messages.get(code, code)
        self.data = data
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        """Error kind exposed to API callers (Unauthorized, NotFound, ...)."""
        return self._kinds.get(self.code, INVALID_REQUEST)

    def as_dict(self) -> dict[str, Any]:
        """Serialize to dict (useful for APIs)."""
        return {
            'errorKind': self.kind,
            'code': self.code,
            'message': self.message,
            'data': {
                k: str(v) if isinstance(v, Decimal) else v
                for k, v in self.data.items()
            }
        }

    def __repr__(self) -> str:
        return f"StockError({self.code!r}, {self.message!r})"
