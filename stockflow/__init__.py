"""
Stockflow — stock-movement approval and execution engine.

Pending requests (movement, transfer, adjustment) are approved by an
authorized role and turned into ledger entries and position updates in
a single transaction.

Usage:
    from stockflow import stock, StockError

    req = stock.submit('operator', 'movement', {
        'productId': 'P-1', 'warehouseId': 'W-1', 'type': 'in', 'quantity': 50,
    })
    result = stock.decide(req.pk, admin_user, 'approve')
    result.ledger_entry_ids  # [1]
"""


def __getattr__(name):
    """Lazy import to avoid circular imports during app loading."""
    if name == 'stock':
        from stockflow.service import Stock
        return Stock
    elif name == 'StockError':
        from stockflow.exceptions import StockError
        return StockError
    elif name == 'StockMovementRequest':
        from stockflow.models.request import StockMovementRequest
        return StockMovementRequest
    elif name == 'StockMovement':
        from stockflow.models.movement import StockMovement
        return StockMovement
    elif name == 'StockPosition':
        from stockflow.models.position import StockPosition
        return StockPosition
    elif name == 'RequestType':
        from stockflow.models.enums import RequestType
        return RequestType
    elif name == 'RequestStatus':
        from stockflow.models.enums import RequestStatus
        return RequestStatus
    elif name == 'MovementType':
        from stockflow.models.enums import MovementType
        return MovementType
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = [
    'stock',
    'StockError',
    'StockMovementRequest',
    'StockMovement',
    'StockPosition',
    'RequestType',
    'RequestStatus',
    'MovementType',
]

__version__ = '0.1.0'
