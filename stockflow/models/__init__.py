"""
Stockflow Models.

Core models for stock request approval:
- StockMovementRequest: Pending/approved/rejected change of stock
- StockMovement: Immutable ledger of quantity changes
- StockPosition: Current on-hand per product and warehouse
"""

from stockflow.models.enums import MovementType, RequestStatus, RequestType
from stockflow.models.movement import StockMovement
from stockflow.models.position import StockPosition
from stockflow.models.request import StockMovementRequest

__all__ = [
    'RequestType',
    'RequestStatus',
    'MovementType',
    'StockMovementRequest',
    'StockMovement',
    'StockPosition',
]
