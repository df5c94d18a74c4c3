"""
Stock services — modular organization of stock request operations.

    from stockflow.services import StockApprovals, StockRequests, StockQueries
"""

from stockflow.services.approvals import StockApprovals
from stockflow.services.executor import MovementExecutor
from stockflow.services.queries import StockQueries
from stockflow.services.requests import StockRequests

__all__ = [
    'StockApprovals',
    'MovementExecutor',
    'StockQueries',
    'StockRequests',
]
