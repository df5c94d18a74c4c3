"""
Stock Service — The single public interface for stock request operations.

Usage:
    from stockflow import stock, StockError

    req = stock.submit(operator, 'movement', {
        'productId': 'P-001', 'warehouseId': 'W-01', 'type': 'in', 'quantity': 10,
    })
    result = stock.decide(req.pk, manager, 'approve')
    stock.on_hand('P-001', 'W-01')  # 10
"""

from stockflow.results import DecisionResult
from stockflow.services.approvals import StockApprovals
from stockflow.services.queries import StockQueries
from stockflow.services.requests import StockRequests


class Stock:
    """
    Single interface for all stock request operations.

    Parameter convention: (request_id, actor, ...) for decisions,
    (actor, request_type, payload) for submissions.

    IMPORTANT: decide() runs in one atomic transaction with row locks on
    the request and on every position it touches. See
    StockApprovals.decide.
    """

    # ══════════════════════════════════════════════════════════════
    # REQUESTS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def submit(cls, requested_by, request_type: str, payload, notes: str = ''):
        """Validate and store a pending request. See StockRequests.submit."""
        return StockRequests.submit(requested_by, request_type, payload, notes)

    @classmethod
    def get_request(cls, request_id):
        return StockRequests.get(request_id)

    @classmethod
    def pending(cls):
        return StockRequests.pending()

    # ══════════════════════════════════════════════════════════════
    # DECISIONS
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def decide(cls, request_id, decided_by, action: str, notes: str | None = None,
               rejection_reason: str | None = None) -> DecisionResult:
        """
        Approve or reject a pending request.

        Args:
            request_id: Request primary key
            decided_by: Acting user (object, pk or username)
            action: 'approve' or 'reject'
            notes: Optional decision notes
            rejection_reason: Reason stored on rejection

        Returns:
            DecisionResult

        Raises:
            StockError: Unauthorized, NotFound, Conflict, InvalidRequest,
                InsufficientStock or InvalidState kinds
        """
        return StockApprovals.decide(
            request_id, decided_by, action,
            notes=notes,
            rejection_reason=rejection_reason,
        )

    @classmethod
    def approve(cls, request_id, decided_by, notes: str | None = None) -> DecisionResult:
        return StockApprovals.approve(request_id, decided_by, notes=notes)

    @classmethod
    def reject(cls, request_id, decided_by, rejection_reason: str | None = None,
               notes: str | None = None) -> DecisionResult:
        return StockApprovals.reject(
            request_id, decided_by,
            rejection_reason=rejection_reason,
            notes=notes,
        )

    # ══════════════════════════════════════════════════════════════
    # QUERIES
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def position(cls, product_id, warehouse_id):
        return StockQueries.position(product_id, warehouse_id)

    @classmethod
    def on_hand(cls, product_id, warehouse_id=None) -> int:
        return StockQueries.on_hand(product_id, warehouse_id)

    @classmethod
    def ledger(cls, product_id=None, warehouse_id=None, reference: str | None = None,
               request_id=None):
        return StockQueries.ledger(product_id, warehouse_id, reference, request_id)

    @classmethod
    def divergent_positions(cls, product_id=None, warehouse_id=None):
        return StockQueries.divergent_positions(product_id, warehouse_id)
