"""
Stock approvals — deciding on pending requests.

decide() is the only entry point that changes request status and, for
approvals, the only caller of MovementExecutor.

Order of checks:
    1. action is approve or reject
    2. decider resolves and holds an approver role (before any request read)
    3. request exists (row locked for the rest of the transaction)
    4. request is pending
    5. approve: payload re-validated, executed, status moved to approved
       reject: status moved to rejected

Everything from step 3 on runs in one transaction.atomic() block; a
StockError anywhere inside it leaves no ledger entry, no position change
and the request still pending.
"""

import logging

from django.db import transaction

from stockflow.conf import stockflow_settings
from stockflow.exceptions import StockError
from stockflow.models.enums import RequestStatus
from stockflow.results import DecisionResult
from stockflow.services.authorization import APPROVE, DECISION_ACTIONS, REJECT, require_approver
from stockflow.services.executor import MovementExecutor
from stockflow.services.requests import StockRequests

logger = logging.getLogger('stockflow')


class StockApprovals:
    """Approval orchestrator."""

    @classmethod
    def decide(cls, request_id, decided_by, action: str, notes: str | None = None,
               rejection_reason: str | None = None) -> DecisionResult:
        """
        Approve or reject a pending request.

        Args:
            request_id: Request primary key
            decided_by: Acting user object, pk or username
            action: 'approve' or 'reject'
            notes: Optional decision notes (stored on the request)
            rejection_reason: Reason for a rejection

        Returns:
            DecisionResult

        Raises:
            StockError: Any kind; nothing is written when raised
        """
        action = str(action or '').strip().lower()
        if action not in DECISION_ACTIONS:
            raise StockError(
                'INVALID_REQUEST',
                "Action must be 'approve' or 'reject'",
                action=action,
            )

        principal = require_approver(decided_by, action)

        try:
            with transaction.atomic():
                request = StockRequests.get(request_id, for_update=True)

                if request.status != RequestStatus.PENDING:
                    raise StockError(
                        'CONFLICT',
                        f"Request is already {request.status}",
                        request_id=request.pk,
                        status=request.status,
                    )

                if action == REJECT:
                    result = cls._reject(request, principal, notes, rejection_reason)
                else:
                    result = cls._approve(request, principal, notes)
        except StockError as e:
            logger.warning(
                "stock.request.failed",
                extra={
                    "request_id": request_id,
                    "action": action,
                    "decided_by": principal.identity,
                    "code": e.code,
                    "error_kind": e.kind,
                },
            )
            raise

        return result

    @classmethod
    def approve(cls, request_id, decided_by, notes: str | None = None) -> DecisionResult:
        return cls.decide(request_id, decided_by, APPROVE, notes=notes)

    @classmethod
    def reject(cls, request_id, decided_by, rejection_reason: str | None = None,
               notes: str | None = None) -> DecisionResult:
        return cls.decide(
            request_id, decided_by, REJECT,
            notes=notes,
            rejection_reason=rejection_reason,
        )

    # ══════════════════════════════════════════════════════════════
    # INTERNAL
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _approve(cls, request, principal, notes) -> DecisionResult:
        payload = request.parsed_payload()
        execution = MovementExecutor.execute(request, payload)

        StockRequests.transition(
            request.pk,
            RequestStatus.PENDING,
            RequestStatus.APPROVED,
            principal.identity,
            notes=notes,
        )

        logger.info(
            "stock.request.approved",
            extra={
                "request_id": request.pk,
                "request_type": request.request_type,
                "decided_by": principal.identity,
                "reference": execution.reference,
                "ledger_entries": len(execution.ledger_entry_ids),
                "divergences": len(execution.divergences),
            },
        )
        return DecisionResult.from_execution(request.pk, RequestStatus.APPROVED, execution)

    @classmethod
    def _reject(cls, request, principal, notes, rejection_reason) -> DecisionResult:
        reason = (rejection_reason or '').strip()
        if not reason and stockflow_settings.REJECTION_REASON_REQUIRED:
            raise StockError(
                'INVALID_REQUEST',
                "Rejection reason is required",
                field='rejectionReason',
            )

        StockRequests.transition(
            request.pk,
            RequestStatus.PENDING,
            RequestStatus.REJECTED,
            principal.identity,
            notes=notes,
            rejection_reason=reason or None,
        )

        logger.info(
            "stock.request.rejected",
            extra={
                "request_id": request.pk,
                "request_type": request.request_type,
                "decided_by": principal.identity,
                "rejection_reason": reason,
            },
        )
        return DecisionResult(request_id=request.pk, status=RequestStatus.REJECTED)
