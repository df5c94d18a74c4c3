"""
Stock requests — storage and lifecycle of movement requests.

Status is written only by transition(), as one conditional UPDATE
(compare-and-set). Two deciders racing on the same request cannot both
move it out of pending.
"""

import logging

from django.utils import timezone

from stockflow.adapters import get_catalog
from stockflow.exceptions import StockError
from stockflow.models.enums import RequestStatus
from stockflow.models.request import StockMovementRequest
from stockflow.services.validation import ensure_targets_exist, validate_payload

logger = logging.getLogger('stockflow')

REQUESTER_MAX_LENGTH = 150


def identity_of(actor) -> str:
    """Identity string of a user object, or the value itself."""
    if hasattr(actor, 'get_username'):
        return actor.get_username()
    return '' if actor is None else str(actor)


class StockRequests:
    """Movement request store."""

    @classmethod
    def get(cls, request_id, for_update: bool = False) -> StockMovementRequest:
        """
        Load a request by id.

        Args:
            request_id: Request primary key
            for_update: Lock the row (caller must be inside transaction.atomic())

        Raises:
            StockError('REQUEST_NOT_FOUND')
        """
        qs = StockMovementRequest.objects.all()
        if for_update:
            qs = qs.select_for_update()
        try:
            return qs.get(pk=request_id)
        except (StockMovementRequest.DoesNotExist, ValueError, TypeError):
            raise StockError('REQUEST_NOT_FOUND', request_id=request_id)

    @classmethod
    def transition(cls, request_id, from_status: str, to_status: str, decided_by,
                   notes: str | None = None, rejection_reason: str | None = None) -> StockMovementRequest:
        """
        Move a request from one status to another, atomically.

        Stamps decided_by/decided_at. Notes and rejection reason are
        written only when given.

        Raises:
            StockError('REQUEST_NOT_FOUND'): No such request
            StockError('CONFLICT'): Request is no longer in from_status
        """
        now = timezone.now()
        changes = {
            'status': to_status,
            'decided_by': identity_of(decided_by),
            'decided_at': now,
            'updated_at': now,
        }
        if notes is not None:
            changes['notes'] = notes
        if rejection_reason is not None:
            changes['rejection_reason'] = rejection_reason

        updated = (
            StockMovementRequest.objects
            .filter(pk=request_id, status=from_status)
            .update(**changes)
        )

        if not updated:
            current = (
                StockMovementRequest.objects
                .filter(pk=request_id)
                .values_list('status', flat=True)
                .first()
            )
            if current is None:
                raise StockError('REQUEST_NOT_FOUND', request_id=request_id)
            raise StockError(
                'CONFLICT',
                f"Request is already {current}",
                request_id=request_id,
                status=current,
                expected=from_status,
            )

        logger.debug(
            "stock.request.transitioned",
            extra={"request_id": request_id, "from": from_status, "to": to_status},
        )
        return cls.get(request_id)

    @classmethod
    def submit(cls, requested_by, request_type: str, payload, notes: str = '') -> StockMovementRequest:
        """
        Validate and store a new pending request.

        The payload is checked structurally and its warehouses (and, for
        movements, its product) must resolve in the catalog. It is stored
        in canonical form.

        Raises:
            StockError('INVALID_REQUEST'): Malformed payload or missing requester
            StockError('PRODUCT_NOT_FOUND' | 'WAREHOUSE_NOT_FOUND')
        """
        identity = identity_of(requested_by)
        if not identity:
            raise StockError('INVALID_REQUEST', "Missing requester", field='requestedBy')
        if len(identity) > REQUESTER_MAX_LENGTH:
            raise StockError(
                'INVALID_REQUEST',
                f"Requester cannot exceed {REQUESTER_MAX_LENGTH} characters",
                field='requestedBy',
            )

        parsed = validate_payload(request_type, payload)
        ensure_targets_exist(parsed, get_catalog())

        request = StockMovementRequest.objects.create(
            request_type=request_type,
            payload=parsed.as_dict(),
            requested_by=identity,
            notes=notes or '',
        )

        logger.info(
            "stock.request.submitted",
            extra={
                "request_id": request.pk,
                "request_type": request_type,
                "requested_by": identity,
            },
        )
        return request

    @classmethod
    def pending(cls):
        """Pending requests, newest first."""
        return StockMovementRequest.objects.pending()

    @classmethod
    def for_status(cls, status: str):
        if status not in RequestStatus.values:
            raise StockError('INVALID_REQUEST', f"Unknown status: {status}", status=status)
        return StockMovementRequest.objects.filter(status=status)
