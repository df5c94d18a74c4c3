"""
HTTP endpoints for deciding on stock requests.

    POST <prefix>/requests/<id>/approve/   {"notes": "..."}
    POST <prefix>/requests/<id>/reject/    {"rejectionReason": "...", "notes": "..."}

The acting principal is request.user. Errors are returned as
StockError.as_dict() with a status code chosen by error kind.
"""

from rest_framework import status
from rest_framework.exceptions import ParseError
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from stockflow import exceptions
from stockflow.exceptions import StockError
from stockflow.services.approvals import StockApprovals
from stockflow.services.authorization import APPROVE, REJECT

STATUS_BY_KIND = {
    exceptions.UNAUTHORIZED: status.HTTP_403_FORBIDDEN,
    exceptions.NOT_FOUND: status.HTTP_404_NOT_FOUND,
    exceptions.CONFLICT: status.HTTP_409_CONFLICT,
    exceptions.INVALID_REQUEST: status.HTTP_400_BAD_REQUEST,
    exceptions.INSUFFICIENT_STOCK: status.HTTP_409_CONFLICT,
    exceptions.INVALID_STATE: status.HTTP_409_CONFLICT,
}

STATUS_BY_CODE = {
    'UNAUTHENTICATED': status.HTTP_401_UNAUTHORIZED,
    'PRINCIPAL_NOT_FOUND': status.HTTP_404_NOT_FOUND,
}


def status_for(error: StockError) -> int:
    if error.code in STATUS_BY_CODE:
        return STATUS_BY_CODE[error.code]
    return STATUS_BY_KIND.get(error.kind, status.HTTP_400_BAD_REQUEST)


def error_response(error: StockError) -> Response:
    return Response(error.as_dict(), status=status_for(error))


def _optional_text(data, *names):
    for name in names:
        value = data.get(name)
        if value is not None:
            return str(value)
    return None


class DecisionView(APIView):
    """Base view: runs one decision action for the authenticated user."""

    decision = None
    permission_classes = [AllowAny]

    def post(self, request, request_id, *args, **kwargs):
        if not request.user or not request.user.is_authenticated:
            return error_response(StockError('UNAUTHENTICATED'))

        data = request.data if hasattr(request.data, 'get') else {}

        try:
            result = StockApprovals.decide(
                request_id,
                request.user,
                self.decision,
                notes=_optional_text(data, 'notes'),
                rejection_reason=_optional_text(data, 'rejectionReason', 'rejection_reason'),
            )
        except StockError as e:
            return error_response(e)

        return Response(result.as_dict(), status=status.HTTP_200_OK)

    def handle_exception(self, exc):
        if isinstance(exc, ParseError):
            return error_response(StockError('INVALID_REQUEST', "Invalid JSON body"))
        return super().handle_exception(exc)


class ApproveRequestView(DecisionView):
    decision = APPROVE


class RejectRequestView(DecisionView):
    decision = REJECT
