"""
Tests for the approve/reject HTTP endpoints.
"""

import pytest
from django.urls import reverse
from rest_framework import status
from rest_framework.test import APIClient

from stockflow.models import RequestStatus, StockMovementRequest


pytestmark = pytest.mark.django_db


def _url(name, request_id):
    return reverse(f'stockflow:request-{name}', kwargs={'request_id': request_id})


@pytest.fixture
def client_for():
    """API client authenticated as the given user (or anonymous)."""

    def _client(user=None):
        client = APIClient()
        if user is not None:
            client.force_authenticate(user=user)
        return client

    return _client


@pytest.fixture
def movement(submit):
    return submit('movement', {
        'productId': 'P-1', 'warehouseId': 'W-1', 'type': 'in', 'quantity': 50,
    })


class TestApproveEndpoint:
    """Tests for POST requests/<id>/approve/."""

    def test_approve(self, client_for, approver, movement):
        """Success returns the decision result."""
        response = client_for(approver).post(_url('approve', movement.pk), {'notes': 'ok'}, format='json')

        assert response.status_code == status.HTTP_200_OK
        assert response.data['requestId'] == movement.pk
        assert response.data['status'] == 'approved'
        assert len(response.data['ledgerEntryIds']) == 1
        assert response.data['positionUpdates'][0]['after'] == 50
        assert response.data['skippedLines'] == []

    def test_anonymous(self, client_for, movement):
        """Anonymous callers get 401."""
        response = client_for().post(_url('approve', movement.pk), {}, format='json')

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.data['errorKind'] == 'Unauthorized'
        assert response.data['code'] == 'UNAUTHENTICATED'

    def test_forbidden(self, client_for, operator, movement):
        """Non-approvers get 403."""
        response = client_for(operator).post(_url('approve', movement.pk), {}, format='json')

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.data['errorKind'] == 'Unauthorized'

    def test_not_found(self, client_for, approver):
        response = client_for(approver).post(_url('approve', 987654), {}, format='json')

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.data['errorKind'] == 'NotFound'

    def test_conflict(self, client_for, approver, movement):
        """A second approval gets 409 Conflict."""
        client = client_for(approver)
        client.post(_url('approve', movement.pk), {}, format='json')

        response = client.post(_url('approve', movement.pk), {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['errorKind'] == 'Conflict'
        assert response.data['message'] == 'Request is already approved'

    def test_insufficient_stock(self, client_for, approver, submit):
        """InsufficientStock is 409 and carries the shortfall."""
        request = submit('transfer', {
            'fromWarehouseId': 'W-1', 'toWarehouseId': 'W-2',
            'lines': [{'productId': 'P-1', 'quantity': 3}],
        })

        response = client_for(approver).post(_url('approve', request.pk), {}, format='json')

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.data['errorKind'] == 'InsufficientStock'
        assert response.data['data']['shortfall'] == 3

    def test_invalid_json(self, client_for, approver, movement):
        """An unparsable body is 400 InvalidRequest."""
        response = client_for(approver).post(
            _url('approve', movement.pk), '{not json', content_type='application/json',
        )

        assert response.status_code == status.HTTP_400_BAD_REQUEST
        assert response.data['errorKind'] == 'InvalidRequest'
        assert StockMovementRequest.objects.get(pk=movement.pk).status == RequestStatus.PENDING

    def test_get_not_allowed(self, client_for, approver, movement):
        response = client_for(approver).get(_url('approve', movement.pk))

        assert response.status_code == status.HTTP_405_METHOD_NOT_ALLOWED


class TestRejectEndpoint:
    """Tests for POST requests/<id>/reject/."""

    def test_reject(self, client_for, approver, movement):
        """The rejection reason is stored on the request."""
        response = client_for(approver).post(
            _url('reject', movement.pk),
            {'rejectionReason': 'Wrong quantity', 'notes': 'Call supplier'},
            format='json',
        )

        assert response.status_code == status.HTTP_200_OK
        assert response.data['status'] == 'rejected'
        assert response.data['ledgerEntryIds'] == []
        movement.refresh_from_db()
        assert movement.rejection_reason == 'Wrong quantity'
        assert movement.notes == 'Call supplier'
