"""
Pytest fixtures for Stockflow tests.
"""

import pytest
from django.contrib.auth import get_user_model

from stockflow import stock
from stockflow.adapters import get_catalog, reset_adapters


User = get_user_model()


@pytest.fixture(autouse=True)
def fresh_adapters():
    """Each test gets its own catalog and directory instances."""
    reset_adapters()
    yield
    reset_adapters()


@pytest.fixture
def catalog():
    """In-memory catalog with two products and two warehouses."""
    catalog = get_catalog()
    catalog.add_product('P-1', 'Wet blue hide')
    catalog.add_product('P-2', 'Crust leather')
    catalog.add_product('P-3', 'Finished leather')
    catalog.add_warehouse('W-1', 'Main warehouse', code='MAIN')
    catalog.add_warehouse('W-2', 'Branch warehouse', code='BR')
    return catalog


@pytest.fixture
def operator(db):
    """Plain user who submits requests."""
    return User.objects.create_user(username='operator', password='testpass123')


@pytest.fixture
def approver(db):
    """Staff user (role admin)."""
    return User.objects.create_user(username='manager', password='testpass123', is_staff=True)


@pytest.fixture
def super_admin(db):
    """Superuser (role super-admin)."""
    return User.objects.create_superuser(username='root', password='testpass123')


@pytest.fixture
def submit(catalog, operator):
    """Submit a pending request as the operator."""

    def _submit(request_type, payload, requested_by=None, notes=''):
        return stock.submit(requested_by or operator, request_type, payload, notes=notes)

    return _submit


@pytest.fixture
def receive(submit, approver):
    """Put stock on hand through an approved 'in' movement."""

    def _receive(product_id, warehouse_id, quantity):
        request = submit('movement', {
            'productId': product_id,
            'warehouseId': warehouse_id,
            'type': 'in',
            'quantity': quantity,
            'reason': 'Opening balance',
        })
        return stock.decide(request.pk, approver, 'approve')

    return _receive
