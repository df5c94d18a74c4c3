"""
Tests for the audit_stock_positions management command and ledger queries.
"""

from io import StringIO

import pytest
from django.core.management import call_command
from django.core.management.base import CommandError

from stockflow import stock


pytestmark = pytest.mark.django_db


def _mismatched_count(submit, approver, product_id='P-1', warehouse_id='W-1'):
    """Adjust from a stale expected count, leaving the position off its ledger."""
    request = submit('adjustment', {
        'warehouseId': warehouse_id,
        'lines': [{'productId': product_id, 'expectedQuantity': 0, 'actualQuantity': 3}],
    })
    stock.decide(request.pk, approver, 'approve')


class TestAuditCommand:
    """Tests for audit_stock_positions."""

    def test_clean_ledger(self, receive):
        """Consistent positions report success."""
        receive('P-1', 'W-1', 10)
        out = StringIO()

        call_command('audit_stock_positions', stdout=out)

        assert 'All positions match the ledger.' in out.getvalue()

    def test_lists_divergent_positions(self, receive, submit, approver):
        """Divergent positions are listed with both quantities."""
        receive('P-1', 'W-1', 10)
        _mismatched_count(submit, approver)
        out = StringIO()

        call_command('audit_stock_positions', stdout=out)

        output = out.getvalue()
        assert 'P-1 @ W-1: on hand 3, ledger 13, difference 10' in output
        assert '1 divergent position(s)' in output

    def test_filters(self, receive, submit, approver):
        """--warehouse limits the audit."""
        receive('P-1', 'W-1', 10)
        _mismatched_count(submit, approver)
        out = StringIO()

        call_command('audit_stock_positions', '--warehouse', 'W-2', stdout=out)

        assert 'All positions match the ledger.' in out.getvalue()

    def test_fail_on_divergence(self, receive, submit, approver):
        """--fail-on-divergence exits with an error."""
        receive('P-1', 'W-1', 10)
        _mismatched_count(submit, approver)

        with pytest.raises(CommandError):
            call_command('audit_stock_positions', '--fail-on-divergence', stdout=StringIO())


class TestQueries:
    """Tests for read-only stock queries."""

    def test_position_and_on_hand(self, receive):
        receive('P-1', 'W-1', 10)
        receive('P-1', 'W-2', 4)

        assert stock.position('P-1', 'W-1').quantity_on_hand == 10
        assert stock.position('P-2', 'W-1') is None
        assert stock.on_hand('P-1') == 14
        assert stock.on_hand('P-1', 'W-2') == 4
        assert stock.on_hand('P-9') == 0

    def test_ledger_filters(self, receive):
        """Ledger entries filter by product, warehouse and request."""
        first = receive('P-1', 'W-1', 10)
        receive('P-2', 'W-1', 5)

        assert stock.ledger(warehouse_id='W-1').count() == 2
        assert stock.ledger(product_id='P-2').get().quantity == 5
        assert stock.ledger(request_id=first.request_id).get().product_id == 'P-1'

    def test_divergent_positions_annotated(self, receive, submit, approver):
        receive('P-1', 'W-1', 10)
        _mismatched_count(submit, approver)

        position = stock.divergent_positions(product_id='P-1').get()

        assert position.ledger_quantity == 13
        assert position.quantity_on_hand == 3
