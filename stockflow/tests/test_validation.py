"""
Tests for payload validation and line normalization.
"""

from decimal import Decimal

import pytest

from stockflow import StockError
from stockflow.models.enums import MovementType
from stockflow.payloads import AdjustmentPayload, MovementPayload, TransferPayload
from stockflow.results import SKIP_NO_CHANGE, SKIP_UNKNOWN_PRODUCT
from stockflow.services.validation import (
    MAX_QUANTITY,
    ensure_targets_exist,
    normalize_lines,
    resolve_lines,
    validate_payload,
)


def _transfer(lines):
    return {'fromWarehouseId': 'W-1', 'toWarehouseId': 'W-2', 'lines': lines}


class TestMovementPayload:
    """Tests for movement payloads."""

    def test_valid_in_movement(self):
        """All fields map onto MovementPayload."""
        payload = validate_payload('movement', {
            'productId': 'P-1',
            'warehouseId': 'W-1',
            'type': 'in',
            'quantity': 50,
            'locationId': 'A-01',
            'unitCost': '12.50',
        })

        assert isinstance(payload, MovementPayload)
        assert payload.direction == MovementType.IN
        assert payload.signed_quantity == 50
        assert payload.location_id == 'A-01'
        assert payload.unit_cost == Decimal('12.50')

    def test_out_is_negative(self):
        """'out' movements post a negative quantity."""
        payload = validate_payload('movement', {
            'productId': 'P-1', 'warehouseId': 'W-1', 'direction': 'OUT', 'quantity': '7',
        })

        assert payload.direction == MovementType.OUT
        assert payload.signed_quantity == -7

    def test_numeric_ids_become_strings(self):
        """Integer ids are accepted and stored as strings."""
        payload = validate_payload('movement', {
            'productId': 12, 'warehouseId': 3, 'type': 'in', 'quantity': 1,
        })

        assert payload.product_id == '12'
        assert payload.warehouse_id == '3'

    @pytest.mark.parametrize('quantity', [0, -5, 1.5, 'abc', True])
    def test_invalid_quantity(self, quantity):
        """Quantity must be a positive integer."""
        with pytest.raises(StockError) as exc:
            validate_payload('movement', {
                'productId': 'P-1', 'warehouseId': 'W-1', 'type': 'in', 'quantity': quantity,
            })

        assert exc.value.code == 'INVALID_REQUEST'
        assert exc.value.kind == 'InvalidRequest'

    def test_unknown_direction(self):
        """Only 'in' and 'out' are direct movements."""
        with pytest.raises(StockError) as exc:
            validate_payload('movement', {
                'productId': 'P-1', 'warehouseId': 'W-1', 'type': 'transfer', 'quantity': 1,
            })

        assert exc.value.data['field'] == 'type'

    def test_missing_product(self):
        """productId is required."""
        with pytest.raises(StockError) as exc:
            validate_payload('movement', {'warehouseId': 'W-1', 'type': 'in', 'quantity': 1})

        assert exc.value.data['field'] == 'productId'

    def test_canonical_form(self):
        """as_dict() round-trips through validation unchanged."""
        payload = validate_payload('movement', {
            'product_id': 'P-1', 'warehouse_id': 'W-1', 'type': 'in', 'quantity': 3,
            'unit_cost': 2,
        })

        assert validate_payload('movement', payload.as_dict()) == payload


class TestLineNormalization:
    """Tests for normalize_lines()."""

    def test_native_list(self):
        """A list of objects is kept in order."""
        lines = normalize_lines([{'productId': 'A'}, {'productId': 'B'}], 'lines')

        assert [line['productId'] for line in lines] == ['A', 'B']

    def test_json_string(self):
        """A JSON string of a list is parsed."""
        lines = normalize_lines('[{"productId": "A"}, {"productId": "B"}]', 'lines')

        assert len(lines) == 2

    def test_single_object(self):
        """A single line object becomes a one-line list."""
        assert normalize_lines({'productId': 'A'}, 'lines') == [{'productId': 'A'}]

    def test_json_string_of_single_object(self):
        """A JSON string of one object also becomes a one-line list."""
        assert normalize_lines('{"productId": "A"}', 'lines') == [{'productId': 'A'}]

    @pytest.mark.parametrize('value', ['not json', '[1, 2]', '42', [], 7, None])
    def test_rejects_other_shapes(self, value):
        """Unparsable strings, non-object lines and empty lists are invalid."""
        with pytest.raises(StockError) as exc:
            normalize_lines(value, 'lines')

        assert exc.value.code == 'INVALID_REQUEST'


class TestTransferPayload:
    """Tests for transfer payloads."""

    def test_all_line_shapes_normalize_alike(self):
        """List, JSON string and single object give the same lines."""
        line = {'productId': 'P-1', 'quantity': 10}

        as_list = validate_payload('transfer', _transfer([line]))
        as_string = validate_payload('transfer', _transfer('[{"productId": "P-1", "quantity": 10}]'))
        as_object = validate_payload('transfer', _transfer(line))

        assert isinstance(as_list, TransferPayload)
        assert as_list.lines == as_string.lines == as_object.lines

    def test_transfer_lines_alias(self):
        """Lines may come under 'transferLines'."""
        payload = validate_payload('transfer', {
            'fromWarehouseId': 'W-1',
            'toWarehouseId': 'W-2',
            'transferLines': [{'productId': 'P-1', 'quantity': 1}],
        })

        assert len(payload.lines) == 1

    def test_same_warehouse(self):
        """Source and destination must differ."""
        with pytest.raises(StockError) as exc:
            validate_payload('transfer', {
                'fromWarehouseId': 'W-1', 'toWarehouseId': 'W-1',
                'lines': [{'productId': 'P-1', 'quantity': 1}],
            })

        assert exc.value.code == 'INVALID_REQUEST'

    def test_line_needs_positive_quantity(self):
        """Every line reports its index on error."""
        with pytest.raises(StockError) as exc:
            validate_payload('transfer', _transfer([
                {'productId': 'P-1', 'quantity': 1},
                {'productId': 'P-2', 'quantity': 0},
            ]))

        assert exc.value.data['line'] == 1


class TestAdjustmentPayload:
    """Tests for adjustment payloads."""

    def test_valid_adjustment(self):
        """Difference is actual - expected."""
        payload = validate_payload('adjustment', {
            'warehouseId': 'W-1',
            'reason': 'Cycle count',
            'adjustmentLines': '[{"productId": "P-1", "expectedQuantity": 100, "actualQuantity": 92}]',
        })

        assert isinstance(payload, AdjustmentPayload)
        assert payload.lines[0].difference == -8

    def test_negative_count_rejected(self):
        """Counted quantities cannot be negative."""
        with pytest.raises(StockError) as exc:
            validate_payload('adjustment', {
                'warehouseId': 'W-1',
                'lines': [{'productId': 'P-1', 'expectedQuantity': 1, 'actualQuantity': -1}],
            })

        assert exc.value.data['field'] == 'actualQuantity'

    def test_empty_lines_rejected(self):
        """An adjustment needs at least one line."""
        with pytest.raises(StockError):
            validate_payload('adjustment', {'warehouseId': 'W-1', 'lines': []})


class TestRequestType:
    """Tests for request type and payload envelope."""

    def test_unknown_type(self):
        """Unknown request types are invalid."""
        with pytest.raises(StockError) as exc:
            validate_payload('return', {})

        assert exc.value.code == 'INVALID_REQUEST'

    def test_payload_as_json_string(self):
        """The whole payload may arrive as a JSON string."""
        payload = validate_payload(
            'movement',
            '{"productId": "P-1", "warehouseId": "W-1", "type": "in", "quantity": 2}',
        )

        assert payload.quantity == 2

    def test_payload_must_be_object(self):
        """A list is not a payload."""
        with pytest.raises(StockError):
            validate_payload('movement', '[1, 2]')


def _movement(**fields):
    return {'productId': 'P-1', 'warehouseId': 'W-1', 'type': 'in', 'quantity': 1, **fields}


class TestFieldLimits:
    """Values that would not fit the ledger columns are invalid up front."""

    @pytest.mark.parametrize('quantity', ['1e30', 10 ** 30, MAX_QUANTITY + 1, str(MAX_QUANTITY + 1)])
    def test_quantity_too_large(self, quantity):
        with pytest.raises(StockError) as exc:
            validate_payload('movement', _movement(quantity=quantity))

        assert exc.value.code == 'INVALID_REQUEST'
        assert exc.value.data['field'] == 'quantity'
        assert exc.value.data['maximum'] == MAX_QUANTITY

    def test_largest_quantity_accepted(self):
        payload = validate_payload('movement', _movement(quantity=MAX_QUANTITY))

        assert payload.quantity == MAX_QUANTITY

    def test_line_counts_bounded(self):
        """Adjustment counts share the quantity limit."""
        with pytest.raises(StockError) as exc:
            validate_payload('adjustment', {
                'warehouseId': 'W-1',
                'lines': [{'productId': 'P-1', 'expectedQuantity': 0, 'actualQuantity': '1e12'}],
            })

        assert exc.value.data['field'] == 'actualQuantity'
        assert exc.value.data['line'] == 0

    @pytest.mark.parametrize('field', ['productId', 'warehouseId', 'locationId'])
    def test_identifier_too_long(self, field):
        with pytest.raises(StockError) as exc:
            validate_payload('movement', _movement(**{field: 'X' * 65}))

        assert exc.value.code == 'INVALID_REQUEST'
        assert exc.value.data['field'] == field

    def test_transfer_line_identifier_too_long(self):
        with pytest.raises(StockError) as exc:
            validate_payload('transfer', _transfer([{'productId': 'P' * 65, 'quantity': 1}]))

        assert exc.value.data['field'] == 'productId'
        assert exc.value.data['line'] == 0

    def test_reference_too_long(self):
        with pytest.raises(StockError) as exc:
            validate_payload('movement', _movement(reference='R' * 101))

        assert exc.value.data['field'] == 'reference'

    def test_reason_too_long(self):
        with pytest.raises(StockError) as exc:
            validate_payload('transfer', _transfer([
                {'productId': 'P-1', 'quantity': 1, 'reason': 'r' * 256},
            ]))

        assert exc.value.data['field'] == 'reason'

    def test_adjustment_reason_and_notes_fit_together(self):
        """Line notes are appended to the reason, so both must fit one entry."""
        lines = [{'productId': 'P-1', 'expectedQuantity': 1, 'actualQuantity': 2, 'notes': 'n' * 200}]

        with pytest.raises(StockError) as exc:
            validate_payload('adjustment', {'warehouseId': 'W-1', 'reason': 'r' * 60, 'lines': lines})

        assert exc.value.data['field'] == 'notes'
        assert validate_payload('adjustment', {'warehouseId': 'W-1', 'reason': 'r' * 52, 'lines': lines})

    def test_unit_cost_too_large(self):
        with pytest.raises(StockError) as exc:
            validate_payload('movement', _movement(unitCost='100000000'))

        assert exc.value.data['field'] == 'unitCost'


class TestCatalogChecks:
    """Tests for ensure_targets_exist() and resolve_lines()."""

    def test_unknown_movement_product(self, catalog):
        """A movement's product must resolve."""
        payload = validate_payload('movement', {
            'productId': 'NOPE', 'warehouseId': 'W-1', 'type': 'in', 'quantity': 1,
        })

        with pytest.raises(StockError) as exc:
            ensure_targets_exist(payload, catalog)

        assert exc.value.code == 'PRODUCT_NOT_FOUND'
        assert exc.value.kind == 'NotFound'

    def test_unknown_warehouse(self, catalog):
        """Transfer warehouses must resolve."""
        payload = validate_payload('transfer', {
            'fromWarehouseId': 'W-1', 'toWarehouseId': 'W-9',
            'lines': [{'productId': 'P-1', 'quantity': 1}],
        })

        with pytest.raises(StockError) as exc:
            ensure_targets_exist(payload, catalog)

        assert exc.value.code == 'WAREHOUSE_NOT_FOUND'
        assert exc.value.data['warehouse_id'] == 'W-9'

    def test_unknown_lines_skipped(self, catalog):
        """Unknown products are skipped and reported by index."""
        payload = validate_payload('adjustment', {
            'warehouseId': 'W-1',
            'lines': [
                {'productId': 'GHOST', 'expectedQuantity': 1, 'actualQuantity': 2},
                {'productId': 'P-1', 'expectedQuantity': 5, 'actualQuantity': 5},
                {'productId': 'P-2', 'expectedQuantity': 5, 'actualQuantity': 4},
            ],
        })

        lines, products, skipped = resolve_lines(payload, catalog)

        assert [line.product_id for line in lines] == ['P-2']
        assert set(products) == {'P-1', 'P-2'}
        assert [(s.index, s.reason) for s in skipped] == [
            (0, SKIP_UNKNOWN_PRODUCT),
            (1, SKIP_NO_CHANGE),
        ]

    def test_unknown_lines_fail_policy(self, catalog, settings):
        """UNKNOWN_PRODUCT_POLICY='fail' aborts on the first unknown product."""
        settings.STOCKFLOW = {**settings.STOCKFLOW, 'UNKNOWN_PRODUCT_POLICY': 'fail'}
        payload = validate_payload('transfer', _transfer([
            {'productId': 'P-1', 'quantity': 1},
            {'productId': 'GHOST', 'quantity': 1},
        ]))

        with pytest.raises(StockError) as exc:
            resolve_lines(payload, catalog)

        assert exc.value.code == 'UNKNOWN_PRODUCT'
        assert exc.value.data['line'] == 1
