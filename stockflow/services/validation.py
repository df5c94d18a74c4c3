"""
Request validation — structural checks and payload normalization.

validate_payload() turns the external payload of a request into its typed
variant. Line lists may arrive as a list, a JSON string of a list, or a
single line object; all three become one ordered tuple of lines.

resolve_lines() applies the unknown-product policy to batch lines and
reports what was skipped.
"""

import json
import logging
from decimal import Decimal, InvalidOperation

from stockflow.conf import UNKNOWN_PRODUCT_FAIL, stockflow_settings
from stockflow.exceptions import StockError
from stockflow.models.enums import MovementType, RequestType
from stockflow.payloads import (
    AdjustmentLine,
    AdjustmentPayload,
    MovementPayload,
    TransferLine,
    TransferPayload,
)
from stockflow.results import SKIP_NO_CHANGE, SKIP_UNKNOWN_PRODUCT, SkippedLine

logger = logging.getLogger('stockflow')

# Column limits of StockMovement and StockPosition.
MAX_QUANTITY = 2_147_483_647
IDENTIFIER_MAX_LENGTH = 64
REASON_MAX_LENGTH = 255
REFERENCE_MAX_LENGTH = 100
MAX_UNIT_COST = Decimal('99999999.9999')

DEFAULT_ADJUSTMENT_REASON = 'Inventory adjustment'


# ══════════════════════════════════════════════════════════════
# FIELD HELPERS
# ══════════════════════════════════════════════════════════════


def _invalid(message: str, **data) -> StockError:
    return StockError('INVALID_REQUEST', message, **data)


def _first(raw: dict, *names):
    """First present, non-empty value among alternative field names."""
    for name in names:
        value = raw.get(name)
        if value is not None and value != '':
            return value
    return None


def _identifier(raw: dict, *names, required: bool = True, line: int | None = None) -> str | None:
    value = _first(raw, *names)
    if value is None:
        if required:
            raise _invalid(f"Missing required field: {names[0]}", field=names[0], line=line)
        return None
    if isinstance(value, (dict, list, bool)):
        raise _invalid(f"Invalid identifier for {names[0]}", field=names[0], line=line)
    identifier = str(value).strip()
    if len(identifier) > IDENTIFIER_MAX_LENGTH:
        raise _invalid(
            f"{names[0]} cannot exceed {IDENTIFIER_MAX_LENGTH} characters",
            field=names[0],
            line=line,
        )
    return identifier


def _text(raw: dict, *names, max_length: int | None = None, line: int | None = None) -> str:
    value = _first(raw, *names)
    text = '' if value is None else str(value)
    if max_length is not None and len(text) > max_length:
        raise _invalid(
            f"{names[0]} cannot exceed {max_length} characters",
            field=names[0],
            line=line,
        )
    return text


def _integer(value, field: str, line: int | None = None) -> int:
    """Coerce 12, 12.0, '12' and Decimal('12') to int. Rejects bools and fractions."""
    if isinstance(value, bool):
        raise _invalid(f"{field} must be an integer", field=field, line=line)
    if isinstance(value, int):
        return _in_range(value, field, line)
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        raise _invalid(f"{field} must be an integer", field=field, line=line)
    if not number.is_finite() or number != number.to_integral_value():
        raise _invalid(f"{field} must be an integer", field=field, line=line)
    return _in_range(int(number), field, line)


def _in_range(number: int, field: str, line: int | None = None) -> int:
    if abs(number) > MAX_QUANTITY:
        raise _invalid(
            f"{field} cannot exceed {MAX_QUANTITY}",
            field=field,
            line=line,
            maximum=MAX_QUANTITY,
        )
    return number


def _positive(raw: dict, name: str, line: int | None = None) -> int:
    value = raw.get(name)
    if value is None or value == '':
        raise _invalid(f"Missing required field: {name}", field=name, line=line)
    number = _integer(value, name, line)
    if number <= 0:
        raise _invalid(f"{name} must be positive", field=name, line=line)
    return number


def _non_negative(raw: dict, name: str, line: int | None = None) -> int:
    value = raw.get(name)
    if value is None or value == '':
        raise _invalid(f"Missing required field: {name}", field=name, line=line)
    number = _integer(value, name, line)
    if number < 0:
        raise _invalid(f"{name} cannot be negative", field=name, line=line)
    return number


def _unit_cost(raw: dict, line: int | None = None) -> Decimal | None:
    value = _first(raw, 'unitCost', 'unit_cost')
    if value is None:
        return None
    if isinstance(value, bool):
        raise _invalid("unitCost must be a number", field='unitCost', line=line)
    try:
        cost = Decimal(str(value))
    except (InvalidOperation, ValueError):
        raise _invalid("unitCost must be a number", field='unitCost', line=line)
    if not cost.is_finite() or cost < 0:
        raise _invalid("unitCost must be a non-negative number", field='unitCost', line=line)
    if cost > MAX_UNIT_COST:
        raise _invalid(f"unitCost cannot exceed {MAX_UNIT_COST}", field='unitCost', line=line)
    return cost


def normalize_lines(value, field: str) -> list[dict]:
    """
    Normalize a line list into a list of line objects.

    Accepts:
        - a list of objects
        - a JSON string encoding a list (or a single object)
        - a single object

    Raises:
        StockError('INVALID_REQUEST'): Unparsable string, wrong shape or empty list
    """
    if value is None or value == '':
        raise _invalid(f"Missing required field: {field}", field=field)

    if isinstance(value, (str, bytes)):
        try:
            value = json.loads(value)
        except ValueError:
            raise _invalid(f"Invalid {field} format", field=field)

    if isinstance(value, dict):
        lines = [value]
    elif isinstance(value, (list, tuple)):
        lines = list(value)
    else:
        raise _invalid(f"Invalid {field} format", field=field)

    if not lines:
        raise _invalid(f"No valid {field} found", field=field)

    for index, line in enumerate(lines):
        if not isinstance(line, dict):
            raise _invalid(f"Line {index} of {field} is not an object", field=field, line=index)

    return lines


# ══════════════════════════════════════════════════════════════
# PER-TYPE VALIDATION
# ══════════════════════════════════════════════════════════════


def _validate_movement(raw: dict) -> MovementPayload:
    product_id = _identifier(raw, 'productId', 'product_id')
    warehouse_id = _identifier(raw, 'warehouseId', 'warehouse_id')

    direction = _first(raw, 'type', 'direction')
    if direction is None:
        raise _invalid("Missing required field: type", field='type')
    direction = str(direction).strip().lower()
    if direction not in (MovementType.IN, MovementType.OUT):
        raise _invalid("Movement type must be 'in' or 'out'", field='type', value=direction)

    return MovementPayload(
        product_id=product_id,
        warehouse_id=warehouse_id,
        direction=MovementType(direction),
        quantity=_positive(raw, 'quantity'),
        location_id=_identifier(raw, 'locationId', 'location_id', required=False),
        reason=_text(raw, 'reason', max_length=REASON_MAX_LENGTH),
        reference=_text(raw, 'reference', max_length=REFERENCE_MAX_LENGTH),
        unit_cost=_unit_cost(raw),
    )


def _validate_transfer(raw: dict) -> TransferPayload:
    from_warehouse_id = _identifier(raw, 'fromWarehouseId', 'from_warehouse_id')
    to_warehouse_id = _identifier(raw, 'toWarehouseId', 'to_warehouse_id')
    if from_warehouse_id == to_warehouse_id:
        raise _invalid(
            "Source and destination warehouses cannot be the same",
            field='toWarehouseId',
        )

    lines = []
    for index, line in enumerate(normalize_lines(_first(raw, 'lines', 'transferLines'), 'lines')):
        lines.append(TransferLine(
            product_id=_identifier(line, 'productId', 'product_id', line=index),
            quantity=_positive(line, 'quantity', index),
            from_location_id=_identifier(line, 'fromLocationId', 'from_location_id', required=False),
            to_location_id=_identifier(line, 'toLocationId', 'to_location_id', required=False),
            reason=_text(line, 'reason', max_length=REASON_MAX_LENGTH, line=index),
            unit_cost=_unit_cost(line, index),
        ))

    return TransferPayload(
        from_warehouse_id=from_warehouse_id,
        to_warehouse_id=to_warehouse_id,
        lines=tuple(lines),
        reference=_text(raw, 'reference', max_length=REFERENCE_MAX_LENGTH),
    )


def _validate_adjustment(raw: dict) -> AdjustmentPayload:
    warehouse_id = _identifier(raw, 'warehouseId', 'warehouse_id')
    reason = _text(raw, 'reason', max_length=REASON_MAX_LENGTH)
    base_reason = reason or DEFAULT_ADJUSTMENT_REASON

    lines = []
    for index, line in enumerate(normalize_lines(_first(raw, 'lines', 'adjustmentLines'), 'lines')):
        lines.append(AdjustmentLine(
            product_id=_identifier(line, 'productId', 'product_id', line=index),
            expected_quantity=_non_negative(line, 'expectedQuantity', index),
            actual_quantity=_non_negative(line, 'actualQuantity', index),
            location_id=_identifier(line, 'locationId', 'location_id', required=False),
            notes=_text(
                line, 'notes',
                max_length=max(0, REASON_MAX_LENGTH - len(base_reason) - len(' - ')),
                line=index,
            ),
        ))

    return AdjustmentPayload(
        warehouse_id=warehouse_id,
        lines=tuple(lines),
        reason=reason,
        reference=_text(raw, 'reference', max_length=REFERENCE_MAX_LENGTH),
    )


_VALIDATORS = {
    RequestType.MOVEMENT: _validate_movement,
    RequestType.TRANSFER: _validate_transfer,
    RequestType.ADJUSTMENT: _validate_adjustment,
}


def validate_payload(request_type: str, raw):
    """
    Validate and normalize a request payload.

    Args:
        request_type: 'movement', 'transfer' or 'adjustment'
        raw: Payload as received (dict, or JSON string of a dict)

    Returns:
        MovementPayload, TransferPayload or AdjustmentPayload

    Raises:
        StockError('INVALID_REQUEST'): Unknown type, missing or malformed field
    """
    validator = _VALIDATORS.get(request_type)
    if validator is None:
        raise _invalid(
            "Invalid request type. Must be: movement, transfer, or adjustment",
            request_type=request_type,
        )

    if isinstance(raw, (str, bytes)):
        try:
            raw = json.loads(raw)
        except ValueError:
            raise _invalid("Invalid payload format")
    if not isinstance(raw, dict):
        raise _invalid("Payload must be an object")

    return validator(raw)


# ══════════════════════════════════════════════════════════════
# CATALOG CHECKS
# ══════════════════════════════════════════════════════════════


def ensure_targets_exist(payload, catalog) -> dict:
    """
    Resolve the warehouses (and, for movements, the product) a payload targets.

    Returns:
        Dict of resolved infos: 'product', 'warehouse', 'from_warehouse', 'to_warehouse'

    Raises:
        StockError('PRODUCT_NOT_FOUND' | 'WAREHOUSE_NOT_FOUND')
    """
    def warehouse(warehouse_id):
        info = catalog.get_warehouse(warehouse_id)
        if info is None:
            raise StockError('WAREHOUSE_NOT_FOUND', warehouse_id=warehouse_id)
        return info

    if isinstance(payload, MovementPayload):
        product = catalog.get_product(payload.product_id)
        if product is None:
            raise StockError('PRODUCT_NOT_FOUND', product_id=payload.product_id)
        return {'product': product, 'warehouse': warehouse(payload.warehouse_id)}

    if isinstance(payload, TransferPayload):
        return {
            'from_warehouse': warehouse(payload.from_warehouse_id),
            'to_warehouse': warehouse(payload.to_warehouse_id),
        }

    return {'warehouse': warehouse(payload.warehouse_id)}


def resolve_lines(payload, catalog):
    """
    Apply the unknown-product policy to the lines of a batch payload.

    Lines whose product is unknown are skipped (UNKNOWN_PRODUCT_POLICY="skip")
    or abort the request ("fail"). Adjustment lines with actual == expected
    are skipped as no-ops.

    Returns:
        (lines, products, skipped): lines to post in order, ProductInfo by
        product id, and SkippedLine records

    Raises:
        StockError('UNKNOWN_PRODUCT'): Policy is "fail" and a product is unknown
    """
    lines = []
    products = {}
    skipped = []
    fail_on_unknown = stockflow_settings.UNKNOWN_PRODUCT_POLICY == UNKNOWN_PRODUCT_FAIL

    for index, line in enumerate(payload.lines):
        product = products.get(line.product_id) or catalog.get_product(line.product_id)
        if product is None:
            if fail_on_unknown:
                raise StockError(
                    'UNKNOWN_PRODUCT',
                    f"Product {line.product_id} on line {index} not found",
                    product_id=line.product_id,
                    line=index,
                )
            skipped.append(SkippedLine(index, line.product_id, SKIP_UNKNOWN_PRODUCT))
            logger.info(
                "stock.line.skipped",
                extra={"line": index, "product_id": line.product_id, "skip_reason": SKIP_UNKNOWN_PRODUCT},
            )
            continue
        products[line.product_id] = product

        if isinstance(line, AdjustmentLine) and line.difference == 0:
            skipped.append(SkippedLine(index, line.product_id, SKIP_NO_CHANGE))
            continue

        lines.append(line)

    return lines, products, skipped
