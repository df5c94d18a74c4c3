"""
Movement executor — turns one approved request into ledger entries and
position updates.

Must run inside the caller's transaction.atomic() block (see
StockApprovals.decide); any StockError raised here rolls back every entry
and position change of the request.

Concurrency:
    - Every position the request touches is locked with
      select_for_update() one key at a time in (product_id, warehouse_id)
      order before the first write. Missing positions are created in the
      same pass, so row locks and unique-index inserts are both taken in
      key order.
    - A missing position is created inside a savepoint; if a concurrent
      transaction created the same key first, the row is re-read locked.
"""

import logging
import time

from django.db import IntegrityError, transaction

from stockflow.adapters import get_catalog
from stockflow.conf import OVERDRAW_CLAMP, stockflow_settings
from stockflow.exceptions import StockError
from stockflow.models.enums import MovementType, RequestType
from stockflow.models.movement import StockMovement
from stockflow.models.position import StockPosition
from stockflow.results import (
    DIVERGENCE_CLAMPED,
    DIVERGENCE_EXPECTED_MISMATCH,
    Divergence,
    ExecutionResult,
    PositionUpdate,
)
from stockflow.services.validation import (
    DEFAULT_ADJUSTMENT_REASON,
    MAX_QUANTITY,
    ensure_targets_exist,
    resolve_lines,
)

logger = logging.getLogger('stockflow')


def make_reference(prefix: str) -> str:
    """Batch reference such as TR-1718000000000 (epoch milliseconds)."""
    return f"{prefix}-{int(time.time() * 1000)}"


def _lock_positions(keys, create=None) -> tuple[dict, set]:
    """
    Lock positions for (product_id, warehouse_id) keys, one key at a time in key order.

    Args:
        keys: Keys of positions that must already exist to be returned
        create: Mapping of key -> location_id for positions created at zero
            when absent

    Returns:
        (locked, created): positions by key, and the keys created here
    """
    create = create or {}
    locked = {}
    created = set()

    for key in sorted(set(keys) | set(create)):
        product_id, warehouse_id = key
        position = (
            StockPosition.objects
            .select_for_update()
            .filter(product_id=product_id, warehouse_id=warehouse_id)
            .first()
        )
        if position is None and key in create:
            position, was_created = _create_position(product_id, warehouse_id, create[key])
            if was_created:
                created.add(key)
        if position is not None:
            locked[key] = position

    return locked, created


def _create_position(product_id: str, warehouse_id: str,
                     location_id: str | None = None) -> tuple[StockPosition, bool]:
    """Create a position at zero, or lock the row a concurrent transaction just created."""
    try:
        with transaction.atomic():
            position = StockPosition.objects.create(
                product_id=product_id,
                warehouse_id=warehouse_id,
                location_id=location_id,
            )
    except IntegrityError:
        position = StockPosition.objects.select_for_update().get(
            product_id=product_id,
            warehouse_id=warehouse_id,
        )
        return position, False

    logger.info(
        "stock.position.created",
        extra={"product_id": product_id, "warehouse_id": warehouse_id},
    )
    return position, True


def _check_on_hand_limit(position: StockPosition, quantity: int) -> None:
    """Raise QUANTITY_OUT_OF_RANGE if on-hand would exceed what the column holds."""
    if quantity > MAX_QUANTITY:
        raise StockError(
            'QUANTITY_OUT_OF_RANGE',
            f"On-hand of product {position.product_id} at warehouse "
            f"{position.warehouse_id} cannot exceed {MAX_QUANTITY}",
            product_id=position.product_id,
            warehouse_id=position.warehouse_id,
            on_hand=position.quantity_on_hand,
            maximum=MAX_QUANTITY,
        )


def _save_position(position: StockPosition, location_id: str | None = None) -> None:
    if location_id:
        position.location_id = location_id
    position.save(update_fields=[
        'quantity_on_hand', 'quantity_available', 'location_id', 'updated_at',
    ])


class MovementExecutor:
    """Sole writer of ledger entries and stock positions."""

    @classmethod
    def execute(cls, request, payload=None) -> ExecutionResult:
        """
        Execute an approved request.

        Args:
            request: StockMovementRequest being approved (locked by the caller)
            payload: Validated payload (defaults to request.parsed_payload())

        Returns:
            ExecutionResult with ledger entry ids, position updates,
            skipped lines and divergences

        Raises:
            StockError: NotFound, InsufficientStock or InvalidState kinds
        """
        if payload is None:
            payload = request.parsed_payload()

        handlers = {
            RequestType.MOVEMENT: cls._execute_movement,
            RequestType.TRANSFER: cls._execute_transfer,
            RequestType.ADJUSTMENT: cls._execute_adjustment,
        }
        result = handlers[request.request_type](request, payload)

        logger.info(
            "stock.request.executed",
            extra={
                "request_id": request.pk,
                "request_type": request.request_type,
                "reference": result.reference,
                "ledger_entries": len(result.ledger_entry_ids),
                "skipped": len(result.skipped_lines),
            },
        )
        return result

    @classmethod
    def _post(cls, request, position, movement_type, quantity, reason='',
              reference='', location_id=None, unit_cost=None) -> StockMovement:
        return StockMovement.objects.create(
            position=position,
            product_id=position.product_id,
            warehouse_id=position.warehouse_id,
            location_id=location_id,
            type=movement_type,
            quantity=quantity,
            unit_cost=unit_cost,
            reason=reason or '',
            reference=reference or '',
            created_by=request.requested_by,
            request=request,
        )

    # ══════════════════════════════════════════════════════════════
    # MOVEMENT
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _execute_movement(cls, request, payload) -> ExecutionResult:
        """
        Direct in/out.

        'in' creates the position if absent. 'out' needs an existing
        position; past zero it is rejected or clamped per OVERDRAW_POLICY.
        """
        ensure_targets_exist(payload, get_catalog())
        result = ExecutionResult(reference=payload.reference)

        key = (payload.product_id, payload.warehouse_id)
        create = {key: payload.location_id} if payload.direction == MovementType.IN else None
        locked, created_keys = _lock_positions([key], create)
        position = locked.get(key)

        if position is None:
            raise StockError(
                'POSITION_NOT_FOUND',
                f"No stock of product {payload.product_id} at warehouse {payload.warehouse_id}",
                product_id=payload.product_id,
                warehouse_id=payload.warehouse_id,
            )

        created = key in created_keys
        before = position.quantity_on_hand
        delta = payload.signed_quantity
        _check_on_hand_limit(position, before + delta)
        clamp = stockflow_settings.OVERDRAW_POLICY == OVERDRAW_CLAMP

        if before + delta < 0 and not clamp:
            raise StockError(
                'NEGATIVE_ON_HAND',
                f"Cannot remove {payload.quantity} of product {payload.product_id}: "
                f"only {before} on hand",
                product_id=payload.product_id,
                warehouse_id=payload.warehouse_id,
                available=before,
                requested=payload.quantity,
                shortfall=-(before + delta),
            )

        entry = cls._post(
            request, position, payload.direction, delta,
            reason=payload.reason,
            reference=payload.reference,
            location_id=payload.location_id,
            unit_cost=payload.unit_cost,
        )
        clamped = position.apply(delta, clamp=clamp)
        _save_position(position, payload.location_id)

        if clamped:
            result.divergences.append(Divergence(
                position.product_id, position.warehouse_id, DIVERGENCE_CLAMPED, clamped,
            ))
            logger.warning(
                "stock.position.clamped",
                extra={
                    "request_id": request.pk,
                    "product_id": position.product_id,
                    "warehouse_id": position.warehouse_id,
                    "on_hand_before": before,
                    "requested": payload.quantity,
                    "clamped": clamped,
                },
            )

        result.ledger_entry_ids.append(entry.pk)
        result.position_updates.append(PositionUpdate(
            position.product_id, position.warehouse_id,
            before, position.quantity_on_hand, created,
        ))
        return result

    # ══════════════════════════════════════════════════════════════
    # TRANSFER
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _execute_transfer(cls, request, payload) -> ExecutionResult:
        """
        Warehouse-to-warehouse transfer.

        Each line posts -quantity at the source and +quantity at the
        destination under one shared reference. A line whose source lacks
        stock (counting earlier lines of the same request) fails the
        whole request with INSUFFICIENT_STOCK.
        """
        catalog = get_catalog()
        ensure_targets_exist(payload, catalog)
        lines, products, skipped = resolve_lines(payload, catalog)

        reference = payload.reference or make_reference(
            stockflow_settings.TRANSFER_REFERENCE_PREFIX
        )
        result = ExecutionResult(reference=reference, skipped_lines=skipped)

        source_wh = payload.from_warehouse_id
        dest_wh = payload.to_warehouse_id
        create = {}
        for line in lines:
            create.setdefault((line.product_id, dest_wh), line.to_location_id)
        locked, created_keys = _lock_positions(
            [(line.product_id, source_wh) for line in lines], create,
        )

        for line in lines:
            source = locked.get((line.product_id, source_wh))
            on_hand = source.quantity_on_hand if source else 0

            if source is None or on_hand < line.quantity:
                product = products[line.product_id]
                raise StockError(
                    'INSUFFICIENT_STOCK',
                    f"Insufficient stock for product {product.name} in source warehouse. "
                    f"Available: {on_hand}, Required: {line.quantity}",
                    product_id=line.product_id,
                    product_name=product.name,
                    warehouse_id=source_wh,
                    available=on_hand,
                    required=line.quantity,
                    shortfall=line.quantity - on_hand,
                )

            dest_key = (line.product_id, dest_wh)
            destination = locked[dest_key]
            created = dest_key in created_keys
            created_keys.discard(dest_key)
            _check_on_hand_limit(destination, destination.quantity_on_hand + line.quantity)

            out_entry = cls._post(
                request, source, MovementType.TRANSFER, -line.quantity,
                reason=line.reason or f"Transfer to {dest_wh}",
                reference=reference,
                location_id=line.from_location_id,
                unit_cost=line.unit_cost,
            )
            in_entry = cls._post(
                request, destination, MovementType.TRANSFER, line.quantity,
                reason=line.reason or f"Transfer from {source_wh}",
                reference=reference,
                location_id=line.to_location_id,
                unit_cost=line.unit_cost,
            )

            source_before = source.quantity_on_hand
            dest_before = destination.quantity_on_hand
            source.apply(-line.quantity)
            destination.apply(line.quantity)
            _save_position(source)
            _save_position(destination, line.to_location_id)

            result.ledger_entry_ids.extend([out_entry.pk, in_entry.pk])
            result.position_updates.extend([
                PositionUpdate(line.product_id, source_wh, source_before, source.quantity_on_hand),
                PositionUpdate(line.product_id, dest_wh, dest_before,
                               destination.quantity_on_hand, created),
            ])

        return result

    # ══════════════════════════════════════════════════════════════
    # ADJUSTMENT
    # ══════════════════════════════════════════════════════════════

    @classmethod
    def _execute_adjustment(cls, request, payload) -> ExecutionResult:
        """
        Count adjustment.

        Each line posts actual - expected and sets on-hand to actual.
        When on-hand was not the expected count, the position no longer
        matches its ledger sum; this is reported as a divergence.
        """
        catalog = get_catalog()
        ensure_targets_exist(payload, catalog)
        lines, _products, skipped = resolve_lines(payload, catalog)

        reference = payload.reference or make_reference(
            stockflow_settings.ADJUSTMENT_REFERENCE_PREFIX
        )
        result = ExecutionResult(reference=reference, skipped_lines=skipped)

        warehouse_id = payload.warehouse_id
        create = {}
        for line in lines:
            create.setdefault((line.product_id, warehouse_id), line.location_id)
        locked, created_keys = _lock_positions([], create)
        base_reason = payload.reason or DEFAULT_ADJUSTMENT_REASON

        for line in lines:
            key = (line.product_id, warehouse_id)
            position = locked[key]
            created = key in created_keys
            created_keys.discard(key)
            before = position.quantity_on_hand

            if before != line.expected_quantity:
                mismatch = before - line.expected_quantity
                result.divergences.append(Divergence(
                    line.product_id, warehouse_id, DIVERGENCE_EXPECTED_MISMATCH, mismatch,
                ))
                logger.warning(
                    "stock.adjust.expected_mismatch",
                    extra={
                        "request_id": request.pk,
                        "product_id": line.product_id,
                        "warehouse_id": warehouse_id,
                        "on_hand": before,
                        "expected": line.expected_quantity,
                        "actual": line.actual_quantity,
                    },
                )

            entry = cls._post(
                request, position, MovementType.ADJUSTMENT, line.difference,
                reason=f"{base_reason} - {line.notes}" if line.notes else base_reason,
                reference=reference,
                location_id=line.location_id,
            )
            position.set_on_hand(line.actual_quantity)
            _save_position(position, line.location_id)

            result.ledger_entry_ids.append(entry.pk)
            result.position_updates.append(PositionUpdate(
                line.product_id, warehouse_id, before, position.quantity_on_hand, created,
            ))

        return result
