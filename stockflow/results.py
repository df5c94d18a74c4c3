"""
Execution and decision results.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field


SKIP_UNKNOWN_PRODUCT = 'unknown_product'
SKIP_NO_CHANGE = 'no_change'

DIVERGENCE_CLAMPED = 'clamped'
DIVERGENCE_EXPECTED_MISMATCH = 'expected_mismatch'


@dataclass(frozen=True)
class SkippedLine:
    """A batch line that was not posted (not an error)."""

    index: int
    product_id: str
    reason: str  # SKIP_UNKNOWN_PRODUCT or SKIP_NO_CHANGE


@dataclass(frozen=True)
class PositionUpdate:
    product_id: str
    warehouse_id: str
    before: int
    after: int
    created: bool = False


@dataclass(frozen=True)
class Divergence:
    """
    A position left out of step with its ledger sum.

    amount is how far on-hand departs from what the ledger implies:
    the unfilled part of a clamped decrement, or the difference between
    the counted-from quantity and the position's on-hand.
    """

    product_id: str
    warehouse_id: str
    reason: str  # DIVERGENCE_CLAMPED or DIVERGENCE_EXPECTED_MISMATCH
    amount: int


@dataclass
class ExecutionResult:
    reference: str = ''
    ledger_entry_ids: list[int] = field(default_factory=list)
    position_updates: list[PositionUpdate] = field(default_factory=list)
    skipped_lines: list[SkippedLine] = field(default_factory=list)
    divergences: list[Divergence] = field(default_factory=list)


@dataclass(frozen=True)
class DecisionResult:
    """Outcome of StockApprovals.decide()."""

    request_id: int
    status: str
    ledger_entry_ids: tuple[int, ...] = ()
    position_updates: tuple[PositionUpdate, ...] = ()
    skipped_lines: tuple[SkippedLine, ...] = ()
    divergences: tuple[Divergence, ...] = ()
    reference: str = ''

    @classmethod
    def from_execution(cls, request_id: int, status: str,
                       execution: ExecutionResult) -> DecisionResult:
        return cls(
            request_id=request_id,
            status=status,
            ledger_entry_ids=tuple(execution.ledger_entry_ids),
            position_updates=tuple(execution.position_updates),
            skipped_lines=tuple(execution.skipped_lines),
            divergences=tuple(execution.divergences),
            reference=execution.reference,
        )

    def as_dict(self) -> dict:
        """Serialize to dict (useful for APIs)."""
        return {
            'requestId': self.request_id,
            'status': str(self.status),
            'ledgerEntryIds': list(self.ledger_entry_ids),
            'positionUpdates': [asdict(u) for u in self.position_updates],
            'skippedLines': [asdict(s) for s in self.skipped_lines],
            'divergences': [asdict(d) for d in self.divergences],
            'reference': self.reference,
        }
