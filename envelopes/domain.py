from dataclasses import dataclass, field
from datetime import datetime
from typing import Optional

# All money is integer cents, all dates are "YYYY-MM-DD" strings.


@dataclass(frozen=True)
class Envelope:
    id: str
    title: str
    weekly_budget_cents: int
    created_at: str
    rollover: bool = False   # rollover envelopes never count towards savings
    sort_order: int = 0


@dataclass(frozen=True)
class Transaction:
    envelope_id: str
    amount_cents: int        # always a positive debit
    date: str
    merchant: Optional[str] = None
    description: Optional[str] = None
    id: str = ""


# A proposed transfer used to cover an overage
@dataclass(frozen=True)
class Allocation:
    donor_envelope_id: str
    amount_cents: int


# An accepted transfer, as stored
@dataclass(frozen=True)
class AllocationRecord:
    id: str
    week_start: str
    recipient_envelope_id: str
    donor_envelope_id: str
    amount_cents: int


@dataclass(frozen=True)
class WeekRange:
    start: datetime
    end: datetime

    @property
    def key(self) -> str:
        return self.start.date().isoformat()


@dataclass(frozen=True)
class EnvelopeStatus:
    remaining_cents: int
    status: str              # "Over" | "Watch" | "On Track"


@dataclass(frozen=True)
class SavingsWeek:
    week_start: str
    week_label: str
    savings_cents: int
    cumulative_cents: int


@dataclass(frozen=True)
class PivotRow:
    week_start: str
    week_label: str
    cells: dict
    total_cents: int


@dataclass(frozen=True)
class AllocationCheck:
    valid: bool
    errors: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class FieldError:
    field: str
    message: str
