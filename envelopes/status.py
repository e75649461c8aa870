from fractions import Fraction
from typing import Iterable, Union

from envelopes.domain import AllocationRecord, EnvelopeStatus
from envelopes.weeks import DateLike, get_remaining_days_percent, get_week_start

OVER = "Over"
WATCH = "Watch"
ON_TRACK = "On Track"


def get_status_label(
    remaining_cents: int, budget_cents: int, remaining_days_percent: Union[Fraction, float]
) -> str:
    if remaining_cents <= 0:
        return OVER
    proportional = budget_cents * remaining_days_percent
    if remaining_cents < proportional:
        return WATCH
    return ON_TRACK


def compute_envelope_status(
    budget_cents: int,
    spent_cents: int,
    today: DateLike,
    received_cents: int = 0,
    donated_cents: int = 0,
) -> EnvelopeStatus:
    remaining = budget_cents - spent_cents + received_cents - donated_cents
    label = get_status_label(remaining, budget_cents, get_remaining_days_percent(today))
    return EnvelopeStatus(remaining_cents=remaining, status=label)


def allocation_totals(
    records: Iterable[AllocationRecord], envelope_id: str, week_start: DateLike
) -> tuple[int, int]:
    """Return (received, donated) cents for one envelope in the week containing week_start."""
    week = get_week_start(week_start).isoformat()
    received = 0
    donated = 0
    for r in records:
        if r.week_start != week:
            continue
        if r.recipient_envelope_id == envelope_id:
            received += r.amount_cents
        if r.donor_envelope_id == envelope_id:
            donated += r.amount_cents
    return received, donated
