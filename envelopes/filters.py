from typing import Callable, Iterable, Iterator

from envelopes.domain import Envelope, Transaction
from envelopes.weeks import DateLike, get_week_start, to_date


def by_envelope(envelope_id: str):
    def _filter(t: Transaction) -> bool:
        return t.envelope_id == envelope_id

    return _filter


def by_date_range(start: DateLike, end: DateLike):
    # inclusive on both ends; ISO date strings order like dates
    lo = to_date(start).isoformat()
    hi = to_date(end).isoformat()

    def _filter(t: Transaction) -> bool:
        return lo <= t.date <= hi

    return _filter


def active_in_week(week_start: DateLike):
    """Envelope filter: non-rollover and created in or before the given week."""
    week = to_date(week_start)

    def _filter(e: Envelope) -> bool:
        return not e.rollover and get_week_start(e.created_at) <= week

    return _filter


def iter_transactions(
    trans: Iterable[Transaction], pred: Callable[[Transaction], bool]
) -> Iterator[Transaction]:
    for t in trans:
        if pred(t):
            yield t
