from collections import defaultdict
from datetime import timedelta
from typing import Iterable, Sequence

from envelopes.domain import Envelope, SavingsWeek, Transaction
from envelopes.filters import active_in_week, by_date_range, iter_transactions
from envelopes.weeks import DateLike, iterate_weeks, short_week_label, to_date


def _spent_by_envelope(transactions: Iterable[Transaction]) -> dict[str, int]:
    spent: dict[str, int] = defaultdict(int)
    for t in transactions:
        spent[t.envelope_id] += t.amount_cents
    return spent


def compute_savings_for_week(
    envelopes: Iterable[Envelope],
    transactions: Iterable[Transaction],
    week_start: DateLike,
    week_end: DateLike,
) -> int:
    """Unspent budget of every eligible envelope for one week, floored at 0 per envelope.

    Transactions outside [week_start, week_end] are ignored, so callers may
    pass a wider set than the week itself.
    """
    eligible = list(filter(active_in_week(week_start), envelopes))
    if not eligible:
        return 0

    spent = _spent_by_envelope(iter_transactions(transactions, by_date_range(week_start, week_end)))
    return sum(max(0, e.weekly_budget_cents - spent.get(e.id, 0)) for e in eligible)


def _completed_weeks(
    envelopes: Sequence[Envelope],
    transactions: Sequence[Transaction],
    earliest_week_start: DateLike,
    current_week_start: DateLike,
) -> Iterable[tuple[str, int]]:
    # the in-progress current week is never included
    for start in iterate_weeks(earliest_week_start, current_week_start):
        end = start + timedelta(days=6)
        yield start.isoformat(), compute_savings_for_week(envelopes, transactions, start, end)


def compute_cumulative_savings_from_data(
    envelopes: Iterable[Envelope],
    transactions: Iterable[Transaction],
    earliest_week_start: DateLike,
    current_week_start: DateLike,
) -> int:
    envelopes = tuple(envelopes)
    if not envelopes:
        return 0
    transactions = tuple(transactions)
    return sum(
        savings
        for _, savings in _completed_weeks(envelopes, transactions, earliest_week_start, current_week_start)
    )


def compute_weekly_savings_breakdown(
    envelopes: Iterable[Envelope],
    transactions: Iterable[Transaction],
    earliest_week_start: DateLike,
    current_week_start: DateLike,
) -> list[SavingsWeek]:
    """Per completed week savings, oldest first, with a running total."""
    envelopes = tuple(envelopes)
    if not envelopes:
        return []
    transactions = tuple(transactions)

    breakdown: list[SavingsWeek] = []
    cumulative = 0
    for week_start, savings in _completed_weeks(
        envelopes, transactions, earliest_week_start, current_week_start
    ):
        cumulative += savings
        breakdown.append(
            SavingsWeek(
                week_start=week_start,
                week_label=short_week_label(to_date(week_start)),
                savings_cents=savings,
                cumulative_cents=cumulative,
            )
        )
    return breakdown
