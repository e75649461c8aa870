import logging
from datetime import date, timedelta
from typing import Any, Dict, List, Optional, Sequence

from envelopes.allocations import (
    compute_overage_cents,
    merge_by_donor,
    to_records,
    validate_allocations,
)
from envelopes.domain import Allocation, AllocationCheck, Envelope
from envelopes.filters import by_envelope
from envelopes.pivot import build_pivot_rows
from envelopes.savings import compute_cumulative_savings_from_data, compute_weekly_savings_breakdown
from envelopes.status import allocation_totals, compute_envelope_status
from envelopes.storage import EnvelopeStore
from envelopes.weeks import DateLike, format_week_label, get_week_start, to_date

logger = logging.getLogger(__name__)


class UnknownEnvelopeError(KeyError):
    pass


class EnvelopeService:
    """Facade that fetches records from an injected store and runs the pure core over them."""

    def __init__(self, store: EnvelopeStore):
        self.store = store

    def _envelopes_in_week(self, user_id: str, week_start: date) -> List[Envelope]:
        return [
            e for e in self.store.list_envelopes_for_user(user_id)
            if get_week_start(e.created_at) <= week_start
        ]

    def weekly_overview(self, user_id: str, today: DateLike) -> Dict[str, Any]:
        """Status of every envelope for the week containing today."""
        week_start = get_week_start(today)
        week_end = week_start + timedelta(days=6)
        envelopes = self._envelopes_in_week(user_id, week_start)
        transactions = self.store.list_transactions_for_user_in_range(
            user_id, week_start.isoformat(), week_end.isoformat()
        )
        allocations = self.store.list_allocations_for_user(user_id)

        rows = []
        for e in envelopes:
            spent = sum(t.amount_cents for t in filter(by_envelope(e.id), transactions))
            received, donated = allocation_totals(allocations, e.id, week_start)
            status = compute_envelope_status(e.weekly_budget_cents, spent, today, received, donated)
            rows.append({
                "envelope": e,
                "spent_cents": spent,
                "received_cents": received,
                "donated_cents": donated,
                "remaining_cents": status.remaining_cents,
                "status": status.status,
            })

        logger.debug("Overview for %s, week %s: %d envelope(s)", user_id, week_start, len(rows))
        return {
            "week_start": week_start.isoformat(),
            "week_label": format_week_label(week_start),
            "envelopes": rows,
        }

    def savings_summary(self, user_id: str, today: DateLike) -> Dict[str, Any]:
        """Savings over every completed week since the oldest envelope was created."""
        envelopes = self.store.list_envelopes_for_user(user_id)
        current = get_week_start(today)
        if not envelopes:
            return {"total_cents": 0, "weeks": []}

        earliest = min(get_week_start(e.created_at) for e in envelopes)
        transactions = self.store.list_transactions_for_user_in_range(
            user_id, earliest.isoformat(), (current - timedelta(days=1)).isoformat()
        )
        return {
            "total_cents": compute_cumulative_savings_from_data(envelopes, transactions, earliest, current),
            "weeks": compute_weekly_savings_breakdown(envelopes, transactions, earliest, current),
        }

    def history(self, user_id: str, start: DateLike, end: DateLike):
        start_str, end_str = to_date(start).isoformat(), to_date(end).isoformat()
        transactions = self.store.list_transactions_for_user_in_range(user_id, start_str, end_str)
        return build_pivot_rows(transactions, start_str, end_str)

    def cover_overage(
        self,
        user_id: str,
        recipient_id: str,
        allocations: Sequence[Allocation],
        today: DateLike,
    ) -> AllocationCheck:
        """Validate and, when valid, store transfers covering an envelope's overspend this week."""
        overview = self.weekly_overview(user_id, today)
        rows = {r["envelope"].id: r for r in overview["envelopes"]}
        recipient: Optional[dict] = rows.get(recipient_id)
        if recipient is None:
            raise UnknownEnvelopeError(recipient_id)

        overage = compute_overage_cents(
            recipient["envelope"].weekly_budget_cents,
            recipient["spent_cents"],
            recipient["received_cents"],
            recipient["donated_cents"],
        )
        donor_balances = {
            envelope_id: r["remaining_cents"]
            for envelope_id, r in rows.items()
            if envelope_id != recipient_id
        }

        # a donor named twice is checked against its balance once, for the combined amount
        merged = merge_by_donor(allocations)
        non_positive = tuple(
            f"Allocation for {a.donor_envelope_id} ({a.amount_cents}) must be positive"
            for a in merged
            if a.amount_cents <= 0
        )
        if non_positive:
            check = AllocationCheck(valid=False, errors=non_positive)
        else:
            check = validate_allocations(merged, overage, donor_balances)
        if not check.valid:
            logger.info("Rejected overage cover for %s: %s", recipient_id, "; ".join(check.errors))
            return check

        self.store.add_allocations(user_id, to_records(merged, recipient_id, today))
        logger.info("Covered %d cents of overage on %s", overage, recipient_id)
        return check
