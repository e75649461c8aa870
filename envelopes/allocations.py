from typing import Iterable, Mapping, Sequence
from uuid import uuid4

from envelopes.domain import Allocation, AllocationCheck, AllocationRecord
from envelopes.weeks import DateLike, get_week_start


def validate_allocations(
    allocations: Sequence[Allocation],
    overage_cents: int,
    donor_balances: Mapping[str, int],
) -> AllocationCheck:
    """Check a proposed overage cover.

    The transfers must add up to exactly the overage and each donor must exist
    and hold enough remaining balance. Every violated rule is reported, so a
    caller can show the user the whole list at once.
    """
    if not allocations:
        return AllocationCheck(valid=False, errors=("No allocations provided",))

    errors: list[str] = []
    for a in allocations:
        if a.donor_envelope_id not in donor_balances:
            errors.append(f"Donor envelope {a.donor_envelope_id} not found")
            continue
        balance = donor_balances[a.donor_envelope_id]
        if a.amount_cents > balance:
            errors.append(
                f"Allocation for {a.donor_envelope_id} ({a.amount_cents}) "
                f"exceeds remaining balance ({balance})"
            )

    total = sum(a.amount_cents for a in allocations)
    if total != overage_cents:
        errors.append(f"Total allocated ({total}) does not equal overage ({overage_cents})")

    if errors:
        return AllocationCheck(valid=False, errors=tuple(errors))
    return AllocationCheck(valid=True)


def compute_overage_cents(
    budget_cents: int, spent_cents: int, received_cents: int = 0, donated_cents: int = 0
) -> int:
    """Amount still needed to bring an envelope back to zero, 0 when it is not overspent."""
    return max(0, spent_cents + donated_cents - budget_cents - received_cents)


def merge_by_donor(allocations: Iterable[Allocation]) -> tuple[Allocation, ...]:
    """Combine allocations that name the same donor, keeping first-seen order."""
    totals: dict[str, int] = {}
    for a in allocations:
        totals[a.donor_envelope_id] = totals.get(a.donor_envelope_id, 0) + a.amount_cents
    return tuple(Allocation(donor, amount) for donor, amount in totals.items())


def to_records(
    allocations: Iterable[Allocation], recipient_envelope_id: str, week: DateLike
) -> tuple[AllocationRecord, ...]:
    week_start = get_week_start(week).isoformat()
    return tuple(
        AllocationRecord(
            id=str(uuid4()),
            week_start=week_start,
            recipient_envelope_id=recipient_envelope_id,
            donor_envelope_id=a.donor_envelope_id,
            amount_cents=a.amount_cents,
        )
        for a in allocations
    )
