from envelopes.domain import Envelope, SavingsWeek, Transaction
from envelopes.savings import (
    compute_cumulative_savings_from_data,
    compute_savings_for_week,
    compute_weekly_savings_breakdown,
)

WEEK_START = "2026-02-08"
WEEK_END = "2026-02-14"


def make_env(id, budget, created_at="2026-01-01", rollover=False):
    return Envelope(id=id, title=id.title(), weekly_budget_cents=budget, created_at=created_at, rollover=rollover)


def make_tx(envelope_id, amount, date="2026-02-10"):
    return Transaction(envelope_id=envelope_id, amount_cents=amount, date=date)


# --- single week


def test_week_full_budget_without_transactions():
    envelopes = (make_env("e1", 5000), make_env("e2", 3000))
    assert compute_savings_for_week(envelopes, (), WEEK_START, WEEK_END) == 8000


def test_week_partial_spending():
    envelopes = (make_env("e1", 5000),)
    trans = (make_tx("e1", 2000),)
    assert compute_savings_for_week(envelopes, trans, WEEK_START, WEEK_END) == 3000


def test_week_ignores_rollover_envelopes():
    envelopes = (make_env("e1", 5000), make_env("e2", 3000, rollover=True))
    assert compute_savings_for_week(envelopes, (), WEEK_START, WEEK_END) == 5000


def test_week_floors_each_envelope_at_zero():
    envelopes = (make_env("e1", 5000), make_env("e2", 3000))
    trans = (make_tx("e1", 7000), make_tx("e2", 1000))
    assert compute_savings_for_week(envelopes, trans, WEEK_START, WEEK_END) == 2000


def test_week_excludes_envelopes_created_after_week():
    envelopes = (make_env("e1", 5000), make_env("e2", 3000, created_at="2026-02-15"))
    assert compute_savings_for_week(envelopes, (), WEEK_START, WEEK_END) == 5000


def test_week_counts_envelope_created_midweek():
    envelopes = (make_env("e1", 5000, created_at="2026-02-11"),)
    assert compute_savings_for_week(envelopes, (), WEEK_START, WEEK_END) == 5000


def test_week_empty_envelopes():
    assert compute_savings_for_week((), (), WEEK_START, WEEK_END) == 0


def test_week_ignores_transactions_outside_week():
    envelopes = (make_env("e1", 5000),)
    trans = (
        make_tx("e1", 1000, "2026-02-07"),
        make_tx("e1", 1000, "2026-02-08"),
        make_tx("e1", 1000, "2026-02-14"),
        make_tx("e1", 1000, "2026-02-15"),
    )
    assert compute_savings_for_week(envelopes, trans, WEEK_START, WEEK_END) == 3000


def test_week_ignores_transactions_for_unknown_envelopes():
    envelopes = (make_env("e1", 5000),)
    trans = (make_tx("ghost", 4000),)
    assert compute_savings_for_week(envelopes, trans, WEEK_START, WEEK_END) == 5000


def test_week_never_negative():
    envelopes = (make_env("e1", 100), make_env("e2", 100))
    trans = (make_tx("e1", 10000), make_tx("e2", 10000))
    assert compute_savings_for_week(envelopes, trans, WEEK_START, WEEK_END) == 0


def test_week_accepts_generators():
    envelopes = (make_env("e1", 5000),)
    trans = (make_tx("e1", 500),)
    result = compute_savings_for_week((e for e in envelopes), (t for t in trans), WEEK_START, WEEK_END)
    assert result == 4500


# --- cumulative


def test_cumulative_no_envelopes():
    assert compute_cumulative_savings_from_data((), (), "2026-01-04", "2026-02-08") == 0


def test_cumulative_multiple_weeks():
    envelopes = (make_env("e1", 10000, created_at="2026-01-04"),)
    assert compute_cumulative_savings_from_data(envelopes, (), "2026-01-04", "2026-01-18") == 20000


def test_cumulative_subtracts_spending_per_week():
    envelopes = (make_env("e1", 10000, created_at="2026-01-04"),)
    trans = (make_tx("e1", 3000, "2026-01-05"), make_tx("e1", 8000, "2026-01-12"))
    assert compute_cumulative_savings_from_data(envelopes, trans, "2026-01-04", "2026-01-18") == 9000


def test_cumulative_floors_per_week():
    envelopes = (make_env("e1", 5000, created_at="2026-01-04"),)
    trans = (make_tx("e1", 8000, "2026-01-06"),)
    assert compute_cumulative_savings_from_data(envelopes, trans, "2026-01-04", "2026-01-11") == 0


def test_cumulative_overspend_does_not_carry_into_next_week():
    envelopes = (make_env("e1", 5000, created_at="2026-01-04"),)
    trans = (make_tx("e1", 8000, "2026-01-06"),)
    assert compute_cumulative_savings_from_data(envelopes, trans, "2026-01-04", "2026-01-18") == 5000


def test_cumulative_ignores_rollover():
    envelopes = (
        make_env("e1", 5000, created_at="2026-01-04"),
        make_env("e2", 3000, created_at="2026-01-04", rollover=True),
    )
    assert compute_cumulative_savings_from_data(envelopes, (), "2026-01-04", "2026-01-11") == 5000


def test_cumulative_excludes_current_week():
    envelopes = (make_env("e1", 10000, created_at="2026-01-04"),)
    assert compute_cumulative_savings_from_data(envelopes, (), "2026-01-04", "2026-01-04") == 0


def test_cumulative_ignores_current_week_spending():
    envelopes = (make_env("e1", 10000, created_at="2026-01-04"),)
    trans = (make_tx("e1", 9000, "2026-01-12"),)
    assert compute_cumulative_savings_from_data(envelopes, trans, "2026-01-04", "2026-01-11") == 10000


def test_cumulative_envelope_counts_from_creation_week():
    envelopes = (
        make_env("e1", 5000, created_at="2026-01-04"),
        make_env("e2", 3000, created_at="2026-01-12"),
    )
    assert compute_cumulative_savings_from_data(envelopes, (), "2026-01-04", "2026-01-18") == 13000


def test_cumulative_across_year_boundary():
    envelopes = (make_env("e1", 1000, created_at="2025-12-01"),)
    trans = (make_tx("e1", 400, "2025-12-31"), make_tx("e1", 100, "2026-01-03"))
    # weeks Dec 21, Dec 28 (spent 500), Jan 4
    assert compute_cumulative_savings_from_data(envelopes, trans, "2025-12-21", "2026-01-11") == 2500


# --- breakdown


def test_breakdown_no_envelopes():
    assert compute_weekly_savings_breakdown((), (), "2026-01-04", "2026-02-08") == []


def test_breakdown_single_week():
    envelopes = (make_env("e1", 5000),)
    result = compute_weekly_savings_breakdown(envelopes, (), "2026-01-04", "2026-01-11")
    assert result == [SavingsWeek("2026-01-04", "Wk 2", 5000, 5000)]


def test_breakdown_per_week_and_cumulative():
    envelopes = (make_env("e1", 10000),)
    trans = (make_tx("e1", 3000, "2026-01-05"), make_tx("e1", 8000, "2026-01-12"))
    result = compute_weekly_savings_breakdown(envelopes, trans, "2026-01-04", "2026-01-18")
    assert result == [
        SavingsWeek(week_start="2026-01-04", week_label="Wk 2", savings_cents=7000, cumulative_cents=7000),
        SavingsWeek(week_start="2026-01-11", week_label="Wk 3", savings_cents=2000, cumulative_cents=9000),
    ]


def test_breakdown_ignores_rollover():
    envelopes = (make_env("e1", 5000), make_env("e2", 3000, rollover=True))
    result = compute_weekly_savings_breakdown(envelopes, (), "2026-01-04", "2026-01-11")
    assert len(result) == 1
    assert result[0].savings_cents == 5000


def test_breakdown_counts_from_creation_week():
    envelopes = (
        make_env("e1", 5000, created_at="2026-01-04"),
        make_env("e2", 3000, created_at="2026-01-12"),
    )
    result = compute_weekly_savings_breakdown(envelopes, (), "2026-01-04", "2026-01-18")
    assert [w.savings_cents for w in result] == [5000, 8000]
    assert [w.cumulative_cents for w in result] == [5000, 13000]


def test_breakdown_chronological_order():
    envelopes = (make_env("e1", 1000),)
    result = compute_weekly_savings_breakdown(envelopes, (), "2026-01-04", "2026-01-25")
    assert [w.week_start for w in result] == ["2026-01-04", "2026-01-11", "2026-01-18"]


def test_breakdown_empty_when_bounds_equal():
    envelopes = (make_env("e1", 1000),)
    assert compute_weekly_savings_breakdown(envelopes, (), "2026-01-04", "2026-01-04") == []


def test_breakdown_cumulative_is_prefix_sum_and_matches_total():
    envelopes = (make_env("e1", 4000), make_env("e2", 2500), make_env("e3", 1000, rollover=True))
    trans = (
        make_tx("e1", 5000, "2026-01-05"),
        make_tx("e2", 100, "2026-01-06"),
        make_tx("e1", 1200, "2026-01-13"),
        make_tx("e2", 2500, "2026-01-21"),
        make_tx("e3", 50, "2026-01-22"),
    )
    result = compute_weekly_savings_breakdown(envelopes, trans, "2026-01-04", "2026-02-01")
    running = 0
    for w in result:
        running += w.savings_cents
        assert w.cumulative_cents == running
        assert w.savings_cents >= 0
    assert running == compute_cumulative_savings_from_data(envelopes, trans, "2026-01-04", "2026-02-01")


def test_breakdown_labels_roll_over_year():
    envelopes = (make_env("e1", 1000, created_at="2025-12-01"),)
    result = compute_weekly_savings_breakdown(envelopes, (), "2025-12-21", "2026-01-11")
    assert [w.week_label for w in result] == ["Wk 52", "Wk 1", "Wk 2"]
