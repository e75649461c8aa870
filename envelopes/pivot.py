from collections import defaultdict
from typing import Iterable

import pandas as pd

from envelopes.domain import Envelope, PivotRow, Transaction
from envelopes.filters import by_date_range, iter_transactions
from envelopes.weeks import DateLike, get_week_start, short_week_label


def build_pivot_rows(
    transactions: Iterable[Transaction], range_start: DateLike, range_end: DateLike
) -> list[PivotRow]:
    """Week x envelope spending totals, newest week first. Weeks without spending are left out."""
    weeks: dict = defaultdict(lambda: defaultdict(int))
    for t in iter_transactions(transactions, by_date_range(range_start, range_end)):
        weeks[get_week_start(t.date)][t.envelope_id] += t.amount_cents

    rows = []
    for start in sorted(weeks, reverse=True):
        cells = dict(weeks[start])
        rows.append(
            PivotRow(
                week_start=start.isoformat(),
                week_label=short_week_label(start),
                cells=cells,
                total_cents=sum(cells.values()),
            )
        )
    return rows


def pivot_frame(rows: Iterable[PivotRow], envelopes: Iterable[Envelope] = ()) -> pd.DataFrame:
    """Tabular view of pivot rows for display.

    Envelope ids are replaced by titles where known, ordered by sort_order,
    missing cells are 0 and a Total column closes each row. Values stay in cents.
    """
    ordered = sorted(envelopes, key=lambda e: e.sort_order)
    titles = {e.id: e.title for e in ordered}

    records = []
    for row in rows:
        record = {"Week": row.week_label, "Week Start": row.week_start}
        record.update(row.cells)
        record["Total"] = row.total_cents
        records.append(record)
    if not records:
        return pd.DataFrame(columns=["Week", "Week Start", "Total"])

    df = pd.DataFrame(records).set_index("Week Start")
    known = [e.id for e in ordered if e.id in df.columns]
    unknown = sorted(c for c in df.columns if c not in known and c not in ("Week", "Total"))
    df = df[["Week"] + known + unknown + ["Total"]].copy()
    df[known + unknown] = df[known + unknown].fillna(0).astype("int64")
    return df.rename(columns=titles)
