"""Storage access for envelope records.

The pure core never talks to storage. Callers pick an ``EnvelopeStore``
(usually through ``open_store``), fetch records, and hand them to the core.
"""
import copy
import json
import logging
import sqlite3
from abc import ABC, abstractmethod
from contextlib import contextmanager
from dataclasses import asdict
from pathlib import Path
from typing import Iterable, Iterator

from envelopes.config import Settings
from envelopes.domain import AllocationRecord, Envelope, Transaction

logger = logging.getLogger(__name__)


class StorageUnavailableError(RuntimeError):
    pass


class EnvelopeStore(ABC):

    @abstractmethod
    def list_envelopes_for_user(self, user_id: str) -> tuple[Envelope, ...]:
        """Envelopes of one user ordered by sort_order."""

    @abstractmethod
    def list_transactions_for_user_in_range(
        self, user_id: str, start: str, end: str
    ) -> tuple[Transaction, ...]:
        """Transactions dated within [start, end], both inclusive."""

    @abstractmethod
    def list_allocations_for_user(self, user_id: str) -> tuple[AllocationRecord, ...]:
        pass

    @abstractmethod
    def add_allocations(self, user_id: str, records: Iterable[AllocationRecord]) -> None:
        pass


class JsonEnvelopeStore(EnvelopeStore):
    """Store backed by a seed file of the form ``{"users": {user_id: {...}}}``."""

    def __init__(self, path: Path):
        self.path = Path(path)
        if not self.path.exists():
            raise StorageUnavailableError(f"Seed file not found: {self.path}")
        with open(self.path, "r", encoding="utf-8") as f:
            data = json.load(f)
        self._users: dict = data.get("users", {})
        logger.info("Loaded seed data for %d user(s) from %s", len(self._users), self.path)

    def _user(self, user_id: str) -> dict:
        return self._users.get(user_id, {})

    def list_envelopes_for_user(self, user_id: str) -> tuple[Envelope, ...]:
        envelopes = (Envelope(**e) for e in self._user(user_id).get("envelopes", []))
        return tuple(sorted(envelopes, key=lambda e: e.sort_order))

    def list_transactions_for_user_in_range(
        self, user_id: str, start: str, end: str
    ) -> tuple[Transaction, ...]:
        return tuple(
            Transaction(**t)
            for t in self._user(user_id).get("transactions", [])
            if start <= t["date"] <= end
        )

    def list_allocations_for_user(self, user_id: str) -> tuple[AllocationRecord, ...]:
        return tuple(AllocationRecord(**a) for a in self._user(user_id).get("allocations", []))

    def add_allocations(self, user_id: str, records: Iterable[AllocationRecord]) -> None:
        rows = [asdict(r) for r in records]
        users = copy.deepcopy(self._users)
        users.setdefault(user_id, {}).setdefault("allocations", []).extend(rows)

        # a failed dump leaves the seed file untouched
        tmp_path = self.path.with_name(self.path.name + ".tmp")
        try:
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump({"users": users}, f, indent=2)
            tmp_path.replace(self.path)
        except (OSError, TypeError, ValueError):
            tmp_path.unlink(missing_ok=True)
            raise

        self._users = users
        logger.info("Stored %d allocation(s) for %s", len(rows), user_id)


SCHEMA_SQL = """
CREATE TABLE IF NOT EXISTS envelopes (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    title TEXT NOT NULL,
    weekly_budget_cents INTEGER NOT NULL,
    rollover INTEGER NOT NULL DEFAULT 0,
    created_at TEXT NOT NULL,
    sort_order INTEGER NOT NULL DEFAULT 0
);

CREATE TABLE IF NOT EXISTS envelope_transactions (
    id TEXT,
    user_id TEXT NOT NULL,
    envelope_id TEXT NOT NULL,
    amount_cents INTEGER NOT NULL,
    date TEXT NOT NULL,
    merchant TEXT,
    description TEXT
);

CREATE TABLE IF NOT EXISTS envelope_allocations (
    id TEXT PRIMARY KEY,
    user_id TEXT NOT NULL,
    week_start TEXT NOT NULL,
    recipient_envelope_id TEXT NOT NULL,
    donor_envelope_id TEXT NOT NULL,
    amount_cents INTEGER NOT NULL
);

CREATE INDEX IF NOT EXISTS ix_env_user ON envelopes (user_id, sort_order);
CREATE INDEX IF NOT EXISTS ix_txn_user_date ON envelope_transactions (user_id, date);
CREATE INDEX IF NOT EXISTS ix_alloc_user ON envelope_allocations (user_id, week_start);
"""


class SqliteEnvelopeStore(EnvelopeStore):

    def __init__(self, db_path: Path):
        self.db_path = Path(db_path)

    @contextmanager
    def connect(self) -> Iterator[sqlite3.Connection]:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(str(self.db_path))
        try:
            yield conn
        finally:
            conn.close()

    def init_db(self) -> None:
        with self.connect() as conn:
            conn.executescript(SCHEMA_SQL)
            conn.commit()

    def add_envelopes(self, user_id: str, envelopes: Iterable[Envelope]) -> None:
        rows = [
            (e.id, user_id, e.title, e.weekly_budget_cents, int(e.rollover), e.created_at, e.sort_order)
            for e in envelopes
        ]
        with self.connect() as conn:
            conn.executemany(
                "INSERT OR REPLACE INTO envelopes (id, user_id, title, weekly_budget_cents, "
                "rollover, created_at, sort_order) VALUES (?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()

    def add_transactions(self, user_id: str, transactions: Iterable[Transaction]) -> None:
        rows = [
            (t.id, user_id, t.envelope_id, t.amount_cents, t.date, t.merchant, t.description)
            for t in transactions
        ]
        with self.connect() as conn:
            conn.executemany(
                "INSERT INTO envelope_transactions (id, user_id, envelope_id, amount_cents, "
                "date, merchant, description) VALUES (?, ?, ?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()

    def list_envelopes_for_user(self, user_id: str) -> tuple[Envelope, ...]:
        sql = (
            "SELECT id, title, weekly_budget_cents, created_at, rollover, sort_order "
            "FROM envelopes WHERE user_id = ? ORDER BY sort_order ASC, id ASC"
        )
        with self.connect() as conn:
            rows = conn.execute(sql, (user_id,)).fetchall()
        return tuple(
            Envelope(
                id=r[0],
                title=r[1],
                weekly_budget_cents=r[2],
                created_at=r[3],
                rollover=bool(r[4]),
                sort_order=r[5],
            )
            for r in rows
        )

    def list_transactions_for_user_in_range(
        self, user_id: str, start: str, end: str
    ) -> tuple[Transaction, ...]:
        sql = (
            "SELECT envelope_id, amount_cents, date, merchant, description, id "
            "FROM envelope_transactions WHERE user_id = ? AND date >= ? AND date <= ? "
            "ORDER BY date ASC"
        )
        with self.connect() as conn:
            rows = conn.execute(sql, (user_id, start, end)).fetchall()
        return tuple(Transaction(*r[:5], id=r[5] or "") for r in rows)

    def list_allocations_for_user(self, user_id: str) -> tuple[AllocationRecord, ...]:
        sql = (
            "SELECT id, week_start, recipient_envelope_id, donor_envelope_id, amount_cents "
            "FROM envelope_allocations WHERE user_id = ? ORDER BY week_start ASC"
        )
        with self.connect() as conn:
            rows = conn.execute(sql, (user_id,)).fetchall()
        return tuple(AllocationRecord(*r) for r in rows)

    def add_allocations(self, user_id: str, records: Iterable[AllocationRecord]) -> None:
        rows = [
            (r.id, user_id, r.week_start, r.recipient_envelope_id, r.donor_envelope_id, r.amount_cents)
            for r in records
        ]
        with self.connect() as conn:
            conn.executemany(
                "INSERT INTO envelope_allocations (id, user_id, week_start, recipient_envelope_id, "
                "donor_envelope_id, amount_cents) VALUES (?, ?, ?, ?, ?, ?)",
                rows,
            )
            conn.commit()
        logger.info("Stored %d allocation(s) for %s", len(rows), user_id)


def open_store(settings: Settings) -> EnvelopeStore:
    if settings.storage == "json":
        return JsonEnvelopeStore(settings.seed_path)
    if settings.storage == "sqlite":
        store = SqliteEnvelopeStore(settings.db_path)
        store.init_db()
        logger.info("Using SQLite storage at %s", settings.db_path)
        return store
    raise StorageUnavailableError(f"Unknown storage backend: {settings.storage!r}")
