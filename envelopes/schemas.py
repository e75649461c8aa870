"""Boundary validation for inbound payloads.

Each validator takes a plain dict as it arrives from a form or request body
and returns ``Right(payload)`` when it is well formed or ``Left(errors)``
with one ``FieldError`` per violated field. Core functions only ever see
payloads that passed through here.
"""
import re
from datetime import date
from typing import Any, Callable, Optional

from envelopes.domain import Allocation, Envelope, FieldError, Transaction
from envelopes.functional import Either, Left, Right

DATE_RE = re.compile(r"^\d{4}-\d{2}-\d{2}$")
TITLE_MAX = 100

Check = Callable[[Any], Optional[str]]


def _is_int(value: Any) -> bool:
    # bool is an int subclass but never a valid amount
    return isinstance(value, int) and not isinstance(value, bool)


def _non_empty_string(max_len: Optional[int] = None) -> Check:
    def check(value: Any) -> Optional[str]:
        if not isinstance(value, str):
            return "must be a string"
        if not value.strip():
            return "must not be empty"
        if max_len is not None and len(value) > max_len:
            return f"must be at most {max_len} characters"
        return None

    return check


def _int_at_least(minimum: int) -> Check:
    def check(value: Any) -> Optional[str]:
        if not _is_int(value):
            return "must be an integer"
        if value < minimum:
            return f"must be at least {minimum}"
        return None

    return check


def _optional_string(value: Any) -> Optional[str]:
    return None if isinstance(value, str) else "must be a string"


def _boolean(value: Any) -> Optional[str]:
    return None if isinstance(value, bool) else "must be a boolean"


def _iso_date(value: Any) -> Optional[str]:
    if not isinstance(value, str) or not DATE_RE.match(value):
        return "must be a date in YYYY-MM-DD format"
    try:
        date.fromisoformat(value)
    except ValueError:
        return "must be a valid calendar date"
    return None


ENVELOPE_FIELDS: dict[str, tuple[Check, bool]] = {
    "title": (_non_empty_string(TITLE_MAX), True),
    "weeklyBudgetCents": (_int_at_least(1), True),
    "rollover": (_boolean, False),
}

TRANSACTION_FIELDS: dict[str, tuple[Check, bool]] = {
    "envelopeId": (_non_empty_string(), True),
    "amountCents": (_int_at_least(1), True),
    "date": (_iso_date, True),
    "merchant": (_optional_string, False),
    "description": (_optional_string, False),
}

ALLOCATION_FIELDS: dict[str, tuple[Check, bool]] = {
    "donorEnvelopeId": (_non_empty_string(), True),
    "amountCents": (_int_at_least(1), True),
}


def _validate(data: Any, fields: dict[str, tuple[Check, bool]], partial: bool = False) -> Either:
    if not isinstance(data, dict):
        return Left([FieldError("", "expected an object")])

    errors = []
    for name, (check, required) in fields.items():
        if name not in data or data[name] is None:
            if required and not partial:
                errors.append(FieldError(name, "is required"))
            continue
        message = check(data[name])
        if message:
            errors.append(FieldError(name, message))

    if errors:
        return Left(errors)
    return Right({k: v for k, v in data.items() if k in fields and v is not None})


def validate_envelope_input(data: Any) -> Either:
    return _validate(data, ENVELOPE_FIELDS)


def validate_transaction_input(data: Any) -> Either:
    return _validate(data, TRANSACTION_FIELDS)


def validate_transaction_update(data: Any) -> Either:
    # every field optional; an empty dict is a no-op update
    return _validate(data, TRANSACTION_FIELDS, partial=True)


def validate_allocation_input(data: Any) -> Either:
    return _validate(data, ALLOCATION_FIELDS)


def envelope_from_input(
    payload: dict, envelope_id: str, created_at: str, sort_order: int = 0
) -> Envelope:
    return Envelope(
        id=envelope_id,
        title=payload["title"].strip(),
        weekly_budget_cents=payload["weeklyBudgetCents"],
        created_at=created_at,
        rollover=payload.get("rollover", False),
        sort_order=sort_order,
    )


def transaction_from_input(payload: dict, transaction_id: str = "") -> Transaction:
    return Transaction(
        envelope_id=payload["envelopeId"],
        amount_cents=payload["amountCents"],
        date=payload["date"],
        merchant=payload.get("merchant"),
        description=payload.get("description"),
        id=transaction_id,
    )


def allocation_from_input(payload: dict) -> Allocation:
    return Allocation(
        donor_envelope_id=payload["donorEnvelopeId"],
        amount_cents=payload["amountCents"],
    )
