import calendar
import re
from collections.abc import Mapping
from datetime import date
from typing import Any


def parse_ymd(value: str | date) -> date:
    if isinstance(value, date):
        return value
    if not value:
        raise ValueError("Date value is empty")
    if not re.fullmatch(r"\d{4}-\d{2}-\d{2}", value):
        raise ValueError("Invalid date format")
    year, month, day = map(int, value.split("-"))
    if not (1 <= month <= 12):
        raise ValueError("Invalid month")
    last_day = calendar.monthrange(year, month)[1]
    if not (1 <= day <= last_day):
        raise ValueError("Invalid day")
    return date(year, month, day)


def ensure_date_order(issue_date: date, due_date: date) -> None:
    if due_date < issue_date:
        raise ValueError("Due date cannot be earlier than issue date")


def validate_check_draft(draft: Mapping[str, Any]) -> None:
    """Caller-side checks before a draft is handed to the store.

    The store itself accepts any draft; forms and the CLI call this first.
    """
    from .checks import DRAFT_FIELDS, CheckStatus, as_amount
    from .errors import ValidationError

    unknown = sorted(set(draft) - set(DRAFT_FIELDS))
    if unknown:
        raise ValidationError(f"Unknown check fields: {', '.join(unknown)}")

    if not str(draft.get("company_name") or "").strip():
        raise ValidationError("Company name is required")

    parsed: dict[str, date] = {}
    for attr in ("issue_date", "due_date"):
        raw = draft.get(attr)
        if raw in (None, ""):
            continue
        try:
            parsed[attr] = parse_ymd(str(raw).strip())
        except ValueError as exc:
            raise ValidationError(f"{attr}: {exc}") from exc
    if "issue_date" in parsed and "due_date" in parsed:
        try:
            ensure_date_order(parsed["issue_date"], parsed["due_date"])
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

    populated = 0
    for attr in ("amount_usd", "amount_eur", "amount_tl"):
        raw = draft.get(attr)
        if raw in (None, ""):
            continue
        amount = as_amount(raw)
        if amount is None:
            raise ValidationError(f"{attr} must be a number")
        if amount < 0:
            raise ValidationError(f"{attr} cannot be negative")
        if amount > 0:
            populated += 1
    if populated > 1:
        raise ValidationError("A check carries an amount in exactly one currency")

    status = draft.get("status")
    if status not in (None, ""):
        valid = {s.value for s in CheckStatus} | {s.name for s in CheckStatus}
        value = status.value if isinstance(status, CheckStatus) else str(status).strip()
        if value not in valid and value.upper() not in valid:
            raise ValidationError(f"Invalid status: {status}")
