from collections.abc import Iterable, Mapping
from dataclasses import dataclass, fields
from typing import Any, Literal

from .checks import ATTRIBUTES_BY_KEY, FIELD_KEYS, CheckRecord, CheckStatus, Currency, as_amount, parse_date_or_none

DATE_COLUMN_MARKER = "tarihi"
NUMERIC_COLUMNS = {"dolar", "euro", "tl", "id"}


@dataclass(frozen=True)
class SearchFilters:
    status: CheckStatus | str | None = None
    currency: Currency | str | None = None
    bank: str | None = None
    min_amount: float | None = None
    max_amount: float | None = None

    @classmethod
    def coerce(cls, filters: "SearchFilters | Mapping[str, Any] | None") -> "SearchFilters":
        if filters is None:
            return cls()
        if isinstance(filters, cls):
            return filters
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(filters) - known)
        if unknown:
            raise ValueError(f"Unknown search filters: {', '.join(unknown)}")
        return cls(**{k: v for k, v in filters.items() if v not in (None, "")})


def _matches_query(record: CheckRecord, query: str) -> bool:
    for value in (record.company_name, record.check_number, record.bank):
        if value and query in value.lower():
            return True
    return False


def _as_currency(value: Currency | str | None) -> Currency | None:
    if not value:
        return None
    if isinstance(value, Currency):
        return value
    return Currency(str(value).strip().upper())


def _status_matches(record: CheckRecord, status: CheckStatus | str) -> bool:
    wanted = CheckStatus.lookup(status)
    if wanted is None:
        return False
    if wanted is CheckStatus.PENDING:
        return record.is_pending
    return record.status is wanted


def search_checks(
    records: Iterable[CheckRecord],
    query: str = "",
    filters: SearchFilters | Mapping[str, Any] | None = None,
) -> list[CheckRecord]:
    criteria = SearchFilters.coerce(filters)
    needle = (query or "").strip().lower()
    currency = _as_currency(criteria.currency)
    min_amount = as_amount(criteria.min_amount)
    max_amount = as_amount(criteria.max_amount)

    results: list[CheckRecord] = []
    for record in records:
        if needle and not _matches_query(record, needle):
            continue
        if criteria.status and not _status_matches(record, criteria.status):
            continue
        if currency is not None and not record.amount_in(currency) > 0:
            continue
        if criteria.bank and record.bank != criteria.bank:
            continue
        if min_amount is not None or max_amount is not None:
            amount = record.amount_in(currency) if currency is not None else record.max_amount()
            if min_amount is not None and amount < min_amount:
                continue
            if max_amount is not None and amount > max_amount:
                continue
        results.append(record)
    return results


def _column_value(record: CheckRecord, key: str) -> Any:
    attr = ATTRIBUTES_BY_KEY.get(key)
    if attr is None:
        return record.extra.get(key)
    value = getattr(record, attr)
    if isinstance(value, CheckStatus):
        return value.value
    return value


def _sort_key(column: str):
    if DATE_COLUMN_MARKER in column:
        def key(record: CheckRecord):
            parsed = parse_date_or_none(_column_value(record, column))
            return parsed.toordinal() if parsed is not None else 0
    elif column in NUMERIC_COLUMNS:
        def key(record: CheckRecord):
            return as_amount(_column_value(record, column)) or 0.0
    else:
        def key(record: CheckRecord):
            value = _column_value(record, column)
            return "" if value is None else str(value).lower()
    return key


def sort_checks(
    records: Iterable[CheckRecord],
    column: str,
    direction: Literal["asc", "desc"] = "asc",
) -> list[CheckRecord]:
    """Stable sort by a persisted column name or its Python attribute name."""
    if direction not in ("asc", "desc"):
        raise ValueError(f"Invalid sort direction: {direction}")
    key_name = FIELD_KEYS.get(column, column)
    return sorted(records, key=_sort_key(key_name), reverse=direction == "desc")
