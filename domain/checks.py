import logging
import math
from dataclasses import dataclass, field
from datetime import date as dt_date
from enum import Enum
from types import MappingProxyType
from typing import Any, Mapping

from .validation import parse_ymd

logger = logging.getLogger(__name__)


class CheckStatus(str, Enum):
    PAID = "ÖDENDİ"
    PENDING = "BEKLEMEDE"
    CANCELLED = "İPTAL EDİLDİ"

    @classmethod
    def lookup(cls, value: Any) -> "CheckStatus | None":
        """Exact match on the stored literal or the member name, else None."""
        if isinstance(value, cls):
            return value
        text = str(value or "").strip()
        for status in cls:
            if text == status.value or text.upper() == status.name:
                return status
        return None

    @classmethod
    def parse(cls, value: Any) -> "CheckStatus":
        if isinstance(value, cls):
            return value
        if not str(value or "").strip():
            return cls.PENDING
        status = cls.lookup(value)
        if status is not None:
            return status
        logger.warning("Unknown check status %r, treating as pending", value)
        return cls.PENDING

    @property
    def is_settled(self) -> bool:
        return self in (CheckStatus.PAID, CheckStatus.CANCELLED)


class Currency(str, Enum):
    USD = "USD"
    EUR = "EUR"
    TL = "TL"

    @property
    def attribute(self) -> str:
        return CURRENCY_ATTRIBUTES[self]

    @property
    def symbol(self) -> str:
        return CURRENCY_SYMBOLS[self]


CURRENCY_ATTRIBUTES = {
    Currency.USD: "amount_usd",
    Currency.EUR: "amount_eur",
    Currency.TL: "amount_tl",
}
CURRENCY_SYMBOLS = {Currency.USD: "$", Currency.EUR: "€", Currency.TL: "₺"}

# Python attribute -> persisted JSON key
FIELD_KEYS = {
    "id": "id",
    "company_name": "firma_adi",
    "check_number": "cek_no",
    "bank": "banka",
    "issue_date": "cek_tanzim_tarihi",
    "due_date": "vade_tarihi",
    "amount_usd": "dolar",
    "amount_eur": "euro",
    "amount_tl": "tl",
    "status": "odeme_durumu",
    "created_at": "createdAt",
    "updated_at": "updatedAt",
    "auto_updated_at": "autoUpdatedAt",
}
ATTRIBUTES_BY_KEY = {key: attr for attr, key in FIELD_KEYS.items()}
TIMESTAMP_FIELDS = ("created_at", "updated_at", "auto_updated_at")
DRAFT_FIELDS = tuple(attr for attr in FIELD_KEYS if attr != "id" and attr not in TIMESTAMP_FIELDS)


def as_amount(value: Any) -> float | None:
    """Coerce a stored amount; anything non-numeric or non-finite reads as absent."""
    if value is None or value == "" or isinstance(value, bool):
        return None
    try:
        amount = float(value)
    except (TypeError, ValueError):
        return None
    return amount if math.isfinite(amount) else None


def parse_date_or_none(value: Any) -> dt_date | None:
    """Parse an ISO date (a full timestamp is cut to its date part)."""
    if isinstance(value, dt_date):
        return value
    text = str(value or "").strip()
    if not text:
        return None
    try:
        return parse_ymd(text[:10])
    except ValueError:
        return None


def _optional_str(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


@dataclass(frozen=True)
class CheckRecord:
    id: int
    company_name: str = ""
    check_number: str | None = None
    bank: str | None = None
    issue_date: str | None = None
    due_date: str | None = None
    amount_usd: float | None = None
    amount_eur: float | None = None
    amount_tl: float | None = None
    status: CheckStatus = CheckStatus.PENDING
    created_at: str | None = None
    updated_at: str | None = None
    auto_updated_at: str | None = None
    # read-only view over a private copy of unknown JSON keys
    extra: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        try:
            check_id = int(self.id)
        except (TypeError, ValueError) as exc:
            raise ValueError("id must be an integer") from exc
        if check_id <= 0:
            raise ValueError("id must be a positive integer")
        object.__setattr__(self, "id", check_id)
        object.__setattr__(self, "company_name", str(self.company_name or ""))
        object.__setattr__(self, "status", CheckStatus.parse(self.status))
        for attr in ("amount_usd", "amount_eur", "amount_tl"):
            object.__setattr__(self, attr, as_amount(getattr(self, attr)))
        for attr in ("check_number", "bank", "issue_date", "due_date"):
            object.__setattr__(self, attr, _optional_str(getattr(self, attr)))
        object.__setattr__(self, "extra", MappingProxyType(dict(self.extra or {})))

    @property
    def is_pending(self) -> bool:
        return not self.status.is_settled

    @property
    def due(self) -> dt_date | None:
        return parse_date_or_none(self.due_date)

    def amount_in(self, currency: Currency | str) -> float:
        value = getattr(self, Currency(currency).attribute)
        return value if value is not None else 0.0

    def max_amount(self) -> float:
        amounts = [a for a in (self.amount_usd, self.amount_eur, self.amount_tl) if a is not None]
        return max(amounts) if amounts else 0.0

    def primary_amount(self) -> tuple[float, Currency]:
        """First populated amount in USD, EUR, TL order."""
        for currency in Currency:
            value = getattr(self, currency.attribute)
            if value:
                return value, currency
        return 0.0, Currency.TL

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {}
        for attr, key in FIELD_KEYS.items():
            value = getattr(self, attr)
            if attr in TIMESTAMP_FIELDS and value is None:
                continue
            if attr == "status":
                value = value.value
            payload[key] = value
        for key, value in self.extra.items():
            payload.setdefault(key, value)
        return payload

    @classmethod
    def from_dict(cls, item: dict[str, Any]) -> "CheckRecord":
        values = {attr: item.get(key) for key, attr in ATTRIBUTES_BY_KEY.items() if key in item}
        extra = {key: value for key, value in item.items() if key not in ATTRIBUTES_BY_KEY}
        return cls(**values, extra=extra)
