from collections.abc import Iterable

from .checks import CheckRecord


def normalize_bank_name(name: str) -> str:
    return str(name or "").strip().upper()


class BankDirectory:
    """Known bank names: baseline, user-added and those seen on records."""

    def __init__(self, baseline: Iterable[str], custom: Iterable[str] = ()) -> None:
        self._baseline = tuple(baseline)
        self._custom = sorted({normalize_bank_name(n) for n in custom if normalize_bank_name(n)})

    @property
    def custom(self) -> list[str]:
        return list(self._custom)

    def add_custom(self, name: str) -> str | None:
        normalized = normalize_bank_name(name)
        if not normalized or normalized in self._custom:
            return None
        self._custom.append(normalized)
        self._custom.sort()
        return normalized

    def remove_custom(self, name: str) -> bool:
        normalized = normalize_bank_name(name)
        if normalized not in self._custom:
            return False
        self._custom.remove(normalized)
        return True

    def restore_custom(self, names: Iterable[str]) -> None:
        self._custom = list(names)

    def all_banks(self, records: Iterable[CheckRecord]) -> list[str]:
        names = set(self._baseline) | set(self._custom)
        names.update(record.bank for record in records if record.bank)
        return sorted(names)
