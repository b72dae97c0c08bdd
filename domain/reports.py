from collections.abc import Iterable

from prettytable import PrettyTable

from .checks import CheckRecord, Currency, parse_date_or_none
from .statistics import CheckStats

STATUS_LABELS = {
    "ÖDENDİ": "Paid",
    "BEKLEMEDE": "Pending",
    "İPTAL EDİLDİ": "Cancelled",
}


def _fmt_amount(value: float | None) -> str:
    return "-" if value is None else f"{value:,.2f}"


def _fmt_date(value: str | None) -> str:
    parsed = parse_date_or_none(value)
    return parsed.strftime("%d.%m.%Y") if parsed is not None else "-"


class CheckReport:
    def __init__(self, records: Iterable[CheckRecord]):
        self._records = list(records)

    def records(self) -> list[CheckRecord]:
        return list(self._records)

    def totals(self) -> dict[Currency, float]:
        return {currency: sum(r.amount_in(currency) for r in self._records) for currency in Currency}

    def as_table(self) -> str:
        table = PrettyTable()
        table.field_names = ["ID", "Company", "Check No", "Bank", "Issued", "Due", "USD", "EUR", "TL", "Status"]
        table.align["Company"] = "l"
        table.align["Bank"] = "l"
        for column in ("USD", "EUR", "TL"):
            table.align[column] = "r"

        for record in self._records:
            table.add_row(
                [
                    record.id,
                    record.company_name,
                    record.check_number or "-",
                    record.bank or "-",
                    _fmt_date(record.issue_date),
                    _fmt_date(record.due_date),
                    _fmt_amount(record.amount_usd),
                    _fmt_amount(record.amount_eur),
                    _fmt_amount(record.amount_tl),
                    STATUS_LABELS.get(record.status.value, record.status.value),
                ]
            )

        totals = self.totals()
        table.add_row(
            [
                "",
                f"TOTAL ({len(self._records)})",
                "",
                "",
                "",
                "",
                f"{totals[Currency.USD]:,.2f}",
                f"{totals[Currency.EUR]:,.2f}",
                f"{totals[Currency.TL]:,.2f}",
                "",
            ],
            divider=True,
        )
        return str(table)


def stats_table(stats: CheckStats) -> str:
    counts = PrettyTable()
    counts.field_names = ["Total", "Pending", "Paid", "Cancelled", "Due today", "Due in 7 days"]
    counts.add_row([stats.total, stats.pending, stats.paid, stats.cancelled, stats.today_checks, stats.week_checks])

    amounts = PrettyTable()
    amounts.field_names = ["Currency", "Total", "Pending"]
    amounts.align["Total"] = "r"
    amounts.align["Pending"] = "r"
    amounts.add_row(["USD", f"{stats.total_usd:,.2f}", f"{stats.pending_usd:,.2f}"])
    amounts.add_row(["EUR", f"{stats.total_eur:,.2f}", f"{stats.pending_eur:,.2f}"])
    amounts.add_row(["TL", f"{stats.total_tl:,.2f}", f"{stats.pending_tl:,.2f}"])
    return f"{counts}\n{amounts}"
