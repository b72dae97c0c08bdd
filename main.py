import argparse
import logging
import os
import sys
from pathlib import Path

# Ensure project package root is on sys.path so imports work regardless of CWD
_ROOT = Path(__file__).resolve().parent
if str(_ROOT) not in sys.path:
    sys.path.insert(0, str(_ROOT))

from app.check_store import CheckStore  # noqa: E402
from app.notifications import NotificationService, ReminderMessage  # noqa: E402
from bootstrap import bootstrap_store, build_settings  # noqa: E402
from config import UPCOMING_DAYS  # noqa: E402
from domain.checks import CheckStatus  # noqa: E402
from domain.errors import DomainError  # noqa: E402
from domain.reports import CheckReport, stats_table  # noqa: E402
from domain.validation import validate_check_draft  # noqa: E402
from utils.backup_utils import export_filename, read_import_file, write_export  # noqa: E402
from utils.excel_utils import export_checks_to_xlsx  # noqa: E402

logger = logging.getLogger(__name__)

DRAFT_OPTIONS = {
    "company": "company_name",
    "check_no": "check_number",
    "bank": "bank",
    "issue": "issue_date",
    "due": "due_date",
    "usd": "amount_usd",
    "eur": "amount_eur",
    "tl": "amount_tl",
    "status": "status",
}


class ConsoleSender:
    """Prints reminders instead of dispatching them."""

    def send(self, message: ReminderMessage) -> None:
        print(f"Subject: {message.subject}")
        print(message.check_list)
        if message.total_amount:
            print(f"Total: {message.total_amount}")


def _add_draft_arguments(parser: argparse.ArgumentParser, *, require_company: bool) -> None:
    parser.add_argument("--company", required=require_company, help="Company name")
    parser.add_argument("--check-no", dest="check_no")
    parser.add_argument("--bank")
    parser.add_argument("--issue", help="Issue date YYYY-MM-DD")
    parser.add_argument("--due", help="Due date YYYY-MM-DD")
    parser.add_argument("--usd", type=float)
    parser.add_argument("--eur", type=float)
    parser.add_argument("--tl", type=float)
    parser.add_argument("--status", choices=[s.name for s in CheckStatus])


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="cek-takip", description="Post-dated check tracking")
    parser.add_argument("--settings", help="Settings JSON path")
    parser.add_argument("--data", help="Local fallback snapshot path")
    parser.add_argument("-v", "--verbose", action="store_true")
    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="Search, filter and sort checks")
    list_parser.add_argument("--query", default="")
    list_parser.add_argument("--status", choices=[s.name for s in CheckStatus])
    list_parser.add_argument("--currency", choices=["USD", "EUR", "TL"])
    list_parser.add_argument("--bank")
    list_parser.add_argument("--min", dest="min_amount", type=float)
    list_parser.add_argument("--max", dest="max_amount", type=float)
    list_parser.add_argument("--sort", default="vade_tarihi")
    list_parser.add_argument("--desc", action="store_true")

    sub.add_parser("stats", help="Show statistics")
    upcoming = sub.add_parser("upcoming", help="Pending checks due soon")
    upcoming.add_argument("--days", type=int, default=UPCOMING_DAYS)
    sub.add_parser("overdue", help="Pending checks past their due date")

    add = sub.add_parser("add", help="Add a check")
    _add_draft_arguments(add, require_company=True)
    update = sub.add_parser("update", help="Update a check")
    update.add_argument("id", type=int)
    _add_draft_arguments(update, require_company=False)

    for name in ("pay", "cancel", "delete"):
        cmd = sub.add_parser(name, help=f"{name.capitalize()} a check")
        cmd.add_argument("id", type=int)

    sub.add_parser("sweep", help="Mark overdue pending checks as paid")

    banks = sub.add_parser("banks", help="List or edit custom banks")
    banks.add_argument("--add")
    banks.add_argument("--remove")

    export = sub.add_parser("export", help="Export checks to JSON")
    export.add_argument("--output")
    export_xlsx = sub.add_parser("export-xlsx", help="Export checks to XLSX")
    export_xlsx.add_argument("output")
    import_parser = sub.add_parser("import", help="Replace all checks from a JSON export")
    import_parser.add_argument("path")

    notify = sub.add_parser("notify", help="Print the due-date reminder")
    notify.add_argument("--test", action="store_true")
    return parser


def _draft_from_args(args: argparse.Namespace) -> dict:
    draft = {}
    for option, attr in DRAFT_OPTIONS.items():
        value = getattr(args, option, None)
        if value is None:
            continue
        if attr == "status":
            value = CheckStatus[value]
        draft[attr] = value
    return draft


def run_command(args: argparse.Namespace, store: CheckStore) -> int:
    command = args.command
    if command == "list":
        filters = {
            "status": CheckStatus[args.status] if args.status else None,
            "currency": args.currency,
            "bank": args.bank,
            "min_amount": args.min_amount,
            "max_amount": args.max_amount,
        }
        records = store.sort(store.search(args.query, filters), args.sort, "desc" if args.desc else "asc")
        print(CheckReport(records).as_table())
    elif command == "stats":
        print(stats_table(store.get_stats()))
    elif command == "upcoming":
        print(CheckReport(store.get_upcoming(args.days)).as_table())
    elif command == "overdue":
        print(CheckReport(store.get_overdue()).as_table())
    elif command == "add":
        draft = _draft_from_args(args)
        validate_check_draft(draft)
        record = store.add(draft)
        print(f"Check #{record.id} added")
    elif command == "update":
        patch = _draft_from_args(args)
        current = store.get_by_id(args.id)
        if current is not None:
            merged = {
                "company_name": current.company_name,
                "issue_date": current.issue_date,
                "due_date": current.due_date,
                "amount_usd": current.amount_usd,
                "amount_eur": current.amount_eur,
                "amount_tl": current.amount_tl,
                **patch,
            }
            validate_check_draft(merged)
        if store.update(args.id, patch) is None:
            print(f"Check #{args.id} not found")
            return 1
        print(f"Check #{args.id} updated")
    elif command in ("pay", "cancel"):
        status = CheckStatus.PAID if command == "pay" else CheckStatus.CANCELLED
        if store.update(args.id, {"status": status}) is None:
            print(f"Check #{args.id} not found")
            return 1
        print(f"Check #{args.id} marked {status.value}")
    elif command == "delete":
        if not store.delete(args.id):
            print(f"Check #{args.id} not found")
            return 1
        print(f"Check #{args.id} deleted")
    elif command == "sweep":
        print(f"{store.sweep_auto_status()} checks marked as paid")
    elif command == "banks":
        if args.add:
            added = store.add_custom_bank(args.add)
            print(f"Bank added: {added}" if added else "Bank already known")
        if args.remove:
            removed = store.remove_custom_bank(args.remove)
            print("Bank removed" if removed else "Bank not in custom list")
        for name in store.get_banks():
            print(name)
    elif command == "export":
        path = args.output or os.path.join(os.getcwd(), export_filename(store.today()))
        write_export(store.export_snapshot(), path)
        print(f"Exported to {path}")
    elif command == "export-xlsx":
        export_checks_to_xlsx(store.get_all(), store.get_stats(), args.output)
        print(f"Exported to {args.output}")
    elif command == "import":
        count = store.import_snapshot(read_import_file(args.path))
        print(f"{count} checks imported")
    elif command == "notify":
        service = NotificationService(store, ConsoleSender(), build_settings(args.settings))
        if args.test:
            service.send_test()
        elif not service.notify_due_checks():
            print("No reminder sent")
    return 0


def main(argv: list[str] | None = None, store: CheckStore | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
    try:
        if store is None:
            store = bootstrap_store(args.settings, args.data)
        return run_command(args, store)
    except (DomainError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
