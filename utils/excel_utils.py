import logging
import os
from collections.abc import Sequence

from openpyxl import Workbook

from domain.checks import CheckRecord
from domain.reports import STATUS_LABELS
from domain.statistics import CheckStats

logger = logging.getLogger(__name__)

CHECK_HEADERS = [
    "id",
    "firma_adi",
    "cek_no",
    "banka",
    "cek_tanzim_tarihi",
    "vade_tarihi",
    "dolar",
    "euro",
    "tl",
    "odeme_durumu",
]


def export_checks_to_xlsx(records: Sequence[CheckRecord], stats: CheckStats, filepath: str) -> None:
    """Export checks and a summary sheet to XLSX. Read-only format."""
    wb = Workbook()
    ws = wb.active
    if ws is not None:
        ws.title = "Checks"
        ws.append(CHECK_HEADERS)
        for record in records:
            data = record.to_dict()
            ws.append([data.get(header) for header in CHECK_HEADERS])

    summary_ws = wb.create_sheet("Summary")
    summary_ws.append(["Metric", "Value"])
    summary_ws.append(["Total checks", stats.total])
    summary_ws.append([STATUS_LABELS["BEKLEMEDE"], stats.pending])
    summary_ws.append([STATUS_LABELS["ÖDENDİ"], stats.paid])
    summary_ws.append([STATUS_LABELS["İPTAL EDİLDİ"], stats.cancelled])
    summary_ws.append(["Due today", stats.today_checks])
    summary_ws.append(["Due in 7 days", stats.week_checks])
    summary_ws.append([])
    summary_ws.append(["Currency", "Total", "Pending"])
    summary_ws.append(["USD", round(stats.total_usd, 2), round(stats.pending_usd, 2)])
    summary_ws.append(["EUR", round(stats.total_eur, 2), round(stats.pending_eur, 2)])
    summary_ws.append(["TL", round(stats.total_tl, 2), round(stats.pending_tl, 2)])

    directory = os.path.dirname(filepath)
    if directory:
        os.makedirs(directory, exist_ok=True)
    wb.save(filepath)
    wb.close()
    logger.info("Exported %s checks to %s", len(records), filepath)
