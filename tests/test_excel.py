import os
import tempfile
from datetime import date

from openpyxl import load_workbook

from domain.checks import CheckRecord, CheckStatus
from domain.statistics import compute_stats

from utils.excel_utils import CHECK_HEADERS, export_checks_to_xlsx


def test_export_checks_to_xlsx():
    records = [
        CheckRecord(id=1, company_name="Acme Ltd", due_date="2024-06-01", amount_tl=100.0),
        CheckRecord(id=2, company_name="Zenith", amount_usd=50.0, status=CheckStatus.PAID),
    ]
    stats = compute_stats(records, date(2024, 6, 1))

    with tempfile.NamedTemporaryFile(delete=False, suffix=".xlsx") as tmp:
        tmp_path = tmp.name
    try:
        export_checks_to_xlsx(records, stats, tmp_path)
        wb = load_workbook(tmp_path, data_only=True)
        try:
            ws = wb["Checks"]
            assert [c.value for c in ws[1]] == CHECK_HEADERS
            assert ws.cell(2, 2).value == "Acme Ltd"
            assert ws.cell(2, 9).value == 100.0
            assert ws.cell(3, 10).value == "ÖDENDİ"
            summary = wb["Summary"]
            assert summary.cell(2, 2).value == 2
            assert summary.cell(12, 1).value == "TL"
            assert summary.cell(12, 3).value == 100.0
        finally:
            wb.close()
    finally:
        os.unlink(tmp_path)
