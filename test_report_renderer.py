"""Tests for xlsx/pdf report rendering."""
import re
from datetime import datetime, timezone
from io import BytesIO
from zoneinfo import ZoneInfo

import pytest
from openpyxl import load_workbook

from app.core.exceptions import ValidationError
from app.services.aggregation import FlatInterval
from app.services.report_renderer import (
    FORMAT_PDF,
    FORMAT_XLSX,
    IN_PROGRESS,
    NOT_AVAILABLE,
    format_timestamp,
    render_report,
    validate_format,
)

UTC = timezone.utc

ROWS = [
    FlatInterval("bravo", datetime(2024, 1, 3, 9, tzinfo=UTC), None),
    FlatInterval("alpha", datetime(2024, 1, 2, 8, tzinfo=UTC),
                 datetime(2024, 1, 2, 16, 30, tzinfo=UTC)),
]


class TestValidateFormat:
    @pytest.mark.parametrize("value", ["xlsx", "XLSX", " pdf "])
    def test_accepted(self, value):
        assert validate_format(value) in (FORMAT_XLSX, FORMAT_PDF)

    @pytest.mark.parametrize("value", [None, "", "csv", "docx"])
    def test_rejected(self, value):
        with pytest.raises(ValidationError):
            validate_format(value)


class TestXlsx:
    def load(self, rows, tz=UTC):
        export = render_report("xlsx", rows, tz)
        assert export.filename == "relatorio.xlsx"
        assert export.media_type.endswith("spreadsheetml.sheet")
        return load_workbook(BytesIO(export.content)).active

    def test_header_and_rows(self):
        sheet = self.load(ROWS)
        values = [list(r) for r in sheet.iter_rows(values_only=True)]
        assert sheet.title == "Relatório"
        assert values[0] == ["Usuário", "Entrada", "Saída", "Duração (h)"]
        assert values[1] == ["bravo", "03/01/2024 09:00:00", IN_PROGRESS, NOT_AVAILABLE]
        assert values[2] == ["alpha", "02/01/2024 08:00:00", "02/01/2024 16:30:00", "8.50"]

    def test_timestamps_in_local_zone(self):
        sheet = self.load(ROWS[1:], ZoneInfo("America/Sao_Paulo"))
        assert sheet["B2"].value == "02/01/2024 05:00:00"

    def test_empty_report_has_header_only(self):
        assert self.load([]).max_row == 1


class TestPdf:
    def test_is_pdf(self):
        export = render_report("pdf", ROWS, UTC)
        assert export.filename == "relatorio.pdf"
        assert export.media_type == "application/pdf"
        assert export.content.startswith(b"%PDF")

    def test_many_rows_span_pages(self):
        rows = ROWS * 150
        content = render_report("pdf", rows, UTC).content
        page_counts = [int(n) for n in re.findall(rb"/Count (\d+)", content)]
        assert max(page_counts) > 1

    def test_markup_in_username_is_escaped(self):
        rows = [FlatInterval("<b>&co", datetime(2024, 1, 2, 8, tzinfo=UTC), None)]
        assert render_report("pdf", rows, UTC).content.startswith(b"%PDF")


def test_format_timestamp():
    assert format_timestamp(datetime(2024, 12, 31, 23, 59, 5, tzinfo=UTC), UTC) == "31/12/2024 23:59:05"
