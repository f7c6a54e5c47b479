"""
Service: Report rendering — serialises flattened intervals to xlsx or pdf.
"""
from datetime import datetime, tzinfo
from io import BytesIO
from typing import Iterable, NamedTuple, Optional

from openpyxl import Workbook
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.platypus import HRFlowable, Paragraph, SimpleDocTemplate, Spacer

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.services.aggregation import MS_PER_HOUR, FlatInterval

FORMAT_XLSX = "xlsx"
FORMAT_PDF = "pdf"
SUPPORTED_FORMATS = (FORMAT_XLSX, FORMAT_PDF)

IN_PROGRESS = "Em serviço"
NOT_AVAILABLE = "N/A"
REPORT_TITLE = "Relatório de Pontos"

XLSX_COLUMNS = (
    ("Usuário", 30),
    ("Entrada", 25),
    ("Saída", 25),
    ("Duração (h)", 15),
)


class ExportFile(NamedTuple):
    media_type: str
    filename: str
    content: bytes


def format_timestamp(ts: datetime, tz: tzinfo) -> str:
    return ts.astimezone(tz).strftime("%d/%m/%Y %H:%M:%S")


def format_hours(row: FlatInterval) -> Optional[str]:
    duration = row.duration_ms
    if duration is None:
        return None
    return f"{duration / MS_PER_HOUR:.2f}"


def validate_format(fmt: Optional[str]) -> str:
    fmt = (fmt or "").strip().lower()
    if fmt not in SUPPORTED_FORMATS:
        raise ValidationError(f"Unsupported export format {fmt!r}; use one of {SUPPORTED_FORMATS}")
    return fmt


def render_xlsx(rows: Iterable[FlatInterval], tz: tzinfo) -> bytes:
    workbook = Workbook()
    sheet = workbook.active
    sheet.title = "Relatório"
    sheet.append([header for header, _ in XLSX_COLUMNS])
    for letter, (_, width) in zip("ABCD", XLSX_COLUMNS):
        sheet.column_dimensions[letter].width = width

    for row in rows:
        sheet.append([
            row.username,
            format_timestamp(row.entrada, tz),
            format_timestamp(row.saida, tz) if row.saida else IN_PROGRESS,
            format_hours(row) or NOT_AVAILABLE,
        ])

    output = BytesIO()
    workbook.save(output)
    return output.getvalue()


def render_pdf(rows: Iterable[FlatInterval], tz: tzinfo) -> bytes:
    output = BytesIO()
    doc = SimpleDocTemplate(
        output, pagesize=A4,
        leftMargin=30, rightMargin=30, topMargin=30, bottomMargin=30,
        title=REPORT_TITLE,
    )
    styles = getSampleStyleSheet()
    title_style = ParagraphStyle("ReportTitle", parent=styles["Title"], fontSize=18)
    body_style = ParagraphStyle("ReportBody", parent=styles["Normal"], fontSize=10, leading=14)

    story = [Paragraph(REPORT_TITLE, title_style), Spacer(1, 24)]
    for row in rows:
        hours_text = format_hours(row)
        lines = [
            f"Usuário: {row.username}",
            f"Entrada: {format_timestamp(row.entrada, tz)}",
            f"Saída: {format_timestamp(row.saida, tz) if row.saida else NOT_AVAILABLE}",
            f"Duração: {hours_text + 'h' if hours_text else IN_PROGRESS}",
        ]
        story.append(Paragraph("<br/>".join(_escape(line) for line in lines), body_style))
        story.append(HRFlowable(width="100%", thickness=0.5, color=colors.HexColor("#dddddd"),
                                spaceBefore=4, spaceAfter=10))
    doc.build(story)
    return output.getvalue()


def _escape(text: str) -> str:
    return text.replace("&", "&amp;").replace("<", "&lt;").replace(">", "&gt;")


def render_report(fmt: str, rows: Iterable[FlatInterval],
                  tz: Optional[tzinfo] = None) -> ExportFile:
    fmt = validate_format(fmt)
    zone = tz or settings.tz
    if fmt == FORMAT_XLSX:
        return ExportFile(
            media_type="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
            filename="relatorio.xlsx",
            content=render_xlsx(rows, zone),
        )
    return ExportFile(
        media_type="application/pdf",
        filename="relatorio.pdf",
        content=render_pdf(rows, zone),
    )
