"""
PDF rendering with reportlab.

Two layouts:
- the weekly compliance report (store payroll/clock-in statuses grouped by
  area), built from the payload the compliance workflow posts to the API;
- the weekly performance report (KPIs + narrative), built from the same
  inputs as the HTML email.

Both use platypus flowables for content and canvas callbacks for the
running header and the "Page N of M" footer.
"""

import io
import logging
import re
from typing import TYPE_CHECKING, Any
from xml.etree import ElementTree
from xml.sax.saxutils import escape

import pandas as pd
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_JUSTIFY
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.pdfgen import canvas as pdf_canvas
from reportlab.platypus import (
    KeepTogether,
    PageBreak,
    Paragraph,
    SimpleDocTemplate,
    Spacer,
    Table,
    TableStyle,
)

from src.agents.utils import format_currency, format_millions, format_number

from .markdown import markdown_to_html

if TYPE_CHECKING:
    from src.agents.analysis.metrics import WeeklyKPIs

logger = logging.getLogger("weekly_report.rendering")

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 50
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

COMPANY_NAME = "Cards Direct"
FOOTER_TEXT = "Generated automatically by Weekly Report Automation System"

NAVY = colors.HexColor("#003366")
GREEN = colors.HexColor("#28A745")
AMBER = colors.HexColor("#FFC107")
RED = colors.HexColor("#DC3545")
MUTED = colors.HexColor("#666666")
FAINT = colors.HexColor("#999999")
RULE = colors.HexColor("#CCCCCC")
GRID = colors.HexColor("#DDDDDD")

ROW_RED = colors.HexColor("#FFE5E5")
ROW_YELLOW = colors.HexColor("#FFF9E5")
ROW_ALT = colors.HexColor("#F9F9F9")
BOX_FILL = colors.HexColor("#F5F5F5")
AREA_BOX_FILL = colors.HexColor("#F8F9FA")

STATUS_ORDER = {"RED": 0, "YELLOW": 1, "GREEN": 2}
STORE_COLUMNS = ["Store Name", "Budget (hrs)", "Worked (hrs)", "Variance %", "Status"]
STORE_COL_WIDTHS = [175, 80, 80, 80, 80]
ACTION_LIST_LIMIT = 10


# =============================================================================
# Shared helpers
# =============================================================================


def fmt(value: Any, decimals: int = 1) -> str:
    """Fixed-decimal number, or "N/A" for missing values."""
    if value is None:
        return "N/A"
    try:
        number = float(value)
    except (TypeError, ValueError):
        return "N/A"
    if pd.isna(number):
        return "N/A"
    return f"{number:.{decimals}f}"


def _styles() -> dict[str, ParagraphStyle]:
    base = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "ReportTitle", parent=base["Title"], fontName="Helvetica-Bold",
            fontSize=32, leading=38, textColor=NAVY, alignment=TA_CENTER,
        ),
        "subtitle": ParagraphStyle(
            "ReportSubtitle", parent=base["Title"], fontName="Helvetica-Bold",
            fontSize=24, leading=30, textColor=colors.black, alignment=TA_CENTER,
        ),
        "date": ParagraphStyle(
            "ReportDate", parent=base["Normal"], fontName="Helvetica",
            fontSize=14, leading=18, alignment=TA_CENTER,
        ),
        "h1": ParagraphStyle(
            "H1", parent=base["Heading1"], fontName="Helvetica-Bold",
            fontSize=18, leading=22, textColor=NAVY, spaceAfter=12,
        ),
        "h2": ParagraphStyle(
            "H2", parent=base["Heading2"], fontName="Helvetica-Bold",
            fontSize=16, leading=20, textColor=NAVY, spaceAfter=8,
        ),
        "h3": ParagraphStyle(
            "H3", parent=base["Heading3"], fontName="Helvetica-Bold",
            fontSize=12, leading=15, spaceBefore=6, spaceAfter=6,
        ),
        "body": ParagraphStyle(
            "Body", parent=base["Normal"], fontName="Helvetica",
            fontSize=10, leading=14, alignment=TA_JUSTIFY, spaceAfter=6,
        ),
        "bullet": ParagraphStyle(
            "Bullet", parent=base["Normal"], fontName="Helvetica",
            fontSize=10, leading=14, leftIndent=14, bulletIndent=4, spaceAfter=3,
        ),
        "small": ParagraphStyle(
            "Small", parent=base["Normal"], fontName="Helvetica",
            fontSize=9, leading=12, spaceAfter=3,
        ),
        "box": ParagraphStyle(
            "Box", parent=base["Normal"], fontName="Helvetica",
            fontSize=12, leading=18, alignment=TA_CENTER,
        ),
        "box_title": ParagraphStyle(
            "BoxTitle", parent=base["Normal"], fontName="Helvetica-Bold",
            fontSize=16, leading=22, alignment=TA_CENTER,
        ),
        "cell": ParagraphStyle(
            "Cell", parent=base["Normal"], fontName="Helvetica",
            fontSize=8, leading=10,
        ),
    }


def _colored(text: str, color: colors.Color) -> str:
    return f'<font color="{color.hexval().replace("0x", "#")}">{escape(text)}</font>'


class NumberedCanvas(pdf_canvas.Canvas):
    """Canvas that defers footers until the total page count is known."""

    footer_text = FOOTER_TEXT

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._saved_page_states: list[dict] = []

    def showPage(self):
        self._saved_page_states.append(dict(self.__dict__))
        self._startPage()

    def save(self):
        total = len(self._saved_page_states)
        for state in self._saved_page_states:
            self.__dict__.update(state)
            self._draw_footer(total)
            super().showPage()
        super().save()

    def _draw_footer(self, total: int) -> None:
        self.saveState()
        self.setFont("Helvetica", 8)
        self.setFillColor(FAINT)
        self.drawCentredString(
            PAGE_WIDTH / 2, 40, f"Page {self._pageNumber} of {total}"
        )
        self.drawCentredString(PAGE_WIDTH / 2, 30, self.footer_text)
        self.restoreState()


def _header_callback(left: str, right: str):
    """Running header drawn on every page after the title page."""

    def _draw(canvas, doc) -> None:
        canvas.saveState()
        canvas.setFont("Helvetica", 8)
        canvas.setFillColor(MUTED)
        canvas.drawString(MARGIN, PAGE_HEIGHT - 38, left)
        canvas.drawRightString(PAGE_WIDTH - MARGIN, PAGE_HEIGHT - 38, right)
        canvas.setStrokeColor(RULE)
        canvas.line(MARGIN, PAGE_HEIGHT - 45, PAGE_WIDTH - MARGIN, PAGE_HEIGHT - 45)
        canvas.restoreState()

    return _draw


def _build(story: list, title: str, subject: str, header_left: str, header_right: str) -> bytes:
    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        leftMargin=MARGIN,
        rightMargin=MARGIN,
        topMargin=60,
        bottomMargin=60,
        title=title,
        author=f"{COMPANY_NAME} - Automated System",
        subject=subject,
    )
    doc.build(
        story,
        onLaterPages=_header_callback(header_left, header_right),
        canvasmaker=NumberedCanvas,
    )
    return buffer.getvalue()


def _box(rows: list, fill: colors.Color, width: float) -> Table:
    table = Table([[r] for r in rows], colWidths=[width])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, -1), fill),
        ("BOX", (0, 0), (-1, -1), 0.75, RULE),
        ("TOPPADDING", (0, 0), (-1, -1), 4),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 4),
        ("LEFTPADDING", (0, 0), (-1, -1), 10),
    ]))
    return table


# =============================================================================
# Compliance report
# =============================================================================


def format_week_of(report_date: Any) -> str:
    """"dd/mm/yyyy" for the report date, or the raw value if unparseable."""
    parsed = pd.to_datetime(report_date, errors="coerce")
    if parsed is None or pd.isna(parsed):
        return str(report_date) if report_date else "N/A"
    return parsed.strftime("%d/%m/%Y")


_FILENAME_UNSAFE_RE = re.compile(r"[^0-9A-Za-z-]")


def compliance_pdf_filename(report_date: Any) -> str:
    """Download name for the compliance PDF; header-safe ASCII only."""
    day = str(report_date).split("T")[0] if report_date else ""
    day = _FILENAME_UNSAFE_RE.sub("", day) or "latest"
    return f"weekly-compliance-report-{day}.pdf"


def status_counts(stores: list[dict]) -> dict[str, int]:
    """Count stores per overall_status (RED/YELLOW/GREEN)."""
    counts = {"RED": 0, "YELLOW": 0, "GREEN": 0}
    if not stores:
        return counts
    observed = pd.Series([s.get("overall_status") for s in stores]).value_counts()
    for status in counts:
        counts[status] = int(observed.get(status, 0))
    return counts


def sort_stores_by_status(stores: list[dict]) -> list[dict]:
    """RED first, then YELLOW, then GREEN; original order within a status."""
    return sorted(
        stores,
        key=lambda s: STATUS_ORDER.get(s.get("overall_status"), len(STATUS_ORDER)),
    )


def _pct(count: int, total: int) -> str:
    return f"{(count / total * 100) if total else 0:.1f}%"


def status_lines(stores: list[dict]) -> list[str]:
    """Overall-status box lines: total, then GREEN/YELLOW/RED counts with shares."""
    counts = status_counts(stores)
    total = len(stores)
    return [
        f"Total Stores: {total}",
        f"Compliant (GREEN): {counts['GREEN']} ({_pct(counts['GREEN'], total)})",
        f"Warnings (YELLOW): {counts['YELLOW']} ({_pct(counts['YELLOW'], total)})",
        f"Critical (RED): {counts['RED']} ({_pct(counts['RED'], total)})",
    ]


def _title_page(report: dict, styles: dict, week_of: str) -> list:
    total_line, *status_counts_lines = status_lines(report.get("all_stores") or [])

    status_box = _box(
        [
            Paragraph("Overall Status", styles["box_title"]),
            Paragraph(total_line, styles["box"]),
            *(
                Paragraph(_colored(line, color), styles["box"])
                for line, color in zip(status_counts_lines, (GREEN, AMBER, RED))
            ),
        ],
        BOX_FILL,
        295,
    )

    return [
        Spacer(1, 140),
        Paragraph(COMPANY_NAME.upper(), styles["title"]),
        Spacer(1, 10),
        Paragraph("Weekly Compliance Report", styles["subtitle"]),
        Spacer(1, 10),
        Paragraph(f"Week of {week_of}", styles["date"]),
        Spacer(1, 36),
        status_box,
        PageBreak(),
    ]


def _summary_page(report: dict, styles: dict) -> list:
    story = [Paragraph("Executive Summary", styles["h1"])]
    summary = report.get("executive_summary") or "No summary available"
    for line in summary.split("\n"):
        if line.strip():
            story.append(Paragraph(escape(line.strip()), styles["body"]))
    story.append(PageBreak())
    return story


def store_table_data(stores: list[dict]) -> tuple[list[list[str]], list[tuple]]:
    """Store table cells (header first) and their row-background commands.

    Rows are sorted RED, YELLOW, GREEN. RED and YELLOW rows are tinted;
    other rows alternate with a light grey.
    """
    rows: list[list[str]] = [list(STORE_COLUMNS)]
    backgrounds: list[tuple] = [("BACKGROUND", (0, 0), (-1, 0), NAVY)]

    for idx, store in enumerate(sort_stores_by_status(stores)):
        status = store.get("overall_status") or "UNKNOWN"
        variance = fmt(store.get("payroll_variance_pct"))
        rows.append([
            str(store.get("store_name") or "Unknown"),
            fmt(store.get("budget_hours")),
            fmt(store.get("worked_hours")),
            f"{variance}%" if variance != "N/A" else "N/A",
            status,
        ])

        row = idx + 1
        if status == "RED":
            backgrounds.append(("BACKGROUND", (0, row), (-1, row), ROW_RED))
        elif status == "YELLOW":
            backgrounds.append(("BACKGROUND", (0, row), (-1, row), ROW_YELLOW))
        elif idx % 2 == 0:
            backgrounds.append(("BACKGROUND", (0, row), (-1, row), ROW_ALT))

    return rows, backgrounds


def _store_table(stores: list[dict], styles: dict) -> Table:
    rows, backgrounds = store_table_data(stores)
    cells = [rows[0]] + [
        [Paragraph(escape(row[0]), styles["cell"]), *row[1:]] for row in rows[1:]
    ]
    commands: list[tuple] = [
        *backgrounds,
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 9),
        ("FONTSIZE", (0, 1), (-1, -1), 8),
        ("ALIGN", (1, 0), (-1, -1), "CENTER"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("GRID", (0, 0), (-1, -1), 0.5, GRID),
    ]

    table = Table(cells, colWidths=STORE_COL_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle(commands))
    return table


def _area_page(area: dict, index: int, styles: dict) -> list:
    stores = area.get("stores") or []
    label = f"Area {area.get('area_id') or index + 1}: {area.get('area') or 'Unknown Area'}"

    summary_box = _box(
        [
            Paragraph(f"Stores in Area: {len(stores)}", styles["body"]),
            Paragraph(
                f"Total Payroll Variance: {fmt(area.get('area_payroll_variance'))} hours "
                f"({fmt(area.get('area_payroll_variance_pct'))}%)",
                styles["body"],
            ),
            Paragraph(
                f"Average Manual Clock-ins: {fmt(area.get('area_manual_clock_pct'))}%",
                styles["body"],
            ),
            Paragraph(
                "Status Distribution: "
                + _colored(f"{area.get('red_flags') or 0} RED", RED) + "  "
                + _colored(f"{area.get('yellow_flags') or 0} YELLOW", AMBER) + "  "
                + _colored(f"{area.get('green_flags') or 0} GREEN", GREEN),
                styles["body"],
            ),
        ],
        AREA_BOX_FILL,
        CONTENT_WIDTH,
    )

    return [
        Paragraph(escape(label), styles["h2"]),
        summary_box,
        Spacer(1, 16),
        Paragraph("Store Performance Details", styles["h3"]),
        _store_table(stores, styles),
        PageBreak(),
    ]


def action_lines(stores: list[dict], detail: str) -> list[str]:
    """Numbered action lines for at most ACTION_LIST_LIMIT stores, plus a remainder line."""
    lines = [
        f"{i}. {store.get('store_name')}: {fmt(store.get('payroll_variance_pct'))}% "
        f"{detail}, {fmt(store.get('manual_clock_pct'))}% manual clocks"
        for i, store in enumerate(stores[:ACTION_LIST_LIMIT], start=1)
    ]
    if len(stores) > ACTION_LIST_LIMIT:
        lines.append(f"... and {len(stores) - ACTION_LIST_LIMIT} more stores")
    return lines


def _action_list(
    stores: list[dict], heading: str, color: colors.Color, detail: str, styles: dict
) -> list:
    if not stores:
        return []

    items = [
        Paragraph(_colored(f"{heading} ({len(stores)} stores)", color), styles["h3"]),
        *(Paragraph(escape(line), styles["small"]) for line in action_lines(stores, detail)),
        Spacer(1, 12),
    ]
    return [KeepTogether(items[:3]), *items[3:]]


def _actions_page(report: dict, styles: dict) -> list:
    stores = report.get("all_stores") or []
    red = [s for s in stores if s.get("overall_status") == "RED"]
    yellow = [s for s in stores if s.get("overall_status") == "YELLOW"]

    return [
        Paragraph("Action Items &amp; Priorities", styles["h1"]),
        *_action_list(red, "Critical Issues", RED, "over budget", styles),
        *_action_list(yellow, "Warnings", AMBER, "variance", styles),
    ]


def build_compliance_pdf(report: dict) -> bytes:
    """Render the weekly compliance report.

    Args:
        report: Workflow payload with report_date, executive_summary,
            areas (each with stores), and all_stores.

    Returns:
        PDF bytes.
    """
    styles = _styles()
    week_of = format_week_of(report.get("report_date"))

    story: list = []
    story += _title_page(report, styles, week_of)
    story += _summary_page(report, styles)
    for index, area in enumerate(report.get("areas") or []):
        story += _area_page(area, index, styles)
    story += _actions_page(report, styles)

    logger.info(
        f"Rendering compliance PDF: {len(report.get('areas') or [])} areas, "
        f"{len(report.get('all_stores') or [])} stores"
    )

    return _build(
        story,
        title=f"Weekly Compliance Report - {report.get('report_date')}",
        subject="Weekly Compliance Report",
        header_left=f"{COMPANY_NAME} - Weekly Compliance Report",
        header_right=f"Week of {week_of}",
    )


# =============================================================================
# Weekly performance report
# =============================================================================

_INLINE_TAGS = {"strong": "b", "b": "b", "em": "i", "i": "i"}
_HEADING_STYLES = {"h1": "h2", "h2": "h2", "h3": "h3", "h4": "h3", "h5": "h3", "h6": "h3"}


def _rl_inline(element: ElementTree.Element) -> str:
    """Reportlab paragraph markup for an element's inline content.

    Nested lists are skipped; the caller renders them as their own bullets.
    """
    parts = [escape(element.text or "")]
    for child in element:
        if child.tag not in ("ul", "ol"):
            inner = _rl_inline(child)
            if child.tag in _INLINE_TAGS:
                tag = _INLINE_TAGS[child.tag]
                inner = f"<{tag}>{inner}</{tag}>"
            elif child.tag == "code":
                inner = f'<font face="Courier">{inner}</font>'
            parts.append(inner)
        parts.append(escape(child.tail or ""))
    return "".join(parts).strip()


def _list_flowables(element: ElementTree.Element, styles: dict, depth: int = 0) -> list:
    ordered = element.tag == "ol"
    style = ParagraphStyle(
        f"Bullet{depth}",
        parent=styles["bullet"],
        leftIndent=styles["bullet"].leftIndent + 14 * depth,
        bulletIndent=styles["bullet"].bulletIndent + 14 * depth,
    )
    story: list = []
    for number, item in enumerate(element.findall("li"), start=1):
        story.append(Paragraph(
            _rl_inline(item), style, bulletText=f"{number}." if ordered else "•"
        ))
        for nested in item:
            if nested.tag in ("ul", "ol"):
                story += _list_flowables(nested, styles, depth + 1)
    return story


def _block_flowables(element: ElementTree.Element, styles: dict) -> list:
    if element.tag in _HEADING_STYLES:
        return [Paragraph(_rl_inline(element), styles[_HEADING_STYLES[element.tag]])]
    if element.tag == "p":
        return [Paragraph(_rl_inline(element), styles["body"])]
    if element.tag in ("ul", "ol"):
        return _list_flowables(element, styles)
    if element.tag == "div":
        story: list = []
        for child in element:
            story += _block_flowables(child, styles)
        return [*story, Spacer(1, 8)]
    return []


def _narrative_flowables(analysis: str, styles: dict) -> list:
    """Platypus flowables for the same HTML the email body uses."""
    root = ElementTree.fromstring(f"<body>{markdown_to_html(analysis)}</body>")
    story: list = []
    for element in root:
        story += _block_flowables(element, styles)
    return story


def _kpi_table(data: "WeeklyKPIs") -> Table:
    rows = [
        ["Metric", "Value"],
        ["Revenue YTD", format_millions(data.ytd_revenue)],
        ["Total Orders", format_number(data.orders)],
        ["Customers", format_number(data.customers)],
        ["Return Rate", f"{format_number(data.return_rate)}%"],
        ["Revenue per Customer", f"${float(data.revenue_per_customer):,.2f}"],
        ["Total Profit", format_currency(data.total_profit)],
        ["Total Cost", format_currency(data.total_cost)],
        ["Revenue Change (WoW)", f"{data.revenue_change}%"],
        ["Order Change (WoW)", f"{data.order_change}%"],
    ]
    table = Table(rows, colWidths=[CONTENT_WIDTH * 0.6, CONTENT_WIDTH * 0.4])
    table.setStyle(TableStyle([
        ("BACKGROUND", (0, 0), (-1, 0), NAVY),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, -1), 10),
        ("ALIGN", (1, 0), (1, -1), "RIGHT"),
        ("GRID", (0, 0), (-1, -1), 0.5, GRID),
        ("ROWBACKGROUNDS", (0, 1), (-1, -1), [colors.white, ROW_ALT]),
    ]))
    return table


def build_weekly_pdf(data: "WeeklyKPIs", analysis: str) -> bytes:
    """Render the weekly performance report (KPIs + narrative) as a PDF."""
    styles = _styles()

    story: list = [
        Paragraph("Weekly Performance Report", styles["subtitle"]),
        Spacer(1, 6),
        Paragraph(escape(data.week_ending), styles["date"]),
        Spacer(1, 20),
        _kpi_table(data),
        Spacer(1, 16),
    ]

    if data.anomalies:
        story.append(Paragraph("Anomalies Detected", styles["h3"]))
        for anomaly in data.anomalies:
            story.append(Paragraph(escape(anomaly), styles["bullet"], bulletText="•"))

    story.append(Paragraph("Top Products by Revenue", styles["h3"]))
    for line in data.top_products.splitlines():
        story.append(Paragraph(escape(line), styles["small"]))

    story.append(Paragraph("Category Breakdown", styles["h3"]))
    for line in data.categories.splitlines():
        story.append(Paragraph(escape(line.lstrip("- ")), styles["small"]))

    story.append(PageBreak())
    story += _narrative_flowables(analysis, styles)

    return _build(
        story,
        title=f"Weekly Performance Report - {data.report_date}",
        subject="Weekly Performance Report",
        header_left="Weekly Performance Report",
        header_right=data.week_ending,
    )
