"""Weekly report PDF builder - tasks grouped by assignee, one table per group."""

import io
from datetime import tzinfo
from typing import Iterable, Optional
from xml.sax.saxutils import escape
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.pdfgen import canvas
from reportlab.platypus import Paragraph, Table, TableStyle
from src.models.report import ReportDocument, ReportRow, ReportSection, format_report_date
from src.models.task import Task
from src.utils.errors import ReportGenerationError
from src.utils.logging import get_structured_logger

logger = get_structured_logger(__name__)

UNKNOWN_ASSIGNEE = "Unknown"
NO_ASSIGNER = "-"
TABLE_HEADER = ["Date", "Title", "Priority", "Progress", "Assigned By"]

# Layout, in points measured from the top edge of an A4 page
PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN_X = 40
TITLE_Y = 40
FIRST_SECTION_Y = 60
TOP_MARGIN = 40
BOTTOM_MARGIN = 40
PAGE_BREAK_THRESHOLD = 700
SECTION_GAP = 24
TABLE_OFFSET = 12
COLUMN_WIDTHS = [70, 200, 70, 65, 110]
HEADER_FILL = colors.Color(33 / 255, 150 / 255, 243 / 255)

_CELL_STYLE = ParagraphStyle("report-cell", fontName="Helvetica", fontSize=9, leading=11)


def group_tasks_by_assignee(tasks: Iterable[Task]) -> list[tuple[str, list[Task]]]:
    """
    Group tasks by assignee display name, sorted by name.

    Tasks without an assignee go under "Unknown". Order within a group
    follows the input order.
    """
    groups: dict[str, list[Task]] = {}
    for task in tasks:
        name = task.assignee_name or UNKNOWN_ASSIGNEE
        groups.setdefault(name, []).append(task)
    return [(name, groups[name]) for name in sorted(groups)]


def build_report_row(task: Task, tz: Optional[tzinfo] = None) -> ReportRow:
    created_at = task.created_at
    if tz is not None and created_at.tzinfo is not None:
        created_at = created_at.astimezone(tz)
    return ReportRow(
        date=format_report_date(created_at),
        title=task.title,
        priority=task.priority.value,
        progress=f"{task.progress}%",
        assigned_by=task.assigner_name or NO_ASSIGNER,
    )


def build_report_rows(tasks: Iterable[Task], tz: Optional[tzinfo] = None) -> list[ReportRow]:
    return [build_report_row(task, tz) for task in tasks]


def build_sections(tasks: Iterable[Task], tz: Optional[tzinfo] = None) -> list[ReportSection]:
    return [
        ReportSection(assignee=name, rows=build_report_rows(group, tz))
        for name, group in group_tasks_by_assignee(tasks)
    ]


def _section_table(section: ReportSection) -> Table:
    body = [
        [
            row.date,
            Paragraph(escape(row.title), _CELL_STYLE),
            row.priority,
            row.progress,
            Paragraph(escape(row.assigned_by), _CELL_STYLE),
        ]
        for row in section.rows
    ]
    table = Table([TABLE_HEADER] + body, colWidths=COLUMN_WIDTHS, repeatRows=1)
    table.setStyle(TableStyle([
        ("FONTNAME", (0, 0), (-1, -1), "Helvetica"),
        ("FONTSIZE", (0, 0), (-1, -1), 9),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_FILL),
        ("TEXTCOLOR", (0, 0), (-1, 0), colors.white),
        ("VALIGN", (0, 0), (-1, -1), "TOP"),
        ("GRID", (0, 0), (-1, -1), 0.25, colors.lightgrey),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
        ("LEFTPADDING", (0, 0), (-1, -1), 6),
        ("RIGHTPADDING", (0, 0), (-1, -1), 6),
    ]))
    return table


class _PageCursor:
    """Tracks the current page and the sections started on each page."""

    def __init__(self, pdf: canvas.Canvas):
        self.pdf = pdf
        self.pages: list[list[str]] = [[]]

    def new_page(self) -> None:
        self.pdf.showPage()
        self.pages.append([])

    def draw_text(self, text: str, top: float, font_size: int) -> None:
        self.pdf.setFont("Helvetica", font_size)
        self.pdf.drawString(MARGIN_X, PAGE_HEIGHT - top, text)

    def draw_table(self, table: Table, top: float) -> float:
        """Draw table at top, splitting across pages; returns where it ended."""
        available_width = PAGE_WIDTH - 2 * MARGIN_X
        pending = [table]
        while pending:
            current = pending.pop(0)
            available_height = PAGE_HEIGHT - BOTTOM_MARGIN - top
            _, height = current.wrapOn(self.pdf, available_width, available_height)
            if height <= available_height:
                current.drawOn(self.pdf, MARGIN_X, PAGE_HEIGHT - top - height)
                top += height
                continue

            parts = current.split(available_width, available_height)
            if len(parts) < 2:
                if top > TOP_MARGIN:
                    self.new_page()
                    top = TOP_MARGIN
                    pending.insert(0, current)
                    continue
                # A single row taller than a page: draw it and let it clip
                current.drawOn(self.pdf, MARGIN_X, PAGE_HEIGHT - top - height)
                top += height
                continue

            head, rest = parts[0], parts[1:]
            _, head_height = head.wrapOn(self.pdf, available_width, available_height)
            head.drawOn(self.pdf, MARGIN_X, PAGE_HEIGHT - top - head_height)
            self.new_page()
            top = TOP_MARGIN
            pending = list(rest) + pending
        return top


def build_report(tasks: Iterable[Task], title: str, tz: Optional[tzinfo] = None) -> ReportDocument:
    """
    Render tasks into a paginated A4 PDF grouped by assignee.

    A section after the first starts on a new page when the previous table
    ended past PAGE_BREAK_THRESHOLD, otherwise SECTION_GAP below it. No
    tasks yields a single page holding just the title.
    """
    try:
        sections = build_sections(tasks, tz)

        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4)
        pdf.setTitle(title)
        cursor = _PageCursor(pdf)
        cursor.draw_text(title, TITLE_Y, 14)

        top = FIRST_SECTION_Y
        last_table_end: Optional[float] = None
        for section in sections:
            if last_table_end is not None:
                if last_table_end > PAGE_BREAK_THRESHOLD:
                    cursor.new_page()
                    top = TOP_MARGIN
                else:
                    top = last_table_end + SECTION_GAP

            cursor.draw_text(f"Staff: {section.assignee}", top, 12)
            cursor.pages[-1].append(section.assignee)
            last_table_end = cursor.draw_table(_section_table(section), top + TABLE_OFFSET)

        pdf.save()
    except ReportGenerationError:
        raise
    except Exception as e:
        raise ReportGenerationError(f"Failed to build report: {e}") from e

    document = ReportDocument(
        title=title,
        sections=sections,
        pages=cursor.pages,
        content=buffer.getvalue(),
    )
    logger.info(
        "Report built",
        title=title,
        sections=len(document.sections),
        pages=document.page_count,
        size_bytes=len(document.content)
    )
    return document
