"""Weekly report models. None of these are persisted."""

from enum import Enum
from typing import Optional
from datetime import datetime
from pydantic import BaseModel, Field


class ReportRow(BaseModel):
    """One table row, derived from a task."""
    date: str
    title: str
    priority: str
    progress: str
    assigned_by: str

    def as_cells(self) -> list[str]:
        return [self.date, self.title, self.priority, self.progress, self.assigned_by]


class ReportSection(BaseModel):
    """All rows for one assignee."""
    assignee: str
    rows: list[ReportRow] = Field(default_factory=list)


class ReportDocument(BaseModel):
    """Rendered report plus the layout it was rendered from."""
    title: str
    sections: list[ReportSection] = Field(default_factory=list)
    pages: list[list[str]] = Field(
        default_factory=list,
        description="Assignee labels whose section starts on each page"
    )
    content: bytes = Field(..., description="PDF bytes")

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def section_names(self) -> list[str]:
        return [section.assignee for section in self.sections]


class ReportWindow(BaseModel):
    """Monday 00:00:00.000 to Saturday 23:59:59.999."""
    start: datetime
    end: datetime

    def contains(self, moment: datetime) -> bool:
        return self.start <= moment <= self.end

    @property
    def label(self) -> str:
        return f"{format_report_date(self.start)} - {format_report_date(self.end)}"


class ReportOutcome(str, Enum):
    """Terminal states of a report run."""
    SUCCESS = "SUCCESS"
    SKIPPED = "SKIPPED"
    NOT_FOUND = "NOT_FOUND"
    GENERATION_FAILED = "GENERATION_FAILED"
    NOTIFICATION_FAILED = "NOTIFICATION_FAILED"


class ReportRunResult(BaseModel):
    """Summary returned by the report orchestrator."""
    outcome: ReportOutcome
    run_id: str
    task_count: int = 0
    title: Optional[str] = None
    window: Optional[ReportWindow] = None
    key: Optional[str] = None
    private_url: Optional[str] = None
    permanent_url: Optional[str] = None
    recipient_count: int = 0
    failed_recipient_count: int = 0
    error: Optional[str] = None

    @property
    def artifact_created(self) -> bool:
        return self.key is not None


def format_report_date(moment: datetime) -> str:
    """M/D/YYYY, unpadded."""
    return f"{moment.month}/{moment.day}/{moment.year}"
