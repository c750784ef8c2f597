"""Custom assertion helpers."""

from src.models.report import ReportDocument, ReportRunResult


def assert_valid_pdf(document: ReportDocument) -> None:
    """Assert that a report document holds a rendered PDF."""
    assert document.content.startswith(b"%PDF")
    assert document.page_count >= 1


def assert_artifact_published(result: ReportRunResult, base_url: str) -> None:
    """Assert that a run left a retrievable artifact behind."""
    assert result.key is not None
    assert result.key.startswith("reports/")
    assert result.permanent_url.startswith(f"{base_url}/api/reports/pdf?key=reports%2F")
