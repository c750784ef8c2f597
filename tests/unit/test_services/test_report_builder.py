"""Tests for the weekly report PDF builder."""

import pytest
from zoneinfo import ZoneInfo
from unittest.mock import patch
from src.models.task import Task
from src.services.report_builder import (
    build_report,
    build_report_row,
    build_sections,
    group_tasks_by_assignee,
    NO_ASSIGNER,
    UNKNOWN_ASSIGNEE,
)
from src.utils.errors import ReportGenerationError
from tests.utils.assertions import assert_valid_pdf
from tests.utils.factories import create_task_data


def _tasks(rows):
    return [Task.model_validate(row) for row in rows]


@pytest.mark.unit
def test_group_tasks_sorted_by_assignee(sample_task_rows):
    """Ann's group comes before Bob's regardless of input order."""
    groups = group_tasks_by_assignee(_tasks(sample_task_rows))

    assert [name for name, _ in groups] == ["Ann", "Bob"]
    assert groups[0][1][0].title == "File the invoices"


@pytest.mark.unit
def test_group_tasks_without_assignee_labelled_unknown():
    tasks = _tasks([
        create_task_data(title="Orphan"),
        create_task_data(title="Owned", staff_name="Zed"),
    ])

    groups = dict(group_tasks_by_assignee(tasks))

    assert [t.title for t in groups[UNKNOWN_ASSIGNEE]] == ["Orphan"]
    assert [t.title for t in groups["Zed"]] == ["Owned"]


@pytest.mark.unit
def test_group_tasks_preserves_input_order_within_group():
    tasks = _tasks([
        create_task_data(title="first", staff_name="Ann"),
        create_task_data(title="second", staff_name="Ann"),
        create_task_data(title="third", staff_name="Ann"),
    ])

    [(_, group)] = group_tasks_by_assignee(tasks)

    assert [t.title for t in group] == ["first", "second", "third"]


@pytest.mark.unit
def test_build_report_row_formats_cells():
    task = Task.model_validate(create_task_data(
        title="Check stock",
        staff_name="Ann",
        created_at="2024-12-09T08:00:00+00:00",
        priority="URGENT",
        progress=75,
    ))

    row = build_report_row(task)

    assert row.as_cells() == ["12/9/2024", "Check stock", "URGENT", "75%", NO_ASSIGNER]


@pytest.mark.unit
def test_build_report_row_uses_report_timezone():
    """Early Monday UTC is still Sunday in New York."""
    task = Task.model_validate(create_task_data(
        staff_name="Ann",
        created_at="2024-12-09T02:00:00+00:00",
        assigned_by_name="Maria",
    ))

    row = build_report_row(task, ZoneInfo("America/New_York"))

    assert row.date == "12/8/2024"
    assert row.assigned_by == "Maria"


@pytest.mark.unit
def test_build_sections_matches_groups(sample_task_rows):
    sections = build_sections(_tasks(sample_task_rows))

    assert [s.assignee for s in sections] == ["Ann", "Bob"]
    assert sections[0].rows[0].progress == "100%"
    assert sections[1].rows[0].priority == "HIGH"


@pytest.mark.unit
def test_build_report_renders_pdf(sample_task_rows):
    document = build_report(_tasks(sample_task_rows), "Tasks Report (12/9/2024 - 12/14/2024)")

    assert_valid_pdf(document)
    assert document.title == "Tasks Report (12/9/2024 - 12/14/2024)"
    assert document.section_names == ["Ann", "Bob"]
    assert document.page_count == 1
    assert document.pages[0] == ["Ann", "Bob"]


@pytest.mark.unit
def test_build_report_is_deterministic_in_layout(sample_task_rows):
    """Input order never changes section order."""
    forward = build_report(_tasks(sample_task_rows), "Report")
    backward = build_report(_tasks(list(reversed(sample_task_rows))), "Report")

    assert forward.section_names == backward.section_names
    assert forward.pages == backward.pages


@pytest.mark.unit
def test_build_report_empty_is_title_only():
    document = build_report([], "Tasks Report (12/9/2024 - 12/14/2024)")

    assert_valid_pdf(document)
    assert document.sections == []
    assert document.page_count == 1
    assert document.pages == [[]]


@pytest.mark.unit
def test_build_report_paginates_long_section():
    """A section too long for one page continues on the next."""
    tasks = _tasks([
        create_task_data(title=f"Task {i}", staff_name="Ann")
        for i in range(80)
    ])

    document = build_report(tasks, "Report")

    assert_valid_pdf(document)
    assert document.page_count > 1
    assert document.pages[0] == ["Ann"]
    assert len(document.sections[0].rows) == 80


@pytest.mark.unit
def test_build_report_section_after_long_table_moves_down():
    """Bob's section starts on a later page than Ann's long table."""
    rows = [create_task_data(title=f"Ann task {i}", staff_name="Ann") for i in range(60)]
    rows.append(create_task_data(title="Bob task", staff_name="Bob"))

    document = build_report(_tasks(rows), "Report")

    assert document.pages[0] == ["Ann"]
    assert any("Bob" in page for page in document.pages[1:])


@pytest.mark.unit
def test_build_report_escapes_markup_in_titles():
    tasks = _tasks([create_task_data(title="Fix <b> & </b> tags", staff_name="Ann")])

    document = build_report(tasks, "Report")

    assert_valid_pdf(document)


@pytest.mark.unit
def test_build_report_wraps_render_errors(sample_task_rows):
    with patch("src.services.report_builder.canvas.Canvas", side_effect=RuntimeError("disk full")):
        with pytest.raises(ReportGenerationError, match="disk full"):
            build_report(_tasks(sample_task_rows), "Report")


@pytest.mark.unit
@pytest.mark.parametrize("ann_rows, expected_pages", [
    (25, [["Ann", "Bob"]]),
    (26, [["Ann"], ["Bob"]]),
])
def test_next_section_breaks_only_past_700pt(ann_rows, expected_pages):
    """25 rows end Ann's table at 696pt, 26 rows at 720pt."""
    rows = [create_task_data(title=f"Ann task {i}", staff_name="Ann") for i in range(ann_rows)]
    rows.append(create_task_data(title="Bob task", staff_name="Bob"))

    document = build_report(_tasks(rows), "Report")

    assert document.pages == expected_pages
