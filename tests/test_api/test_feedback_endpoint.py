"""Tests for the feedback endpoint."""

import pytest
from unittest.mock import AsyncMock, patch
from api.feedback import handler
from src.utils.errors import FeedbackPermissionError
from tests.utils.helpers import build_handler, read_json, response_status

FEEDBACK = {"content": "Nice work", "staffId": "staff1", "managerId": "mgr1", "userRole": "manager"}


@pytest.mark.unit
def test_list_feedback_with_filters():
    with patch("api.feedback.list_feedback_records", new_callable=AsyncMock, return_value=[{"id": "f1"}]) as listing:
        h = build_handler(handler, "GET", "/api/feedback?staffId=staff1&type=weekly&taskId=t1")

        h.do_GET()

    listing.assert_awaited_once_with({"staff_id": "staff1", "type": "WEEKLY", "task_id": "t1"})
    assert response_status(h) == 200
    assert read_json(h) == {"feedback": [{"id": "f1"}]}


@pytest.mark.unit
def test_list_feedback_bad_type():
    h = build_handler(handler, "GET", "/api/feedback?type=monthly")

    h.do_GET()

    assert response_status(h) == 400


@pytest.mark.unit
def test_get_feedback_by_id_not_found():
    with patch("api.feedback.get_feedback_by_id", new_callable=AsyncMock, return_value=None):
        h = build_handler(handler, "GET", "/api/feedback?id=f404")

        h.do_GET()

    assert response_status(h) == 404
    assert read_json(h) == {"error": "Feedback not found"}


@pytest.mark.unit
def test_create_feedback_requires_fields():
    h = build_handler(handler, "POST", "/api/feedback", body={"content": "x", "staffId": "staff1"})

    h.do_POST()

    assert response_status(h) == 400
    assert read_json(h) == {"error": "Content, staff ID, and manager ID are required"}


@pytest.mark.unit
def test_create_feedback_success():
    with patch("api.feedback.create_feedback_record", new_callable=AsyncMock, return_value={"id": "f1"}) as create:
        h = build_handler(handler, "POST", "/api/feedback", body={**FEEDBACK, "type": "weekly", "taskId": "t1"})

        h.do_POST()

    assert create.await_args.args == ("Nice work", "staff1", "mgr1")
    assert create.await_args.kwargs["role"] == "manager"
    assert create.await_args.kwargs["feedback_type"] == "weekly"
    assert create.await_args.kwargs["task_id"] == "t1"
    assert create.await_args.kwargs["media"] == []
    assert response_status(h) == 200
    assert read_json(h) == {"feedback": {"id": "f1"}}


@pytest.mark.unit
def test_create_feedback_bk_forbidden():
    with patch("api.feedback.create_feedback_record", new_callable=AsyncMock, side_effect=FeedbackPermissionError("BK users cannot give feedback")):
        h = build_handler(handler, "POST", "/api/feedback", body={**FEEDBACK, "userRole": "bk"})

        h.do_POST()

    assert response_status(h) == 403
    assert read_json(h) == {"error": "BK users cannot give feedback"}


@pytest.mark.unit
def test_create_feedback_store_failure():
    with patch("api.feedback.create_feedback_record", new_callable=AsyncMock, side_effect=RuntimeError("db down")):
        h = build_handler(handler, "POST", "/api/feedback", body=FEEDBACK)

        h.do_POST()

    assert response_status(h) == 500
    assert read_json(h) == {"error": "Failed to create feedback"}
