"""Tests for the task update/delete endpoint."""

import pytest
from unittest.mock import AsyncMock, patch
from api.tasks import handler
from src.utils.errors import TaskNotFoundError, TaskPermissionError
from tests.utils.helpers import build_handler, read_json, response_status


@pytest.mark.unit
def test_put_requires_id():
    h = build_handler(handler, "PUT", "/api/tasks", body={"title": "x"})

    h.do_PUT()

    assert response_status(h) == 400


@pytest.mark.unit
def test_put_maps_fields():
    with patch("api.tasks.update_task_fields", new_callable=AsyncMock) as update:
        update.return_value = {"id": "t1", "notes": "done"}
        h = build_handler(handler, "PUT", "/api/tasks", body={
            "id": "t1",
            "notes": "done",
            "dueDate": "2024-12-20",
            "userRole": "staff",
            "isAddingNotes": True,
            "unknown": "ignored",
        })

        h.do_PUT()

    update.assert_awaited_once_with(
        "t1",
        {"notes": "done", "due_date": "2024-12-20"},
        role="staff",
        is_adding_notes=True,
    )
    assert response_status(h) == 200
    assert read_json(h) == {"task": {"id": "t1", "notes": "done"}}


@pytest.mark.unit
def test_put_permission_error_includes_type():
    error = TaskPermissionError("nope", error_type="assigned_task_edit")
    with patch("api.tasks.update_task_fields", new_callable=AsyncMock, side_effect=error):
        h = build_handler(handler, "PUT", "/api/tasks", body={"id": "t1", "title": "x", "userRole": "staff"})

        h.do_PUT()

    assert response_status(h) == 403
    assert read_json(h) == {"error": "nope", "type": "assigned_task_edit"}


@pytest.mark.unit
def test_put_not_found():
    with patch("api.tasks.update_task_fields", new_callable=AsyncMock, side_effect=TaskNotFoundError("t1")):
        h = build_handler(handler, "PUT", "/api/tasks", body={"id": "t1"})

        h.do_PUT()

    assert response_status(h) == 404


@pytest.mark.unit
def test_delete_success():
    with patch("api.tasks.delete_task", new_callable=AsyncMock) as delete:
        h = build_handler(handler, "DELETE", "/api/tasks?id=t1&userId=staff1&userRole=staff")

        h.do_DELETE()

    delete.assert_awaited_once_with("t1", "staff1", "staff")
    assert response_status(h) == 200
    assert read_json(h) == {"success": True, "message": "Task deleted successfully"}


@pytest.mark.unit
def test_delete_requires_id():
    h = build_handler(handler, "DELETE", "/api/tasks")

    h.do_DELETE()

    assert response_status(h) == 400


@pytest.mark.unit
def test_delete_permission_denied():
    with patch("api.tasks.delete_task", new_callable=AsyncMock, side_effect=TaskPermissionError("BK users cannot delete tasks")):
        h = build_handler(handler, "DELETE", "/api/tasks?id=t1&userRole=bk")

        h.do_DELETE()

    assert response_status(h) == 403
    assert read_json(h) == {"error": "BK users cannot delete tasks"}


@pytest.mark.unit
def test_delete_unexpected_error():
    with patch("api.tasks.delete_task", new_callable=AsyncMock, side_effect=RuntimeError("db down")):
        h = build_handler(handler, "DELETE", "/api/tasks?id=t1")

        h.do_DELETE()

    assert response_status(h) == 500


@pytest.mark.unit
def test_post_requires_title_description_and_staff():
    h = build_handler(handler, "POST", "/api/tasks", body={"title": "x", "staffId": "staff1"})

    h.do_POST()

    assert response_status(h) == 400
    assert read_json(h) == {"error": "Title, description, and staff ID are required"}


@pytest.mark.unit
def test_post_creates_task_with_media():
    with patch("api.tasks.create_task_record", new_callable=AsyncMock) as create:
        create.return_value = {"id": "t1", "media": [{"id": "m1"}]}
        h = build_handler(handler, "POST", "/api/tasks", body={
            "title": "Stock check",
            "description": "Count the shelves",
            "staffId": "staff1",
            "progress": 100,
            "dueDate": "2024-12-20",
            "continuedFromTaskId": "t0",
            "media": [{"url": "/api/files?key=tasks%2F1-a.png", "filename": "a.png", "type": "image/png", "key": "tasks/1-a.png"}],
        })

        h.do_POST()

    row, media = create.await_args.args
    assert row["status"] == "COMPLETED"
    assert row["due_date"] == "2024-12-20"
    assert row["continued_from_task_id"] == "t0"
    assert media[0].key == "tasks/1-a.png"
    assert response_status(h) == 200
    assert read_json(h) == {"task": {"id": "t1", "media": [{"id": "m1"}]}}


@pytest.mark.unit
def test_post_rejects_malformed_media():
    with patch("api.tasks.create_task_record", new_callable=AsyncMock) as create:
        h = build_handler(handler, "POST", "/api/tasks", body={
            "title": "x", "description": "y", "staffId": "staff1", "media": [{"filename": "a.png"}],
        })

        h.do_POST()

    create.assert_not_called()
    assert response_status(h) == 400


@pytest.mark.unit
def test_post_store_failure():
    with patch("api.tasks.create_task_record", new_callable=AsyncMock, side_effect=RuntimeError("db down")):
        h = build_handler(handler, "POST", "/api/tasks", body={"title": "x", "description": "y", "staffId": "staff1"})

        h.do_POST()

    assert response_status(h) == 500
    assert read_json(h) == {"error": "Failed to create task"}
