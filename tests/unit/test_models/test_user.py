"""Tests for User model."""

import pytest
from pydantic import ValidationError
from src.models.user import User, UserRole
from tests.utils.factories import create_user_data


@pytest.mark.unit
def test_user_from_row():
    user = User.model_validate(create_user_data(name="Ann", role="manager", telegram_chat_id="42"))

    assert user.name == "Ann"
    assert user.role == UserRole.MANAGER
    assert user.telegram_chat_id == "42"


@pytest.mark.unit
def test_user_invalid_role():
    with pytest.raises(ValidationError):
        User.model_validate(create_user_data(role="admin"))
