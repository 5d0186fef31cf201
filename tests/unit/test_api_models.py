"""
Unit tests for API request/response models.

Models only check shape; field rules are exercised through the domain.
"""

import pytest
from pydantic import ValidationError

from accountkit.api.models import (
    BanResponse,
    ErrorResponse,
    FieldError,
    FieldErrorResponse,
    InviteResponse,
    RegisterRequest,
    ResetPasswordRequest,
    ResetRequestRequest,
    ValidateRequest,
    ValidateResponse,
)


class TestRegisterRequest:
    """Tests for RegisterRequest model."""

    def test_valid_request(self) -> None:
        request = RegisterRequest(
            username="alice",
            password="correct-horse",
            display_name="Alice",
            email="alice@example.com",
        )
        assert request.username == "alice"
        assert request.language == "en"

    def test_email_is_not_normalized_by_model(self) -> None:
        """Normalization and syntax checks belong to the domain."""
        request = RegisterRequest(
            username="alice", password="pw", display_name="A", email="not-an-email"
        )
        assert request.email == "not-an-email"

    @pytest.mark.parametrize("missing", ["username", "password", "display_name", "email"])
    def test_required_fields(self, missing: str) -> None:
        data = {
            "username": "alice",
            "password": "correct-horse",
            "display_name": "Alice",
            "email": "alice@example.com",
        }
        del data[missing]
        with pytest.raises(ValidationError):
            RegisterRequest(**data)

    def test_oversized_username_rejected(self) -> None:
        with pytest.raises(ValidationError):
            RegisterRequest(username="a" * 257, password="pw", display_name="A", email="e")


class TestValidateRequest:
    """Tests for ValidateRequest model."""

    def test_all_fields_optional(self) -> None:
        request = ValidateRequest()
        assert request.username == ""
        assert request.password_confirmation is None


class TestResetModels:
    """Tests for password reset models."""

    def test_reset_request_requires_username(self) -> None:
        with pytest.raises(ValidationError):
            ResetRequestRequest(username="")

    def test_reset_password_optional_password(self) -> None:
        request = ResetPasswordRequest(guid=1, code="abc")
        assert request.password is None

    def test_reset_password_requires_code(self) -> None:
        with pytest.raises(ValidationError):
            ResetPasswordRequest(guid=1, code="")

    def test_reset_password_guid_must_be_int(self) -> None:
        with pytest.raises(ValidationError):
            ResetPasswordRequest(guid="abc", code="x")  # type: ignore[arg-type]


class TestResponses:
    """Tests for response models."""

    def test_validate_response(self) -> None:
        response = ValidateResponse(
            valid=False, errors=[FieldError(field="email", message="Invalid email address")]
        )
        assert response.model_dump() == {
            "valid": False,
            "errors": [{"field": "email", "message": "Invalid email address"}],
        }

    def test_field_error_response(self) -> None:
        response = FieldErrorResponse(detail=FieldError(field="username", message="bad"))
        assert response.detail.field == "username"

    def test_error_response(self) -> None:
        assert ErrorResponse(detail="Invalid or expired code").detail == "Invalid or expired code"

    def test_invite_response(self) -> None:
        response = InviteResponse(code="abc", registration_url="https://example.com/register")
        assert response.code == "abc"

    def test_ban_response(self) -> None:
        assert BanResponse(guid=1, changed=True).changed is True
