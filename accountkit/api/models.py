"""
API request and response models.

Pydantic models for FastAPI endpoint validation and OpenAPI schema generation.
Field-level account rules (username charset, password length, email
syntax) are enforced by the domain so that every failure is reported
the same way; the models only check shape.
"""

from pydantic import BaseModel, Field


class RegisterRequest(BaseModel):
    """Request model for user registration."""

    username: str = Field(..., max_length=256)
    password: str = Field(..., max_length=1024)
    display_name: str = Field(..., max_length=256)
    email: str = Field(..., max_length=320)
    language: str = Field(default="en", max_length=16)


class RegisterResponse(BaseModel):
    """Response model for successful registration."""

    message: str
    guid: int
    username: str


class ValidateRequest(BaseModel):
    """Request model for pre-submission validation."""

    username: str = ""
    password: str = ""
    password_confirmation: str | None = None
    display_name: str = ""
    email: str = ""


class FieldError(BaseModel):
    """One failed field."""

    field: str
    message: str


class ValidateResponse(BaseModel):
    """Response model listing every validation failure."""

    valid: bool
    errors: list[FieldError]


class ResetRequestRequest(BaseModel):
    """Request model for asking for a password reset link."""

    username: str = Field(..., min_length=1)


class ResetRequestResponse(BaseModel):
    """Response model for a reset link request. Identical whether or not the user exists."""

    message: str


class ResetPasswordRequest(BaseModel):
    """Request model for redeeming a reset code."""

    guid: int
    code: str = Field(..., min_length=1, max_length=256)
    password: str | None = Field(default=None, max_length=1024)


class ResetPasswordResponse(BaseModel):
    """Response model for a completed reset."""

    message: str
    password_generated: bool


class InviteRequest(BaseModel):
    """Request model for issuing an invite code."""

    username: str = Field(..., min_length=1)


class InviteResponse(BaseModel):
    """Response model carrying a fresh invite code and its registration link."""

    code: str
    registration_url: str


class InviteValidateRequest(BaseModel):
    """Request model for checking an invite code."""

    username: str
    code: str


class InviteValidateResponse(BaseModel):
    """Response model for invite code checks."""

    valid: bool


class BanResponse(BaseModel):
    """Response model for ban/unban."""

    guid: int
    changed: bool


class ErrorResponse(BaseModel):
    """Standard error response model."""

    detail: str


class FieldErrorResponse(BaseModel):
    """Error response for a single invalid field."""

    detail: FieldError
