"""
API v1 routes.

Defines REST endpoints for registration, password reset, invite codes
and ban administration. Domain errors are translated into HTTP errors
with generic messages.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status

from accountkit.api.dependencies import (
    get_account_administration,
    get_password_service,
    get_registration_service,
    get_url_builder,
    get_user_directory,
)
from accountkit.api.models import (
    BanResponse,
    ErrorResponse,
    FieldErrorResponse,
    InviteRequest,
    InviteResponse,
    InviteValidateRequest,
    InviteValidateResponse,
    RegisterRequest,
    RegisterResponse,
    ResetPasswordRequest,
    ResetPasswordResponse,
    ResetRequestRequest,
    ResetRequestResponse,
    ValidateRequest,
    ValidateResponse,
)
from accountkit.domain.exceptions import (
    DuplicateEmail,
    InvalidToken,
    NotFound,
    RegistrationDisabled,
    RegistrationError,
    ValidationError,
)
from accountkit.domain.hooks import UrlBuilder
from accountkit.domain.passwords import PasswordService
from accountkit.domain.registration import RegistrationService
from accountkit.domain.users import AccountAdministration, UserDirectory

logger = logging.getLogger(__name__)

router = APIRouter(tags=["v1"])


def _field_error(e: ValidationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_400_BAD_REQUEST,
        detail={"field": e.field, "message": e.reason},
    )


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        400: {"model": FieldErrorResponse, "description": "Invalid field"},
        403: {"model": ErrorResponse, "description": "Registration disabled"},
        409: {"model": ErrorResponse, "description": "Username or email taken"},
    },
    summary="Register a new user",
    description="Create an account. Validation stops at the first invalid field.",
)
async def register(
    request_data: RegisterRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> RegisterResponse:
    """
    Register a new account.

    - **username**: letters, digits, '.', '_' and '-'
    - **password**: clear text, hashed before storage
    - **display_name**: free text
    - **email**: valid email address
    """
    try:
        guid = service.register(
            request_data.username,
            request_data.password,
            request_data.display_name,
            request_data.email,
            language=request_data.language,
        )
    except ValidationError as e:
        raise _field_error(e) from None
    except DuplicateEmail:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None
    except RegistrationDisabled:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Registration is disabled",
        ) from None
    except RegistrationError as e:
        logger.info("Registration conflict: %s", type(e).__name__)
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Registration failed",
        ) from None

    return RegisterResponse(
        message="Account created",
        guid=guid,
        username=request_data.username.strip(),
    )


@router.post(
    "/register/validate",
    response_model=ValidateResponse,
    summary="Validate registration data",
    description="Check every registration field at once without creating an account.",
)
async def validate_registration(
    request_data: ValidateRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> ValidateResponse:
    """Report all registration problems in one response."""
    password = request_data.password
    if request_data.password_confirmation is not None:
        password = (request_data.password, request_data.password_confirmation)

    results = service.validate_account_data(
        request_data.username,
        password,
        request_data.display_name,
        request_data.email,
    )
    errors = [
        {"field": result.field, "message": result.message} for result in results.get_failures()
    ]
    return ValidateResponse(valid=not errors, errors=errors)


@router.post(
    "/password/reset-request",
    response_model=ResetRequestResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Request a password reset link",
    description="Emails a reset link if the account exists. "
    "The response is identical either way to prevent account enumeration.",
)
async def request_password_reset(
    request_data: ResetRequestRequest,
    directory: UserDirectory = Depends(get_user_directory),
    service: PasswordService = Depends(get_password_service),
) -> ResetRequestResponse:
    """Send a reset link to the account's registered email."""
    account = directory.get_user_by_username(request_data.username)
    if account is not None:
        service.send_new_password_request(account.guid)

    return ResetRequestResponse(message="If the account exists, a reset link has been sent")


@router.post(
    "/password/reset",
    response_model=ResetPasswordResponse,
    responses={
        400: {"description": "Invalid or expired code, or invalid password"},
    },
    summary="Reset password with a confirmation code",
    description="Redeem the code from the reset email. "
    "Without a password, a random one is generated and emailed.",
)
async def reset_password(
    request_data: ResetPasswordRequest,
    service: PasswordService = Depends(get_password_service),
) -> ResetPasswordResponse:
    """Change the password if the code is valid."""
    try:
        outcome = service.execute_new_password_request(
            request_data.guid, request_data.code, request_data.password
        )
    except InvalidToken:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid or expired code",
        ) from None
    except ValidationError as e:
        raise _field_error(e) from None

    if outcome.generated:
        service.send_generated_password(request_data.guid, outcome.password)

    return ResetPasswordResponse(
        message="Password changed",
        password_generated=outcome.generated,
    )


@router.post(
    "/invites",
    response_model=InviteResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse, "description": "Unknown user"}},
    summary="Issue an invite code",
    description="Creates a new invite code for the inviting user, replacing the previous one.",
)
async def create_invite(
    request_data: InviteRequest,
    service: RegistrationService = Depends(get_registration_service),
    urls: UrlBuilder = Depends(get_url_builder),
) -> InviteResponse:
    """Generate an invite code and the registration link that carries it."""
    try:
        code = service.generate_invite_code(request_data.username)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from None

    url = urls.registration_url({"invitecode": code, "inviter": request_data.username})
    return InviteResponse(code=code, registration_url=url)


@router.post(
    "/invites/validate",
    response_model=InviteValidateResponse,
    summary="Validate an invite code",
)
async def validate_invite(
    request_data: InviteValidateRequest,
    service: RegistrationService = Depends(get_registration_service),
) -> InviteValidateResponse:
    """Check an invite code without consuming it."""
    valid = service.validate_invite_code(request_data.username, request_data.code)
    return InviteValidateResponse(valid=valid)


@router.post(
    "/users/{guid}/ban",
    response_model=BanResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown user"}},
    summary="Ban a user",
    tags=["admin"],
)
async def ban_user(
    guid: int,
    admin: AccountAdministration = Depends(get_account_administration),
) -> BanResponse:
    """
    Ban an account; notifies the user when the ban policy is enabled.

    Internal administrative endpoint. It carries no authorization of its own
    and must only be reachable from trusted tooling, never by end users.
    """
    try:
        changed = admin.ban(guid)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from None
    return BanResponse(guid=guid, changed=changed)


@router.post(
    "/users/{guid}/unban",
    response_model=BanResponse,
    responses={404: {"model": ErrorResponse, "description": "Unknown user"}},
    summary="Unban a user",
    tags=["admin"],
)
async def unban_user(
    guid: int,
    admin: AccountAdministration = Depends(get_account_administration),
) -> BanResponse:
    """
    Lift a ban; notifies the user when the ban policy is enabled.

    Internal administrative endpoint. It carries no authorization of its own
    and must only be reachable from trusted tooling, never by end users.
    """
    try:
        changed = admin.unban(guid)
    except NotFound:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="User not found",
        ) from None
    return BanResponse(guid=guid, changed=changed)
