"""
Auth API routes.

Defines REST endpoints for registration, email verification and login.

Handlers are plain ``def`` functions: FastAPI runs them on its worker
threadpool, so blocking database, bcrypt and SMTP calls never stall the
event loop.
"""

from fastapi import APIRouter, Depends, status

from src.api.dependencies import get_account_service, get_current_account_id
from src.api.errors import to_http_exception
from src.api.models import (
    AccountData,
    ErrorResponse,
    LoginRequest,
    LoginResponse,
    MeResponse,
    PublicUser,
    RegisterRequest,
    RegisterResponse,
    ResendOtpRequest,
    ResendOtpResponse,
    UserProfile,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from src.domain.accounts import AccountService, Registration
from src.domain.exceptions import AccountError

router = APIRouter(tags=["auth"])

ALREADY_VERIFIED_MESSAGE = "Email already verified"


@router.post(
    "/register",
    response_model=RegisterResponse,
    response_model_exclude_unset=True,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse, "description": "Invalid input or email already registered"}},
    summary="Register a new user",
    description="Create an unverified account. A 6-digit verification code is sent to the email.",
)
def register(
    request_data: RegisterRequest,
    service: AccountService = Depends(get_account_service),
) -> RegisterResponse:
    """
    Register a new user and send a verification code.

    - **name**: Display name (max 50 characters)
    - **email**: Email address to verify
    - **password**: Password (minimum 6 characters; teachers need the organization prefix)
    - **role**: student (default) or teacher
    """
    try:
        result = service.register(
            Registration(
                name=request_data.name,
                email=request_data.email,
                password=request_data.password,
                role=request_data.role,
            )
        )
    except AccountError as e:
        raise to_http_exception(e) from None

    response = RegisterResponse(
        success=True,
        message="Registration successful. Please verify your email with the OTP sent.",
        user=PublicUser.from_account(result.account),
    )
    if result.debug is not None:
        response.otp = result.debug.otp
        response.preview_url = result.debug.preview_url
    return response


@router.post(
    "/login",
    response_model=LoginResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Invalid credentials"},
        403: {"model": ErrorResponse, "description": "Email not verified"},
    },
    summary="Log in",
    description="Exchange email and password of a verified account for a bearer token.",
)
def login(
    request_data: LoginRequest,
    service: AccountService = Depends(get_account_service),
) -> LoginResponse:
    try:
        result = service.login(request_data.email, request_data.password)
    except AccountError as e:
        raise to_http_exception(e) from None

    return LoginResponse(
        success=True,
        token=result.token,
        user=UserProfile.from_account(result.account),
    )


@router.post(
    "/verify-email",
    response_model=VerifyEmailResponse,
    response_model_exclude_unset=True,
    responses={
        400: {"model": ErrorResponse, "description": "OTP missing, expired or invalid"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Verify email with OTP",
    description="Submit the 6-digit code sent by email. Returns a bearer token on first verification.",
)
def verify_email(
    request_data: VerifyEmailRequest,
    service: AccountService = Depends(get_account_service),
) -> VerifyEmailResponse:
    try:
        result = service.verify_email(request_data.email, request_data.otp)
    except AccountError as e:
        raise to_http_exception(e) from None

    if result.already_verified:
        return VerifyEmailResponse(success=True, message=ALREADY_VERIFIED_MESSAGE)

    return VerifyEmailResponse(
        success=True,
        message="Email verified successfully",
        token=result.token,
        user=UserProfile.from_account(result.account),
    )


@router.post(
    "/resend-otp",
    response_model=ResendOtpResponse,
    response_model_exclude_unset=True,
    responses={
        400: {"model": ErrorResponse, "description": "Email missing"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Resend verification OTP",
    description="Issue a fresh code for an unverified account. The previous code stops working.",
)
def resend_otp(
    request_data: ResendOtpRequest,
    service: AccountService = Depends(get_account_service),
) -> ResendOtpResponse:
    try:
        result = service.resend_otp(request_data.email)
    except AccountError as e:
        raise to_http_exception(e) from None

    if result.already_verified:
        return ResendOtpResponse(success=True, message=ALREADY_VERIFIED_MESSAGE)

    response = ResendOtpResponse(success=True, message="OTP resent successfully")
    if result.debug is not None:
        response.otp = result.debug.otp
        response.preview_url = result.debug.preview_url
    return response


@router.get(
    "/me",
    response_model=MeResponse,
    responses={
        401: {"model": ErrorResponse, "description": "Missing or invalid bearer token"},
        404: {"model": ErrorResponse, "description": "User not found"},
    },
    summary="Get current user",
)
def me(
    account_id: str = Depends(get_current_account_id),
    service: AccountService = Depends(get_account_service),
) -> MeResponse:
    try:
        account = service.get_account(account_id)
    except AccountError as e:
        raise to_http_exception(e) from None

    return MeResponse(success=True, data=AccountData.from_account(account))
