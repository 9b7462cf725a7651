"""Authentication routes: registration, login and email verification."""

from typing import Annotated, Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import ORJSONResponse
from starlette.responses import Response
from starlette.status import HTTP_201_CREATED

from app.configs import settings
from app.dependencies import AuthServiceDep, TokenDataDep
from app.dependencies.dependencies import ACCESS_TOKEN_COOKIE
from app.managers import limiter, tiered
from app.routes.responses import BAD_REQUEST, RATE_LIMITED, UNAUTHORIZED, envelope_example
from app.schemas import LoginRequest, RegisterRequest, ResendOTPRequest, VerifyOTPRequest, ok

router = APIRouter(prefix="/api/auth", tags=["🔐 Auth"])

USER_EXAMPLE = {
    "id": 3,
    "email": "jane@example.com",
    "name": "Jane",
    "profileImage": "https://api.dicebear.com/7.x/avataaars/svg?seed=5f2c",
    "isVerified": False,
    "isOwner": False,
}
AUTH_EXAMPLE = {"token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...", "user": USER_EXAMPLE}

USER_NOT_FOUND = envelope_example("Not found", "User not found")
INVALID_OTP = envelope_example("Bad request", "Invalid or expired OTP")


def _set_token_cookie(response: Response, token: str) -> None:
    response.set_cookie(
        ACCESS_TOKEN_COOKIE,
        token,
        max_age=settings.ACCESS_TOKEN_EXPIRE_MINUTES * 60,
        httponly=True,
        secure=settings.ENVIRONMENT == "production",
        samesite="lax",
    )


@router.post(
    "/register",
    response_class=ORJSONResponse,
    status_code=HTTP_201_CREATED,
    summary="Register a new user",
    description=(
        "Create an unverified account and email a one-time code. "
        "A missing `profileImage` gets a generated avatar."
    ),
    responses={
        201: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Registration successful. Please verify your email with the OTP sent.",
                        "data": AUTH_EXAMPLE,
                    },
                },
            },
        },
        400: envelope_example("Bad request", "User already exists"),
        429: RATE_LIMITED,
    },
    operation_id="auth_register",
)
@limiter.limit(tiered("10/minute", "5/minute"))
async def register(
    request: Request,
    response: Response,
    payload: Annotated[
        RegisterRequest,
        Body(examples=[{"email": "jane@example.com", "password": "s3cret!", "name": "Jane"}]),
    ],
    auth_service: AuthServiceDep,
) -> dict[str, Any]:
    """
    Register a new user.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object; receives the token cookie.
    payload : RegisterRequest
        Registration form.
    auth_service : AuthService
        Authentication service dependency.

    Returns
    -------
    dict
        Envelope with the token and the new user.

    Raises
    ------
    DuplicateEntryError
        If the email is already registered.
    """
    auth = await auth_service.register(payload)
    _set_token_cookie(response, auth.token)
    return ok(auth, message="Registration successful. Please verify your email with the OTP sent.")


@router.post(
    "/login",
    response_class=ORJSONResponse,
    summary="Login",
    description="Exchange email and password for an access token.",
    responses={
        200: {"content": {"application/json": {"example": {"success": True, "data": AUTH_EXAMPLE}}}},
        400: BAD_REQUEST,
        401: envelope_example("Unauthorized", "Invalid credentials"),
        429: RATE_LIMITED,
    },
    operation_id="auth_login",
)
@limiter.limit(tiered("10/minute", "5/minute"))
async def login(
    request: Request,
    response: Response,
    payload: LoginRequest,
    auth_service: AuthServiceDep,
) -> dict[str, Any]:
    """
    Login with email and password.

    Parameters
    ----------
    request : Request
        Current request context.
    response : Response
        Response object; receives the token cookie.
    payload : LoginRequest
        Credentials.
    auth_service : AuthService
        Authentication service dependency.

    Returns
    -------
    dict
        Envelope with the token and the user.

    Raises
    ------
    InvalidCredentialsError
        If authentication fails.
    """
    auth = await auth_service.login(str(payload.email), payload.password.get_secret_value())
    _set_token_cookie(response, auth.token)
    return ok(auth)


@router.get(
    "/me",
    response_class=ORJSONResponse,
    summary="Current user",
    responses={
        200: {
            "content": {"application/json": {"example": {"success": True, "data": {"user": USER_EXAMPLE}}}},
        },
        401: UNAUTHORIZED,
        404: USER_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="auth_me",
)
@limiter.limit(tiered("60/minute", "30/minute"))
async def me(
    request: Request,
    response: Response,
    token_data: TokenDataDep,
    auth_service: AuthServiceDep,
) -> dict[str, Any]:
    """Return the account behind the request's token."""
    return ok({"user": await auth_service.get_user(token_data.user_id)})


@router.post(
    "/verify-otp",
    response_class=ORJSONResponse,
    summary="Verify email",
    description="Consume the emailed code. A code works once and expires.",
    responses={
        200: {
            "content": {
                "application/json": {
                    "example": {
                        "success": True,
                        "message": "Email verified successfully",
                        "data": {"user": {**USER_EXAMPLE, "isVerified": True}},
                    },
                },
            },
        },
        400: INVALID_OTP,
        404: USER_NOT_FOUND,
        429: RATE_LIMITED,
    },
    operation_id="auth_verify_otp",
)
@limiter.limit(tiered("10/minute", "5/minute"))
async def verify_otp(
    request: Request,
    response: Response,
    payload: Annotated[VerifyOTPRequest, Body(examples=[{"email": "jane@example.com", "otp": "123456"}])],
    auth_service: AuthServiceDep,
) -> dict[str, Any]:
    """
    Verify an email address.

    Raises
    ------
    RecordNotFoundError
        If no account uses the email.
    AlreadyVerifiedError
        If the account is already verified.
    InvalidOTPError
        If the code is wrong, expired or already used.
    """
    user = await auth_service.verify_email(str(payload.email), payload.otp)
    return ok({"user": user}, message="Email verified successfully")


@router.post(
    "/resend-otp",
    response_class=ORJSONResponse,
    summary="Resend verification code",
    description="Issue a fresh code, replacing any outstanding one.",
    responses={
        200: {
            "content": {
                "application/json": {"example": {"success": True, "message": "OTP sent successfully"}},
            },
        },
        400: envelope_example("Bad request", "User already verified"),
        404: USER_NOT_FOUND,
        429: RATE_LIMITED,
        500: envelope_example("Delivery failed", "Failed to send OTP email"),
    },
    operation_id="auth_resend_otp",
)
@limiter.limit(tiered("5/minute", "3/minute"))
async def resend_otp(
    request: Request,
    response: Response,
    payload: ResendOTPRequest,
    auth_service: AuthServiceDep,
) -> dict[str, Any]:
    await auth_service.resend_otp(str(payload.email))
    return ok(message="OTP sent successfully")
