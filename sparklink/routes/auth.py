"""
Auth API endpoints.

Provides endpoints for authentication-related operations:
- POST /auth/register - Create an account (Supabase sends the signup code)
- POST /auth/login - Email/password sign-in
- POST /auth/verify-email - Confirm the signup code
- POST /auth/resend-verification - Send a new signup code
- GET /auth/google - Google OAuth authorize URL
- POST /auth/oauth/complete - Link/create the users row after OAuth
- GET /auth/me - Get authenticated user identity

Credentials never touch this service's database: Supabase Auth owns them.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, status

from sparklink.auth.dependencies import AuthenticatedUser, get_authenticated_user
from sparklink.db.client import get_anon_client, get_service_role_client, get_supabase_client
from sparklink.schemas.auth import (
    AuthMeResponse,
    LoginRequest,
    LoginResponse,
    MessageResponse,
    OAuthCompleteResponse,
    OAuthUrlResponse,
    RegisterRequest,
    RegisterResponse,
    ResendVerificationRequest,
    UserSummary,
    VerifyEmailRequest,
    VerifyEmailResponse,
)
from sparklink.services.auth_service import (
    complete_oauth_sign_in,
    get_google_oauth_url,
    login_user,
    register_user,
    resend_verification,
    verify_email,
)
from sparklink.services.user_service import get_user
from sparklink.utils.http_errors import to_http_exception

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register a new account",
    description="""
    Create a SparkLink account.

    This endpoint:
    - Validates the username format (lowercase letters, digits, underscore)
    - Rejects emails and usernames that are already registered (409)
    - Signs the user up with Supabase Auth, which emails a 6-digit code
    - Creates the users row on the STARTER plan

    Security:
    - Public endpoint
    - Password is only ever sent to Supabase Auth
    """
)
async def register(request: RegisterRequest) -> RegisterResponse:
    """
    Register a new account.

    **6-STEP ENDPOINT FLOW:**

    Auth
    - Public endpoint

    Parse/Validate Request
    - RegisterRequest validated by FastAPI; username format checked by the service

    Domain & Intent Filter
    - Email and username uniqueness checked before calling Supabase

    Call Service
    - register_user()

    Map Output -> ResponseModel
    - users row -> UserSummary

    Persistence
    - Supabase Auth user plus users row
    """
    logger.info("Registration attempt received")

    try:
        result = await register_user(
            auth_client=get_anon_client(),
            admin_client=get_service_role_client(),
            email=request.email,
            password=request.password,
            username=request.username,
            first_name=request.first_name,
            last_name=request.last_name,
            country=request.country,
            phone=request.phone,
        )
    except Exception as e:
        raise to_http_exception(e, "registration_error", "Failed to register account")

    return RegisterResponse(
        status="REGISTERED",
        user=UserSummary.model_validate(result["user"]),
        session=result["session"],
        message="Registration successful. Check your email for the verification code.",
    )


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Log in with email and password",
    description="""
    Exchange email and password for a Supabase session.

    Returns 401 "Invalid email or password" on bad credentials and 403 when
    the email address has not been verified yet.
    """
)
async def login(request: LoginRequest) -> LoginResponse:
    try:
        result = await login_user(
            auth_client=get_anon_client(),
            admin_client=get_service_role_client(),
            email=request.email,
            password=request.password,
        )
    except Exception as e:
        raise to_http_exception(e, "login_error", "Failed to log in")

    user = result["user"]
    return LoginResponse(
        user=UserSummary.model_validate(user) if user else None,
        session=result["session"],
    )


@router.post(
    "/verify-email",
    response_model=VerifyEmailResponse,
    status_code=status.HTTP_200_OK,
    summary="Verify email with the signup code",
)
async def verify_email_code(request: VerifyEmailRequest) -> VerifyEmailResponse:
    try:
        result = await verify_email(get_anon_client(), request.email, request.code)
    except Exception as e:
        raise to_http_exception(e, "verification_error", "Failed to verify email")

    return VerifyEmailResponse(verified=True, session=result["session"])


@router.post(
    "/resend-verification",
    response_model=MessageResponse,
    status_code=status.HTTP_200_OK,
    summary="Resend the signup code",
)
async def resend_verification_code(request: ResendVerificationRequest) -> MessageResponse:
    try:
        await resend_verification(get_anon_client(), request.email)
    except Exception as e:
        raise to_http_exception(e, "verification_error", "Failed to resend verification code")

    return MessageResponse(message="Verification code sent")


@router.get(
    "/google",
    response_model=OAuthUrlResponse,
    status_code=status.HTTP_200_OK,
    summary="Start Google sign-in",
    description="""
    Returns the Google authorize URL. After consent Supabase redirects the
    browser to {CLIENT_URL}/auth/callback with a session; the client then
    calls POST /auth/oauth/complete.
    """
)
async def google_oauth_url() -> OAuthUrlResponse:
    try:
        url = get_google_oauth_url(get_anon_client())
    except Exception as e:
        raise to_http_exception(e, "oauth_error", "Failed to start Google sign-in")

    return OAuthUrlResponse(url=url)


@router.post(
    "/oauth/complete",
    response_model=OAuthCompleteResponse,
    status_code=status.HTTP_200_OK,
    summary="Finish OAuth sign-in",
    description="""
    Make sure the signed-in OAuth user has a users row. New users get a
    username derived from their email; existing rows are returned unchanged.

    Security:
    - Requires valid Authorization Bearer token from the OAuth session
    """
)
async def oauth_complete(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> OAuthCompleteResponse:
    try:
        result = await complete_oauth_sign_in(
            auth_client=get_anon_client(),
            admin_client=get_service_role_client(),
            user_id=auth_user.user_id,
            access_token=auth_user.access_token,
        )
    except Exception as e:
        raise to_http_exception(e, "oauth_error", "Failed to complete sign-in")

    return OAuthCompleteResponse(
        user=UserSummary.model_validate(result["user"]),
        created=result["created"],
    )


@router.get(
    "/me",
    response_model=AuthMeResponse,
    status_code=status.HTTP_200_OK,
    summary="Get authenticated user identity",
    description="""
    Returns the authenticated user's identity and users row.

    Used on app boot to confirm the token is valid and hydrate session
    state. The users row is null until registration or OAuth completion
    created it.
    """
)
async def get_me(
    auth_user: Annotated[AuthenticatedUser, Depends(get_authenticated_user)]
) -> AuthMeResponse:
    logger.info(f"Auth identity requested for user {auth_user.user_id}")

    supabase_client = get_supabase_client(auth_user.access_token)
    try:
        user = await get_user(supabase_client, auth_user.user_id)
    except Exception as e:
        raise to_http_exception(e, "fetch_error", "Failed to load user")

    return AuthMeResponse(
        user_id=auth_user.user_id,
        email=auth_user.email,
        user=UserSummary.model_validate(user) if user else None,
    )
