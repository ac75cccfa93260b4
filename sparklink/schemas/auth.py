"""
Pydantic schemas for authentication endpoints.

These models define the strict request/response contracts for auth endpoints.
Credentials are handled by Supabase Auth; the `users` row carries the
SparkLink account fields.
"""

from typing import Optional

from pydantic import BaseModel, EmailStr, Field


class UserSummary(BaseModel):
    """
    Condensed users row returned by auth and profile endpoints.
    """
    id: str = Field(..., description="User UUID (same as the Supabase auth user id)")
    email: Optional[str] = Field(None, description="Account email")
    username: Optional[str] = Field(None, description="Public username (lowercase)", examples=["ama_mensah"])
    first_name: Optional[str] = Field(None, description="User's first name")
    last_name: Optional[str] = Field(None, description="User's last name")
    country: Optional[str] = Field(None, description="Country name or ISO code", examples=["Ghana", "GH"])
    phone: Optional[str] = Field(None, description="Phone number")
    profile_picture: Optional[str] = Field(None, description="Public URL of the profile picture")
    subscription: Optional[str] = Field("STARTER", description="Subscription tier", examples=["STARTER", "RISE", "BLAZE"])
    subscription_expires_at: Optional[str] = Field(None, description="ISO-8601 expiry of the paid plan")
    has_verified_badge: Optional[bool] = Field(False, description="True if the verified badge was granted")
    verification_status: Optional[str] = Field("NONE", description="Verified badge workflow status")


class SessionTokens(BaseModel):
    """Supabase session issued on sign-in."""
    access_token: str = Field(..., description="JWT to send as Authorization: Bearer")
    refresh_token: str = Field(..., description="Token for refreshing the session with Supabase")
    expires_in: Optional[int] = Field(None, description="Access token lifetime in seconds")
    token_type: str = Field("bearer", description="Always 'bearer'")


# --- Register / login ---

class RegisterRequest(BaseModel):
    """
    Request to create an account.

    The username is lowercased and must match ^[a-z0-9_]{3,30}$.
    """
    email: EmailStr = Field(..., description="Account email", examples=["ama@example.com"])
    password: str = Field(..., min_length=8, max_length=128, description="Account password (min 8 characters)")
    first_name: str = Field(..., min_length=1, max_length=100, description="First name")
    last_name: str = Field(..., min_length=1, max_length=100, description="Last name")
    username: str = Field(..., min_length=3, max_length=30, description="Desired public username", examples=["ama_mensah"])
    country: Optional[str] = Field(None, max_length=100, description="Country")
    phone: Optional[str] = Field(None, max_length=30, description="Phone number")


class RegisterResponse(BaseModel):
    status: str = Field("REGISTERED", description="Indicates the account was created")
    user: UserSummary = Field(..., description="The new users row")
    session: Optional[SessionTokens] = Field(
        None,
        description="Present only when email confirmation is disabled in Supabase"
    )
    message: str = Field(
        ...,
        description="Next step for the client",
        examples=["Registration successful. Check your email for the verification code."]
    )


class LoginRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    password: str = Field(..., min_length=1, description="Account password")


class LoginResponse(BaseModel):
    user: Optional[UserSummary] = Field(None, description="The users row (null if it was never created)")
    session: SessionTokens = Field(..., description="Supabase session tokens")


# --- Email verification ---

class VerifyEmailRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email")
    code: str = Field(..., pattern=r"^\d{6}$", description="6-digit code from the signup email", examples=["123456"])


class VerifyEmailResponse(BaseModel):
    verified: bool = Field(True, description="True when the address is confirmed")
    session: Optional[SessionTokens] = Field(None, description="Session issued by the confirmation")
    message: str = Field("Email verified successfully", description="Success message")


class ResendVerificationRequest(BaseModel):
    email: EmailStr = Field(..., description="Account email")


class MessageResponse(BaseModel):
    """Generic acknowledgement."""
    message: str = Field(..., description="Human-readable result")


# --- OAuth ---

class OAuthUrlResponse(BaseModel):
    url: str = Field(..., description="Google authorize URL to redirect the browser to")


class OAuthCompleteResponse(BaseModel):
    user: UserSummary = Field(..., description="The users row linked to the OAuth identity")
    created: bool = Field(..., description="True if the users row was created by this call")


# --- Session identity ---

class AuthMeResponse(BaseModel):
    """
    Response for GET /auth/me - Authenticated user identity.

    Used on app boot to hydrate global session state and confirm token validity.
    """
    user_id: str = Field(..., description="User UUID (from JWT 'sub' claim)")
    email: Optional[str] = Field(
        None,
        description="User's email (from JWT 'email' claim, if present)"
    )
    user: Optional[UserSummary] = Field(
        None,
        description="The users row if it exists. Null until registration or OAuth completion created it."
    )

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "user_id": "38f7d540-23fa-497a-8df2-3ab9cbe13da5",
                    "email": "ama@example.com",
                    "user": {
                        "id": "38f7d540-23fa-497a-8df2-3ab9cbe13da5",
                        "email": "ama@example.com",
                        "username": "ama_mensah",
                        "first_name": "Ama",
                        "last_name": "Mensah",
                        "subscription": "RISE",
                        "has_verified_badge": False,
                        "verification_status": "NONE"
                    }
                }
            ]
        }
    }
