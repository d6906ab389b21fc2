"""Authentication schemas."""

from pydantic import BaseModel, Field


class LoginRequest(BaseModel):
    """Staff username and password login."""

    username: str = Field(..., min_length=1, max_length=32)
    password: str = Field(..., min_length=1)


class StaffLoginInfo(BaseModel):
    """Staff member behind a login."""

    staff_id: int
    staff_name: str
    staff_email: str
    username: str


class LoginResponse(BaseModel):
    """Login response with token and staff info."""

    access_token: str
    token_type: str = "bearer"
    staff: StaffLoginInfo


class PasswordResetRequest(BaseModel):
    """Request a password reset mail for a username."""

    username: str = Field(..., min_length=1, max_length=32)


class MessageResponse(BaseModel):
    """Plain message response."""

    message: str
