"""Authentication endpoints."""

import structlog
from fastapi import APIRouter, status

from app.core.exceptions import NotFoundException, UnauthorizedException
from app.core.security import create_access_token
from app.dependencies import DatabaseSession, UserRepositoryDep
from app.schemas.auth import (
    LoginRequest,
    LoginResponse,
    MessageResponse,
    PasswordResetRequest,
    StaffLoginInfo,
)

logger = structlog.get_logger(__name__)

router = APIRouter()


@router.post(
    "/login",
    response_model=LoginResponse,
    status_code=status.HTTP_200_OK,
    summary="Staff username and password login",
)
async def login(
    request: LoginRequest,
    db: DatabaseSession,
    user_repository: UserRepositoryDep,
) -> LoginResponse:
    """
    Verify staff credentials and return an access token.

    Raises:
        UnauthorizedException: If the credentials are wrong or the staff is disabled
    """
    staff = await user_repository.authenticate(db, request.username, request.password)

    if not staff:
        raise UnauthorizedException("Username and password not found")

    access_token = create_access_token({"sub": str(staff["staff_id"])})
    logger.info("staff_logged_in", staff_id=staff["staff_id"])

    return LoginResponse(
        access_token=access_token,
        staff=StaffLoginInfo(
            staff_id=staff["staff_id"],
            staff_name=staff["staff_name"],
            staff_email=staff["staff_email"],
            username=staff["username"],
        ),
    )


@router.post(
    "/reset-password",
    response_model=MessageResponse,
    status_code=status.HTTP_202_ACCEPTED,
    summary="Mail a new password to a staff member",
)
async def reset_password(
    request: PasswordResetRequest,
    db: DatabaseSession,
    user_repository: UserRepositoryDep,
) -> MessageResponse:
    """Generate a new password for the username and mail it to the staff email."""
    if not await user_repository.reset_password(db, request.username):
        raise NotFoundException("Password could not be reset for that username")

    return MessageResponse(message="A new password has been sent to the staff email")
