"""FastAPI dependencies."""

from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.config import Settings, get_settings
from app.core.exceptions import ForbiddenException
from app.core.redis_client import CacheManager, get_redis_client
from app.core.security import decode_access_token
from app.core.validation import is_numeric_id
from app.database import get_db
from app.services.mail_service import MailService
from app.services.staff_repository import StaffRepository
from app.services.user_repository import UserRepository

# Security
security = HTTPBearer()


def get_cache_manager(
    config: Annotated[Settings, Depends(get_settings)],
) -> CacheManager | None:
    """Cache manager when caching is enabled in settings."""
    if not config.cache_enabled:
        return None
    return CacheManager(get_redis_client(config), key_prefix=config.cache_key_prefix)


def get_mail_service(config: Annotated[Settings, Depends(get_settings)]) -> MailService:
    """Mail service bound to the current settings."""
    return MailService(config)


def get_user_repository(
    mail_service: Annotated[MailService, Depends(get_mail_service)],
) -> UserRepository:
    """Credentials repository."""
    return UserRepository(mail_service)


def get_staff_repository(
    config: Annotated[Settings, Depends(get_settings)],
    user_repository: Annotated[UserRepository, Depends(get_user_repository)],
    cache_manager: Annotated[CacheManager | None, Depends(get_cache_manager)],
) -> StaffRepository:
    """Staff repository configured from settings."""
    return StaffRepository.from_settings(config, user_repository, cache_manager)


async def get_current_staff_id(
    credentials: Annotated[HTTPAuthorizationCredentials, Depends(security)],
) -> int:
    """
    Extract and validate the staff id from a JWT token.

    Args:
        credentials: Bearer token credentials

    Returns:
        Staff ID from token

    Raises:
        HTTPException: If token is invalid or expired
    """
    payload = decode_access_token(credentials.credentials)

    if payload is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Could not validate credentials",
            headers={"WWW-Authenticate": "Bearer"},
        )

    staff_id = payload.get("sub")
    if not is_numeric_id(staff_id):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid staff ID format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return int(staff_id)


async def get_current_staff(
    staff_id: Annotated[int, Depends(get_current_staff_id)],
    db: Annotated[AsyncSession, Depends(get_db)],
    staff_repository: Annotated[StaffRepository, Depends(get_staff_repository)],
) -> dict:
    """
    Get the authenticated staff member.

    Raises:
        HTTPException: If the staff member is gone
        ForbiddenException: If the staff account is disabled
    """
    staff = await staff_repository.find(db, staff_id)

    if not staff:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Staff not found",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if staff["staff_status"] != "1":
        raise ForbiddenException("Staff account is disabled")

    return staff


# Type aliases for dependency injection
DatabaseSession = Annotated[AsyncSession, Depends(get_db)]
CurrentStaff = Annotated[dict, Depends(get_current_staff)]
StaffRepositoryDep = Annotated[StaffRepository, Depends(get_staff_repository)]
UserRepositoryDep = Annotated[UserRepository, Depends(get_user_repository)]
