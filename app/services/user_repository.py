"""Data access for staff login credentials."""

from collections.abc import Sequence
from typing import Any

import structlog
from sqlalchemy import delete, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.results import NotFound
from app.core.security import generate_password, generate_salt, hash_password, verify_password
from app.core.validation import is_numeric_id
from app.models.staffs import staffs
from app.models.users import users
from app.services.mail_service import MailService, MailTemplate

logger = structlog.get_logger(__name__)

# Never hand password or salt back to callers
PUBLIC_USER_COLUMNS = (users.c.user_id, users.c.staff_id, users.c.username)


class UserRepository:
    """
    Repository for the ``users`` table paired 1:1 with staff.

    Write helpers (insert, update, delete) do not commit; the staff repository
    runs them inside its own transaction.
    """

    def __init__(self, mail_service: MailService | None = None):
        """Initialize with the mail service used for password resets."""
        self.mail = mail_service or MailService()

    async def find_by_staff_id(self, db: AsyncSession, staff_id: Any) -> dict | NotFound:
        """Get the credentials row for a staff id."""
        if not is_numeric_id(staff_id):
            return NotFound("User", staff_id)

        query = select(*PUBLIC_USER_COLUMNS).where(users.c.staff_id == int(staff_id))
        result = await db.execute(query)
        user = result.mappings().first()

        return dict(user) if user else NotFound("User", staff_id)

    async def insert(self, db: AsyncSession, values: dict[str, Any]) -> int:
        """Insert a credentials row and return its user_id."""
        result = await db.execute(users.insert().values(**values))
        return result.inserted_primary_key[0]

    async def update_by_staff_id(
        self, db: AsyncSession, staff_id: int, values: dict[str, Any]
    ) -> int:
        """Update the credentials of a staff member, returning rows affected."""
        query = update(users).where(users.c.staff_id == staff_id).values(**values)
        result = await db.execute(query)
        return result.rowcount  # type: ignore[attr-defined]

    async def delete_by_staff_ids(self, db: AsyncSession, staff_ids: Sequence[int]) -> int:
        """Delete the credentials of several staff members."""
        if not staff_ids:
            return 0
        query = delete(users).where(users.c.staff_id.in_(staff_ids))
        result = await db.execute(query)
        return result.rowcount  # type: ignore[attr-defined]

    async def _find_login(self, db: AsyncSession, username: str) -> dict | None:
        query = (
            select(
                users.c.user_id,
                users.c.staff_id,
                users.c.username,
                users.c.password,
                users.c.salt,
                staffs.c.staff_name,
                staffs.c.staff_email,
                staffs.c.staff_status,
            )
            .select_from(users.join(staffs, users.c.staff_id == staffs.c.staff_id))
            .where(users.c.username == username.strip().lower())
        )
        result = await db.execute(query)
        row = result.mappings().first()
        return dict(row) if row else None

    async def authenticate(self, db: AsyncSession, username: str, password: str) -> dict | None:
        """
        Check a username and password.

        Returns:
            The staff login row without secrets, or None when the username is
            unknown, the password is wrong or the staff member is disabled
        """
        if not username or not password:
            return None

        login = await self._find_login(db, username)
        if not login or not verify_password(password, login["salt"], login["password"]):
            logger.info("staff_login_failed", username=username)
            return None

        if login["staff_status"] != "1":
            logger.info("staff_login_disabled", staff_id=login["staff_id"])
            return None

        login.pop("password")
        login.pop("salt")
        return login

    async def reset_password(self, db: AsyncSession, username: str) -> bool:
        """
        Generate a new password for a username and mail it to the staff member.

        The new hash is only committed once the mail has been sent.
        """
        if not username:
            return False

        login = await self._find_login(db, username)
        if not login:
            logger.info("password_reset_unknown_username", username=username)
            return False

        new_password = generate_password()
        salt = generate_salt()

        try:
            await db.execute(
                update(users)
                .where(users.c.user_id == login["user_id"])
                .values(password=hash_password(new_password, salt), salt=salt)
            )

            sent = await self.send_mail(
                login["staff_email"],
                "password_reset",
                {
                    "staff_name": login["staff_name"],
                    "username": login["username"],
                    "reset_password": new_password,
                },
            )
            if not sent:
                await db.rollback()
                logger.warning("password_reset_mail_failed", staff_id=login["staff_id"])
                return False

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        logger.info("staff_password_reset", staff_id=login["staff_id"])
        return True

    async def send_mail(
        self,
        email: str,
        template: str | MailTemplate,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """Send a templated mail to a staff address."""
        return await self.mail.send_mail(email, template, data)
