"""Tests for staff login credentials."""

import pytest
from sqlalchemy import select

from app.core.results import NotFound
from app.core.security import hash_password
from app.models import users
from app.services.user_repository import UserRepository


async def _credentials(db, staff_id: int) -> dict:
    result = await db.execute(
        select(users.c.password, users.c.salt).where(users.c.staff_id == staff_id)
    )
    return dict(result.mappings().first())


@pytest.fixture
async def login(make_staff, make_user) -> dict:
    staff_id = await make_staff(staff_name="Grace Hopper", staff_email="grace@example.com")
    salt = await make_user(staff_id, "grace", "cobol-1959")
    return {"staff_id": staff_id, "salt": salt}


class TestAuthenticate:
    """Tests for checking usernames and passwords."""

    async def test_valid_credentials(self, db_session, user_repository, login):
        staff = await user_repository.authenticate(db_session, "grace", "cobol-1959")

        assert staff["staff_id"] == login["staff_id"]
        assert staff["staff_name"] == "Grace Hopper"
        assert "password" not in staff
        assert "salt" not in staff

    async def test_username_is_case_insensitive(self, db_session, user_repository, login):
        staff = await user_repository.authenticate(db_session, " GRACE ", "cobol-1959")

        assert staff is not None

    @pytest.mark.parametrize(
        "username,password",
        [("grace", "wrong"), ("nobody", "cobol-1959"), ("", "cobol-1959"), ("grace", "")],
    )
    async def test_rejected_credentials(
        self, db_session, user_repository, login, username, password
    ):
        assert await user_repository.authenticate(db_session, username, password) is None

    async def test_disabled_staff_cannot_log_in(
        self, db_session, user_repository, make_staff, make_user
    ):
        staff_id = await make_staff(staff_status="0")
        await make_user(staff_id, "sleeper", "password")

        assert await user_repository.authenticate(db_session, "sleeper", "password") is None


class TestFindAndWrite:
    """Tests for the helpers used inside staff transactions."""

    async def test_find_by_staff_id(self, db_session, user_repository, login):
        user = await user_repository.find_by_staff_id(db_session, login["staff_id"])

        assert user["username"] == "grace"
        assert set(user) == {"user_id", "staff_id", "username"}

    async def test_find_by_non_numeric_id(self, db_session, user_repository):
        assert isinstance(await user_repository.find_by_staff_id(db_session, "grace"), NotFound)

    async def test_delete_with_no_ids(self, db_session, user_repository, login):
        assert await user_repository.delete_by_staff_ids(db_session, []) == 0

    async def test_writes_wait_for_caller_commit(self, db_session, user_repository, login):
        await user_repository.update_by_staff_id(
            db_session, login["staff_id"], {"username": "renamed"}
        )
        await db_session.rollback()

        user = await user_repository.find_by_staff_id(db_session, login["staff_id"])
        assert user["username"] == "grace"


class TestResetPassword:
    """Tests for resetting passwords by mail."""

    async def test_reset_mails_new_password(
        self, db_session, user_repository, mail_service, login
    ):
        assert await user_repository.reset_password(db_session, "Grace") is True

        assert len(mail_service.outbox) == 1
        message = mail_service.outbox[0]
        assert message["To"] == "grace@example.com"
        assert message["Subject"] == "Password reset at Test Kitchen"

        new_password = next(
            line.split(": ", 1)[1]
            for line in message.get_content().splitlines()
            if line.startswith("Your new password is: ")
        )
        assert len(new_password) == 10

        credentials = await _credentials(db_session, login["staff_id"])
        assert credentials["salt"] != login["salt"]
        assert credentials["password"] == hash_password(new_password, credentials["salt"])
        assert await user_repository.authenticate(db_session, "grace", new_password) is not None
        assert await user_repository.authenticate(db_session, "grace", "cobol-1959") is None

    async def test_unknown_username(self, db_session, user_repository, mail_service, login):
        assert await user_repository.reset_password(db_session, "ghost") is False
        assert await user_repository.reset_password(db_session, "") is False
        assert mail_service.outbox == []

    async def test_failed_mail_keeps_old_password(self, db_session, failing_mail_service, login):
        repository = UserRepository(failing_mail_service)

        assert await repository.reset_password(db_session, "grace") is False

        credentials = await _credentials(db_session, login["staff_id"])
        assert credentials["salt"] == login["salt"]
        assert await repository.authenticate(db_session, "grace", "cobol-1959") is not None
