"""Data access for staff records."""

from collections.abc import Mapping
from datetime import UTC, datetime
from math import ceil
from typing import Any

import structlog
from sqlalchemy import delete, extract, false, func, or_, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql.elements import ColumnElement

from app.config import Settings
from app.core.redis_client import CacheManager
from app.core.results import NotFound
from app.core.security import generate_salt, hash_password
from app.core.validation import is_blank, is_numeric_id
from app.models.locations import locations
from app.models.staff_groups import staff_groups
from app.models.staffs import STAFF_FILLABLE, staffs
from app.models.users import users
from app.services.mail_service import MailTemplate
from app.services.user_repository import UserRepository

logger = structlog.get_logger(__name__)

STATUS_ENABLED = "1"

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100

# Columns returned by filter(), also the ones it can sort on
LISTING_COLUMNS = {
    "staff_id": staffs.c.staff_id,
    "staff_name": staffs.c.staff_name,
    "staff_email": staffs.c.staff_email,
    "staff_group_name": staff_groups.c.staff_group_name,
    "location_name": locations.c.location_name,
    "username": users.c.username,
    "date_added": staffs.c.date_added,
    "staff_status": staffs.c.staff_status,
}


def _status_value(value: Any) -> str:
    if isinstance(value, bool):
        return STATUS_ENABLED if value else "0"
    return str(value)


def _positive_int(value: Any, default: int, maximum: int | None = None) -> int:
    if not is_numeric_id(value) or int(value) < 1:
        return default
    number = int(value)
    return min(number, maximum) if maximum else number


def _restore_cached_row(row: Any) -> dict | None:
    """Turn a cached staff row back into the shape the database returns."""
    if not isinstance(row, dict):
        return None
    date_added = row.get("date_added")
    if isinstance(date_added, str):
        try:
            row["date_added"] = datetime.fromisoformat(date_added)
        except ValueError:
            return None
    return row


def _parse_year_month(value: Any) -> tuple[int, int] | None:
    """Parse a ``YYYY-MM`` string."""
    if not isinstance(value, str):
        return None
    parts = value.strip().split("-")
    if len(parts) < 2 or not is_numeric_id(parts[0]) or not is_numeric_id(parts[1]):
        return None
    year, month = int(parts[0]), int(parts[1])
    if not 1 <= month <= 12:
        return None
    return year, month


class StaffRepository:
    """Repository for staff records and their companion credentials."""

    # Cache TTL in seconds (30 minutes for staff records)
    STAFF_CACHE_TTL = 1800

    def __init__(
        self,
        single_location_mode: bool = False,
        default_location_id: int | None = None,
        user_repository: UserRepository | None = None,
        cache_manager: CacheManager | None = None,
    ):
        """
        Initialize the repository.

        Args:
            single_location_mode: Force every saved staff member onto one location
            default_location_id: The location used in single-location mode
            user_repository: Credentials repository, created if omitted
            cache_manager: Optional cache for single staff lookups
        """
        self.single_location_mode = single_location_mode
        self.default_location_id = default_location_id
        self.users = user_repository or UserRepository()
        self.cache = cache_manager

    @classmethod
    def from_settings(
        cls,
        config: Settings,
        user_repository: UserRepository | None = None,
        cache_manager: CacheManager | None = None,
    ) -> "StaffRepository":
        """Build a repository from application settings."""
        return cls(
            single_location_mode=config.single_location_mode,
            default_location_id=config.default_location_id,
            user_repository=user_repository,
            cache_manager=cache_manager,
        )

    @staticmethod
    def _get_staff_cache_key(staff_id: int) -> str:
        """Generate cache key for staff."""
        return f"staff:{staff_id}"

    def _invalidate(self, *staff_ids: int) -> None:
        if self.cache:
            self.cache.delete(*(self._get_staff_cache_key(staff_id) for staff_id in staff_ids))

    async def list_enabled(self, db: AsyncSession) -> list[dict]:
        """Get all enabled staff."""
        query = (
            select(staffs)
            .where(staffs.c.staff_status == STATUS_ENABLED)
            .order_by(staffs.c.staff_id)
        )
        result = await db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    async def find(self, db: AsyncSession, staff_id: Any) -> dict | NotFound:
        """Get a staff member by id, with caching."""
        if not is_numeric_id(staff_id):
            return NotFound("Staff", staff_id)

        staff_id = int(staff_id)

        if self.cache:
            cached_staff = _restore_cached_row(
                self.cache.get_json(self._get_staff_cache_key(staff_id))
            )
            if cached_staff:
                return cached_staff

        query = select(staffs).where(staffs.c.staff_id == staff_id)
        result = await db.execute(query)
        staff = result.mappings().first()

        if not staff:
            return NotFound("Staff", staff_id)

        staff_dict = dict(staff)

        if self.cache:
            self.cache.set_json(
                self._get_staff_cache_key(staff_id), staff_dict, ttl=self.STAFF_CACHE_TTL
            )

        return staff_dict

    async def find_user(self, db: AsyncSession, staff_id: Any) -> dict | NotFound:
        """Get the login record of a staff member."""
        return await self.users.find_by_staff_id(db, staff_id)

    async def list_dates(self, db: AsyncSession) -> dict[str, str]:
        """
        Get the distinct months staff were added in, newest first.

        Returns:
            Mapping of ``YYYY-MM`` to a display label such as ``May 2017``
        """
        query = select(staffs.c.date_added).order_by(staffs.c.date_added.desc())
        result = await db.execute(query)

        dates: dict[str, str] = {}
        for date_added in result.scalars().all():
            if date_added is None:
                continue
            key = date_added.strftime("%Y-%m")
            if key not in dates:
                dates[key] = date_added.strftime("%B %Y")
        return dates

    async def _list_for_messages(
        self,
        db: AsyncSession,
        column: ColumnElement,
        staff_ids: Any = None,
        staff_group_id: Any = None,
    ) -> list | None:
        conditions = [staffs.c.staff_status == STATUS_ENABLED]

        if staff_ids is not None:
            # An empty list selects nobody rather than everybody
            if not isinstance(staff_ids, (list, tuple)) or not staff_ids:
                return None
            if not all(is_numeric_id(i) for i in staff_ids):
                return None
            conditions.append(staffs.c.staff_id.in_([int(i) for i in staff_ids]))

        if staff_group_id is not None:
            if not is_numeric_id(staff_group_id):
                return None
            conditions.append(staffs.c.staff_group_id == int(staff_group_id))

        query = select(column).where(*conditions).order_by(staffs.c.staff_id)
        result = await db.execute(query)
        return list(result.scalars().all())

    async def list_emails_for_messages(
        self,
        db: AsyncSession,
        staff_ids: Any = None,
        staff_group_id: Any = None,
    ) -> list[str] | None:
        """
        Get the emails of enabled staff to send messages to.

        Args:
            db: Database session
            staff_ids: Optional explicit list of staff ids
            staff_group_id: Optional staff group id

        Returns:
            Email list, or None when a restriction is malformed or empty
        """
        return await self._list_for_messages(db, staffs.c.staff_email, staff_ids, staff_group_id)

    async def list_ids_for_messages(
        self,
        db: AsyncSession,
        staff_ids: Any = None,
        staff_group_id: Any = None,
    ) -> list[int] | None:
        """Get the ids of enabled staff to send messages to."""
        return await self._list_for_messages(db, staffs.c.staff_id, staff_ids, staff_group_id)

    async def autocomplete(self, db: AsyncSession, filter_data: Any) -> list[dict] | None:
        """Match staff by partial name and/or exact id for select widgets."""
        if not isinstance(filter_data, Mapping) or not filter_data:
            return None

        conditions = []

        staff_name = filter_data.get("staff_name")
        if not is_blank(staff_name):
            conditions.append(staffs.c.staff_name.icontains(str(staff_name), autoescape=True))

        staff_id = filter_data.get("staff_id")
        if not is_blank(staff_id):
            if is_numeric_id(staff_id):
                conditions.append(staffs.c.staff_id == int(staff_id))
            else:
                conditions.append(false())

        query = select(staffs).where(*conditions).order_by(staffs.c.staff_name)
        result = await db.execute(query)
        return [dict(row) for row in result.mappings().all()]

    def _filter_conditions(self, criteria: Mapping[str, Any]) -> list[ColumnElement]:
        conditions: list[ColumnElement] = []

        search = criteria.get("filter_search")
        if not is_blank(search):
            term = str(search).strip()
            conditions.append(
                or_(
                    staffs.c.staff_name.icontains(term, autoescape=True),
                    locations.c.location_name.icontains(term, autoescape=True),
                    staffs.c.staff_email.icontains(term, autoescape=True),
                )
            )

        group = criteria.get("filter_group")
        if is_numeric_id(group):
            conditions.append(staffs.c.staff_group_id == int(group))

        location = criteria.get("filter_location")
        if not is_blank(location):
            if is_numeric_id(location):
                conditions.append(staffs.c.staff_location_id == int(location))
            else:
                conditions.append(false())

        date = criteria.get("filter_date")
        if not is_blank(date):
            year_month = _parse_year_month(date)
            if year_month is None:
                conditions.append(false())
            else:
                year, month = year_month
                conditions.append(extract("year", staffs.c.date_added) == year)
                conditions.append(extract("month", staffs.c.date_added) == month)

        status = criteria.get("filter_status")
        if is_numeric_id(status):
            conditions.append(staffs.c.staff_status == str(int(status)))

        return conditions

    async def filter(self, db: AsyncSession, criteria: Mapping[str, Any] | None = None) -> dict:
        """
        Get a page of staff joined with their login, group and location.

        Supported criteria: ``filter_search``, ``filter_group``,
        ``filter_location``, ``filter_date`` (``YYYY-MM``), ``filter_status``,
        ``page``, ``page_size``, ``sort_by`` and ``order_by``. Joins are left
        joins, so staff without a login, group or location are still listed
        with those fields set to None.
        """
        criteria = criteria or {}

        joined = (
            staffs.outerjoin(users, users.c.staff_id == staffs.c.staff_id)
            .outerjoin(staff_groups, staff_groups.c.staff_group_id == staffs.c.staff_group_id)
            .outerjoin(locations, locations.c.location_id == staffs.c.staff_location_id)
        )
        conditions = self._filter_conditions(criteria)

        page = _positive_int(criteria.get("page"), 1)
        page_size = _positive_int(criteria.get("page_size"), DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE)

        sort_column = LISTING_COLUMNS.get(str(criteria.get("sort_by") or ""), staffs.c.staff_id)
        descending = str(criteria.get("order_by") or "DESC").upper() != "ASC"
        ordering = sort_column.desc() if descending else sort_column.asc()

        count_query = select(func.count()).select_from(joined).where(*conditions)
        total = (await db.execute(count_query)).scalar_one()

        query = (
            select(*(column.label(name) for name, column in LISTING_COLUMNS.items()))
            .select_from(joined)
            .where(*conditions)
            .order_by(ordering, staffs.c.staff_id.desc())
            .offset((page - 1) * page_size)
            .limit(page_size)
        )
        result = await db.execute(query)

        return {
            "staffs": [dict(row) for row in result.mappings().all()],
            "total": total,
            "page": page,
            "page_size": page_size,
            "total_pages": ceil(total / page_size) if total else 0,
        }

    async def save(self, db: AsyncSession, staff_id: Any, fields: Any) -> int | None:
        """
        Create a staff member, or update one when ``staff_id`` is numeric.

        A non-empty ``password`` in ``fields`` is hashed with a fresh salt.
        New staff get a login row when ``username`` is also given; existing
        staff have their login row updated. Both writes commit together.

        Returns:
            The staff id, or None for empty input or an unknown id
        """
        if not isinstance(fields, Mapping):
            return None

        # None never overwrites a NOT NULL column
        values = {
            key: value
            for key, value in fields.items()
            if not (value is None and key in staffs.c and not staffs.c[key].nullable)
        }
        if not values:
            return None

        is_update = is_numeric_id(staff_id)

        if self.single_location_mode:
            values["staff_location_id"] = self.default_location_id

        if values.get("timezone") is None:
            values["timezone"] = ""
        if values.get("language_id") is None:
            values["language_id"] = ""

        row_values = {key: values[key] for key in STAFF_FILLABLE if key in values}
        if "staff_status" in row_values:
            row_values["staff_status"] = _status_value(row_values["staff_status"])

        try:
            if is_update:
                staff_id = int(staff_id)
                result = await db.execute(
                    update(staffs).where(staffs.c.staff_id == staff_id).values(**row_values)
                )
                if result.rowcount == 0:  # type: ignore[attr-defined]
                    await db.rollback()
                    logger.info("staff_update_missing", staff_id=staff_id)
                    return None
            else:
                row_values["date_added"] = datetime.now(UTC)
                result = await db.execute(staffs.insert().values(**row_values))
                staff_id = result.inserted_primary_key[0]

            password = values.get("password")
            if password:
                salt = generate_salt()
                credentials = {"salt": salt, "password": hash_password(str(password), salt)}
                username = values.get("username")

                if not is_update and username:
                    await self.users.insert(
                        db,
                        {**credentials, "username": str(username).strip().lower(), "staff_id": staff_id},
                    )
                else:
                    await self.users.update_by_staff_id(db, staff_id, credentials)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        self._invalidate(staff_id)
        logger.info("staff_updated" if is_update else "staff_created", staff_id=staff_id)

        return staff_id

    async def reset_password(self, db: AsyncSession, username: str) -> bool:
        """Reset a staff password and mail the new one to the staff member."""
        return await self.users.reset_password(db, username)

    async def delete(self, db: AsyncSession, staff_ids: Any) -> int | None:
        """
        Delete one or more staff members and their logins.

        Returns:
            Number of staff rows deleted, or None if any id is not numeric
        """
        if is_numeric_id(staff_ids):
            staff_ids = [staff_ids]

        if not isinstance(staff_ids, (list, tuple, set)) or not staff_ids:
            return None

        if not all(is_numeric_id(staff_id) for staff_id in staff_ids):
            return None

        ids = sorted({int(staff_id) for staff_id in staff_ids})

        try:
            result = await db.execute(delete(staffs).where(staffs.c.staff_id.in_(ids)))
            deleted = result.rowcount  # type: ignore[attr-defined]

            if deleted > 0:
                await self.users.delete_by_staff_ids(db, ids)

            await db.commit()
        except Exception:
            await db.rollback()
            raise

        if deleted > 0:
            self._invalidate(*ids)
            logger.info("staff_deleted", staff_ids=ids, count=deleted)

        return deleted

    async def send_mail(
        self,
        email: str,
        template: str | MailTemplate,
        data: dict[str, Any] | None = None,
    ) -> bool:
        """Send a templated mail to a staff member."""
        return await self.users.send_mail(email, template, data)

    async def exists(self, db: AsyncSession, id_or_email: Any) -> bool:
        """Check whether a staff member exists by numeric id or by email."""
        if is_numeric_id(id_or_email):
            condition = staffs.c.staff_id == int(id_or_email)
        elif isinstance(id_or_email, str) and id_or_email:
            condition = staffs.c.staff_email == id_or_email
        else:
            return False

        query = select(staffs.c.staff_id).where(condition).limit(1)
        result = await db.execute(query)
        return result.first() is not None
