"""Staff login credentials model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    Integer,
    String,
    Table,
)

from app.models.base import metadata

users = Table(
    "users",
    metadata,
    Column("user_id", Integer, primary_key=True, autoincrement=True),
    # Shared key with staffs; the repository removes these rows with their staff
    Column("staff_id", Integer, nullable=False, unique=True, index=True),
    Column("username", String(32), nullable=False, unique=True, index=True),
    # sha1(salt + sha1(salt + sha1(password)))
    Column("password", String(40), nullable=False),
    Column("salt", String(9), nullable=False),
)
