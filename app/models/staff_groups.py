"""Staff group lookup table using SQLAlchemy Core."""

from sqlalchemy import Column, Integer, String, Table

from app.models.base import metadata

staff_groups = Table(
    "staff_groups",
    metadata,
    Column("staff_group_id", Integer, primary_key=True, autoincrement=True),
    Column("staff_group_name", String(32), nullable=False),
)
