"""Location lookup table using SQLAlchemy Core."""

from sqlalchemy import Column, Integer, String, Table

from app.models.base import metadata

locations = Table(
    "locations",
    metadata,
    Column("location_id", Integer, primary_key=True, autoincrement=True),
    Column("location_name", String(32), nullable=False),
    Column("location_email", String(96)),
)
