"""Staff model definition using SQLAlchemy Core."""

from sqlalchemy import (
    Column,
    DateTime,
    ForeignKey,
    Integer,
    String,
    Table,
    text,
)

from app.models.base import metadata

staffs = Table(
    "staffs",
    metadata,
    Column("staff_id", Integer, primary_key=True, autoincrement=True),
    Column("staff_name", String(32), nullable=False, server_default=text("''")),
    Column("staff_email", String(96), nullable=False, server_default=text("''"), index=True),
    Column(
        "staff_group_id",
        Integer,
        ForeignKey("staff_groups.staff_group_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    Column(
        "staff_location_id",
        Integer,
        ForeignKey("locations.location_id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    ),
    Column("timezone", String(32), nullable=False, server_default=text("''")),
    Column("language_id", String(32), nullable=False, server_default=text("''")),
    Column(
        "date_added",
        DateTime(timezone=True),
        nullable=False,
        server_default=text("CURRENT_TIMESTAMP"),
    ),
    # "1" is enabled, anything else is disabled
    Column("staff_status", String(1), nullable=False, server_default=text("'0'"), index=True),
)

# Columns a caller may write through the repository
STAFF_FILLABLE = (
    "staff_name",
    "staff_email",
    "staff_group_id",
    "staff_location_id",
    "timezone",
    "language_id",
    "staff_status",
)
