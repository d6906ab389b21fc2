"""Database models."""

from app.models.base import metadata
from app.models.locations import locations
from app.models.staff_groups import staff_groups
from app.models.staffs import STAFF_FILLABLE, staffs
from app.models.users import users

__all__ = [
    "STAFF_FILLABLE",
    "locations",
    "metadata",
    "staff_groups",
    "staffs",
    "users",
]
