"""Staff schemas for request/response validation."""

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


class StaffBase(BaseModel):
    """Base staff schema with common fields."""

    staff_name: str = Field(..., min_length=2, max_length=32)
    staff_email: EmailStr
    staff_group_id: int | None = None
    staff_location_id: int | None = None
    timezone: str | None = Field(None, max_length=32)
    language_id: str | None = Field(None, max_length=32)
    staff_status: Literal["0", "1"] = "1"


class StaffCreate(StaffBase):
    """Schema for creating a staff member with an optional login."""

    username: str | None = Field(None, min_length=2, max_length=32)
    password: str | None = Field(None, min_length=6, max_length=40)

    @field_validator("username")
    @classmethod
    def lowercase_username(cls, value: str | None) -> str | None:
        """Usernames are stored lowercase."""
        return value.strip().lower() if value else value


class StaffUpdate(BaseModel):
    """Schema for updating a staff member."""

    staff_name: str | None = Field(None, min_length=2, max_length=32)
    staff_email: EmailStr | None = None
    staff_group_id: int | None = None
    staff_location_id: int | None = None
    timezone: str | None = Field(None, max_length=32)
    language_id: str | None = Field(None, max_length=32)
    staff_status: Literal["0", "1"] | None = None
    password: str | None = Field(None, min_length=6, max_length=40)

    @field_validator("staff_name", "staff_email", "staff_status")
    @classmethod
    def reject_null(cls, value: str | None) -> str | None:
        """These columns may be left out of an update but never cleared."""
        if value is None:
            raise ValueError("must not be null")
        return value


class StaffResponse(BaseModel):
    """Staff record as stored in the database."""

    model_config = ConfigDict(from_attributes=True)

    staff_id: int
    staff_name: str
    staff_email: str
    staff_group_id: int | None = None
    staff_location_id: int | None = None
    timezone: str
    language_id: str
    date_added: datetime
    staff_status: str


class StaffListItem(BaseModel):
    """Staff row joined with login, group and location names."""

    staff_id: int
    staff_name: str
    staff_email: str
    staff_group_name: str | None = None
    location_name: str | None = None
    username: str | None = None
    date_added: datetime
    staff_status: str


class StaffListResponse(BaseModel):
    """Paginated staff listing."""

    staffs: list[StaffListItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class StaffUserResponse(BaseModel):
    """Login record of a staff member, without credentials."""

    user_id: int
    staff_id: int
    username: str


class StaffBulkDelete(BaseModel):
    """Request body for deleting several staff members."""

    staff_ids: list[int] = Field(..., min_length=1)


class StaffDeleteResponse(BaseModel):
    """Number of staff records deleted."""

    deleted: int


class StaffExistsResponse(BaseModel):
    """Whether a staff id or email is already taken."""

    exists: bool


class MessageRecipientsResponse(BaseModel):
    """Recipients resolved for a staff message."""

    field: Literal["email", "id"]
    recipients: list[str] | list[int]
