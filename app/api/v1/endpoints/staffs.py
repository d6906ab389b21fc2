"""Staff endpoints."""

from fastapi import APIRouter, Query, status
from sqlalchemy.exc import IntegrityError

from app.core.exceptions import BadRequestException, ConflictException, NotFoundException
from app.core.results import NotFound
from app.dependencies import CurrentStaff, DatabaseSession, StaffRepositoryDep
from app.schemas.staffs import (
    MessageRecipientsResponse,
    StaffBulkDelete,
    StaffCreate,
    StaffDeleteResponse,
    StaffExistsResponse,
    StaffListResponse,
    StaffResponse,
    StaffUpdate,
    StaffUserResponse,
)

router = APIRouter(prefix="/staffs", tags=["staffs"])


async def _get_staff_or_404(
    staff_repository: StaffRepositoryDep, db: DatabaseSession, staff_id: int
) -> StaffResponse:
    staff = await staff_repository.find(db, staff_id)
    if isinstance(staff, NotFound):
        raise NotFoundException(staff.message)
    return StaffResponse.model_validate(staff)


@router.get("", response_model=StaffListResponse)
async def list_staffs(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
    filter_search: str | None = Query(None, description="Search name, email or location"),
    filter_group: int | None = Query(None, description="Filter by staff group"),
    filter_location: int | None = Query(None, description="Filter by location"),
    filter_date: str | None = Query(None, description="Filter by month added (YYYY-MM)"),
    filter_status: int | None = Query(None, ge=0, le=1, description="Filter by status"),
    page: int = Query(1, ge=1, description="Page number"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page"),
    sort_by: str = Query("staff_id", description="Column to sort on"),
    order_by: str = Query("DESC", pattern="^(ASC|DESC|asc|desc)$", description="Sort direction"),
):
    """Get a filtered, paginated list of staff."""
    listing = await staff_repository.filter(
        db,
        {
            "filter_search": filter_search,
            "filter_group": filter_group,
            "filter_location": filter_location,
            "filter_date": filter_date,
            "filter_status": filter_status,
            "page": page,
            "page_size": page_size,
            "sort_by": sort_by,
            "order_by": order_by,
        },
    )
    return StaffListResponse.model_validate(listing)


@router.get("/enabled", response_model=list[StaffResponse])
async def list_enabled_staffs(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Get all enabled staff."""
    return [StaffResponse.model_validate(s) for s in await staff_repository.list_enabled(db)]


@router.get("/dates", response_model=dict[str, str])
async def list_staff_dates(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Get the months staff were added in, for date filters."""
    return await staff_repository.list_dates(db)


@router.get("/autocomplete", response_model=list[StaffResponse])
async def autocomplete_staffs(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
    staff_name: str | None = Query(None, description="Part of the staff name"),
    staff_id: int | None = Query(None, description="Exact staff id"),
):
    """Match staff for select auto-complete options."""
    filter_data = {
        key: value
        for key, value in {"staff_name": staff_name, "staff_id": staff_id}.items()
        if value is not None
    }
    matches = await staff_repository.autocomplete(db, filter_data)
    return [StaffResponse.model_validate(s) for s in matches or []]


@router.get("/recipients", response_model=MessageRecipientsResponse)
async def list_message_recipients(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
    field: str = Query("id", description="'email' for addresses, anything else for ids"),
    staff_ids: list[int] | None = Query(None, description="Restrict to these staff ids"),
    staff_group_id: int | None = Query(None, description="Restrict to a staff group"),
):
    """Resolve the enabled staff a message should go to."""
    if field == "email":
        recipients = await staff_repository.list_emails_for_messages(
            db, staff_ids=staff_ids, staff_group_id=staff_group_id
        )
    else:
        field = "id"
        recipients = await staff_repository.list_ids_for_messages(
            db, staff_ids=staff_ids, staff_group_id=staff_group_id
        )

    return MessageRecipientsResponse(field=field, recipients=recipients or [])


@router.get("/exists", response_model=StaffExistsResponse)
async def staff_exists(
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
    value: str = Query(..., min_length=1, description="Staff id or email"),
):
    """Check whether a staff id or email is taken."""
    return StaffExistsResponse(exists=await staff_repository.exists(db, value))


@router.get("/{staff_id}", response_model=StaffResponse)
async def get_staff(
    staff_id: int,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Get a single staff member."""
    return await _get_staff_or_404(staff_repository, db, staff_id)


@router.get("/{staff_id}/user", response_model=StaffUserResponse)
async def get_staff_user(
    staff_id: int,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Get the login record of a staff member."""
    user = await staff_repository.find_user(db, staff_id)
    if isinstance(user, NotFound):
        raise NotFoundException(user.message)
    return StaffUserResponse.model_validate(user)


@router.post("", response_model=StaffResponse, status_code=status.HTTP_201_CREATED)
async def create_staff(
    staff_data: StaffCreate,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Create a staff member, with a login when username and password are given."""
    try:
        staff_id = await staff_repository.save(db, None, staff_data.model_dump())
    except IntegrityError:
        raise ConflictException("Username is already taken")

    if staff_id is None:
        raise BadRequestException("Failed to create staff")

    return await _get_staff_or_404(staff_repository, db, staff_id)


@router.patch("/{staff_id}", response_model=StaffResponse)
async def update_staff(
    staff_id: int,
    staff_data: StaffUpdate,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Update a staff member and, if given, their password."""
    fields = staff_data.model_dump(exclude_unset=True)
    if not fields:
        raise BadRequestException("No fields to update")

    try:
        saved_id = await staff_repository.save(db, staff_id, fields)
    except IntegrityError:
        raise ConflictException("Staff update conflicts with an existing record")

    if saved_id is None:
        raise NotFoundException(f"Staff {staff_id} not found")

    return await _get_staff_or_404(staff_repository, db, saved_id)


@router.delete("/{staff_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_staff(
    staff_id: int,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Delete a staff member and their login."""
    if not await staff_repository.delete(db, staff_id):
        raise NotFoundException(f"Staff {staff_id} not found")


@router.post("/delete", response_model=StaffDeleteResponse)
async def delete_staffs(
    body: StaffBulkDelete,
    db: DatabaseSession,
    staff_repository: StaffRepositoryDep,
    current_staff: CurrentStaff,
):
    """Delete several staff members and their logins."""
    deleted = await staff_repository.delete(db, body.staff_ids)
    return StaffDeleteResponse(deleted=deleted or 0)
