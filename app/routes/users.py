"""
users.py
--------
Purpose:
    API endpoints for employee user records.

Architecture:
    - API layer: validation, sanitization, auth, outcome → HTTP status mapping
    - Service layer (UserService): returns typed outcomes and response DTOs
    - The service instance lives on app.state and is created in the lifespan
    - The service blocks on locks: reads are sync handlers (threadpool), writes
      call it through run_in_threadpool so the audit call can stay async

Usage:
    1. GET    /api/users/all                        - All active users
    2. GET    /api/users                            - Filtered, sorted, paginated page
    3. GET    /api/users/{id}                       - One user (HEAD for existence)
    4. GET    /api/users/by-email?email=            - Lookup by email
    5. GET    /api/users/by-department/{department} - Active users in a department
    6. POST   /api/users                            - Create
    7. PUT    /api/users/{id}                       - Partial update
    8. DELETE /api/users/{id}                       - Soft delete
"""

from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response, status
from fastapi.concurrency import run_in_threadpool

from app.auth.verify import auth_dependency
from app.infrastructure.observability.logging import get_logger
from app.models.api.user_request import CreateUserRequest, UpdateUserRequest
from app.models.api.user_response import PaginatedUsersResponse, UserResponse
from app.services.users import (
    DEFAULT_PAGE_SIZE,
    MAX_PAGE_SIZE,
    Conflict,
    NotFound,
    QueryParams,
    Success,
    UserService,
)
from app.utils.audit_helpers import audit_record_change
from app.utils.sanitizer import sanitize_new_user, sanitize_string, sanitize_user_changes

router = APIRouter(prefix="/api/users", tags=["users"])
logger = get_logger(__name__)

MAX_DEPARTMENT_LENGTH = 100


def get_user_service(request: Request) -> UserService:
    return request.app.state.user_service


def get_query_params(
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    page_size: int = Query(DEFAULT_PAGE_SIZE, ge=1, description="Items per page (max 100)"),
    sort_by: str | None = Query(None, description="firstName, lastName, email, department, ..."),
    sort_direction: str = Query("asc", description="asc or desc"),
    filter: str | None = Query(None, description="Case-insensitive text filter"),
    department: str | None = Query(None, description="Exact department (case-insensitive)"),
    is_active: bool = Query(True, description="Active (true) or soft-deleted (false) records"),
) -> QueryParams:
    return QueryParams(
        page=page,
        page_size=min(page_size, MAX_PAGE_SIZE),
        sort_by=sanitize_string(sort_by) or None,
        sort_direction=sanitize_string(sort_direction).lower() or "asc",
        filter=sanitize_string(filter) or None,
        department=sanitize_string(department) or None,
        is_active=is_active,
    )


def _require_positive_id(user_id: int) -> None:
    if user_id <= 0:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="User ID must be a positive integer"
        )


def _raise_for(outcome) -> None:
    """Convert a non-success outcome into the matching HTTPException."""
    if isinstance(outcome, NotFound):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=outcome.message)
    if isinstance(outcome, Conflict):
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=outcome.message)


@router.get("/all", response_model=list[UserResponse])
def list_all_users(
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """All active users ordered by last name then first name."""
    users = service.list_all()
    logger.info("Listed all users", count=len(users))
    return users


@router.get("", response_model=PaginatedUsersResponse)
def query_users(
    params: QueryParams = Depends(get_query_params),
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """
    Filtered, sorted, paginated users.

    Raises:
        400: page or page_size below 1
        401: Invalid authentication token
    """
    result = service.query(params)
    logger.info(
        "Queried users",
        page=result.page,
        page_size=result.page_size,
        total_count=result.total_count,
    )
    return result


@router.get("/by-email", response_model=UserResponse)
def get_user_by_email(
    email: str = Query(..., min_length=1, max_length=255),
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    outcome = service.get_by_email(sanitize_string(email))
    _raise_for(outcome)
    return outcome.value


@router.get("/by-department/{department}", response_model=list[UserResponse])
def get_users_by_department(
    department: str,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    department = sanitize_string(department)
    if not department:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Department name is required"
        )
    if len(department) > MAX_DEPARTMENT_LENGTH:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Department name cannot exceed {MAX_DEPARTMENT_LENGTH} characters",
        )

    users = service.get_by_department(department)
    logger.info("Listed users by department", department=department, count=len(users))
    return users


@router.get("/{user_id}", response_model=UserResponse)
def get_user(
    user_id: int,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """
    One active user by id.

    Raises:
        400: user_id is not a positive integer
        404: No active user with this id
    """
    _require_positive_id(user_id)
    outcome = service.get_by_id(user_id)
    _raise_for(outcome)
    return outcome.value


@router.head("/{user_id}")
def user_exists(
    user_id: int,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    _require_positive_id(user_id)
    found = service.exists(user_id)
    return Response(status_code=status.HTTP_200_OK if found else status.HTTP_404_NOT_FOUND)


@router.post("", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
async def create_user(
    body: CreateUserRequest,
    request: Request,
    response: Response,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """
    Create a user.

    Returns:
        201 with the created user and a Location header

    Raises:
        400: Validation failed
        409: Another active user already has this email
    """
    fields = sanitize_new_user(body)
    outcome = await run_in_threadpool(service.create, fields)
    _raise_for(outcome)

    user = outcome.value
    response.headers["Location"] = str(request.url_for("get_user", user_id=user.id))
    await audit_record_change(
        request=request,
        action="user_created",
        record_id=user.id,
        changes=fields.model_dump(),
    )
    return user


@router.put("/{user_id}", response_model=UserResponse)
async def update_user(
    user_id: int,
    body: UpdateUserRequest,
    request: Request,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """
    Partially update a user. Omitted fields are left unchanged.

    Raises:
        400: Validation failed or no field supplied
        404: No active user with this id
        409: Another active user already has the new email
    """
    _require_positive_id(user_id)
    changes = sanitize_user_changes(body)
    outcome = await run_in_threadpool(service.update, user_id, changes)
    _raise_for(outcome)

    await audit_record_change(
        request=request,
        action="user_updated",
        record_id=user_id,
        changes=changes.supplied(),
    )
    return outcome.value


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user(
    user_id: int,
    request: Request,
    claims: dict = Depends(auth_dependency),
    service: UserService = Depends(get_user_service),
):
    """Soft delete: the user stops appearing in reads but keeps its id."""
    _require_positive_id(user_id)
    outcome = await run_in_threadpool(service.soft_delete, user_id)
    _raise_for(outcome)

    await audit_record_change(request=request, action="user_deleted", record_id=user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
