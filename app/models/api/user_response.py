# app/models/api/user_response.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from app.models.domain.user_domain import UserRecord


class UserResponse(BaseModel):
    """Read-only copy of a record returned to callers (and held by the cache)."""

    model_config = ConfigDict(frozen=True)

    id: int
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    department: str
    position: str
    date_created: datetime
    date_modified: datetime
    is_active: bool

    @classmethod
    def from_record(cls, record: UserRecord) -> "UserResponse":
        return cls(**record.model_dump())


class PaginatedUsersResponse(BaseModel):
    """Response for GET /api/users"""

    model_config = ConfigDict(frozen=True)

    data: list[UserResponse] = Field(default_factory=list)
    page: int
    page_size: int
    total_count: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool
