"""
Query engine - filter, sort and paginate records.

run_query() is a pure function of the records it is given and the query
parameters, so the result can be cached and safely recomputed on a miss.
"""

import math
from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any

from app.models.api.user_response import PaginatedUsersResponse, UserResponse
from app.models.domain.user_domain import UserRecord

DEFAULT_PAGE_SIZE = 10
MAX_PAGE_SIZE = 100

SORT_FIELDS: dict[str, Callable[[UserRecord], Any]] = {
    "firstname": lambda r: r.first_name.casefold(),
    "lastname": lambda r: r.last_name.casefold(),
    "email": lambda r: r.email.casefold(),
    "department": lambda r: r.department.casefold(),
    "position": lambda r: r.position.casefold(),
    "datecreated": lambda r: r.date_created,
    "datemodified": lambda r: r.date_modified,
}


@dataclass(frozen=True)
class QueryParams:
    """A validated, clamped query request."""

    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE
    sort_by: str | None = None
    sort_direction: str | None = "asc"
    filter: str | None = None
    department: str | None = None
    is_active: bool | None = True

    def cache_key(self) -> tuple:
        return (
            "users_page",
            self.page,
            self.page_size,
            self.sort_by,
            self.sort_direction,
            self.filter,
            self.department,
            self.is_active,
        )


def normalize_sort_field(sort_by: str | None) -> str | None:
    """Map lastName / last_name / LASTNAME to a known sort field, or None."""
    if not sort_by:
        return None
    name = sort_by.replace("_", "").replace("-", "").strip().lower()
    return name if name in SORT_FIELDS else None


def _matches_text(record: UserRecord, needle: str) -> bool:
    return any(
        needle in value.lower()
        for value in (
            record.first_name,
            record.last_name,
            record.email,
            record.department,
            record.position,
        )
    )


def filter_records(records: Iterable[UserRecord], params: QueryParams) -> list[UserRecord]:
    """Apply is_active, then department, then free-text filters."""
    result = list(records)

    if params.is_active is not None:
        result = [r for r in result if r.is_active == params.is_active]

    if params.department:
        department = params.department.lower()
        result = [r for r in result if r.department.lower() == department]

    if params.filter:
        needle = params.filter.lower()
        result = [r for r in result if _matches_text(r, needle)]

    return result


def sort_records(
    records: Iterable[UserRecord], sort_by: str | None = None, sort_direction: str | None = None
) -> list[UserRecord]:
    """
    Sort by a known field, or by last name then first name when the field is
    unknown or missing. The default ordering ignores sort_direction.
    """
    field = normalize_sort_field(sort_by)
    if field is None:
        return sorted(records, key=lambda r: (r.last_name.casefold(), r.first_name.casefold()))

    descending = (sort_direction or "").strip().lower() == "desc"
    return sorted(records, key=SORT_FIELDS[field], reverse=descending)


def total_pages_for(total_count: int, page_size: int) -> int:
    return math.ceil(total_count / page_size) if page_size > 0 else 0


def run_query(records: Iterable[UserRecord], params: QueryParams) -> PaginatedUsersResponse:
    """Filter, sort and slice records into one page plus pagination metadata."""
    page = max(params.page, 1)
    page_size = min(max(params.page_size, 1), MAX_PAGE_SIZE)

    ordered = sort_records(filter_records(records, params), params.sort_by, params.sort_direction)
    total_count = len(ordered)
    total_pages = total_pages_for(total_count, page_size)

    skip = (page - 1) * page_size
    data = [UserResponse.from_record(r) for r in ordered[skip : skip + page_size]]

    return PaginatedUsersResponse(
        data=data,
        page=page,
        page_size=page_size,
        total_count=total_count,
        total_pages=total_pages,
        has_next_page=page < total_pages,
        has_previous_page=page > 1,
    )
