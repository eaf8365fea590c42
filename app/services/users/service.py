"""
User service - public operation surface over the in-memory record store.

Composes RecordStore, UserIndexes, the query engine and ResultCache.
Mutations are serialized by one write lock so the uniqueness check, store
write, reindex and cache invalidation are a single unit: a rejected write
leaves nothing behind. Reads never take the write lock.

Service layer returns typed outcomes and DTOs only - API layer handles HTTP
concerns.
"""

import threading
from collections.abc import Callable
from datetime import UTC, datetime

from app.infrastructure.observability.logging import get_logger
from app.models.api.user_response import PaginatedUsersResponse, UserResponse
from app.models.domain.user_domain import NewUserFields, UserFieldChanges, UserRecord
from app.services.users.indexes import UserIndexes, normalize_key
from app.services.users.outcomes import Conflict, NotFound, Outcome, Success
from app.services.users.query_engine import QueryParams, run_query, sort_records
from app.services.users.record_store import RecordStore
from app.services.users.result_cache import DEFAULT_TTL_SECONDS, ResultCache

logger = get_logger(__name__)

ALL_USERS_CACHE_KEY = ("all_active_users",)


class UserServiceError(Exception):
    """Custom exception for user service operations."""

    def __init__(self, message: str, recoverable: bool = True):
        super().__init__(message)
        self.recoverable = recoverable


class InvalidInputError(UserServiceError):
    """Raised for values no valid caller could send (e.g. non-positive ids)."""


def _utcnow() -> datetime:
    return datetime.now(UTC)


def _require_positive_id(record_id: int) -> None:
    if isinstance(record_id, bool) or not isinstance(record_id, int) or record_id <= 0:
        raise InvalidInputError("User ID must be a positive integer", recoverable=False)


class UserService:
    def __init__(
        self,
        store: RecordStore | None = None,
        indexes: UserIndexes | None = None,
        cache: ResultCache | None = None,
        cache_ttl_seconds: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], datetime] = _utcnow,
    ):
        self.store = store if store is not None else RecordStore()
        self.indexes = indexes if indexes is not None else UserIndexes()
        self.cache = cache if cache is not None else ResultCache(ttl_seconds=cache_ttl_seconds)
        self._clock = clock
        self._write_lock = threading.RLock()

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------

    def list_all(self) -> list[UserResponse]:
        """All active records, last name then first name."""

        def compute() -> list[UserResponse]:
            active = [r for r in self.store.values() if r.is_active]
            return [UserResponse.from_record(r) for r in sort_records(active)]

        return list(self.cache.get_or_compute(ALL_USERS_CACHE_KEY, compute))

    def query(self, params: QueryParams) -> PaginatedUsersResponse:
        """Cached filtered, sorted, paginated query."""
        result = self.cache.get_or_compute(
            params.cache_key(), lambda: run_query(self.store.values(), params)
        )
        return result.model_copy(update={"data": list(result.data)})

    def get_by_id(self, record_id: int) -> Outcome[UserResponse]:
        _require_positive_id(record_id)
        record = self._active(record_id)
        if record is None:
            return NotFound(resource="User", key=f"ID {record_id}")
        return Success(UserResponse.from_record(record))

    def exists(self, record_id: int) -> bool:
        _require_positive_id(record_id)
        return self._active(record_id) is not None

    def get_by_email(self, email: str) -> Outcome[UserResponse]:
        record = self._find_active_by_email(email)
        if record is None:
            return NotFound(resource="User", key=f"email {email}")
        return Success(UserResponse.from_record(record))

    def get_by_department(self, department: str) -> list[UserResponse]:
        """Active records in a department (case-insensitive), default ordering."""
        key = normalize_key(department)
        ids = self.indexes.lookup_by_department(department)

        if ids:
            candidates = [self.store.get(i) for i in ids]
        else:
            # Full scan; identical to the index path while indexes are consistent
            candidates = self.store.values()

        matches = [
            r
            for r in candidates
            if r is not None and r.is_active and normalize_key(r.department) == key
        ]
        return [UserResponse.from_record(r) for r in sort_records(matches)]

    def email_exists(self, email: str, exclude_id: int | None = None) -> bool:
        """True if an active record other than exclude_id holds the email."""
        return self._find_active_by_email(email, exclude_id=exclude_id) is not None

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def create(self, fields: NewUserFields) -> Outcome[UserResponse]:
        with self._write_lock:
            if self.email_exists(fields.email):
                logger.warning("Create rejected - duplicate email", email=fields.email)
                return Conflict(field="email", value=fields.email)

            now = self._clock()
            record_id = self.store.create(
                UserRecord(
                    **fields.model_dump(),
                    date_created=now,
                    date_modified=now,
                    is_active=True,
                )
            )
            record = self.store.get(record_id)
            self.indexes.index(record)
            self.cache.invalidate_all()

        logger.info("User created", user_id=record_id, department=record.department)
        return Success(UserResponse.from_record(record))

    def update(self, record_id: int, changes: UserFieldChanges) -> Outcome[UserResponse]:
        """
        Apply only the supplied fields to an active record.

        Returns NotFound if the record is absent or inactive and Conflict if the
        new email belongs to another active record. is_active=False deactivates
        the record; is_active=True never reactivates one.
        """
        _require_positive_id(record_id)
        supplied = changes.supplied()

        with self._write_lock:
            current = self._active(record_id)
            if current is None:
                return NotFound(resource="User", key=f"ID {record_id}")

            new_email = supplied.get("email")
            if new_email and normalize_key(new_email) != normalize_key(current.email):
                if self.email_exists(new_email, exclude_id=record_id):
                    logger.warning(
                        "Update rejected - duplicate email", user_id=record_id, email=new_email
                    )
                    return Conflict(field="email", value=new_email)

            now = self._clock()

            def apply(record: UserRecord) -> None:
                for name, value in supplied.items():
                    if name == "is_active":
                        if value is False:
                            record.is_active = False
                        continue
                    if value is None and name != "phone_number":
                        continue
                    setattr(record, name, value)
                record.date_modified = max(now, record.date_created)

            updated = self.store.mutate(record_id, apply)

            if normalize_key(current.email) != normalize_key(updated.email) or normalize_key(
                current.department
            ) != normalize_key(updated.department):
                self.indexes.reindex(current.email, current.department, updated)

            self.cache.invalidate_all()

        logger.info("User updated", user_id=record_id, fields=sorted(supplied))
        return Success(UserResponse.from_record(updated))

    def soft_delete(self, record_id: int) -> Outcome[bool]:
        """Mark an active record inactive. Index entries are retained."""
        _require_positive_id(record_id)

        with self._write_lock:
            if self._active(record_id) is None:
                return NotFound(resource="User", key=f"ID {record_id}")

            now = self._clock()

            def deactivate(record: UserRecord) -> None:
                record.is_active = False
                record.date_modified = max(now, record.date_created)

            self.store.mutate(record_id, deactivate)
            self.cache.invalidate_all()

        logger.info("User soft-deleted", user_id=record_id)
        return Success(True)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def seed(self, records: list[UserRecord]) -> list[int]:
        """Load pre-built records (timestamps preserved) through the normal index path."""
        ids = []
        with self._write_lock:
            for record in records:
                record_id = self.store.create(record)
                self.indexes.index(self.store.get(record_id))
                ids.append(record_id)
            self.cache.invalidate_all()

        logger.info("User store seeded", count=len(ids))
        return ids

    def close(self) -> None:
        with self._write_lock:
            self.store.clear()
            self.indexes.clear()
            self.cache.invalidate_all()

    def stats(self) -> dict:
        records = self.store.values()
        active = sum(1 for r in records if r.is_active)
        return {
            "total_records": len(records),
            "active_records": active,
            "inactive_records": len(records) - active,
            "email_keys": len(self.indexes.email_keys()),
            "department_keys": len(self.indexes.department_keys()),
            "cached_entries": len(self.cache),
            "cache_hits": self.cache.hits,
            "cache_misses": self.cache.misses,
        }

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _active(self, record_id: int) -> UserRecord | None:
        record = self.store.get(record_id)
        return record if record is not None and record.is_active else None

    def _find_active_by_email(
        self, email: str, exclude_id: int | None = None
    ) -> UserRecord | None:
        key = normalize_key(email)
        if not key:
            return None

        def matches(record: UserRecord | None) -> bool:
            return (
                record is not None
                and record.is_active
                and record.id != exclude_id
                and normalize_key(record.email) == key
            )

        for record_id in self.indexes.lookup_by_email(email):
            record = self.store.get(record_id)
            if matches(record):
                return record

        # Full-scan fallback
        for record in self.store.values():
            if matches(record):
                return record
        return None
