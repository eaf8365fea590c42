"""
In-memory record store - the authoritative map of record id -> UserRecord.

The store only owns storage and id allocation. Index maintenance and cache
invalidation are orchestrated by UserService.
"""

import itertools
import threading
from collections.abc import Callable

from app.infrastructure.observability.logging import get_logger
from app.models.domain.user_domain import UserRecord

logger = get_logger(__name__)


class RecordNotFoundError(KeyError):
    """Raised when mutating a record id that was never stored."""

    def __init__(self, record_id: int):
        super().__init__(record_id)
        self.record_id = record_id

    def __str__(self) -> str:
        return f"Record {self.record_id} not found"


class RecordStore:
    """
    Thread-safe keyed storage with monotonic id allocation.

    Writes are copy-on-write: mutate() hands the updater a private copy and
    swaps it in under the lock, so a reader holding the old object never sees
    a half-applied update.
    """

    def __init__(self, start_id: int = 1):
        if start_id < 1:
            raise ValueError("start_id must be positive")
        self._records: dict[int, UserRecord] = {}
        self._ids = itertools.count(start_id)
        self._lock = threading.Lock()

    def create(self, record: UserRecord) -> int:
        """Assign the next id, store a copy of the record and return the id."""
        with self._lock:
            record_id = next(self._ids)
            self._records[record_id] = record.model_copy(update={"id": record_id})

        logger.debug("Record stored", record_id=record_id)
        return record_id

    def get(self, record_id: int) -> UserRecord | None:
        """Return the record regardless of active status, or None."""
        return self._records.get(record_id)

    def mutate(self, record_id: int, updater: Callable[[UserRecord], None]) -> UserRecord:
        """
        Apply updater to a copy of the stored record and store the result.

        Raises:
            RecordNotFoundError: id was never stored
        """
        with self._lock:
            current = self._records.get(record_id)
            if current is None:
                raise RecordNotFoundError(record_id)

            updated = current.model_copy(deep=True)
            updater(updated)
            # The id is immutable whatever the updater did.
            updated.id = record_id
            self._records[record_id] = updated

        return updated

    def values(self) -> list[UserRecord]:
        """Snapshot of all stored records in id order."""
        with self._lock:
            return list(self._records.values())

    def clear(self) -> None:
        """Drop every record. Ids keep increasing; they are never reused."""
        with self._lock:
            self._records.clear()

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records
