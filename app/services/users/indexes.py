"""
Secondary indexes over the record store (email, department).

Indexes hold id lists only and are never the source of truth: every reader
re-checks the record in the store. Each index has its own lock and no
operation holds both at once, so an email change never waits on the
department index and vice versa.
"""

import threading

from app.models.domain.user_domain import UserRecord


def normalize_key(value: str | None) -> str:
    return (value or "").strip().lower()


class _KeyIndex:
    """Normalized key -> ordered list of record ids."""

    def __init__(self):
        self._entries: dict[str, list[int]] = {}
        self.lock = threading.Lock()

    def add(self, key: str, record_id: int) -> None:
        # Caller holds self.lock
        ids = self._entries.setdefault(key, [])
        if record_id not in ids:
            ids.append(record_id)

    def remove(self, key: str, record_id: int) -> None:
        # Caller holds self.lock
        ids = self._entries.get(key)
        if ids is None:
            return
        if record_id in ids:
            ids.remove(record_id)
        if not ids:
            del self._entries[key]

    def lookup(self, key: str) -> list[int]:
        with self.lock:
            return list(self._entries.get(key, ()))

    def keys(self) -> list[str]:
        with self.lock:
            return list(self._entries)

    def clear(self) -> None:
        with self.lock:
            self._entries.clear()


class UserIndexes:
    """Email and department indexes kept in step with the record store."""

    def __init__(self):
        self._email = _KeyIndex()
        self._department = _KeyIndex()

    def index(self, record: UserRecord) -> None:
        """Add the record under its email and department keys. Idempotent."""
        with self._email.lock:
            self._email.add(normalize_key(record.email), record.id)
        with self._department.lock:
            self._department.add(normalize_key(record.department), record.id)

    def deindex(self, old_email: str, old_department: str, record_id: int) -> None:
        """Remove the id from both keys, dropping keys that become empty."""
        with self._email.lock:
            self._email.remove(normalize_key(old_email), record_id)
        with self._department.lock:
            self._department.remove(normalize_key(old_department), record_id)

    def reindex(self, old_email: str, old_department: str, record: UserRecord) -> None:
        """
        Move a record from its old keys to its current ones.

        Only indexes whose key actually changed are locked and touched; each
        move is a single critical section on that index.
        """
        self._move(self._email, normalize_key(old_email), normalize_key(record.email), record.id)
        self._move(
            self._department,
            normalize_key(old_department),
            normalize_key(record.department),
            record.id,
        )

    @staticmethod
    def _move(index: _KeyIndex, old_key: str, new_key: str, record_id: int) -> None:
        if old_key == new_key:
            return
        with index.lock:
            index.remove(old_key, record_id)
            index.add(new_key, record_id)

    def lookup_by_email(self, email: str) -> list[int]:
        return self._email.lookup(normalize_key(email))

    def lookup_by_department(self, department: str) -> list[int]:
        return self._department.lookup(normalize_key(department))

    def email_keys(self) -> list[str]:
        return self._email.keys()

    def department_keys(self) -> list[str]:
        return self._department.keys()

    def clear(self) -> None:
        self._email.clear()
        self._department.clear()
