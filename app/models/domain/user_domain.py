from datetime import datetime

from pydantic import BaseModel, ConfigDict


class UserRecord(BaseModel):
    """Stored employee record. Owned exclusively by the record store."""

    # id 0 means "not yet assigned"; the record store replaces it on create.
    id: int = 0
    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    department: str
    position: str
    date_created: datetime
    date_modified: datetime
    is_active: bool = True


class NewUserFields(BaseModel):
    """Sanitized input for creating a record."""

    model_config = ConfigDict(frozen=True)

    first_name: str
    last_name: str
    email: str
    phone_number: str | None = None
    department: str
    position: str


class UserFieldChanges(BaseModel):
    """
    Sanitized partial update.

    Only fields that were explicitly set are applied (see model_fields_set),
    so phone_number=None clears the number while an omitted phone_number
    leaves it alone.
    """

    model_config = ConfigDict(frozen=True)

    first_name: str | None = None
    last_name: str | None = None
    email: str | None = None
    phone_number: str | None = None
    department: str | None = None
    position: str | None = None
    is_active: bool | None = None

    def supplied(self) -> dict:
        return self.model_dump(exclude_unset=True)
