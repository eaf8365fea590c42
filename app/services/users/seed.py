"""Sample records loaded at startup when SEED_SAMPLE_DATA is enabled."""

from datetime import UTC, datetime, timedelta

from app.models.domain.user_domain import UserRecord
from app.services.users.service import UserService

SAMPLE_USERS = [
    {
        "first_name": "John",
        "last_name": "Doe",
        "email": "john.doe@company.com",
        "phone_number": "+1-555-0123",
        "department": "IT",
        "position": "Software Developer",
        "age_days": 30,
    },
    {
        "first_name": "Jane",
        "last_name": "Smith",
        "email": "jane.smith@company.com",
        "phone_number": "+1-555-0124",
        "department": "HR",
        "position": "HR Manager",
        "age_days": 25,
    },
    {
        "first_name": "Mike",
        "last_name": "Johnson",
        "email": "mike.johnson@company.com",
        "phone_number": "+1-555-0125",
        "department": "IT",
        "position": "System Administrator",
        "age_days": 20,
    },
]


def seed_sample_users(service: UserService, now: datetime | None = None) -> list[int]:
    now = now or datetime.now(UTC)
    records = []
    for sample in SAMPLE_USERS:
        fields = dict(sample)
        created = now - timedelta(days=fields.pop("age_days"))
        records.append(UserRecord(**fields, date_created=created, date_modified=created))
    return service.seed(records)
