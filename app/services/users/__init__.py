"""
In-memory employee record store: storage, secondary indexes, query engine,
result cache and the UserService façade that keeps them consistent.
"""

from app.services.users.outcomes import Conflict, NotFound, Outcome, Success
from app.services.users.query_engine import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, QueryParams
from app.services.users.service import InvalidInputError, UserService, UserServiceError

__all__ = [
    "UserService",
    "UserServiceError",
    "InvalidInputError",
    "QueryParams",
    "DEFAULT_PAGE_SIZE",
    "MAX_PAGE_SIZE",
    "Success",
    "NotFound",
    "Conflict",
    "Outcome",
]
