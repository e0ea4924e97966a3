"""Repository layer for database operations.

Repositories encapsulate all database queries, keeping routes thin and focused
on HTTP handling. Every read is restricted to active rows; deletes are soft.
"""

from repositories.base_repository import EntityRepository, Page, Pagination, Scope
from repositories.user_repository import UserRepository
from repositories.utils import log_slow_query

__all__ = [
    "EntityRepository",
    "Page",
    "Pagination",
    "Scope",
    "UserRepository",
    "log_slow_query",
]
