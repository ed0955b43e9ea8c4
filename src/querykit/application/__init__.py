"""
Application Layer - Error taxonomy and query-facing helpers.

This layer contains:
- Interfaces: Exceptions raised by the database layer
- Pagination: Offset and page-count arithmetic for listing queries
"""

from .interfaces import (
    ConfigurationError,
    ConnectionError,
    HydrationError,
    InvalidIdentifierError,
    RejectedClauseError,
    RepositoryError,
)
from .pagination import Paginator

__all__ = [
    "ConfigurationError",
    "ConnectionError",
    "HydrationError",
    "InvalidIdentifierError",
    "Paginator",
    "RejectedClauseError",
    "RepositoryError",
]
