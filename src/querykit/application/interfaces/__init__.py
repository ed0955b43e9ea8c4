"""
Application Interfaces - Exceptions surfaced by the database layer.
"""

from .exceptions import (
    ConfigurationError,
    ConnectionError,
    HydrationError,
    InvalidIdentifierError,
    RejectedClauseError,
    RepositoryError,
)

__all__ = [
    "ConfigurationError",
    "ConnectionError",
    "HydrationError",
    "InvalidIdentifierError",
    "RejectedClauseError",
    "RepositoryError",
]
