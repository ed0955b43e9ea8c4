"""
Repository Exception Definitions

Defines exceptions that the query builder, executor and models may raise.
Driver-level execution failures (syntax errors, constraint violations) are not
wrapped here: they propagate to the caller as ``psycopg.Error``.
"""

# Standard library imports
from typing import Any


class RepositoryError(Exception):
    """Base exception for repository operations."""

    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.cause = cause


class ConfigurationError(RepositoryError):
    """Raised when configuration-related errors occur."""

    pass


class InvalidIdentifierError(ConfigurationError):
    """Raised when a table name is rejected at builder construction."""

    def __init__(self, identifier: str, context: str = "table") -> None:
        super().__init__(f"Invalid {context} name: {identifier!r}")
        self.identifier = identifier
        self.context = context


class RejectedClauseError(RepositoryError):
    """Raised when a strict builder is rendered after dropping clauses."""

    def __init__(self, rejections: list[str]) -> None:
        joined = "; ".join(rejections)
        super().__init__(f"Query has {len(rejections)} rejected clause(s): {joined}")
        self.rejections = list(rejections)


class ConnectionError(RepositoryError):
    """Raised when database connection fails."""

    def __init__(self, message: str = "Database connection failed", cause: Exception | None = None) -> None:
        super().__init__(message, cause)


class HydrationError(RepositoryError):
    """Raised when a row cannot be mapped onto a record."""

    def __init__(self, entity_type: str, missing: list[str], row: Any = None) -> None:
        super().__init__(f"Cannot hydrate {entity_type}: missing column(s) {', '.join(missing)}")
        self.entity_type = entity_type
        self.missing = missing
        self.row = row
