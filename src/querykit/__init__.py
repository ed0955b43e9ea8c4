"""
querykit - Fluent, parameterized SQL query builder with a thin active-record layer.

Example usage:
    from querykit import Database, DatabaseConfig
    from querykit.domain.entities import User

    db = Database.from_config(DatabaseConfig.from_env())
    admins = db.table("users").where("is_admin", True).order_by("email").get()
    user = User.find(db, 42)
"""

from querykit.application.interfaces.exceptions import (
    ConfigurationError,
    ConnectionError,
    HydrationError,
    InvalidIdentifierError,
    RejectedClauseError,
    RepositoryError,
)
from querykit.infrastructure.config import DatabaseConfig
from querykit.infrastructure.database import (
    ConnectionProvider,
    Database,
    Model,
    QueryBuilder,
    StatementExecutor,
)

__version__ = "0.1.0"
__all__ = [
    "ConfigurationError",
    "ConnectionError",
    "ConnectionProvider",
    "Database",
    "DatabaseConfig",
    "HydrationError",
    "InvalidIdentifierError",
    "Model",
    "QueryBuilder",
    "RejectedClauseError",
    "RepositoryError",
    "StatementExecutor",
]
