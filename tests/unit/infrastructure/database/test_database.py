"""
Unit tests for the Database facade.
"""

# Standard library imports
from unittest.mock import patch

# Third-party imports
import pytest

# Local imports
from querykit.application.interfaces.exceptions import RejectedClauseError
from querykit.domain.entities.user import User
from querykit.infrastructure.config import DatabaseConfig
from querykit.infrastructure.database.connection import ConnectionProvider
from querykit.infrastructure.database.database import Database
from querykit.infrastructure.database.executor import StatementExecutor
from querykit.infrastructure.database.query_builder import QueryBuilder


@pytest.mark.unit
class TestDatabase:
    """Test builder creation and raw query passthrough."""

    def test_from_config_wires_provider(self):
        config = DatabaseConfig(database="app")

        db = Database.from_config(config)

        assert isinstance(db.executor, StatementExecutor)
        assert isinstance(db.executor.provider, ConnectionProvider)
        assert db.executor.provider.config is config

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("DATABASE_NAME", "from_env_db")

        db = Database.from_env(strict=False)

        assert db.executor.provider.config.database == "from_env_db"

    def test_table_returns_fresh_builders(self, db):
        first = db.table("users")
        second = db.table("users")

        assert isinstance(first, QueryBuilder)
        assert first is not second

    def test_builders_do_not_share_state(self, db):
        db.table("users").where("email", "a@x.com")

        assert db.table("users").to_sql().sql == "SELECT * FROM users"

    def test_strict_default_is_inherited(self, mock_executor):
        lenient = Database(mock_executor, strict=False)

        lenient.table("users").where("a", "DROP", 1).to_sql()
        with pytest.raises(RejectedClauseError):
            lenient.table("users", strict=True).where("a", "DROP", 1).to_sql()

    def test_table_with_model_hydrates(self, db, cursor):
        cursor.fetchall.return_value = [
            {"id": 2, "first_name": "Ada", "last_name": "L", "email": "a@x.com", "password": "h"}
        ]

        users = db.table("users", model=User).get()

        assert users[0].email == "a@x.com"

    def test_query_passthrough(self, db, mock_executor, cursor):
        result = db.query("SELECT * FROM users WHERE id = ?", [1])

        assert result is cursor
        mock_executor.query.assert_called_once_with("SELECT * FROM users WHERE id = ?", [1])

    def test_handle_and_close_delegate_to_provider(self, db, mock_executor):
        handle = db.handle
        db.close()

        assert handle is mock_executor.provider.get_handle.return_value
        mock_executor.provider.close.assert_called_once()

    def test_from_config_does_not_connect(self):
        with patch("querykit.infrastructure.database.connection.psycopg.connect") as connect:
            Database.from_config(DatabaseConfig())

        connect.assert_not_called()
