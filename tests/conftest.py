"""Global pytest configuration and fixtures."""

# Standard library imports
from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

# Third-party imports
import pytest

# Local imports
from querykit.infrastructure.database.database import Database
from querykit.infrastructure.database.executor import StatementExecutor


def _make_cursor(rows: list[Any] | None = None, rowcount: int | None = None) -> MagicMock:
    """Cursor double returning ``rows`` from fetchall/fetchone."""
    rows = list(rows or [])
    cursor = MagicMock()
    cursor.fetchall.return_value = rows
    cursor.fetchone.return_value = rows[0] if rows else None
    cursor.rowcount = len(rows) if rowcount is None else rowcount
    return cursor


@pytest.fixture
def cursor() -> MagicMock:
    """Empty cursor; tests set fetchall/fetchone/rowcount as needed."""
    return _make_cursor()


@pytest.fixture
def mock_executor(cursor: MagicMock) -> MagicMock:
    """Executor double whose execute() returns the ``cursor`` fixture."""
    executor = MagicMock(spec=StatementExecutor)
    executor.execute.return_value = cursor
    executor.query.return_value = cursor
    return executor


@pytest.fixture
def db(mock_executor: MagicMock) -> Database:
    """Database bound to the mock executor."""
    return Database(mock_executor)


@pytest.fixture
def make_cursor() -> Callable[..., MagicMock]:
    """Factory for cursor doubles, for tests that run several statements."""
    return _make_cursor


@pytest.fixture
def executed(mock_executor: MagicMock) -> Callable[..., tuple[str, dict[str, Any]]]:
    """Returns SQL and parameter values of an execute() call on the mock executor."""

    def _executed(call: int = -1) -> tuple[str, dict[str, Any]]:
        sql, params = mock_executor.execute.call_args_list[call].args
        return sql, {name: binding.value for name, binding in params.items()}

    return _executed
