"""
Statement Executor

Binds parameters and runs SQL on the connection provider's handle. Statements
arrive with ``:name`` (or positional ``?``) placeholders and are rewritten to
psycopg's ``%(name)s`` / ``%s`` paramstyle at bind time.

Driver errors are logged and re-raised unchanged; callers see the original
``psycopg.Error`` subclass (IntegrityError, SyntaxError, ...).
"""

# Standard library imports
import logging
import re
from collections.abc import Mapping, Sequence
from typing import Any

# Third-party imports
import psycopg

# Local imports
from querykit.application.interfaces.exceptions import ConnectionError
from querykit.infrastructure.database.connection import ConnectionProvider
from querykit.infrastructure.database.query_spec import ParamBinding, ParamKind

logger = logging.getLogger(__name__)

# Quoted literals and identifiers match first; placeholders inside them are kept as-is
QUOTED = r"'(?:[^']|'')*'" + r'|"(?:[^"]|"")*"'
NAMED_PLACEHOLDER = re.compile(rf"{QUOTED}|(?<![:\w]):([A-Za-z_]\w*)")
POSITIONAL_PLACEHOLDER = re.compile(rf"{QUOTED}|(\?)")

Params = Mapping[Any, Any] | Sequence[Any] | None


def bind_parameters(params: Params) -> list[ParamBinding]:
    """
    Turn caller parameters into typed bindings.

    Mappings keep their names (``ParamBinding`` values pass through). Sequences
    and integer keys are positional and are rebased to one-based names.
    """
    if not params:
        return []
    if isinstance(params, Mapping):
        items = list(params.items())
    else:
        items = list(enumerate(params))

    bindings = []
    for name, value in items:
        if isinstance(value, ParamBinding):
            bindings.append(value)
            continue
        # Positional placeholders are one-based
        name = name + 1 if isinstance(name, int) else str(name)
        bindings.append(ParamBinding.of(name, value))
    return bindings


def coerce(binding: ParamBinding) -> Any:
    """Value to hand the driver for a binding's kind."""
    if binding.kind is ParamKind.NULL:
        return None
    if binding.kind is ParamKind.BOOL:
        return bool(binding.value)
    if binding.kind is ParamKind.INT:
        return int(binding.value)
    # Strings and anything else go through the driver's default adaptation
    return binding.value


class StatementExecutor:
    """
    Executes SQL against a ConnectionProvider's handle.

    Provides raw passthrough execution, typed parameter binding and a simple
    health check.
    """

    def __init__(self, provider: ConnectionProvider) -> None:
        """
        Initialize executor with a connection provider.

        Args:
            provider: Source of the database handle
        """
        self._provider = provider

    @property
    def provider(self) -> ConnectionProvider:
        """Get the connection provider."""
        return self._provider

    def execute(self, sql: str, params: Params = None) -> psycopg.Cursor:
        """
        Execute a statement and return its cursor.

        Args:
            sql: SQL with ``:name`` or ``?`` placeholders
            params: Named mapping or positional sequence; empty runs ``sql`` as-is

        Returns:
            The executed cursor, ready for fetchall()/fetchone()/rowcount

        Raises:
            ConnectionError: If no connection can be established
            psycopg.Error: If the statement fails
        """
        handle = self._provider.get_handle()
        cursor = handle.cursor()
        bindings = bind_parameters(params)

        try:
            if not bindings:
                logger.debug(f"Executing SQL: {sql}")
                cursor.execute(sql)
            else:
                query, values = self.compile(sql, bindings)
                logger.debug(f"Executing SQL: {query} | params: {[b.name for b in bindings]}")
                cursor.execute(query, values)
        except psycopg.Error as e:
            logger.error(f"Query execution failed: {e} | Query: {sql[:100]}...")
            raise

        return cursor

    def query(self, sql: str, params: Params = None) -> psycopg.Cursor:
        """Run a raw statement. Alias of :meth:`execute` for passthrough queries."""
        return self.execute(sql, params)

    def health_check(self) -> bool:
        """
        Perform a health check on the database connection.

        Returns:
            True if database is healthy, False otherwise
        """
        try:
            cursor = self.execute("SELECT 1")
            cursor.fetchone()
            return True
        except (psycopg.Error, ConnectionError) as e:
            logger.error(f"Health check failed: {e}")
            return False

    @staticmethod
    def compile(sql: str, bindings: list[ParamBinding]) -> tuple[str, dict[str, Any] | list[Any]]:
        """
        Rewrite placeholders into psycopg paramstyle and collect the values.

        Literal ``%`` is doubled since psycopg treats it as a placeholder marker
        once parameters are supplied.
        """
        sql = sql.replace("%", "%%")

        if all(isinstance(b.name, int) for b in bindings):
            ordered = sorted(bindings, key=lambda b: b.name)
            sql = POSITIONAL_PLACEHOLDER.sub(lambda m: "%s" if m.group(1) else m.group(0), sql)
            return sql, [coerce(b) for b in ordered]

        values = {str(b.name).lstrip(":"): coerce(b) for b in bindings}

        def replace(match: re.Match[str]) -> str:
            name = match.group(1)
            return f"%({name})s" if name in values else match.group(0)

        return NAMED_PLACEHOLDER.sub(replace, sql), values
