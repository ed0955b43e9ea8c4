"""
Database facade: the entry point applications hold on to.

Wires a ConnectionProvider and StatementExecutor together and hands out
QueryBuilder instances, one per query.
"""

import logging

import psycopg

from querykit.infrastructure.config import DatabaseConfig
from querykit.infrastructure.database.connection import ConnectionProvider
from querykit.infrastructure.database.executor import Params, StatementExecutor
from querykit.infrastructure.database.query_builder import QueryBuilder

logger = logging.getLogger(__name__)


class Database:
    """Builder factory and raw query entry point bound to one executor."""

    def __init__(self, executor: StatementExecutor, strict: bool = True) -> None:
        """
        Args:
            executor: Executor every builder from this database will use
            strict: Default strictness for builders (see QueryBuilder)
        """
        self._executor = executor
        self._strict = strict

    @classmethod
    def from_config(cls, config: DatabaseConfig, strict: bool = True) -> "Database":
        return cls(StatementExecutor(ConnectionProvider(config)), strict=strict)

    @classmethod
    def from_env(cls, strict: bool = True) -> "Database":
        return cls.from_config(DatabaseConfig.from_env(), strict=strict)

    @property
    def executor(self) -> StatementExecutor:
        return self._executor

    @property
    def handle(self) -> psycopg.Connection:
        """Raw connection, e.g. for the caller's own transaction handling."""
        return self._executor.provider.get_handle()

    def table(
        self,
        name: str,
        model: type | None = None,
        primary_key: str | None = "id",
        strict: bool | None = None,
    ) -> QueryBuilder:
        """Start a new query on ``name``. Raises InvalidIdentifierError for a bad name."""
        return QueryBuilder(
            self._executor,
            name,
            model=model,
            primary_key=primary_key,
            strict=self._strict if strict is None else strict,
        )

    def query(self, sql: str, params: Params = None) -> psycopg.Cursor:
        """Run raw SQL. Values must still go through ``params``."""
        return self._executor.query(sql, params)

    def close(self) -> None:
        self._executor.provider.close()
