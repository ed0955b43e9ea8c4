"""
SQL Assembler - Renders a QuerySpec into SQL text plus bound parameters.

Rendering is deterministic and never interpolates values: every value reaches
the statement as a ``:name`` placeholder. Identifiers and operators are
expected to have been whitelisted by the builder before they get here.

Clause order for SELECT is fixed:
    SELECT ... FROM ... [JOIN ...] [WHERE ...] [ORDER BY ...] [LIMIT ...] [OFFSET ...]
"""

import logging
from collections.abc import Mapping, Sequence
from typing import Any

from querykit.infrastructure.database.query_spec import (
    ParamBinding,
    QueryResult,
    QuerySpec,
    WhereClause,
    unique_param_name,
)

logger = logging.getLogger(__name__)


class SqlAssembler:
    """Renders SELECT, COUNT, INSERT, UPDATE and DELETE statements for PostgreSQL."""

    # Whitelisted operators with no PostgreSQL spelling of their own
    OPERATOR_SQL = {"<=>": "IS NOT DISTINCT FROM"}

    def select(self, spec: QuerySpec) -> QueryResult:
        """Build SELECT query."""
        sql = f"SELECT {', '.join(spec.select)} FROM {spec.table}"
        sql += self._build_joins(spec)
        sql += self._build_where(spec)
        sql += self._build_order_by(spec)
        sql += self._build_limit(spec)
        sql += self._build_offset(spec)
        return self._result(sql, spec.params)

    def count(self, spec: QuerySpec) -> QueryResult:
        """Build SELECT COUNT(*) query. ORDER BY is irrelevant to a count and is left out."""
        sql = f"SELECT COUNT(*) FROM {spec.table}"
        sql += self._build_joins(spec)
        sql += self._build_where(spec)
        sql += self._build_limit(spec)
        sql += self._build_offset(spec)
        return self._result(sql, spec.params)

    def insert(
        self,
        spec: QuerySpec,
        columns: Sequence[str],
        rows: Sequence[Mapping[str, Any]],
        returning: str | None = None,
    ) -> QueryResult:
        """
        Build a single, possibly multi-row, INSERT query.

        Each row gets its own placeholders, suffixed with the row index
        (``:email0``, ``:email1``, ...), so rows never share a binding.
        Columns missing from a row are inserted as NULL.

        Args:
            spec: Query specification supplying the table
            columns: Validated column names, taken from the first row
            rows: Field maps to insert
            returning: Column to read back, normally the primary key

        Returns:
            QueryResult with the statement and its bindings
        """
        params: dict[str, ParamBinding] = {}

        if not columns:
            sql = f"INSERT INTO {spec.table} DEFAULT VALUES"
        else:
            groups = []
            for i, row in enumerate(rows):
                placeholders = []
                for column in columns:
                    name = unique_param_name(f"{column}{i}", params)
                    params[name] = ParamBinding.of(name, row.get(column))
                    placeholders.append(name)
                groups.append(f"({', '.join(placeholders)})")
            sql = f"INSERT INTO {spec.table} ({', '.join(columns)}) VALUES {', '.join(groups)}"

        if returning:
            sql += f" RETURNING {returning}"
        return self._result(sql, params)

    def update(self, spec: QuerySpec, values: Mapping[str, Any]) -> QueryResult:
        """Build UPDATE query scoped by the accumulated where/limit/offset."""
        params = dict(spec.params)
        assignments = []
        for column, value in values.items():
            name = unique_param_name(column, params)
            params[name] = ParamBinding.of(name, value)
            assignments.append(f"{column}={name}")

        sql = f"UPDATE {spec.table} SET {', '.join(assignments)}"
        sql += self._build_scope(spec)
        return self._result(sql, params)

    def delete(self, spec: QuerySpec) -> QueryResult:
        """Build DELETE query scoped by the accumulated where/limit/offset."""
        scope = self._build_scope(spec)
        if not scope:
            logger.warning(f"DELETE on {spec.table} without WHERE clause - this will delete ALL rows!")
        return self._result(f"DELETE FROM {spec.table}{scope}", spec.params)

    def _build_joins(self, spec: QuerySpec) -> str:
        return "".join(
            f" {join.kind.value} JOIN {join.table} ON "
            f"{join.left_column} {self._operator(join.operator)} {join.right_column}"
            for join in spec.joins
        )

    def _build_where(self, spec: QuerySpec) -> str:
        if not spec.where:
            return ""
        sql = " ".join(f"{clause.connector.value} {self._condition(clause)}" for clause in spec.where)
        # The first clause's connector is dropped
        sql = sql.split(" ", 1)[1]
        return f" WHERE {sql}"

    def _condition(self, clause: WhereClause) -> str:
        operator = self._operator(clause.operator)
        if clause.param_name is not None:
            return f"{clause.field} {operator} {clause.param_name}"
        if isinstance(clause.value, bool):
            return f"{clause.field} {operator} {'TRUE' if clause.value else 'FALSE'}"
        return f"{clause.field} {operator}"

    def _build_order_by(self, spec: QuerySpec) -> str:
        if not spec.order_by:
            return ""
        return f" ORDER BY {', '.join(spec.order_by)} {spec.order_direction}"

    def _build_limit(self, spec: QuerySpec) -> str:
        if spec.limit is None:
            return ""
        return f" LIMIT {spec.limit_param}"

    def _build_offset(self, spec: QuerySpec) -> str:
        if spec.offset is None:
            return ""
        return f" OFFSET {spec.offset_param}"

    def _build_scope(self, spec: QuerySpec) -> str:
        """
        Row scope for UPDATE and DELETE.

        PostgreSQL has no LIMIT/OFFSET on UPDATE or DELETE, so a bounded
        statement selects the physical row ids to touch in a subquery.
        """
        where = self._build_where(spec)
        if spec.limit is None and spec.offset is None:
            return where
        inner = f"SELECT ctid FROM {spec.table}{where}{self._build_limit(spec)}{self._build_offset(spec)}"
        return f" WHERE ctid IN ({inner})"

    def _operator(self, operator: str) -> str:
        return self.OPERATOR_SQL.get(operator, operator)

    def _result(self, sql: str, params: Mapping[str, ParamBinding]) -> QueryResult:
        logger.debug(f"Assembled SQL: {sql}")
        return QueryResult(sql, params)
