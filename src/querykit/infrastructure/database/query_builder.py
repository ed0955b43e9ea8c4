"""
Fluent SQL Query Builder - Parameterized query construction and execution.

Usage Examples:
    # SELECT query
    users = (db.table("users")
        .select("id", "email")
        .where("status", "active")
        .or_where("role", "!=", "guest")
        .order_by("email", "asc")
        .limit(10)
        .get())

    # INSERT query, returns the generated primary key
    user_id = db.table("users").insert({"email": "jane@example.com"})

    # UPDATE query, returns the number of affected rows
    db.table("users").where("id", user_id).limit(1).update({"status": "inactive"})

Security model:
- Values are always bound as parameters, never concatenated into SQL
- Table names, column names and operators are checked against whitelists
- A rejected clause is dropped and recorded; a strict builder (the default)
  raises RejectedClauseError when it is rendered, a lenient one only logs
"""

import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from querykit.application.interfaces.exceptions import InvalidIdentifierError, RejectedClauseError
from querykit.infrastructure.database.query_spec import (
    Connector,
    JoinClause,
    JoinKind,
    QueryResult,
    QuerySpec,
    WhereClause,
)
from querykit.infrastructure.database.sql_assembler import SqlAssembler
from querykit.infrastructure.security.input_sanitizer import InputSanitizer

if TYPE_CHECKING:
    from querykit.infrastructure.database.executor import StatementExecutor

logger = logging.getLogger(__name__)


class QueryBuilder:
    """
    Stateful builder for a single query against one table.

    Every accumulating method returns the builder itself. A builder is meant to
    be used for one statement and then discarded; it is not thread-safe.
    """

    def __init__(
        self,
        executor: "StatementExecutor",
        table: str,
        model: type | None = None,
        primary_key: str | None = "id",
        strict: bool = True,
    ) -> None:
        """
        Initialize a builder scoped to ``table``.

        Args:
            executor: Statement executor used by the terminal methods
            table: Table to query (letters only)
            model: Optional record class; rows are hydrated with ``model.from_row``
            primary_key: Column returned by INSERT; None for tables without one
            strict: Raise on render if any clause was rejected

        Raises:
            InvalidIdentifierError: If the table name or primary key is rejected
        """
        if not InputSanitizer.validate_table_name(table):
            logger.error(f"Rejected table name: {table!r}")
            raise InvalidIdentifierError(table, "table")
        if primary_key is not None and (
            not InputSanitizer.validate_identifier(primary_key) or "*" in primary_key
        ):
            raise InvalidIdentifierError(primary_key, "primary key")

        self._executor = executor
        self._model = model
        self._primary_key = primary_key
        self._strict = strict
        self._spec = QuerySpec(table=table)
        self._assembler = SqlAssembler()

    @property
    def spec(self) -> QuerySpec:
        return self._spec

    @property
    def rejections(self) -> list[str]:
        """Diagnostics for every call that was dropped."""
        return list(self._spec.rejections)

    def select(self, *columns: str) -> "QueryBuilder":
        """Replace the default ``*`` selection. One bad column aborts the call."""
        if not columns:
            return self
        for column in columns:
            if not InputSanitizer.validate_identifier(column):
                self._reject(f"select: invalid column {column!r}")
                return self
        self._spec.select = list(columns)
        return self

    def where(self, *clause: Any) -> "QueryBuilder":
        """
        Add AND conditions.

        Accepts ``where(field, value)``, ``where(field, operator, value)``, or a
        single list of such tuples: ``where([("a", 1), ("b", ">", 2)])``.
        """
        self._store_wheres(Connector.AND, clause)
        return self

    def or_where(self, *clause: Any) -> "QueryBuilder":
        """Add OR conditions. Same argument forms as :meth:`where`."""
        self._store_wheres(Connector.OR, clause)
        return self

    def join(self, table: str, left_column: str, operator: str, right_column: str) -> "QueryBuilder":
        """Add an INNER JOIN."""
        self._add_join(JoinKind.INNER, table, left_column, operator, right_column)
        return self

    def left_join(self, table: str, left_column: str, operator: str, right_column: str) -> "QueryBuilder":
        """Add a LEFT JOIN."""
        self._add_join(JoinKind.LEFT, table, left_column, operator, right_column)
        return self

    def right_join(self, table: str, left_column: str, operator: str, right_column: str) -> "QueryBuilder":
        """Add a RIGHT JOIN."""
        self._add_join(JoinKind.RIGHT, table, left_column, operator, right_column)
        return self

    def order_by(self, columns: str | Sequence[str], direction: str = "ASC") -> "QueryBuilder":
        """
        Set ORDER BY columns and direction, replacing any previous ordering.

        Args:
            columns: Column name or names
            direction: ``ASC`` or ``DESC``, case-insensitive

        Returns:
            Self for method chaining
        """
        direction = direction.upper() if isinstance(direction, str) else ""
        if direction not in ("ASC", "DESC"):
            self._reject(f"order_by: invalid direction {direction!r}")
            return self

        columns = [columns] if isinstance(columns, str) else list(columns)
        if not columns or not InputSanitizer.validate_identifiers(*columns):
            self._reject(f"order_by: invalid column in {columns!r}")
            return self

        self._spec.order_by = columns
        self._spec.order_direction = direction
        return self

    def limit(self, count: Any) -> "QueryBuilder":
        """Set LIMIT; the value is coerced to a non-negative int and bound."""
        value = self._coerce_count(count, "limit")
        if value is None:
            return self
        if self._spec.limit_param is None:
            self._spec.limit_param = self._spec.unique_param_name("limit")
        self._spec.limit = value
        self._spec.bind(self._spec.limit_param, value)
        return self

    def offset(self, count: Any) -> "QueryBuilder":
        """Set OFFSET; the value is coerced to a non-negative int and bound."""
        value = self._coerce_count(count, "offset")
        if value is None:
            return self
        if self._spec.offset_param is None:
            self._spec.offset_param = self._spec.unique_param_name("offset")
        self._spec.offset = value
        self._spec.bind(self._spec.offset_param, value)
        return self

    def to_sql(self) -> QueryResult:
        """Render the SELECT statement without executing it."""
        self._check_rejections()
        return self._assembler.select(self._spec)

    def get(self, model: type | None = None) -> list[Any]:
        """
        Execute the SELECT and return every row.

        Args:
            model: Record class to hydrate rows into; defaults to the builder's model

        Returns:
            List of records, or of row mappings when no model is set
        """
        query = self.to_sql()
        cursor = self._executor.execute(query.sql, query.parameters)
        rows = cursor.fetchall()
        model = model or self._model
        if model is None:
            return list(rows)
        return [model.from_row(row) for row in rows]

    def first(self, model: type | None = None) -> Any | None:
        """Execute the SELECT with LIMIT 1 and return the row, or None."""
        self.limit(1)
        results = self.get(model)
        return results[0] if results else None

    def count(self) -> int:
        """
        Count matching rows.

        LIMIT and OFFSET apply to the single row COUNT(*) produces, so a limit
        of one or more leaves the count unchanged while an offset past the
        first row yields 0.
        """
        self._check_rejections()
        query = self._assembler.count(self._spec)
        cursor = self._executor.execute(query.sql, query.parameters)
        row = cursor.fetchone()
        if row is None:
            return 0
        return int(_first_column(row))

    def insert(self, rows: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> Any | None:
        """
        Insert one row, or many rows in a single statement.

        Args:
            rows: A field map, or a sequence of field maps sharing the first row's columns

        Returns:
            Generated primary key of the last inserted row. None if nothing was
            inserted, or if the builder has no primary key
        """
        rows = [rows] if isinstance(rows, Mapping) else list(rows)
        if not rows:
            return None

        columns = self._valid_columns(rows[0].keys(), "insert")
        if not rows[0] and len(rows) > 1:
            self._reject("insert: first row has no columns")
        self._check_rejections()
        if not columns and len(rows) > 1:
            return None

        query = self._assembler.insert(self._spec, columns, rows, returning=self._primary_key)
        cursor = self._executor.execute(query.sql, query.parameters)
        if not cursor.rowcount or self._primary_key is None:
            return None

        returned = cursor.fetchall()
        if not returned:
            return None
        last = returned[-1]
        return last[self._primary_key] if isinstance(last, Mapping) else last[0]

    def update(self, values: Mapping[str, Any]) -> int:
        """
        Update matching rows.

        Args:
            values: Column to value map for the SET clause

        Returns:
            Number of rows affected
        """
        columns = self._valid_columns(values.keys(), "update")
        self._check_rejections()
        if not columns:
            return 0

        query = self._assembler.update(self._spec, {column: values[column] for column in columns})
        cursor = self._executor.execute(query.sql, query.parameters)
        return cursor.rowcount

    def delete(self) -> int:
        """Delete matching rows and return how many were removed."""
        self._check_rejections()
        query = self._assembler.delete(self._spec)
        cursor = self._executor.execute(query.sql, query.parameters)
        return cursor.rowcount

    def _store_wheres(self, connector: Connector, args: tuple[Any, ...]) -> None:
        if len(args) == 1 and isinstance(args[0], (list, tuple)):
            clauses = args[0]
            if clauses and all(isinstance(c, (list, tuple)) for c in clauses):
                for clause in clauses:
                    self._store_where(connector, tuple(clause))
                return
            self._store_where(connector, tuple(clauses))
            return
        self._store_where(connector, args)

    def _store_where(self, connector: Connector, clause: tuple[Any, ...]) -> None:
        if len(clause) == 2:
            field, value = clause
            operator = "="
        elif len(clause) == 3:
            field, operator, value = clause
        else:
            self._reject(f"where: expected (field, [operator,] value), got {clause!r}")
            return

        if not InputSanitizer.validate_operator(operator):
            self._reject(f"where: invalid operator {operator!r}")
            return
        if not InputSanitizer.validate_identifier(field) or "*" in field:
            self._reject(f"where: invalid field {field!r}")
            return

        operator = InputSanitizer.normalize_operator(operator)

        if operator in ("IS", "IS NOT"):
            # IS only takes NULL, TRUE or FALSE, none of which can be bound
            if value is None:
                operator = f"{operator} NULL"
            elif not isinstance(value, bool):
                self._reject(f"where: {operator} needs None or a bool, got {value!r}")
                return
            self._spec.where.append(WhereClause(field, operator, value, None, connector))
            return

        if InputSanitizer.is_unary_operator(operator):
            self._spec.where.append(WhereClause(field, operator, None, None, connector))
            return

        # A field may appear in several clauses; each gets its own placeholder
        param_name = self._spec.unique_param_name(field)
        self._spec.bind(param_name, value)
        self._spec.where.append(WhereClause(field, operator, value, param_name, connector))

    def _add_join(
        self, kind: JoinKind, table: str, left_column: str, operator: str, right_column: str
    ) -> None:
        if not InputSanitizer.validate_operator(operator):
            self._reject(f"join: invalid operator {operator!r}")
            return
        if not InputSanitizer.validate_identifiers(table, left_column, right_column):
            self._reject(f"join: invalid identifier in {(table, left_column, right_column)!r}")
            return
        self._spec.joins.append(
            JoinClause(kind, table, left_column, InputSanitizer.normalize_operator(operator), right_column)
        )

    def _valid_columns(self, columns: Any, context: str) -> list[str]:
        valid = []
        for column in columns:
            if InputSanitizer.validate_identifier(column) and "*" not in column:
                valid.append(column)
            else:
                self._reject(f"{context}: invalid column {column!r}")
        return valid

    def _coerce_count(self, count: Any, context: str) -> int | None:
        try:
            return max(int(count), 0)
        except (TypeError, ValueError):
            self._reject(f"{context}: not an integer {count!r}")
            return None

    def _reject(self, message: str) -> None:
        self._spec.rejections.append(message)
        logger.warning(f"Dropped clause on {self._spec.table}: {message}")

    def _check_rejections(self) -> None:
        if self._strict and self._spec.rejections:
            raise RejectedClauseError(self._spec.rejections)

    def __str__(self) -> str:
        return f"QueryBuilder(table={self._spec.table!r}, where={len(self._spec.where)})"


def _first_column(row: Any) -> Any:
    """First value of a row, whether it came back as a mapping or a sequence."""
    if isinstance(row, Mapping):
        return next(iter(row.values()))
    return row[0]
