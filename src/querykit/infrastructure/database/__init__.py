"""
Database Infrastructure Module

This module provides PostgreSQL access for querykit: a lazily opened
connection, a statement executor, the fluent query builder and the
active-record base class.
"""

from .connection import ConnectionProvider
from .database import Database
from .executor import StatementExecutor
from .model import Model
from .query_builder import QueryBuilder
from .query_spec import QueryResult, QuerySpec
from .sql_assembler import SqlAssembler

__all__ = [
    "ConnectionProvider",
    "Database",
    "Model",
    "QueryBuilder",
    "QueryResult",
    "QuerySpec",
    "SqlAssembler",
    "StatementExecutor",
]
