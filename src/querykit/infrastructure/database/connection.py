"""
Database Connection Management

Provides lazy, cached access to a single psycopg connection. A provider is an
explicit object handed to the executor; there is no module-level connection.
Use one provider per request or thread: the cached handle is not meant to be
shared by concurrent operations.
"""

# Standard library imports
import logging

# Third-party imports
import psycopg
from psycopg.rows import dict_row

# Local imports
from querykit.application.interfaces.exceptions import ConnectionError
from querykit.infrastructure.config import DatabaseConfig

logger = logging.getLogger(__name__)


class ConnectionProvider:
    """
    Opens one connection on first use and hands it out afterwards.

    The connection runs in autocommit mode with dict rows. There is no retry
    and no reconnect: a failed connect raises ConnectionError once and the
    caller decides what to do.
    """

    def __init__(self, config: DatabaseConfig) -> None:
        """
        Initialize the provider.

        Args:
            config: Database configuration
        """
        self.config = config
        self._handle: psycopg.Connection | None = None

    @property
    def is_connected(self) -> bool:
        """Check if a live handle is cached."""
        return self._handle is not None and not self._handle.closed

    def get_handle(self) -> psycopg.Connection:
        """
        Return the cached connection, opening it if needed.

        Returns:
            psycopg connection

        Raises:
            ConnectionError: If the connection cannot be established
        """
        if self.is_connected and self._handle is not None:
            return self._handle

        logger.info(
            f"Connecting to database: {self.config.host}:{self.config.port}/{self.config.database}"
        )
        try:
            self._handle = psycopg.connect(
                self.config.build_dsn(),
                autocommit=True,
                row_factory=dict_row,
            )
        except psycopg.Error as e:
            self._handle = None
            logger.error(f"Failed to connect to database: {e}")
            raise ConnectionError(f"Failed to connect to database: {e}", e) from e

        return self._handle

    def close(self) -> None:
        """Close the cached connection, if any."""
        if self._handle is not None and not self._handle.closed:
            self._handle.close()
            logger.info("Database connection closed")
        self._handle = None

    def __enter__(self) -> "ConnectionProvider":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def __str__(self) -> str:
        """String representation."""
        status = "connected" if self.is_connected else "disconnected"
        return f"ConnectionProvider({self.config.host}:{self.config.port}, {status})"
