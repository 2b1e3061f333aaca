##############################################################################
# Copyright (c) Lawrence Livermore National Security, LLC and other Refinery
# Project developers. See top-level LICENSE and COPYRIGHT files for dates and
# other details. No copyright assignment is required to contribute to Refinery.
##############################################################################

"""
SQLite connection context manager for the Refinery application.

This module defines the `SQLiteConnection` class, which provides a safe and reusable way to
establish and manage SQLite connections using a context manager. It ensures proper configuration
(e.g., enabling WAL mode and foreign key support), attaches any extra databases used as schemas,
and guarantees cleanup by closing the connection on exit.
"""

import logging
import re
import sqlite3
import sys
from functools import lru_cache
from pathlib import Path
from types import TracebackType
from typing import Any, Dict, Optional, Pattern, Type


LOG = logging.getLogger(__name__)

ILIKE_FUNCTION = "refinery_ilike"
LIKE_ESCAPE = "\\"


@lru_cache(maxsize=256)
def _compile_like_pattern(pattern: str) -> Pattern:
    """
    Turn a LIKE pattern into a case-folded regular expression.

    `%` matches any run of characters, `_` matches one character and a backslash
    makes the next character literal.
    """
    parts = []
    chars = iter(pattern.casefold())
    for char in chars:
        if char == LIKE_ESCAPE:
            parts.append(re.escape(next(chars, LIKE_ESCAPE)))
        elif char == "%":
            parts.append(".*")
        elif char == "_":
            parts.append(".")
        else:
            parts.append(re.escape(char))
    return re.compile("".join(parts), re.DOTALL)


def ilike(value: Any, pattern: Any) -> Optional[int]:
    """
    Case-insensitive LIKE that folds case for every Unicode letter.

    SQLite's own LIKE only folds ASCII letters, so this is registered on every
    connection as `refinery_ilike(value, pattern)`.

    Args:
        value: The column value.
        pattern: A LIKE pattern using backslash as the escape character.

    Returns:
        1 on a match, 0 otherwise and None when either side is NULL.
    """
    if value is None or pattern is None:
        return None
    return int(_compile_like_pattern(str(pattern)).fullmatch(str(value).casefold()) is not None)


class SQLiteConnection:
    """
    Context manager for establishing and safely closing a SQLite database connection.

    This class ensures SQLite connections are created with proper configuration, including:
    - WAL mode for better concurrency
    - Foreign key constraint enforcement
    - A Unicode-aware `refinery_ilike` function
    - Dictionary-style row access via `sqlite3.Row`
    - Autocommit, so that transactions are only opened explicitly

    Attributes:
        db_path (str): Path to the SQLite database file.
        timeout (float): Seconds to wait on a locked database before failing.
        attachments (Dict[str, str]): Schema name to database path for extra databases.
        conn (sqlite3.Connection): The active SQLite connection used within the context.
    """

    def __init__(self, db_path: str, timeout: float = 30.0, attachments: Optional[Dict[str, str]] = None):
        """
        Initialize the SQLiteConnection context manager.

        Args:
            db_path: Path to the SQLite database file.
            timeout: Seconds to wait on a locked database before failing.
            attachments: Optional mapping of schema name to database path to attach.
        """
        self.db_path: str = db_path
        self.timeout: float = timeout
        self.attachments: Dict[str, str] = attachments or {}
        self.conn: sqlite3.Connection = None

    def __enter__(self) -> sqlite3.Connection:
        """
        Enters the runtime context related to this object and creates a sqlite connection.

        Returns:
            A sqlite connection.
        """
        Path(self.db_path).parent.mkdir(parents=True, exist_ok=True)

        connection_kwargs = {"check_same_thread": False, "timeout": self.timeout}
        if sys.version_info < (3, 12):  # Autocommit wasn't added until python 3.12
            connection_kwargs["isolation_level"] = None
        else:
            connection_kwargs["autocommit"] = True

        self.conn = sqlite3.connect(self.db_path, **connection_kwargs)

        # Enable WAL mode for better concurrent access
        self.conn.execute("PRAGMA journal_mode=WAL")
        # Enable foreign key constraints
        self.conn.execute("PRAGMA foreign_keys=ON")
        self.conn.create_function(ILIKE_FUNCTION, 2, ilike, deterministic=True)

        for schema, path in self.attachments.items():
            LOG.debug(f"Attaching SQLite database '{path}' as schema '{schema}'.")
            self.conn.execute("ATTACH DATABASE ? AS " + f'"{schema}"', (path,))

        # This enables name-based access to columns
        self.conn.row_factory = sqlite3.Row

        return self.conn

    def __exit__(self, exc_type: Type[Exception], exc_value: Exception, traceback: TracebackType):
        """
        Exits the runtime context and performs cleanup.

        This method closes the connection if it's still open.

        Args:
            exc_type: The exception type raised, if any.
            exc_value: The exception instance raised, if any.
            traceback: The traceback object, if an exception was raised.
        """
        if self.conn:
            self.conn.close()
