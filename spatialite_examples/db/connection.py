"""
connection.py
Opens a SQLite database with the SpatiaLite extension loaded and guarantees
that both are released together, on success and on every error path.
"""

import os
import sqlite3
from contextlib import contextmanager
from typing import Any, Iterable, Iterator, Optional, Sequence, Tuple

from spatialite_examples.config import MEMORY_DB, SPATIALITE_LIBRARIES
from spatialite_examples.errors import ConnectionOpenError, ExtensionLoadError, TransactionError
from spatialite_examples.utils.logger import get_logger

logger = get_logger("db")

SECURITY_ENV = "SPATIALITE_SECURITY"


def quote_identifier(name: str) -> str:
    """Quote a table or column name for interpolation into SQL."""
    return '"' + name.replace('"', '""') + '"'


class SpatialiteConnection:
    """
    A SQLite connection with SpatiaLite loaded into it.

    The extension's per-connection state lives and dies with the SQLite handle,
    so close() releases both. Use as a context manager:

        with SpatialiteConnection("points.db") as db:
            db.fetch_one("SELECT spatialite_version()")

    relaxed_security sets SPATIALITE_SECURITY=relaxed for the lifetime of this
    connection only (SpatiaLite withholds ImportSHP() and friends otherwise);
    the previous value is restored on close.

    The connection runs in autocommit mode: InitSpatialMetaData(1) manages its
    own transaction, and multi-statement work goes through transaction().
    """

    def __init__(
        self,
        db_name: str = MEMORY_DB,
        relaxed_security: bool = False,
        library_names: Sequence[str] = SPATIALITE_LIBRARIES,
    ):
        self.db_name = str(db_name)
        self.relaxed_security = relaxed_security
        self.library_names = tuple(library_names)
        self.library: Optional[str] = None
        self.conn: Optional[sqlite3.Connection] = None
        self.closed = False
        self._saved_security: Optional[str] = None
        self._security_applied = False

    def __enter__(self) -> "SpatialiteConnection":
        return self.open()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def open(self) -> "SpatialiteConnection":
        if self.conn is not None:
            return self
        logger.info(f"Opening database: {self.db_name}")
        try:
            conn = sqlite3.connect(self.db_name, isolation_level=None)
        except sqlite3.Error as e:
            raise ConnectionOpenError(f"Error opening database {self.db_name}: {e}") from e

        self._apply_security()
        try:
            self.library = self._load_extension(conn)
        except ExtensionLoadError:
            conn.close()
            self._restore_security()
            self.closed = True
            raise
        self.conn = conn
        logger.debug(f"Loaded SpatiaLite via '{self.library}'")
        return self

    def close(self) -> None:
        """Release the connection and the extension state attached to it. Safe to call twice."""
        if self.conn is None:
            return
        conn, self.conn = self.conn, None
        try:
            if conn.in_transaction:
                logger.warning("Closing with an open transaction; rolling back")
                conn.execute("ROLLBACK")
            conn.close()
        except sqlite3.Error as e:
            logger.error(f"Error closing database: {e}")
        finally:
            self.closed = True
            self._restore_security()
        logger.debug(f"Closed database: {self.db_name}")

    def _apply_security(self) -> None:
        if not self.relaxed_security:
            return
        self._saved_security = os.environ.get(SECURITY_ENV)
        os.environ[SECURITY_ENV] = "relaxed"
        self._security_applied = True

    def _restore_security(self) -> None:
        if not self._security_applied:
            return
        if self._saved_security is None:
            os.environ.pop(SECURITY_ENV, None)
        else:
            os.environ[SECURITY_ENV] = self._saved_security
        self._security_applied = False

    def _load_extension(self, conn: sqlite3.Connection) -> str:
        try:
            conn.enable_load_extension(True)
        except AttributeError as e:
            raise ExtensionLoadError("This Python's sqlite3 module was built without extension loading") from e
        failures = []
        try:
            for name in self.library_names:
                try:
                    conn.load_extension(name)
                    return name
                except sqlite3.OperationalError as e:
                    failures.append(f"{name}: {e}")
        finally:
            conn.enable_load_extension(False)
        raise ExtensionLoadError("Could not load SpatiaLite (" + "; ".join(failures) + ")")

    def _require_open(self) -> sqlite3.Connection:
        if self.conn is None:
            raise sqlite3.ProgrammingError("Cannot operate on a closed database.")
        return self.conn

    def execute(self, sql: str, params: Iterable[Any] = ()) -> sqlite3.Cursor:
        return self._require_open().execute(sql, tuple(params))

    def fetch_one(self, sql: str, params: Iterable[Any] = ()) -> Optional[Tuple[Any, ...]]:
        return self.execute(sql, params).fetchone()

    def versions(self) -> Tuple[str, str]:
        """Return (SQLite version, SpatiaLite version)."""
        row = self.fetch_one("SELECT spatialite_version()")
        return sqlite3.sqlite_version, row[0]

    def _rollback(self, conn: sqlite3.Connection) -> None:
        if not conn.in_transaction:
            return
        logger.warning("Rolling back transaction")
        try:
            conn.execute("ROLLBACK")
        except sqlite3.Error as e:
            logger.error(f"Error rolling back transaction: {e}")

    @contextmanager
    def transaction(self) -> Iterator[sqlite3.Connection]:
        """
        BEGIN ... COMMIT around the block. Any exception inside the block rolls
        back explicitly before it propagates; SQLite errors come out as
        TransactionError.
        """
        conn = self._require_open()
        try:
            conn.execute("BEGIN TRANSACTION")
        except sqlite3.Error as e:
            raise TransactionError(f"Error starting transaction: {e}") from e
        try:
            yield conn
        except sqlite3.Error as e:
            self._rollback(conn)
            raise TransactionError(str(e)) from e
        except BaseException:
            self._rollback(conn)
            raise
        try:
            conn.execute("COMMIT")
        except sqlite3.Error as e:
            self._rollback(conn)
            raise TransactionError(f"Error committing transaction: {e}") from e


def spatialite_available(library_names: Sequence[str] = SPATIALITE_LIBRARIES) -> bool:
    """Check whether SpatiaLite can be loaded in this environment."""
    try:
        with SpatialiteConnection(MEMORY_DB, library_names=library_names):
            return True
    except (ConnectionOpenError, ExtensionLoadError):
        return False
