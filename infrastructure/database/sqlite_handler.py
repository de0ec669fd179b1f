import logging
import sqlite3
import threading
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Optional

from flask import Flask

from infrastructure.database.ops.garden import GardenOperations

logger = logging.getLogger(__name__)

MEMORY_DATABASE = ":memory:"


class SQLiteDatabaseHandler(GardenOperations):
    """Thread-safe SQLite handler decoupled from Flask globals.

    File databases get one connection per thread. An in-memory database only
    exists inside its connection, so every thread shares a single one.
    """

    def __init__(self, database_path: str) -> None:
        self._database_path = database_path
        self._local = threading.local()
        self._shared: Optional[sqlite3.Connection] = None
        self._shared_lock = threading.Lock()

        if not self.is_memory:
            db_path = Path(database_path)
            if not db_path.parent.exists():
                db_path.parent.mkdir(parents=True, exist_ok=True)
                logger.info(f"Created database directory: {db_path.parent}")

    @property
    def is_memory(self) -> bool:
        return self._database_path == MEMORY_DATABASE

    # --- Lifecycle ------------------------------------------------------------
    def init_app(self, app: Flask | None = None) -> None:
        if app is not None and not self.is_memory:
            app.teardown_appcontext(self.close_db)
        self.create_tables()

    def get_db(self) -> sqlite3.Connection:
        if self.is_memory:
            with self._shared_lock:
                if self._shared is None:
                    self._shared = self._open_connection()
                return self._shared

        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is None:
            connection = self._open_connection()
            self._local.connection = connection
        return connection

    def _open_connection(self) -> sqlite3.Connection:
        connection = sqlite3.connect(self._database_path, check_same_thread=False)
        try:
            connection.row_factory = sqlite3.Row
            self._configure_connection(connection)
            return connection
        except Exception:
            connection.close()
            raise

    def _configure_connection(self, connection: sqlite3.Connection) -> None:
        """Enable foreign keys; file databases also run in WAL mode."""
        connection.execute("PRAGMA foreign_keys=ON")
        if not self.is_memory:
            connection.execute("PRAGMA journal_mode=WAL")
            connection.execute("PRAGMA synchronous=NORMAL")
        connection.commit()

    def close_db(self, _e: Optional[BaseException] = None) -> None:
        connection: Optional[sqlite3.Connection] = getattr(self._local, "connection", None)
        if connection is not None:
            connection.close()
            delattr(self._local, "connection")

    def close(self) -> None:
        """Close the thread's connection and, for in-memory databases, the shared one."""
        self.close_db()
        with self._shared_lock:
            if self._shared is not None:
                self._shared.close()
                self._shared = None

    @contextmanager
    def connection(self) -> Iterator[sqlite3.Connection]:
        conn = self.get_db()
        try:
            yield conn
        finally:
            conn.commit()

    # --- Schema ----------------------------------------------------------------
    def create_tables(self) -> None:
        """Creates the necessary tables in the database if they do not already exist."""
        try:
            with self.connection() as db:
                db.executescript(
                    """
                    CREATE TABLE IF NOT EXISTS Gardens (
                        garden_id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS GardenRows (
                        row_id INTEGER PRIMARY KEY AUTOINCREMENT,
                        garden_id INTEGER NOT NULL,
                        name TEXT NOT NULL,
                        length REAL NOT NULL CHECK (length > 0),
                        row_ends REAL NOT NULL DEFAULT 0 CHECK (row_ends >= 0),
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (garden_id) REFERENCES Gardens(garden_id) ON DELETE CASCADE
                    );

                    CREATE TABLE IF NOT EXISTS Plants (
                        plant_id INTEGER PRIMARY KEY AUTOINCREMENT,
                        name TEXT NOT NULL,
                        spacing REAL NOT NULL CHECK (spacing > 0),
                        quantity INTEGER NOT NULL DEFAULT 1 CHECK (quantity >= 0),
                        image_url TEXT,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
                    );

                    CREATE TABLE IF NOT EXISTS PlantInstances (
                        instance_id INTEGER PRIMARY KEY AUTOINCREMENT,
                        row_id INTEGER NOT NULL,
                        plant_id INTEGER NOT NULL,
                        position REAL NOT NULL,
                        created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                        FOREIGN KEY (row_id) REFERENCES GardenRows(row_id) ON DELETE CASCADE,
                        FOREIGN KEY (plant_id) REFERENCES Plants(plant_id) ON DELETE RESTRICT
                    );

                    CREATE INDEX IF NOT EXISTS idx_garden_rows_garden ON GardenRows(garden_id);
                    CREATE INDEX IF NOT EXISTS idx_plant_instances_row ON PlantInstances(row_id, position);
                    CREATE INDEX IF NOT EXISTS idx_plant_instances_plant ON PlantInstances(plant_id);
                    """
                )
            logger.info("Database tables created or verified")
        except sqlite3.Error as exc:
            logger.error("Error creating tables: %s", exc)
            raise
