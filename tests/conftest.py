"""
Shared test fixtures for the garden planner test suite.

Provides:
- In-memory SQLite database with all tables created
- Repository instances wired to the test database
- Layout service, transition tracker and a zero-delay row coordinator
- A Flask app and test client built from ``create_app``
- Helper utilities for seeding test data

Usage:
    def test_example(seed, coordinator):
        row_id = seed.create_row(length=240, row_ends=10)
        plant_id = seed.create_plant("Carrot", spacing=30)
        assert coordinator.add_plant(row_id, plant_id).position == 10
"""

from __future__ import annotations

import logging
from typing import Any

import pytest

from app.services.application.garden_service import GardenService
from app.services.application.row_layout_service import RowLayoutService
from app.services.application.row_mutation_coordinator import RowMutationCoordinator
from app.services.application.transition_tracker import TransitionTracker
from app.utils.cache import LayoutCache
from app.utils.event_bus import EventBus
from infrastructure.database.repositories.garden import GardenRepository, PlantingRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler

# ---------------------------------------------------------------------------
# Logging: keep test output clean
# ---------------------------------------------------------------------------
logging.getLogger("infrastructure").setLevel(logging.WARNING)
logging.getLogger("app").setLevel(logging.WARNING)


# ========================== Database Fixtures ==============================


@pytest.fixture()
def db_handler():
    """In-memory SQLite database with all tables created.

    Each test gets a fresh database; no cross-test contamination.
    """
    handler = SQLiteDatabaseHandler(":memory:")
    handler.create_tables()
    yield handler
    handler.close()


@pytest.fixture()
def db_connection(db_handler):
    """Raw sqlite3 connection for direct SQL in tests."""
    with db_handler.connection() as conn:
        yield conn


# ========================== Repository Fixtures ============================


@pytest.fixture()
def garden_repo(db_handler):
    """GardenRepository backed by the in-memory DB."""
    return GardenRepository(db_handler)


@pytest.fixture()
def planting_repo(db_handler):
    """PlantingRepository (store + catalogue) backed by the in-memory DB."""
    return PlantingRepository(db_handler)


# ========================== Service Fixtures ===============================


class RecordingBus(EventBus):
    """EventBus that also remembers every published topic and payload."""

    def __init__(self) -> None:
        super().__init__()
        self.events: list[tuple[str, Any]] = []

    def publish(self, event_name, data=None) -> None:
        name = getattr(event_name, "value", event_name)
        self.events.append((name, data))
        super().publish(event_name, data)

    def topics(self) -> list[str]:
        return [name for name, _ in self.events]


@pytest.fixture()
def event_bus():
    return RecordingBus()


@pytest.fixture()
def layout_service():
    return RowLayoutService(LayoutCache(maxsize=64))


@pytest.fixture()
def transitions():
    return TransitionTracker()


@pytest.fixture()
def coordinator(planting_repo, layout_service, event_bus, transitions):
    """RowMutationCoordinator over the SQLite store with every delay disabled."""
    coord = RowMutationCoordinator(
        planting_repo,
        planting_repo,
        layout_service,
        event_bus=event_bus,
        transitions=transitions,
    )
    yield coord
    coord.shutdown()


@pytest.fixture()
def garden_service(garden_repo, coordinator, event_bus):
    return GardenService(garden_repo, coordinator, event_bus)


# ========================== Flask Fixtures =================================


@pytest.fixture()
def app(tmp_path):
    from app import create_app

    app = create_app(
        {
            "database_path": str(tmp_path / "garden.db"),
            "log_file": "",
            "audit_log_path": str(tmp_path / "audit.log"),
            "exit_delay_seconds": 0,
            "move_delay_seconds": 0,
            "settle_delay_seconds": 0,
        }
    )
    app.config["TESTING"] = True
    yield app
    app.extensions["garden_shutdown"]("test teardown")


@pytest.fixture()
def client(app):
    return app.test_client()


# ========================== Seed Data Helpers ==============================


class SeedData:
    """Helper to create commonly needed test data.

    Usage in tests::

        def test_something(seed):
            garden_id = seed.create_garden("Backyard")
            row_id = seed.create_row(garden_id=garden_id, length=240, row_ends=10)
            plant_id = seed.create_plant("Carrot", spacing=30, quantity=4)
            seed.place(row_id, plant_id, position=10)
    """

    def __init__(self, db_handler: SQLiteDatabaseHandler):
        self._db = db_handler
        self._default_garden: int | None = None

    def create_garden(self, name: str = "Test Garden") -> int:
        """Create a garden and return its ID."""
        with self._db.connection() as conn:
            cur = conn.execute("INSERT INTO Gardens (name) VALUES (?)", (name,))
            return cur.lastrowid

    def create_row(
        self,
        name: str = "Row 1",
        *,
        length: float = 240,
        row_ends: float = 10,
        garden_id: int | None = None,
    ) -> int:
        """Create a row (in a default garden unless one is given) and return its ID."""
        if garden_id is None:
            if self._default_garden is None:
                self._default_garden = self.create_garden()
            garden_id = self._default_garden
        with self._db.connection() as conn:
            cur = conn.execute(
                "INSERT INTO GardenRows (garden_id, name, length, row_ends) VALUES (?, ?, ?, ?)",
                (garden_id, name, length, row_ends),
            )
            return cur.lastrowid

    def create_plant(
        self,
        name: str = "Carrot",
        *,
        spacing: float = 30,
        quantity: int = 5,
        image_url: str | None = None,
    ) -> int:
        """Create a catalogue plant and return its ID."""
        with self._db.connection() as conn:
            cur = conn.execute(
                "INSERT INTO Plants (name, spacing, quantity, image_url) VALUES (?, ?, ?, ?)",
                (name, spacing, quantity, image_url),
            )
            return cur.lastrowid

    def place(self, row_id: int, plant_id: int, position: float) -> int:
        """Insert a plant instance directly and return its ID."""
        with self._db.connection() as conn:
            cur = conn.execute(
                "INSERT INTO PlantInstances (row_id, plant_id, position) VALUES (?, ?, ?)",
                (row_id, plant_id, position),
            )
            return cur.lastrowid

    def positions(self, row_id: int) -> list[tuple[int, float]]:
        """Stored ``(instance_id, position)`` pairs of a row, in position order."""
        with self._db.connection() as conn:
            rows = conn.execute(
                "SELECT instance_id, position FROM PlantInstances WHERE row_id = ? ORDER BY position",
                (row_id,),
            ).fetchall()
        return [(r["instance_id"], r["position"]) for r in rows]


@pytest.fixture()
def seed(db_handler):
    """SeedData helper for quickly populating the test database."""
    return SeedData(db_handler)
