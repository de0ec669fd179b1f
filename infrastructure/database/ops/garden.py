from __future__ import annotations

import logging
import sqlite3
from typing import Any, Iterable, Mapping

from infrastructure.database.sql_safety import build_set_clause, safe_columns

logger = logging.getLogger(__name__)

GARDEN_COLUMNS = frozenset({"name"})
ROW_COLUMNS = frozenset({"name", "length", "row_ends", "garden_id"})
PLANT_COLUMNS = frozenset({"name", "spacing", "quantity", "image_url"})

_INSTANCE_SELECT = """
    SELECT pi.instance_id AS id,
           pi.row_id,
           pi.plant_id,
           pi.position,
           p.name,
           p.spacing,
           p.image_url
    FROM PlantInstances pi
    JOIN Plants p ON p.plant_id = pi.plant_id
"""

_PLANT_SELECT = """
    SELECT p.plant_id AS id,
           p.name,
           p.spacing,
           p.quantity,
           p.image_url,
           (SELECT COUNT(*) FROM PlantInstances pi WHERE pi.plant_id = p.plant_id) AS used_count
    FROM Plants p
"""


class GardenOperations:
    """Garden, row, plant and plant-instance helpers shared across database handlers."""

    # --- Gardens -------------------------------------------------------------
    def insert_garden(self, name: str) -> int | None:
        try:
            db = self.get_db()
            cursor = db.execute("INSERT INTO Gardens (name) VALUES (?)", (name,))
            db.commit()
            return cursor.lastrowid
        except sqlite3.Error as exc:
            logger.error("Error inserting garden: %s", exc)
            return None

    def get_garden(self, garden_id: int) -> sqlite3.Row | None:
        try:
            return self.get_db().execute(
                "SELECT garden_id AS id, name, created_at FROM Gardens WHERE garden_id = ?",
                (garden_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Error fetching garden %s: %s", garden_id, exc)
            return None

    def list_gardens(self) -> list[sqlite3.Row] | None:
        try:
            return self.get_db().execute(
                "SELECT garden_id AS id, name, created_at FROM Gardens ORDER BY garden_id"
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error listing gardens: %s", exc)
            return None

    def count_gardens(self) -> int | None:
        try:
            return self.get_db().execute("SELECT COUNT(*) FROM Gardens").fetchone()[0]
        except sqlite3.Error as exc:
            logger.error("Error counting gardens: %s", exc)
            return None

    def update_garden(self, garden_id: int, fields: Mapping[str, Any]) -> bool:
        return self._update("Gardens", "garden_id", garden_id, fields, GARDEN_COLUMNS)

    def delete_garden(self, garden_id: int) -> bool:
        return self._delete("Gardens", "garden_id", garden_id)

    # --- Rows ----------------------------------------------------------------
    def insert_row(self, garden_id: int, name: str, length: float, row_ends: float = 0) -> int | None:
        try:
            db = self.get_db()
            cursor = db.execute(
                "INSERT INTO GardenRows (garden_id, name, length, row_ends) VALUES (?, ?, ?, ?)",
                (garden_id, name, length, row_ends),
            )
            db.commit()
            return cursor.lastrowid
        except sqlite3.Error as exc:
            logger.error("Error inserting row into garden %s: %s", garden_id, exc)
            return None

    def get_row_record(self, row_id: int) -> sqlite3.Row | None:
        try:
            return self.get_db().execute(
                """
                SELECT row_id AS id, garden_id, name, length, row_ends
                FROM GardenRows
                WHERE row_id = ?
                """,
                (row_id,),
            ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Error fetching row %s: %s", row_id, exc)
            return None

    def list_row_records(self, garden_id: int) -> list[sqlite3.Row] | None:
        try:
            return self.get_db().execute(
                """
                SELECT row_id AS id, garden_id, name, length, row_ends
                FROM GardenRows
                WHERE garden_id = ?
                ORDER BY row_id
                """,
                (garden_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error listing rows of garden %s: %s", garden_id, exc)
            return None

    def update_row(self, row_id: int, fields: Mapping[str, Any]) -> bool:
        return self._update("GardenRows", "row_id", row_id, fields, ROW_COLUMNS)

    def delete_row(self, row_id: int) -> bool:
        return self._delete("GardenRows", "row_id", row_id)

    # --- Plants --------------------------------------------------------------
    def insert_plant(
        self,
        name: str,
        spacing: float,
        quantity: int = 1,
        image_url: str | None = None,
    ) -> int | None:
        try:
            db = self.get_db()
            cursor = db.execute(
                "INSERT INTO Plants (name, spacing, quantity, image_url) VALUES (?, ?, ?, ?)",
                (name, spacing, quantity, image_url),
            )
            db.commit()
            return cursor.lastrowid
        except sqlite3.Error as exc:
            logger.error("Error inserting plant: %s", exc)
            return None

    def get_plant_record(self, plant_id: int) -> sqlite3.Row | None:
        try:
            return self.get_db().execute(f"{_PLANT_SELECT} WHERE p.plant_id = ?", (plant_id,)).fetchone()
        except sqlite3.Error as exc:
            logger.error("Error fetching plant %s: %s", plant_id, exc)
            return None

    def list_plant_records(self) -> list[sqlite3.Row] | None:
        try:
            return self.get_db().execute(f"{_PLANT_SELECT} ORDER BY p.name COLLATE NOCASE, p.plant_id").fetchall()
        except sqlite3.Error as exc:
            logger.error("Error listing plants: %s", exc)
            return None

    def update_plant(self, plant_id: int, fields: Mapping[str, Any]) -> bool:
        return self._update("Plants", "plant_id", plant_id, fields, PLANT_COLUMNS)

    def delete_plant(self, plant_id: int) -> bool:
        return self._delete("Plants", "plant_id", plant_id)

    # --- Plant instances -----------------------------------------------------
    def list_row_instances(self, row_id: int) -> list[sqlite3.Row] | None:
        try:
            return self.get_db().execute(
                f"{_INSTANCE_SELECT} WHERE pi.row_id = ? ORDER BY pi.position, pi.instance_id",
                (row_id,),
            ).fetchall()
        except sqlite3.Error as exc:
            logger.error("Error listing instances of row %s: %s", row_id, exc)
            return None

    def get_plant_instance(self, instance_id: int) -> sqlite3.Row | None:
        try:
            return self.get_db().execute(
                f"{_INSTANCE_SELECT} WHERE pi.instance_id = ?", (instance_id,)
            ).fetchone()
        except sqlite3.Error as exc:
            logger.error("Error fetching plant instance %s: %s", instance_id, exc)
            return None

    def insert_plant_instance(self, row_id: int, plant_id: int, position: float) -> int | None:
        try:
            db = self.get_db()
            cursor = db.execute(
                "INSERT INTO PlantInstances (row_id, plant_id, position) VALUES (?, ?, ?)",
                (row_id, plant_id, position),
            )
            db.commit()
            return cursor.lastrowid
        except sqlite3.Error as exc:
            logger.error("Error placing plant %s in row %s: %s", plant_id, row_id, exc)
            return None

    def update_plant_instance_position(self, instance_id: int, position: float) -> bool:
        try:
            db = self.get_db()
            cursor = db.execute(
                "UPDATE PlantInstances SET position = ? WHERE instance_id = ?",
                (position, instance_id),
            )
            db.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("Error moving plant instance %s: %s", instance_id, exc)
            return False

    def delete_instance_and_reposition(
        self, instance_id: int, positions: Iterable[tuple[int, float]]
    ) -> bool:
        """Delete one instance and rewrite the positions of its row-mates atomically."""
        db = self.get_db()
        try:
            cursor = db.execute("DELETE FROM PlantInstances WHERE instance_id = ?", (instance_id,))
            if cursor.rowcount == 0:
                db.rollback()
                return False
            db.executemany(
                "UPDATE PlantInstances SET position = ? WHERE instance_id = ?",
                [(position, other_id) for other_id, position in positions],
            )
            db.commit()
            return True
        except sqlite3.Error as exc:
            db.rollback()
            logger.error("Error removing plant instance %s: %s", instance_id, exc)
            return False

    def count_plant_instances(self, plant_id: int) -> int | None:
        try:
            return self.get_db().execute(
                "SELECT COUNT(*) FROM PlantInstances WHERE plant_id = ?", (plant_id,)
            ).fetchone()[0]
        except sqlite3.Error as exc:
            logger.error("Error counting instances of plant %s: %s", plant_id, exc)
            return None

    # --- Helpers -------------------------------------------------------------
    def _update(
        self,
        table: str,
        key_column: str,
        key: int,
        fields: Mapping[str, Any],
        allowed: frozenset[str],
    ) -> bool:
        cols = safe_columns(dict(fields), allowed, context=f"update {table}")
        if not cols:
            return True
        clause, values = build_set_clause(cols)
        try:
            db = self.get_db()
            cursor = db.execute(f"UPDATE {table} SET {clause} WHERE {key_column} = ?", [*values, key])
            db.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("Error updating %s %s: %s", table, key, exc)
            return False

    def _delete(self, table: str, key_column: str, key: int) -> bool:
        try:
            db = self.get_db()
            cursor = db.execute(f"DELETE FROM {table} WHERE {key_column} = ?", (key,))
            db.commit()
            return cursor.rowcount > 0
        except sqlite3.Error as exc:
            logger.error("Error deleting %s %s: %s", table, key, exc)
            return False
