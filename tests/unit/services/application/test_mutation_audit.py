"""Audit trail for row mutations: EventBus -> MutationAuditListener -> JSON lines."""

from __future__ import annotations

import json

import pytest

from app.enums.events import CatalogEvent, RowEvent
from app.services.application.mutation_audit import MutationAuditListener
from app.utils.event_bus import EventBus
from infrastructure.logging.audit import AuditLogger


@pytest.fixture()
def audit_logger(tmp_path):
    logger = AuditLogger(str(tmp_path / "audit" / "audit.log"))
    yield logger
    logger.close()


def _records(path):
    lines = path.read_text(encoding="utf-8").splitlines()
    return [json.loads(line.split(" | ", 2)[2]) for line in lines]


def test_committed_and_rolled_back_mutations_are_recorded(tmp_path, audit_logger):
    bus = EventBus()
    listener = MutationAuditListener(audit_logger, bus, actor="tester")
    listener.start()

    bus.publish(RowEvent.INSTANCE_ADDED, {"row_id": 3, "plant_id": 1, "instance_id": 9, "position": 10})
    bus.publish(RowEvent.MUTATION_ROLLED_BACK, {"operation": "add", "row_id": 3, "plant_id": 1})
    bus.publish(CatalogEvent.ROW_DELETED, {"row_id": 4, "garden_id": 1, "released": 0})
    # Not audited.
    bus.publish(RowEvent.ROW_SETTLED, {"row_id": 3})

    records = _records(tmp_path / "audit" / "audit.log")
    assert [(r["action"], r["outcome"]) for r in records] == [
        ("instance_added", "committed"),
        ("mutation_rolled_back", "rolled_back"),
        ("row_deleted", "committed"),
    ]
    assert records[0]["actor"] == "tester"
    assert records[0]["resource"] == "row:3"
    assert records[0]["meta"] == {"plant_id": 1, "instance_id": 9, "position": 10}


def test_stop_unsubscribes(tmp_path, audit_logger):
    bus = EventBus()
    listener = MutationAuditListener(audit_logger, bus)
    listener.start()
    listener.stop()

    bus.publish(RowEvent.ROW_RELOADED, {"row_id": 1, "reason": "requested"})

    assert not (tmp_path / "audit" / "audit.log").exists()
    assert bus.get_metrics()["subscribers"] == 0
