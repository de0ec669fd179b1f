from __future__ import annotations

import logging
from dataclasses import dataclass

from app.config import AppConfig
from app.services.application.garden_service import GardenService
from app.services.application.mutation_audit import MutationAuditListener
from app.services.application.row_layout_service import RowLayoutService
from app.services.application.row_mutation_coordinator import RowMutationCoordinator
from app.services.application.transition_tracker import TransitionTracker
from app.utils.cache import LayoutCache
from app.utils.event_bus import EventBus
from infrastructure.database.repositories.garden import GardenRepository, PlantingRepository
from infrastructure.database.sqlite_handler import SQLiteDatabaseHandler
from infrastructure.logging.audit import AuditLogger

logger = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Aggregate and manage core backend services."""

    config: AppConfig
    database: SQLiteDatabaseHandler
    garden_repo: GardenRepository
    planting_repo: PlantingRepository
    event_bus: EventBus
    audit_logger: AuditLogger
    audit_listener: MutationAuditListener
    layout_service: RowLayoutService
    transitions: TransitionTracker
    row_coordinator: RowMutationCoordinator
    garden_service: GardenService

    @classmethod
    def build(cls, config: AppConfig) -> "ServiceContainer":
        """Construct the service container with all dependencies.

        Args:
            config: Application configuration
        """
        logger.info("Building ServiceContainer...")
        database = SQLiteDatabaseHandler(config.database_path)
        database.create_tables()

        garden_repo = GardenRepository(database)
        planting_repo = PlantingRepository(database)

        event_bus = EventBus()
        audit_logger = AuditLogger(config.audit_log_path, config.log_level)
        audit_listener = MutationAuditListener(audit_logger, event_bus)
        audit_listener.start()

        layout_service = RowLayoutService(
            LayoutCache(enabled=config.layout_cache_enabled, maxsize=config.layout_cache_maxsize)
        )
        transitions = TransitionTracker()
        row_coordinator = RowMutationCoordinator(
            planting_repo,
            planting_repo,
            layout_service,
            event_bus=event_bus,
            transitions=transitions,
            exit_delay=config.exit_delay_seconds,
            move_delay=config.move_delay_seconds,
            settle_delay=config.settle_delay_seconds,
            persist_moves=config.persist_moves,
        )
        garden_service = GardenService(garden_repo, row_coordinator, event_bus)
        if config.default_garden_name:
            garden_service.ensure_default_garden(config.default_garden_name)

        logger.info("ServiceContainer built successfully.")
        return cls(
            config=config,
            database=database,
            garden_repo=garden_repo,
            planting_repo=planting_repo,
            event_bus=event_bus,
            audit_logger=audit_logger,
            audit_listener=audit_listener,
            layout_service=layout_service,
            transitions=transitions,
            row_coordinator=row_coordinator,
            garden_service=garden_service,
        )

    def shutdown(self) -> None:
        """Release external resources before process exit."""
        self.row_coordinator.shutdown()
        self.audit_listener.stop()
        self.audit_logger.close()
        self.database.close()
        logger.info("ServiceContainer shutdown complete.")
