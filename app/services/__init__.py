"""
Service Organization
====================

**application/**
  Singleton services managed by ServiceContainer. One instance per application.
  Examples: GardenService, RowMutationCoordinator, RowLayoutService

Protocols describing the store contracts live in ``protocols.py``.
"""
