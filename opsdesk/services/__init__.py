"""Lifecycle services for maintenance work orders and housekeeping tasks."""

from opsdesk.services.housekeeping_service import HousekeepingService
from opsdesk.services.maintenance_service import MaintenanceService


__all__ = ["HousekeepingService", "MaintenanceService"]
