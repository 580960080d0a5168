# backend/maintenance_engine/api/maintenance/deps.py

from maintenance_engine.services.maintenance.failure_predictor_service import FailurePredictor
from maintenance_engine.services.maintenance.scheduler_service import MaintenanceScheduler

# process-wide engine instances; tests swap them via app.dependency_overrides
_predictor = FailurePredictor()
_scheduler = MaintenanceScheduler()


def get_predictor() -> FailurePredictor:
    return _predictor


def get_scheduler() -> MaintenanceScheduler:
    return _scheduler
