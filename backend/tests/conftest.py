from datetime import datetime, timedelta, timezone

import pytest

from maintenance_engine.core.config import Settings
from maintenance_engine.schemas.maintenance import (
    Equipment,
    NormalRange,
    PredictiveAnalysis,
    SensorReading,
    Technician,
)
from maintenance_engine.services.maintenance.failure_predictor_service import FailurePredictor
from maintenance_engine.services.maintenance.scheduler_service import MaintenanceScheduler


class FakeClock:
    """Manually advanced clock for cache-expiry tests."""

    def __init__(self):
        self.now = datetime(2025, 1, 1, 8, 0, tzinfo=timezone.utc)

    def __call__(self):
        return self.now

    def advance(self, **kwargs):
        self.now = self.now + timedelta(**kwargs)


def make_reading(equipment_id="gen-1", type="temperature", value=75.0, low=60.0, high=90.0, unit="°C"):
    return SensorReading(
        equipment_id=equipment_id,
        type=type,
        value=value,
        unit=unit,
        normal_range=NormalRange(min=low, max=high),
    )


def make_analysis(
    equipment_id="gen-1",
    equipment_name=None,
    status="warning",
    risk_level="high",
    days=10.0,
    confidence=0.5,
    action="Schedule maintenance within 7 days. Issues: Warning temperature reading: 99°C. Predicted failure in 10 days.",
):
    return PredictiveAnalysis(
        equipment_id=equipment_id,
        equipment_name=equipment_name or f"Unit {equipment_id}",
        status=status,
        predicted_failure_in_days=days,
        confidence=confidence,
        recommended_action=action,
        risk_level=risk_level,
    )


def make_technician(tech_id="t-1", name=None, skills=None, workload=0.0, available=True):
    return Technician(
        id=tech_id,
        name=name or f"Tech {tech_id}",
        skills=skills or [],
        current_workload=workload,
        is_available=available,
    )


def make_equipment(equipment_id="gen-1", type="generator", criticality="medium", name=None):
    return Equipment(
        id=equipment_id,
        name=name or f"Unit {equipment_id}",
        type=type,
        criticality=criticality,
    )


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def config():
    return Settings()


@pytest.fixture
def predictor(config, clock):
    return FailurePredictor(config=config, clock=clock)


@pytest.fixture
def scheduler(config):
    return MaintenanceScheduler(config=config)


@pytest.fixture
def fleet():
    return [
        make_equipment("gen-1", "generator", criticality="high", name="Generator A"),
        make_equipment("pump-1", "pump", criticality="medium", name="Pump B"),
        make_equipment("ac-1", "ac_unit", criticality="low", name="AC C"),
    ]
