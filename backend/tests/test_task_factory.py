import pytest

from maintenance_engine.schemas.maintenance import InventoryItem, TaskPriorityEnum, TaskStatusEnum
from maintenance_engine.services.maintenance.task_factory_service import (
    create_maintenance_task,
    determine_required_parts,
    estimate_task_duration,
    generate_task_description,
)

from tests.conftest import make_analysis, make_equipment


class TestTaskFactory:

    def test_new_task_is_pending_and_unsynced(self):
        task = create_maintenance_task(make_analysis(days=4.5))
        assert task.id.startswith("MT-")
        assert task.status == TaskStatusEnum.pending
        assert task.assigned_to == ""
        assert task.synced is False
        assert task.predicted_failure_in_days == 4.5
        assert task.notes == make_analysis().recommended_action

    def test_description_with_equipment(self):
        desc = generate_task_description(
            make_analysis(equipment_name="Generator A"),
            make_equipment("gen-1", "generator"),
        )
        assert desc == "Predictive maintenance for Generator A (generator) - Schedule maintenance within 7 days"

    def test_description_without_equipment(self):
        desc = generate_task_description(make_analysis(equipment_name="Generator A"))
        assert desc == "Predictive maintenance for Generator A - Schedule maintenance within 7 days"

    def test_description_keeps_decimal_values(self):
        analysis = make_analysis(action="IMMEDIATE MAINTENANCE REQUIRED: Critical vibration reading: 1.5mm/s. Predicted failure in 2 days.")
        assert generate_task_description(analysis).endswith(
            "- IMMEDIATE MAINTENANCE REQUIRED: Critical vibration reading: 1.5mm/s"
        )

    @pytest.mark.parametrize("risk", ["low", "medium", "high", "critical"])
    def test_priority_follows_risk(self, risk):
        assert create_maintenance_task(make_analysis(risk_level=risk)).priority == TaskPriorityEnum(risk)

    @pytest.mark.parametrize("risk,criticality,expected", [
        ("critical", "critical", 300),
        ("critical", "low", 240),
        ("high", "high", 210),
        ("medium", "critical", 180),
        ("low", "medium", 120),
    ])
    def test_duration(self, risk, criticality, expected):
        equipment = make_equipment(criticality=criticality)
        assert estimate_task_duration(make_analysis(risk_level=risk), equipment) == expected

    def test_duration_without_equipment(self):
        assert estimate_task_duration(make_analysis(risk_level="high")) == 180


class TestRequiredParts:

    def test_only_stocked_parts(self):
        inventory = [
            InventoryItem(name="Oil Filter", quantity=3),
            InventoryItem(name="Fuel Filter", quantity=0),
            InventoryItem(name="Air Filter - Large", quantity=1),
        ]
        parts = determine_required_parts(make_equipment(type="generator"), inventory)
        assert parts == ["Oil Filter", "Air Filter"]

    def test_pump_kit(self):
        inventory = [InventoryItem(name="seal kit", quantity=2), InventoryItem(name="Gaskets", quantity=5)]
        assert determine_required_parts(make_equipment(type="Pump"), inventory) == ["Seal Kit", "Gaskets"]

    def test_nothing_in_stock(self):
        assert determine_required_parts(make_equipment(type="compressor"), []) == []

    def test_unknown_equipment(self):
        inventory = [InventoryItem(name="Oil Filter", quantity=3)]
        assert determine_required_parts(None, inventory) == []
        assert determine_required_parts(make_equipment(type="boiler"), inventory) == []

    def test_task_carries_parts(self):
        task = create_maintenance_task(
            make_analysis(),
            make_equipment(type="ac_unit"),
            [InventoryItem(name="Thermostat", quantity=1)],
        )
        assert task.required_parts == ["Thermostat"]
