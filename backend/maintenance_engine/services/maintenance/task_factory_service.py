# backend/maintenance_engine/services/maintenance/task_factory_service.py

import uuid
from typing import Dict, Iterable, List, Optional

from maintenance_engine.schemas.maintenance import (
    Equipment,
    InventoryItem,
    MaintenanceTask,
    PredictiveAnalysis,
    RiskLevelEnum,
    TaskPriorityEnum,
    TaskStatusEnum,
    utcnow,
)

BASE_DURATION_MINUTES = 120
RISK_DURATION_MINUTES = {
    RiskLevelEnum.critical: 240,
    RiskLevelEnum.high: 180,
}
CRITICALITY_EXTRA_MINUTES = {
    RiskLevelEnum.critical: 60,
    RiskLevelEnum.high: 30,
}

# generic service kit per equipment type
PARTS_BY_EQUIPMENT_TYPE: Dict[str, List[str]] = {
    "generator": ["Fuel Filter", "Oil Filter", "Air Filter"],
    "ac_unit": ["Refrigerant", "Air Filter", "Thermostat"],
    "pump": ["Seal Kit", "Bearings", "Gaskets"],
    "compressor": ["Air Filter", "Oil", "Belts"],
}


def _new_task_id() -> str:
    return f"MT-{uuid.uuid4().hex[:12]}"


def first_clause(text: str) -> str:
    return text.split(". ")[0].rstrip(".")


def generate_task_description(analysis: PredictiveAnalysis, equipment: Optional[Equipment] = None) -> str:
    base = f"Predictive maintenance for {analysis.equipment_name}"
    if equipment:
        base = f"{base} ({equipment.type})"
    return f"{base} - {first_clause(analysis.recommended_action)}"


def map_risk_to_priority(risk_level: RiskLevelEnum) -> TaskPriorityEnum:
    return TaskPriorityEnum(RiskLevelEnum(risk_level).value)


def estimate_task_duration(analysis: PredictiveAnalysis, equipment: Optional[Equipment] = None) -> int:
    minutes = RISK_DURATION_MINUTES.get(analysis.risk_level, BASE_DURATION_MINUTES)
    if equipment:
        minutes += CRITICALITY_EXTRA_MINUTES.get(equipment.criticality, 0)
    return minutes


def determine_required_parts(
    equipment: Optional[Equipment],
    inventory: Optional[Iterable[InventoryItem]] = None
) -> List[str]:
    """Service-kit parts for the equipment type that are actually in stock."""
    if not equipment:
        return []

    candidates = PARTS_BY_EQUIPMENT_TYPE.get(equipment.type.lower(), [])
    in_stock = [i.name.lower() for i in (inventory or []) if i.quantity > 0]

    return [part for part in candidates if any(part.lower() in name for name in in_stock)]


def create_maintenance_task(
    analysis: PredictiveAnalysis,
    equipment: Optional[Equipment] = None,
    inventory: Optional[Iterable[InventoryItem]] = None
) -> MaintenanceTask:
    now = utcnow()
    return MaintenanceTask(
        id=_new_task_id(),
        equipment_id=analysis.equipment_id,
        equipment_name=analysis.equipment_name,
        description=generate_task_description(analysis, equipment),
        priority=map_risk_to_priority(analysis.risk_level),
        status=TaskStatusEnum.pending,
        assigned_to="",
        estimated_duration=estimate_task_duration(analysis, equipment),
        scheduled_date=now,
        predicted_failure_in_days=analysis.predicted_failure_in_days,
        required_parts=determine_required_parts(equipment, inventory),
        notes=analysis.recommended_action,
        created_at=now,
        updated_at=now,
        synced=False,
    )
