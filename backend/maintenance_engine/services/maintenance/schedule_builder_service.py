# backend/maintenance_engine/services/maintenance/schedule_builder_service.py

import uuid
from typing import Dict, List, Mapping, Optional

from maintenance_engine.schemas.maintenance import (
    Equipment,
    MaintenanceSchedule,
    MaintenanceTask,
    Technician,
    utcnow,
)
from maintenance_engine.services.maintenance.technician_assigner_service import has_matching_skills


def _new_schedule_id() -> str:
    return f"SCH-{uuid.uuid4().hex[:12]}"


def skill_match_ratio(
    technician: Technician,
    tasks: List[MaintenanceTask],
    equipment_by_id: Mapping[str, Equipment]
) -> float:
    if not tasks:
        return 0.0
    matched = sum(
        1 for t in tasks if has_matching_skills(technician, equipment_by_id.get(t.equipment_id))
    )
    return matched / len(tasks)


def calculate_efficiency(
    technician: Technician,
    tasks: List[MaintenanceTask],
    equipment_by_id: Mapping[str, Equipment]
) -> float:
    if not tasks:
        return 100.0
    workload_factor = max(0.5, 1 - technician.current_workload / 200)
    return min(100.0, skill_match_ratio(technician, tasks, equipment_by_id) * workload_factor * 100)


def build_schedules(
    assignments: Mapping[str, List[MaintenanceTask]],
    technicians: List[Technician],
    equipment: Optional[List[Equipment]] = None
) -> List[MaintenanceSchedule]:
    """
    One schedule per technician id in `assignments` that has at least one task.
    Technicians missing from the roster are skipped.
    """
    roster: Dict[str, Technician] = {t.id: t for t in technicians}
    equipment_by_id = {e.id: e for e in (equipment or [])}
    now = utcnow()

    schedules: List[MaintenanceSchedule] = []
    for tech_id, tasks in assignments.items():
        tech = roster.get(tech_id)
        if not tech or not tasks:
            continue

        schedules.append(MaintenanceSchedule(
            id=_new_schedule_id(),
            technician_id=tech.id,
            technician_name=tech.name,
            tasks=list(tasks),
            date=now,
            total_hours=sum(t.estimated_duration for t in tasks) / 60,
            efficiency=calculate_efficiency(tech, tasks, equipment_by_id),
        ))

    return schedules
