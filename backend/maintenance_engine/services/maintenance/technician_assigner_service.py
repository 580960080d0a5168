# backend/maintenance_engine/services/maintenance/technician_assigner_service.py

"""
TECHNICIAN ASSIGNER

Scores each candidate technician against a task:
    +40  available
    +0..30  workload headroom (30 - 0.3 * workload, floored at 0)
    +20  skill tag matches the equipment type (substring, either direction)
    +10  task priority is critical

The best candidate gets the task. Nothing is mutated in place: the caller
receives updated copies of the task and the technician and writes them back.
"""

import math
from datetime import datetime, timedelta
from typing import Iterable, List, NamedTuple, Optional

from maintenance_engine.schemas.maintenance import (
    Equipment,
    MaintenanceTask,
    TaskPriorityEnum,
    TaskStatusEnum,
    Technician,
    utcnow,
)

WORKDAY_MINUTES = 8 * 60
MAX_ASSIGNABLE_WORKLOAD = 80
MAX_WORKLOAD = 100

PRIORITY_DELAY_DAYS = {
    TaskPriorityEnum.critical: 0,
    TaskPriorityEnum.high: 1,
}
DEFAULT_PRIORITY_DELAY_DAYS = 2


class Assignment(NamedTuple):
    task: MaintenanceTask
    technician: Technician
    score: float


def is_assignable(technician: Technician) -> bool:
    return technician.is_available and technician.current_workload < MAX_ASSIGNABLE_WORKLOAD


def available_technicians(technicians: Iterable[Technician]) -> List[Technician]:
    return [t for t in technicians if is_assignable(t)]


def has_matching_skills(technician: Technician, equipment: Optional[Equipment]) -> bool:
    if not equipment:
        return False
    equipment_type = equipment.type.lower()
    return any(
        skill.lower() in equipment_type or equipment_type in skill.lower()
        for skill in technician.skills
    )


def workload_percent(duration_minutes: float) -> float:
    return (duration_minutes / WORKDAY_MINUTES) * 100


def score_technician(
    technician: Technician,
    task: MaintenanceTask,
    equipment: Optional[Equipment] = None
) -> float:
    score = 0.0

    if technician.is_available:
        score += 40

    score += max(0.0, 30 - technician.current_workload * 0.3)

    if has_matching_skills(technician, equipment):
        score += 20

    if task.priority == TaskPriorityEnum.critical:
        score += 10

    return score


def calculate_schedule_date(
    technician: Technician,
    task: MaintenanceTask,
    now: Optional[datetime] = None
) -> datetime:
    now = now or utcnow()
    workload_delay = math.ceil(technician.current_workload / 20)
    priority_delay = PRIORITY_DELAY_DAYS.get(task.priority, DEFAULT_PRIORITY_DELAY_DAYS)
    return now + timedelta(days=max(workload_delay, priority_delay))


def apply_workload(technician: Technician, duration_minutes: float) -> Technician:
    workload = min(MAX_WORKLOAD, technician.current_workload + workload_percent(duration_minutes))
    update = {"current_workload": workload}
    if workload > MAX_ASSIGNABLE_WORKLOAD:
        update["is_available"] = False
    return technician.model_copy(update=update)


def release_workload(technician: Technician, duration_minutes: float) -> Technician:
    workload = max(0.0, technician.current_workload - workload_percent(duration_minutes))
    update = {"current_workload": workload}
    if workload <= MAX_ASSIGNABLE_WORKLOAD:
        update["is_available"] = True
    return technician.model_copy(update=update)


def assign_task(
    task: MaintenanceTask,
    candidates: Iterable[Technician],
    equipment: Optional[Equipment] = None,
    now: Optional[datetime] = None
) -> Optional[Assignment]:
    """
    Pick the best-scoring candidate. Returns None when the pool is empty or
    nobody scores above zero; that is a conflict for the caller to report.
    """
    best: Optional[Technician] = None
    best_score = 0.0

    # strict comparison keeps roster order on ties
    for tech in available_technicians(candidates):
        score = score_technician(tech, task, equipment)
        if best is None or score > best_score:
            best, best_score = tech, score

    if best is None or best_score <= 0:
        return None

    now = now or utcnow()
    assigned = task.model_copy(update={
        "assigned_to": best.name,
        "assigned_technician_id": best.id,
        "status": TaskStatusEnum.scheduled,
        "scheduled_date": calculate_schedule_date(best, task, now),
        "updated_at": now,
    })

    return Assignment(task=assigned, technician=apply_workload(best, task.estimated_duration), score=best_score)
