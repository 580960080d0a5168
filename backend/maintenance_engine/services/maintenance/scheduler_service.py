# backend/maintenance_engine/services/maintenance/scheduler_service.py

"""
MAINTENANCE SCHEDULER (orchestrator)

Owns the canonical task list, technician roster, equipment list and
schedules for a scheduling session.

A scheduling pass is a strict sequential fold over prioritized predictions:
every assignment changes a technician's workload, which the next task's
scoring depends on. Each pass and each lifecycle operation runs under one
lock.

Task lifecycle:
    pending -> scheduled -> in-progress -> completed
    any non-terminal state -> cancelled
"""

from datetime import datetime
from threading import Lock
from typing import Dict, Iterable, List, Optional

from maintenance_engine.core.config import Settings, settings as default_settings
from maintenance_engine.core.logger import logger
from maintenance_engine.schemas.maintenance import (
    TERMINAL_TASK_STATUSES,
    Equipment,
    HealthStatusEnum,
    InventoryItem,
    MaintenanceSchedule,
    MaintenanceTask,
    PredictiveAnalysis,
    RiskLevelEnum,
    SchedulingResult,
    TaskOperationResult,
    TaskStatusEnum,
    Technician,
    utcnow,
)
from maintenance_engine.services.maintenance.schedule_builder_service import build_schedules
from maintenance_engine.services.maintenance.task_factory_service import create_maintenance_task
from maintenance_engine.services.maintenance.technician_assigner_service import (
    assign_task,
    available_technicians,
    release_workload,
)


def prioritize(predictions: Iterable[PredictiveAnalysis]) -> List[PredictiveAnalysis]:
    """
    Drop normal-status predictions, then order by:
      critical risk first, soonest predicted failure, highest confidence.
    """
    actionable = [p for p in predictions if p.status != HealthStatusEnum.normal]
    return sorted(
        actionable,
        key=lambda p: (
            p.risk_level != RiskLevelEnum.critical,
            p.predicted_failure_in_days,
            -p.confidence,
        ),
    )


class MaintenanceScheduler:

    def __init__(self, config: Optional[Settings] = None):
        self.config = config or default_settings
        self._tasks: Dict[str, MaintenanceTask] = {}
        self._technicians: Dict[str, Technician] = {}
        self._equipment: Dict[str, Equipment] = {}
        self._schedules: List[MaintenanceSchedule] = []
        self._lock = Lock()

    def initialize(
        self,
        tasks: Optional[List[MaintenanceTask]] = None,
        technicians: Optional[List[Technician]] = None,
        equipment: Optional[List[Equipment]] = None,
        schedules: Optional[List[MaintenanceSchedule]] = None
    ) -> None:
        with self._lock:
            self._tasks = {t.id: t for t in (tasks or [])}
            self._technicians = {t.id: t for t in (technicians or [])}
            self._equipment = {e.id: e for e in (equipment or [])}
            self._schedules = list(schedules or [])

    # -------------------------
    # Scheduling pass
    # -------------------------
    def schedule_maintenance(
        self,
        predictions: Iterable[PredictiveAnalysis],
        inventory: Optional[List[InventoryItem]] = None
    ) -> SchedulingResult:
        result = SchedulingResult()

        with self._lock:
            queue = prioritize(predictions)
            limit = self.config.MAX_PREDICTIONS_PER_PASS
            if limit is not None and len(queue) > limit:
                logger.warning(f"Scheduling pass truncated to {limit} of {len(queue)} predictions")
                queue = queue[:limit]

            for analysis in queue:
                equipment = self._equipment.get(analysis.equipment_id)
                task = None
                try:
                    task = create_maintenance_task(analysis, equipment, inventory)
                    assignment = assign_task(
                        task,
                        available_technicians(self._technicians.values()),
                        equipment,
                    )
                except Exception:
                    logger.exception(
                        f"Failed to schedule task for {analysis.equipment_name}",
                        extra={"equipment_id": analysis.equipment_id},
                    )
                    if task is None:
                        task = create_maintenance_task(analysis, None, None)
                    self._tasks[task.id] = task
                    result.unscheduled_tasks.append(task)
                    result.conflicts.append(f"Scheduling error for {analysis.equipment_name}")
                    continue

                if assignment is None:
                    self._tasks[task.id] = task
                    result.unscheduled_tasks.append(task)
                    result.conflicts.append(f"No available technician for {task.equipment_name}")
                    logger.warning(
                        "No available technician",
                        extra={"equipment_id": task.equipment_id, "task_id": task.id},
                    )
                    continue

                self._technicians[assignment.technician.id] = assignment.technician
                self._tasks[assignment.task.id] = assignment.task
                result.scheduled_tasks.append(assignment.task)
                result.technician_assignments.setdefault(assignment.technician.id, []).append(assignment.task)
                logger.info(
                    f"Task assigned to {assignment.technician.name} (score {assignment.score:.1f})",
                    extra={
                        "task_id": assignment.task.id,
                        "equipment_id": assignment.task.equipment_id,
                        "technician_id": assignment.technician.id,
                    },
                )

            self._schedules = build_schedules(
                result.technician_assignments,
                list(self._technicians.values()),
                list(self._equipment.values()),
            )
            result.schedules = list(self._schedules)

        logger.info(
            f"Scheduling pass finished: {len(result.scheduled_tasks)} scheduled, "
            f"{len(result.unscheduled_tasks)} unscheduled"
        )
        return result

    # -------------------------
    # Lifecycle operations
    # -------------------------
    def _reject(self, task: Optional[MaintenanceTask], task_id: str, message: str) -> TaskOperationResult:
        logger.warning(message, extra={"task_id": task_id})
        return TaskOperationResult(success=False, message=message, task=task)

    def start_task(self, task_id: str) -> TaskOperationResult:
        with self._lock:
            task = self._tasks.get(task_id)
            if not task:
                return self._reject(None, task_id, "task_not_found")
            if task.status != TaskStatusEnum.scheduled:
                return self._reject(task, task_id, f"cannot start task in status {task.status.value}")

            task = task.model_copy(update={"status": TaskStatusEnum.in_progress, "updated_at": utcnow()})
            self._tasks[task_id] = task
        return TaskOperationResult(success=True, message="task_started", task=task)

    def reschedule_task(self, task_id: str, new_date: datetime) -> TaskOperationResult:
        with self._lock:
            task = self._tasks.get(task_id)
            if not task:
                return self._reject(None, task_id, "task_not_found")
            if task.status != TaskStatusEnum.scheduled:
                return self._reject(task, task_id, f"cannot reschedule task in status {task.status.value}")

            task = task.model_copy(update={"scheduled_date": new_date, "updated_at": utcnow()})
            self._tasks[task_id] = task
        return TaskOperationResult(success=True, message="task_rescheduled", task=task)

    def complete_task(self, task_id: str, actual_duration: Optional[int] = None) -> TaskOperationResult:
        with self._lock:
            task = self._tasks.get(task_id)
            if not task:
                return self._reject(None, task_id, "task_not_found")
            if task.status not in (TaskStatusEnum.scheduled, TaskStatusEnum.in_progress):
                return self._reject(task, task_id, f"cannot complete task in status {task.status.value}")
            if actual_duration is not None and actual_duration < 0:
                return self._reject(task, task_id, "actual_duration must be non-negative")

            now = utcnow()
            update = {"status": TaskStatusEnum.completed, "completed_date": now, "updated_at": now}
            if actual_duration is not None:
                update["actual_duration"] = actual_duration
            task = task.model_copy(update=update)
            self._tasks[task_id] = task

            tech = self._find_technician(task)
            if tech:
                spent = actual_duration if actual_duration is not None else task.estimated_duration
                self._technicians[tech.id] = release_workload(tech, spent)

        return TaskOperationResult(success=True, message="task_completed", task=task)

    def cancel_task(self, task_id: str, reason: Optional[str] = None) -> TaskOperationResult:
        with self._lock:
            task = self._tasks.get(task_id)
            if not task:
                return self._reject(None, task_id, "task_not_found")
            if task.status in TERMINAL_TASK_STATUSES:
                return self._reject(task, task_id, f"cannot cancel task in status {task.status.value}")

            update = {"status": TaskStatusEnum.cancelled, "updated_at": utcnow()}
            if reason:
                update["notes"] = f"{task.notes}\nCancelled: {reason}" if task.notes else f"Cancelled: {reason}"
            task = task.model_copy(update=update)
            self._tasks[task_id] = task
        return TaskOperationResult(success=True, message="task_cancelled", task=task)

    def _find_technician(self, task: MaintenanceTask) -> Optional[Technician]:
        if task.assigned_technician_id and task.assigned_technician_id in self._technicians:
            return self._technicians[task.assigned_technician_id]
        for tech in self._technicians.values():
            if tech.name == task.assigned_to:
                return tech
        return None

    # -------------------------
    # Accessors
    # -------------------------
    def get_task(self, task_id: str) -> Optional[MaintenanceTask]:
        with self._lock:
            return self._tasks.get(task_id)

    def get_tasks(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        technician: Optional[str] = None
    ) -> List[MaintenanceTask]:
        with self._lock:
            items = list(self._tasks.values())
        if status:
            items = [t for t in items if t.status.value == status]
        if priority:
            items = [t for t in items if t.priority.value == priority]
        if technician:
            items = [t for t in items if technician in (t.assigned_to, t.assigned_technician_id)]
        return items

    def get_scheduled_tasks(self) -> List[MaintenanceTask]:
        with self._lock:
            return [
                t for t in self._tasks.values()
                if t.status in (TaskStatusEnum.scheduled, TaskStatusEnum.in_progress)
            ]

    def get_technician_schedules(self) -> List[MaintenanceSchedule]:
        with self._lock:
            return list(self._schedules)

    def get_technicians(self) -> List[Technician]:
        with self._lock:
            return list(self._technicians.values())

    def get_technician(self, technician_id: str) -> Optional[Technician]:
        with self._lock:
            return self._technicians.get(technician_id)

    def get_equipment(self) -> List[Equipment]:
        with self._lock:
            return list(self._equipment.values())
