"""
API Routes - Maintenance Scheduling
-----------------------------------

Endpoints:
 - POST /maintenance/roster                     (load technicians / equipment / tasks)
 - POST /maintenance/schedule                   (schedule from predictions)
 - GET  /maintenance/tasks                      (filter by status / priority / technician)
 - GET  /maintenance/tasks/{task_id}
 - POST /maintenance/tasks/{task_id}/start
 - POST /maintenance/tasks/{task_id}/complete
 - POST /maintenance/tasks/{task_id}/reschedule
 - POST /maintenance/tasks/{task_id}/cancel
 - GET  /maintenance/schedules
 - GET  /maintenance/technicians
 - GET  /maintenance/analytics
"""

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query
from pydantic import BaseModel, Field

from maintenance_engine.api.maintenance.deps import get_scheduler
from maintenance_engine.schemas.maintenance import (
    Equipment,
    InventoryItem,
    MaintenanceSchedule,
    MaintenanceTask,
    PredictiveAnalysis,
    SchedulingResult,
    TaskOperationResult,
    TaskStatistics,
    Technician,
)
from maintenance_engine.services.maintenance.report_service import summarize_tasks
from maintenance_engine.services.maintenance.scheduler_service import MaintenanceScheduler

router = APIRouter()


class RosterRequest(BaseModel):
    technicians: List[Technician] = []
    equipment: List[Equipment] = []
    tasks: List[MaintenanceTask] = []


class ScheduleRequest(BaseModel):
    predictions: List[PredictiveAnalysis]
    inventory: List[InventoryItem] = []


class CompleteRequest(BaseModel):
    actual_duration: Optional[int] = Field(None, ge=0)


class RescheduleRequest(BaseModel):
    new_date: datetime


class CancelRequest(BaseModel):
    reason: Optional[str] = None


def _operation_response(res: TaskOperationResult) -> TaskOperationResult:
    if res.success:
        return res
    if res.task is None:
        raise HTTPException(status_code=404, detail=res.message)
    raise HTTPException(status_code=409, detail=res.message)


@router.post("/maintenance/roster")
def api_load_roster(req: RosterRequest, scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    scheduler.initialize(tasks=req.tasks, technicians=req.technicians, equipment=req.equipment)
    return {
        "technicians": len(req.technicians),
        "equipment": len(req.equipment),
        "tasks": len(req.tasks),
    }


@router.post("/maintenance/schedule", response_model=SchedulingResult)
def api_schedule(req: ScheduleRequest, scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    return scheduler.schedule_maintenance(req.predictions, req.inventory)


@router.get("/maintenance/tasks", response_model=List[MaintenanceTask])
def api_list_tasks(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    technician: Optional[str] = Query(None),
    scheduler: MaintenanceScheduler = Depends(get_scheduler)
):
    return scheduler.get_tasks(status=status, priority=priority, technician=technician)


@router.get("/maintenance/tasks/{task_id}", response_model=MaintenanceTask)
def api_get_task(task_id: str, scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    task = scheduler.get_task(task_id)
    if not task:
        raise HTTPException(status_code=404, detail="task_not_found")
    return task


@router.post("/maintenance/tasks/{task_id}/start", response_model=TaskOperationResult)
def api_start_task(task_id: str, scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    return _operation_response(scheduler.start_task(task_id))


@router.post("/maintenance/tasks/{task_id}/complete", response_model=TaskOperationResult)
def api_complete_task(
    task_id: str,
    req: Optional[CompleteRequest] = None,
    scheduler: MaintenanceScheduler = Depends(get_scheduler)
):
    actual = req.actual_duration if req else None
    return _operation_response(scheduler.complete_task(task_id, actual_duration=actual))


@router.post("/maintenance/tasks/{task_id}/reschedule", response_model=TaskOperationResult)
def api_reschedule_task(
    task_id: str,
    req: RescheduleRequest,
    scheduler: MaintenanceScheduler = Depends(get_scheduler)
):
    return _operation_response(scheduler.reschedule_task(task_id, req.new_date))


@router.post("/maintenance/tasks/{task_id}/cancel", response_model=TaskOperationResult)
def api_cancel_task(
    task_id: str,
    req: Optional[CancelRequest] = None,
    scheduler: MaintenanceScheduler = Depends(get_scheduler)
):
    reason = req.reason if req else None
    return _operation_response(scheduler.cancel_task(task_id, reason=reason))


@router.get("/maintenance/schedules", response_model=List[MaintenanceSchedule])
def api_schedules(scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    return scheduler.get_technician_schedules()


@router.get("/maintenance/technicians", response_model=List[Technician])
def api_technicians(scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    return scheduler.get_technicians()


@router.get("/maintenance/analytics", response_model=TaskStatistics)
def api_analytics(scheduler: MaintenanceScheduler = Depends(get_scheduler)):
    return summarize_tasks(scheduler.get_tasks())
