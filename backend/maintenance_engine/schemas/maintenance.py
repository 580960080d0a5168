"""
Maintenance Engine Schemas
--------------------------

Data records exchanged between the predictive engine, the scheduler and
their collaborators (sensor stream, equipment/technician directory, stock
snapshot, sync layer).
"""

import enum
import uuid
from datetime import datetime, timezone
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def new_reading_id() -> str:
    return f"SR-{uuid.uuid4().hex[:12]}"


class HealthStatusEnum(str, enum.Enum):
    normal = "normal"
    warning = "warning"
    critical = "critical"


class TrendEnum(str, enum.Enum):
    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


class RiskLevelEnum(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class TaskPriorityEnum(str, enum.Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"


class TaskStatusEnum(str, enum.Enum):
    pending = "pending"
    scheduled = "scheduled"
    in_progress = "in-progress"
    completed = "completed"
    cancelled = "cancelled"


TERMINAL_TASK_STATUSES = (TaskStatusEnum.completed, TaskStatusEnum.cancelled)


# -------------------------
# Sensor data
# -------------------------
class NormalRange(BaseModel):
    model_config = ConfigDict(frozen=True)

    min: float
    max: float


class SensorReading(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_reading_id)
    equipment_id: str
    type: str = Field(..., description="temperature, vibration, voltage, pressure, humidity, runtime, ...")
    value: float
    unit: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
    normal_range: NormalRange
    status: HealthStatusEnum = HealthStatusEnum.normal


class SensorAnalysis(BaseModel):
    equipment_id: str
    sensor_type: str
    current_value: float
    normal_range: NormalRange
    deviation: float
    status: HealthStatusEnum
    trend: TrendEnum
    anomaly_score: float = Field(..., ge=0.0, le=1.0)
    recommendations: List[str] = Field(default_factory=list)


# -------------------------
# Predictions
# -------------------------
class PredictiveAnalysis(BaseModel):
    equipment_id: str
    equipment_name: str
    status: HealthStatusEnum
    predicted_failure_in_days: float = Field(..., ge=1.0, le=90.0)
    confidence: float = Field(..., ge=0.0, le=0.95)
    failure_probability: float = Field(0.0, ge=0.0, le=0.95)
    recommended_action: str
    risk_level: RiskLevelEnum
    contributing_factors: List[str] = Field(default_factory=list)
    last_analysis: datetime = Field(default_factory=utcnow)
    next_analysis: datetime = Field(default_factory=utcnow)


class MaintenanceReport(BaseModel):
    critical_equipment: List[PredictiveAnalysis] = Field(default_factory=list)
    upcoming_maintenance: List[PredictiveAnalysis] = Field(default_factory=list)
    recommendations: List[str] = Field(default_factory=list)
    overall_risk: RiskLevelEnum = RiskLevelEnum.low
    generated_at: datetime = Field(default_factory=utcnow)


# -------------------------
# Directory / stock records
# -------------------------
class Equipment(BaseModel):
    id: str
    name: str
    type: str
    location: Optional[str] = None
    status: str = "operational"
    last_maintenance: Optional[datetime] = None
    next_scheduled_maintenance: Optional[datetime] = None
    runtime_hours: float = 0.0
    criticality: RiskLevelEnum = RiskLevelEnum.medium
    department: Optional[str] = None


class Technician(BaseModel):
    id: str
    name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    department: Optional[str] = None
    skills: List[str] = Field(default_factory=list)
    current_workload: float = Field(0.0, ge=0.0, le=100.0)
    is_available: bool = True
    location: Optional[str] = None
    last_active: Optional[datetime] = None


class InventoryItem(BaseModel):
    id: Optional[str] = None
    name: str
    quantity: float = 0


# -------------------------
# Tasks & schedules
# -------------------------
class MaintenanceTask(BaseModel):
    id: str
    equipment_id: str
    equipment_name: str
    description: str
    priority: TaskPriorityEnum
    status: TaskStatusEnum = TaskStatusEnum.pending
    assigned_to: str = ""
    assigned_technician_id: Optional[str] = None
    estimated_duration: int = Field(..., description="minutes")
    actual_duration: Optional[int] = Field(None, ge=0, description="minutes")
    scheduled_date: datetime = Field(default_factory=utcnow)
    completed_date: Optional[datetime] = None
    predicted_failure_in_days: Optional[float] = None
    required_parts: List[str] = Field(default_factory=list)
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    synced: bool = False


class MaintenanceSchedule(BaseModel):
    id: str
    technician_id: str
    technician_name: str
    tasks: List[MaintenanceTask] = Field(default_factory=list)
    date: datetime = Field(default_factory=utcnow)
    total_hours: float = 0.0
    efficiency: float = Field(0.0, ge=0.0, le=100.0)


class SchedulingResult(BaseModel):
    scheduled_tasks: List[MaintenanceTask] = Field(default_factory=list)
    unscheduled_tasks: List[MaintenanceTask] = Field(default_factory=list)
    technician_assignments: Dict[str, List[MaintenanceTask]] = Field(default_factory=dict)
    conflicts: List[str] = Field(default_factory=list)
    schedules: List[MaintenanceSchedule] = Field(default_factory=list)


class TaskOperationResult(BaseModel):
    success: bool
    message: str
    task: Optional[MaintenanceTask] = None


class TaskStatistics(BaseModel):
    total_tasks: int = 0
    by_status: Dict[str, int] = Field(default_factory=dict)
    by_priority: Dict[str, int] = Field(default_factory=dict)
    completed_tasks: int = 0
    average_estimated_duration: Optional[float] = None
    average_actual_duration: Optional[float] = None
    average_efficiency: float = 100.0
