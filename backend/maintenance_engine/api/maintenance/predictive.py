"""
API Routes - Predictive Maintenance
-----------------------------------

Endpoints:
 - POST   /maintenance/readings                 (ingest + analyze sensor readings)
 - GET    /maintenance/predict/{equipment_id}   (failure prediction, cached 1h)
 - GET    /maintenance/history/{equipment_id}   (stored readings)
 - POST   /maintenance/report                   (facility report over equipment)
 - DELETE /maintenance/cache                    (drop cache + history)
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from maintenance_engine.api.maintenance.deps import get_predictor
from maintenance_engine.schemas.maintenance import (
    Equipment,
    MaintenanceReport,
    PredictiveAnalysis,
    SensorAnalysis,
    SensorReading,
)
from maintenance_engine.services.maintenance.failure_predictor_service import FailurePredictor
from maintenance_engine.services.maintenance.report_service import generate_maintenance_report

router = APIRouter()


class ReadingsRequest(BaseModel):
    readings: List[SensorReading]


class ReportRequest(BaseModel):
    equipment: List[Equipment]


@router.post("/maintenance/readings", response_model=List[SensorAnalysis])
def api_analyze_readings(req: ReadingsRequest, predictor: FailurePredictor = Depends(get_predictor)):
    return predictor.analyze_sensor_data(req.readings)


@router.get("/maintenance/predict/{equipment_id}", response_model=PredictiveAnalysis)
def api_predict(
    equipment_id: str,
    equipment_type: str = Query("generator"),
    equipment_name: Optional[str] = Query(None),
    predictor: FailurePredictor = Depends(get_predictor)
):
    return predictor.predict_failure(equipment_id, equipment_type, equipment_name)


@router.get("/maintenance/history/{equipment_id}", response_model=List[SensorReading])
def api_history(equipment_id: str, predictor: FailurePredictor = Depends(get_predictor)):
    return predictor.get_history(equipment_id)


@router.post("/maintenance/report", response_model=MaintenanceReport)
def api_report(req: ReportRequest, predictor: FailurePredictor = Depends(get_predictor)):
    return generate_maintenance_report(predictor, req.equipment)


@router.delete("/maintenance/cache")
def api_clear_cache(
    equipment_id: Optional[str] = Query(None),
    predictor: FailurePredictor = Depends(get_predictor)
):
    predictor.clear_cache(equipment_id)
    return {"success": True, "equipment_id": equipment_id}
