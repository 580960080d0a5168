# backend/maintenance_engine/services/maintenance/report_service.py

"""
Facility-level maintenance reporting:
 - report over a set of equipment (critical / upcoming / recommendations / overall risk)
 - task statistics for dashboards (counts, durations, estimate accuracy)
"""

import statistics
from typing import Iterable, List

from maintenance_engine.core.logger import logger
from maintenance_engine.schemas.maintenance import (
    Equipment,
    HealthStatusEnum,
    MaintenanceReport,
    MaintenanceTask,
    PredictiveAnalysis,
    RiskLevelEnum,
    TaskStatistics,
    TaskStatusEnum,
)
from maintenance_engine.services.maintenance.failure_predictor_service import FailurePredictor

RISK_SCORES = {
    RiskLevelEnum.low: 1,
    RiskLevelEnum.medium: 2,
    RiskLevelEnum.high: 3,
    RiskLevelEnum.critical: 4,
}

UPCOMING_WINDOW_DAYS = 7
FORECAST_WINDOW_DAYS = 30
LOW_CONFIDENCE = 0.7


def calculate_overall_risk(analyses: List[PredictiveAnalysis]) -> RiskLevelEnum:
    if not analyses:
        return RiskLevelEnum.low

    avg = statistics.mean(RISK_SCORES[a.risk_level] for a in analyses)
    if avg >= 3.5:
        return RiskLevelEnum.critical
    if avg >= 2.5:
        return RiskLevelEnum.high
    if avg >= 1.5:
        return RiskLevelEnum.medium
    return RiskLevelEnum.low


def generate_overall_recommendations(analyses: List[PredictiveAnalysis]) -> List[str]:
    recs: List[str] = []
    critical = sum(1 for a in analyses if a.risk_level == RiskLevelEnum.critical)
    high = sum(1 for a in analyses if a.risk_level == RiskLevelEnum.high)
    upcoming = sum(1 for a in analyses if a.predicted_failure_in_days <= FORECAST_WINDOW_DAYS)

    if critical:
        recs.append(f"CRITICAL: {critical} equipment items require immediate maintenance")
    if high:
        recs.append(f"HIGH PRIORITY: {high} equipment items need maintenance within 7 days")
    if upcoming:
        recs.append(f"UPCOMING: {upcoming} equipment items predicted to fail within 30 days")
    if any(a.confidence < LOW_CONFIDENCE for a in analyses):
        recs.append("LOW CONFIDENCE: Some predictions have low confidence - consider collecting more sensor data")

    return recs


def build_report(analyses: List[PredictiveAnalysis]) -> MaintenanceReport:
    return MaintenanceReport(
        critical_equipment=[
            a for a in analyses
            if a.status == HealthStatusEnum.critical or a.risk_level == RiskLevelEnum.critical
        ],
        upcoming_maintenance=[
            a for a in analyses
            if a.predicted_failure_in_days <= UPCOMING_WINDOW_DAYS and a.status != HealthStatusEnum.critical
        ],
        recommendations=generate_overall_recommendations(analyses),
        overall_risk=calculate_overall_risk(analyses),
    )


def generate_maintenance_report(
    predictor: FailurePredictor,
    equipment: Iterable[Equipment]
) -> MaintenanceReport:
    analyses = [predictor.predict_failure(e.id, e.type, e.name) for e in equipment]
    report = build_report(analyses)
    logger.info(
        f"Maintenance report: {len(analyses)} equipment, overall risk {report.overall_risk.value}"
    )
    return report


def summarize_tasks(tasks: Iterable[MaintenanceTask]) -> TaskStatistics:
    tasks = list(tasks)
    stats = TaskStatistics(total_tasks=len(tasks))

    for t in tasks:
        stats.by_status[t.status.value] = stats.by_status.get(t.status.value, 0) + 1
        stats.by_priority[t.priority.value] = stats.by_priority.get(t.priority.value, 0) + 1

    completed = [t for t in tasks if t.status == TaskStatusEnum.completed]
    stats.completed_tasks = len(completed)

    measured = [t for t in completed if t.actual_duration]
    if measured:
        avg_estimated = statistics.mean(t.estimated_duration for t in measured)
        avg_actual = statistics.mean(t.actual_duration for t in measured)
        stats.average_estimated_duration = round(avg_estimated, 2)
        stats.average_actual_duration = round(avg_actual, 2)
        stats.average_efficiency = round(min(100.0, avg_estimated / avg_actual * 100), 2)

    return stats
