# backend/maintenance_engine/services/maintenance/sensor_analyzer_service.py

"""
SENSOR ANALYZER

Turns one sensor reading into a normalized anomaly assessment:
  - deviation: fractional distance outside the normal range
  - status: normal / warning (<= 20% out) / critical (> 20% out)
  - trend over the last 3 stored values of the equipment
  - anomaly score in [0, 1] (2x the deviation, capped)
  - human-readable recommendations

Pure function. History bookkeeping belongs to the failure predictor.
"""

from typing import List, Optional, Sequence

from maintenance_engine.schemas.maintenance import (
    HealthStatusEnum,
    SensorAnalysis,
    SensorReading,
    TrendEnum,
)

CRITICAL_DEVIATION = 0.2
TREND_WINDOW = 3
TREND_SLOPE_THRESHOLD = 0.1


def calculate_deviation(value: float, range_min: float, range_max: float) -> float:
    # a zero bound on the violated side carries no scale: treated as no deviation
    if value < range_min:
        if range_min == 0:
            return 0.0
        return (range_min - value) / abs(range_min)
    if value > range_max:
        if range_max == 0:
            return 0.0
        return (value - range_max) / abs(range_max)
    return 0.0


def classify_deviation(deviation: float) -> HealthStatusEnum:
    if deviation > CRITICAL_DEVIATION:
        return HealthStatusEnum.critical
    if deviation > 0:
        return HealthStatusEnum.warning
    return HealthStatusEnum.normal


def calculate_anomaly_score(deviation: float) -> float:
    return min(1.0, abs(deviation) * 2)


def calculate_trend(recent_values: Optional[Sequence[float]]) -> TrendEnum:
    if not recent_values or len(recent_values) < TREND_WINDOW:
        return TrendEnum.stable

    window = list(recent_values)[-TREND_WINDOW:]
    slope = (window[-1] - window[0]) / 2
    if abs(slope) > TREND_SLOPE_THRESHOLD:
        return TrendEnum.increasing if slope > 0 else TrendEnum.decreasing
    return TrendEnum.stable


def _sensor_recommendations(
    reading: SensorReading,
    status: HealthStatusEnum,
    trend: TrendEnum
) -> List[str]:
    recs: List[str] = []
    rng = reading.normal_range

    if status == HealthStatusEnum.critical:
        direction = "low" if reading.value < rng.min else "high"
        recs.append(f"IMMEDIATE ACTION: {reading.type} is critically {direction}")
    elif status == HealthStatusEnum.warning:
        recs.append(f"Monitor {reading.type} closely - value is outside normal range")

    if trend == TrendEnum.increasing and reading.value > rng.max:
        recs.append(f"Trend shows increasing {reading.type} - investigate cause")
    elif trend == TrendEnum.decreasing and reading.value < rng.min:
        recs.append(f"Trend shows decreasing {reading.type} - check for issues")

    return recs


def analyze_reading(
    reading: SensorReading,
    recent_values: Optional[Sequence[float]] = None
) -> SensorAnalysis:
    """
    Score a single reading. `recent_values` are the equipment's stored values,
    oldest first; only the last 3 feed the trend.
    """
    rng = reading.normal_range
    deviation = calculate_deviation(reading.value, rng.min, rng.max)
    status = classify_deviation(deviation)
    trend = calculate_trend(recent_values)

    return SensorAnalysis(
        equipment_id=reading.equipment_id,
        sensor_type=reading.type,
        current_value=reading.value,
        normal_range=rng,
        deviation=deviation,
        status=status,
        trend=trend,
        anomaly_score=calculate_anomaly_score(deviation),
        recommendations=_sensor_recommendations(reading, status, trend),
    )
