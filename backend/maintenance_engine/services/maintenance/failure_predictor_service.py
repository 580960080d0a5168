# backend/maintenance_engine/services/maintenance/failure_predictor_service.py

"""
FAILURE PREDICTOR

Aggregates per-equipment sensor history into a PredictiveAnalysis:
  - current status from the last 10 readings (critical / warning counts)
  - failure probability from the last 20 anomaly scores + runtime factor
  - predicted days to failure (base timeframe shrunk by probability, then
    scaled by confidence so that thin data reads as more urgent)
  - risk level derived only from (probability, predicted days)

History and the result cache are owned by the predictor instance. Callers
that need isolation (tests, per-site engines) construct their own.
"""

from collections import deque
from datetime import datetime, timedelta
from threading import Lock
from typing import Callable, Deque, Dict, Iterable, List, Optional, Tuple

from maintenance_engine.core.config import Settings, settings as default_settings
from maintenance_engine.core.logger import logger
from maintenance_engine.schemas.maintenance import (
    HealthStatusEnum,
    PredictiveAnalysis,
    RiskLevelEnum,
    SensorAnalysis,
    SensorReading,
    utcnow,
)
from maintenance_engine.services.maintenance.sensor_analyzer_service import analyze_reading

STATUS_WINDOW = 10
PROBABILITY_WINDOW = 20
MIN_READINGS_FOR_PROBABILITY = 5
CONFIDENCE_FULL_HISTORY = 50
MAX_PROBABILITY = 0.95
MAX_CONFIDENCE = 0.95

INSUFFICIENT_DATA_SCORE = 0.1
INSUFFICIENT_DATA_CONFIDENCE = 0.5

CRITICAL_ANOMALY = 0.8
WARNING_ANOMALY = 0.5

MIN_PREDICTED_DAYS = 1
MAX_PREDICTED_DAYS = 90


def _fmt(value: float) -> str:
    text = repr(float(value))
    return text[:-2] if text.endswith(".0") else text


# -------------------------
# Pure scoring helpers
# -------------------------
def calculate_risk_level(probability: float, predicted_days: float) -> RiskLevelEnum:
    if probability > 0.8 or predicted_days <= 3:
        return RiskLevelEnum.critical
    if probability > 0.6 or predicted_days <= 7:
        return RiskLevelEnum.high
    if probability > 0.4 or predicted_days <= 14:
        return RiskLevelEnum.medium
    return RiskLevelEnum.low


def base_timeframe_days(equipment_type: str) -> int:
    return 30 if (equipment_type or "").lower() == "generator" else 45


def predict_failure_timeframe(probability: float, confidence: float, equipment_type: str) -> float:
    adjusted = base_timeframe_days(equipment_type) * (1 - probability)
    return max(MIN_PREDICTED_DAYS, min(MAX_PREDICTED_DAYS, adjusted * confidence))


def analyze_current_status(history: List[SensorReading]) -> Tuple[HealthStatusEnum, List[str]]:
    if not history:
        return HealthStatusEnum.normal, ["No sensor data available"]

    factors: List[str] = []
    critical_count = 0
    warning_count = 0

    for reading in history[-STATUS_WINDOW:]:
        score = analyze_reading(reading).anomaly_score
        if score > CRITICAL_ANOMALY:
            critical_count += 1
            factors.append(f"Critical {reading.type} reading: {_fmt(reading.value)}{reading.unit}")
        elif score > WARNING_ANOMALY:
            warning_count += 1
            factors.append(f"Warning {reading.type} reading: {_fmt(reading.value)}{reading.unit}")

    if critical_count >= 2:
        return HealthStatusEnum.critical, factors
    if warning_count >= 3 or critical_count >= 1:
        return HealthStatusEnum.warning, factors
    return HealthStatusEnum.normal, ["All readings within normal range"]


def calculate_runtime_factor(history: List[SensorReading], critical_runtime: float) -> float:
    runtime_values = [r.value for r in history if r.type == "runtime"]
    if not runtime_values or critical_runtime <= 0:
        return 0.0
    avg_runtime = sum(runtime_values) / len(runtime_values)
    return max(0.0, min(1.0, avg_runtime / critical_runtime))


def calculate_failure_probability(
    history: List[SensorReading],
    critical_runtime: float
) -> Tuple[float, float]:
    """Returns (probability, confidence)."""
    if len(history) < MIN_READINGS_FOR_PROBABILITY:
        return INSUFFICIENT_DATA_SCORE, INSUFFICIENT_DATA_CONFIDENCE

    window = history[-PROBABILITY_WINDOW:]
    avg_anomaly = sum(analyze_reading(r).anomaly_score for r in window) / len(window)
    runtime_factor = calculate_runtime_factor(history, critical_runtime)

    probability = min(MAX_PROBABILITY, avg_anomaly * 0.7 + runtime_factor * 0.3)
    confidence = min(MAX_CONFIDENCE, len(history) / CONFIDENCE_FULL_HISTORY)
    return probability, confidence


def generate_recommended_action(
    status: HealthStatusEnum,
    factors: List[str],
    predicted_days: float
) -> str:
    days = _fmt(round(predicted_days, 1))
    if status == HealthStatusEnum.critical:
        return f"IMMEDIATE MAINTENANCE REQUIRED: {', '.join(factors)}. Predicted failure in {days} days."
    if status == HealthStatusEnum.warning:
        return (
            f"Schedule maintenance within 7 days. Issues: {', '.join(factors[:2])}. "
            f"Predicted failure in {days} days."
        )
    if predicted_days <= 14:
        return f"Plan maintenance within 2 weeks. Predicted failure in {days} days."
    return f"Monitor equipment. Next scheduled maintenance in {int(predicted_days // 2)} days."


# -------------------------
# Stateful predictor
# -------------------------
class FailurePredictor:

    def __init__(
        self,
        config: Optional[Settings] = None,
        clock: Callable[[], datetime] = utcnow
    ):
        self.config = config or default_settings
        self._clock = clock
        self._history: Dict[str, Deque[SensorReading]] = {}
        self._cache: Dict[str, PredictiveAnalysis] = {}
        self._lock = Lock()

    @property
    def cache_ttl(self) -> timedelta:
        return timedelta(seconds=self.config.ANALYSIS_CACHE_TTL_SECONDS)

    def _record(self, reading: SensorReading) -> List[float]:
        with self._lock:
            bucket = self._history.setdefault(
                reading.equipment_id, deque(maxlen=self.config.SENSOR_HISTORY_LIMIT)
            )
            bucket.append(reading)
            return [r.value for r in bucket]

    def analyze_sensor_data(self, readings: Iterable[SensorReading]) -> List[SensorAnalysis]:
        """Append each reading to its equipment history, then score it."""
        analyses = []
        for reading in readings:
            values = self._record(reading)
            analysis = analyze_reading(reading, values)
            if analysis.status != HealthStatusEnum.normal:
                logger.info(
                    f"{analysis.status.value} {reading.type} reading ({_fmt(reading.value)}{reading.unit})",
                    extra={"equipment_id": reading.equipment_id},
                )
            analyses.append(analysis)
        return analyses

    def get_history(self, equipment_id: str) -> List[SensorReading]:
        with self._lock:
            return list(self._history.get(equipment_id, ()))

    def get_cached(self, equipment_id: str) -> Optional[PredictiveAnalysis]:
        with self._lock:
            cached = self._cache.get(equipment_id)
        if cached and self._clock() - cached.last_analysis < self.cache_ttl:
            return cached
        return None

    def predict_failure(
        self,
        equipment_id: str,
        equipment_type: str,
        equipment_name: Optional[str] = None
    ) -> PredictiveAnalysis:
        cached = self.get_cached(equipment_id)
        if cached is not None:
            logger.debug("Prediction served from cache", extra={"equipment_id": equipment_id})
            return cached

        history = self.get_history(equipment_id)
        critical_runtime = self.config.critical_runtime_for(equipment_type)

        status, factors = analyze_current_status(history)
        probability, confidence = calculate_failure_probability(history, critical_runtime)
        predicted_days = predict_failure_timeframe(probability, confidence, equipment_type)

        now = self._clock()
        analysis = PredictiveAnalysis(
            equipment_id=equipment_id,
            equipment_name=equipment_name or f"Equipment {equipment_id}",
            status=status,
            predicted_failure_in_days=predicted_days,
            confidence=confidence,
            failure_probability=probability,
            recommended_action=generate_recommended_action(status, factors, predicted_days),
            risk_level=calculate_risk_level(probability, predicted_days),
            contributing_factors=factors,
            last_analysis=now,
            next_analysis=now + self.cache_ttl,
        )

        with self._lock:
            self._cache[equipment_id] = analysis

        logger.info(
            f"Prediction computed: status={status.value} risk={analysis.risk_level.value} "
            f"days={predicted_days:.1f} confidence={confidence:.2f}",
            extra={"equipment_id": equipment_id},
        )
        return analysis

    def clear_cache(self, equipment_id: Optional[str] = None) -> None:
        with self._lock:
            if equipment_id:
                self._cache.pop(equipment_id, None)
                self._history.pop(equipment_id, None)
            else:
                self._cache.clear()
                self._history.clear()
