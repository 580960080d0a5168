from typing import Dict, List, Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    SERVICE_NAME: str = "pdm-engine"

    # Logging
    LOG_DIR: str = "logs"
    LOG_LEVEL: str = "INFO"
    LOG_TO_FILE: bool = False

    # Failure predictor
    SENSOR_HISTORY_LIMIT: int = 100
    ANALYSIS_CACHE_TTL_SECONDS: int = 3600
    CRITICAL_RUNTIME_HOURS: Dict[str, float] = {
        "generator": 3000,
        "ac_unit": 2500,
        "pump": 2800,
        "compressor": 3200,
    }
    DEFAULT_CRITICAL_RUNTIME_HOURS: float = 3000

    # Scheduler
    MAX_PREDICTIONS_PER_PASS: Optional[int] = None

    # CORS
    CORS_ORIGINS: List[str] = ["*"]

    model_config = SettingsConfigDict(env_file=".env", env_prefix="PDM_", extra="ignore")

    def critical_runtime_for(self, equipment_type: str) -> float:
        return self.CRITICAL_RUNTIME_HOURS.get(
            (equipment_type or "").lower(), self.DEFAULT_CRITICAL_RUNTIME_HOURS
        )


settings = Settings()
