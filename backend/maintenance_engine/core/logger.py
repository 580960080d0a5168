import logging
import json
import os
from logging.handlers import RotatingFileHandler
from datetime import datetime, timezone

from maintenance_engine.core.config import settings

CONTEXT_FIELDS = (
    "request_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
    "equipment_id",
    "task_id",
    "technician_id",
)


def json_formatter(record):
    log = {
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "level": record.levelname,
        "service": settings.SERVICE_NAME,
        "message": record.getMessage(),
    }

    for field in CONTEXT_FIELDS:
        if hasattr(record, field):
            log[field] = getattr(record, field)

    if record.exc_info:
        log["exc_info"] = logging.Formatter().formatException(record.exc_info)

    return json.dumps(log, default=str)


class JSONFormatter(logging.Formatter):
    def format(self, record):
        return json_formatter(record)


logger = logging.getLogger("pdm")
logger.setLevel(settings.LOG_LEVEL)

json_f = JSONFormatter()

if not logger.handlers:
    console_handler = logging.StreamHandler()
    console_handler.setFormatter(json_f)
    logger.addHandler(console_handler)

    if settings.LOG_TO_FILE:
        os.makedirs(settings.LOG_DIR, exist_ok=True)
        file_handler = RotatingFileHandler(
            os.path.join(settings.LOG_DIR, "pdm.json.log"),
            maxBytes=5 * 1024 * 1024,
            backupCount=5
        )
        file_handler.setFormatter(json_f)
        logger.addHandler(file_handler)
