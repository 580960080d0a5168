# backend/maintenance_engine/main.py

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from maintenance_engine.core.config import settings
from maintenance_engine.core.logger import logger
from maintenance_engine.core.middleware import ExceptionLoggingMiddleware, RequestLoggingMiddleware
from maintenance_engine.api.maintenance import predictive, scheduling

app = FastAPI(title="Predictive Maintenance & Scheduling Engine", version="1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ---------------------------------------------------
# Logging middlewares (exception logger wraps request logger)
# ---------------------------------------------------
app.add_middleware(RequestLoggingMiddleware)
app.add_middleware(ExceptionLoggingMiddleware)

app.include_router(predictive.router, tags=["maintenance-predictive"])
app.include_router(scheduling.router, tags=["maintenance-scheduling"])


@app.get("/health")
def health_check():
    return {"status": "ok"}


logger.info("Maintenance engine API initialised")
