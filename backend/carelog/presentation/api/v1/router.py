"""V1 API router — aggregates all v1 endpoint routers."""

from fastapi import APIRouter

from carelog.presentation.api.v1.endpoints.health import router as health_router
from carelog.presentation.api.v1.endpoints.reference_data import (
    activities_router,
    clients_router,
    outcomes_router,
)
from carelog.presentation.api.v1.endpoints.service_logs import router as service_logs_router
from carelog.presentation.api.v1.endpoints.reports import router as reports_router
from carelog.presentation.api.v1.endpoints.audit import router as audit_router

router = APIRouter(prefix="/v1")
router.include_router(health_router)
router.include_router(clients_router)
router.include_router(activities_router)
router.include_router(outcomes_router)
router.include_router(service_logs_router)
router.include_router(reports_router)
router.include_router(audit_router)
