"""V1 API router aggregation."""

from fastapi import APIRouter

from app.api.v1.auth import router as auth_router
from app.api.v1.customers import router as customers_router
from app.api.v1.inventory import router as inventory_router
from app.api.v1.job_templates import router as job_templates_router
from app.api.v1.jobs import router as jobs_router
from app.api.v1.parts import router as parts_router
from app.api.v1.tenants import router as tenants_router
from app.api.v1.trust_artifacts import router as trust_artifacts_router
from app.api.v1.vehicles import router as vehicles_router

v1_router = APIRouter(prefix="/v1")
v1_router.include_router(auth_router)
v1_router.include_router(tenants_router)
v1_router.include_router(customers_router)
v1_router.include_router(vehicles_router)
v1_router.include_router(parts_router)
v1_router.include_router(inventory_router)
v1_router.include_router(jobs_router)
v1_router.include_router(job_templates_router)
v1_router.include_router(trust_artifacts_router)
