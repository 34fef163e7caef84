"""Main API router aggregating all v1 endpoints."""

from fastapi import APIRouter

from adminkit.api.v1 import imports, leads, panels

api_router = APIRouter()

# Include sub-routers
api_router.include_router(imports.router, prefix="/imports", tags=["Imports"])
api_router.include_router(leads.router, prefix="/leads", tags=["Leads"])
api_router.include_router(panels.router, prefix="/panels", tags=["Panels"])
