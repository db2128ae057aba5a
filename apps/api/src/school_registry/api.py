from fastapi import APIRouter

from school_registry.modules.auth import router as auth_router
from school_registry.modules.catalog import router as catalog_router
from school_registry.modules.school_units import router as school_units_router

api_router = APIRouter()

api_router.include_router(auth_router, prefix="/auth", tags=["Authentication"])

api_router.include_router(school_units_router)

api_router.include_router(catalog_router)
