from fastapi import APIRouter

from app.api.v1 import health, intake

api_router = APIRouter()

api_router.include_router(health.router, prefix="/v1", tags=["health"])
api_router.include_router(intake.router, prefix="/v1/intake", tags=["intake"])
