from fastapi import APIRouter

from app.config import get_settings

health_router = APIRouter(tags=["Health"])


@health_router.get("/health")
def health() -> dict:
    settings = get_settings()
    return {"status": "ok", "app": settings.app_name, "environment": settings.environment}
