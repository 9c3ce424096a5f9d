from fastapi import APIRouter, Depends, HTTPException, status
from fastapi.responses import Response

from bos.business.companies.api import router as companies_router
from bos.business.quotes.api import router as quotes_router
from bos.core.auth import AuthUser, get_current_user, missing_permissions
from bos.core.config import get_settings
from bos.metrics import generate_metrics_payload, metrics_content_type
from bos.platform.options.api import router as options_router

router = APIRouter()
router.include_router(options_router)
router.include_router(companies_router)
router.include_router(quotes_router)


@router.get("/health", tags=["system"])
def health() -> dict[str, str]:
    settings = get_settings()
    return {
        "status": "ok",
        "service": settings.app_name,
        "environment": settings.app_env,
    }


@router.get("/me", tags=["auth"])
async def me(user: AuthUser = Depends(get_current_user)) -> dict[str, str | list[str]]:
    return {
        "sub": user.sub,
        "roles": user.roles,
    }


@router.get("/metrics", tags=["system"])
def metrics(user: AuthUser = Depends(get_current_user)) -> Response:
    settings = get_settings()
    if not settings.metrics_enabled:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="not found")
    if missing_permissions(user, ["system.metrics.read"]):
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Missing permission: system.metrics.read")
    return Response(content=generate_metrics_payload(), media_type=metrics_content_type())
