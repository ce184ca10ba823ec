from fastapi import APIRouter

router = APIRouter(tags=["Health"])


@router.get("/health", include_in_schema=False)
@router.get("/api/v1/health", summary="Service health")
async def health() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/health/live", include_in_schema=False)
@router.get("/api/v1/health/live", summary="Liveness probe")
async def health_live() -> dict[str, str]:
    return {"status": "live"}


@router.get("/health/ready", include_in_schema=False)
@router.get("/api/v1/health/ready", summary="Readiness probe")
async def health_ready() -> dict[str, str]:
    return {"status": "ready"}
