"""
FILE: rebalancer/api/main.py
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from rebalancer.api.observability import setup_observability
from rebalancer.api.routers.health import router as health_router
from rebalancer.api.routers.rebalance import router as rebalance_router

app = FastAPI(
    title="Conservative Rebalance API",
    version="0.1.0",
    description=(
        "Stateless rebalance computation.\n\n"
        "Liquidates current holdings and rebuilds the target allocation in whole units; "
        "the unspent remainder is reported as `surplus`."
    ),
    openapi_tags=[
        {
            "name": "Rebalance",
            "description": "Conservative total-rebuild rebalance computation.",
        },
        {
            "name": "Health",
            "description": "Liveness and readiness probes.",
        },
    ],
)

setup_observability(app)
logger = logging.getLogger(__name__)

app.include_router(health_router)
app.include_router(rebalance_router)


@app.exception_handler(Exception)
async def unhandled_exception_to_problem_details(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception while serving request", exc_info=exc)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        media_type="application/problem+json",
        content={
            "type": "about:blank",
            "title": "Internal Server Error",
            "status": 500,
            "detail": "An unexpected error occurred.",
            "instance": str(request.url.path),
        },
    )
