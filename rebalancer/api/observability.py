"""
FILE: rebalancer/api/observability.py

JSON logs tagged with the correlation and request ids of the HTTP call being
served, plus Prometheus metrics at /metrics.
"""

import json
import logging
import time
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import UTC, datetime
from typing import Awaitable, Callable, Iterator, Tuple
from uuid import uuid4

from fastapi import FastAPI, Request, Response
from prometheus_fastapi_instrumentator import Instrumentator

from rebalancer.api.config import environment, log_level, metrics_enabled, service_name

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="")
request_id_var: ContextVar[str] = ContextVar("request_id", default="")

CORRELATION_HEADER = "X-Correlation-Id"
REQUEST_HEADER = "X-Request-Id"

access_logger = logging.getLogger("rebalancer.access")


class JsonFormatter(logging.Formatter):
    """One JSON object per record; empty context ids are omitted."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "service": service_name(),
            "environment": environment(),
            "logger": record.name,
            "message": record.getMessage(),
            "correlation_id": correlation_id_var.get() or None,
            "request_id": request_id_var.get() or None,
        }
        extra_fields = getattr(record, "extra_fields", None)
        if isinstance(extra_fields, dict):
            payload.update(extra_fields)
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps({key: value for key, value in payload.items() if value is not None})


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JsonFormatter())
    root_logger = logging.getLogger()
    root_logger.handlers[:] = [handler]
    root_logger.setLevel(log_level())


def _request_ids(request: Request) -> Tuple[str, str]:
    correlation_id = request.headers.get(CORRELATION_HEADER) or f"corr_{uuid4().hex[:12]}"
    request_id = request.headers.get(REQUEST_HEADER) or f"req_{uuid4().hex[:12]}"
    return correlation_id, request_id


@contextmanager
def bound_request_ids(correlation_id: str, request_id: str) -> Iterator[None]:
    correlation_token = correlation_id_var.set(correlation_id)
    request_token = request_id_var.set(request_id)
    try:
        yield
    finally:
        request_id_var.reset(request_token)
        correlation_id_var.reset(correlation_token)


def setup_observability(app: FastAPI) -> None:
    configure_logging()

    if metrics_enabled():
        Instrumentator().instrument(app).expose(app, include_in_schema=False)

    @app.middleware("http")
    async def _bind_request_ids(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ) -> Response:
        correlation_id, request_id = _request_ids(request)
        started = time.perf_counter()
        status_code = 500
        with bound_request_ids(correlation_id, request_id):
            try:
                response = await call_next(request)
                status_code = response.status_code
            finally:
                access_logger.info(
                    "request.completed",
                    extra={
                        "extra_fields": {
                            "http_method": request.method,
                            "endpoint": request.url.path,
                            "status_code": status_code,
                            "latency_ms": round((time.perf_counter() - started) * 1000, 2),
                        }
                    },
                )

        response.headers[CORRELATION_HEADER] = correlation_id
        response.headers[REQUEST_HEADER] = request_id
        return response
