from typing import NoReturn

from fastapi import HTTPException, status
from pydantic import ValidationError

from rebalancer.core.errors import RebalanceValidationError

HTTP_422_UNPROCESSABLE = getattr(
    status,
    "HTTP_422_UNPROCESSABLE_CONTENT",
    status.HTTP_422_UNPROCESSABLE_ENTITY,
)


class RequestTooLargeError(Exception):
    pass


def to_invalid_input_message(exc: ValidationError) -> str:
    first_error = exc.errors()[0]
    return str(first_error.get("msg", "validation failed"))


def raise_rebalance_http_exception(exc: Exception) -> NoReturn:
    if isinstance(exc, RebalanceValidationError):
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail={"code": exc.code, "message": exc.detail},
        ) from exc
    if isinstance(exc, RequestTooLargeError):
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail={"code": "REQUEST_TOO_LARGE", "message": str(exc)},
        ) from exc
    if isinstance(exc, ValidationError):
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail={"code": "INVALID_INPUT", "message": to_invalid_input_message(exc)},
        ) from exc
    raise exc
