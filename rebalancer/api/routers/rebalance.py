from typing import Annotated, Optional

from fastapi import APIRouter, Header, status

from rebalancer.api.request_models import RebalanceRequest, RebalanceResponse
from rebalancer.api.services import rebalance_service as service

router = APIRouter()

REBALANCE_EXAMPLE = {
    "summary": "META/AAPL 40/60 rebuild",
    "value": {
        "to_sell": {"META": 10, "AAPL": 5},
        "to_buy": {"META": 6, "AAPL": 8},
        "surplus": "60",
        "total_value": "2400",
        "spent": "2340",
        "correlation_id": "corr-1234-abcd",
    },
}
REBALANCE_422_EXAMPLE = {
    "summary": "Weights do not sum to 100",
    "value": {
        "detail": {
            "code": "WEIGHTS_DO_NOT_SUM_TO_100",
            "message": "weights sum to 99.99, expected exactly 100",
        }
    },
}


@router.post(
    "/rebalance",
    response_model=RebalanceResponse,
    status_code=status.HTTP_200_OK,
    tags=["Rebalance"],
    summary="Compute a Conservative Rebalance",
    description=(
        "Sells every current holding and rebuys the target allocation in whole units, "
        "funded only by the sale proceeds.\n\n"
        "Optional header: `X-Correlation-Id`."
    ),
    responses={
        200: {
            "description": "Sell/buy suggestion with the unallocated surplus.",
            "content": {"application/json": {"examples": {"rebuild": REBALANCE_EXAMPLE}}},
        },
        422: {
            "description": "Invalid payload, allocation, price or holding.",
            "content": {"application/json": {"examples": {"weights": REBALANCE_422_EXAMPLE}}},
        },
    },
)
def rebalance(
    request: RebalanceRequest,
    correlation_id: Annotated[
        Optional[str],
        Header(
            alias="X-Correlation-Id",
            description="Optional correlation identifier propagated to logs.",
            examples=["corr-1234-abcd"],
        ),
    ] = None,
) -> RebalanceResponse:
    return service.rebalance(request=request, correlation_id=correlation_id)
