import logging
from typing import Optional

from pydantic import ValidationError

from rebalancer.api.config import max_securities
from rebalancer.api.http_errors import RequestTooLargeError, raise_rebalance_http_exception
from rebalancer.api.observability import correlation_id_var
from rebalancer.api.request_models import RebalanceRequest, RebalanceResponse
from rebalancer.core.errors import RebalanceValidationError
from rebalancer.core.models import Portfolio, RebalanceSuggestion

logger = logging.getLogger(__name__)


def _check_request_size(request: RebalanceRequest) -> None:
    limit = max_securities()
    for name, rows in (
        ("prices", request.prices),
        ("holdings", request.holdings),
        ("targets", request.targets),
    ):
        if len(rows) > limit:
            raise RequestTooLargeError(f"{name} has {len(rows)} rows; limit is {limit}")


def build_portfolio(request: RebalanceRequest) -> Portfolio:
    return Portfolio.from_market_data(
        prices=[(row.identifier, row.price) for row in request.prices],
        units=[(row.identifier, row.units) for row in request.holdings],
        weights=[(row.identifier, row.weight) for row in request.targets],
    )


def to_response(
    suggestion: RebalanceSuggestion, correlation_id: Optional[str]
) -> RebalanceResponse:
    return RebalanceResponse(
        to_sell=dict(suggestion.to_sell),
        to_buy=dict(suggestion.to_buy),
        surplus=suggestion.surplus,
        total_value=suggestion.total_value,
        spent=suggestion.spent,
        correlation_id=correlation_id,
    )


def rebalance(request: RebalanceRequest, correlation_id: Optional[str]) -> RebalanceResponse:
    try:
        _check_request_size(request)
        portfolio = build_portfolio(request)
    except (RebalanceValidationError, RequestTooLargeError, ValidationError) as exc:
        logger.warning(
            "rebalance.rejected",
            extra={"extra_fields": {"reason": str(exc).splitlines()[0]}},
        )
        raise_rebalance_http_exception(exc)

    suggestion = portfolio.rebalance()
    if logger.isEnabledFor(logging.DEBUG):
        logger.debug("Rebalance suggestion:\n%s", suggestion.render())
    return to_response(suggestion, correlation_id or correlation_id_var.get() or None)
