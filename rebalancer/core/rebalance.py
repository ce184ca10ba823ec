"""
FILE: rebalancer/core/rebalance.py

Conservative rebalance: liquidate every holding, then rebuild the target
allocation in whole units funded only by the sale proceeds.
"""

import logging
from decimal import Decimal
from typing import Dict

from rebalancer.core.models import Portfolio, RebalanceSuggestion
from rebalancer.core.valuation import PERCENT, market_value, unrounded_context, whole_units

logger = logging.getLogger(__name__)


def _liquidation(portfolio: Portfolio) -> Dict[str, int]:
    return {h.security.identifier: h.units for h in portfolio.holdings if h.units > 0}


def _rebuild(portfolio: Portfolio, total_value: Decimal) -> Dict[str, int]:
    to_buy: Dict[str, int] = {}
    with unrounded_context():
        for entry in portfolio.allocation.entries:
            security = entry.security
            target_value = total_value * entry.weight * PERCENT
            units = whole_units(target_value, security.price)
            logger.debug(
                "Buy sizing %s: weight=%s target_value=%s price=%s units=%d",
                security.identifier,
                entry.weight,
                target_value,
                security.price,
                units,
            )
            if units > 0:
                to_buy[security.identifier] = units
    return to_buy


def conservative_rebalance(portfolio: Portfolio) -> RebalanceSuggestion:
    """
    Computes the sell/buy suggestion for a validated portfolio.

    Every current holding is sold in full. Each target security is then bought
    in floor(total_value * weight / 100 / price) whole units, so no purchase
    overshoots its target value and the surplus is never negative.
    Zero-unit buys are left out of to_buy. The portfolio is not modified.
    """
    to_sell = _liquidation(portfolio)
    prices = portfolio.prices_by_id()
    total_value = market_value(to_sell, prices)

    to_buy = _rebuild(portfolio, total_value)
    spent = market_value(to_buy, prices)
    with unrounded_context():
        surplus = total_value - spent

    logger.info(
        "rebalance.computed",
        extra={
            "extra_fields": {
                "sell_count": len(to_sell),
                "buy_count": len(to_buy),
                "total_value": str(total_value),
                "spent": str(spent),
                "surplus": str(surplus),
            }
        },
    )
    return RebalanceSuggestion(
        to_sell=to_sell,
        to_buy=to_buy,
        surplus=surplus,
        total_value=total_value,
        spent=spent,
    )
