from decimal import ROUND_HALF_EVEN, Decimal
from typing import List, Mapping

from rebalancer.core.models import RebalanceSuggestion
from rebalancer.core.valuation import unrounded_context

_MONEY_QUANTUM = Decimal("0.01")


def format_money(amount: Decimal) -> str:
    with unrounded_context():
        return f"{amount.quantize(_MONEY_QUANTUM, rounding=ROUND_HALF_EVEN):,}"


def _order_lines(action: str, units_by_id: Mapping[str, int]) -> List[str]:
    if not units_by_id:
        return [f"{action:<5} (none)"]
    width = max(len(identifier) for identifier in units_by_id)
    return [
        f"{action:<5} {identifier:<{width}}  {units_by_id[identifier]}"
        for identifier in sorted(units_by_id)
    ]


def render_suggestion(suggestion: RebalanceSuggestion) -> str:
    lines = _order_lines("SELL", suggestion.to_sell)
    lines.extend(_order_lines("BUY", suggestion.to_buy))
    lines.append(f"Total value: {format_money(suggestion.total_value)}")
    lines.append(f"Spent:       {format_money(suggestion.spent)}")
    lines.append(f"Surplus:     {format_money(suggestion.surplus)}")
    return "\n".join(lines)
