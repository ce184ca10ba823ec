"""
FILE: rebalancer/core/models.py
"""

from decimal import Decimal
from types import MappingProxyType
from typing import Any, Dict, Iterable, List, Mapping, Tuple

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
    field_validator,
    model_validator,
)

from rebalancer.core.errors import (
    DecimalOutOfRangeError,
    DuplicateSecurityError,
    InvalidHoldingError,
    InvalidWeightError,
    MissingPriceError,
    NonPositivePriceError,
    PriceConflictError,
    WeightsDoNotSumTo100Error,
)
from rebalancer.core.valuation import (
    MAX_DECIMAL_DIGITS,
    MAX_DECIMAL_PLACES,
    MAX_UNITS,
    ONE_HUNDRED,
    exact_sum,
    market_value,
    unrounded_context,
    within_decimal_bounds,
)


def reject_binary_float(value: Any, *, field_name: str) -> Any:
    if isinstance(value, float):
        raise ValueError(f"{field_name} must be a Decimal or decimal string, not float")
    return value


def _check_decimal_bounds(value: Decimal, *, what: str) -> None:
    if not within_decimal_bounds(value):
        raise DecimalOutOfRangeError(
            f"{what} {value} exceeds {MAX_DECIMAL_DIGITS} digits "
            f"or {MAX_DECIMAL_PLACES} decimal places"
        )


class Security(BaseModel):
    model_config = ConfigDict(frozen=True)

    identifier: str = Field(
        min_length=1,
        description="Case-sensitive security identifier.",
        examples=["META"],
    )
    price: Decimal = Field(description="Current unit price.", examples=["150.00"])

    @field_validator("price", mode="before")
    @classmethod
    def validate_price_is_decimal(cls, value: Any) -> Any:
        return reject_binary_float(value, field_name="price")

    @model_validator(mode="after")
    def validate_positive_price(self) -> "Security":
        if self.price <= Decimal("0"):
            raise NonPositivePriceError(
                f"security '{self.identifier}' has price {self.price}; price must be > 0"
            )
        _check_decimal_bounds(self.price, what=f"security '{self.identifier}' price")
        return self


class AllocationEntry(BaseModel):
    model_config = ConfigDict(frozen=True)

    weight: Decimal = Field(
        description="Target percentage of total value, 0 to 100.", examples=["40"]
    )
    security: Security

    @field_validator("weight", mode="before")
    @classmethod
    def validate_weight_is_decimal(cls, value: Any) -> Any:
        return reject_binary_float(value, field_name="weight")

    @model_validator(mode="after")
    def validate_weight_bounds(self) -> "AllocationEntry":
        _check_decimal_bounds(self.weight, what=f"security '{self.security.identifier}' weight")
        return self


class TargetAllocation(BaseModel):
    """
    Ordered (weight, security) pairs whose weights are non-negative and sum to
    exactly 100. A value of this type is valid by construction.
    """

    model_config = ConfigDict(frozen=True)

    entries: Tuple[AllocationEntry, ...] = Field(
        description="Target weights in caller order.",
    )

    @model_validator(mode="after")
    def validate_entries(self) -> "TargetAllocation":
        seen: set[str] = set()
        for entry in self.entries:
            identifier = entry.security.identifier
            if identifier in seen:
                raise DuplicateSecurityError(
                    f"security '{identifier}' appears more than once in the target allocation"
                )
            seen.add(identifier)

        for entry in self.entries:
            if entry.weight < Decimal("0"):
                raise InvalidWeightError(
                    f"security '{entry.security.identifier}' has negative weight {entry.weight}"
                )

        total = exact_sum(entry.weight for entry in self.entries)
        if total != ONE_HUNDRED:
            raise WeightsDoNotSumTo100Error(f"weights sum to {total}, expected exactly 100")
        return self

    @classmethod
    def from_pairs(cls, pairs: Iterable[Tuple[Decimal, Security]]) -> "TargetAllocation":
        return cls(
            entries=tuple(
                AllocationEntry(weight=weight, security=security) for weight, security in pairs
            )
        )

    @classmethod
    def single(cls, security: Security) -> "TargetAllocation":
        """Allocation holding 100% in one security."""
        return cls.from_pairs([(ONE_HUNDRED, security)])

    @property
    def securities(self) -> List[Security]:
        return [entry.security for entry in self.entries]

    def weight_of(self, identifier: str) -> Decimal:
        entry = next((e for e in self.entries if e.security.identifier == identifier), None)
        return entry.weight if entry is not None else Decimal("0")


class Holding(BaseModel):
    model_config = ConfigDict(frozen=True)

    security: Security
    units: int = Field(strict=True, description="Whole units currently held.", examples=[10])

    @model_validator(mode="after")
    def validate_units(self) -> "Holding":
        if self.units < 0:
            raise InvalidHoldingError(
                f"security '{self.security.identifier}' has negative holding {self.units}"
            )
        if self.units > MAX_UNITS:
            raise InvalidHoldingError(
                f"security '{self.security.identifier}' holding exceeds {MAX_UNITS} units"
            )
        return self

    @property
    def market_value(self) -> Decimal:
        with unrounded_context():
            return self.security.price * self.units


class Portfolio(BaseModel):
    model_config = ConfigDict(frozen=True)

    holdings: Tuple[Holding, ...] = Field(
        default=(),
        description="Current integer-unit holdings.",
    )
    allocation: TargetAllocation

    @model_validator(mode="after")
    def validate_holdings(self) -> "Portfolio":
        seen: set[str] = set()
        for holding in self.holdings:
            identifier = holding.security.identifier
            if identifier in seen:
                raise DuplicateSecurityError(
                    f"security '{identifier}' appears more than once in the holdings"
                )
            seen.add(identifier)

        target_prices = {s.identifier: s.price for s in self.allocation.securities}
        for holding in self.holdings:
            security = holding.security
            target_price = target_prices.get(security.identifier)
            if target_price is not None and target_price != security.price:
                raise PriceConflictError(
                    f"security '{security.identifier}' is priced {security.price} in holdings "
                    f"and {target_price} in the target allocation"
                )
        return self

    @classmethod
    def from_market_data(
        cls,
        prices: Iterable[Tuple[str, Decimal]],
        units: Iterable[Tuple[str, int]],
        weights: Iterable[Tuple[str, Decimal]],
    ) -> "Portfolio":
        """
        Builds a portfolio from the three boundary lists:
        (identifier, price), (identifier, held units) and (identifier, target weight).

        Raises:
            DuplicateSecurityError: an identifier repeats within one list.
            MissingPriceError: a held or targeted identifier has no price row.
        """
        securities: Dict[str, Security] = {}
        for identifier, price in prices:
            if identifier in securities:
                raise DuplicateSecurityError(
                    f"security '{identifier}' appears more than once in the price list"
                )
            securities[identifier] = Security(identifier=identifier, price=price)

        def lookup(identifier: str, role: str) -> Security:
            security = securities.get(identifier)
            if security is None:
                raise MissingPriceError(f"{role} security '{identifier}' has no price")
            return security

        holdings = tuple(
            Holding(security=lookup(identifier, "held"), units=count)
            for identifier, count in units
        )
        allocation = TargetAllocation.from_pairs(
            (weight, lookup(identifier, "target")) for identifier, weight in weights
        )
        return cls(holdings=holdings, allocation=allocation)

    def units_by_id(self) -> Dict[str, int]:
        return {h.security.identifier: h.units for h in self.holdings}

    def prices_by_id(self) -> Dict[str, Decimal]:
        prices = {s.identifier: s.price for s in self.allocation.securities}
        prices.update({h.security.identifier: h.security.price for h in self.holdings})
        return prices

    def total_value(self) -> Decimal:
        return market_value(self.units_by_id(), self.prices_by_id())

    def rebalance(self) -> "RebalanceSuggestion":
        from rebalancer.core.rebalance import conservative_rebalance

        return conservative_rebalance(self)


class RebalanceSuggestion(BaseModel):
    model_config = ConfigDict(frozen=True)

    to_sell: Mapping[str, int] = Field(
        default_factory=dict,
        description="Units to sell per security; always the full current holding.",
    )
    to_buy: Mapping[str, int] = Field(
        default_factory=dict,
        description="Whole units to buy per target security; zero-unit buys are omitted.",
    )
    surplus: Decimal = Field(description="Sale proceeds left unallocated after buying.")
    total_value: Decimal = Field(description="Proceeds of the full liquidation.")
    spent: Decimal = Field(description="Cost of all suggested buys.")

    @field_validator("to_sell", "to_buy", mode="after")
    @classmethod
    def freeze_unit_maps(cls, value: Mapping[str, int]) -> Mapping[str, int]:
        return MappingProxyType(dict(value))

    @field_serializer("to_sell", "to_buy")
    def serialize_unit_maps(self, value: Mapping[str, int]) -> Dict[str, int]:
        return dict(value)

    @model_validator(mode="after")
    def validate_conservation(self) -> "RebalanceSuggestion":
        for side, units_by_id in (("to_sell", self.to_sell), ("to_buy", self.to_buy)):
            if any(units < 0 for units in units_by_id.values()):
                raise ValueError(f"{side} unit counts must be non-negative")
        if self.surplus < Decimal("0"):
            raise ValueError("surplus must be non-negative")
        if exact_sum([self.spent, self.surplus]) != self.total_value:
            raise ValueError("spent + surplus must equal total_value")
        return self

    def render(self) -> str:
        from rebalancer.core.formatting import render_suggestion

        return render_suggestion(self)
