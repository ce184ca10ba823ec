from decimal import Decimal
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

from rebalancer.core.models import reject_binary_float


class PriceRow(BaseModel):
    identifier: str = Field(min_length=1, description="Security identifier.", examples=["META"])
    price: Decimal = Field(
        description="Current unit price, as a decimal string or integer.", examples=["150.00"]
    )

    @field_validator("price", mode="before")
    @classmethod
    def validate_price_is_not_float(cls, value: Any) -> Any:
        return reject_binary_float(value, field_name="price")


class HoldingRow(BaseModel):
    identifier: str = Field(min_length=1, description="Security identifier.", examples=["META"])
    units: int = Field(description="Whole units currently held.", examples=[10])


class TargetRow(BaseModel):
    identifier: str = Field(min_length=1, description="Security identifier.", examples=["META"])
    weight: Decimal = Field(
        description="Target percentage of total value, 0 to 100, as a decimal string or integer.",
        examples=["40"],
    )

    @field_validator("weight", mode="before")
    @classmethod
    def validate_weight_is_not_float(cls, value: Any) -> Any:
        return reject_binary_float(value, field_name="weight")


class RebalanceRequest(BaseModel):
    model_config = {
        "json_schema_extra": {
            "example": {
                "prices": [
                    {"identifier": "META", "price": "150"},
                    {"identifier": "AAPL", "price": "180"},
                ],
                "holdings": [
                    {"identifier": "META", "units": 10},
                    {"identifier": "AAPL", "units": 5},
                ],
                "targets": [
                    {"identifier": "META", "weight": "40"},
                    {"identifier": "AAPL", "weight": "60"},
                ],
            }
        }
    }

    prices: List[PriceRow] = Field(
        description="Current price of every held or targeted security."
    )
    holdings: List[HoldingRow] = Field(
        default_factory=list,
        description="Current integer-unit holdings.",
    )
    targets: List[TargetRow] = Field(description="Target weights; must sum to exactly 100.")


class RebalanceResponse(BaseModel):
    to_sell: Dict[str, int] = Field(description="Units to sell per security (full liquidation).")
    to_buy: Dict[str, int] = Field(description="Whole units to buy per security.")
    surplus: Decimal = Field(description="Proceeds left unallocated after buying.")
    total_value: Decimal = Field(description="Proceeds of the full liquidation.")
    spent: Decimal = Field(description="Cost of all suggested buys.")
    correlation_id: Optional[str] = Field(
        default=None, description="Correlation identifier echoed from the request."
    )
