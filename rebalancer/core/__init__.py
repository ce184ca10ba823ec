"""Conservative rebalance core."""

from rebalancer.core.errors import (
    DecimalOutOfRangeError,
    DuplicateSecurityError,
    InvalidHoldingError,
    InvalidWeightError,
    MissingPriceError,
    NonPositivePriceError,
    PriceConflictError,
    RebalanceValidationError,
    WeightsDoNotSumTo100Error,
)
from rebalancer.core.models import (
    AllocationEntry,
    Holding,
    Portfolio,
    RebalanceSuggestion,
    Security,
    TargetAllocation,
)
from rebalancer.core.rebalance import conservative_rebalance

__all__ = [
    "AllocationEntry",
    "Holding",
    "Portfolio",
    "RebalanceSuggestion",
    "Security",
    "TargetAllocation",
    "conservative_rebalance",
    "RebalanceValidationError",
    "InvalidWeightError",
    "WeightsDoNotSumTo100Error",
    "DuplicateSecurityError",
    "NonPositivePriceError",
    "InvalidHoldingError",
    "MissingPriceError",
    "PriceConflictError",
    "DecimalOutOfRangeError",
]
