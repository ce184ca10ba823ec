"""
FILE: rebalancer/core/errors.py

Construction-time validation failures. They derive from Exception rather than
ValueError so pydantic re-raises them unchanged from model validators.
"""


class RebalanceValidationError(Exception):
    code = "REBALANCE_VALIDATION_ERROR"

    def __init__(self, detail: str):
        self.detail = detail
        super().__init__(f"{self.code}: {detail}")


class InvalidWeightError(RebalanceValidationError):
    code = "INVALID_WEIGHT"


class WeightsDoNotSumTo100Error(RebalanceValidationError):
    code = "WEIGHTS_DO_NOT_SUM_TO_100"


class DuplicateSecurityError(RebalanceValidationError):
    code = "DUPLICATE_SECURITY"


class NonPositivePriceError(RebalanceValidationError):
    code = "NON_POSITIVE_PRICE"


class InvalidHoldingError(RebalanceValidationError):
    code = "INVALID_HOLDING"


class MissingPriceError(RebalanceValidationError):
    code = "MISSING_PRICE"


class PriceConflictError(RebalanceValidationError):
    code = "PRICE_CONFLICT"


class DecimalOutOfRangeError(RebalanceValidationError):
    code = "DECIMAL_OUT_OF_RANGE"
