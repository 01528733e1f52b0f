"""Engine error taxonomy.

Every error is a precondition failure raised before any state is mutated.
"""


class EngineError(Exception):
    """Base class for accounting engine errors."""


class InvalidAmountError(EngineError):
    """Zero or negative amount, or an out-of-range rate."""


class PositionAlreadyOpenError(EngineError):
    """The identity already holds collateral."""


class PositionNotOpenError(EngineError):
    """The identity holds no collateral."""


class InsufficientCollateralError(EngineError):
    """Collateral does not cover the borrow LTV requirement."""


class RepayExceedsDebtError(EngineError):
    """Repayment is larger than the accrued debt."""


class NotUndercollateralizedError(EngineError):
    """Position is still above the liquidation threshold."""


class FixedPointOverflowError(EngineError, OverflowError):
    """Fixed-point intermediate left the representable range."""


class DivideByZeroError(EngineError, ZeroDivisionError):
    """Fixed-point division by zero (e.g. a zero oracle price)."""


class UnauthorizedError(EngineError):
    """Caller is not allowed to perform an admin operation."""
