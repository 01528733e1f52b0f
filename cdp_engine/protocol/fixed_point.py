"""Wad/ray fixed-point arithmetic on plain Python ints.

Every quantity is a non-negative integer bounded by ``UINT256_MAX``. All
divisions truncate toward zero, so each operation rounds in favour of the
lender by at most one unit. Over many accruals this truncation is one source
of the slow drift between the ledger's debt and an exact real-valued
compounding of the same rate.
"""

from __future__ import annotations

from decimal import Decimal

from cdp_engine.data.constants import RAY, UINT256_MAX, WAD, WAD_RAY_RATIO
from cdp_engine.protocol.errors import DivideByZeroError, FixedPointOverflowError


def _checked(value: int) -> int:
    if value < 0 or value > UINT256_MAX:
        raise FixedPointOverflowError(f"fixed-point value out of range: {value}")
    return value


def add(a: int, b: int) -> int:
    """Checked addition."""
    return _checked(a + b)


def sub(a: int, b: int) -> int:
    """Checked subtraction; a negative result is an overflow."""
    return _checked(a - b)


def mul(a: int, b: int) -> int:
    """Checked multiplication."""
    return _checked(a * b)


def wmul(a: int, b: int) -> int:
    """Multiply two wads: ``a * b / 1e18``."""
    return mul(a, b) // WAD


def wdiv(a: int, b: int) -> int:
    """Divide two wads: ``a * 1e18 / b``."""
    if b == 0:
        raise DivideByZeroError("wdiv by zero")
    return mul(a, WAD) // b


def rmul(a: int, b: int) -> int:
    """Multiply by a ray: ``a * b / 1e27``.

    The result keeps the scale of whichever operand is not the ray, so
    ``rmul(wad, ray)`` is a wad.
    """
    return mul(a, b) // RAY


def rdiv(a: int, b: int) -> int:
    """Divide two rays: ``a * 1e27 / b``."""
    if b == 0:
        raise DivideByZeroError("rdiv by zero")
    return mul(a, RAY) // b


def rpow(x: int, n: int) -> int:
    """Raise a ray to an integer power by repeated squaring.

    Args:
        x: Base, ray-scaled (e.g. ``RAY`` is 1.0).
        n: Non-negative integer exponent.

    Returns:
        ``x ** n`` as a ray. ``rpow(x, 0) == RAY``.
    """
    if n < 0:
        raise ValueError(f"exponent must be non-negative, got {n}")
    _checked(x)

    z = x if n % 2 else RAY
    n //= 2
    while n:
        x = rmul(x, x)
        if n % 2:
            z = rmul(z, x)
        n //= 2
    return z


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------

def to_wad(value: float | int | str | Decimal) -> int:
    """Convert a decimal quantity (e.g. ``1.5``) to a wad, truncating."""
    return _checked(int(Decimal(str(value)) * WAD))


def to_ray(value: float | int | str | Decimal) -> int:
    """Convert a decimal quantity to a ray, truncating."""
    return _checked(int(Decimal(str(value)) * RAY))


def from_wad(value: int) -> float:
    """Convert a wad to a float for reporting."""
    return value / WAD


def from_ray(value: int) -> float:
    """Convert a ray to a float for reporting."""
    return value / RAY


def wad_to_ray(value: int) -> int:
    return mul(value, WAD_RAY_RATIO)


def ray_to_wad(value: int) -> int:
    return value // WAD_RAY_RATIO
