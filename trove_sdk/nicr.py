"""
ZUSD Trove SDK - Ordering Keys

Troves are kept in SortedTroves ordered by their nominal collateral ratio
(NICR). Hints are only useful if the client computes the key exactly the
way the contracts do, so everything here is integer arithmetic:

    NICR = coll * 1e20 / debt          (floor division)
    ICR  = coll * price / debt         (price scaled by 1e18)

A scale mismatch does not raise on chain; the trove simply gets inserted
at the wrong place and the transaction reverts or costs extra gas.
"""

from typing import Any, Optional

from .errors import InvalidAmount, InvalidKey
from .hint_types import MAX_UINT256

# ═══════════════════════════════════════════════════════════════════════════════
# PRECISION
# ═══════════════════════════════════════════════════════════════════════════════

NICR_PRECISION = 10**20
DECIMAL_PRECISION = 10**18


def _uint_problem(value: Any) -> Optional[str]:
    # bool is an int subclass; a True collateral is always a caller bug
    if isinstance(value, bool) or not isinstance(value, int):
        return "must be an integer"
    if value < 0:
        return "must not be negative"
    if value > MAX_UINT256:
        return "overflows uint256"
    return None


def require_uint(name: str, value: Any) -> int:
    """
    Check that a named amount fits a uint256 and return it.

    Raises:
        InvalidAmount: for non-integers, bools, negatives and values >= 2**256
    """
    problem = _uint_problem(value)
    if problem:
        raise InvalidAmount(name, value, problem)
    return value


def validate_key(key: Any) -> int:
    """
    Check that key fits a uint256 and return it.

    Raises:
        InvalidKey: for non-integers, bools, negatives and values >= 2**256
    """
    problem = _uint_problem(key)
    if problem:
        raise InvalidKey(key, problem)
    return key


# ═══════════════════════════════════════════════════════════════════════════════
# RATIOS
# ═══════════════════════════════════════════════════════════════════════════════

def compute_nicr(coll: int, debt: int) -> int:
    """
    Nominal collateral ratio, the SortedTroves ordering key.

    Args:
        coll: Collateral amount in wei (1e18 units)
        debt: Total debt in wei, including fee and gas compensation

    Returns:
        coll * 1e20 // debt, or 2**256 - 1 when debt is zero

    Examples:
        >>> compute_nicr(5 * 10**18, 2000 * 10**18)
        250000000000000000
        >>> compute_nicr(10**18, 0) == 2**256 - 1
        True
    """
    coll = require_uint("coll", coll)
    debt = require_uint("debt", debt)
    if debt == 0:
        return MAX_UINT256
    return coll * NICR_PRECISION // debt


def compute_icr(coll: int, debt: int, price: int) -> int:
    """
    Individual collateral ratio at a given price (1e18 = 100%).

    Examples:
        >>> compute_icr(5 * 10**18, 2000 * 10**18, 2000 * 10**18)
        5000000000000000000
    """
    coll = require_uint("coll", coll)
    debt = require_uint("debt", debt)
    price = require_uint("price", price)
    if debt == 0:
        return MAX_UINT256
    return coll * price // debt


def expected_debt(amount: int, borrowing_fee: int, gas_compensation: int) -> int:
    """
    Debt a new trove will carry: requested ZUSD + borrowing fee + gas reserve.
    """
    total = (require_uint("amount", amount)
             + require_uint("borrowing_fee", borrowing_fee)
             + require_uint("gas_compensation", gas_compensation))
    return require_uint("debt", total)


def format_ratio(value: int, precision: int = NICR_PRECISION) -> str:
    """
    Render a scaled ratio for logs without going through float.

    Examples:
        >>> format_ratio(250000000000000000)
        '0.00250000000000000000'
        >>> format_ratio(5 * 10**18, DECIMAL_PRECISION)
        '5.000000000000000000'
    """
    whole, frac = divmod(value, precision)
    digits = len(str(precision)) - 1
    return f"{whole}.{frac:0{digits}d}"
