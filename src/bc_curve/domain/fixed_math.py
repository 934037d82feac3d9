"""Fixed-point logarithm / exponent ladder used by the curve formulas.

Two representations live here:

* Binary fixed point with PRECISION fractional bits (FIXED_1 = 2**127).
  ``power(base_n, base_d, exp_n, exp_d)`` returns
  ``(base_n / base_d) ** (exp_n / exp_d) * FIXED_1`` computed as
  ``e ** (ln(base) * exp)``, never as a direct fractional power.
* Signed WAD (1e18) values for the zero-supply closed form:
  ``div_wad`` and ``pow_wad`` take and return 18-decimal fixed point.

Accuracy contract: ``power`` is within 1e-30 relative of the exact value for
every argument it accepts. ``pow_wad`` adds at most one unit (1e-18) of
truncation on top of that.

Magnitude ceiling: balances, supplies and amounts handed to the formulas must
lie in [0, MAX_NUM] with MAX_NUM = 2**128 - 1. An exponent argument whose
result would exceed 2**256 raises InputDomainError instead of growing
unbounded.
"""

from src.bc_common.errors import InputDomainError, PrecisionFaultError, ZeroDenominatorError
from src.bc_common.units import WAD

PRECISION = 127
FIXED_1 = 1 << PRECISION
FIXED_2 = 2 << PRECISION

MAX_NUM = (1 << 128) - 1

_GUARD_BITS = 32


def _ln2_fixed() -> int:
    """ln(2) * FIXED_1 from ln 2 = sum(1 / (k * 2**k)), with guard bits."""
    one = 1 << (PRECISION + _GUARD_BITS)
    total = 0
    k = 1
    while True:
        term = one // (k << k)
        if term == 0:
            break
        total += term
        k += 1
    return total >> _GUARD_BITS


LN2 = _ln2_fixed()

# e ** MAX_EXP_ARG is 2 ** 256
MAX_EXP_ARG = 256 * LN2


def check_magnitude(name: str, value: int) -> None:
    """Raise InputDomainError unless 0 <= value <= MAX_NUM."""
    if value < 0 or value > MAX_NUM:
        raise InputDomainError(f"{name}={value} must be within [0, 2**128 - 1]")


def _ln_at_least_one(numerator: int, denominator: int) -> int:
    """floor(ln(numerator / denominator) * FIXED_1) for numerator >= denominator.

    Integer part of log2 by shifting, fractional bits by repeated squaring,
    then scaled by ln(2).
    """
    res = 0
    x = numerator * FIXED_1 // denominator

    if x >= FIXED_2:
        count = (x // FIXED_1).bit_length() - 1
        x >>= count  # now x < 2
        res = count * FIXED_1

    if x > FIXED_1:
        for i in range(PRECISION, 0, -1):
            x = x * x // FIXED_1  # now 1 < x < 4
            if x >= FIXED_2:
                x >>= 1  # now 1 < x < 2
                res += 1 << (i - 1)

    return res * LN2 // FIXED_1


def ln_ratio(numerator: int, denominator: int) -> int:
    """Signed ln(numerator / denominator) * FIXED_1."""
    if denominator == 0:
        raise ZeroDenominatorError("ln_ratio")
    if numerator <= 0 or denominator < 0:
        raise InputDomainError(f"ln of non-positive ratio {numerator}/{denominator}")
    if numerator < denominator:
        return -_ln_at_least_one(denominator, numerator)
    return _ln_at_least_one(numerator, denominator)


def _exp_non_negative(x: int) -> int:
    if x > MAX_EXP_ARG:
        raise InputDomainError("exponent result exceeds 2**256")
    # e^x = 2^k * e^r with 0 <= r < ln 2
    k = x // LN2
    r = x - k * LN2
    res = FIXED_1
    term = FIXED_1
    i = 1
    while term:
        term = term * r // (i * FIXED_1)
        res += term
        i += 1
    return res << k


def exp_fixed(x: int) -> int:
    """e ** (x / FIXED_1) * FIXED_1 for signed x. Deep negatives underflow to 0."""
    if x < 0:
        if -x > MAX_EXP_ARG:
            return 0
        return FIXED_1 * FIXED_1 // _exp_non_negative(-x)
    return _exp_non_negative(x)


def power(base_n: int, base_d: int, exp_n: int, exp_d: int) -> int:
    """(base_n / base_d) ** (exp_n / exp_d) * FIXED_1.

    Bases may be below one and exponents may be negative; exp_d must be > 0.
    """
    if base_d == 0 or exp_d == 0:
        raise ZeroDenominatorError("power")
    if base_n < 0 or base_d < 0 or exp_d < 0:
        raise InputDomainError("power takes a non-negative base and positive exp_d")
    if base_n == 0:
        if exp_n > 0:
            return 0
        if exp_n == 0:
            return FIXED_1
        raise ZeroDenominatorError("power of zero base with negative exponent")
    if exp_n == 0:
        return FIXED_1
    log = ln_ratio(base_n, base_d) * exp_n // exp_d
    return exp_fixed(log)


def _trunc_div(a: int, b: int) -> int:
    """Signed division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def div_wad(numerator: int, denominator: int) -> int:
    """numerator / denominator as signed WAD, truncated toward zero."""
    if denominator == 0:
        raise ZeroDenominatorError("div_wad")
    return _trunc_div(numerator * WAD, denominator)


def pow_wad(base: int, exponent: int) -> int:
    """base ** exponent for a WAD base >= 0 and a signed WAD exponent."""
    if base < 0:
        raise InputDomainError("pow_wad base must be non-negative")
    if base == 0:
        if exponent > 0:
            return 0
        if exponent == 0:
            return WAD
        raise ZeroDenominatorError("pow_wad of zero base with negative exponent")
    result = power(base, WAD, exponent, WAD) * WAD >> PRECISION
    if result < 0:
        raise PrecisionFaultError("pow_wad produced a negative result")
    return result
