"""Continuous-reserve (Bancor) conversion formulas for supply > 0.

weight = reserve_ratio / MAX_WEIGHT.

  purchase_target_amount: tokens minted for a deposit
      supply * ((1 + deposit / balance) ** weight - 1)                 floor
  sale_target_amount:     reserve returned for burning tokens
      balance * (1 - (1 - amount / supply) ** (1 / weight))            floor
  fund_cost:              reserve needed to mint an exact token amount
      balance * ((1 + amount / supply) ** (1 / weight) - 1)            ceil
  liquidation_cost:       tokens to burn for an exact reserve amount
      supply * (1 - (1 - reserve / balance) ** weight)                 ceil

Rounding always favours the pool.
"""

from src.bc_common.errors import InputDomainError, PrecisionFaultError
from src.bc_curve.domain.fixed_math import PRECISION, check_magnitude, power

MAX_WEIGHT = 1_000_000


def _validate(supply: int, balance: int, weight: int, amount: int) -> None:
    check_magnitude("supply", supply)
    check_magnitude("balance", balance)
    check_magnitude("amount", amount)
    if supply == 0:
        raise InputDomainError("supply must be positive")
    if balance == 0:
        raise InputDomainError("balance must be positive")
    if not 0 < weight <= MAX_WEIGHT:
        raise InputDomainError(f"reserve ratio {weight} not in (0, {MAX_WEIGHT}]")


def _ceil_shift(value: int) -> int:
    """ceil(value / FIXED_1) for value >= 0."""
    return -((-value) >> PRECISION)


def purchase_target_amount(supply: int, balance: int, weight: int, amount: int) -> int:
    _validate(supply, balance, weight, amount)

    if amount == 0:
        return 0

    if weight == MAX_WEIGHT:
        return supply * amount // balance

    result = power(amount + balance, balance, weight, MAX_WEIGHT)
    minted = (supply * result >> PRECISION) - supply
    if minted < 0:
        raise PrecisionFaultError("purchase return below zero")
    return minted


def sale_target_amount(supply: int, balance: int, weight: int, amount: int) -> int:
    _validate(supply, balance, weight, amount)
    if amount > supply:
        raise InputDomainError(f"sell amount {amount} exceeds supply {supply}")

    if amount == 0:
        return 0

    # selling the entire supply returns the entire balance
    if amount == supply:
        return balance

    if weight == MAX_WEIGHT:
        return balance * amount // supply

    result = power(supply, supply - amount, MAX_WEIGHT, weight)
    refund = (balance * result - (balance << PRECISION)) // result
    if refund < 0:
        raise PrecisionFaultError("sale return below zero")
    return refund


def fund_cost(supply: int, balance: int, weight: int, amount: int) -> int:
    _validate(supply, balance, weight, amount)

    if amount == 0:
        return 0

    if weight == MAX_WEIGHT:
        return -(-balance * amount // supply)

    result = power(supply + amount, supply, MAX_WEIGHT, weight)
    cost = _ceil_shift(balance * result) - balance
    if cost < 0:
        raise PrecisionFaultError("fund cost below zero")
    return cost


def liquidation_cost(supply: int, balance: int, weight: int, reserve: int) -> int:
    _validate(supply, balance, weight, reserve)
    if reserve > balance:
        raise InputDomainError(f"reserve {reserve} exceeds balance {balance}")

    if reserve == 0:
        return 0

    # draining the entire balance burns the entire supply
    if reserve == balance:
        return supply

    if weight == MAX_WEIGHT:
        return -(-supply * reserve // balance)

    result = power(balance, balance - reserve, weight, MAX_WEIGHT)
    remaining = (supply << PRECISION) // result
    burned = supply - remaining
    if burned < 0:
        raise PrecisionFaultError("liquidation cost below zero")
    return burned

