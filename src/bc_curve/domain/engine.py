"""CurveEngine: maps (balance, supply, quantity) to the counterpart quantity.

Pure and deterministic. Mint direction = buy, burn direction = sell.

Zero supply has no Bancor solution (division by supply), so both mint-side
operations switch to the closed form of the underlying price curve

    price(s) = slope * s ** (1/r - 1),   r = reserve_ratio / MAX_WEIGHT
    cost(k)  = r * slope * k ** (1/r)            (integral from 0 to k)
    k(cost)  = (cost / (r * slope)) ** r

evaluated with signed WAD fixed point (div_wad then pow_wad).
"""

from src.bc_common.errors import ZeroDenominatorError
from src.bc_common.units import WAD
from src.bc_curve.domain.fixed_math import check_magnitude, div_wad, pow_wad
from src.bc_curve.domain.formula import (
    MAX_WEIGHT,
    fund_cost,
    liquidation_cost,
    purchase_target_amount,
    sale_target_amount,
)
from src.bc_curve.domain.models import CurveParams


class CurveEngine:
    def __init__(self, params: CurveParams) -> None:
        self.params = params

    @property
    def reserve_ratio(self) -> int:
        return self.params.reserve_ratio

    @property
    def slope(self) -> int:
        return self.params.slope

    # ------------------------------------------------------------------
    # Mint side (buy)
    # ------------------------------------------------------------------

    def price_to_mint(self, balance: int, supply: int, amount: int) -> int:
        """Reserve cost of minting `amount` tokens from (balance, supply). Rounded up.

        Uses fund_cost rather than a sale return at (supply + amount, balance),
        so that it is the exact inverse of mintable_for_price.
        """
        if supply == 0:
            return self._closed_form_cost(amount)
        return fund_cost(supply, balance, self.reserve_ratio, amount)

    def mintable_for_price(self, balance: int, supply: int, reserve: int) -> int:
        """Tokens minted for `reserve` deposited at (balance, supply). Rounded down."""
        if supply == 0:
            return self._closed_form_mintable(reserve)
        return purchase_target_amount(supply, balance, self.reserve_ratio, reserve)

    # ------------------------------------------------------------------
    # Burn side (sell)
    # ------------------------------------------------------------------

    def refund_for_burn(self, balance: int, supply: int, amount: int) -> int:
        """Reserve returned for burning `amount` tokens. Rounded down."""
        if amount == supply:
            check_magnitude("balance", balance)
            return balance
        return sale_target_amount(supply, balance, self.reserve_ratio, amount)

    def burnable_for_refund(self, balance: int, supply: int, reserve: int) -> int:
        """Tokens that must be burned to release `reserve`. Rounded up.

        Uses liquidation_cost rather than a purchase return at
        (supply, balance - reserve), so that it inverts refund_for_burn.
        """
        if reserve == balance:
            check_magnitude("supply", supply)
            return supply
        return liquidation_cost(supply, balance, self.reserve_ratio, reserve)

    # ------------------------------------------------------------------
    # Price
    # ------------------------------------------------------------------

    def spot_price(self, balance: int, supply: int) -> int:
        """Marginal reserve per whole token (WAD) at the current point of the curve."""
        if supply == 0:
            return self.slope if self.reserve_ratio == MAX_WEIGHT else 0
        return balance * WAD * MAX_WEIGHT // (supply * self.reserve_ratio)

    # ------------------------------------------------------------------
    # Zero-supply closed form
    # ------------------------------------------------------------------

    def _closed_form_cost(self, amount: int) -> int:
        check_magnitude("amount", amount)
        if amount == 0:
            return 0
        exponent = div_wad(MAX_WEIGHT, self.reserve_ratio)
        scaled = pow_wad(amount, exponent)
        numerator = self.reserve_ratio * self.slope * scaled
        denominator = MAX_WEIGHT * WAD
        return -(-numerator // denominator)

    def _closed_form_mintable(self, reserve: int) -> int:
        check_magnitude("reserve", reserve)
        if reserve == 0:
            return 0
        denominator = self.reserve_ratio * self.slope
        if denominator == 0:
            raise ZeroDenominatorError("zero-supply mint")
        base = div_wad(reserve * MAX_WEIGHT, denominator)
        exponent = div_wad(self.reserve_ratio, MAX_WEIGHT)
        return pow_wad(base, exponent)
