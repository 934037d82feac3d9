import math

import pytest

from src.bc_common.errors import InputDomainError
from src.bc_common.units import WAD
from src.bc_curve.domain.fixed_math import MAX_NUM
from src.bc_curve.domain.formula import (
    MAX_WEIGHT,
    fund_cost,
    liquidation_cost,
    purchase_target_amount,
    sale_target_amount,
)

SUPPLY = 1_000_000 * WAD
BALANCE = 250 * WAD
HALF = 500_000  # n = 1


class TestPurchaseTargetAmount:
    def test_matches_closed_form(self) -> None:
        deposit = 10 * WAD
        expected = SUPPLY * (math.sqrt(1 + deposit / BALANCE) - 1)
        assert purchase_target_amount(SUPPLY, BALANCE, HALF, deposit) == pytest.approx(
            expected, rel=1e-12
        )

    def test_zero_deposit(self) -> None:
        assert purchase_target_amount(SUPPLY, BALANCE, HALF, 0) == 0

    def test_linear_weight(self) -> None:
        assert purchase_target_amount(SUPPLY, BALANCE, MAX_WEIGHT, BALANCE) == SUPPLY

    def test_zero_supply_rejected(self) -> None:
        with pytest.raises(InputDomainError, match="supply"):
            purchase_target_amount(0, BALANCE, HALF, WAD)

    def test_zero_balance_rejected(self) -> None:
        with pytest.raises(InputDomainError, match="balance"):
            purchase_target_amount(SUPPLY, 0, HALF, WAD)

    def test_weight_out_of_range(self) -> None:
        with pytest.raises(InputDomainError):
            purchase_target_amount(SUPPLY, BALANCE, MAX_WEIGHT + 1, WAD)

    def test_magnitude_ceiling(self) -> None:
        with pytest.raises(InputDomainError):
            purchase_target_amount(SUPPLY, BALANCE, HALF, MAX_NUM + 1)


class TestSaleTargetAmount:
    def test_matches_closed_form(self) -> None:
        amount = 100_000 * WAD
        expected = BALANCE * (1 - (1 - amount / SUPPLY) ** 2)
        assert sale_target_amount(SUPPLY, BALANCE, HALF, amount) == pytest.approx(
            expected, rel=1e-12
        )

    def test_entire_supply_returns_balance(self) -> None:
        assert sale_target_amount(SUPPLY, BALANCE, HALF, SUPPLY) == BALANCE

    def test_amount_above_supply_rejected(self) -> None:
        with pytest.raises(InputDomainError, match="exceeds supply"):
            sale_target_amount(SUPPLY, BALANCE, HALF, SUPPLY + 1)

    def test_linear_weight(self) -> None:
        assert sale_target_amount(SUPPLY, BALANCE, MAX_WEIGHT, SUPPLY // 2) == BALANCE // 2


class TestFundCost:
    def test_matches_closed_form(self) -> None:
        amount = 50_000 * WAD
        expected = BALANCE * ((1 + amount / SUPPLY) ** 2 - 1)
        assert fund_cost(SUPPLY, BALANCE, HALF, amount) == pytest.approx(expected, rel=1e-12)

    def test_inverts_purchase_target_amount(self) -> None:
        deposit = 3 * WAD
        minted = purchase_target_amount(SUPPLY, BALANCE, HALF, deposit)
        cost = fund_cost(SUPPLY, BALANCE, HALF, minted)
        # minted is rounded down, so buying it back never costs more than the deposit
        assert cost <= deposit
        assert deposit - cost <= deposit // 10**12

    def test_linear_rounds_up(self) -> None:
        assert fund_cost(3, 10, MAX_WEIGHT, 1) == 4


class TestLiquidationCost:
    def test_matches_closed_form(self) -> None:
        reserve = 20 * WAD
        expected = SUPPLY * (1 - math.sqrt(1 - reserve / BALANCE))
        assert liquidation_cost(SUPPLY, BALANCE, HALF, reserve) == pytest.approx(
            expected, rel=1e-12
        )

    def test_entire_balance_burns_entire_supply(self) -> None:
        assert liquidation_cost(SUPPLY, BALANCE, HALF, BALANCE) == SUPPLY

    def test_reserve_above_balance_rejected(self) -> None:
        with pytest.raises(InputDomainError, match="exceeds balance"):
            liquidation_cost(SUPPLY, BALANCE, HALF, BALANCE + 1)

    def test_releases_at_least_the_requested_reserve(self) -> None:
        reserve = 7 * WAD
        burned = liquidation_cost(SUPPLY, BALANCE, HALF, reserve)
        assert sale_target_amount(SUPPLY, BALANCE, HALF, burned) >= reserve - 1
