from datetime import datetime, timezone

import pytest

from src.bc_common.units import WAD
from src.bc_pool.domain.invariants import verify_pool_invariants
from src.bc_pool.domain.models import Pool
from tests.factories import TRADING_ALLOCATION, make_config


def _pool(reserve: int, available: int, phase: str = "TRADING") -> Pool:
    return Pool(
        id="0x" + "cd" * 20,
        seq=1,
        name="Test",
        symbol="TST",
        creator="0x" + "01" * 20,
        phase=phase,
        reserve_balance=reserve,
        available_tokens=available,
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
    )


class TestPoolInvariants:
    def test_passes_when_all_ok(self) -> None:
        verify_pool_invariants(_pool(WAD, TRADING_ALLOCATION // 2), make_config())

    def test_inv1_inventory_above_allocation(self) -> None:
        with pytest.raises(AssertionError, match=r"INV-1"):
            verify_pool_invariants(_pool(0, TRADING_ALLOCATION + 1), make_config())

    def test_inv1_negative_inventory(self) -> None:
        with pytest.raises(AssertionError, match=r"INV-1"):
            verify_pool_invariants(_pool(0, -1), make_config())

    def test_inv2_reserve_above_cap(self) -> None:
        config = make_config()
        with pytest.raises(AssertionError, match=r"INV-2"):
            verify_pool_invariants(_pool(config.reserve_cap + 1, 0), config)

    def test_inv3_listed_with_reserve(self) -> None:
        with pytest.raises(AssertionError, match=r"INV-3"):
            verify_pool_invariants(_pool(1, 0, phase="LISTED"), make_config())

    def test_listed_zeroed(self) -> None:
        verify_pool_invariants(_pool(0, 0, phase="LISTED"), make_config())
