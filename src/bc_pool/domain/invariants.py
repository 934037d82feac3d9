"""Pool invariant verification after each state change."""

import logging

from src.bc_pool.domain.models import Pool, PoolConfig

logger = logging.getLogger(__name__)


def verify_pool_invariants(pool: Pool, config: PoolConfig) -> None:
    """Raises AssertionError if violated.

    INV-1: 0 <= available_tokens <= trading_allocation
           (available + circulating == trading_allocation while TRADING)
    INV-2: 0 <= reserve_balance <= reserve_cap
    INV-3: LISTED implies reserve_balance == 0 and available_tokens == 0
    """
    available = pool.available_tokens
    reserve = pool.reserve_balance

    if pool.is_listed:
        assert reserve == 0 and available == 0, (
            f"INV-3 violated: listed pool {pool.id} holds reserve={reserve} tokens={available}"
        )
        logger.debug("Invariants OK: pool=%s listed", pool.id)
        return

    assert 0 <= available <= config.trading_allocation, (
        f"INV-1 violated: available={available} outside [0, {config.trading_allocation}]"
    )
    assert 0 <= reserve <= config.reserve_cap, (
        f"INV-2 violated: reserve={reserve} outside [0, {config.reserve_cap}]"
    )

    logger.debug(
        "Invariants OK: pool=%s, reserve=%d, available=%d", pool.id, reserve, available
    )
