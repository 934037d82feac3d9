"""Trade planning: fee policy, reserve cap and inventory clamp.

Pure functions over (engine, pool, config). The controller commits exactly
what a plan returns, so quotes and executed trades share one code path.
"""

from src.bc_common.errors import (
    InvalidArgumentError,
    InsufficientReserveError,
    PoolListedError,
    PrecisionFaultError,
    ReserveCapReachedError,
    ZeroAmountError,
)
from src.bc_common.units import (
    BASIS_POINTS,
    calculate_fee,
    fee_for_net,
    max_gross_for_net,
)
from src.bc_curve.domain.engine import CurveEngine
from src.bc_pool.domain.models import (
    BuyPlan,
    MigrationPlan,
    Pool,
    PoolConfig,
    SellPlan,
)


def ensure_trading(pool: Pool) -> None:
    if pool.is_listed:
        raise PoolListedError(pool.id)


def plan_buy(
    engine: CurveEngine, pool: Pool, config: PoolConfig, reserve_sent: int
) -> BuyPlan:
    ensure_trading(pool)
    if reserve_sent <= 0:
        raise ZeroAmountError("reserve_sent")
    room = config.reserve_cap - pool.reserve_balance
    if room <= 0:
        raise ReserveCapReachedError(pool.id, config.reserve_cap)

    balance = pool.reserve_balance
    supply = pool.circulating_supply(config.trading_allocation)
    fee_bps = config.trade_fee_bps

    contribution = min(reserve_sent, max_gross_for_net(room, fee_bps))
    fee = calculate_fee(contribution, fee_bps)
    for_tokens = contribution - fee
    tokens_out = engine.mintable_for_price(balance, supply, for_tokens)

    clamped = tokens_out > pool.available_tokens
    if clamped:
        tokens_out = pool.available_tokens
        for_tokens = engine.price_to_mint(balance, supply, tokens_out)
        if for_tokens > reserve_sent:
            raise PrecisionFaultError(
                f"clamped cost {for_tokens} exceeds reserve sent {reserve_sent}"
            )
        # grossed-up fee, capped at what the buyer actually sent
        fee = min(fee_for_net(for_tokens, fee_bps), reserve_sent - for_tokens)
        contribution = for_tokens + fee

    if tokens_out == 0:
        raise InvalidArgumentError(f"reserve {reserve_sent} is too small to mint any tokens")
    if balance + for_tokens > config.reserve_cap:
        raise PrecisionFaultError(
            f"reserve {balance + for_tokens} would exceed cap {config.reserve_cap}"
        )

    return BuyPlan(
        reserve_sent=reserve_sent,
        contribution=contribution,
        fee=fee,
        for_tokens=for_tokens,
        tokens_out=tokens_out,
        clamped=clamped,
    )


def plan_sell(
    engine: CurveEngine, pool: Pool, config: PoolConfig, token_amount: int
) -> SellPlan:
    ensure_trading(pool)
    if token_amount <= 0:
        raise ZeroAmountError("token_amount")
    supply = pool.circulating_supply(config.trading_allocation)
    if token_amount > supply:
        raise InvalidArgumentError(
            f"sell amount {token_amount} exceeds circulating supply {supply}"
        )

    reserve_out = engine.refund_for_burn(pool.reserve_balance, supply, token_amount)
    if pool.reserve_balance < reserve_out:
        raise InsufficientReserveError(reserve_out, pool.reserve_balance)
    fee = calculate_fee(reserve_out, config.trade_fee_bps)
    return SellPlan(
        token_amount=token_amount,
        reserve_out=reserve_out,
        fee=fee,
        payout=reserve_out - fee,
    )


def should_migrate(pool: Pool, config: PoolConfig) -> bool:
    """Inventory exhausted, or reserve at the migration threshold of the cap."""
    if pool.is_listed:
        return False
    if pool.available_tokens == 0:
        return True
    return (
        pool.reserve_balance * BASIS_POINTS
        >= config.reserve_cap * config.migration_threshold_bps
    )


def plan_migration(pool: Pool, config: PoolConfig) -> MigrationPlan:
    ensure_trading(pool)
    lp_fee = calculate_fee(pool.reserve_balance, config.liquidity_fee_bps)
    return MigrationPlan(
        reserve_balance=pool.reserve_balance,
        lp_fee=lp_fee,
        for_liquidity=pool.reserve_balance - lp_fee,
        token_amount=config.liquidity_allocation + pool.available_tokens,
    )
