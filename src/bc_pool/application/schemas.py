"""Pydantic schemas for pool controller results.

Amounts are int base units; *_display fields carry the 18-decimal rendering.
"""

from datetime import datetime

from pydantic import BaseModel

from src.bc_common.units import amount_to_display
from src.bc_pool.domain.models import (
    BuyPlan,
    MigrationResult,
    Pool,
    PoolEvent,
    SellPlan,
    TradeResult,
)

# ---------------------------------------------------------------------------
# Pool
# ---------------------------------------------------------------------------


class PoolDetail(BaseModel):
    id: str
    seq: int
    name: str
    symbol: str
    creator: str
    phase: str
    reserve_balance: int
    reserve_balance_display: str
    available_tokens: int
    circulating_supply: int
    created_at: datetime
    listed_at: datetime | None

    @classmethod
    def from_domain(cls, pool: Pool, trading_allocation: int) -> "PoolDetail":
        return cls(
            id=pool.id,
            seq=pool.seq,
            name=pool.name,
            symbol=pool.symbol,
            creator=pool.creator,
            phase=pool.phase,
            reserve_balance=pool.reserve_balance,
            reserve_balance_display=amount_to_display(pool.reserve_balance),
            available_tokens=pool.available_tokens,
            circulating_supply=pool.circulating_supply(trading_allocation),
            created_at=pool.created_at,
            listed_at=pool.listed_at,
        )


class PoolListResponse(BaseModel):
    items: list[PoolDetail]
    total: int
    offset: int
    limit: int


# ---------------------------------------------------------------------------
# Trades
# ---------------------------------------------------------------------------


class MigrationReceipt(BaseModel):
    pool_id: str
    lp_fee: int
    reserve_deposited: int
    tokens_deposited: int
    lp_issued: int
    lp_recipient: str

    @classmethod
    def from_domain(cls, result: MigrationResult) -> "MigrationReceipt":
        return cls(
            pool_id=result.pool_id,
            lp_fee=result.lp_fee,
            reserve_deposited=result.reserve_deposited,
            tokens_deposited=result.tokens_deposited,
            lp_issued=result.lp_issued,
            lp_recipient=result.lp_recipient,
        )


class TradeReceipt(BaseModel):
    pool_id: str
    direction: str
    trader: str
    token_amount: int
    gross_reserve: int
    fee: int
    net_reserve: int
    refund: int
    reserve_balance: int
    available_tokens: int
    clamped: bool
    migration: MigrationReceipt | None = None

    @classmethod
    def from_domain(cls, result: TradeResult) -> "TradeReceipt":
        return cls(
            pool_id=result.pool_id,
            direction=result.direction.value,
            trader=result.trader,
            token_amount=result.token_amount,
            gross_reserve=result.gross_reserve,
            fee=result.fee,
            net_reserve=result.net_reserve,
            refund=result.refund,
            reserve_balance=result.reserve_balance,
            available_tokens=result.available_tokens,
            clamped=result.clamped,
            migration=(
                MigrationReceipt.from_domain(result.migration) if result.migration else None
            ),
        )


class CreatePoolResponse(BaseModel):
    pool: PoolDetail
    initial_trade: TradeReceipt | None = None


# ---------------------------------------------------------------------------
# Quotes
# ---------------------------------------------------------------------------


class BuyQuote(BaseModel):
    pool_id: str
    reserve_sent: int
    contribution: int
    fee: int
    for_tokens: int
    tokens_out: int
    refund: int
    clamped: bool

    @classmethod
    def from_plan(cls, pool_id: str, plan: BuyPlan) -> "BuyQuote":
        return cls(
            pool_id=pool_id,
            reserve_sent=plan.reserve_sent,
            contribution=plan.contribution,
            fee=plan.fee,
            for_tokens=plan.for_tokens,
            tokens_out=plan.tokens_out,
            refund=plan.refund,
            clamped=plan.clamped,
        )


class SellQuote(BaseModel):
    pool_id: str
    token_amount: int
    reserve_out: int
    fee: int
    payout: int

    @classmethod
    def from_plan(cls, pool_id: str, plan: SellPlan) -> "SellQuote":
        return cls(
            pool_id=pool_id,
            token_amount=plan.token_amount,
            reserve_out=plan.reserve_out,
            fee=plan.fee,
            payout=plan.payout,
        )


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


class PoolEventOut(BaseModel):
    id: int
    pool_id: str
    event_type: str
    payload: dict[str, object]
    created_at: datetime

    @classmethod
    def from_domain(cls, event: PoolEvent) -> "PoolEventOut":
        return cls(
            id=event.id,
            pool_id=event.pool_id,
            event_type=event.event_type,
            payload=event.payload,
            created_at=event.created_at,
        )
