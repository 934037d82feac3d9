"""Domain models for bc_pool: pure dataclasses, no I/O."""

from dataclasses import dataclass
from datetime import datetime

from config.settings import Settings, settings
from src.bc_common.addresses import is_address, validate_recipient
from src.bc_common.enums import PoolPhase, TradeDirection
from src.bc_common.errors import (
    InvalidArgumentError,
    InvalidFeeRateError,
    ZeroAmountError,
)
from src.bc_common.units import BASIS_POINTS

MAX_LIQUIDITY_FEE_BPS = 500  # 5%


@dataclass
class Pool:
    id: str  # token address
    seq: int  # creation order, used for enumeration
    name: str
    symbol: str
    creator: str
    phase: str
    reserve_balance: int
    available_tokens: int
    created_at: datetime
    listed_at: datetime | None = None

    @property
    def is_listed(self) -> bool:
        return self.phase == PoolPhase.LISTED

    def circulating_supply(self, trading_allocation: int) -> int:
        """Tokens held outside controller custody. Zero once listed."""
        if self.is_listed:
            return 0
        return trading_allocation - self.available_tokens


@dataclass
class PoolConfig:
    """Process-wide pool parameters. Mutated only through AdminService."""

    total_issuance: int
    trading_allocation: int
    liquidity_allocation: int
    trade_fee_bps: int
    liquidity_fee_bps: int
    reserve_cap: int
    migration_threshold_bps: int
    controller_address: str
    fee_recipient: str
    lp_recipient: str
    admin_address: str

    def validate(self) -> None:
        if self.trading_allocation <= 0:
            raise ZeroAmountError("trading_allocation")
        if self.liquidity_allocation < 0:
            raise InvalidArgumentError("liquidity_allocation must be non-negative")
        if self.trading_allocation + self.liquidity_allocation != self.total_issuance:
            raise InvalidArgumentError(
                f"allocations {self.trading_allocation} + {self.liquidity_allocation} "
                f"!= total issuance {self.total_issuance}"
            )
        if not 0 <= self.trade_fee_bps < BASIS_POINTS:
            raise InvalidFeeRateError(self.trade_fee_bps, BASIS_POINTS - 1)
        if not 0 <= self.liquidity_fee_bps <= MAX_LIQUIDITY_FEE_BPS:
            raise InvalidFeeRateError(self.liquidity_fee_bps, MAX_LIQUIDITY_FEE_BPS)
        if self.reserve_cap <= 0:
            raise ZeroAmountError("reserve_cap")
        if not 0 < self.migration_threshold_bps <= BASIS_POINTS:
            raise InvalidArgumentError(
                f"migration threshold {self.migration_threshold_bps} bps not in (0, {BASIS_POINTS}]"
            )
        validate_recipient(self.fee_recipient)
        validate_recipient(self.lp_recipient)
        for field in ("controller_address", "admin_address"):
            if not is_address(getattr(self, field)):
                raise InvalidArgumentError(f"{field} is not an address")

    @classmethod
    def from_settings(cls, source: Settings = settings) -> "PoolConfig":
        config = cls(
            total_issuance=source.TOTAL_ISSUANCE,
            trading_allocation=source.TRADING_ALLOCATION,
            liquidity_allocation=source.LIQUIDITY_ALLOCATION,
            trade_fee_bps=source.TRADE_FEE_BPS,
            liquidity_fee_bps=source.LIQUIDITY_FEE_BPS,
            reserve_cap=source.RESERVE_CAP,
            migration_threshold_bps=source.MIGRATION_THRESHOLD_BPS,
            controller_address=source.CONTROLLER_ADDRESS,
            fee_recipient=source.FEE_RECIPIENT,
            lp_recipient=source.LP_RECIPIENT,
            admin_address=source.ADMIN_ADDRESS,
        )
        config.validate()
        return config


@dataclass(frozen=True)
class BuyPlan:
    """Executed amounts of a buy. contribution == fee + for_tokens."""

    reserve_sent: int
    contribution: int
    fee: int
    for_tokens: int
    tokens_out: int
    clamped: bool  # inventory exhausted, cost re-derived from tokens_out

    @property
    def refund(self) -> int:
        return self.reserve_sent - self.contribution


@dataclass(frozen=True)
class SellPlan:
    token_amount: int
    reserve_out: int
    fee: int
    payout: int


@dataclass(frozen=True)
class MigrationPlan:
    reserve_balance: int
    lp_fee: int
    for_liquidity: int
    token_amount: int  # liquidity allocation + remaining inventory


@dataclass
class MigrationResult:
    pool_id: str
    lp_fee: int
    reserve_deposited: int
    tokens_deposited: int
    lp_issued: int
    lp_recipient: str


@dataclass
class TradeResult:
    pool_id: str
    direction: TradeDirection
    trader: str
    token_amount: int
    gross_reserve: int  # buy: contribution, sell: reserve_out
    fee: int
    net_reserve: int  # buy: for_tokens, sell: payout
    refund: int
    reserve_balance: int
    available_tokens: int
    clamped: bool = False
    migration: MigrationResult | None = None


@dataclass
class PoolEvent:
    id: int
    pool_id: str
    event_type: str
    payload: dict[str, object]
    created_at: datetime
