"""PoolController: per-pool trade and settlement state machine.

TRADING -> LISTED is one-way. Every mutating operation (create, buy, sell,
migrate) holds the controller lock and runs in a single transaction, so a
failure anywhere, including a refused transfer, rolls back the whole call.
Pool rows are written before any transfer is attempted.
"""
import asyncio
import logging
from collections.abc import AsyncIterator, Callable
from contextlib import asynccontextmanager
from contextvars import ContextVar

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bc_common.addresses import new_token_address, validate_recipient
from src.bc_common.datetime_utils import unix_now, utc_now
from src.bc_common.enums import AssetKind, PoolEventType, PoolPhase, TradeDirection
from src.bc_common.errors import (
    InvalidArgumentError,
    PoolNotFoundError,
    ReentrancyError,
    TransferFailedError,
)
from src.bc_common.units import WAD
from src.bc_curve.domain.engine import CurveEngine
from src.bc_pool.application.schemas import (
    BuyQuote,
    CreatePoolResponse,
    MigrationReceipt,
    PoolDetail,
    PoolEventOut,
    PoolListResponse,
    SellQuote,
    TradeReceipt,
)
from src.bc_pool.domain.invariants import verify_pool_invariants
from src.bc_pool.domain.models import MigrationResult, Pool, PoolConfig, TradeResult
from src.bc_pool.domain.ports import (
    LiquidityVenueProtocol,
    ReserveVaultProtocol,
    TokenLedgerProtocol,
)
from src.bc_pool.domain.pricing import (
    ensure_trading,
    plan_buy,
    plan_migration,
    plan_sell,
    should_migrate,
)
from src.bc_pool.domain.repository import PoolRepositoryProtocol
from src.bc_pool.infrastructure.events import list_pool_events, write_pool_event
from src.bc_pool.infrastructure.persistence import PoolRepository

logger = logging.getLogger(__name__)


class PoolController:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        engine: CurveEngine,
        config: PoolConfig,
        ledger: TokenLedgerProtocol,
        vault: ReserveVaultProtocol,
        venue: LiquidityVenueProtocol,
        repo: PoolRepositoryProtocol | None = None,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._session_factory = session_factory
        self._engine = engine
        self._config = config
        self._ledger = ledger
        self._vault = vault
        self._venue = venue
        self._repo: PoolRepositoryProtocol = repo or PoolRepository()
        self._clock = clock
        self._lock = asyncio.Lock()
        self._active: ContextVar[bool] = ContextVar(
            f"pool_controller_{id(self)}_active", default=False
        )

    @property
    def config(self) -> PoolConfig:
        return self._config

    @property
    def engine(self) -> CurveEngine:
        return self._engine

    @property
    def venue(self) -> LiquidityVenueProtocol:
        return self._venue

    @property
    def repo(self) -> PoolRepositoryProtocol:
        return self._repo

    def replace_engine(self, engine: CurveEngine) -> None:
        self._engine = engine

    def replace_venue(self, venue: LiquidityVenueProtocol) -> None:
        self._venue = venue

    @asynccontextmanager
    async def exclusive(self) -> AsyncIterator[AsyncSession]:
        """Hold the controller lock and one transaction for the block.

        Entering again from inside a running block (same task context) raises
        ReentrancyError instead of deadlocking on the lock.
        """
        if self._active.get():
            raise ReentrancyError()
        async with self._lock:
            token = self._active.set(True)
            try:
                async with self._session_factory.begin() as db:
                    yield db
            finally:
                self._active.reset(token)

    # ------------------------------------------------------------------
    # Mutating operations
    # ------------------------------------------------------------------

    async def create(
        self, creator: str, name: str, symbol: str, initial_reserve: int = 0
    ) -> CreatePoolResponse:
        validate_recipient(creator)
        if not name.strip() or not symbol.strip():
            raise InvalidArgumentError("name and symbol must be non-empty")
        if initial_reserve < 0:
            raise InvalidArgumentError("initial_reserve must be non-negative")

        async with self.exclusive() as db:
            cfg = self._config
            controller = cfg.controller_address
            token_id = new_token_address()

            await self._ledger.mint_initial(
                db, token_id, name, symbol, controller, token_id, cfg.total_issuance
            )
            moved = await self._ledger.privileged_transfer(
                db, token_id, controller, token_id, controller, cfg.trading_allocation
            )
            if not moved:
                raise TransferFailedError(
                    AssetKind.TOKEN.value, token_id, controller, cfg.trading_allocation
                )

            pool = Pool(
                id=token_id,
                seq=0,
                name=name,
                symbol=symbol,
                creator=creator,
                phase=PoolPhase.TRADING.value,
                reserve_balance=0,
                available_tokens=cfg.trading_allocation,
                created_at=utc_now(),
            )
            pool = await self._repo.insert(db, pool)
            await write_pool_event(
                db,
                pool.id,
                PoolEventType.POOL_CREATED,
                {"creator": creator, "name": name, "symbol": symbol, "seq": pool.seq},
            )
            logger.info(
                "Pool created: id=%s seq=%d symbol=%s creator=%s",
                pool.id, pool.seq, symbol, creator,
            )

            initial_trade = None
            if initial_reserve > 0:
                result = await self._buy_inner(db, pool, creator, initial_reserve)
                initial_trade = TradeReceipt.from_domain(result)

            return CreatePoolResponse(
                pool=PoolDetail.from_domain(pool, cfg.trading_allocation),
                initial_trade=initial_trade,
            )

    async def buy(self, pool_id: str, buyer: str, reserve_sent: int) -> TradeReceipt:
        validate_recipient(buyer)
        async with self.exclusive() as db:
            pool = await self._load(db, pool_id)
            result = await self._buy_inner(db, pool, buyer, reserve_sent)
        return TradeReceipt.from_domain(result)

    async def sell(self, pool_id: str, seller: str, token_amount: int) -> TradeReceipt:
        validate_recipient(seller)
        async with self.exclusive() as db:
            cfg = self._config
            controller = cfg.controller_address
            pool = await self._load(db, pool_id)
            plan = plan_sell(self._engine, pool, cfg, token_amount)

            pool.reserve_balance -= plan.reserve_out
            pool.available_tokens += plan.token_amount
            verify_pool_invariants(pool, cfg)
            await self._repo.update_state(db, pool)

            await self._pay_reserve(db, controller, cfg.fee_recipient, plan.fee)
            pulled = await self._ledger.transfer_from(
                db, pool.id, controller, seller, controller, plan.token_amount
            )
            if not pulled:
                raise TransferFailedError(
                    AssetKind.TOKEN.value, seller, controller, plan.token_amount
                )
            await self._pay_reserve(db, controller, seller, plan.payout)

            result = TradeResult(
                pool_id=pool.id,
                direction=TradeDirection.SELL,
                trader=seller,
                token_amount=plan.token_amount,
                gross_reserve=plan.reserve_out,
                fee=plan.fee,
                net_reserve=plan.payout,
                refund=0,
                reserve_balance=pool.reserve_balance,
                available_tokens=pool.available_tokens,
            )
            await self._record_trade(db, result)
        return TradeReceipt.from_domain(result)

    async def migrate(self, pool_id: str) -> MigrationReceipt:
        async with self.exclusive() as db:
            pool = await self._load(db, pool_id)
            result = await self._migrate_inner(db, pool)
        return MigrationReceipt.from_domain(result)

    # ------------------------------------------------------------------
    # Read-only queries
    # ------------------------------------------------------------------

    async def quote_buy(self, pool_id: str, reserve_sent: int) -> BuyQuote:
        async with self._session_factory() as db:
            pool = await self._load(db, pool_id)
        plan = plan_buy(self._engine, pool, self._config, reserve_sent)
        return BuyQuote.from_plan(pool.id, plan)

    async def quote_sell(self, pool_id: str, token_amount: int) -> SellQuote:
        async with self._session_factory() as db:
            pool = await self._load(db, pool_id)
        plan = plan_sell(self._engine, pool, self._config, token_amount)
        return SellQuote.from_plan(pool.id, plan)

    async def current_price(self, pool_id: str) -> int:
        """Spot price in reserve base units per whole token."""
        async with self._session_factory() as db:
            pool = await self._load(db, pool_id)
        ensure_trading(pool)
        supply = pool.circulating_supply(self._config.trading_allocation)
        return self._engine.spot_price(pool.reserve_balance, supply)

    async def market_cap(self, pool_id: str) -> int:
        price = await self.current_price(pool_id)
        return price * self._config.total_issuance // WAD

    async def get_pool(self, pool_id: str) -> PoolDetail:
        async with self._session_factory() as db:
            pool = await self._load(db, pool_id)
        return PoolDetail.from_domain(pool, self._config.trading_allocation)

    async def list_pools(
        self, phase: PoolPhase | None = None, offset: int = 0, limit: int = 50
    ) -> PoolListResponse:
        if offset < 0 or limit <= 0:
            raise InvalidArgumentError("offset must be >= 0 and limit > 0")
        sql_phase = phase.value if phase else None
        async with self._session_factory() as db:
            pools = await self._repo.list_pools(db, sql_phase, offset, limit)
            total = await self._repo.count(db, sql_phase)
        allocation = self._config.trading_allocation
        return PoolListResponse(
            items=[PoolDetail.from_domain(p, allocation) for p in pools],
            total=total,
            offset=offset,
            limit=limit,
        )

    async def pool_events(self, pool_id: str, limit: int = 100) -> list[PoolEventOut]:
        async with self._session_factory() as db:
            await self._load(db, pool_id)
            events = await list_pool_events(db, pool_id, limit)
        return [PoolEventOut.from_domain(e) for e in events]

    # ------------------------------------------------------------------
    # Internals (caller holds the lock and the transaction)
    # ------------------------------------------------------------------

    async def _load(self, db: AsyncSession, pool_id: str) -> Pool:
        pool = await self._repo.get(db, pool_id)
        if pool is None:
            raise PoolNotFoundError(pool_id)
        return pool

    async def _buy_inner(
        self, db: AsyncSession, pool: Pool, buyer: str, reserve_sent: int
    ) -> TradeResult:
        cfg = self._config
        controller = cfg.controller_address
        plan = plan_buy(self._engine, pool, cfg, reserve_sent)
        if plan.clamped:
            logger.warning(
                "Inventory clamp: pool=%s tokens_out=%d for_tokens=%d refund=%d",
                pool.id, plan.tokens_out, plan.for_tokens, plan.refund,
            )

        pool.reserve_balance += plan.for_tokens
        pool.available_tokens -= plan.tokens_out
        verify_pool_invariants(pool, cfg)
        await self._repo.update_state(db, pool)

        await self._pay_reserve(db, buyer, controller, plan.reserve_sent)
        await self._pay_reserve(db, controller, cfg.fee_recipient, plan.fee)
        await self._send_tokens(db, pool.id, controller, buyer, plan.tokens_out)
        await self._pay_reserve(db, controller, buyer, plan.refund)

        result = TradeResult(
            pool_id=pool.id,
            direction=TradeDirection.BUY,
            trader=buyer,
            token_amount=plan.tokens_out,
            gross_reserve=plan.contribution,
            fee=plan.fee,
            net_reserve=plan.for_tokens,
            refund=plan.refund,
            reserve_balance=pool.reserve_balance,
            available_tokens=pool.available_tokens,
            clamped=plan.clamped,
        )
        await self._record_trade(db, result)

        if should_migrate(pool, cfg):
            result.migration = await self._migrate_inner(db, pool)
        return result

    async def _migrate_inner(self, db: AsyncSession, pool: Pool) -> MigrationResult:
        cfg = self._config
        controller = cfg.controller_address
        plan = plan_migration(pool, cfg)

        pool.reserve_balance = 0
        pool.available_tokens = 0
        pool.phase = PoolPhase.LISTED.value
        pool.listed_at = utc_now()
        verify_pool_invariants(pool, cfg)
        await self._repo.update_state(db, pool)

        await self._pay_reserve(db, controller, cfg.fee_recipient, plan.lp_fee)
        moved = await self._ledger.privileged_transfer(
            db, pool.id, controller, pool.id, controller, cfg.liquidity_allocation
        )
        if not moved:
            raise TransferFailedError(
                AssetKind.TOKEN.value, pool.id, controller, cfg.liquidity_allocation
            )
        venue = self._venue
        await self._ledger.approve(db, pool.id, controller, venue.address, plan.token_amount)
        receipt = await venue.add_liquidity(
            db,
            pool.id,
            plan.for_liquidity,
            plan.token_amount,
            0,
            0,
            cfg.lp_recipient,
            self._clock(),
            controller,
        )
        if receipt.token_used < plan.token_amount or receipt.reserve_used < plan.for_liquidity:
            logger.warning(
                "Venue consumed part of the deposit: pool=%s tokens=%d/%d reserve=%d/%d",
                pool.id, receipt.token_used, plan.token_amount,
                receipt.reserve_used, plan.for_liquidity,
            )
        await self._ledger.revoke_privileged_role(db, pool.id, controller)

        result = MigrationResult(
            pool_id=pool.id,
            lp_fee=plan.lp_fee,
            reserve_deposited=receipt.reserve_used,
            tokens_deposited=receipt.token_used,
            lp_issued=receipt.lp_issued,
            lp_recipient=cfg.lp_recipient,
        )
        await write_pool_event(
            db,
            pool.id,
            PoolEventType.MIGRATION_EXECUTED,
            {
                "reserve_balance": plan.reserve_balance,
                "lp_fee": plan.lp_fee,
                "reserve_deposited": receipt.reserve_used,
                "tokens_deposited": receipt.token_used,
                "lp_issued": receipt.lp_issued,
                "lp_recipient": cfg.lp_recipient,
            },
        )
        logger.info(
            "Pool migrated: id=%s reserve=%d tokens=%d lp=%d",
            pool.id, receipt.reserve_used, receipt.token_used, receipt.lp_issued,
        )
        return result

    async def _record_trade(self, db: AsyncSession, result: TradeResult) -> None:
        await write_pool_event(
            db,
            result.pool_id,
            PoolEventType.TRADE_EXECUTED,
            {
                "direction": result.direction.value,
                "trader": result.trader,
                "token_amount": result.token_amount,
                "gross_reserve": result.gross_reserve,
                "fee": result.fee,
                "net_reserve": result.net_reserve,
                "refund": result.refund,
                "reserve_balance": result.reserve_balance,
                "available_tokens": result.available_tokens,
                "clamped": result.clamped,
            },
        )

    async def _pay_reserve(
        self, db: AsyncSession, sender: str, recipient: str, amount: int
    ) -> None:
        if amount == 0:
            return
        if not await self._vault.transfer(db, sender, recipient, amount):
            raise TransferFailedError(AssetKind.RESERVE.value, sender, recipient, amount)

    async def _send_tokens(
        self, db: AsyncSession, token_id: str, sender: str, recipient: str, amount: int
    ) -> None:
        if not await self._ledger.transfer(db, token_id, sender, recipient, amount):
            raise TransferFailedError(AssetKind.TOKEN.value, sender, recipient, amount)
