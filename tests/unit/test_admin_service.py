import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bc_account.infrastructure.vault import SqlReserveVault
from src.bc_admin.application.service import AdminService
from src.bc_common.enums import PoolPhase
from src.bc_common.errors import (
    InvalidArgumentError,
    InvalidFeeRateError,
    InvalidRecipientError,
    NotAuthorizedError,
    PoolListedError,
    ZeroAmountError,
)
from src.bc_common.units import WAD
from src.bc_liquidity.infrastructure.venue import SqlLiquidityVenue
from src.bc_pool.application.service import PoolController
from src.bc_token.infrastructure.ledger import SqlTokenLedger
from tests.factories import (
    ADMIN,
    ALICE,
    BOB,
    LIQUIDITY_ALLOCATION,
    fixed_clock,
    fund,
    make_engine,
)

NEW_RECIPIENT = "0x00000000000000000000000000000000000fee55"


@pytest.fixture
def admin(controller: PoolController) -> AdminService:
    return AdminService(controller)


class TestAuthorization:
    async def test_non_admin_rejected(self, admin: AdminService) -> None:
        with pytest.raises(NotAuthorizedError):
            await admin.set_fee_recipient(ALICE, NEW_RECIPIENT)
        with pytest.raises(NotAuthorizedError):
            await admin.trigger_migration(ALICE, "0x" + "11" * 20)


class TestParameters:
    async def test_set_fee_recipient(
        self,
        admin: AdminService,
        controller: PoolController,
        session_factory: async_sessionmaker[AsyncSession],
        vault: SqlReserveVault,
    ) -> None:
        await admin.set_fee_recipient(ADMIN, NEW_RECIPIENT)
        assert controller.config.fee_recipient == NEW_RECIPIENT

        pool_id = (await controller.create(ALICE, "Test", "TST")).pool.id
        await fund(session_factory, vault, BOB, WAD)
        trade = await controller.buy(pool_id, BOB, WAD)
        async with session_factory() as db:
            assert await vault.balance_of(db, NEW_RECIPIENT) == trade.fee

    async def test_invalid_fee_recipient(self, admin: AdminService) -> None:
        with pytest.raises(InvalidRecipientError):
            await admin.set_fee_recipient(ADMIN, "not-an-address")
        with pytest.raises(InvalidRecipientError):
            await admin.set_fee_recipient(ADMIN, "0x" + "0" * 40)

    async def test_liquidity_fee_bounded(
        self, admin: AdminService, controller: PoolController
    ) -> None:
        await admin.set_liquidity_fee_bps(ADMIN, 500)
        assert controller.config.liquidity_fee_bps == 500
        with pytest.raises(InvalidFeeRateError):
            await admin.set_liquidity_fee_bps(ADMIN, 501)
        assert controller.config.liquidity_fee_bps == 500

    async def test_reserve_cap(
        self,
        admin: AdminService,
        controller: PoolController,
        session_factory: async_sessionmaker[AsyncSession],
        vault: SqlReserveVault,
    ) -> None:
        pool_id = (await controller.create(ALICE, "Test", "TST")).pool.id
        await fund(session_factory, vault, BOB, 5 * WAD)
        trade = await controller.buy(pool_id, BOB, 5 * WAD)

        with pytest.raises(ZeroAmountError):
            await admin.set_reserve_cap(ADMIN, 0)
        with pytest.raises(InvalidArgumentError, match="not above trading pool reserve"):
            await admin.set_reserve_cap(ADMIN, trade.reserve_balance - 1)
        with pytest.raises(InvalidArgumentError, match="not above trading pool reserve"):
            await admin.set_reserve_cap(ADMIN, trade.reserve_balance)
        assert controller.config.reserve_cap == 24 * WAD

        await admin.set_reserve_cap(ADMIN, trade.reserve_balance + 1)
        assert controller.config.reserve_cap == trade.reserve_balance + 1

        await admin.set_reserve_cap(ADMIN, 50 * WAD)
        assert controller.config.reserve_cap == 50 * WAD

    async def test_replace_curve_engine(
        self, admin: AdminService, controller: PoolController
    ) -> None:
        engine = make_engine(slope=150)
        await admin.set_curve_engine(ADMIN, engine)
        assert controller.engine is engine

    async def test_replace_liquidity_venue(
        self,
        admin: AdminService,
        controller: PoolController,
        ledger: SqlTokenLedger,
        vault: SqlReserveVault,
    ) -> None:
        address = "0x000000000000000000000000000000000000b0a7"
        venue = SqlLiquidityVenue(ledger, vault, address, clock=fixed_clock)
        await admin.set_liquidity_venue(ADMIN, venue)
        assert controller.venue.address == address


class TestTriggerMigration:
    async def test_migrates_trading_pool(
        self,
        admin: AdminService,
        controller: PoolController,
        session_factory: async_sessionmaker[AsyncSession],
        vault: SqlReserveVault,
    ) -> None:
        pool_id = (await controller.create(ALICE, "Test", "TST")).pool.id
        await fund(session_factory, vault, BOB, WAD)
        trade = await controller.buy(pool_id, BOB, WAD)

        receipt = await admin.trigger_migration(ADMIN, pool_id)

        lp_fee = trade.reserve_balance * 300 // 10_000
        assert receipt.lp_fee == lp_fee
        assert receipt.reserve_deposited == trade.reserve_balance - lp_fee
        assert receipt.tokens_deposited == LIQUIDITY_ALLOCATION + trade.available_tokens
        pool = await controller.get_pool(pool_id)
        assert pool.phase == PoolPhase.LISTED.value

        with pytest.raises(PoolListedError):
            await admin.trigger_migration(ADMIN, pool_id)
