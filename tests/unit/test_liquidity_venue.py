import math

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bc_account.infrastructure.vault import SqlReserveVault
from src.bc_common.errors import InvalidArgumentError, TransferFailedError
from src.bc_liquidity.infrastructure.venue import SqlLiquidityVenue
from src.bc_token.infrastructure.ledger import SqlTokenLedger
from tests.factories import ALICE, CONTROLLER, FIXED_NOW, LP_RECIPIENT, VENUE

TOKEN_ID = "0x" + "5a" * 20


@pytest.fixture
async def funded(
    session_factory: async_sessionmaker[AsyncSession],
    ledger: SqlTokenLedger,
    vault: SqlReserveVault,
) -> None:
    """ALICE holds 10_000 tokens and 1_000 reserve, with the venue approved."""
    async with session_factory.begin() as db:
        await ledger.mint_initial(db, TOKEN_ID, "Test", "TST", CONTROLLER, ALICE, 10_000)
        await ledger.approve(db, TOKEN_ID, ALICE, VENUE, 10_000)
        await vault.credit(db, ALICE, 1_000)


class TestAddLiquidity:
    async def test_first_deposit_uses_everything(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        ledger: SqlTokenLedger,
        vault: SqlReserveVault,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            receipt = await venue.add_liquidity(
                db, TOKEN_ID, 400, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
            )
        assert receipt.token_used == 4_000
        assert receipt.reserve_used == 400
        assert receipt.lp_issued == math.isqrt(4_000 * 400)
        async with session_factory() as db:
            assert await ledger.balance_of(db, TOKEN_ID, VENUE) == 4_000
            assert await vault.balance_of(db, VENUE) == 400
            assert await venue.lp_balance_of(db, TOKEN_ID, LP_RECIPIENT) == receipt.lp_issued

    async def test_later_deposit_follows_pool_ratio(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            first = await venue.add_liquidity(
                db, TOKEN_ID, 400, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
            )
            # ratio is 10 tokens per reserve: 300 reserve only pairs with 3_000 tokens
            second = await venue.add_liquidity(
                db, TOKEN_ID, 300, 5_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
            )
        assert second.token_used == 3_000
        assert second.reserve_used == 300
        assert second.lp_issued == 3_000 * first.lp_issued // 4_000

    async def test_expired_deadline(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            with pytest.raises(InvalidArgumentError, match="deadline"):
                await venue.add_liquidity(
                    db, TOKEN_ID, 400, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW - 1, ALICE
                )

    async def test_minimum_violation(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            await venue.add_liquidity(
                db, TOKEN_ID, 400, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
            )
            with pytest.raises(InvalidArgumentError, match="below minimum"):
                await venue.add_liquidity(
                    db, TOKEN_ID, 300, 5_000, 0, 5_000, LP_RECIPIENT, FIXED_NOW, ALICE
                )

    async def test_missing_allowance(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        ledger: SqlTokenLedger,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            await ledger.approve(db, TOKEN_ID, ALICE, VENUE, 0)
            with pytest.raises(TransferFailedError):
                await venue.add_liquidity(
                    db, TOKEN_ID, 400, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
                )

    async def test_insufficient_reserve(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        venue: SqlLiquidityVenue,
        funded: None,
    ) -> None:
        async with session_factory.begin() as db:
            with pytest.raises(TransferFailedError, match="RESERVE"):
                await venue.add_liquidity(
                    db, TOKEN_ID, 5_000, 4_000, 0, 0, LP_RECIPIENT, FIXED_NOW, ALICE
                )
