"""Shared test fixtures.

Controller tests run against a fresh in-memory aiosqlite database per test.
StaticPool keeps the single connection alive so every session sees the same
schema. Controller and venue share one fixed clock.
"""

from collections.abc import AsyncGenerator

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

import src.bc_account.infrastructure.db_models  # noqa: F401
import src.bc_liquidity.infrastructure.db_models  # noqa: F401
import src.bc_pool.infrastructure.db_models  # noqa: F401
import src.bc_token.infrastructure.db_models  # noqa: F401
from src.bc_account.infrastructure.vault import SqlReserveVault
from src.bc_common.database import Base
from src.bc_liquidity.infrastructure.venue import SqlLiquidityVenue
from src.bc_pool.application.service import PoolController
from src.bc_pool.domain.models import PoolConfig
from src.bc_token.infrastructure.ledger import SqlTokenLedger
from tests.factories import VENUE, fixed_clock, make_config, make_engine


@pytest_asyncio.fixture
async def session_factory() -> AsyncGenerator[async_sessionmaker[AsyncSession], None]:
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest.fixture
def ledger() -> SqlTokenLedger:
    return SqlTokenLedger()


@pytest.fixture
def vault() -> SqlReserveVault:
    return SqlReserveVault()


@pytest.fixture
def venue(ledger: SqlTokenLedger, vault: SqlReserveVault) -> SqlLiquidityVenue:
    return SqlLiquidityVenue(ledger, vault, VENUE, clock=fixed_clock)


@pytest.fixture
def pool_config() -> PoolConfig:
    return make_config()


@pytest.fixture
def controller(
    session_factory: async_sessionmaker[AsyncSession],
    pool_config: PoolConfig,
    ledger: SqlTokenLedger,
    vault: SqlReserveVault,
    venue: SqlLiquidityVenue,
) -> PoolController:
    return PoolController(
        session_factory=session_factory,
        engine=make_engine(),
        config=pool_config,
        ledger=ledger,
        vault=vault,
        venue=venue,
        clock=fixed_clock,
    )
