"""Constants and builders shared by the test modules."""

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.bc_account.infrastructure.vault import SqlReserveVault
from src.bc_common.units import WAD
from src.bc_curve.domain.engine import CurveEngine
from src.bc_curve.domain.models import CurveParams
from src.bc_pool.domain.models import PoolConfig

FIXED_NOW = 1_760_000_000

CONTROLLER = "0x000000000000000000000000000000000000c0de"
FEE_RECIPIENT = "0x000000000000000000000000000000000000fee5"
LP_RECIPIENT = "0x000000000000000000000000000000000000dEaD"
VENUE = "0x000000000000000000000000000000000000a3e0"
ADMIN = "0x0000000000000000000000000000000000000a11"
ALICE = "0x00000000000000000000000000000000000a11ce"
BOB = "0x0000000000000000000000000000000000000b0b"

TOKEN = WAD
TRADING_ALLOCATION = 800_000_000 * TOKEN
LIQUIDITY_ALLOCATION = 200_000_000 * TOKEN


def make_config(**overrides: object) -> PoolConfig:
    values: dict[str, object] = {
        "total_issuance": TRADING_ALLOCATION + LIQUIDITY_ALLOCATION,
        "trading_allocation": TRADING_ALLOCATION,
        "liquidity_allocation": LIQUIDITY_ALLOCATION,
        "trade_fee_bps": 100,
        "liquidity_fee_bps": 300,
        "reserve_cap": 24 * WAD,
        "migration_threshold_bps": 9_900,
        "controller_address": CONTROLLER,
        "fee_recipient": FEE_RECIPIENT,
        "lp_recipient": LP_RECIPIENT,
        "admin_address": ADMIN,
    }
    values.update(overrides)
    return PoolConfig(**values)  # type: ignore[arg-type]


def make_engine(slope: int = 75, reserve_ratio: int = 500_000) -> CurveEngine:
    return CurveEngine(CurveParams(slope=slope, reserve_ratio=reserve_ratio))


def fixed_clock() -> int:
    return FIXED_NOW


async def fund(
    session_factory: async_sessionmaker[AsyncSession],
    vault: SqlReserveVault,
    holder: str,
    amount: int,
) -> None:
    async with session_factory.begin() as db:
        await vault.credit(db, holder, amount)
