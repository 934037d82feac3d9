"""Composition root: wires the pool controller from settings.

Usage:
    controller = build_pool_controller()
    admin = AdminService(controller)
"""

import logging

from sqlalchemy import text

from config.settings import settings
from src.bc_account.infrastructure.vault import SqlReserveVault
from src.bc_common.database import async_session_factory, engine
from src.bc_curve.domain.engine import CurveEngine
from src.bc_curve.domain.models import CurveParams
from src.bc_liquidity.infrastructure.venue import SqlLiquidityVenue
from src.bc_pool.application.service import PoolController
from src.bc_pool.domain.models import PoolConfig
from src.bc_token.infrastructure.ledger import SqlTokenLedger

logger = logging.getLogger(__name__)


def build_pool_controller() -> PoolController:
    ledger = SqlTokenLedger()
    vault = SqlReserveVault()
    venue = SqlLiquidityVenue(ledger, vault, settings.LIQUIDITY_VENUE_ADDRESS)
    curve = CurveEngine(
        CurveParams(slope=settings.CURVE_SLOPE, reserve_ratio=settings.CURVE_RESERVE_RATIO)
    )
    controller = PoolController(
        session_factory=async_session_factory,
        engine=curve,
        config=PoolConfig.from_settings(settings),
        ledger=ledger,
        vault=vault,
        venue=venue,
    )
    logger.info(
        "%s: controller=%s slope=%d reserve_ratio=%d",
        settings.APP_NAME, settings.CONTROLLER_ADDRESS,
        settings.CURVE_SLOPE, settings.CURVE_RESERVE_RATIO,
    )
    return controller


async def check_database() -> None:
    """Fail fast when DATABASE_URL is unreachable."""
    async with engine.connect() as conn:
        await conn.execute(text("SELECT 1"))
