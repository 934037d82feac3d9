# src/bc_admin/application/service.py
"""Admin application service: gated changes to process-wide pool parameters."""
import logging

from src.bc_common.addresses import validate_recipient
from src.bc_common.errors import (
    InvalidArgumentError,
    InvalidFeeRateError,
    NotAuthorizedError,
    ZeroAmountError,
)
from src.bc_curve.domain.engine import CurveEngine
from src.bc_pool.application.schemas import MigrationReceipt
from src.bc_pool.application.service import PoolController
from src.bc_pool.domain.models import MAX_LIQUIDITY_FEE_BPS
from src.bc_pool.domain.ports import LiquidityVenueProtocol

logger = logging.getLogger(__name__)


class AdminService:
    def __init__(self, controller: PoolController) -> None:
        self._controller = controller

    def _authorize(self, operator: str) -> None:
        if operator != self._controller.config.admin_address:
            raise NotAuthorizedError(operator)

    async def set_fee_recipient(self, operator: str, recipient: str) -> None:
        self._authorize(operator)
        validate_recipient(recipient)
        async with self._controller.exclusive():
            previous = self._controller.config.fee_recipient
            self._controller.config.fee_recipient = recipient
        logger.info("Fee recipient changed: %s -> %s", previous, recipient)

    async def set_liquidity_fee_bps(self, operator: str, fee_bps: int) -> None:
        self._authorize(operator)
        if not 0 <= fee_bps <= MAX_LIQUIDITY_FEE_BPS:
            raise InvalidFeeRateError(fee_bps, MAX_LIQUIDITY_FEE_BPS)
        async with self._controller.exclusive():
            previous = self._controller.config.liquidity_fee_bps
            self._controller.config.liquidity_fee_bps = fee_bps
        logger.info("Liquidity fee changed: %d -> %d bps", previous, fee_bps)

    async def set_reserve_cap(self, operator: str, reserve_cap: int) -> None:
        """The new cap must stay above every trading pool's current reserve.

        A pool whose reserve equals the cap could neither buy nor reach the
        post-buy migration check.
        """
        self._authorize(operator)
        if reserve_cap <= 0:
            raise ZeroAmountError("reserve_cap")
        async with self._controller.exclusive() as db:
            highest = await self._controller.repo.max_trading_reserve(db)
            if reserve_cap <= highest:
                raise InvalidArgumentError(
                    f"reserve cap {reserve_cap} not above trading pool reserve {highest}"
                )
            previous = self._controller.config.reserve_cap
            self._controller.config.reserve_cap = reserve_cap
        logger.info("Reserve cap changed: %d -> %d", previous, reserve_cap)

    async def set_curve_engine(self, operator: str, engine: CurveEngine) -> None:
        self._authorize(operator)
        async with self._controller.exclusive():
            self._controller.replace_engine(engine)
        logger.info(
            "Curve engine replaced: slope=%d reserve_ratio=%d",
            engine.slope, engine.reserve_ratio,
        )

    async def set_liquidity_venue(self, operator: str, venue: LiquidityVenueProtocol) -> None:
        self._authorize(operator)
        async with self._controller.exclusive():
            self._controller.replace_venue(venue)
        logger.info("Liquidity venue replaced: address=%s", venue.address)

    async def trigger_migration(self, operator: str, pool_id: str) -> MigrationReceipt:
        self._authorize(operator)
        receipt = await self._controller.migrate(pool_id)
        logger.info("Migration triggered by admin: pool=%s", pool_id)
        return receipt
