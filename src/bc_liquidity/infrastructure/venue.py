"""SqlLiquidityVenue: the external AMM as seen by the pool controller.

Only the deposit side is modelled: a token/reserve pair is added to the pair's
position and LP shares are issued to a recipient. Deposits into an existing
position are trimmed to the current ratio (router-style optimal amounts), so
the receipt may report less than was offered.
"""
import logging
import math
from collections.abc import Callable
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.datetime_utils import unix_now, utc_now
from src.bc_common.enums import AssetKind
from src.bc_common.errors import InvalidArgumentError, TransferFailedError
from src.bc_common.units import decode_amount, encode_amount
from src.bc_pool.domain.ports import (
    LiquidityReceipt,
    ReserveVaultProtocol,
    TokenLedgerProtocol,
)

logger = logging.getLogger(__name__)

_GET_POSITION_SQL = text("""
    SELECT token_id, reserve_amount, token_amount, lp_supply
    FROM liquidity_positions WHERE token_id = :token_id
""")

_UPSERT_POSITION_SQL = text("""
    INSERT INTO liquidity_positions (token_id, reserve_amount, token_amount, lp_supply, updated_at)
    VALUES (:token_id, :reserve_amount, :token_amount, :lp_supply, :updated_at)
    ON CONFLICT (token_id) DO UPDATE SET
        reserve_amount = :reserve_amount,
        token_amount = :token_amount,
        lp_supply = :lp_supply,
        updated_at = :updated_at
""")

_GET_LP_BALANCE_SQL = text("""
    SELECT balance FROM lp_balances WHERE token_id = :token_id AND holder = :holder
""")

_UPSERT_LP_BALANCE_SQL = text("""
    INSERT INTO lp_balances (token_id, holder, balance)
    VALUES (:token_id, :holder, :balance)
    ON CONFLICT (token_id, holder) DO UPDATE SET balance = :balance
""")


class SqlLiquidityVenue:
    def __init__(
        self,
        ledger: TokenLedgerProtocol,
        vault: ReserveVaultProtocol,
        address: str,
        clock: Callable[[], int] = unix_now,
    ) -> None:
        self._ledger = ledger
        self._vault = vault
        self._address = address
        self._clock = clock

    @property
    def address(self) -> str:
        return self._address

    async def add_liquidity(
        self,
        db: AsyncSession,
        token_id: str,
        reserve_amount: int,
        token_amount: int,
        min_reserve: int,
        min_token: int,
        recipient: str,
        deadline: int,
        sender: str,
    ) -> LiquidityReceipt:
        if self._clock() > deadline:
            raise InvalidArgumentError(f"liquidity deadline {deadline} expired")

        row: Any = (await db.execute(_GET_POSITION_SQL, {"token_id": token_id})).fetchone()
        pos_reserve = decode_amount(row.reserve_amount) if row else 0
        pos_token = decode_amount(row.token_amount) if row else 0
        lp_supply = decode_amount(row.lp_supply) if row else 0

        if pos_reserve == 0 or pos_token == 0:
            token_used, reserve_used = token_amount, reserve_amount
        else:
            reserve_optimal = token_amount * pos_reserve // pos_token
            if reserve_optimal <= reserve_amount:
                token_used, reserve_used = token_amount, reserve_optimal
            else:
                token_used = reserve_amount * pos_token // pos_reserve
                reserve_used = reserve_amount

        if token_used < min_token or reserve_used < min_reserve:
            raise InvalidArgumentError(
                f"deposit ({token_used}, {reserve_used}) below minimum ({min_token}, {min_reserve})"
            )

        pulled = await self._ledger.transfer_from(
            db, token_id, self._address, sender, self._address, token_used
        )
        if not pulled:
            raise TransferFailedError(AssetKind.TOKEN.value, sender, self._address, token_used)
        if not await self._vault.transfer(db, sender, self._address, reserve_used):
            raise TransferFailedError(AssetKind.RESERVE.value, sender, self._address, reserve_used)

        if lp_supply == 0:
            lp_issued = math.isqrt(token_used * reserve_used)
        else:
            lp_issued = min(
                token_used * lp_supply // pos_token,
                reserve_used * lp_supply // pos_reserve,
            )

        await db.execute(
            _UPSERT_POSITION_SQL,
            {
                "token_id": token_id,
                "reserve_amount": encode_amount(pos_reserve + reserve_used),
                "token_amount": encode_amount(pos_token + token_used),
                "lp_supply": encode_amount(lp_supply + lp_issued),
                "updated_at": utc_now().isoformat(),
            },
        )
        await self._credit_lp(db, token_id, recipient, lp_issued)

        logger.info(
            "Liquidity added: token=%s reserve=%d tokens=%d lp=%d recipient=%s",
            token_id, reserve_used, token_used, lp_issued, recipient,
        )
        return LiquidityReceipt(token_used=token_used, reserve_used=reserve_used, lp_issued=lp_issued)

    async def lp_balance_of(self, db: AsyncSession, token_id: str, holder: str) -> int:
        row = (
            await db.execute(_GET_LP_BALANCE_SQL, {"token_id": token_id, "holder": holder})
        ).fetchone()
        return decode_amount(row.balance) if row else 0

    async def _credit_lp(self, db: AsyncSession, token_id: str, holder: str, amount: int) -> None:
        balance = await self.lp_balance_of(db, token_id, holder)
        await db.execute(
            _UPSERT_LP_BALANCE_SQL,
            {"token_id": token_id, "holder": holder, "balance": encode_amount(balance + amount)},
        )
