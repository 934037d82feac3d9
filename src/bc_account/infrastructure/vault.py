"""SqlReserveVault: native reserve-asset accounts (the value sent with calls).

Within the caller's transaction. transfer() returns False on insufficient
funds instead of raising; payouts that fail are turned into
TransferFailedError by the pool controller.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.datetime_utils import utc_now
from src.bc_common.errors import ZeroAmountError
from src.bc_common.units import decode_amount, encode_amount

logger = logging.getLogger(__name__)

_GET_BALANCE_SQL = text("SELECT balance FROM reserve_accounts WHERE holder = :holder")

_UPSERT_BALANCE_SQL = text("""
    INSERT INTO reserve_accounts (holder, balance, updated_at)
    VALUES (:holder, :balance, :updated_at)
    ON CONFLICT (holder) DO UPDATE SET balance = :balance, updated_at = :updated_at
""")


class SqlReserveVault:
    async def balance_of(self, db: AsyncSession, holder: str) -> int:
        row = (await db.execute(_GET_BALANCE_SQL, {"holder": holder})).fetchone()
        return decode_amount(row.balance) if row else 0

    async def credit(self, db: AsyncSession, holder: str, amount: int) -> int:
        """Fund an account from outside the system. Returns the new balance."""
        if amount <= 0:
            raise ZeroAmountError("credit amount")
        new_balance = await self.balance_of(db, holder) + amount
        await self._set_balance(db, holder, new_balance)
        logger.info("Reserve credited: holder=%s amount=%d balance=%d", holder, amount, new_balance)
        return new_balance

    async def transfer(self, db: AsyncSession, sender: str, recipient: str, amount: int) -> bool:
        if amount < 0:
            return False
        sender_balance = await self.balance_of(db, sender)
        if sender_balance < amount:
            logger.debug(
                "Reserve transfer refused: sender=%s balance=%d amount=%d",
                sender, sender_balance, amount,
            )
            return False
        if amount == 0 or sender == recipient:
            return True
        recipient_balance = await self.balance_of(db, recipient)
        await self._set_balance(db, sender, sender_balance - amount)
        await self._set_balance(db, recipient, recipient_balance + amount)
        return True

    async def _set_balance(self, db: AsyncSession, holder: str, balance: int) -> None:
        await db.execute(
            _UPSERT_BALANCE_SQL,
            {
                "holder": holder,
                "balance": encode_amount(balance),
                "updated_at": utc_now().isoformat(),
            },
        )
