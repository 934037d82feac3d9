"""SqlTokenLedger: fungible-token ledger over the tokens / token_balances /
token_allowances tables.

Every method runs inside the caller's transaction. Transfers report failure
by returning False (standard fungible-ledger semantics); the caller decides
whether that aborts the whole call.
"""
import logging

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.datetime_utils import utc_now
from src.bc_common.errors import InvalidArgumentError, NotAuthorizedError
from src.bc_common.units import decode_amount, encode_amount

logger = logging.getLogger(__name__)

_INSERT_TOKEN_SQL = text("""
    INSERT INTO tokens (id, name, symbol, total_supply, owner, created_at)
    VALUES (:id, :name, :symbol, :total_supply, :owner, :created_at)
""")

_GET_TOKEN_OWNER_SQL = text("SELECT id, owner FROM tokens WHERE id = :token_id")

_CLEAR_OWNER_SQL = text("UPDATE tokens SET owner = NULL WHERE id = :token_id")

_GET_BALANCE_SQL = text("""
    SELECT balance FROM token_balances
    WHERE token_id = :token_id AND holder = :holder
""")

_UPSERT_BALANCE_SQL = text("""
    INSERT INTO token_balances (token_id, holder, balance)
    VALUES (:token_id, :holder, :balance)
    ON CONFLICT (token_id, holder) DO UPDATE SET balance = :balance
""")

_GET_ALLOWANCE_SQL = text("""
    SELECT amount FROM token_allowances
    WHERE token_id = :token_id AND owner = :owner AND spender = :spender
""")

_UPSERT_ALLOWANCE_SQL = text("""
    INSERT INTO token_allowances (token_id, owner, spender, amount)
    VALUES (:token_id, :owner, :spender, :amount)
    ON CONFLICT (token_id, owner, spender) DO UPDATE SET amount = :amount
""")


class SqlTokenLedger:
    async def mint_initial(
        self,
        db: AsyncSession,
        token_id: str,
        name: str,
        symbol: str,
        owner: str,
        holder: str,
        total_supply: int,
    ) -> None:
        """Create the token with its entire issuance credited to `holder`.

        `owner` holds the privileged role (privileged_transfer) until revoked.
        """
        existing = (await db.execute(_GET_TOKEN_OWNER_SQL, {"token_id": token_id})).fetchone()
        if existing is not None:
            raise InvalidArgumentError(f"token {token_id} already exists")
        await db.execute(
            _INSERT_TOKEN_SQL,
            {
                "id": token_id,
                "name": name,
                "symbol": symbol,
                "total_supply": encode_amount(total_supply),
                "owner": owner,
                "created_at": utc_now().isoformat(),
            },
        )
        await self._set_balance(db, token_id, holder, total_supply)
        logger.debug("Token minted: id=%s supply=%d holder=%s", token_id, total_supply, holder)

    async def balance_of(self, db: AsyncSession, token_id: str, holder: str) -> int:
        row = (
            await db.execute(_GET_BALANCE_SQL, {"token_id": token_id, "holder": holder})
        ).fetchone()
        return decode_amount(row.balance) if row else 0

    async def allowance(self, db: AsyncSession, token_id: str, owner: str, spender: str) -> int:
        row = (
            await db.execute(
                _GET_ALLOWANCE_SQL,
                {"token_id": token_id, "owner": owner, "spender": spender},
            )
        ).fetchone()
        return decode_amount(row.amount) if row else 0

    async def approve(
        self, db: AsyncSession, token_id: str, owner: str, spender: str, amount: int
    ) -> None:
        await db.execute(
            _UPSERT_ALLOWANCE_SQL,
            {
                "token_id": token_id,
                "owner": owner,
                "spender": spender,
                "amount": encode_amount(amount),
            },
        )

    async def transfer(
        self, db: AsyncSession, token_id: str, sender: str, recipient: str, amount: int
    ) -> bool:
        return await self._move(db, token_id, sender, recipient, amount)

    async def transfer_from(
        self,
        db: AsyncSession,
        token_id: str,
        spender: str,
        owner: str,
        recipient: str,
        amount: int,
    ) -> bool:
        """Move `amount` from `owner` on behalf of `spender`, consuming allowance."""
        allowed = await self.allowance(db, token_id, owner, spender)
        if allowed < amount:
            return False
        if not await self._move(db, token_id, owner, recipient, amount):
            return False
        await self.approve(db, token_id, owner, spender, allowed - amount)
        return True

    async def privileged_transfer(
        self,
        db: AsyncSession,
        token_id: str,
        caller: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> bool:
        """Owner-gated transfer out of any holder (used for the token's own balance)."""
        if await self.privileged_owner(db, token_id) != caller:
            return False
        return await self._move(db, token_id, sender, recipient, amount)

    async def privileged_owner(self, db: AsyncSession, token_id: str) -> str | None:
        row = (await db.execute(_GET_TOKEN_OWNER_SQL, {"token_id": token_id})).fetchone()
        return row.owner if row else None

    async def revoke_privileged_role(self, db: AsyncSession, token_id: str, caller: str) -> None:
        """One-way: clears the owner. No method sets it again."""
        if await self.privileged_owner(db, token_id) != caller:
            raise NotAuthorizedError(caller)
        await db.execute(_CLEAR_OWNER_SQL, {"token_id": token_id})
        logger.info("Token privileged role revoked: id=%s", token_id)

    async def _move(
        self, db: AsyncSession, token_id: str, sender: str, recipient: str, amount: int
    ) -> bool:
        if amount < 0:
            return False
        sender_balance = await self.balance_of(db, token_id, sender)
        if sender_balance < amount:
            return False
        if amount == 0 or sender == recipient:
            return True
        recipient_balance = await self.balance_of(db, token_id, recipient)
        await self._set_balance(db, token_id, sender, sender_balance - amount)
        await self._set_balance(db, token_id, recipient, recipient_balance + amount)
        return True

    async def _set_balance(self, db: AsyncSession, token_id: str, holder: str, balance: int) -> None:
        await db.execute(
            _UPSERT_BALANCE_SQL,
            {"token_id": token_id, "holder": holder, "balance": encode_amount(balance)},
        )
