# src/bc_pool/domain/ports.py
"""Collaborator Protocols consumed by the pool controller.

The controller only talks to the token ledger, the reserve vault and the
liquidity venue through these interfaces. Every method receives the caller's
session so the whole call commits or rolls back as one unit.
"""

from dataclasses import dataclass
from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession


@dataclass(frozen=True)
class LiquidityReceipt:
    """Amounts the venue actually consumed for a deposit."""

    token_used: int
    reserve_used: int
    lp_issued: int


class TokenLedgerProtocol(Protocol):
    async def mint_initial(
        self,
        db: AsyncSession,
        token_id: str,
        name: str,
        symbol: str,
        owner: str,
        holder: str,
        total_supply: int,
    ) -> None: ...

    async def balance_of(self, db: AsyncSession, token_id: str, holder: str) -> int: ...

    async def approve(
        self, db: AsyncSession, token_id: str, owner: str, spender: str, amount: int
    ) -> None: ...

    async def transfer(
        self, db: AsyncSession, token_id: str, sender: str, recipient: str, amount: int
    ) -> bool: ...

    async def transfer_from(
        self,
        db: AsyncSession,
        token_id: str,
        spender: str,
        owner: str,
        recipient: str,
        amount: int,
    ) -> bool: ...

    async def privileged_transfer(
        self,
        db: AsyncSession,
        token_id: str,
        caller: str,
        sender: str,
        recipient: str,
        amount: int,
    ) -> bool: ...

    async def revoke_privileged_role(
        self, db: AsyncSession, token_id: str, caller: str
    ) -> None: ...


class ReserveVaultProtocol(Protocol):
    async def balance_of(self, db: AsyncSession, holder: str) -> int: ...

    async def transfer(
        self, db: AsyncSession, sender: str, recipient: str, amount: int
    ) -> bool: ...


class LiquidityVenueProtocol(Protocol):
    @property
    def address(self) -> str: ...

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
    ) -> LiquidityReceipt: ...
