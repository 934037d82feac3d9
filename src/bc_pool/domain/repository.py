# src/bc_pool/domain/repository.py
"""Repository Protocol, so unit tests can inject a mock."""

from typing import Protocol

from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_pool.domain.models import Pool


class PoolRepositoryProtocol(Protocol):
    async def insert(self, db: AsyncSession, pool: Pool) -> Pool: ...

    async def get(self, db: AsyncSession, pool_id: str) -> Pool | None: ...

    async def update_state(self, db: AsyncSession, pool: Pool) -> None: ...

    async def list_pools(
        self,
        db: AsyncSession,
        phase: str | None,
        offset: int,
        limit: int,
    ) -> list[Pool]: ...

    async def count(self, db: AsyncSession, phase: str | None) -> int: ...

    async def max_trading_reserve(self, db: AsyncSession) -> int: ...
