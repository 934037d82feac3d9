"""PoolRepository: concrete implementation of PoolRepositoryProtocol.

All queries use raw text() SQL (no ORM). Amounts are decimal TEXT columns and
timestamps are ISO-8601 TEXT, converted at the row-mapper boundary.
"""

from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.enums import PoolPhase
from src.bc_common.units import decode_amount, encode_amount
from src.bc_pool.domain.models import Pool

# ---------------------------------------------------------------------------
# SQL
# ---------------------------------------------------------------------------

_POOL_COLUMNS = """
    id, seq, name, symbol, creator, phase,
    reserve_balance, available_tokens, created_at, listed_at
"""

_NEXT_SEQ_SQL = text("SELECT COALESCE(MAX(seq), 0) + 1 FROM pools")

_INSERT_POOL_SQL = text("""
    INSERT INTO pools (id, seq, name, symbol, creator, phase,
                       reserve_balance, available_tokens, created_at, listed_at)
    VALUES (:id, :seq, :name, :symbol, :creator, :phase,
            :reserve_balance, :available_tokens, :created_at, :listed_at)
""")

_GET_POOL_SQL = text(f"SELECT {_POOL_COLUMNS} FROM pools WHERE id = :pool_id")

_UPDATE_STATE_SQL = text("""
    UPDATE pools
    SET phase = :phase,
        reserve_balance = :reserve_balance,
        available_tokens = :available_tokens,
        listed_at = :listed_at
    WHERE id = :id
""")

_LIST_POOLS_SQL = text(f"""
    SELECT {_POOL_COLUMNS}
    FROM pools
    WHERE CAST(:phase AS TEXT) IS NULL OR phase = CAST(:phase AS TEXT)
    ORDER BY seq ASC
    LIMIT :limit OFFSET :offset
""")

_COUNT_POOLS_SQL = text("""
    SELECT COUNT(*) FROM pools
    WHERE CAST(:phase AS TEXT) IS NULL OR phase = CAST(:phase AS TEXT)
""")

_TRADING_RESERVES_SQL = text("SELECT reserve_balance FROM pools WHERE phase = 'TRADING'")

# ---------------------------------------------------------------------------
# Row mappers
# ---------------------------------------------------------------------------


def _parse_ts(raw: str | datetime | None) -> datetime | None:
    if raw is None or isinstance(raw, datetime):
        return raw
    return datetime.fromisoformat(raw)


def _row_to_pool(row: Any) -> Pool:
    created_at = _parse_ts(row.created_at)
    assert created_at is not None
    return Pool(
        id=row.id,
        seq=row.seq,
        name=row.name,
        symbol=row.symbol,
        creator=row.creator,
        phase=row.phase,
        reserve_balance=decode_amount(row.reserve_balance),
        available_tokens=decode_amount(row.available_tokens),
        created_at=created_at,
        listed_at=_parse_ts(row.listed_at),
    )


def _state_params(pool: Pool) -> dict[str, Any]:
    return {
        "id": pool.id,
        "phase": PoolPhase(pool.phase).value,
        "reserve_balance": encode_amount(pool.reserve_balance),
        "available_tokens": encode_amount(pool.available_tokens),
        "listed_at": pool.listed_at.isoformat() if pool.listed_at else None,
    }


# ---------------------------------------------------------------------------
# Repository
# ---------------------------------------------------------------------------


class PoolRepository:
    async def insert(self, db: AsyncSession, pool: Pool) -> Pool:
        """Insert a new pool, assigning the next enumeration seq."""
        pool.seq = (await db.execute(_NEXT_SEQ_SQL)).scalar_one()
        await db.execute(
            _INSERT_POOL_SQL,
            {
                **_state_params(pool),
                "seq": pool.seq,
                "name": pool.name,
                "symbol": pool.symbol,
                "creator": pool.creator,
                "created_at": pool.created_at.isoformat(),
            },
        )
        return pool

    async def get(self, db: AsyncSession, pool_id: str) -> Pool | None:
        row = (await db.execute(_GET_POOL_SQL, {"pool_id": pool_id})).fetchone()
        return _row_to_pool(row) if row else None

    async def update_state(self, db: AsyncSession, pool: Pool) -> None:
        await db.execute(_UPDATE_STATE_SQL, _state_params(pool))

    async def list_pools(
        self,
        db: AsyncSession,
        phase: str | None,
        offset: int,
        limit: int,
    ) -> list[Pool]:
        result = await db.execute(
            _LIST_POOLS_SQL, {"phase": phase, "offset": offset, "limit": limit}
        )
        return [_row_to_pool(row) for row in result.fetchall()]

    async def count(self, db: AsyncSession, phase: str | None) -> int:
        return (await db.execute(_COUNT_POOLS_SQL, {"phase": phase})).scalar_one()

    async def max_trading_reserve(self, db: AsyncSession) -> int:
        # TEXT amounts do not order numerically in SQL
        rows = (await db.execute(_TRADING_RESERVES_SQL)).fetchall()
        return max((decode_amount(row.reserve_balance) for row in rows), default=0)
