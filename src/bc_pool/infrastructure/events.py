"""DB helpers for pool_events. Called by PoolController within its transaction."""

import json
import logging
from datetime import datetime
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.bc_common.datetime_utils import utc_now
from src.bc_common.enums import PoolEventType
from src.bc_pool.domain.models import PoolEvent

logger = logging.getLogger(__name__)

_INSERT_EVENT_SQL = text("""
    INSERT INTO pool_events (pool_id, event_type, payload, created_at)
    VALUES (:pool_id, :event_type, :payload, :created_at)
""")

_LIST_EVENTS_SQL = text("""
    SELECT id, pool_id, event_type, payload, created_at
    FROM pool_events
    WHERE pool_id = :pool_id
    ORDER BY id ASC
    LIMIT :limit
""")


async def write_pool_event(
    db: AsyncSession,
    pool_id: str,
    event_type: PoolEventType,
    payload: dict[str, object],
) -> None:
    """Insert one event row. Integer amounts are stored as strings in the JSON."""
    encoded = {k: str(v) if isinstance(v, int) and not isinstance(v, bool) else v
               for k, v in payload.items()}
    await db.execute(
        _INSERT_EVENT_SQL,
        {
            "pool_id": pool_id,
            "event_type": event_type.value,
            "payload": json.dumps(encoded),
            "created_at": utc_now().isoformat(),
        },
    )
    logger.info("Pool event: %s pool=%s %s", event_type.value, pool_id, encoded)


async def list_pool_events(db: AsyncSession, pool_id: str, limit: int) -> list[PoolEvent]:
    rows = (await db.execute(_LIST_EVENTS_SQL, {"pool_id": pool_id, "limit": limit})).fetchall()
    events = []
    for row in rows:
        row_any: Any = row
        events.append(
            PoolEvent(
                id=row_any.id,
                pool_id=row_any.pool_id,
                event_type=row_any.event_type,
                payload=json.loads(row_any.payload),
                created_at=datetime.fromisoformat(row_any.created_at),
            )
        )
    return events
