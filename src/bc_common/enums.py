"""Global enums. Values must match the DB CHECK constraints in alembic 001."""

from enum import Enum


class PoolPhase(str, Enum):
    """One-way: TRADING → LISTED. LISTED is terminal."""
    TRADING = "TRADING"
    LISTED = "LISTED"


class TradeDirection(str, Enum):
    BUY = "BUY"
    SELL = "SELL"


class PoolEventType(str, Enum):
    POOL_CREATED = "POOL_CREATED"
    TRADE_EXECUTED = "TRADE_EXECUTED"
    MIGRATION_EXECUTED = "MIGRATION_EXECUTED"


class AssetKind(str, Enum):
    """Asset label used in transfer failures and logs."""
    RESERVE = "RESERVE"
    TOKEN = "TOKEN"
