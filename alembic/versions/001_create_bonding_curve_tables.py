"""001: create pool, token, reserve and liquidity tables

Revision ID: 001
Revises:
Create Date: 2026-10-17

Amounts are TEXT decimal strings: uint256 values do not fit in BIGINT.
"""
from typing import Sequence, Union

from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _serial_pk() -> str:
    if op.get_context().dialect.name == "postgresql":
        return "BIGSERIAL PRIMARY KEY"
    return "INTEGER PRIMARY KEY AUTOINCREMENT"


def upgrade() -> None:
    op.execute("""
        CREATE TABLE tokens (
            id              TEXT PRIMARY KEY,
            name            TEXT NOT NULL,
            symbol          TEXT NOT NULL,
            total_supply    TEXT NOT NULL,
            owner           TEXT,
            created_at      TEXT NOT NULL
        )
    """)
    op.execute("""
        CREATE TABLE token_balances (
            token_id        TEXT NOT NULL REFERENCES tokens(id),
            holder          TEXT NOT NULL,
            balance         TEXT NOT NULL,
            PRIMARY KEY (token_id, holder)
        )
    """)
    op.execute("""
        CREATE TABLE token_allowances (
            token_id        TEXT NOT NULL REFERENCES tokens(id),
            owner           TEXT NOT NULL,
            spender         TEXT NOT NULL,
            amount          TEXT NOT NULL,
            PRIMARY KEY (token_id, owner, spender)
        )
    """)
    op.execute("""
        CREATE TABLE reserve_accounts (
            holder          TEXT PRIMARY KEY,
            balance         TEXT NOT NULL,
            updated_at      TEXT NOT NULL
        )
    """)
    op.execute("""
        CREATE TABLE pools (
            id                  TEXT PRIMARY KEY REFERENCES tokens(id),
            seq                 INTEGER NOT NULL UNIQUE,
            name                TEXT NOT NULL,
            symbol              TEXT NOT NULL,
            creator             TEXT NOT NULL,
            phase               TEXT NOT NULL DEFAULT 'TRADING'
                                CHECK (phase IN ('TRADING', 'LISTED')),
            reserve_balance     TEXT NOT NULL DEFAULT '0',
            available_tokens    TEXT NOT NULL,
            created_at          TEXT NOT NULL,
            listed_at           TEXT,
            CHECK (phase = 'TRADING' OR (reserve_balance = '0' AND available_tokens = '0'))
        )
    """)
    op.execute(f"""
        CREATE TABLE pool_events (
            id              {_serial_pk()},
            pool_id         TEXT NOT NULL REFERENCES pools(id),
            event_type      TEXT NOT NULL
                            CHECK (event_type IN ('POOL_CREATED', 'TRADE_EXECUTED', 'MIGRATION_EXECUTED')),
            payload         TEXT NOT NULL,
            created_at      TEXT NOT NULL
        )
    """)
    op.execute("CREATE INDEX idx_pool_events_pool ON pool_events (pool_id, id)")
    op.execute("""
        CREATE TABLE liquidity_positions (
            token_id        TEXT PRIMARY KEY REFERENCES tokens(id),
            reserve_amount  TEXT NOT NULL,
            token_amount    TEXT NOT NULL,
            lp_supply       TEXT NOT NULL,
            updated_at      TEXT NOT NULL
        )
    """)
    op.execute("""
        CREATE TABLE lp_balances (
            token_id        TEXT NOT NULL REFERENCES tokens(id),
            holder          TEXT NOT NULL,
            balance         TEXT NOT NULL,
            PRIMARY KEY (token_id, holder)
        )
    """)


def downgrade() -> None:
    for table in (
        "lp_balances",
        "liquidity_positions",
        "pool_events",
        "pools",
        "reserve_accounts",
        "token_allowances",
        "token_balances",
        "tokens",
    ):
        op.execute(f"DROP TABLE IF EXISTS {table}")
