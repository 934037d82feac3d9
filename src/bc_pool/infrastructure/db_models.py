"""SQLAlchemy ORM models for pools and pool_events (mirror alembic 001)."""

from sqlalchemy import Integer, Text
from sqlalchemy.orm import Mapped, mapped_column

from src.bc_common.database import Base


class PoolORM(Base):
    __tablename__ = "pools"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    seq: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    creator: Mapped[str] = mapped_column(Text, nullable=False)
    phase: Mapped[str] = mapped_column(Text, nullable=False, default="TRADING")
    reserve_balance: Mapped[str] = mapped_column(Text, nullable=False, default="0")
    available_tokens: Mapped[str] = mapped_column(Text, nullable=False)
    created_at: Mapped[str] = mapped_column(Text, nullable=False)
    listed_at: Mapped[str | None] = mapped_column(Text)


class PoolEventORM(Base):
    __tablename__ = "pool_events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    pool_id: Mapped[str] = mapped_column(Text, nullable=False, index=True)
    event_type: Mapped[str] = mapped_column(Text, nullable=False)
    payload: Mapped[str] = mapped_column(Text, nullable=False)  # JSON
    created_at: Mapped[str] = mapped_column(Text, nullable=False)
