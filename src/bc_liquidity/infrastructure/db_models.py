"""SQLAlchemy ORM models for the liquidity venue tables (mirror alembic 001)."""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from src.bc_common.database import Base


class LiquidityPositionORM(Base):
    __tablename__ = "liquidity_positions"

    token_id: Mapped[str] = mapped_column(Text, primary_key=True)
    reserve_amount: Mapped[str] = mapped_column(Text, nullable=False)
    token_amount: Mapped[str] = mapped_column(Text, nullable=False)
    lp_supply: Mapped[str] = mapped_column(Text, nullable=False)
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)


class LpBalanceORM(Base):
    __tablename__ = "lp_balances"

    token_id: Mapped[str] = mapped_column(Text, primary_key=True)
    holder: Mapped[str] = mapped_column(Text, primary_key=True)
    balance: Mapped[str] = mapped_column(Text, nullable=False)
