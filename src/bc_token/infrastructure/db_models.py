"""SQLAlchemy ORM models for the token ledger tables.

ledger.py uses raw text() SQL; these models mirror alembic 001 so tests can
build the schema with Base.metadata.create_all.
"""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from src.bc_common.database import Base


class TokenORM(Base):
    __tablename__ = "tokens"

    id: Mapped[str] = mapped_column(Text, primary_key=True)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    symbol: Mapped[str] = mapped_column(Text, nullable=False)
    total_supply: Mapped[str] = mapped_column(Text, nullable=False)
    owner: Mapped[str | None] = mapped_column(Text)  # NULL once the privileged role is revoked
    created_at: Mapped[str] = mapped_column(Text, nullable=False)


class TokenBalanceORM(Base):
    __tablename__ = "token_balances"

    token_id: Mapped[str] = mapped_column(Text, primary_key=True)
    holder: Mapped[str] = mapped_column(Text, primary_key=True)
    balance: Mapped[str] = mapped_column(Text, nullable=False)


class TokenAllowanceORM(Base):
    __tablename__ = "token_allowances"

    token_id: Mapped[str] = mapped_column(Text, primary_key=True)
    owner: Mapped[str] = mapped_column(Text, primary_key=True)
    spender: Mapped[str] = mapped_column(Text, primary_key=True)
    amount: Mapped[str] = mapped_column(Text, nullable=False)
