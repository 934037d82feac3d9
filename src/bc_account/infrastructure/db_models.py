"""SQLAlchemy ORM model for the reserve_accounts table.

vault.py uses raw text() SQL; alembic 001 is the authoritative DDL source.
"""

from sqlalchemy import Text
from sqlalchemy.orm import Mapped, mapped_column

from src.bc_common.database import Base


class ReserveAccountORM(Base):
    __tablename__ = "reserve_accounts"

    holder: Mapped[str] = mapped_column(Text, primary_key=True)
    balance: Mapped[str] = mapped_column(Text, nullable=False)  # base units, decimal string
    updated_at: Mapped[str] = mapped_column(Text, nullable=False)
