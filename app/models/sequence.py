"""
Square 15 - Sequence Counter Model

One row per document series (payment requests, quotations). The value is
the last number handed out.
"""

from sqlalchemy import BigInteger, String
from sqlalchemy.orm import Mapped, mapped_column

from app.database import Base


class SequenceCounter(Base):
    """Monotonic counter backing human-readable document numbers."""

    __tablename__ = "sequence_counters"

    name: Mapped[str] = mapped_column(String(50), primary_key=True)
    value: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    def __repr__(self) -> str:
        return f"<SequenceCounter(name={self.name}, value={self.value})>"
