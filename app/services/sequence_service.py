"""
Square 15 - Sequence Service

Mints human-readable document numbers (PAY-00001, QUO-00001).

Numbers come from a per-series counter row bumped with a single
UPDATE ... RETURNING, so two concurrent callers never receive the same
value. A series without a counter row is seeded from the highest number
already issued in its table (or the row count, if larger), continuing any
numbering that predates the counter. Numbers already taken by rows written
outside the counter are skipped.
"""

import logging
from typing import Optional

from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import InstrumentedAttribute

from app.config import settings
from app.models.sequence import SequenceCounter

logger = logging.getLogger(__name__)


PAYMENT_REQUEST_SERIES = "payment_request"
QUOTATION_SERIES = "quotation"

# Taken numbers skipped in one call before giving up
MAX_SKIPPED_NUMBERS = 1000


def format_sequence_number(prefix: str, value: int, padding: Optional[int] = None) -> str:
    """Format a counter value, e.g. ("PAY", 7) -> "PAY-00007"."""
    width = settings.sequence_padding if padding is None else padding
    return f"{prefix}-{value:0{width}d}"


def parse_sequence_number(prefix: str, number: str) -> Optional[int]:
    """"PAY-00007" -> 7; None for numbers outside the series."""
    head = f"{prefix}-"
    if not number or not number.startswith(head):
        return None
    suffix = number[len(head):]
    return int(suffix) if suffix.isdigit() else None


class SequenceService:
    """Atomic counters for document numbering."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def next_value(self, series: str, seed: int = 0) -> int:
        """
        Reserve the next value of a series.

        seed is the last value considered used when the series has no
        counter row yet. Runs inside the caller's transaction: the
        reservation is released if the caller rolls back.
        """
        result = await self.db.execute(
            update(SequenceCounter)
            .where(SequenceCounter.name == series)
            .values(value=SequenceCounter.value + 1)
            .returning(SequenceCounter.value)
        )
        value = result.scalar_one_or_none()
        if value is not None:
            return value

        # A concurrent first call loses on the primary key and surfaces as
        # IntegrityError to its caller.
        counter = SequenceCounter(name=series, value=seed + 1)
        self.db.add(counter)
        await self.db.flush()

        logger.info(f"Seeded sequence '{series}' at {counter.value}")
        return counter.value

    async def has_counter(self, series: str) -> bool:
        result = await self.db.execute(
            select(SequenceCounter.name).where(SequenceCounter.name == series)
        )
        return result.scalar_one_or_none() is not None

    async def highest_issued(self, column: InstrumentedAttribute, prefix: str) -> int:
        """Largest of the table's row count and the highest numeric suffix in column."""
        count_result = await self.db.execute(select(func.count()).select_from(column.class_))
        highest = count_result.scalar() or 0

        result = await self.db.execute(select(column).where(column.like(f"{prefix}-%")))
        for number in result.scalars():
            value = parse_sequence_number(prefix, number)
            if value is not None and value > highest:
                highest = value
        return highest

    async def next_document_number(
        self,
        series: str,
        prefix: str,
        column: InstrumentedAttribute,
    ) -> str:
        """
        Next free number of a series for the unique column holding it.

        Values whose number already exists in column are consumed and skipped.
        """
        seed = 0
        if not await self.has_counter(series):
            seed = await self.highest_issued(column, prefix)

        for _ in range(MAX_SKIPPED_NUMBERS):
            number = format_sequence_number(prefix, await self.next_value(series, seed=seed))
            taken = await self.db.execute(select(column).where(column == number).limit(1))
            if taken.scalar_one_or_none() is None:
                return number
            logger.warning(f"Sequence '{series}' skipped {number}: already in use")

        raise RuntimeError(
            f"Sequence '{series}' found no free number after {MAX_SKIPPED_NUMBERS} attempts"
        )

    async def next_payment_request_number(self) -> str:
        from app.models.payment_request import PaymentRequest

        return await self.next_document_number(
            PAYMENT_REQUEST_SERIES,
            settings.payment_request_prefix,
            PaymentRequest.request_number,
        )

    async def next_quotation_number(self) -> str:
        from app.models.quotation import Quotation

        return await self.next_document_number(
            QUOTATION_SERIES,
            settings.quotation_prefix,
            Quotation.quote_number,
        )
