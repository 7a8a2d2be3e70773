"""
Payment Log Repository - charges received before their order.
"""

from typing import Sequence

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from rest_api.models import PaymentLog
from shared.config.constants import PaymentLogStatus
from .base import BaseRepository


class PaymentLogRepository(BaseRepository[PaymentLog]):
    """Repository for PaymentLog entities."""

    @property
    def model(self) -> type[PaymentLog]:
        return PaymentLog

    def insert(self, entry: PaymentLog) -> bool:
        """
        Insert a log entry unless one exists for (reference, status).

        Returns False for a duplicate. A duplicate committed concurrently
        surfaces as an IntegrityError on flush; the session is rolled back,
        so call this before any other write of the unit of work.
        """
        if self.find(entry.reference, entry.status) is not None:
            return False

        self._db.add(entry)
        try:
            self._db.flush()
        except IntegrityError:
            self._db.rollback()
            return False
        return True

    def find(self, reference: str, status: str) -> PaymentLog | None:
        return self._db.scalar(
            select(PaymentLog).where(
                PaymentLog.reference == reference,
                PaymentLog.status == status,
            )
        )

    def find_unprocessed(
        self,
        reference: str | None = None,
        status: str = PaymentLogStatus.SUCCESS,
    ) -> Sequence[PaymentLog]:
        """Unprocessed entries, oldest first, optionally for one reference."""
        query = select(PaymentLog).where(
            PaymentLog.processed.is_(False),
            PaymentLog.status == status,
        )
        if reference is not None:
            query = query.where(PaymentLog.reference == reference)
        return self._db.execute(query.order_by(PaymentLog.id)).scalars().all()

    def mark_processed(self, entry_id: int) -> bool:
        """processed false -> true; False if another worker got there first."""
        result = self._db.execute(
            update(PaymentLog)
            .where(PaymentLog.id == entry_id, PaymentLog.processed.is_(False))
            .values(processed=True)
            .execution_options(synchronize_session=False)
        )
        entry = self._db.get(PaymentLog, entry_id)
        if entry is not None:
            self._db.refresh(entry)
        return result.rowcount == 1
