"""
Payment Log Model: webhook charges received before their order existed.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Optional

from sqlalchemy import JSON, Boolean, DateTime, Integer, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from .base import Base, IdType, TimestampMixin


class PaymentLog(TimestampMixin, Base):
    """
    A settled charge whose order was not recorded yet.

    Written by the webhook when no order matches the reference; consumed
    (processed=True) once the order appears and the charge is applied.
    At most one row per (reference, status): redeliveries are no-ops.
    """

    __tablename__ = "payment_logs"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    reference: Mapped[str] = mapped_column(String(100), nullable=False, index=True)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    channel: Mapped[Optional[str]] = mapped_column(String(40))
    customer_email: Mapped[Optional[str]] = mapped_column(String(255))
    status: Mapped[str] = mapped_column(String(20), nullable=False)
    # "metadata" is reserved on declarative classes
    payment_metadata: Mapped[Optional[dict[str, Any]]] = mapped_column("metadata", JSON)
    paid_at: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True))
    processed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, index=True)

    __table_args__ = (
        UniqueConstraint("reference", "status", name="uq_payment_log_reference_status"),
    )

    def __repr__(self) -> str:
        return (
            f"<PaymentLog(id={self.id}, reference={self.reference}, "
            f"status={self.status}, processed={self.processed})>"
        )
