"""
Order Models: Order.
"""

from __future__ import annotations

from typing import Any, Optional

from sqlalchemy import JSON, CheckConstraint, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from shared.config.constants import OrderStatus, PaymentMethod, PaymentStatus
from .base import Base, IdType, TimestampMixin


class Order(TimestampMixin, Base):
    """
    A checkout order, recorded before its payment settles.

    reference_paiement joins the order with the client verification call and
    with gateway webhooks. statut_paiement only moves through the payment
    state machine (conditional updates in OrderRepository).
    """

    __tablename__ = "orders"

    id: Mapped[int] = mapped_column(IdType, primary_key=True)
    order_number: Mapped[str] = mapped_column(String(20), nullable=False, unique=True)
    reference_paiement: Mapped[str] = mapped_column(String(100), nullable=False, unique=True)
    statut_paiement: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentStatus.EN_ATTENTE, index=True
    )
    statut: Mapped[str] = mapped_column(String(20), nullable=False, default=OrderStatus.BROUILLON)
    methode_paiement: Mapped[str] = mapped_column(
        String(20), nullable=False, default=PaymentMethod.PAYSTACK
    )

    # Whole currency units
    subtotal: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    delivery_fee: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    amount: Mapped[int] = mapped_column(Integer, nullable=False)
    currency: Mapped[str] = mapped_column(String(3), nullable=False, default="XOF")

    user_id: Mapped[Optional[str]] = mapped_column(String(64), index=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String(255))
    items: Mapped[list[dict[str, Any]]] = mapped_column(JSON, nullable=False, default=list)
    delivery_info: Mapped[dict[str, Any]] = mapped_column(JSON, nullable=False, default=dict)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="chk_order_amount_non_negative"),
        CheckConstraint(
            "statut_paiement IN ('en_attente', 'paye', 'echoue')",
            name="chk_order_statut_paiement",
        ),
        Index("ix_orders_user_created", "user_id", "created_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Order(id={self.id}, number={self.order_number}, "
            f"amount={self.amount}, statut_paiement={self.statut_paiement})>"
        )
