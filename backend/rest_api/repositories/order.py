"""
Order Repository - Data access for checkout orders.

update_payment_status is the only write path for statut_paiement: a
conditional UPDATE whose row count tells the caller whether it won.
"""

from sqlalchemy import select, update

from rest_api.models import Order
from .base import BaseRepository


class OrderRepository(BaseRepository[Order]):
    """Repository for Order entities."""

    @property
    def model(self) -> type[Order]:
        return Order

    def find_by_reference(self, reference: str) -> Order | None:
        return self._db.scalar(
            select(Order).where(Order.reference_paiement == reference)
        )

    def find_by_number(self, order_number: str) -> Order | None:
        return self._db.scalar(
            select(Order).where(Order.order_number == order_number)
        )

    def number_exists(self, order_number: str) -> bool:
        return self._db.scalar(
            select(Order.id).where(Order.order_number == order_number)
        ) is not None

    def save(self, order: Order) -> Order:
        return self.add(order)

    def update_payment_status(
        self,
        order_id: int,
        to_status: str,
        from_statuses: frozenset[str],
        order_status: str | None = None,
    ) -> bool:
        """
        Move an order to `to_status` only if it is still in one of
        `from_statuses`. Returns True when this call changed the row.
        """
        if not from_statuses:
            return False

        values: dict[str, str] = {"statut_paiement": to_status}
        if order_status is not None:
            values["statut"] = order_status

        result = self._db.execute(
            update(Order)
            .where(
                Order.id == order_id,
                Order.statut_paiement.in_(sorted(from_statuses)),
            )
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        changed = result.rowcount == 1

        # Loaded instances must not keep the pre-update status
        order = self._db.get(Order, order_id)
        if order is not None:
            self._db.refresh(order)

        return changed
