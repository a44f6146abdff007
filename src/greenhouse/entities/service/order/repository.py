"""Order repository."""

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, col, select

from src.greenhouse.core.errors import DuplicatePaymentError
from src.greenhouse.entities.core._base import normalize_email
from src.greenhouse.entities.service.order.entity import Order, OrderStatus
from src.greenhouse.entities.service.order.table import OrderTable
from src.greenhouse.entities.service.plant.entity import Seller


def _to_entity(row: OrderTable) -> Order:
    return Order(
        id=row.id,
        plant_id=row.plant_id,
        transaction_id=row.transaction_id,
        customer=row.customer,
        seller=Seller(name=row.seller_name, email=row.seller_email, image=row.seller_image),
        name=row.name,
        category=row.category,
        image=row.image,
        quantity=row.quantity,
        price=row.price,
        status=OrderStatus(row.status),
        date=row.date,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_row(order: Order) -> OrderTable:
    return OrderTable(
        id=order.id,
        plant_id=order.plant_id,
        transaction_id=order.transaction_id,
        customer=normalize_email(str(order.customer)),
        seller_name=order.seller.name,
        seller_email=normalize_email(str(order.seller.email)),
        seller_image=order.seller.image,
        name=order.name,
        category=order.category,
        image=order.image,
        quantity=order.quantity,
        price=order.price,
        status=order.status.value,
        date=order.date,
        created_at=order.created_at,
        updated_at=order.updated_at,
    )


class OrderRepository:
    """Data-access layer for orders."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, order: Order) -> Order:
        """Insert an order.

        Raises:
            DuplicatePaymentError: an order with the same transaction id
                already exists. The session must be rolled back by the caller.
        """
        row = _to_row(order)
        self._session.add(row)
        try:
            self._session.flush()
        except IntegrityError as exc:
            if "transaction_id" in str(exc.orig):
                raise DuplicatePaymentError(order.transaction_id) from exc
            raise
        return _to_entity(row)

    def get_by_transaction_id(self, transaction_id: str) -> Order | None:
        statement = select(OrderTable).where(OrderTable.transaction_id == transaction_id)
        row = self._session.exec(statement).first()
        if row is None:
            return None
        return _to_entity(row)

    def list_by_customer(self, customer_email: str) -> list[Order]:
        statement = (
            select(OrderTable)
            .where(OrderTable.customer == normalize_email(customer_email))
            .order_by(col(OrderTable.date))
        )
        return [_to_entity(row) for row in self._session.exec(statement)]

    def list_by_seller(self, seller_email: str) -> list[Order]:
        statement = (
            select(OrderTable)
            .where(OrderTable.seller_email == normalize_email(seller_email))
            .order_by(col(OrderTable.date))
        )
        return [_to_entity(row) for row in self._session.exec(statement)]
