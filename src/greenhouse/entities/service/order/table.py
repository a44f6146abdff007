"""Order database table model."""

from datetime import UTC, datetime
from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from src.greenhouse.entities.core._base import EntityTable


class OrderTable(EntityTable, table=True):
    """Database persistence model for orders.

    ``transaction_id`` carries a unique constraint: a payment can produce at
    most one order.
    """

    __tablename__ = "orders"

    plant_id: str = Field(index=True)
    transaction_id: str = Field(sa_column=sa.Column(sa.String, nullable=False, unique=True))
    customer: str = Field(index=True)
    seller_name: str
    seller_email: str = Field(index=True)
    seller_image: str | None = None
    name: str
    category: str = ""
    image: str | None = None
    quantity: int = 1
    price: Decimal = Field(sa_column=sa.Column(sa.Numeric(12, 2), nullable=False))
    status: str = Field(default="pending")
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))
