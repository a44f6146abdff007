"""Entity: Order."""

from datetime import UTC, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from pydantic import EmailStr, Field

from src.greenhouse.entities.core._base import Entity, Money
from src.greenhouse.entities.service.plant.entity import Plant, Seller


class OrderStatus(str, Enum):
    PENDING = "pending"


class Order(Entity):
    """One fulfilled purchase of a single plant.

    Seller, name, category and image are a snapshot of the plant taken when
    the order is created; later catalog edits do not touch existing orders.
    """

    plant_id: str = Field(description="Identifier of the purchased plant")
    transaction_id: str = Field(description="Payment intent id; unique per order")
    customer: EmailStr = Field(description="Buyer email address")
    seller: Seller
    name: str
    category: str = ""
    image: str | None = None
    quantity: int = Field(default=1, ge=1)
    price: Money = Field(description="Amount actually charged")
    status: OrderStatus = OrderStatus.PENDING
    date: datetime = Field(default_factory=lambda: datetime.now(UTC))

    @classmethod
    def snapshot(
        cls,
        plant: Plant,
        *,
        transaction_id: str,
        customer: str,
        price: Decimal,
    ) -> "Order":
        """Build a pending single-unit order from the plant as it is now."""
        return cls(
            plant_id=plant.id,
            transaction_id=transaction_id,
            customer=customer,
            seller=plant.seller.model_copy(),
            name=plant.name,
            category=plant.category,
            image=plant.image,
            quantity=1,
            price=price,
            status=OrderStatus.PENDING,
        )

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Order):
            return False
        return self.id == other.id and self.transaction_id == other.transaction_id

    def __hash__(self) -> int:
        return hash((self.id, self.transaction_id))
