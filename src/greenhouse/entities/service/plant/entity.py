"""Entity: Plant."""

from typing import Any

from pydantic import EmailStr, Field

from src.greenhouse.entities.core._base import CamelModel, Entity, Money


class Seller(CamelModel):
    """Seller details embedded in a plant and copied onto its orders."""

    name: str = Field(description="Seller display name")
    email: EmailStr = Field(description="Seller email address")
    image: str | None = Field(default=None, description="Seller avatar URL")


class PlantCreate(CamelModel):
    """Fields a seller provides when listing a plant."""

    name: str = Field(min_length=1, description="Plant name")
    description: str = Field(default="", description="Plant description")
    category: str = Field(default="", description="Plant category")
    price: Money = Field(description="Unit price")
    quantity: int = Field(ge=0, description="Units in stock")
    image: str | None = Field(default=None, description="Image URL")
    seller: Seller


class Plant(Entity):
    """A plant offered for sale.

    ``quantity`` is the stock counter; only order fulfillment changes it.
    """

    name: str = Field(description="Plant name")
    description: str = Field(default="", description="Plant description")
    category: str = Field(default="", description="Plant category")
    price: Money = Field(description="Unit price")
    quantity: int = Field(ge=0, description="Units in stock")
    image: str | None = Field(default=None, description="Image URL")
    seller: Seller

    @classmethod
    def from_create(cls, data: PlantCreate) -> "Plant":
        return cls(**data.model_dump())

    @property
    def in_stock(self) -> bool:
        return self.quantity >= 1

    def __eq__(self, other: Any) -> bool:
        """Compare plants by business attributes, ignoring timestamps."""
        if not isinstance(other, Plant):
            return False

        return (
            self.id == other.id
            and self.name == other.name
            and self.price == other.price
            and self.quantity == other.quantity
            and self.seller == other.seller
        )

    def __hash__(self) -> int:
        return hash((self.id, self.name, self.price, self.quantity))
