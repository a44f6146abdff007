"""Plant database table model."""

from decimal import Decimal

import sqlalchemy as sa
from sqlmodel import Field

from src.greenhouse.entities.core._base import EntityTable


class PlantTable(EntityTable, table=True):
    """Database persistence model for plants.

    The embedded seller record is flattened into ``seller_*`` columns so the
    seller email can be indexed for inventory lookups.
    """

    __tablename__ = "plants"
    __table_args__ = (sa.CheckConstraint("quantity >= 0", name="ck_plants_quantity"),)

    name: str
    description: str = ""
    category: str = Field(default="", index=True)
    price: Decimal = Field(sa_column=sa.Column(sa.Numeric(12, 2), nullable=False))
    quantity: int = Field(default=0)
    image: str | None = None
    seller_name: str
    seller_email: str = Field(index=True)
    seller_image: str | None = None
