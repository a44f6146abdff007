"""Plant repository."""

from sqlalchemy import update
from sqlmodel import Session, col, select

from src.greenhouse.entities.core._base import normalize_email
from src.greenhouse.entities.service.plant.entity import Plant, Seller
from src.greenhouse.entities.service.plant.table import PlantTable


def _to_entity(row: PlantTable) -> Plant:
    return Plant(
        id=row.id,
        name=row.name,
        description=row.description,
        category=row.category,
        price=row.price,
        quantity=row.quantity,
        image=row.image,
        seller=Seller(name=row.seller_name, email=row.seller_email, image=row.seller_image),
        created_at=row.created_at,
        updated_at=row.updated_at,
    )


def _to_row(plant: Plant) -> PlantTable:
    return PlantTable(
        id=plant.id,
        name=plant.name,
        description=plant.description,
        category=plant.category,
        price=plant.price,
        quantity=plant.quantity,
        image=plant.image,
        seller_name=plant.seller.name,
        seller_email=normalize_email(str(plant.seller.email)),
        seller_image=plant.seller.image,
        created_at=plant.created_at,
        updated_at=plant.updated_at,
    )


class PlantRepository:
    """Data-access layer for the plant catalog."""

    def __init__(self, session: Session) -> None:
        self._session = session

    def create(self, plant: Plant) -> Plant:
        row = _to_row(plant)
        self._session.add(row)
        self._session.flush()
        return _to_entity(row)

    def get(self, plant_id: str) -> Plant | None:
        row = self._session.get(PlantTable, plant_id)
        if row is None:
            return None
        return _to_entity(row)

    def list_all(self) -> list[Plant]:
        rows = self._session.exec(select(PlantTable).order_by(col(PlantTable.created_at)))
        return [_to_entity(row) for row in rows]

    def list_by_seller(self, seller_email: str) -> list[Plant]:
        statement = select(PlantTable).where(
            PlantTable.seller_email == normalize_email(seller_email)
        )
        return [_to_entity(row) for row in self._session.exec(statement)]

    def decrement_quantity(self, plant_id: str, amount: int = 1) -> bool:
        """Atomically take ``amount`` units out of stock.

        Returns False when the plant is missing or has fewer than ``amount``
        units left; nothing is changed in that case.
        """
        statement = (
            update(PlantTable)
            .where(col(PlantTable.id) == plant_id)
            .where(col(PlantTable.quantity) >= amount)
            .values(quantity=PlantTable.quantity - amount)
            .execution_options(synchronize_session=False)
        )
        result = self._session.exec(statement)  # type: ignore[call-overload]
        return result.rowcount == 1
