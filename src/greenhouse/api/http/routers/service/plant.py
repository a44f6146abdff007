"""Plant catalog routes."""

from fastapi import APIRouter, Depends
from loguru import logger
from sqlmodel import Session

from src.greenhouse.api.http.deps import (
    ensure_caller_is,
    get_current_identity,
    get_db_session,
    require_email_match,
)
from src.greenhouse.core.errors import NotFoundError
from src.greenhouse.core.models import IdentityClaims
from src.greenhouse.entities.core._base import CamelModel
from src.greenhouse.entities.service.plant import Plant, PlantCreate, PlantRepository

router = APIRouter(tags=["plants"])


class InsertResult(CamelModel):
    acknowledged: bool = True
    inserted_id: str


@router.post("/plants", response_model=InsertResult)
def create_plant(
    plant: PlantCreate,
    identity: IdentityClaims = Depends(get_current_identity),
    session: Session = Depends(get_db_session),
) -> InsertResult:
    """List a new plant for sale. Only the seller named in the body may do so."""
    ensure_caller_is(str(plant.seller.email), identity)
    repository = PlantRepository(session)
    created = repository.create(Plant.from_create(plant))
    session.commit()
    logger.info("Plant {} listed by {}", created.id, identity.email)
    return InsertResult(inserted_id=created.id)


@router.get("/plants", response_model=list[Plant])
def list_plants(session: Session = Depends(get_db_session)) -> list[Plant]:
    """List all plants."""
    return PlantRepository(session).list_all()


@router.get("/plants/{plant_id}", response_model=Plant)
def get_plant(plant_id: str, session: Session = Depends(get_db_session)) -> Plant:
    """Get a plant by ID."""
    plant = PlantRepository(session).get(plant_id)
    if plant is None:
        raise NotFoundError("Plant not found")
    return plant


@router.get(
    "/my-inventory/{email}",
    response_model=list[Plant],
    dependencies=[Depends(require_email_match)],
)
def list_seller_inventory(email: str, session: Session = Depends(get_db_session)) -> list[Plant]:
    """List the plants offered by ``email``."""
    return PlantRepository(session).list_by_seller(email)
