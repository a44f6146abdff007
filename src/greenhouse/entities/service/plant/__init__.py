"""Entity package: Plant."""

from .entity import Plant, PlantCreate, Seller
from .repository import PlantRepository
from .table import PlantTable

__all__ = ["Plant", "PlantCreate", "PlantRepository", "PlantTable", "Seller"]
