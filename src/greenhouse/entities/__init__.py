"""Entities grouped by business concept.

Each entity package holds:
- entity.py: Domain model exchanged with clients
- table.py: Database persistence model
- repository.py: Data access layer
"""

from .service.order import Order, OrderRepository, OrderStatus, OrderTable
from .service.plant import Plant, PlantCreate, PlantRepository, PlantTable, Seller

__all__ = [
    "Order",
    "OrderRepository",
    "OrderStatus",
    "OrderTable",
    "Plant",
    "PlantCreate",
    "PlantRepository",
    "PlantTable",
    "Seller",
]
