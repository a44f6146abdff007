"""Order history routes for buyers and sellers."""

from fastapi import APIRouter, Depends
from sqlmodel import Session

from src.greenhouse.api.http.deps import get_db_session, require_email_match
from src.greenhouse.entities.service.order import Order, OrderRepository

router = APIRouter(tags=["orders"], dependencies=[Depends(require_email_match)])


@router.get("/my-orders/{email}", response_model=list[Order])
def list_customer_orders(email: str, session: Session = Depends(get_db_session)) -> list[Order]:
    """Orders placed by the customer ``email``."""
    return OrderRepository(session).list_by_customer(email)


@router.get("/manage-orders/{email}", response_model=list[Order])
def list_seller_orders(email: str, session: Session = Depends(get_db_session)) -> list[Order]:
    """Orders for plants sold by ``email``."""
    return OrderRepository(session).list_by_seller(email)
