"""Turns a completed checkout session into an order and a stock decrement."""

from enum import Enum

from loguru import logger
from pydantic import EmailStr, TypeAdapter, ValidationError

from src.greenhouse.core.errors import DuplicatePaymentError, OutOfStockError
from src.greenhouse.core.services.database.db_session import DbSessionService
from src.greenhouse.core.services.payment.gateway import (
    CheckoutSessionInfo,
    PaymentGateway,
)
from src.greenhouse.entities.core._base import CamelModel, from_minor_units
from src.greenhouse.entities.service.order import Order, OrderRepository
from src.greenhouse.entities.service.plant import PlantRepository


class FulfillmentOutcome(str, Enum):
    FULFILLED = "fulfilled"
    ALREADY_FULFILLED = "already_fulfilled"
    PRODUCT_NOT_FOUND = "product_not_found"
    OUT_OF_STOCK = "out_of_stock"
    PAYMENT_NOT_COMPLETED = "payment_not_completed"


_MESSAGES = {
    FulfillmentOutcome.FULFILLED: "Order created",
    FulfillmentOutcome.ALREADY_FULFILLED: "Payment has already been fulfilled",
    FulfillmentOutcome.PRODUCT_NOT_FOUND: "Product not found",
    FulfillmentOutcome.OUT_OF_STOCK: "Product is out of stock",
    FulfillmentOutcome.PAYMENT_NOT_COMPLETED: "Payment not completed",
}


_EMAIL = TypeAdapter(EmailStr)


def _buyer_email(info: CheckoutSessionInfo) -> str | None:
    """First usable email: the metadata customer, then the checkout page entry."""
    for candidate in (info.metadata.buyer_email, info.customer_email):
        if not candidate:
            continue
        try:
            return _EMAIL.validate_python(candidate)
        except ValidationError:
            logger.warning("Ignoring invalid buyer email {!r} on checkout session", candidate)
    return None


class FulfillmentResult(CamelModel):
    success: bool
    outcome: FulfillmentOutcome
    message: str
    transaction_id: str | None = None
    order_id: str | None = None
    already_fulfilled: bool = False
    out_of_stock: bool = False

    @classmethod
    def of(
        cls,
        outcome: FulfillmentOutcome,
        *,
        transaction_id: str | None = None,
        order_id: str | None = None,
    ) -> "FulfillmentResult":
        return cls(
            success=outcome
            in (FulfillmentOutcome.FULFILLED, FulfillmentOutcome.ALREADY_FULFILLED),
            outcome=outcome,
            message=_MESSAGES[outcome],
            transaction_id=transaction_id,
            order_id=order_id,
            already_fulfilled=outcome is FulfillmentOutcome.ALREADY_FULFILLED,
            out_of_stock=outcome is FulfillmentOutcome.OUT_OF_STOCK,
        )


class CheckoutFulfillmentService:
    """Creates at most one order per payment.

    The order insert and the stock decrement run in one database transaction.
    The unique ``transaction_id`` column guarantees a payment is recorded once
    even when two confirmations race each other.
    """

    def __init__(self, payment_gateway: PaymentGateway, database_service: DbSessionService):
        self._payment_gateway = payment_gateway
        self._database_service = database_service

    def fulfill(self, session_id: str) -> FulfillmentResult:
        """Fulfill the checkout session ``session_id``.

        Business outcomes are returned, not raised.

        Raises:
            PaymentSessionNotFoundError: the provider does not know the session.
            PaymentLookupError: the provider could not be queried.
        """
        info = self._payment_gateway.retrieve_session(session_id)
        transaction_id = info.payment_intent_id

        with logger.contextualize(session_id=session_id, transaction_id=transaction_id):
            try:
                result = self._fulfill_in_transaction(info)
            except DuplicatePaymentError as exc:
                # a concurrent confirmation inserted the order first
                result = self._already_fulfilled(exc.transaction_id)
            except OutOfStockError:
                result = FulfillmentResult.of(
                    FulfillmentOutcome.OUT_OF_STOCK, transaction_id=transaction_id
                )

            logger.info(
                "Checkout session {} fulfillment outcome: {}",
                session_id,
                result.outcome.value,
            )
            return result

    def _fulfill_in_transaction(self, info: CheckoutSessionInfo) -> FulfillmentResult:
        product_id = info.metadata.product_id
        transaction_id = info.payment_intent_id

        with self._database_service.session_scope() as db:
            plants = PlantRepository(db)
            orders = OrderRepository(db)

            plant = plants.get(product_id) if product_id else None
            if plant is None:
                return FulfillmentResult.of(FulfillmentOutcome.PRODUCT_NOT_FOUND)

            if not plant.in_stock:
                return FulfillmentResult.of(
                    FulfillmentOutcome.OUT_OF_STOCK, transaction_id=transaction_id
                )

            existing = orders.get_by_transaction_id(transaction_id) if transaction_id else None
            if existing is not None:
                return FulfillmentResult.of(
                    FulfillmentOutcome.ALREADY_FULFILLED,
                    transaction_id=existing.transaction_id,
                    order_id=existing.id,
                )

            customer = _buyer_email(info)
            if info.is_paid and transaction_id and not customer:
                logger.warning("Paid checkout session has no usable buyer email")
            if not info.is_paid or not transaction_id or not customer:
                return FulfillmentResult.of(
                    FulfillmentOutcome.PAYMENT_NOT_COMPLETED, transaction_id=transaction_id
                )

            order = orders.create(
                Order.snapshot(
                    plant,
                    transaction_id=transaction_id,
                    customer=customer,
                    price=from_minor_units(info.amount_total),
                )
            )
            if not plants.decrement_quantity(plant.id):
                # last unit sold by a concurrent request; roll the order back
                raise OutOfStockError()

            return FulfillmentResult.of(
                FulfillmentOutcome.FULFILLED,
                transaction_id=order.transaction_id,
                order_id=order.id,
            )

    def _already_fulfilled(self, transaction_id: str) -> FulfillmentResult:
        with self._database_service.session_scope() as db:
            existing = OrderRepository(db).get_by_transaction_id(transaction_id)
        return FulfillmentResult.of(
            FulfillmentOutcome.ALREADY_FULFILLED,
            transaction_id=transaction_id,
            order_id=existing.id if existing else None,
        )
