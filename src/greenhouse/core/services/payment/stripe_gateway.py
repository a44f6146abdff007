"""Stripe Checkout implementation of the payment gateway."""

from typing import Any

import stripe
from loguru import logger

from src.greenhouse.core.errors import (
    PaymentLookupError,
    PaymentSessionNotFoundError,
    UpstreamServiceError,
)
from src.greenhouse.core.services.payment.gateway import (
    CheckoutLineItem,
    CheckoutMetadata,
    CheckoutSessionInfo,
    PaymentGateway,
)
from src.greenhouse.entities.core._base import to_minor_units

# metadata keys read back by fulfillment; storefront sessions use the same names
PRODUCT_ID_KEY = "plantId"
BUYER_EMAIL_KEY = "customer"


def _field(obj: Any, key: str, default: Any = None) -> Any:
    if obj is None:
        return default
    try:
        value = obj[key]
    except (KeyError, TypeError):
        return default
    return default if value is None else value


class StripePaymentGateway(PaymentGateway):
    def __init__(self, api_key: str, currency: str = "usd", mode: str = "payment"):
        self._api_key = api_key
        self._currency = currency
        self._mode = mode

    def create_checkout_session(
        self,
        item: CheckoutLineItem,
        buyer_email: str,
        metadata: CheckoutMetadata,
        success_url: str,
        cancel_url: str,
    ) -> str:
        product_data: dict[str, Any] = {"name": item.name}
        if item.description:
            product_data["description"] = item.description
        if item.image:
            product_data["images"] = [item.image]

        try:
            session = stripe.checkout.Session.create(
                api_key=self._api_key,
                line_items=[
                    {
                        "price_data": {
                            "currency": self._currency,
                            "unit_amount": to_minor_units(item.unit_price),
                            "product_data": product_data,
                        },
                        "quantity": item.quantity,
                    }
                ],
                customer_email=buyer_email,
                mode=self._mode,
                metadata={
                    PRODUCT_ID_KEY: metadata.product_id or "",
                    BUYER_EMAIL_KEY: metadata.buyer_email or buyer_email,
                },
                success_url=success_url,
                cancel_url=cancel_url,
            )
        except stripe.StripeError as e:
            logger.error("Checkout session creation failed ({}: {})", type(e).__name__, e)
            raise UpstreamServiceError("Failed to create checkout session") from e

        url = _field(session, "url")
        if not url:
            raise UpstreamServiceError("Payment provider returned no checkout URL")
        logger.info(
            "Checkout session {} created for product {}",
            _field(session, "id"),
            metadata.product_id,
        )
        return url

    def retrieve_session(self, session_id: str) -> CheckoutSessionInfo:
        try:
            session = stripe.checkout.Session.retrieve(session_id, api_key=self._api_key)
        except stripe.InvalidRequestError as e:
            if getattr(e, "code", None) == "resource_missing":
                raise PaymentSessionNotFoundError(
                    f"Payment session {session_id} not found"
                ) from e
            raise PaymentLookupError(f"Invalid payment session request: {e}") from e
        except stripe.StripeError as e:
            logger.error("Checkout session lookup failed ({}: {})", type(e).__name__, e)
            raise PaymentLookupError() from e

        payment_intent = _field(session, "payment_intent")
        if payment_intent is not None and not isinstance(payment_intent, str):
            payment_intent = _field(payment_intent, "id")

        metadata = _field(session, "metadata")
        customer_email = _field(session, "customer_email") or _field(
            _field(session, "customer_details"), "email"
        )
        return CheckoutSessionInfo(
            session_id=_field(session, "id", session_id),
            payment_status=_field(session, "payment_status", "unpaid"),
            amount_total=int(_field(session, "amount_total", 0)),
            currency=_field(session, "currency"),
            payment_intent_id=payment_intent,
            customer_email=customer_email,
            metadata=CheckoutMetadata(
                product_id=_field(metadata, PRODUCT_ID_KEY),
                buyer_email=_field(metadata, BUYER_EMAIL_KEY),
            ),
        )
