"""Payment gateway services."""

from .gateway import (
    CheckoutLineItem,
    CheckoutMetadata,
    CheckoutSessionInfo,
    PaymentGateway,
)
from .stripe_gateway import StripePaymentGateway

__all__ = [
    "CheckoutLineItem",
    "CheckoutMetadata",
    "CheckoutSessionInfo",
    "PaymentGateway",
    "StripePaymentGateway",
]
