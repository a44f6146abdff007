"""Core services exports."""

# Database Service
from .database.db_manage import DbManageService
from .database.db_session import DbSessionService

# Fulfillment
from .fulfillment import (
    CheckoutFulfillmentService,
    FulfillmentOutcome,
    FulfillmentResult,
)

# JWT Services
from .jwt.jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt.jwt_verify import JwtVerificationService

# Payment Services
from .payment import (
    CheckoutLineItem,
    CheckoutMetadata,
    CheckoutSessionInfo,
    PaymentGateway,
    StripePaymentGateway,
)

__all__ = [
    # Database Service
    "DbManageService",
    "DbSessionService",
    # Fulfillment
    "CheckoutFulfillmentService",
    "FulfillmentOutcome",
    "FulfillmentResult",
    # JWT Services
    "JWKSCache",
    "JWKSCacheInMemory",
    "JwksService",
    "JwtVerificationService",
    # Payment Services
    "CheckoutLineItem",
    "CheckoutMetadata",
    "CheckoutSessionInfo",
    "PaymentGateway",
    "StripePaymentGateway",
]
