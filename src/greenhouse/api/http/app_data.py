from dataclasses import dataclass

from src.greenhouse.core.services import (
    CheckoutFulfillmentService,
    DbSessionService,
    JWKSCache,
    JwksService,
    JwtVerificationService,
    PaymentGateway,
)


@dataclass
class ApplicationDependencies:
    database_service: DbSessionService
    jwks_cache: JWKSCache
    jwks_service: JwksService
    jwt_verify_service: JwtVerificationService
    payment_gateway: PaymentGateway
    fulfillment_service: CheckoutFulfillmentService
