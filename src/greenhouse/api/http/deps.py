"""FastAPI dependency implementations."""

from __future__ import annotations

from collections.abc import Iterator

from fastapi import Depends, Request
from sqlmodel import Session

from src.greenhouse.api.http.app_data import ApplicationDependencies
from src.greenhouse.core.errors import ForbiddenError
from src.greenhouse.core.models import IdentityClaims
from src.greenhouse.core.services import (
    CheckoutFulfillmentService,
    DbSessionService,
    JwtVerificationService,
    PaymentGateway,
)
from src.greenhouse.core.services.jwt.jwt_utils import extract_bearer_token
from src.greenhouse.entities.core._base import normalize_email


def _app_deps(request: Request) -> ApplicationDependencies:
    return request.app.state.app_dependencies


def get_database_service(request: Request) -> DbSessionService:
    """Get the database service instance."""
    return _app_deps(request).database_service


def get_db_session(
    database_service: DbSessionService = Depends(get_database_service),
) -> Iterator[Session]:
    """Yield a session for the request; commit on success, roll back on error."""
    session = database_service.get_session()
    try:
        yield session
        session.commit()
    except Exception:
        session.rollback()
        raise
    finally:
        session.close()


def get_jwt_verify_service(request: Request) -> JwtVerificationService:
    """Get the JWT verification service instance."""
    return _app_deps(request).jwt_verify_service


def get_payment_gateway(request: Request) -> PaymentGateway:
    """Get the payment gateway instance."""
    return _app_deps(request).payment_gateway


def get_fulfillment_service(request: Request) -> CheckoutFulfillmentService:
    """Get the checkout fulfillment service instance."""
    return _app_deps(request).fulfillment_service


async def get_current_identity(
    request: Request,
    jwt_verify: JwtVerificationService = Depends(get_jwt_verify_service),
) -> IdentityClaims:
    """Authenticate the request using a Bearer ID token."""
    token = extract_bearer_token(request.headers.get("Authorization"))
    claims = await jwt_verify.verify(token)
    request.state.identity = claims
    return claims


def ensure_caller_is(email: str, identity: IdentityClaims) -> None:
    """Reject the request unless the verified caller owns ``email``."""
    if normalize_email(email) != normalize_email(identity.email):
        raise ForbiddenError()


async def require_email_match(
    email: str,
    identity: IdentityClaims = Depends(get_current_identity),
) -> IdentityClaims:
    """Route dependency for ``/{email}`` paths that only the owner may read."""
    ensure_caller_is(email, identity)
    return identity
