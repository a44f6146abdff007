"""JWT verification services."""

from .jwks import JWKSCache, JWKSCacheInMemory, JwksService
from .jwt_verify import JwtVerificationService

__all__ = ["JWKSCache", "JWKSCacheInMemory", "JwksService", "JwtVerificationService"]
