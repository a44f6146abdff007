"""ID token verification against the identity provider's signing keys."""

import time

from authlib.jose import JoseError, JsonWebKey, jwt
from loguru import logger

from src.greenhouse.core.errors import UnauthorizedError
from src.greenhouse.core.models.identity import IdentityClaims
from src.greenhouse.core.services.jwt.jwks import JwksService
from src.greenhouse.core.services.jwt.jwt_utils import as_list, preview_jwt
from src.greenhouse.runtime.context import get_config

_REGISTERED = frozenset({"iss", "sub", "aud", "exp", "iat", "nbf", "auth_time", "jti"})


class JwtVerificationService:
    """Verifies Firebase ID tokens and returns the caller's identity.

    Stateless apart from the JWKS cache held by the injected ``JwksService``.
    """

    def __init__(self, jwks_service: JwksService):
        self._jwks_service = jwks_service

    async def verify(self, token: str) -> IdentityClaims:
        """Verify ``token`` and return its claims.

        Raises:
            UnauthorizedError: the token is malformed, expired, signed by an
                unknown key or issued for another project.
            UpstreamServiceError: the signing keys could not be fetched.
        """
        cfg = get_config()
        identity_cfg = cfg.identity
        pv = preview_jwt(token)

        if pv.alg not in cfg.jwt.allowed_algorithms:
            raise UnauthorizedError("Disallowed JWT algorithm")
        if not pv.iss:
            raise UnauthorizedError("Missing iss claim")

        expected_issuer = identity_cfg.expected_issuer
        if pv.iss != expected_issuer:
            raise UnauthorizedError("Invalid issuer")

        audiences = identity_cfg.expected_audiences
        if not audiences:
            raise UnauthorizedError("No expected audience configured")

        jwks = await self._jwks_service.fetch_jwks(identity_cfg.jwks_uri)
        keys = [k for k in jwks.get("keys", []) if not pv.kid or k.get("kid") == pv.kid]
        if not keys and pv.kid:
            # keys rotate; refetch once before giving up
            jwks = await self._jwks_service.fetch_jwks(identity_cfg.jwks_uri, refresh=True)
            keys = [k for k in jwks.get("keys", []) if k.get("kid") == pv.kid]
        if not keys:
            raise UnauthorizedError(f"No JWK matches kid={pv.kid}")

        claims_options = {
            "iss": {"essential": True, "values": [expected_issuer]},
            "aud": {"essential": True, "values": audiences},
            "sub": {"essential": True},
            "exp": {"essential": True},
        }

        try:
            claims = jwt.decode(
                token,
                JsonWebKey.import_key_set({"keys": keys}),
                claims_options=claims_options,
            )
            claims.validate(leeway=cfg.jwt.clock_skew)
        except (JoseError, ValueError) as exc:
            logger.debug("ID token rejected: {}", exc)
            raise UnauthorizedError(f"JWT error: {exc}") from exc

        now = int(time.time())
        iat = claims.get("iat")
        if iat is not None and int(iat) > now + cfg.jwt.clock_skew:
            raise UnauthorizedError("Invalid iat with skew")

        claim_names = cfg.jwt.claims
        email = claims.get(claim_names.email)
        if not isinstance(email, str) or not email:
            raise UnauthorizedError("Token carries no email")
        email_verified = bool(claims.get(claim_names.email_verified, False))
        if cfg.jwt.require_verified_email and not email_verified:
            raise UnauthorizedError("Email address is not verified")

        known = _REGISTERED | {
            claim_names.email,
            claim_names.email_verified,
            claim_names.name,
        }
        return IdentityClaims(
            subject=str(claims["sub"]),
            email=email,
            email_verified=email_verified,
            name=claims.get(claim_names.name),
            issuer=str(claims["iss"]),
            audience=as_list(claims.get("aud")),
            issued_at=int(iat) if iat is not None else None,
            expires_at=int(claims["exp"]),
            custom_claims={k: v for k, v in claims.items() if k not in known},
        )
