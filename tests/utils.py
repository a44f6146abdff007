import base64
import time
from typing import Any

from authlib.jose import jwt


def oct_jwk(key: bytes, kid: str) -> dict[str, str]:
    return {
        "kty": "oct",
        "k": base64.urlsafe_b64encode(key).rstrip(b"=").decode("ascii"),
        "alg": "HS256",
        "kid": kid,
    }


def encode_token(
    key: bytes,
    kid: str,
    *,
    issuer: str,
    audience: str,
    email: str | None,
    subject: str = "firebase-uid-1",
    expires_in: int = 3600,
    extra: dict[str, Any] | None = None,
) -> str:
    """Mint an HS256 ID token shaped like the ones Firebase issues."""
    now = int(time.time())
    claims: dict[str, Any] = {
        "iss": issuer,
        "aud": audience,
        "sub": subject,
        "iat": now,
        "exp": now + expires_in,
        "auth_time": now,
        "email_verified": True,
    }
    if email is not None:
        claims["email"] = email
    claims.update(extra or {})
    token = jwt.encode({"alg": "HS256", "kid": kid}, claims, key)
    return token.decode("ascii") if isinstance(token, bytes) else token
