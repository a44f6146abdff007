import base64
import json
from dataclasses import dataclass
from typing import Any, Final

from src.greenhouse.core.errors import UnauthorizedError

MAX_JWT_CHARS: Final = 4096
MAX_HEADER_BYTES: Final = 8 * 1024
MAX_PAYLOAD_BYTES: Final = 64 * 1024
_ALLOWED: Final = frozenset(
    "ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_."
)  # no '='


def split_compact_jwt(token: str) -> tuple[str, str, str]:
    """Check size and alphabet of a compact JWS and split it into segments."""
    if not token or len(token) > MAX_JWT_CHARS:
        raise UnauthorizedError("Invalid JWT size")
    if not _ALLOWED.issuperset(token):
        raise UnauthorizedError("Invalid JWT characters")
    parts = token.split(".")
    if len(parts) != 3 or not all(parts):
        raise UnauthorizedError("Invalid JWT format")
    return parts[0], parts[1], parts[2]


def _b64url_json(seg: str, what: str, max_bytes: int) -> dict[str, Any]:
    pad = (-len(seg)) % 4
    try:
        raw = base64.urlsafe_b64decode((seg + "=" * pad).encode("ascii"))
    except ValueError as e:
        raise UnauthorizedError(f"Invalid base64url in {what}") from e
    if len(raw) > max_bytes:
        raise UnauthorizedError(f"{what} too large")
    try:
        obj = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        raise UnauthorizedError(f"Invalid JSON in {what}") from e
    if not isinstance(obj, dict):
        raise UnauthorizedError(f"{what} must be a JSON object")
    return obj


@dataclass(frozen=True)
class JwtPreview:
    header: dict[str, Any]
    claims: dict[str, Any]
    alg: str | None
    kid: str | None
    iss: str | None


def preview_jwt(token: str) -> JwtPreview:
    """Decode header and payload without verifying the signature."""
    h_seg, p_seg, _ = split_compact_jwt(token)
    header = _b64url_json(h_seg, "JWT header", MAX_HEADER_BYTES)
    claims = _b64url_json(p_seg, "JWT payload", MAX_PAYLOAD_BYTES)
    iss = claims.get("iss")
    return JwtPreview(
        header=header,
        claims=claims,
        alg=header.get("alg"),
        kid=header.get("kid"),
        iss=iss.rstrip("/") if isinstance(iss, str) else None,
    )


def as_list(value: Any) -> list[str]:
    return [value] if isinstance(value, str) else list(value or ())


def extract_bearer_token(authorization: str | None) -> str:
    """Return the token from an ``Authorization: Bearer <token>`` header."""
    if not authorization:
        raise UnauthorizedError("Missing Bearer token")
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token.strip():
        raise UnauthorizedError("Missing Bearer token")
    return token.strip()
