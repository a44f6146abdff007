"""Verified caller identity."""

from typing import Any

from pydantic import BaseModel, Field


class IdentityClaims(BaseModel):
    """Claims extracted from a verified ID token."""

    subject: str = Field(description="Provider user id (sub)")
    email: str = Field(description="Caller email address")
    email_verified: bool = Field(default=False)
    name: str | None = Field(default=None)
    issuer: str = Field(description="Token issuer")
    audience: list[str] = Field(default_factory=list)
    issued_at: int | None = Field(default=None)
    expires_at: int | None = Field(default=None)
    custom_claims: dict[str, Any] = Field(default_factory=dict)
