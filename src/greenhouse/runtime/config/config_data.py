"""Pydantic models for parsing the config.yaml configuration file.

These models mirror the structure of config.yaml and take care of validation
and type conversion of the YAML data.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field, computed_field

FIREBASE_ISSUER_PREFIX = "https://securetoken.google.com/"
FIREBASE_JWKS_URI = (
    "https://www.googleapis.com/service_accounts/v1/jwk/"
    "securetoken@system.gserviceaccount.com"
)


class CORSConfig(BaseModel):
    """CORS configuration for the application."""

    origins: list[str] = Field(default_factory=list)
    allow_credentials: bool = True
    allow_methods: list[str] = Field(default=["GET", "POST", "OPTIONS"])
    allow_headers: list[str] = Field(default=["*"])


class AppConfig(BaseModel):
    """Application configuration model."""

    environment: Literal["development", "production", "test"] = Field(
        default="development", description="Application environment"
    )
    host: str = Field(default="0.0.0.0", description="Application host")
    port: int = Field(default=3000, description="Application port")
    client_domain: str = Field(
        default="http://localhost:5173",
        description="Origin of the storefront; used for CORS and checkout redirects",
    )
    cors: CORSConfig = Field(
        default_factory=CORSConfig, description="CORS configuration"
    )

    @property
    def allowed_origins(self) -> list[str]:
        """Client domain first, then any extra configured origins."""
        origins = [self.client_domain.rstrip("/")]
        for origin in self.cors.origins:
            if origin.rstrip("/") not in origins:
                origins.append(origin.rstrip("/"))
        return origins


class LoggingConfig(BaseModel):
    """Logging configuration model."""

    level: str = Field(default="INFO", description="Logging level")
    format: Literal["json", "plain"] = Field(default="json", description="Log format")
    file: str | None = Field(default=None, description="Log file path")
    max_size_mb: int = Field(default=10, description="Maximum log file size in MB")
    backup_count: int = Field(
        default=5, description="Number of backup log files to keep"
    )


class DatabaseConfig(BaseModel):
    """Database configuration model."""

    url: str = Field(
        default="sqlite:///./greenhouse.db", description="Database connection URL"
    )
    pool_size: int = Field(default=10, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Maximum pool overflow")
    pool_timeout: int = Field(default=30, description="Pool timeout in seconds")
    pool_recycle: int = Field(default=1800, description="Pool recycle time in seconds")
    echo: bool = Field(default=False, description="Echo SQL statements")

    @property
    def is_sqlite(self) -> bool:
        return self.url.startswith("sqlite")

    @property
    def is_memory(self) -> bool:
        return self.is_sqlite and (
            self.url in ("sqlite://", "sqlite:///:memory:") or "mode=memory" in self.url
        )


class PaymentsConfig(BaseModel):
    """Stripe checkout configuration."""

    stripe_secret_key: str = Field(default="", description="Stripe secret API key")
    currency: str = Field(default="usd", description="ISO currency for all checkouts")
    mode: Literal["payment"] = Field(default="payment", description="Checkout mode")


class IdentityConfig(BaseModel):
    """Firebase Authentication settings for verifying ID tokens."""

    project_id: str = Field(default="", description="Firebase project id")
    issuer: str | None = Field(
        default=None,
        description="Token issuer; defaults to the securetoken issuer of the project",
    )
    audiences: list[str] = Field(
        default_factory=list,
        description="Accepted audiences; defaults to the project id",
    )
    jwks_uri: str = Field(
        default=FIREBASE_JWKS_URI, description="JWKS endpoint for ID token keys"
    )
    jwks_cache_ttl: int = Field(default=3600, description="JWKS cache TTL in seconds")

    @computed_field
    @property
    def expected_issuer(self) -> str:
        if self.issuer:
            return self.issuer.rstrip("/")
        return f"{FIREBASE_ISSUER_PREFIX}{self.project_id}"

    @computed_field
    @property
    def expected_audiences(self) -> list[str]:
        if self.audiences:
            return list(self.audiences)
        return [self.project_id] if self.project_id else []


class JWTClaimsConfig(BaseModel):
    """JWT claims mapping configuration."""

    email: str = Field(default="email", description="Claim name for email address")
    email_verified: str = Field(
        default="email_verified", description="Claim name for the email verified flag"
    )
    name: str = Field(default="name", description="Claim name for display name")


class JWTConfig(BaseModel):
    """JWT validation configuration."""

    allowed_algorithms: list[str] = Field(
        default_factory=lambda: ["RS256"],
        description="JWT algorithms allowed for token validation",
    )
    clock_skew: int = Field(default=60, description="Clock skew tolerance in seconds")
    require_verified_email: bool = Field(
        default=False, description="Reject tokens whose email is not verified"
    )
    claims: JWTClaimsConfig = Field(
        default_factory=JWTClaimsConfig, description="JWT claims mapping configuration"
    )


class ConfigData(BaseModel):
    """Root configuration model that matches the config.yaml structure."""

    app: AppConfig = Field(
        default_factory=AppConfig, description="Application configuration"
    )
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    database: DatabaseConfig = Field(
        default_factory=DatabaseConfig, description="Database configuration"
    )
    payments: PaymentsConfig = Field(
        default_factory=PaymentsConfig, description="Payment provider configuration"
    )
    identity: IdentityConfig = Field(
        default_factory=IdentityConfig, description="Identity provider configuration"
    )
    jwt: JWTConfig = Field(
        default_factory=JWTConfig, description="JWT validation configuration"
    )
