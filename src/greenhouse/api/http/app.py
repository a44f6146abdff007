"""FastAPI application factory and setup."""

import time
import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from loguru import logger
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import JSONResponse

from src.greenhouse.api.http.app_data import ApplicationDependencies
from src.greenhouse.api.http.routers.health import router as health_router
from src.greenhouse.api.http.routers.service.order import router as order_router
from src.greenhouse.api.http.routers.service.payment import router as payment_router
from src.greenhouse.api.http.routers.service.plant import router as plant_router
from src.greenhouse.api.utils.app_startup import configure_logging
from src.greenhouse.core.errors import ApiError, UpstreamServiceError
from src.greenhouse.core.services import (
    CheckoutFulfillmentService,
    DbManageService,
    DbSessionService,
    JWKSCacheInMemory,
    JwksService,
    JwtVerificationService,
    StripePaymentGateway,
)
from src.greenhouse.runtime.context import get_config

# Initialize logging
configure_logging()


# --- Security middleware ---
class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        response.headers.setdefault("X-Content-Type-Options", "nosniff")
        response.headers.setdefault("X-Frame-Options", "DENY")
        response.headers.setdefault(
            "Referrer-Policy", "strict-origin-when-cross-origin"
        )
        # HSTS only in prod
        if get_config().app.environment == "production":
            response.headers.setdefault(
                "Strict-Transport-Security",
                "max-age=31536000; includeSubDomains",
            )
        return response


# --- FastAPI app setup ---
@asynccontextmanager
async def lifespan(app: FastAPI):
    await startup()
    try:
        yield
    finally:
        await shutdown()


app = FastAPI(
    title="Greenhouse Market API",
    lifespan=lifespan,
    docs_url=None if get_config().app.environment == "production" else "/docs",
    redoc_url=None if get_config().app.environment == "production" else "/redoc",
)

app.add_middleware(SecurityHeadersMiddleware)

# expose startup for tests
__all__ = ["app", "startup", "shutdown"]

# --- CORS configuration ---
if get_config().app.environment == "production" and (
    "*" in get_config().app.allowed_origins
):
    raise RuntimeError(
        "CORS misconfigured: cannot use '*' with allow_credentials=True in production"
    )

app.add_middleware(
    CORSMiddleware,
    allow_origins=get_config().app.allowed_origins,
    allow_credentials=get_config().app.cors.allow_credentials,
    allow_methods=get_config().app.cors.allow_methods,
    allow_headers=get_config().app.cors.allow_headers,
)


def _request_id(request: Request) -> str | None:
    return getattr(request.state, "request_id", None)


def _error_response(
    request: Request,
    status_code: int,
    error: str,
    detail,
    headers: dict[str, str] | None = None,
) -> JSONResponse:
    request_id = _request_id(request)
    response_headers = dict(headers or {})
    if request_id:
        response_headers["X-Request-ID"] = request_id
    return JSONResponse(
        status_code=status_code,
        content={"error": error, "detail": detail, "request_id": request_id},
        headers=response_headers,
    )


# --- Exception handlers ---
@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    if isinstance(exc, UpstreamServiceError) and exc.status_code >= 500:
        logger.warning("Upstream failure: {}", exc.detail)
    return _error_response(request, exc.status_code, exc.code, exc.detail, exc.headers)


@app.exception_handler(StarletteHTTPException)
async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    error = "not_found" if exc.status_code == 404 else "http_error"
    return _error_response(request, exc.status_code, error, exc.detail, exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    logger.bind(error_type=type(exc).__name__).info("request.validation_error")
    return _error_response(request, 422, "validation_error", jsonable_errors(exc))


@app.exception_handler(SQLAlchemyError)
async def database_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.opt(exception=exc).error("Database operation failed")
    return _error_response(request, 503, "upstream_failure", "Database unavailable")


def jsonable_errors(exc: RequestValidationError) -> list[dict]:
    """Validation errors without the raw input values."""
    return [
        {"loc": list(err.get("loc", ())), "msg": err.get("msg"), "type": err.get("type")}
        for err in exc.errors()
    ]


# --- Request logging middleware ---
@app.middleware("http")
async def log_requests(request: Request, call_next):
    # Correlation / tracing
    request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
    request.state.request_id = request_id

    xff = request.headers.get("x-forwarded-for")
    client_ip = (
        xff.split(",")[0].strip()
        if xff
        else request.client.host
        if request.client
        else "unknown"
    )

    base_ctx = {
        "request_id": request_id,
        "method": request.method,
        "path": request.url.path,
        "client_ip": client_ip,
        "user_agent": request.headers.get("user-agent", "unknown"),
    }

    start = time.perf_counter()

    # Everything that logs within this block inherits base_ctx
    with logger.contextualize(**base_ctx):
        try:
            logger.info("request.start")
            response = await call_next(request)

            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=response.status_code,
                duration_ms=round(duration_ms, 1),
            ).info("request.end")

            response.headers.setdefault("X-Request-ID", request_id)
            return response

        except Exception as exc:
            duration_ms = (time.perf_counter() - start) * 1000
            logger.bind(
                status_code=500,
                duration_ms=round(duration_ms, 1),
                error_type=type(exc).__name__,
            ).exception("request.error")
            return JSONResponse(
                status_code=500,
                content={
                    "error": "internal_error",
                    "detail": "Internal Server Error",
                    "request_id": request_id,
                },
                headers={"X-Request-ID": request_id},
            )


# --- Router registration ---
app.include_router(health_router)
app.include_router(plant_router)
app.include_router(order_router)
app.include_router(payment_router)


# --- Lifecycle hooks ---
async def startup() -> None:
    config = get_config()
    logger.info("Starting up application in {} environment", config.app.environment)

    # Validate configuration so we fail fast on misconfiguration
    if config.app.environment == "production":
        if not config.payments.stripe_secret_key:
            raise RuntimeError("STRIPE_SECRET_KEY must be set in production")
        if not config.identity.expected_audiences:
            raise RuntimeError("FIREBASE_PROJECT_ID must be set in production")

    database_service = DbSessionService()
    DbManageService(database_service.engine).create_all()
    if not database_service.health_check():
        if config.app.environment == "production":
            raise RuntimeError("Database is not reachable")
        logger.warning("Database ping failed; continuing outside production")
    else:
        logger.info("Successfully connected to the database")

    jwks_cache = JWKSCacheInMemory(ttl_seconds=config.identity.jwks_cache_ttl)
    jwks_service = JwksService(jwks_cache)
    jwt_verify_service = JwtVerificationService(jwks_service)
    payment_gateway = StripePaymentGateway(
        config.payments.stripe_secret_key,
        currency=config.payments.currency,
        mode=config.payments.mode,
    )
    fulfillment_service = CheckoutFulfillmentService(payment_gateway, database_service)

    app.state.app_dependencies = ApplicationDependencies(
        database_service=database_service,
        jwks_cache=jwks_cache,
        jwks_service=jwks_service,
        jwt_verify_service=jwt_verify_service,
        payment_gateway=payment_gateway,
        fulfillment_service=fulfillment_service,
    )

    # Verify signing keys so auth failures surface early
    if config.app.environment == "production":
        await jwks_service.fetch_jwks(config.identity.jwks_uri)


async def shutdown() -> None:
    logger.info("Shutting down application")
    app_dependencies: ApplicationDependencies | None = getattr(
        app.state, "app_dependencies", None
    )
    if app_dependencies is not None:
        app_dependencies.database_service.dispose()


# --- Route handlers ---
@app.get("/", response_class=PlainTextResponse)
async def root() -> str:
    return "Hello from Server.."


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        app,
        host=get_config().app.host,
        port=get_config().app.port,
        access_log=False,  # We handle access logging in middleware
    )
