"""FastAPI application factory."""

from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from starlette.exceptions import HTTPException as StarletteHTTPException

from config.config import Settings
from payments.facilitator import FacilitatorClient
from payments.gate import PaymentGate
from server.routes import health, research
from server.utils import error_response
from upstream.client import UpstreamClient
from utils.logger import get_logger

logger = get_logger(__name__)


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        field = ".".join(str(loc) for loc in err.get("loc", ()) if loc != "query")
        parts.append(f"{field}: {err.get('msg')}" if field else str(err.get("msg")))
    return "; ".join(parts) or "Invalid request"


def create_app(
    settings: Settings | None = None,
    upstream: UpstreamClient | None = None,
    facilitator: FacilitatorClient | None = None,
) -> FastAPI:
    """
    Factory function to create the FastAPI application.

    Args:
        settings: Service configuration, read from the environment when omitted
        upstream: Upstream client, built from ``settings`` when omitted
        facilitator: Facilitator client for the payment gate, built when omitted
    """
    settings = settings or Settings.from_env()
    upstream = upstream or UpstreamClient(
        brave_api_key=settings.brave_api_key, timeout_s=settings.upstream_timeout_s
    )
    if settings.payment.enabled and facilitator is None:
        facilitator = FacilitatorClient(
            settings.payment.facilitator_url,
            credential=settings.payment.credential,
            timeout_s=settings.upstream_timeout_s,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Lifespan event handler for startup/shutdown logic."""
        logger.info(
            "Research API starting up",
            extra={"extra_fields": {"mode": settings.mode, "version": settings.version}},
        )
        if not settings.brave_api_key:
            logger.warning("BRAVE_API_KEY is not set; search requests will be rejected upstream")

        yield

        logger.info("Research API shutting down")
        await upstream.aclose()
        if facilitator is not None:
            await facilitator.aclose()

    app = FastAPI(
        title=settings.service_name,
        description="Web search, URL extraction and GitHub analysis with optional x402 payments",
        version=settings.version,
        lifespan=lifespan,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.state.settings = settings
    app.state.upstream = upstream

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return error_response(exc.status_code, str(exc.detail))

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        return error_response(status.HTTP_400_BAD_REQUEST, _validation_message(exc))

    # Must be registered before CORS so 402 responses carry CORS headers
    if settings.payment.enabled:
        app.state.payment_gate = PaymentGate(settings, facilitator)
        app.middleware("http")(app.state.payment_gate)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(health.router)
    app.include_router(research.router)

    return app
