"""FastAPI application for the card setup bridge.

This package provides REST endpoints for:
- Customer creation (/create-customer)
- Card SetupIntent creation (/create-setup-intent)
- Stripe webhook delivery (/webhook)
- Frontend configuration (/config)

The app is built by ``create_app`` from an explicit Settings instance; run it
with ``run_server()`` or ``uvicorn --factory bridge_api.main:create_app``.
"""

import logging

from fastapi import FastAPI

from bridge_api.exceptions import register_exception_handlers
from bridge_api.middleware.correlation import CorrelationIdMiddleware
from bridge_api.middleware.origin import OriginGuardMiddleware, OriginPolicy
from bridge_api.middleware.security_headers import SecurityHeadersMiddleware
from bridge_api.rate_limit import RateLimitMiddleware, build_limiter
from bridge_api.routes.config import router as config_router
from bridge_api.routes.customers import router as customers_router
from bridge_api.routes.setup_intents import router as setup_intents_router
from bridge_api.routes.webhooks import WEBHOOK_PATH
from bridge_api.routes.webhooks import router as webhooks_router
from bridge_shared.config import Settings, get_settings
from bridge_shared.services.stripe_gateway import PaymentGateway, StripeGateway
from bridge_shared.services.webhook_handler import WebhookHandler
from bridge_shared.utils.logging import configure_logging

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    gateway: PaymentGateway | None = None,
    webhook_handler: WebhookHandler | None = None,
) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted
        gateway: Payment gateway; a StripeGateway built from settings when omitted
        webhook_handler: Event dispatcher; the default handler when omitted

    Returns:
        Configured FastAPI app

    Raises:
        pydantic.ValidationError: If settings are loaded here and required
            configuration is missing.
    """
    if settings is None:
        settings = get_settings()
    configure_logging(settings.log_level)

    if not settings.stripe_webhook_secret:
        logger.warning(
            "STRIPE_WEBHOOK_SECRET is not set; webhook payloads will be accepted "
            "without signature verification"
        )
    if not settings.stripe_publishable_key:
        logger.warning("STRIPE_PUBLISHABLE_KEY is not set; /config will return 500")

    app = FastAPI(
        title="Card Setup Bridge API",
        description="Stripe customer and SetupIntent bridge for web clients",
        version="0.1.0",
    )

    app.state.settings = settings
    app.state.gateway = gateway or StripeGateway.from_settings(settings)
    app.state.webhook_handler = webhook_handler or WebhookHandler()

    app.state.limiter = build_limiter(settings)

    register_exception_handlers(app)

    # Last added runs first: security headers, correlation IDs, rate limits,
    # then the origin guard right in front of the routes.
    app.add_middleware(
        OriginGuardMiddleware,
        policy=OriginPolicy(settings.allowed_origins),
        strict=settings.is_strict,
        exempt_paths=[WEBHOOK_PATH],
    )
    app.add_middleware(
        RateLimitMiddleware,
        limiter=app.state.limiter,
        exempt_paths=[WEBHOOK_PATH],
    )
    app.add_middleware(CorrelationIdMiddleware)
    app.add_middleware(SecurityHeadersMiddleware)

    app.include_router(webhooks_router)
    app.include_router(customers_router)
    app.include_router(setup_intents_router)
    app.include_router(config_router)

    logger.info(
        "Card setup bridge configured (strict=%s, allowed_origins=%d)",
        settings.is_strict,
        len(settings.allowed_origins),
    )
    return app


def run_server(
    host: str | None = None,
    port: int | None = None,
    reload: bool = False,
) -> None:
    """Run the API with uvicorn.

    Args:
        host: Host to bind to (default: HOST setting)
        port: Port to listen on (default: PORT setting)
        reload: Enable hot reload for development (default: False)
    """
    import uvicorn

    settings = get_settings()

    uvicorn.run(
        "bridge_api.main:create_app",
        factory=True,
        host=host or settings.host,
        port=port or settings.port,
        reload=reload,
        proxy_headers=True,
    )


if __name__ == "__main__":
    run_server()
