"""FastAPI application entry point for the GitCode webhook gateway.

This module exposes the webhook authenticator over HTTP. Authenticated
deliveries are acknowledged with their event type and delivery GUID;
rejected deliveries receive the plain-text error written by the
authenticator.

Endpoints:
- POST /webhooks/gitcode: webhook receiver
- GET /health: liveness probe
- GET /metrics: Prometheus metrics
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from .auth.authenticator import WebhookAuthenticator
from .auth.errors import AuthenticationError
from .auth.metrics import generate_metrics_output, get_metrics
from .auth.models import WebhookRequest
from .auth.responses import PlainTextResponseWriter
from .config import GatewaySettings, get_settings
from .openapi.client import GitCodeClient

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

# Global instances, initialized during lifespan startup
settings: GatewaySettings
authenticator: Optional[WebhookAuthenticator] = None
gitcode_client: Optional[GitCodeClient] = None

WEBHOOK_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"]


def _redact_secret(value: Optional[str], visible_chars: int = 4) -> str:
    """Redact a secret value, showing only the first few characters.

    Args:
        value: The secret value to redact.
        visible_chars: Number of characters to show at the start.

    Returns:
        Redacted string with asterisks replacing hidden characters.
    """
    if not value:
        return "<unset>"
    if len(value) <= visible_chars:
        return "*" * len(value)
    return value[:visible_chars] + "*" * (len(value) - visible_chars)


def _log_configuration(settings: GatewaySettings) -> None:
    """Log configuration values with secrets redacted."""
    logger.info("Gateway configuration:")
    logger.info(f"  Webhook Secret: {_redact_secret(settings.webhook_secret)}")
    logger.info(f"  Expected User-Agent: {settings.expected_user_agent}")
    logger.info(f"  Body Read Timeout Seconds: {settings.body_read_timeout_seconds}")
    logger.info(f"  GitCode Base URL: {settings.gitcode_base_url}")
    logger.info(f"  GitCode Token: {_redact_secret(settings.gitcode_token)}")
    logger.info(f"  Host: {settings.host}")
    logger.info(f"  Port: {settings.port}")
    logger.info(f"  Log Level: {settings.log_level}")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager for startup and shutdown.

    Handles:
    - Configuration loading and validation
    - Logging configuration (with secrets redacted)
    - Authenticator and REST client construction
    - Closing the REST client on shutdown
    """
    global settings, authenticator, gitcode_client

    logger.info("Webhook gateway starting up...")

    settings = get_settings()
    logging.getLogger().setLevel(settings.log_level)
    _log_configuration(settings)

    authenticator = WebhookAuthenticator(
        secret=settings.webhook_secret,
        user_agent=settings.expected_user_agent,
        read_timeout=settings.body_read_timeout_seconds,
        metrics=get_metrics(),
    )

    if settings.gitcode_token:
        gitcode_client = GitCodeClient(
            token=settings.gitcode_token,
            base_url=settings.gitcode_base_url,
        )

    logger.info("Webhook gateway started successfully")

    yield

    logger.info("Webhook gateway shutting down...")

    if gitcode_client is not None:
        await gitcode_client.close()
        gitcode_client = None
    authenticator = None

    logger.info("Webhook gateway shutdown complete")


app = FastAPI(
    title="GitCode Webhook Gateway",
    description="Authenticates GitCode webhook deliveries",
    version="1.0.0",
    lifespan=lifespan,
)


@app.get("/health")
async def health():
    """Liveness probe endpoint."""
    return {"status": "healthy"}


@app.get("/metrics", response_class=PlainTextResponse)
async def metrics():
    """Prometheus metrics endpoint."""
    return PlainTextResponse(generate_metrics_output())


@app.api_route("/webhooks/gitcode", methods=WEBHOOK_METHODS)
async def gitcode_webhook(request: Request) -> Response:
    """GitCode webhook receiver endpoint.

    Every method is routed here so the authenticator can answer non-POST
    requests with 405 itself.

    Returns:
        202 with the delivery metadata, or the error written by the
        authenticator.
    """
    if authenticator is None:
        logger.error("Gateway not initialized")
        return JSONResponse(
            status_code=503,
            content={"status": "error", "message": "Gateway not initialized"},
        )

    writer = PlainTextResponseWriter()
    try:
        context = await authenticator.authenticate(
            WebhookRequest.from_starlette(request),
            writer,
        )
    except AuthenticationError:
        return writer.to_response()

    return JSONResponse(
        status_code=202,
        content={
            "status": "accepted",
            "event_type": context.event_type,
            "delivery": context.event_guid,
            "payload_bytes": len(context.payload),
        },
    )


if __name__ == "__main__":
    import uvicorn

    dev_settings = get_settings()
    uvicorn.run(
        "src.webhook_gateway.main:app",
        host=dev_settings.host,
        port=dev_settings.port,
    )
