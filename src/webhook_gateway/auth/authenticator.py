"""Inbound GitCode webhook authentication.

The WebhookAuthenticator runs an ordered, fail-fast sequence for every
delivery:

1. The method must be POST (405 otherwise)
2. User-Agent must identify the GitCode hook sender (400)
3. Content-Type must start with application/json (400)
4. X-GitCode-Event must be present (400)
5. X-GitCode-Signature-256 must be present (401)
6. The body is captured exactly once (400 on read failure)
7. The signature must match HMAC-SHA256(secret, body) (403)

Cheap header checks run before the body is read, and the presence of a
signature is checked before any MAC is computed. Every rejection is
written to the ResponseWriter and raised as an AuthenticationError.

GitCode webhook headers:
{
  "User-Agent": "git-gitcode-hook",
  "Content-Type": "application/json",
  "X-GitCode-Event": "Merge Request Hook",
  "X-GitCode-Delivery": "<guid>",
  "X-GitCode-Signature-256": "sha256=<hex hmac>"
}
"""

import logging
import time
from typing import Optional, Union

from .capture import capture_payload
from .errors import (
    AuthenticationError,
    BodyReadError,
    InvalidConfigurationError,
    InvalidSenderError,
    InvalidSignatureError,
    MethodNotAllowedError,
    MissingEventTypeError,
    MissingSignatureError,
    NilRequestError,
    UnsupportedMediaTypeError,
)
from .metrics import AuthMetrics, outcome_for
from .models import AuthenticationContext, WebhookRequest
from .responses import ResponseWriter, handle_error
from .signature import verify_signature


logger = logging.getLogger(__name__)


HEADER_EVENT_TYPE = "X-GitCode-Event"
HEADER_EVENT_GUID = "X-GitCode-Delivery"
HEADER_SIGNATURE = "X-GitCode-Signature-256"
HEADER_USER_AGENT = "User-Agent"
HEADER_CONTENT_TYPE = "Content-Type"

DEFAULT_USER_AGENT = "git-gitcode-hook"
JSON_CONTENT_TYPE = "application/json"


def normalize_secret(secret: Optional[Union[str, bytes]]) -> bytes:
    """Encode a webhook secret, rejecting empty values.

    Raises:
        InvalidConfigurationError: If secret is None or encodes to no bytes.
    """
    if secret is None:
        raise InvalidConfigurationError()
    key = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
    if not key:
        raise InvalidConfigurationError()
    return key


class WebhookAuthenticator:
    """Authenticates inbound GitCode webhook deliveries.

    The signing key is configured once and only read while requests are
    processed, so a single instance can serve concurrent requests. All
    per-request state lives in the returned AuthenticationContext.

    Attributes:
        user_agent: Expected User-Agent header value.
        read_timeout: Seconds allowed for reading a body, None for no limit.
        metrics: Optional AuthMetrics updated for every delivery.

    Example:
        >>> authenticator = WebhookAuthenticator(secret="s3cr3t")
        >>> writer = PlainTextResponseWriter()
        >>> context = await authenticator.authenticate(request, writer)
        >>> context.event_type
        'Merge Request Hook'
    """

    def __init__(
        self,
        secret: Union[str, bytes],
        user_agent: str = DEFAULT_USER_AGENT,
        read_timeout: Optional[float] = None,
        metrics: Optional[AuthMetrics] = None,
    ):
        """Initialize the authenticator.

        Args:
            secret: Shared webhook secret. Must not be empty.
            user_agent: Expected User-Agent header value.
            read_timeout: Seconds allowed for reading a request body.
            metrics: Optional metrics container.

        Raises:
            InvalidConfigurationError: If secret is empty.
        """
        self._sign_key = b""
        self.set_secret(secret)
        self.user_agent = user_agent
        self.read_timeout = read_timeout
        self.metrics = metrics

    def set_secret(self, secret: Union[str, bytes]) -> None:
        """Store the shared secret used for signature verification.

        Raises:
            InvalidConfigurationError: If secret is None or empty.
        """
        self._sign_key = normalize_secret(secret)

    async def authenticate(
        self,
        request: Optional[WebhookRequest],
        writer: Optional[ResponseWriter],
    ) -> AuthenticationContext:
        """Authenticate one webhook delivery.

        Args:
            request: The inbound delivery.
            writer: Sink for the error response on rejection.

        Returns:
            AuthenticationContext with payload, event type and delivery GUID.

        Raises:
            NilRequestError: If request is None. Nothing is written.
            AuthenticationError: On rejection, after the error response
                                 has been written to writer.
        """
        if request is None:
            raise NilRequestError()

        started = time.perf_counter()
        try:
            context = await self._authenticate(request, writer)
        except AuthenticationError as e:
            duration = time.perf_counter() - started
            logger.warning(
                "Rejected webhook delivery",
                extra={
                    "outcome": outcome_for(e),
                    "status_code": e.status_code,
                    "method": request.method,
                    "delivery": request.headers.get(HEADER_EVENT_GUID, ""),
                },
            )
            if self.metrics is not None:
                self.metrics.record_rejected(e, duration)
            raise

        duration = time.perf_counter() - started
        logger.info(
            "Accepted webhook delivery",
            extra={
                "event_type": context.event_type,
                "delivery": context.event_guid,
                "payload_bytes": len(context.payload),
            },
        )
        if self.metrics is not None:
            self.metrics.record_accepted(len(context.payload), duration)
        return context

    async def _authenticate(
        self,
        request: WebhookRequest,
        writer: Optional[ResponseWriter],
    ) -> AuthenticationContext:
        context = AuthenticationContext()
        headers = request.headers

        if request.method != "POST":
            raise handle_error(writer, MethodNotAllowedError())

        if headers.get(HEADER_USER_AGENT, "") != self.user_agent:
            raise handle_error(writer, InvalidSenderError())

        if not (headers.get(HEADER_CONTENT_TYPE) or "").startswith(JSON_CONTENT_TYPE):
            raise handle_error(writer, UnsupportedMediaTypeError())

        context.event_type = headers.get(HEADER_EVENT_TYPE) or ""
        if not context.event_type:
            raise handle_error(writer, MissingEventTypeError())

        signature = headers.get(HEADER_SIGNATURE) or ""
        if not signature:
            raise handle_error(writer, MissingSignatureError())

        try:
            context.payload = await capture_payload(request, self.read_timeout)
        except BodyReadError as e:
            raise handle_error(writer, e)

        if not verify_signature(signature, self._sign_key, context.payload):
            raise handle_error(writer, InvalidSignatureError())

        context.event_guid = headers.get(HEADER_EVENT_GUID) or ""
        return context
