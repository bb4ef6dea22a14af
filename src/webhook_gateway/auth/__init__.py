"""GitCode webhook authentication.

This package validates inbound GitCode webhook deliveries:
- Method and header framing checks
- Single-read body capture with a read deadline
- HMAC-SHA256 signature verification with constant-time comparison
- Classified error responses with 400/401/403/405 status codes
"""

from src.webhook_gateway.auth.authenticator import (
    DEFAULT_USER_AGENT,
    HEADER_CONTENT_TYPE,
    HEADER_EVENT_GUID,
    HEADER_EVENT_TYPE,
    HEADER_SIGNATURE,
    HEADER_USER_AGENT,
    WebhookAuthenticator,
)
from src.webhook_gateway.auth.capture import capture_payload
from src.webhook_gateway.auth.errors import (
    AuthenticationError,
    BodyReadError,
    InvalidConfigurationError,
    InvalidSenderError,
    InvalidSignatureError,
    InvalidStatusCodeUsageError,
    MethodNotAllowedError,
    MissingEventTypeError,
    MissingSignatureError,
    NilRequestError,
    NilResponseSinkError,
    UnsupportedMediaTypeError,
    WebhookError,
)
from src.webhook_gateway.auth.models import (
    NO_BODY,
    AuthenticationContext,
    WebhookRequest,
)
from src.webhook_gateway.auth.responses import (
    PlainTextResponseWriter,
    ResponseWriter,
    handle_error,
)
from src.webhook_gateway.auth.signature import sign_payload, verify_signature

__all__ = [
    "AuthenticationContext",
    "AuthenticationError",
    "BodyReadError",
    "DEFAULT_USER_AGENT",
    "HEADER_CONTENT_TYPE",
    "HEADER_EVENT_GUID",
    "HEADER_EVENT_TYPE",
    "HEADER_SIGNATURE",
    "HEADER_USER_AGENT",
    "InvalidConfigurationError",
    "InvalidSenderError",
    "InvalidSignatureError",
    "InvalidStatusCodeUsageError",
    "MethodNotAllowedError",
    "MissingEventTypeError",
    "MissingSignatureError",
    "NO_BODY",
    "NilRequestError",
    "NilResponseSinkError",
    "PlainTextResponseWriter",
    "ResponseWriter",
    "UnsupportedMediaTypeError",
    "WebhookAuthenticator",
    "WebhookError",
    "WebhookRequest",
    "capture_payload",
    "handle_error",
    "sign_payload",
    "verify_signature",
]
