"""Error taxonomy for webhook authentication.

Every rejection the authenticator can produce is an AuthenticationError
subclass carrying the HTTP status code and the plain-text message written
back to the sender. Programmer and configuration errors share the
WebhookError base but are never written to a client.

Status codes:
- MethodNotAllowedError: 405
- InvalidSenderError: 400
- UnsupportedMediaTypeError: 400
- MissingEventTypeError: 400
- BodyReadError: 400
- MissingSignatureError: 401
- InvalidSignatureError: 403
"""

from typing import Optional


class WebhookError(Exception):
    """Base class for all webhook gateway errors.

    Attributes:
        message: Human-readable error description.
    """

    default_message = "webhook error"

    def __init__(self, message: Optional[str] = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidConfigurationError(WebhookError):
    """Raised when the authenticator is configured with an empty secret."""

    default_message = "token should be non-nil/non-empty"


class NilRequestError(WebhookError):
    """Raised when authenticate() is called without a request."""

    default_message = "http request should be non-nil"


class NilResponseSinkError(WebhookError):
    """Raised when an error response is written to a missing writer."""

    default_message = "http response should be non-nil"


class InvalidStatusCodeUsageError(WebhookError):
    """Raised when a non-error status code is routed through the error path.

    Attributes:
        status_code: The rejected status code.
    """

    def __init__(self, status_code: int):
        self.status_code = status_code
        super().__init__(
            f"http response status code can not be setting to {status_code}"
        )


class AuthenticationError(WebhookError):
    """A classified rejection of an inbound delivery.

    Attributes:
        message: Plain-text body written to the sender.
        status_code: HTTP status code written to the sender.
    """

    status_code = 400

    def __init__(
        self,
        message: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)


class MethodNotAllowedError(AuthenticationError):
    status_code = 405
    default_message = "Method Not Allowed"


class InvalidSenderError(AuthenticationError):
    status_code = 400
    default_message = "400 Bad Request: Invalid User-Agent Header"


class UnsupportedMediaTypeError(AuthenticationError):
    status_code = 400
    default_message = (
        "400 Bad Request: Hook only accepts content-type: application/json"
    )


class MissingEventTypeError(AuthenticationError):
    status_code = 400
    default_message = "400 Bad Request: Missing X-GitCode-Event Header"


class BodyReadError(AuthenticationError):
    status_code = 400
    default_message = "400 Bad Request: Failed to read request body"


class MissingSignatureError(AuthenticationError):
    status_code = 401
    default_message = "401 Unauthorized: Missing X-GitCode-Token"


class InvalidSignatureError(AuthenticationError):
    status_code = 403
    default_message = "403 Forbidden: Invalid X-GitCode-Token"
