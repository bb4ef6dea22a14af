"""Error response writing for rejected webhook deliveries.

handle_error() is the single place where a classified AuthenticationError
becomes an HTTP reply. It validates the status code, writes the headers,
then the status, then the plain-text message, and hands the error back to
the caller so it can be raised.
"""

import logging
from typing import MutableMapping, Optional, Protocol

from starlette.responses import Response

from .errors import (
    AuthenticationError,
    InvalidStatusCodeUsageError,
    NilResponseSinkError,
)


logger = logging.getLogger(__name__)


PLAIN_TEXT_CONTENT_TYPE = "text/plain; charset=utf-8"


def is_error_status(status_code: int) -> bool:
    """Whether status_code is a registered client or server error code.

    Client errors run 400-451 and server errors 500-511.
    """
    return 400 <= status_code <= 451 or 500 <= status_code <= 511


class ResponseWriter(Protocol):
    """Minimal response sink used by the authenticator."""

    headers: MutableMapping[str, str]

    def write_header(self, status_code: int) -> None:
        ...

    def write(self, data: bytes) -> None:
        ...


class PlainTextResponseWriter:
    """Buffering ResponseWriter rendered into a Starlette Response.

    The status code must be written before any body bytes. A second
    write_header() call is ignored, matching how HTTP servers treat a
    superfluous status line.

    Attributes:
        headers: Response headers to send.
        status_code: Written status code, None until write_header().
    """

    def __init__(self) -> None:
        self.headers: MutableMapping[str, str] = {}
        self.status_code: Optional[int] = None
        self._body = bytearray()

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    @property
    def written(self) -> bool:
        return self.status_code is not None

    def write_header(self, status_code: int) -> None:
        if self.status_code is not None:
            logger.warning(
                "Ignoring superfluous status code",
                extra={"status_code": status_code, "written": self.status_code},
            )
            return
        self.status_code = status_code

    def write(self, data: bytes) -> None:
        if self.status_code is None:
            raise RuntimeError("status code must be written before the body")
        self._body.extend(data)

    def to_response(self) -> Response:
        """Render the buffered reply."""
        if self.status_code is None:
            raise RuntimeError("no response has been written")
        return Response(
            content=self.body,
            status_code=self.status_code,
            headers=dict(self.headers),
        )


def handle_error(
    writer: Optional[ResponseWriter],
    error: AuthenticationError,
) -> AuthenticationError:
    """Write a classified error to the sender and return it.

    Args:
        writer: Response sink for the current request.
        error: The classified rejection.

    Returns:
        The same error, so callers can ``raise handle_error(writer, err)``.

    Raises:
        InvalidStatusCodeUsageError: If error.status_code is not a 4xx/5xx
                                     registered error code.
        NilResponseSinkError: If writer is None.
    """
    if not is_error_status(error.status_code):
        raise InvalidStatusCodeUsageError(error.status_code)
    if writer is None:
        raise NilResponseSinkError()

    writer.headers["Content-Type"] = PLAIN_TEXT_CONTENT_TYPE
    writer.headers["X-Content-Type-Options"] = "nosniff"
    writer.write_header(error.status_code)
    writer.write(error.message.encode("utf-8"))
    return error
