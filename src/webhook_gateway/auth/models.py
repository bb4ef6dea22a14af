"""Data models for inbound webhook authentication.

WebhookRequest is the transport-neutral view of an inbound delivery that
the authenticator consumes. AuthenticationContext is the per-request result
handed to the caller once a delivery has been authenticated.

The models use Pydantic where values are plain data, consistent with the
service configuration in config.py.
"""

from dataclasses import dataclass
from typing import Any, AsyncIterator, Mapping, Optional, Protocol, Union

from pydantic import BaseModel, Field
from starlette.datastructures import Headers
from starlette.requests import Request


class RequestBody(Protocol):
    """A single-read stream of body chunks.

    Starlette's ``Request.stream()`` async generator satisfies this protocol.
    """

    def __aiter__(self) -> AsyncIterator[bytes]:
        ...

    async def aclose(self) -> None:
        ...


class _NoBody:
    """Body that is present but already drained."""

    def __aiter__(self) -> "_NoBody":
        return self

    async def __anext__(self) -> bytes:
        raise StopAsyncIteration

    async def aclose(self) -> None:
        return None

    def __repr__(self) -> str:
        return "NO_BODY"


NO_BODY = _NoBody()


@dataclass
class WebhookRequest:
    """An inbound delivery as seen by the authenticator.

    Attributes:
        method: HTTP method, e.g. "POST".
        headers: Case-insensitive header mapping.
        body: None when the request carries no body, NO_BODY when the body
              was already drained, otherwise a single-read chunk stream.
    """

    method: str
    headers: Mapping[str, str]
    body: Optional[Union[RequestBody, _NoBody]] = None

    @classmethod
    def from_starlette(cls, request: Request) -> "WebhookRequest":
        """Build a WebhookRequest from a Starlette/FastAPI request."""
        return cls(
            method=request.method,
            headers=request.headers,
            body=request.stream(),
        )

    @classmethod
    def build(
        cls,
        method: str,
        headers: Optional[Mapping[str, str]] = None,
        body: Any = None,
    ) -> "WebhookRequest":
        """Build a WebhookRequest with case-insensitive headers."""
        return cls(
            method=method,
            headers=Headers(headers=dict(headers or {})),
            body=body,
        )


class AuthenticationContext(BaseModel):
    """Result of authenticating one webhook delivery.

    A context is created fresh for every request and filled in as the
    validation sequence progresses. It is never shared between requests.

    Attributes:
        payload: Raw request body, exactly the bytes the signature covers.
        event_type: Value of the event header. Empty until validated.
        event_guid: Value of the delivery header. May be empty.
    """

    payload: bytes = Field(
        default=b"",
        description="Raw, unparsed request body as captured",
    )

    event_type: str = Field(
        default="",
        description="Event type discriminator from the X-GitCode-Event header",
    )

    event_guid: str = Field(
        default="",
        description="Delivery identifier from the X-GitCode-Delivery header",
    )

    @property
    def is_validated(self) -> bool:
        """Whether the event type header has been accepted."""
        return bool(self.event_type)
