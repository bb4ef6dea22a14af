"""Single-read capture of webhook request bodies."""

import asyncio
import logging
from typing import Optional

from starlette.requests import ClientDisconnect

from .errors import BodyReadError
from .models import NO_BODY, WebhookRequest


logger = logging.getLogger(__name__)


async def _drain(body) -> bytes:
    chunks = []
    async for chunk in body:
        if chunk:
            chunks.append(chunk)
    return b"".join(chunks)


async def capture_payload(
    request: WebhookRequest,
    timeout: Optional[float] = None,
) -> bytes:
    """Read the whole request body into an owned buffer.

    The body stream is closed on every exit path. A missing body and an
    already drained body both yield ``b""``.

    Args:
        request: The inbound delivery.
        timeout: Seconds allowed for the read. None waits indefinitely.

    Returns:
        The captured body bytes.

    Raises:
        BodyReadError: If the stream fails, the client disconnects, or
                       the timeout elapses before the body is drained.
    """
    body = request.body
    if body is None:
        return b""

    try:
        if body is NO_BODY:
            return b""
        return await asyncio.wait_for(_drain(body), timeout)
    except asyncio.TimeoutError as e:
        logger.warning(
            "Timed out reading webhook body",
            extra={"timeout": timeout},
        )
        raise BodyReadError() from e
    except (OSError, ClientDisconnect) as e:
        logger.warning(
            "Failed to read webhook body",
            extra={"error": str(e) or type(e).__name__},
        )
        raise BodyReadError() from e
    finally:
        await body.aclose()
