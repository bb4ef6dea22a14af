"""HMAC-SHA256 signing and verification for webhook payloads.

GitCode signs every delivery with the shared secret and sends the result
in the X-GitCode-Signature-256 header as ``sha256=<lowercase hex digest>``.
Digests are compared with hmac.compare_digest so the comparison time does
not depend on where the digests first differ.
"""

import hashlib
import hmac
from typing import Union

SIGNATURE_PREFIX = "sha256="


def _key_bytes(secret: Union[str, bytes]) -> bytes:
    if isinstance(secret, str):
        return secret.encode("utf-8")
    return bytes(secret)


def compute_digest(payload: bytes, secret: Union[str, bytes]) -> str:
    """Return the lowercase hex HMAC-SHA256 of payload keyed by secret."""
    return hmac.new(_key_bytes(secret), payload, hashlib.sha256).hexdigest()


def sign_payload(payload: bytes, secret: Union[str, bytes]) -> str:
    """Build the signature header value for a payload.

    Args:
        payload: Raw request body bytes.
        secret: Shared webhook secret.

    Returns:
        Header value in the form ``sha256=<hex digest>``.
    """
    return SIGNATURE_PREFIX + compute_digest(payload, secret)


def verify_signature(
    signature_header: str,
    secret: Union[str, bytes],
    payload: bytes,
) -> bool:
    """Verify a signature header against a payload.

    A header without the ``sha256=`` prefix is rejected before any MAC is
    computed.

    Args:
        signature_header: Value of the X-GitCode-Signature-256 header.
        secret: Shared webhook secret.
        payload: Raw request body bytes, exactly as captured.

    Returns:
        True if the signature matches, False otherwise.
    """
    if not signature_header or not signature_header.startswith(SIGNATURE_PREFIX):
        return False

    expected = compute_digest(payload, secret).encode("ascii")
    provided = signature_header[len(SIGNATURE_PREFIX):].encode(
        "utf-8", "surrogatepass"
    )
    return hmac.compare_digest(expected, provided)
