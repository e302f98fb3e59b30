"""
HMAC request signatures shared by the bridge endpoint and the worker.

Header format: ``t=<unix-ms>,v1=<hex hmac-sha256(secret, "<t>.<body>")>``.
"""

import hashlib
import hmac
import time
from typing import Optional, Tuple

from ..errors import (
    SignatureExpiredError,
    SignatureInvalidError,
    SignatureMismatchError,
    SignatureNotFoundError,
    SigningKeyNotFoundError,
)

SIGNATURE_HEADER = "x-stepbridge-signature"


def _now_ms() -> int:
    return int(time.time() * 1000)


def create_hmac(secret_key: str, data: str) -> str:
    return hmac.new(secret_key.encode(), data.encode(), hashlib.sha256).hexdigest()


def sign_body(secret_key: str, body: str, timestamp: Optional[int] = None) -> str:
    """Build the signature header value for ``body``."""
    timestamp = _now_ms() if timestamp is None else timestamp
    return f"t={timestamp},v1={create_hmac(secret_key, f'{timestamp}.{body}')}"


def parse_signature(header: str) -> Tuple[int, str]:
    parts = {}
    for item in header.split(","):
        key, sep, value = item.strip().partition("=")
        if not sep:
            raise SignatureInvalidError()
        parts[key] = value

    if "t" not in parts or "v1" not in parts:
        raise SignatureInvalidError()
    try:
        timestamp = int(parts["t"])
    except ValueError as e:
        raise SignatureInvalidError() from e
    return timestamp, parts["v1"]


def verify_signature(
    secret_key: Optional[str],
    header: Optional[str],
    body: str,
    tolerance_seconds: int = 300,
) -> None:
    """
    Verify a signature header against the raw request body.

    Raises:
        SigningKeyNotFoundError: No secret configured
        SignatureNotFoundError: Header missing
        SignatureInvalidError: Header malformed
        SignatureExpiredError: Timestamp outside the tolerance window
        SignatureMismatchError: Digest does not match
    """
    if not secret_key:
        raise SigningKeyNotFoundError()
    if not header:
        raise SignatureNotFoundError()

    timestamp, digest = parse_signature(header)
    if abs(_now_ms() - timestamp) > tolerance_seconds * 1000:
        raise SignatureExpiredError()

    expected = create_hmac(secret_key, f"{timestamp}.{body}")
    if not hmac.compare_digest(expected, digest):
        raise SignatureMismatchError()
