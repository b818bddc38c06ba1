import hashlib
import hmac
import re
import time
from urllib.parse import quote, urlencode

_DECIMAL_RE = re.compile(r"[+-]?[0-9]+")
_INT64_MIN = -(2**63)
_INT64_MAX = 2**63 - 1


class TokenError(Exception):
    """Raised when signed URL validation fails."""


def build_message(method: str, filename: str, expires: int) -> str:
    return f"{method}:{filename}:{expires:d}"


def compute_signature(secret_key: str, method: str, filename: str, expires: int) -> str:
    message = build_message(method, filename, expires)
    return hmac.new(
        secret_key.encode("utf-8"),
        message.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()


def parse_expires(raw: str) -> int:
    if not _DECIMAL_RE.fullmatch(raw):
        raise TokenError("Malformed expires")
    value = int(raw)
    if not _INT64_MIN <= value <= _INT64_MAX:
        raise TokenError("Expires out of range")
    return value


def verify_signature(
    secret_key: str,
    method: str,
    filename: str,
    expires: str | None,
    signature: str | None,
    now: int | None = None,
) -> int:
    """Check a signed URL's query parameters for ``method`` on ``filename``.

    Returns the parsed expiry. Raises ``TokenError`` with the internal reason
    when any check fails; callers must not echo that reason to clients.
    """
    if not expires or not signature:
        raise TokenError("Missing expires or signature")

    expires_at = parse_expires(expires)
    current = int(time.time()) if now is None else now
    if current > expires_at:
        raise TokenError("URL expired")

    expected = compute_signature(secret_key, method, filename, expires_at)
    if not hmac.compare_digest(expected.encode("ascii"), signature.encode("utf-8")):
        raise TokenError("Signature mismatch")
    return expires_at


def create_signed_url(
    secret_key: str,
    base_url: str,
    method: str,
    filename: str | None,
    valid_for: int,
    now: int | None = None,
) -> str:
    filename = filename or ""
    expires = (int(time.time()) if now is None else now) + valid_for
    signature = compute_signature(secret_key, method, filename, expires)

    path = "/images"
    if filename:
        path = f"{path}/{quote(filename, safe='')}"
    query = urlencode({"expires": expires, "signature": signature})
    return f"{base_url.rstrip('/')}{path}?{query}"
