import base64
import binascii
import hashlib
import hmac
from typing import Mapping, Optional, Union

from .constants import (
    WEBHOOK_ID_HEADER,
    WEBHOOK_SIGNATURE_HEADER,
    WEBHOOK_TIMESTAMP_HEADER,
)
from .errors import InvalidInputError


def _header(headers: Mapping[str, str], name: str) -> Optional[str]:
    value = headers.get(name)
    if value is not None:
        return value
    for key, candidate in headers.items():
        if key.lower() == name:
            return candidate
    return None


def compute_signature(
    secret: str, webhook_id: str, timestamp: str, body: str
) -> str:
    """base64(HMAC-SHA256(key, "{id}.{timestamp}.{body}")).

    The key is the base64 decoded part of the secret after its ``whsec_`` style prefix.
    """
    try:
        key = base64.b64decode(secret.split("_", 1)[-1], validate=True)
    except binascii.Error as e:
        raise InvalidInputError(f"Invalid webhook secret: {e}") from e
    signed_content = f"{webhook_id}.{timestamp}.{body}".encode("utf-8")
    digest = hmac.new(key, signed_content, hashlib.sha256).digest()
    return base64.b64encode(digest).decode("ascii")


def validate_webhook(
    body: Union[str, bytes],
    secret: str,
    headers: Optional[Mapping[str, str]] = None,
    webhook_id: Optional[str] = None,
    timestamp: Optional[str] = None,
    signature: Optional[str] = None,
) -> bool:
    """Checks the signature of an incoming webhook request.

    Pass either the request ``headers`` or the ``webhook_id``, ``timestamp`` and
    ``signature`` header values directly, together with the raw request body and
    the signing secret from ``client.webhooks.default_secret()``.

    The signature header is a space delimited list of ``v1,<signature>`` entries.
    The webhook is valid if any of them matches.

    Raises:
        InvalidInputError: a header, the body or the secret is missing
    """
    if headers is not None:
        webhook_id = _header(headers, WEBHOOK_ID_HEADER)
        timestamp = _header(headers, WEBHOOK_TIMESTAMP_HEADER)
        signature = _header(headers, WEBHOOK_SIGNATURE_HEADER)

    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError as e:
            raise InvalidInputError(f"Webhook body is not valid UTF-8: {e}") from e
    elif not isinstance(body, str):
        raise InvalidInputError(f"Invalid body type {type(body).__name__}")

    if not webhook_id or not timestamp or not signature:
        raise InvalidInputError("Missing required webhook headers")
    if not body:
        raise InvalidInputError("Missing required body")
    if not secret:
        raise InvalidInputError("Missing required secret")

    computed = compute_signature(secret, webhook_id, timestamp, body)
    expected_signatures = [
        token.split(",", 1)[1]
        for token in signature.split(" ")
        if "," in token
    ]
    return any(
        hmac.compare_digest(expected.encode("utf-8"), computed.encode("utf-8"))
        for expected in expected_signatures
    )
