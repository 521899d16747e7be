"""Slack request signature verification (signing secret, v0 scheme)."""

import hashlib
import hmac
import logging
import os
import time

logger = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"
MAX_REQUEST_AGE_SECONDS = 60 * 5


def verify_slack_request(
    signature: str,
    timestamp: str,
    raw_body: str | bytes,
    *,
    signing_secret: str | None = None,
    now: float | None = None,
) -> bool:
    """
    Check that a request was signed by Slack within the replay window.

    Args:
        signature: `X-Slack-Signature` header, e.g. `v0=ab12...`.
        timestamp: `X-Slack-Request-Timestamp` header (unix seconds).
        raw_body: Exact request body as received.
        signing_secret: Override for SLACK_SIGNING_SECRET.
        now: Override for the current unix time.
    Returns:
        True only for a fresh request with a matching signature. Never raises.
    """
    secret = signing_secret if signing_secret is not None else os.getenv("SLACK_SIGNING_SECRET", "")
    if not secret:
        logger.error("SLACK_SIGNING_SECRET not set; rejecting request.")
        return False
    if not signature or not timestamp:
        logger.warning("Missing Slack signature headers.")
        return False

    try:
        request_time = int(timestamp)
    except (TypeError, ValueError):
        logger.warning("Malformed Slack request timestamp: %r", timestamp)
        return False
    current = time.time() if now is None else now
    if abs(current - request_time) > MAX_REQUEST_AGE_SECONDS:
        logger.warning("Slack request timestamp outside replay window: %s", timestamp)
        return False

    # Signed over the raw bytes; the body is never decoded.
    body = raw_body if isinstance(raw_body, bytes) else raw_body.encode("utf-8")
    basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    expected = f"{SIGNATURE_VERSION}=" + hmac.new(
        secret.encode("utf-8"), basestring, hashlib.sha256
    ).hexdigest()
    try:
        matched = hmac.compare_digest(expected.encode("utf-8"), signature.encode("utf-8"))
    except (AttributeError, UnicodeEncodeError):
        matched = False
    if not matched:
        logger.warning("Slack signature mismatch.")
    return matched
