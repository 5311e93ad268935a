# leavesync/slackapp/utils.py

"""
Security and Utility Functions for the Slack App.

This module contains the verification of Slack's request signatures. Every
Slack webhook view is wrapped in `slack_verification_required`, so nothing in
a request body is parsed before the request is proven to come from Slack.
"""

# Standard library imports
import hashlib
import hmac
import logging
import time
from functools import wraps
from typing import Optional

# Django imports
from django.conf import settings
from django.http import HttpRequest, HttpResponse

# Local application imports
from .exceptions import SignatureVerificationError

# Initialize a logger for this module.
LOGGER = logging.getLogger(__name__)

SIGNATURE_VERSION = "v0"


def compute_slack_signature(timestamp: str, body: bytes, signing_secret: str) -> str:
    """Returns the `X-Slack-Signature` value Slack would send for this body."""
    sig_basestring = f"{SIGNATURE_VERSION}:{timestamp}:".encode("utf-8") + body
    digest = hmac.new(
        key=signing_secret.encode("utf-8"),
        msg=sig_basestring,
        digestmod=hashlib.sha256,
    ).hexdigest()
    return f"{SIGNATURE_VERSION}={digest}"


def verify_slack_signature(signature: Optional[str], timestamp: Optional[str], body: bytes,
                           signing_secret: str, max_age_seconds: int,
                           now: Optional[float] = None) -> None:
    """
    Implements Slack's request signing protocol.

    1.  **Timestamp Check:** the `X-Slack-Request-Timestamp` must be within
        `max_age_seconds` of now, which blocks replayed requests.
    2.  **Signature Generation:** HMAC-SHA256 over `v0:{timestamp}:{raw body}`
        keyed with the signing secret.
    3.  **HMAC Comparison:** the result is compared to `X-Slack-Signature` in
        constant time.

    Args:
        signature: The `X-Slack-Signature` header.
        timestamp: The `X-Slack-Request-Timestamp` header.
        body: The raw, unparsed request body.
        signing_secret: The app's signing secret.
        max_age_seconds: The tolerated clock difference.
        now: The current epoch time; defaults to `time.time()`.

    Raises:
        SignatureVerificationError: if any of the checks fails.
    """
    if not signing_secret:
        raise SignatureVerificationError("SLACK_SIGNING_SECRET is not configured")
    if not signature or not timestamp:
        raise SignatureVerificationError("Missing Slack signature or timestamp headers")

    try:
        request_time = int(timestamp)
    except ValueError as e:
        raise SignatureVerificationError(f"Invalid Slack timestamp: {timestamp!r}") from e

    current_time = time.time() if now is None else now
    if abs(current_time - request_time) > max_age_seconds:
        raise SignatureVerificationError("Slack request timestamp is too old")

    expected = compute_slack_signature(timestamp, body, signing_secret)
    if not hmac.compare_digest(expected, signature):
        raise SignatureVerificationError("Slack signature mismatch")


def slack_verification_required(view_func):
    """
    A Django view decorator to verify that an incoming request is from Slack.

    A request that fails verification never reaches the view. It is logged
    and answered with an empty 200, like every other Slack-facing failure,
    so that Slack does not retry it.

    Usage:
        @slack_verification_required
        def my_slack_view(request):
            # This code will only run if the request is verified.
            ...
    """
    @wraps(view_func)
    def wrapper(request: HttpRequest, *args, **kwargs):
        try:
            verify_slack_signature(
                signature=request.headers.get("X-Slack-Signature"),
                timestamp=request.headers.get("X-Slack-Request-Timestamp"),
                body=request.body,
                signing_secret=settings.SLACK_SIGNING_SECRET,
                max_age_seconds=settings.SLACK_REQUEST_MAX_AGE_SECONDS,
            )
        except SignatureVerificationError as e:
            LOGGER.warning(f"Rejected Slack request to {request.path}: {e}")
            return HttpResponse(status=200)
        return view_func(request, *args, **kwargs)

    return wrapper
