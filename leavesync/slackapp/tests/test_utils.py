import pytest

from slackapp.exceptions import SignatureVerificationError
from slackapp.utils import compute_slack_signature, verify_slack_signature

SECRET = "8f742231b10e8888abcd99yyyzzz85a5"
BODY = b"token=xyzz0WbapA4vBCDEFasx0q6G&command=%2Fleave&user_id=U123"
NOW = 1705312800


def verify(signature=None, timestamp=str(NOW), body=BODY, secret=SECRET, now=NOW):
    if signature is None:
        signature = compute_slack_signature(timestamp, body, secret)
    verify_slack_signature(signature, timestamp, body, secret, max_age_seconds=300, now=now)


def test_signature_has_version_prefix():
    signature = compute_slack_signature(str(NOW), BODY, SECRET)
    assert signature.startswith("v0=")
    assert len(signature) == 3 + 64


def test_valid_signature_is_accepted():
    verify()


def test_tampered_body_is_rejected():
    signature = compute_slack_signature(str(NOW), BODY, SECRET)
    with pytest.raises(SignatureVerificationError, match="mismatch"):
        verify(signature=signature, body=BODY + b"&text=extra")


def test_wrong_secret_is_rejected():
    signature = compute_slack_signature(str(NOW), BODY, "another-secret")
    with pytest.raises(SignatureVerificationError):
        verify(signature=signature)


def test_stale_timestamp_is_rejected():
    with pytest.raises(SignatureVerificationError, match="too old"):
        verify(now=NOW + 301)


@pytest.mark.parametrize("signature, timestamp", [("", str(NOW)), ("v0=abc", ""), ("v0=abc", "yesterday")])
def test_missing_or_malformed_headers_are_rejected(signature, timestamp):
    with pytest.raises(SignatureVerificationError):
        verify_slack_signature(signature, timestamp, BODY, SECRET, max_age_seconds=300, now=NOW)


def test_unconfigured_secret_is_rejected():
    with pytest.raises(SignatureVerificationError, match="not configured"):
        verify_slack_signature("v0=abc", str(NOW), BODY, None, max_age_seconds=300, now=NOW)
