# leavesync/conftest.py

"""Shared pytest fixtures for the leaves and slackapp test suites."""

import time
from unittest.mock import patch

import pytest

from leavesync.celery import app as celery_app
from slackapp.utils import compute_slack_signature

SIGNING_SECRET = "test-signing-secret"
ANCHOR_TS = "1705312800.000100"


@pytest.fixture(autouse=True)
def celery_eager():
    """Runs Celery tasks inline so their side effects are visible to the test."""
    # The app reads Django settings under the CELERY_ namespace, where the
    # prefixed keys take precedence over the plain ones.
    keys = ("CELERY_TASK_ALWAYS_EAGER", "CELERY_TASK_EAGER_PROPAGATES")
    previous = {key: celery_app.conf.get(key) for key in keys}
    celery_app.conf.update({key: True for key in keys})
    yield
    celery_app.conf.update(previous)


@pytest.fixture(autouse=True)
def slack_settings(settings):
    settings.SLACK_SIGNING_SECRET = SIGNING_SECRET
    settings.SLACK_LEAVE_COMMAND = "/leave"
    settings.SLACK_REQUEST_MAX_AGE_SECONDS = 300
    settings.LEAVE_OUTBOUND_SYNC_BACKEND = "leaves.sync.LoggingOutboundSync"
    return settings


@pytest.fixture
def slack_client():
    """The module-level Slack WebClient, replaced by a mock."""
    with patch("slackapp.messaging.SLACK_CLIENT") as client:
        client.chat_postMessage.return_value = {"ok": True, "ts": ANCHOR_TS, "channel": "C123"}
        client.views_open.return_value = {"ok": True}
        yield client


@pytest.fixture
def signed_post(client):
    """
    Posts a raw form-encoded body to a Slack endpoint with valid signature headers.

    Pass `signature` or `timestamp` to override either header.
    """
    def _post(path, body: bytes, signature=None, timestamp=None):
        timestamp = timestamp or str(int(time.time()))
        signature = signature or compute_slack_signature(timestamp, body, SIGNING_SECRET)
        return client.post(
            path,
            data=body,
            content_type="application/x-www-form-urlencoded",
            HTTP_X_SLACK_SIGNATURE=signature,
            HTTP_X_SLACK_REQUEST_TIMESTAMP=timestamp,
        )
    return _post
