import json
import urllib.parse
from datetime import date

import pytest
from slack_sdk.errors import SlackApiError

from leaves.models import Leave, LeaveStatus, OriginKind, OriginReference
from slackapp.metadata import InteractionContext, decode_context, encode_context
from slackapp.payloads import LEAVE_MODAL_CALLBACK_ID
from slackapp.tests.test_payloads import form_state

pytestmark = pytest.mark.django_db

ANCHOR_TS = "1705312800.000100"
COMMANDS_URL = "/slack/commands/"
INTERACTIONS_URL = "/slack/interactions/"
CONTEXT = InteractionContext(user_id="U123", channel_id="C123", channel_name="general", thread_ts=ANCHOR_TS)


def slack_error(error="channel_not_found"):
    return SlackApiError("The request to the Slack API failed.", {"ok": False, "error": error})


def command_body(command="/leave", **overrides) -> bytes:
    fields = {
        "command": command,
        "text": "",
        "user_id": "U123",
        "user_name": "alex",
        "channel_id": "C123",
        "channel_name": "general",
        "trigger_id": "13345224609.738474920.8088930838d88f008e0",
    }
    fields.update(overrides)
    return urllib.parse.urlencode(fields).encode()


def submission_body(view_id="V123", context=CONTEXT, callback_id=LEAVE_MODAL_CALLBACK_ID, **state) -> bytes:
    payload = {
        "type": "view_submission",
        "user": {"id": context.user_id},
        "view": {
            "id": view_id,
            "callback_id": callback_id,
            "private_metadata": encode_context(context),
            "state": {"values": form_state(**state)},
        },
    }
    return urllib.parse.urlencode({"payload": json.dumps(payload)}).encode()


def closed_body(context=CONTEXT, private_metadata=None) -> bytes:
    payload = {
        "type": "view_closed",
        "user": {"id": context.user_id},
        "view": {
            "id": "V123",
            "callback_id": LEAVE_MODAL_CALLBACK_ID,
            "private_metadata": encode_context(context) if private_metadata is None else private_metadata,
        },
    }
    return urllib.parse.urlencode({"payload": json.dumps(payload)}).encode()


def posted_messages(slack_client):
    return [call.kwargs for call in slack_client.chat_postMessage.call_args_list]


class TestSlashCommand:
    def test_posts_anchor_and_opens_modal_with_context(self, signed_post, slack_client):
        response = signed_post(COMMANDS_URL, command_body())

        assert response.status_code == 200
        assert response.content == b""

        [anchor] = posted_messages(slack_client)
        assert anchor["channel"] == "C123"
        assert "thread_ts" not in anchor
        assert "<@U123>" in anchor["text"]

        slack_client.views_open.assert_called_once()
        call = slack_client.views_open.call_args.kwargs
        assert call["trigger_id"] == "13345224609.738474920.8088930838d88f008e0"
        view = call["view"]
        assert view["callback_id"] == LEAVE_MODAL_CALLBACK_ID
        assert view["notify_on_close"] is True
        assert decode_context(view["private_metadata"]) == CONTEXT

    def test_failed_anchor_still_opens_modal_without_thread(self, signed_post, slack_client):
        slack_client.chat_postMessage.side_effect = slack_error()

        response = signed_post(COMMANDS_URL, command_body())

        assert response.status_code == 200
        view = slack_client.views_open.call_args.kwargs["view"]
        assert decode_context(view["private_metadata"]).thread_ts is None

    def test_failed_modal_open_is_only_logged(self, signed_post, slack_client, caplog):
        slack_client.views_open.side_effect = slack_error("expired_trigger_id")

        response = signed_post(COMMANDS_URL, command_body())

        assert response.status_code == 200
        assert "Could not open leave modal" in caplog.text

    def test_unknown_command_is_acknowledged_and_ignored(self, signed_post, slack_client):
        response = signed_post(COMMANDS_URL, command_body(command="/holiday"))

        assert response.status_code == 200
        slack_client.chat_postMessage.assert_not_called()
        slack_client.views_open.assert_not_called()

    def test_bad_signature_is_acknowledged_without_side_effects(self, signed_post, slack_client, caplog):
        response = signed_post(COMMANDS_URL, command_body(), signature="v0=" + "0" * 64)

        assert response.status_code == 200
        assert response.content == b""
        slack_client.chat_postMessage.assert_not_called()
        slack_client.views_open.assert_not_called()
        assert "Rejected Slack request" in caplog.text

    def test_get_is_not_allowed(self, client):
        assert client.get(COMMANDS_URL).status_code == 405


class TestViewSubmission:
    def test_submitted_leave_is_ingested_and_reported_in_thread(self, signed_post, slack_client):
        response = signed_post(INTERACTIONS_URL, submission_body())

        assert response.status_code == 200
        leave = Leave.objects.get()
        assert leave.user_id == "U123"
        assert leave.start_date == date(2024, 1, 15)
        assert leave.end_date == date(2024, 1, 16)
        assert leave.status == LeaveStatus.APPROVED
        assert list(leave.origin_references.values_list("origin_kind", "origin_id")) == [
            (OriginKind.SLACK, "V123")
        ]

        [reply] = posted_messages(slack_client)
        assert reply["channel"] == "C123"
        assert reply["thread_ts"] == ANCHOR_TS
        assert "<@U123>" in reply["text"]
        assert "Leave created successfully" in reply["text"]

    def test_redelivered_submission_updates_the_same_leave(self, signed_post, slack_client):
        signed_post(INTERACTIONS_URL, submission_body())
        signed_post(INTERACTIONS_URL, submission_body(end="2024-01-17"))

        assert Leave.objects.count() == 1
        assert OriginReference.objects.count() == 1
        assert Leave.objects.get().end_date == date(2024, 1, 17)

    def test_overlap_is_reported_as_failure_reply(self, signed_post, slack_client):
        signed_post(INTERACTIONS_URL, submission_body(view_id="V1"))
        existing = Leave.objects.get()
        slack_client.chat_postMessage.reset_mock()

        response = signed_post(INTERACTIONS_URL, submission_body(view_id="V2", start="2024-01-16",
                                                                 end="2024-01-18"))

        assert response.status_code == 200
        assert Leave.objects.count() == 1
        [reply] = posted_messages(slack_client)
        assert reply["thread_ts"] == ANCHOR_TS
        assert "Leave request failed" in reply["text"]
        assert str(existing.id) in json.dumps(reply["blocks"])

    def test_half_day_over_two_dates_is_reported_as_failure_reply(self, signed_post, slack_client):
        signed_post(INTERACTIONS_URL, submission_body(duration="FIRST_HALF"))

        assert not Leave.objects.exists()
        [reply] = posted_messages(slack_client)
        assert "Half-day leaves must have the same start and end date" in json.dumps(reply["blocks"])

    def test_failure_reply_that_cannot_be_posted_is_only_logged(self, signed_post, slack_client, caplog):
        slack_client.chat_postMessage.side_effect = slack_error()

        response = signed_post(INTERACTIONS_URL, submission_body(duration="FIRST_HALF"))

        assert response.status_code == 200
        assert "Could not post failure reply" in caplog.text

    def test_success_reply_failure_keeps_the_leave(self, signed_post, slack_client):
        slack_client.chat_postMessage.side_effect = slack_error()

        response = signed_post(INTERACTIONS_URL, submission_body())

        assert response.status_code == 200
        assert Leave.objects.count() == 1

    def test_reply_without_thread_goes_to_the_channel(self, signed_post, slack_client):
        context = InteractionContext(user_id="U123", channel_id="C123")

        signed_post(INTERACTIONS_URL, submission_body(context=context))

        [reply] = posted_messages(slack_client)
        assert reply["channel"] == "C123"
        assert "thread_ts" not in reply

    def test_incomplete_form_is_not_ingested(self, signed_post, slack_client):
        signed_post(INTERACTIONS_URL, submission_body(start=None))

        assert not Leave.objects.exists()
        slack_client.chat_postMessage.assert_not_called()

    def test_unknown_callback_is_ignored(self, signed_post, slack_client):
        response = signed_post(INTERACTIONS_URL, submission_body(callback_id="some_other_modal"))

        assert response.status_code == 200
        assert not Leave.objects.exists()
        slack_client.chat_postMessage.assert_not_called()

    def test_bad_signature_does_not_ingest(self, signed_post, slack_client):
        response = signed_post(INTERACTIONS_URL, submission_body(), signature="v0=deadbeef")

        assert response.status_code == 200
        assert not Leave.objects.exists()
        slack_client.chat_postMessage.assert_not_called()

    def test_stale_timestamp_does_not_ingest(self, signed_post, slack_client):
        response = signed_post(INTERACTIONS_URL, submission_body(), timestamp="1000000000")

        assert response.status_code == 200
        assert not Leave.objects.exists()


class TestViewClosed:
    def test_cancellation_notice_is_posted_in_thread(self, signed_post, slack_client):
        response = signed_post(INTERACTIONS_URL, closed_body())

        assert response.status_code == 200
        [notice] = posted_messages(slack_client)
        assert notice["channel"] == "C123"
        assert notice["thread_ts"] == ANCHOR_TS
        assert "Leave request cancelled" in notice["text"]
        assert not Leave.objects.exists()

    def test_failed_cancellation_notice_is_only_logged(self, signed_post, slack_client, caplog):
        slack_client.chat_postMessage.side_effect = slack_error()

        response = signed_post(INTERACTIONS_URL, closed_body())

        assert response.status_code == 200
        assert "Could not post cancellation notice" in caplog.text

    def test_malformed_metadata_is_acknowledged(self, signed_post, slack_client, caplog):
        response = signed_post(INTERACTIONS_URL, closed_body(private_metadata="not json"))

        assert response.status_code == 200
        slack_client.chat_postMessage.assert_not_called()
        assert "Could not process Slack interaction" in caplog.text


def test_unknown_interaction_type_is_acknowledged(signed_post, slack_client):
    body = urllib.parse.urlencode({"payload": json.dumps({"type": "block_actions"})}).encode()

    response = signed_post(INTERACTIONS_URL, body)

    assert response.status_code == 200
    slack_client.chat_postMessage.assert_not_called()
