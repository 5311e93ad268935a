import json
import urllib.parse
from datetime import date

import pytest

from slackapp.exceptions import PayloadParseError
from slackapp.payloads import (LEAVE_MODAL_CALLBACK_ID, LeaveFormValues, SlashCommand, ViewClosed,
                               ViewSubmission, parse_interaction_body)


def form_state(leave_type="ANNUAL_LEAVE", duration="FULL_DAY", start="2024-01-15", end="2024-01-16",
               reason=None):
    def choice(value):
        return {"type": "radio_buttons", "selected_option": {"value": value} if value else None}

    return {
        "leave_type_category_block": {"leave_type_category_action": choice(leave_type)},
        "leave_duration_block": {"leave_duration_action": choice(duration)},
        "start_date_block": {"start_date_action": {"type": "datepicker", "selected_date": start}},
        "end_date_block": {"end_date_action": {"type": "datepicker", "selected_date": end}},
        "reason_block": {"reason_action": {"type": "plain_text_input", "value": reason}},
    }


def interaction_body(payload) -> bytes:
    return urllib.parse.urlencode({"payload": json.dumps(payload)}).encode()


class TestSlashCommand:
    def test_parses_form_encoded_body(self):
        body = urllib.parse.urlencode({
            "command": "/leave",
            "user_id": "U123",
            "user_name": "alex",
            "channel_id": "C123",
            "channel_name": "general",
            "trigger_id": "13345224609.738474920.8088930838d88f008e0",
        }).encode()

        command = SlashCommand.from_body(body)

        assert command == SlashCommand(
            command="/leave", user_id="U123", user_name="alex", channel_id="C123",
            channel_name="general", trigger_id="13345224609.738474920.8088930838d88f008e0",
        )

    def test_missing_trigger_id_is_a_parse_error(self):
        body = urllib.parse.urlencode({"command": "/leave", "user_id": "U123", "channel_id": "C123"}).encode()
        with pytest.raises(PayloadParseError, match="trigger_id"):
            SlashCommand.from_body(body)


class TestInteractionBody:
    def test_view_submission(self):
        payload = parse_interaction_body(interaction_body({
            "type": "view_submission",
            "user": {"id": "U123"},
            "view": {
                "id": "V123",
                "callback_id": LEAVE_MODAL_CALLBACK_ID,
                "private_metadata": "meta",
                "state": {"values": form_state()},
            },
        }))

        assert isinstance(payload, ViewSubmission)
        assert payload.view_id == "V123"
        assert payload.private_metadata == "meta"
        assert payload.user_id == "U123"

    def test_view_closed(self):
        payload = parse_interaction_body(interaction_body({
            "type": "view_closed",
            "user": {"id": "U123"},
            "view": {"id": "V123", "callback_id": LEAVE_MODAL_CALLBACK_ID, "private_metadata": "meta"},
        }))

        assert payload == ViewClosed(view_id="V123", callback_id=LEAVE_MODAL_CALLBACK_ID,
                                     private_metadata="meta", user_id="U123")

    def test_unknown_type_is_rejected(self):
        with pytest.raises(PayloadParseError, match="block_actions"):
            parse_interaction_body(interaction_body({"type": "block_actions", "view": {"id": "V1"}}))

    @pytest.mark.parametrize("body", [b"", b"payload=not-json", b"payload=%5B1%5D"])
    def test_unreadable_envelope_is_rejected(self, body):
        with pytest.raises(PayloadParseError):
            parse_interaction_body(body)

    def test_submission_without_state_is_rejected(self):
        with pytest.raises(PayloadParseError):
            parse_interaction_body(interaction_body({"type": "view_submission", "view": {"id": "V1"}}))


class TestLeaveFormValues:
    def test_decodes_every_field(self):
        values = LeaveFormValues.from_state(form_state(reason="  Family trip "))

        assert values == LeaveFormValues(
            leave_type="ANNUAL_LEAVE",
            duration_type="FULL_DAY",
            start_date=date(2024, 1, 15),
            end_date=date(2024, 1, 16),
            reason="Family trip",
        )

    def test_reason_is_optional(self):
        state = form_state()
        del state["reason_block"]
        assert LeaveFormValues.from_state(state).reason is None

    @pytest.mark.parametrize("block", ["leave_type_category_block", "leave_duration_block",
                                       "start_date_block", "end_date_block"])
    def test_missing_required_block_is_a_parse_error(self, block):
        state = form_state()
        del state[block]
        with pytest.raises(PayloadParseError, match=block):
            LeaveFormValues.from_state(state)

    def test_unselected_option_is_not_defaulted(self):
        with pytest.raises(PayloadParseError, match="No option selected"):
            LeaveFormValues.from_state(form_state(duration=None))

    def test_unknown_option_is_rejected(self):
        with pytest.raises(PayloadParseError, match="Invalid option"):
            LeaveFormValues.from_state(form_state(leave_type="SICK_LEAVE"))

    def test_invalid_date_is_rejected(self):
        with pytest.raises(PayloadParseError, match="Invalid date"):
            LeaveFormValues.from_state(form_state(end="16/01/2024"))

    def test_task_argument_form_restores_the_values(self):
        values = LeaveFormValues.from_state(form_state(end="2024-01-15", duration="SECOND_HALF"))
        assert LeaveFormValues.from_dict(json.loads(json.dumps(values.as_dict()))) == values
