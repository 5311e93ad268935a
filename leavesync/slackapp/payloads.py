# leavesync/slackapp/payloads.py

"""
Typed Slack Webhook Payloads.

Slack delivers three payload shapes to this app:

- `SlashCommand`: a form-encoded body posted to the commands endpoint.
- `ViewSubmission`: a JSON document in the `payload` field of a form-encoded
  body, sent when the user submits the leave modal.
- `ViewClosed`: the same envelope, sent when the user dismisses the modal.

Interaction payloads are told apart by their `type` field. Only the types in
`INTERACTION_PAYLOAD_TYPES` are accepted; anything else is a parse error.

The modal's nested `state.values` is decoded by `LeaveFormValues.from_state`,
with one extractor per form field. A missing or malformed required field is
a parse error; nothing is defaulted.
"""

# Standard library imports
import json
import urllib.parse
from dataclasses import dataclass
from datetime import date
from typing import Any, Dict, Optional, Union

# Local application imports
from leaves.models import DurationType, LeaveType

from .exceptions import PayloadParseError

# --- Modal identifiers ---
LEAVE_MODAL_CALLBACK_ID = "leave_application_submit"

LEAVE_TYPE_BLOCK, LEAVE_TYPE_ACTION = "leave_type_category_block", "leave_type_category_action"
DURATION_BLOCK, DURATION_ACTION = "leave_duration_block", "leave_duration_action"
START_DATE_BLOCK, START_DATE_ACTION = "start_date_block", "start_date_action"
END_DATE_BLOCK, END_DATE_ACTION = "end_date_block", "end_date_action"
REASON_BLOCK, REASON_ACTION = "reason_block", "reason_action"


# ==============================================================================
# 1. Slash Commands
# ==============================================================================

@dataclass(frozen=True)
class SlashCommand:
    command: str
    user_id: str
    user_name: str
    channel_id: str
    channel_name: str
    trigger_id: str
    text: str = ""

    @classmethod
    def from_body(cls, body: bytes) -> "SlashCommand":
        """
        Parses the raw form-encoded body of a slash command request.

        Raises:
            PayloadParseError: the body is not UTF-8 or lacks the command,
                               user, channel or trigger id.
        """
        try:
            fields = urllib.parse.parse_qs(body.decode("utf-8"))
        except UnicodeDecodeError as e:
            raise PayloadParseError(f"Slash command body is not UTF-8: {e}") from e

        def first(name: str) -> str:
            return fields.get(name, [""])[0]

        command = cls(
            command=first("command"),
            user_id=first("user_id"),
            user_name=first("user_name"),
            channel_id=first("channel_id"),
            channel_name=first("channel_name"),
            trigger_id=first("trigger_id"),
            text=first("text"),
        )
        missing = [name for name in ("command", "user_id", "channel_id", "trigger_id")
                   if not getattr(command, name)]
        if missing:
            raise PayloadParseError(f"Slash command is missing {', '.join(missing)}")
        return command


# ==============================================================================
# 2. Interaction Payloads
# ==============================================================================

@dataclass(frozen=True)
class ViewSubmission:
    view_id: str
    callback_id: str
    private_metadata: str
    user_id: str
    state_values: Dict[str, Dict[str, Any]]

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ViewSubmission":
        view = _require_view(payload)
        state = view.get("state") or {}
        values = state.get("values")
        if not isinstance(values, dict):
            raise PayloadParseError("View submission has no state values")
        return cls(
            view_id=view["id"],
            callback_id=view.get("callback_id") or "",
            private_metadata=view.get("private_metadata") or "",
            user_id=(payload.get("user") or {}).get("id", ""),
            state_values=values,
        )


@dataclass(frozen=True)
class ViewClosed:
    view_id: str
    callback_id: str
    private_metadata: str
    user_id: str

    @classmethod
    def from_payload(cls, payload: Dict[str, Any]) -> "ViewClosed":
        view = _require_view(payload)
        return cls(
            view_id=view["id"],
            callback_id=view.get("callback_id") or "",
            private_metadata=view.get("private_metadata") or "",
            user_id=(payload.get("user") or {}).get("id", ""),
        )


InteractionPayload = Union[ViewSubmission, ViewClosed]

INTERACTION_PAYLOAD_TYPES = {
    "view_submission": ViewSubmission,
    "view_closed": ViewClosed,
}


def parse_interaction_body(body: bytes) -> InteractionPayload:
    """
    Parses the raw body of an interaction request into its typed variant.

    Raises:
        PayloadParseError: the envelope is malformed or the payload type is
                           not one this app handles.
    """
    try:
        fields = urllib.parse.parse_qs(body.decode("utf-8"))
        payload = json.loads(fields["payload"][0])
    except (UnicodeDecodeError, KeyError, IndexError, ValueError) as e:
        raise PayloadParseError(f"Interaction body has no readable payload: {e}") from e
    if not isinstance(payload, dict):
        raise PayloadParseError("Interaction payload is not a JSON object")

    payload_type = payload.get("type")
    payload_class = INTERACTION_PAYLOAD_TYPES.get(payload_type)
    if payload_class is None:
        raise PayloadParseError(f"Unsupported interaction type: {payload_type!r}")
    return payload_class.from_payload(payload)


def _require_view(payload: Dict[str, Any]) -> Dict[str, Any]:
    view = payload.get("view")
    if not isinstance(view, dict) or not view.get("id"):
        raise PayloadParseError(f"{payload.get('type')} payload has no view id")
    return view


# ==============================================================================
# 3. Leave Form State
# ==============================================================================

def _action_value(values: Dict[str, Any], block_id: str, action_id: str) -> Dict[str, Any]:
    block = values.get(block_id)
    if not isinstance(block, dict):
        raise PayloadParseError(f"Missing block: {block_id} in form state")
    action = block.get(action_id)
    if not isinstance(action, dict):
        raise PayloadParseError(f"Missing action: {action_id} in block: {block_id}")
    return action


def _selected_choice(values, block_id: str, action_id: str, allowed) -> str:
    option = _action_value(values, block_id, action_id).get("selected_option")
    if not option or not option.get("value"):
        raise PayloadParseError(f"No option selected for block: {block_id}")
    if option["value"] not in allowed:
        raise PayloadParseError(f"Invalid option {option['value']!r} for block: {block_id}")
    return option["value"]


def _selected_date(values, block_id: str, action_id: str) -> date:
    raw = _action_value(values, block_id, action_id).get("selected_date")
    if not raw:
        raise PayloadParseError(f"No date selected for block: {block_id}")
    try:
        return date.fromisoformat(raw)
    except (TypeError, ValueError) as e:
        raise PayloadParseError(f"Invalid date {raw!r} for block: {block_id}") from e


def _optional_text(values, block_id: str, action_id: str) -> Optional[str]:
    block = values.get(block_id) or {}
    action = block.get(action_id) or {}
    text = action.get("value")
    if not isinstance(text, str) or not text.strip():
        return None
    return text.strip()


@dataclass(frozen=True)
class LeaveFormValues:
    """The values a user entered into the leave modal."""
    leave_type: str
    duration_type: str
    start_date: date
    end_date: date
    reason: Optional[str] = None

    @classmethod
    def from_state(cls, values: Dict[str, Any]) -> "LeaveFormValues":
        """
        Decodes a view's `state.values`.

        Raises:
            PayloadParseError: a required field is missing or invalid.
        """
        return cls(
            leave_type=_selected_choice(values, LEAVE_TYPE_BLOCK, LEAVE_TYPE_ACTION, LeaveType.values),
            duration_type=_selected_choice(values, DURATION_BLOCK, DURATION_ACTION, DurationType.values),
            start_date=_selected_date(values, START_DATE_BLOCK, START_DATE_ACTION),
            end_date=_selected_date(values, END_DATE_BLOCK, END_DATE_ACTION),
            reason=_optional_text(values, REASON_BLOCK, REASON_ACTION),
        )

    def as_dict(self) -> Dict[str, Any]:
        """JSON-serializable form, used as a Celery task argument."""
        return {
            "leave_type": self.leave_type,
            "duration_type": self.duration_type,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "reason": self.reason,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "LeaveFormValues":
        return cls(
            leave_type=data["leave_type"],
            duration_type=data["duration_type"],
            start_date=date.fromisoformat(data["start_date"]),
            end_date=date.fromisoformat(data["end_date"]),
            reason=data.get("reason"),
        )
