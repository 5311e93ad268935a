# leavesync/slackapp/slack_blocks.py

"""
Slack Block Kit Construction Utilities

This module provides functions that generate the JSON structures for Slack's
Block Kit UI framework used by the leave workflow: the leave application
modal and the messages posted into a request's thread.

Every message function returns a dict with `text` (the notification fallback)
and `blocks`, ready to be passed to `messaging.post_message`.
"""

# Standard library imports
from datetime import date
from typing import Any, Dict, List

# Local application imports
from leaves.models import DurationType, Leave, LeaveType

from .payloads import (DURATION_ACTION, DURATION_BLOCK, END_DATE_ACTION, END_DATE_BLOCK,
                       LEAVE_MODAL_CALLBACK_ID, LEAVE_TYPE_ACTION, LEAVE_TYPE_BLOCK,
                       REASON_ACTION, REASON_BLOCK, START_DATE_ACTION, START_DATE_BLOCK)


def _plain_text(text: str) -> Dict[str, Any]:
    return {"type": "plain_text", "text": text, "emoji": True}


def _header(text: str) -> Dict[str, Any]:
    return {"type": "header", "text": _plain_text(text)}


def _section(text: str) -> Dict[str, Any]:
    return {"type": "section", "text": {"type": "mrkdwn", "text": text}}


def _user_tag(user_id: str) -> str:
    return f"<@{user_id}>"


def _radio_options(choices) -> List[Dict[str, Any]]:
    return [{"text": _plain_text(label), "value": value} for value, label in choices]


def _date_input(block_id: str, action_id: str, label: str) -> Dict[str, Any]:
    return {
        "type": "input",
        "block_id": block_id,
        "element": {
            "type": "datepicker",
            "action_id": action_id,
            "placeholder": _plain_text("Select a date"),
        },
        "label": _plain_text(label),
    }


def format_leave_dates(start_date: date, end_date: date) -> str:
    """Formats a leave's dates, e.g. "Jan 15, 2024" or "Jan 15, 2024 - Jan 16, 2024"."""
    start_str = start_date.strftime('%b %d, %Y')
    if end_date is None or start_date == end_date:
        return start_str
    return f"{start_str} - {end_date.strftime('%b %d, %Y')}"


# ==============================================================================
# 1. Leave Application Modal
# ==============================================================================

def get_leave_form_modal(private_metadata: str) -> Dict[str, Any]:
    """
    Generates the Slack modal view for applying for a leave.

    The leave type and duration options come from the model choices, so the
    submitted values are always valid `LeaveType` and `DurationType` values.
    `notify_on_close` makes Slack send a `view_closed` event when the user
    dismisses the modal, which is what triggers the cancellation notice.

    Args:
        private_metadata: The encoded InteractionContext, returned by Slack
                          unchanged with the submission or close event.

    Returns:
        A dictionary representing the JSON structure for the Slack modal.
    """
    leave_type_options = _radio_options(LeaveType.choices)
    duration_options = _radio_options(DurationType.choices)

    return {
        "type": "modal",
        "callback_id": LEAVE_MODAL_CALLBACK_ID,
        "title": _plain_text("Apply for Leave"),
        "submit": _plain_text("Submit"),
        "close": _plain_text("Cancel"),
        "private_metadata": private_metadata,
        "notify_on_close": True,
        "clear_on_close": True,
        "blocks": [
            _section("*Apply for leave*\nHalf-day leaves must start and end on the same date."),
            {"type": "divider"},
            {
                "type": "input",
                "block_id": LEAVE_TYPE_BLOCK,
                "element": {
                    "type": "radio_buttons",
                    "action_id": LEAVE_TYPE_ACTION,
                    "options": leave_type_options,
                    "initial_option": leave_type_options[0],
                },
                "label": _plain_text("Leave Type"),
            },
            {
                "type": "input",
                "block_id": DURATION_BLOCK,
                "element": {
                    "type": "radio_buttons",
                    "action_id": DURATION_ACTION,
                    "options": duration_options,
                    "initial_option": duration_options[0],
                },
                "label": _plain_text("Duration"),
            },
            _date_input(START_DATE_BLOCK, START_DATE_ACTION, "Start Date"),
            _date_input(END_DATE_BLOCK, END_DATE_ACTION, "End Date"),
            {
                "type": "input",
                "block_id": REASON_BLOCK,
                "element": {
                    "type": "plain_text_input",
                    "action_id": REASON_ACTION,
                    "multiline": True,
                    "placeholder": _plain_text("Anything your team should know (optional)."),
                },
                "label": _plain_text("Reason"),
                "optional": True,
            },
        ],
    }


# ==============================================================================
# 2. Thread Messages
# ==============================================================================

def get_request_initiated_message(user_id: str) -> Dict[str, Any]:
    """The thread anchor posted when a user runs the leave command."""
    user_tag = _user_tag(user_id)
    return {
        "text": f"📝 Leave request initiated for {user_tag}",
        "blocks": [
            _header("📝 Leave Request Initiated"),
            _section(
                f"*User:* {user_tag}\n*Status:* Opening modal...\n\n"
                f"Please fill out the leave details in the modal."
            ),
        ],
    }


def get_leave_created_message(user_id: str, leave: Leave) -> Dict[str, Any]:
    """
    The success reply posted after a submitted leave has been ingested.

    Shows the leave's id, type, dates, duration and status in a two-column
    field layout.
    """
    user_tag = _user_tag(user_id)
    fields = [
        ("User", user_tag),
        ("Leave ID", str(leave.id)),
        ("Type", LeaveType(leave.leave_type).label),
        ("Dates", format_leave_dates(leave.start_date, leave.end_date)),
        ("Duration", DurationType(leave.duration_type).label),
        ("Status", leave.status),
    ]
    return {
        "text": f"✅ Leave created successfully for {user_tag}",
        "blocks": [
            _header("✅ Leave Created Successfully"),
            {
                "type": "section",
                "fields": [{"type": "mrkdwn", "text": f"*{name}:*\n{value}"} for name, value in fields],
            },
        ],
    }


def get_leave_failed_message(user_id: str, error_message: str) -> Dict[str, Any]:
    """The failure reply posted when a submitted leave could not be ingested."""
    user_tag = _user_tag(user_id)
    return {
        "text": f"❌ Leave request failed for {user_tag}",
        "blocks": [
            _header("❌ Leave Request Failed"),
            _section(f"*User:* {user_tag}"),
            _section(f"*Error:* {error_message or 'Unknown error'}"),
            {"type": "divider"},
            _section("Please try again or contact HR for assistance."),
        ],
    }


def get_request_cancelled_message(user_id: str) -> Dict[str, Any]:
    user_tag = _user_tag(user_id)
    return {
        "text": f"❌ Leave request cancelled for {user_tag}",
        "blocks": [
            _header("❌ Leave Request Cancelled"),
            _section(f"*User:* {user_tag}"),
            _section("*Status:* The leave request modal was cancelled without submitting."),
        ],
    }
