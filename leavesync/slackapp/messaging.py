# leavesync/slackapp/messaging.py

"""
Outbound Calls to the Slack Web API.

All posting and modal opening goes through this module so that the rest of the
app deals with one exception type, `SlackCommunicationError`, instead of the
SDK's `SlackApiError`.
"""

# Standard library imports
import logging
from typing import Any, Dict, List, Optional

# Django imports
from django.conf import settings

# Third-party imports
from slack_sdk import WebClient
from slack_sdk.errors import SlackApiError

# Local application imports
from .exceptions import SlackCommunicationError
from .metadata import InteractionContext

# --- Initialization ---
SLACK_CLIENT = WebClient(token=settings.SLACK_BOT_TOKEN)
LOGGER = logging.getLogger(__name__)


def post_message(channel: str, text: str, blocks: Optional[List[Dict[str, Any]]] = None,
                 thread_ts: Optional[str] = None) -> str:
    """
    Posts a message to a channel, or into a thread when `thread_ts` is given.

    Returns:
        The posted message's `ts`, usable as a thread token for replies.

    Raises:
        SlackCommunicationError: if the Slack API call fails.
    """
    kwargs = {"channel": channel, "text": text, "blocks": blocks}
    if thread_ts:
        kwargs["thread_ts"] = thread_ts
    try:
        response = SLACK_CLIENT.chat_postMessage(**kwargs)
    except SlackApiError as e:
        raise SlackCommunicationError(
            f"Failed to post message to {channel}: {e.response['error']}"
        ) from e
    LOGGER.debug(f"Posted message {response['ts']} to {channel} (thread {thread_ts})")
    return response["ts"]


def post_thread_reply(context: InteractionContext, message: Dict[str, Any]) -> str:
    """
    Replies in the thread recorded in an InteractionContext.

    A context without a thread token gets its reply posted straight to the
    channel.
    """
    if not context.thread_ts:
        LOGGER.info(f"No thread recorded for {context.user_id} in {context.channel_id}; posting to channel")
    return post_message(context.channel_id, message["text"], message["blocks"], thread_ts=context.thread_ts)


def open_modal(trigger_id: str, view: Dict[str, Any]) -> None:
    """
    Opens a modal for the user behind `trigger_id`.

    Raises:
        SlackCommunicationError: if the Slack API call fails.
    """
    try:
        SLACK_CLIENT.views_open(trigger_id=trigger_id, view=view)
    except SlackApiError as e:
        raise SlackCommunicationError(f"Failed to open modal: {e.response['error']}") from e
