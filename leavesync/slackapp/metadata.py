# leavesync/slackapp/metadata.py

"""
Interaction Context Codec.

Slack does not keep any server-side session between the slash command and the
later modal submission or cancellation. Everything needed to reply in the
right place travels with the modal instead, inside its `private_metadata`
string, and comes back verbatim on every view event.
"""

# Standard library imports
import json
from dataclasses import dataclass
from typing import Optional

# Local application imports
from .exceptions import MetadataDecodeError, MetadataEncodeError

# Slack's limit for view private_metadata.
MAX_METADATA_LENGTH = 3000


@dataclass(frozen=True)
class InteractionContext:
    """
    Who started the flow and where the replies go.

    Attributes:
        user_id: Slack user who ran the command.
        channel_id: Channel the command was run in.
        channel_name: Display name of that channel, may be empty.
        thread_ts: `ts` of the anchor message replies are threaded under,
                   None when the anchor could not be posted.
    """
    user_id: str
    channel_id: str
    channel_name: str = ""
    thread_ts: Optional[str] = None


def encode_context(context: InteractionContext) -> str:
    """
    Serializes a context for a view's `private_metadata`.

    Raises:
        MetadataEncodeError: the encoded form exceeds Slack's limit.
    """
    encoded = json.dumps(
        {
            "user_id": context.user_id,
            "channel_id": context.channel_id,
            "channel_name": context.channel_name,
            "thread_ts": context.thread_ts,
        },
        separators=(",", ":"),
    )
    if len(encoded) > MAX_METADATA_LENGTH:
        raise MetadataEncodeError(
            f"Encoded interaction context is {len(encoded)} characters, "
            f"limit is {MAX_METADATA_LENGTH}"
        )
    return encoded


def decode_context(raw: str) -> InteractionContext:
    """
    Restores a context from a view's `private_metadata`.

    Raises:
        MetadataDecodeError: the string is empty, not JSON, not an object,
                             or lacks the user or channel id.
    """
    if not raw:
        raise MetadataDecodeError("Private metadata is empty")
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MetadataDecodeError(f"Private metadata is not valid JSON: {e}") from e
    if not isinstance(data, dict):
        raise MetadataDecodeError("Private metadata is not a JSON object")

    user_id = data.get("user_id")
    channel_id = data.get("channel_id")
    if not isinstance(user_id, str) or not user_id:
        raise MetadataDecodeError("Private metadata has no user_id")
    if not isinstance(channel_id, str) or not channel_id:
        raise MetadataDecodeError("Private metadata has no channel_id")

    thread_ts = data.get("thread_ts")
    return InteractionContext(
        user_id=user_id,
        channel_id=channel_id,
        channel_name=data.get("channel_name") or "",
        thread_ts=thread_ts if isinstance(thread_ts, str) else None,
    )
