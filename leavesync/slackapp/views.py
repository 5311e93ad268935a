# leavesync/slackapp/views.py

"""
Main Views for the Slack Leave Application.

This module handles all incoming webhooks from Slack. It verifies and parses
each request, records where the conversation takes place, and hands the actual
work to the Celery tasks in `tasks.py`.

The main entry points are:
- `slash_command`: Receives the leave slash command (e.g., /leave).
- `interactions`: Receives the submission or dismissal of the leave modal.

Both always answer with an empty HTTP 200. Slack retries anything else, and
the outcome of the background work is reported in the request's thread
instead of in the response.
"""

# Standard library imports
import logging

# Django imports
from django.conf import settings
from django.http import HttpRequest, HttpResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

# Local application imports
from .exceptions import (MetadataDecodeError, MetadataEncodeError, PayloadParseError,
                         SlackCommunicationError)
from .messaging import post_message
from .metadata import InteractionContext, decode_context, encode_context
from .payloads import (LEAVE_MODAL_CALLBACK_ID, LeaveFormValues, SlashCommand, ViewClosed,
                       ViewSubmission, parse_interaction_body)
from .slack_blocks import get_request_initiated_message
from .tasks import open_leave_modal, post_cancellation_notice, process_leave_submission
from .utils import slack_verification_required

LOGGER = logging.getLogger(__name__)


# ==============================================================================
# 1. Main Slack Entry Points (Webhook Receivers)
# ==============================================================================

@csrf_exempt
@require_POST
@slack_verification_required
def slash_command(request: HttpRequest) -> HttpResponse:
    """
    Handles and routes incoming slash commands from Slack.

    Parses the command and dispatches it to the handler registered for it.
    """
    try:
        command = SlashCommand.from_body(request.body)
        LOGGER.info(f"Slash command '{command.command}' received from {command.user_name} ({command.user_id})")

        handler = _command_handlers().get(command.command)
        if handler:
            handler(command)
        else:
            LOGGER.warning(f"Unhandled slash command: {command.command}")

    except PayloadParseError as e:
        LOGGER.warning(f"Could not parse slash command: {e}")
    except Exception as e:
        LOGGER.exception(f"Unexpected error in slash_command: {e}")
    return HttpResponse(status=200)


@csrf_exempt
@require_POST
@slack_verification_required
def interactions(request: HttpRequest) -> HttpResponse:
    """
    Handles and routes interactive payloads from Slack.

    Only the leave modal's `view_submission` and `view_closed` events are
    handled; any other payload type or callback id is logged and ignored.
    """
    try:
        payload = parse_interaction_body(request.body)
        if payload.callback_id != LEAVE_MODAL_CALLBACK_ID:
            LOGGER.warning(
                f"Unhandled interaction. Type: '{type(payload).__name__}', ID: '{payload.callback_id}'"
            )
            return HttpResponse(status=200)

        context = decode_context(payload.private_metadata)
        INTERACTION_HANDLERS[type(payload)](payload, context)

    except (PayloadParseError, MetadataDecodeError) as e:
        LOGGER.warning(f"Could not process Slack interaction: {e}")
    except Exception as e:
        LOGGER.exception(f"Unexpected error in interactions view: {e}")
    return HttpResponse(status=200)


# ==============================================================================
# 2. Command Handlers
# ==============================================================================

def _handle_leave_command(command: SlashCommand) -> None:
    """
    Starts a leave application.

    Posts the thread anchor right away so its `ts` can travel with the modal,
    then schedules the modal to open. When the anchor cannot be posted the
    flow continues and later replies go to the channel itself.
    """
    anchor = get_request_initiated_message(command.user_id)
    try:
        thread_ts = post_message(command.channel_id, anchor["text"], anchor["blocks"])
    except SlackCommunicationError as e:
        LOGGER.error(f"Could not post thread anchor in {command.channel_id}: {e}")
        thread_ts = None

    context = InteractionContext(
        user_id=command.user_id,
        channel_id=command.channel_id,
        channel_name=command.channel_name,
        thread_ts=thread_ts,
    )
    try:
        private_metadata = encode_context(context)
    except MetadataEncodeError as e:
        LOGGER.error(f"Could not encode interaction context for {command.user_id}: {e}")
        return

    open_leave_modal.delay(command.trigger_id, private_metadata)


def _command_handlers():
    return {
        settings.SLACK_LEAVE_COMMAND: _handle_leave_command,
    }


# ==============================================================================
# 3. Interaction Handlers
# ==============================================================================

def _handle_view_submission(payload: ViewSubmission, context: InteractionContext) -> None:
    """Decodes the submitted form and schedules the leave ingestion."""
    try:
        values = LeaveFormValues.from_state(payload.state_values)
    except PayloadParseError as e:
        LOGGER.warning(f"Invalid leave form in view {payload.view_id} from {context.user_id}: {e}")
        return

    LOGGER.info(f"Leave form submitted by {context.user_id} (view {payload.view_id})")
    process_leave_submission.delay(payload.private_metadata, payload.view_id, values.as_dict())


def _handle_view_closed(payload: ViewClosed, context: InteractionContext) -> None:
    LOGGER.info(f"Leave modal {payload.view_id} closed by {context.user_id} without submitting")
    post_cancellation_notice.delay(payload.private_metadata)


INTERACTION_HANDLERS = {
    ViewSubmission: _handle_view_submission,
    ViewClosed: _handle_view_closed,
}
