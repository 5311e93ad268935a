# leavesync/slackapp/tasks.py

"""
Asynchronous Background Tasks for the Slack App.

Slack expects every webhook to be acknowledged within three seconds, so the
views only verify, parse and enqueue. The work itself (opening the modal,
ingesting the submitted leave, posting the thread replies) runs here, on a
Celery worker.

All tasks are at-most-once: they are never retried and store no result. A
failure is logged and, where the user is waiting for an outcome, reported in
the request's thread.

Tasks defined here are automatically discovered by the Celery instance defined
in `leavesync/celery.py`.
"""

# Standard library imports
import logging
from typing import Any, Dict

# Third-party imports
from celery import shared_task

# Local application imports
from leaves.dates import DateRange
from leaves.exceptions import LeaveError
from leaves.ingestion import ingest_leave
from leaves.models import LeaveStatus, OriginKind

from .exceptions import SlackCommunicationError
from .messaging import open_modal, post_thread_reply
from .metadata import decode_context
from .payloads import LeaveFormValues
from .slack_blocks import (get_leave_created_message, get_leave_failed_message,
                           get_leave_form_modal, get_request_cancelled_message)

LOGGER = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "An unexpected error occurred while saving your leave."


@shared_task(ignore_result=True)
def open_leave_modal(trigger_id: str, private_metadata: str) -> None:
    """
    Presents the leave application modal.

    Args:
        trigger_id: The short-lived trigger from the slash command.
        private_metadata: The encoded InteractionContext to carry in the modal.
    """
    try:
        open_modal(trigger_id, get_leave_form_modal(private_metadata))
    except SlackCommunicationError as e:
        LOGGER.error(f"Could not open leave modal: {e}")
        return
    LOGGER.info("Opened leave application modal")


@shared_task(ignore_result=True)
def process_leave_submission(private_metadata: str, view_id: str, form: Dict[str, Any]) -> None:
    """
    Ingests a submitted leave and reports the outcome in the request's thread.

    Slack leaves are recorded as approved, with the modal's view id as their
    origin id, so a re-delivered submission updates the same leave.

    Args:
        private_metadata: The encoded InteractionContext from the view.
        view_id: The id of the submitted view.
        form: `LeaveFormValues.as_dict()` of the submitted state.
    """
    context = decode_context(private_metadata)
    values = LeaveFormValues.from_dict(form)
    if values.reason:
        LOGGER.debug(f"Leave reason from {context.user_id}: {values.reason}")

    try:
        leave = ingest_leave(
            origin_kind=OriginKind.SLACK,
            origin_id=view_id,
            user_id=context.user_id,
            date_range=DateRange(values.start_date, values.end_date),
            leave_type=values.leave_type,
            status=LeaveStatus.APPROVED,
            duration_type=values.duration_type,
        )
    except LeaveError as e:
        LOGGER.warning(f"Leave submission {view_id} from {context.user_id} was rejected: {e}")
        _post_failure_reply(context, str(e))
        return
    except Exception as e:
        LOGGER.exception(f"Unexpected error ingesting leave submission {view_id}: {e}")
        _post_failure_reply(context, GENERIC_FAILURE_MESSAGE)
        return

    LOGGER.info(f"Leave {leave.id} created from Slack submission {view_id} for {context.user_id}")
    try:
        post_thread_reply(context, get_leave_created_message(context.user_id, leave))
    except SlackCommunicationError as e:
        LOGGER.error(f"Leave {leave.id} was saved but the success reply failed: {e}")


@shared_task(ignore_result=True)
def post_cancellation_notice(private_metadata: str) -> None:
    """Tells the thread that the modal was closed without submitting."""
    context = decode_context(private_metadata)
    try:
        post_thread_reply(context, get_request_cancelled_message(context.user_id))
    except SlackCommunicationError as e:
        LOGGER.error(f"Could not post cancellation notice for {context.user_id}: {e}")


def _post_failure_reply(context, error_message: str) -> None:
    try:
        post_thread_reply(context, get_leave_failed_message(context.user_id, error_message))
    except SlackCommunicationError as e:
        LOGGER.error(f"Could not post failure reply for {context.user_id}: {e}")
