# leavesync/leaves/sync.py

"""
Outbound Cross-Channel Propagation.

After a leave is persisted, other channels (Slack, calendar, timesheet) may
need to learn about it. The propagation itself is not implemented here; this
module only defines the hook the ingestion engine calls and a default backend
that logs what would be propagated.

A backend is any callable `backend(leave, origin_kind)`. The one in use is
configured with the `LEAVE_OUTBOUND_SYNC_BACKEND` setting, as a dotted path to
either a class (instantiated without arguments) or a function.
"""

import inspect
import logging

from django.conf import settings
from django.utils.module_loading import import_string

from .models import Leave

LOGGER = logging.getLogger(__name__)


class LoggingOutboundSync:
    """Default backend: records the propagation request in the log."""

    def __call__(self, leave: Leave, origin_kind: str) -> None:
        LOGGER.info(
            f"Outbound sync for leave {leave.id} (origin {origin_kind}): "
            f"user={leave.user_id}, dates={leave.date_range}, type={leave.leave_type}, "
            f"status={leave.status}, duration={leave.duration_type}"
        )


def get_outbound_sync():
    """Loads the configured backend."""
    backend = import_string(settings.LEAVE_OUTBOUND_SYNC_BACKEND)
    if inspect.isclass(backend):
        return backend()
    return backend


def propagate_leave(leave: Leave, origin_kind: str) -> bool:
    """
    Invokes the outbound sync backend once, swallowing any failure.

    Ingestion is complete as soon as the leave is committed, so a broken
    downstream channel must never turn a successful ingestion into an error.

    Returns:
        True if the backend ran without raising, False otherwise.
    """
    try:
        get_outbound_sync()(leave, origin_kind)
    except Exception as e:
        LOGGER.exception(f"Failed to sync leave {leave.id} to external systems: {e}")
        return False
    LOGGER.info(f"Successfully synced leave {leave.id} to external systems")
    return True
