# leavesync/leaves/views.py

"""
Web API for Leave Ingestion.

`ingest` is the direct-web entry point into the ingestion engine. It returns
the canonical leave on success and a typed JSON error otherwise, keeping the
three failure categories apart: 400 for invalid input, 409 for a date overlap
with another leave, 500 for inconsistent stored data.
"""

# Standard library imports
import json
import logging

# Django imports
from django.http import HttpRequest, JsonResponse
from django.utils import timezone
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_POST

# Local application imports
from .exceptions import DataInconsistencyError, LeaveValidationError, OverlappingLeaveError
from .forms import LeaveIngestionForm
from .ingestion import ingest_leave

LOGGER = logging.getLogger(__name__)


@csrf_exempt
@require_POST
def ingest(request: HttpRequest) -> JsonResponse:
    """Creates or updates a leave from a JSON ingestion request."""
    try:
        data = json.loads(request.body or b"{}")
    except (ValueError, UnicodeDecodeError):
        return _error_response(request, 400, "Bad Request", "Request body must be valid JSON.")
    if not isinstance(data, dict):
        return _error_response(request, 400, "Bad Request", "Request body must be a JSON object.")

    form = LeaveIngestionForm(data)
    if not form.is_valid():
        LOGGER.warning(f"Validation failed for leave ingestion request: {form.errors.as_json()}")
        field_errors = [
            {"field": field, "message": message, "rejected_value": data.get(field)}
            for field, messages in form.errors.items()
            for message in messages
        ]
        return _error_response(
            request, 400, "Validation Failed", "Invalid request parameters", field_errors=field_errors
        )

    LOGGER.info(f"Received leave ingestion request: {form.cleaned_data}")
    try:
        leave = ingest_leave(**form.to_ingestion_kwargs())
    except OverlappingLeaveError as e:
        LOGGER.warning(f"Overlapping leave request for user {e.user_id}: {e}")
        return _error_response(
            request, 409, "Conflict", str(e),
            existing_leave={
                "id": str(e.existing_leave_id),
                "start_date": e.existing_start_date.isoformat(),
                "end_date": e.existing_end_date.isoformat(),
            },
        )
    except LeaveValidationError as e:
        LOGGER.warning(f"Leave validation failed: {e}")
        field_errors = [{"field": e.field, "message": e.message}] if e.field else None
        return _error_response(request, 400, "Bad Request", e.message, field_errors=field_errors)
    except DataInconsistencyError as e:
        LOGGER.error(f"Data inconsistency while ingesting {form.cleaned_data}: {e}")
        return _error_response(
            request, 500, "Internal Server Error",
            "An unexpected error occurred. Please try again later.",
        )

    LOGGER.info(f"Successfully ingested leave with id: {leave.id}")
    return JsonResponse(leave.as_dict(), status=201)


def _error_response(request: HttpRequest, status: int, error: str, message: str, **extra) -> JsonResponse:
    body = {
        "status": status,
        "error": error,
        "message": message,
        "path": request.path,
        "timestamp": timezone.now().isoformat(),
    }
    body.update({key: value for key, value in extra.items() if value is not None})
    return JsonResponse(body, status=status)
