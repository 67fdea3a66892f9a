import logging

from django.db import DatabaseError

from .conf import get_pipeline_settings
from .exceptions import InvalidLeaveIntent, LeaveRequestWriteError
from .leave_ai import HALF_DAY_PERIODS, LEAVE_REQUEST
from .leave_utils import date_range, inclusive_day_count, normalize_leave_type, parse_iso_date
from .models import LeaveRequest

logger = logging.getLogger(__name__)

DEFAULT_REASON = 'Submitted via Telegram'


def create_leave_request(user_id, intent, repository, pipeline_settings=None):
    """
    Persist a pending leave request built from a parsed Telegram message.

    Raises InvalidLeaveIntent when the intent does not meet the creation
    preconditions, and LeaveRequestWriteError when the database rejects the
    insert. Neither is swallowed: the caller must not report success.
    """
    pipeline_settings = pipeline_settings or get_pipeline_settings()

    if not user_id:
        raise InvalidLeaveIntent("No application user for this leave request")
    if intent.intent != LEAVE_REQUEST:
        raise InvalidLeaveIntent(f"Intent is {intent.intent!r}, not a leave request")
    if intent.confidence < pipeline_settings.min_confidence:
        raise InvalidLeaveIntent(
            f"Confidence {intent.confidence} is below {pipeline_settings.min_confidence}"
        )

    start = parse_iso_date(intent.start_date)
    end = parse_iso_date(intent.end_date)
    if start is None or end is None:
        raise InvalidLeaveIntent(f"Invalid dates: {intent.start_date!r} to {intent.end_date!r}")
    if end < start:
        raise InvalidLeaveIntent(f"End date {end} is before start date {start}")

    is_half_day = bool(intent.is_half_day)
    half_day_period = intent.half_day_period if is_half_day else None
    if is_half_day and half_day_period not in HALF_DAY_PERIODS:
        raise InvalidLeaveIntent("Half-day leave needs a morning or afternoon period")

    fields = {
        'user_id': user_id,
        'leave_type': normalize_leave_type(intent.leave_type),
        'selected_dates': date_range(start, end),
        'days': inclusive_day_count(start, end),
        'reason': intent.reason or DEFAULT_REASON,
        'status': LeaveRequest.PENDING,
        'is_half_day': is_half_day,
        'half_day_period': half_day_period,
    }

    try:
        leave_request = repository.create(**fields)
    except DatabaseError as e:
        logger.error(f"Error creating leave request for user {user_id}: {e}")
        raise LeaveRequestWriteError(f"Could not save leave request: {e}") from e

    logger.info(
        f"Created leave request {leave_request.pk} for user {user_id}: "
        f"{fields['leave_type']} {fields['selected_dates'][0]} to {fields['selected_dates'][-1]}"
    )
    return leave_request
