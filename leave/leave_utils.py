from django.utils import timezone
from .models import LeaveRequest
from datetime import datetime, timedelta
import logging

logger = logging.getLogger(__name__)

LEAVE_TYPE_ALIASES = {
    'personal': LeaveRequest.PERSONAL,
    'personal leave': LeaveRequest.PERSONAL,
    'sick': LeaveRequest.SICK,
    'sick leave': LeaveRequest.SICK,
    'vacation': LeaveRequest.VACATION,
    'vacation leave': LeaveRequest.VACATION,
}


def normalize_leave_type(leave_type):
    """Map a free-form leave type (Personal, sick, VACATION...) to its stored label"""
    if not leave_type or not isinstance(leave_type, str):
        return LeaveRequest.PERSONAL
    return LEAVE_TYPE_ALIASES.get(leave_type.strip().lower(), LeaveRequest.PERSONAL)


def parse_iso_date(value):
    """Parse a YYYY-MM-DD string, returning None for anything else"""
    if not value or not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value.strip(), '%Y-%m-%d').date()
    except ValueError:
        return None


def inclusive_day_count(start_date, end_date):
    """Number of calendar days from start to end, both included"""
    if end_date < start_date:
        raise ValueError(f"end date {end_date} is before start date {start_date}")
    return (end_date - start_date).days + 1


def date_range(start_date, end_date):
    """Ordered ISO dates from start to end inclusive"""
    days = inclusive_day_count(start_date, end_date)
    return [(start_date + timedelta(days=offset)).isoformat() for offset in range(days)]


def effective_days(leave_request):
    """Days to display: a half-day request counts as 0.5"""
    if leave_request.is_half_day:
        return 0.5
    return leave_request.days


def half_day_label(period):
    if period == LeaveRequest.MORNING:
        return 'Morning'
    if period == LeaveRequest.AFTERNOON:
        return 'Afternoon'
    return None


def get_leave_stats(user_id):
    """Summarize pending and approved leave per type for a user"""
    stats = {'personal_used': 0, 'vacation_used': 0, 'sick_used': 0, 'pending': 0}
    buckets = {
        LeaveRequest.PERSONAL: 'personal_used',
        LeaveRequest.VACATION: 'vacation_used',
        LeaveRequest.SICK: 'sick_used',
    }

    requests = LeaveRequest.objects.filter(
        user_id=user_id,
        status__in=[LeaveRequest.PENDING, LeaveRequest.APPROVED],
    )
    for leave_request in requests:
        bucket = buckets.get(leave_request.leave_type)
        if bucket:
            stats[bucket] += effective_days(leave_request)
        if leave_request.status == LeaveRequest.PENDING:
            stats['pending'] += 1

    logger.info(f"Calculated leave stats for user {user_id}: {stats}")
    return stats


def approve_leave_request(leave_request, approved, approver):
    """Approve or reject a pending leave request on behalf of a manager"""
    if leave_request.status != LeaveRequest.PENDING:
        raise ValueError(f"Leave request {leave_request.pk} is already {leave_request.status}")

    leave_request.status = LeaveRequest.APPROVED if approved else LeaveRequest.REJECTED
    leave_request.approved_at = timezone.now()
    leave_request.approved_by = approver
    leave_request.approved_by_name = display_name(approver)
    leave_request.save(update_fields=['status', 'approved_at', 'approved_by', 'approved_by_name'])

    logger.info(f"Leave request {leave_request.pk} {leave_request.status} by {leave_request.approved_by_name}")
    return leave_request


def display_name(user):
    """Full name of a user, falling back to the email"""
    full_name = user.get_full_name().strip()
    if full_name:
        return full_name
    if user.email:
        return user.email
    return user.username
