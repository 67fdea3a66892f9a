from django.contrib.auth.models import User

from leave import replies
from leave.models import LeaveRequest


def test_success_reply_for_multi_day_request():
    user = User(username="ann", email="ann_lee@x.com")
    leave_request = LeaveRequest(
        leave_type="Vacation Leave",
        selected_dates=["2025-11-15", "2025-11-16", "2025-11-17"],
        days=3,
        reason="trip to Chiang Mai",
    )

    text = replies.leave_request_created_reply(user, leave_request)

    # no full name, so the (escaped) email is shown
    assert "ann\\_lee@x.com" in text
    assert "From: 2025-11-15" in text
    assert "To: 2025-11-17" in text
    assert "Days: 3 days" in text
    assert "trip to Chiang Mai" in text
    assert "Vacation Leave" in text
    assert "Half day" not in text


def test_success_reply_for_half_day():
    user = User(username="bo", first_name="Bo", last_name="Tan")
    leave_request = LeaveRequest(
        leave_type="Personal Leave", selected_dates=["2025-11-21"], days=1,
        reason="bank", is_half_day=True, half_day_period="afternoon",
    )

    text = replies.leave_request_created_reply(user, leave_request)

    assert "Bo Tan" in text
    assert "Days: 0.5 day" in text
    assert "Half day: Afternoon" in text


def test_link_success_reply_without_count():
    user = User(username="cy", email="cy@x.com")
    text = replies.link_success_reply(user, "cy@x.com")
    assert "now linked" in text
    assert "Existing leave requests" not in text
    assert "Existing leave requests: 4" in replies.link_success_reply(user, "cy@x.com", 4)


def test_need_date_reply_rejects_relative_dates():
    text = replies.need_specific_date_reply()
    assert "today" in text
    assert "tomorrow" in text
    assert "morning" in text
