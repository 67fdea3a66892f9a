import pytest
from django.db import DatabaseError

from leave.conf import PipelineSettings
from leave.exceptions import LeaveRequestWriteError
from leave.leave_ai import ParsedIntent
from leave.message_handlers import (
    CREATED,
    IGNORED,
    INCOMPLETE,
    NOT_LINKED,
    NOT_UNDERSTOOD,
    handle_telegram_message,
    is_connect_command,
)
from leave.models import LeaveRequest, TelegramUser
from leave.repository import DjangoLeaveRepository


class ExplodingRepository(DjangoLeaveRepository):
    """Fails the test if the dispatcher touches storage"""

    def __getattribute__(self, name):
        if name in ("create", "find_account_link", "create_account_link", "find_profile_by_email"):
            raise AssertionError(f"repository.{name} should not be called")
        return super().__getattribute__(name)


class FailingWriteRepository(DjangoLeaveRepository):
    def create(self, **fields):
        raise DatabaseError("insert failed")


def sick_leave_intent(**overrides):
    fields = dict(
        intent="leave_request",
        start_date="2025-11-20",
        end_date="2025-11-20",
        leave_type="Sick",
        confidence=0.95,
    )
    fields.update(overrides)
    return ParsedIntent(**fields)


@pytest.fixture
def linked_user(make_user):
    user = make_user("user@x.com", first_name="Ploy", last_name="Chai")
    TelegramUser.objects.create(telegram_user_id=111, user=user, email="user@x.com")
    return user


@pytest.mark.parametrize("message", [None, {}, {"message_id": 1, "chat": {"id": 1}}, {"text": ""}])
def test_messages_without_text_are_ignored(message, fake_parser, replies):
    parser = fake_parser(sick_leave_intent())

    outcome = handle_telegram_message(message, parser, ExplodingRepository(), replies)

    assert outcome == IGNORED
    assert parser.calls == []
    assert replies.sent == []


@pytest.mark.parametrize("text", ["   ", "\n\t"])
def test_blank_text_is_ignored(text, fake_parser, replies, telegram_message):
    parser = fake_parser(sick_leave_intent())

    outcome = handle_telegram_message(telegram_message(text), parser, ExplodingRepository(), replies)

    assert outcome == IGNORED
    assert parser.calls == []
    assert replies.sent == []


@pytest.mark.parametrize("text", ["/connect new@x.com", "Sick leave on 20/11/2025"])
def test_messages_without_sender_are_ignored(text, fake_parser, replies):
    # channel post: a chat but no "from"
    parser = fake_parser(sick_leave_intent())

    outcome = handle_telegram_message({"chat": {"id": 5}, "text": text}, parser, ExplodingRepository(), replies)

    assert outcome == IGNORED
    assert parser.calls == []
    assert replies.sent == []


def test_nan_confidence_never_reaches_the_writer(fake_model, replies, telegram_message):
    from leave.leave_ai import LeaveIntentParser

    model = fake_model(text='{"intent": "leave_request", "start_date": "2025-11-20", "end_date": "2025-11-20", '
                            '"leave_type": "Sick", "confidence": NaN}')
    parser = LeaveIntentParser(model, PipelineSettings())

    outcome = handle_telegram_message(
        telegram_message("Sick leave on 20/11/2025", user_id=111), parser, ExplodingRepository(), replies
    )

    assert outcome == NOT_UNDERSTOOD
    assert "couldn't understand" in replies.texts[0]


@pytest.mark.parametrize(
    "intent",
    [
        ParsedIntent.unknown(),
        ParsedIntent(intent="unknown", confidence=0.99),
        sick_leave_intent(confidence=0.69),
        sick_leave_intent(confidence=0.0),
    ],
)
def test_unclear_messages_get_clarification(intent, fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("hmm"), fake_parser(intent), ExplodingRepository(), replies
    )

    assert outcome == NOT_UNDERSTOOD
    assert len(replies.sent) == 1
    assert "couldn't understand" in replies.texts[0]


@pytest.mark.parametrize("confidence", [0.0, 0.5, 0.99])
def test_incomplete_requests_ask_for_date_regardless_of_confidence(
    confidence, fake_parser, replies, telegram_message
):
    intent = ParsedIntent(intent="incomplete_request", confidence=confidence)

    outcome = handle_telegram_message(
        telegram_message("I want a day off"), fake_parser(intent), ExplodingRepository(), replies
    )

    assert outcome == INCOMPLETE
    assert "exact date" in replies.texts[0]


def test_half_day_tomorrow_is_incomplete(fake_model, replies, telegram_message):
    from leave.leave_ai import LeaveIntentParser

    # what the model answers for a relative date plus a half day with no period
    model = fake_model(text='{"intent": "incomplete_request", "start_date": null, "end_date": null, '
                            '"is_half_day": true, "half_day_period": null, "confidence": 0.8}')
    parser = LeaveIntentParser(model, PipelineSettings())

    outcome = handle_telegram_message(
        telegram_message("Half day leave tomorrow"), parser, ExplodingRepository(), replies
    )

    assert outcome == INCOMPLETE
    assert "tomorrow" in replies.texts[0]


@pytest.mark.parametrize(
    "overrides",
    [{"start_date": None}, {"end_date": "tomorrow"}, {"start_date": "2025-11-21", "end_date": "2025-11-20"}],
)
def test_leave_request_without_usable_dates_asks_for_date(overrides, fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("Sick leave"), fake_parser(sick_leave_intent(**overrides)), ExplodingRepository(), replies
    )
    assert outcome == INCOMPLETE


@pytest.mark.django_db
def test_unlinked_sender_is_told_to_connect(fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("Sick leave on 20/11/2025", user_id=999),
        fake_parser(sick_leave_intent()),
        DjangoLeaveRepository(),
        replies,
    )

    assert outcome == NOT_LINKED
    assert "/connect" in replies.texts[0]
    assert LeaveRequest.objects.count() == 0


@pytest.mark.django_db
def test_sick_leave_scenario(linked_user, fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("Sick leave on 20/11/2025", user_id=111),
        fake_parser(sick_leave_intent()),
        DjangoLeaveRepository(),
        replies,
    )

    assert outcome == CREATED
    stored = LeaveRequest.objects.get()
    assert stored.user == linked_user
    assert stored.leave_type == "Sick Leave"
    assert stored.days == 1
    assert stored.selected_dates == ["2025-11-20"]
    assert stored.status == "pending"

    chat_id, text = replies.sent[0]
    assert chat_id == 111
    assert "Sick Leave" in text
    assert "2025-11-20" in text
    assert "Ploy Chai" in text
    assert "Pending" in text


@pytest.mark.django_db
def test_confidence_at_threshold_is_accepted(linked_user, fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("Sick leave on 20/11/2025", user_id=111),
        fake_parser(sick_leave_intent(confidence=0.7)),
        DjangoLeaveRepository(),
        replies,
    )
    assert outcome == CREATED


@pytest.mark.django_db
def test_threshold_is_configurable(linked_user, fake_parser, replies, telegram_message):
    outcome = handle_telegram_message(
        telegram_message("Sick leave on 20/11/2025", user_id=111),
        fake_parser(sick_leave_intent(confidence=0.8)),
        DjangoLeaveRepository(),
        replies,
        pipeline_settings=PipelineSettings(min_confidence=0.9),
    )
    assert outcome == NOT_UNDERSTOOD
    assert LeaveRequest.objects.count() == 0


@pytest.mark.django_db
def test_half_day_success_reply_shows_half_day(linked_user, fake_parser, replies, telegram_message):
    intent = sick_leave_intent(is_half_day=True, half_day_period="morning", reason="dentist")

    handle_telegram_message(
        telegram_message("Half day morning on 20/11/2025", user_id=111), fake_parser(intent),
        DjangoLeaveRepository(), replies,
    )

    stored = LeaveRequest.objects.get()
    assert stored.days == 1
    assert stored.half_day_period == "morning"
    assert "Days: 0.5 day" in replies.texts[0]
    assert "Half day: Morning" in replies.texts[0]


@pytest.mark.django_db
def test_write_failure_propagates_and_warns_user(linked_user, fake_parser, replies, telegram_message):
    with pytest.raises(LeaveRequestWriteError):
        handle_telegram_message(
            telegram_message("Sick leave on 20/11/2025", user_id=111),
            fake_parser(sick_leave_intent()),
            FailingWriteRepository(),
            replies,
        )

    assert len(replies.sent) == 1
    assert "not* submitted" in replies.texts[0]
    assert "Leave request submitted" not in replies.texts[0]


@pytest.mark.django_db
def test_connect_command_skips_parser(make_user, fake_parser, replies, telegram_message):
    make_user("new@x.com")
    parser = fake_parser(sick_leave_intent())

    outcome = handle_telegram_message(
        telegram_message("/connect new@x.com", user_id=222), parser, DjangoLeaveRepository(), replies
    )

    assert outcome == "link:linked"
    assert parser.calls == []
    assert TelegramUser.objects.get(telegram_user_id=222).email == "new@x.com"


def test_is_connect_command():
    assert is_connect_command("/connect a@b.com")
    assert is_connect_command("/CONNECT")
    assert is_connect_command("/connect@LeaveBot a@b.com")
    assert not is_connect_command("/connected")
    assert not is_connect_command("please /connect me")
