"""
Webhook dispatcher: routes one inbound Telegram message through the leave
request pipeline and answers it in the chat.

Flow per message:
    no text             -> ignored
    /connect <email>    -> account linking
    anything else       -> intent parser -> gates -> account lookup -> writer -> reply

Only a failed write escapes this module; everything else ends in a reply.
"""
import logging
import re

from . import replies
from .account_linking import find_linked, link_by_command
from .conf import get_pipeline_settings
from .leave_ai import INCOMPLETE_REQUEST, LEAVE_REQUEST
from .leave_utils import parse_iso_date
from .leave_writer import create_leave_request
from .telegram_utils import ChatIdentity, get_chat_id, send_telegram_message

logger = logging.getLogger(__name__)

CONNECT_COMMAND_RE = re.compile(r'^\s*/connect(?:@\w+)?(?:\s|$)', re.IGNORECASE)

IGNORED = 'ignored'
INCOMPLETE = 'incomplete'
NOT_UNDERSTOOD = 'not_understood'
NOT_LINKED = 'not_linked'
CREATED = 'created'


def is_connect_command(text):
    return bool(CONNECT_COMMAND_RE.match(text or ''))


def has_complete_dates(intent):
    start = parse_iso_date(intent.start_date)
    end = parse_iso_date(intent.end_date)
    return start is not None and end is not None and start <= end


def handle_telegram_message(message, parser, repository, send_reply=None,
                            pipeline_settings=None):
    """Process one Telegram message and return the name of the branch it ended in"""
    if not message or not (message.get('text') or '').strip():
        return IGNORED

    identity = ChatIdentity.from_message(message)
    # channel posts and anonymous admins carry no sender to link or look up
    if identity.id is None:
        logger.info("Ignoring Telegram message without a sender")
        return IGNORED

    pipeline_settings = pipeline_settings or get_pipeline_settings()
    send_reply = send_reply or send_telegram_message
    text = message['text']
    chat_id = get_chat_id(message)

    logger.info(f"Received Telegram message from {identity.id}: {text!r}")

    if is_connect_command(text):
        result = link_by_command(identity, chat_id, text, repository, send_reply)
        return f"link:{result}"

    intent = parser.parse(text)
    logger.info(f"Parsed message: {intent.to_dict()}")

    if intent.intent == INCOMPLETE_REQUEST:
        send_reply(chat_id, replies.need_specific_date_reply())
        return INCOMPLETE

    if intent.intent != LEAVE_REQUEST or intent.confidence < pipeline_settings.min_confidence:
        send_reply(chat_id, replies.not_understood_reply())
        return NOT_UNDERSTOOD

    if not has_complete_dates(intent):
        logger.info(f"Leave request without usable dates: {intent.start_date!r} to {intent.end_date!r}")
        send_reply(chat_id, replies.need_specific_date_reply())
        return INCOMPLETE

    link = find_linked(identity.id, repository)
    if link is None:
        send_reply(chat_id, replies.not_linked_reply())
        return NOT_LINKED

    try:
        leave_request = create_leave_request(link.user_id, intent, repository, pipeline_settings)
    except Exception:
        send_reply(chat_id, replies.leave_request_failed_reply())
        raise

    send_reply(chat_id, replies.leave_request_created_reply(link.user, leave_request))
    return CREATED
