import logging
import re

from django.db import DatabaseError, IntegrityError

from . import replies

logger = logging.getLogger(__name__)

EMAIL_RE = re.compile(r'[\w.+-]+@[\w-]+(?:\.[\w-]+)+')

MISSING_EMAIL = 'missing_email'
USER_NOT_FOUND = 'user_not_found'
ALREADY_LINKED = 'already_linked'
LINK_ERROR = 'link_error'
LINKED = 'linked'


def extract_email(text):
    match = EMAIL_RE.search(text or '')
    return match.group(0) if match else None


def find_linked(telegram_user_id, repository):
    """Account link for a Telegram user, or None if unlinked or the lookup fails"""
    try:
        link = repository.find_account_link(telegram_user_id)
    except DatabaseError as e:
        logger.error(f"Error looking up Telegram user {telegram_user_id}: {e}")
        return None

    if link is None:
        logger.info(f"User not found for Telegram ID: {telegram_user_id}")
    return link


def link_by_command(identity, chat_id, text, repository, send_reply):
    """
    Handle ``/connect <email>``: link the sender's Telegram account to the
    application user with that email.

    Every outcome is answered in the chat; an existing link is never
    overwritten.
    """
    email = extract_email(text)
    if not email:
        send_reply(chat_id, replies.missing_email_reply())
        return MISSING_EMAIL

    try:
        user = repository.find_profile_by_email(email)
    except DatabaseError as e:
        logger.error(f"Error looking up profile for {email}: {e}")
        user = None

    if user is None:
        logger.info(f"CONNECT: no profile for {email} (Telegram ID {identity.id})")
        send_reply(chat_id, replies.user_not_found_reply(email))
        return USER_NOT_FOUND

    existing = find_linked(identity.id, repository)
    if existing is not None:
        logger.info(f"CONNECT: Telegram ID {identity.id} already linked to {existing.email}")
        send_reply(chat_id, replies.already_linked_reply(existing.email))
        return ALREADY_LINKED

    try:
        repository.create_account_link(
            telegram_user_id=identity.id,
            user=user,
            email=email,
            telegram_username=identity.username,
            telegram_first_name=identity.first_name,
            telegram_last_name=identity.last_name,
            chat_id=chat_id,
        )
    except IntegrityError:
        # Another /connect for this Telegram ID won the race
        existing = find_linked(identity.id, repository)
        linked_email = existing.email if existing is not None else email
        logger.warning(f"CONNECT: concurrent link for Telegram ID {identity.id}, keeping {linked_email}")
        send_reply(chat_id, replies.already_linked_reply(linked_email))
        return ALREADY_LINKED
    except DatabaseError as e:
        logger.error(f"CONNECT: error linking Telegram ID {identity.id} to {email}: {e}")
        send_reply(chat_id, replies.link_error_reply())
        return LINK_ERROR

    try:
        leave_count = repository.count_for_user(user.pk)
    except DatabaseError as e:
        logger.warning(f"CONNECT: could not count leave requests for user {user.pk}: {e}")
        leave_count = None

    logger.info(f"CONNECT: linked Telegram ID {identity.id} to {email}")
    send_reply(chat_id, replies.link_success_reply(user, email, leave_count))
    return LINKED


def setup_account_link(repository, telegram_user_id, user_email, telegram_username=None,
                       telegram_first_name=None, telegram_last_name=None):
    """
    Administrative create-or-update of an account link.

    Returns ``(link, created)``, or ``(None, False)`` when no user has the
    email. Database errors propagate to the caller.
    """
    user = repository.find_profile_by_email(user_email)
    if user is None:
        return None, False

    return repository.save_account_link(
        telegram_user_id,
        user=user,
        email=user_email.strip(),
        telegram_username=telegram_username or None,
        telegram_first_name=telegram_first_name or None,
        telegram_last_name=telegram_last_name or None,
    )
