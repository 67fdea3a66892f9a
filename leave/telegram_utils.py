from dataclasses import dataclass
from typing import Optional
import logging
import re

import requests
from django.conf import settings

logger = logging.getLogger(__name__)

MARKDOWN_SPECIAL_RE = re.compile(r'([_*`\[])')


@dataclass(frozen=True)
class ChatIdentity:
    """The sender of a Telegram message"""
    id: int
    username: Optional[str] = None
    first_name: Optional[str] = None
    last_name: Optional[str] = None

    @classmethod
    def from_message(cls, message):
        sender = message.get('from') or {}
        return cls(
            id=sender.get('id'),
            username=sender.get('username'),
            first_name=sender.get('first_name'),
            last_name=sender.get('last_name'),
        )

    @property
    def display_name(self):
        name = ' '.join(part for part in (self.first_name, self.last_name) if part)
        return name or self.username or str(self.id)


def get_chat_id(message):
    """Chat to reply to, falling back to the sender for private chats"""
    chat = message.get('chat') or {}
    if chat.get('id') is not None:
        return chat['id']
    return (message.get('from') or {}).get('id')


def escape_markdown(text):
    """Escape characters that Telegram's legacy Markdown treats as formatting"""
    if text is None:
        return ''
    return MARKDOWN_SPECIAL_RE.sub(r'\\\1', str(text))


def send_telegram_message(chat_id, text, parse_mode='Markdown'):
    """Send a message to a Telegram chat; failures are logged, never raised"""
    token = settings.TELEGRAM_BOT_TOKEN
    if not token:
        logger.error("TELEGRAM_BOT_TOKEN is not set, cannot send reply")
        return False

    url = f"{settings.TELEGRAM_API_BASE}/bot{token}/sendMessage"
    try:
        response = requests.post(
            url,
            json={'chat_id': chat_id, 'text': text, 'parse_mode': parse_mode},
            timeout=settings.TELEGRAM_API_TIMEOUT,
        )
    except requests.RequestException as e:
        logger.error(f"Error sending Telegram reply to chat {chat_id}: {e}")
        return False

    if not response.ok:
        logger.error(f"Error sending Telegram reply to chat {chat_id}: {response.status_code} {response.text}")
        return False

    logger.info(f"Telegram reply sent to chat {chat_id}")
    return True
