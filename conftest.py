"""Shared pytest fixtures: users, a fake Gemini model, and a reply recorder."""

import os
import sys
from types import SimpleNamespace

import pytest

# Keep the repository root importable when pytest is run from elsewhere.
ROOT_DIR = os.path.abspath(os.path.dirname(__file__))
if ROOT_DIR not in sys.path:
    sys.path.insert(0, ROOT_DIR)


class FakeGeminiModel:
    """Stands in for google.generativeai.GenerativeModel"""

    def __init__(self, text=None, error=None):
        self.text = text
        self.error = error
        self.prompts = []

    def generate_content(self, prompt, generation_config=None):
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return SimpleNamespace(text=self.text)


class FakeParser:
    """Returns a fixed ParsedIntent and remembers what it was asked"""

    def __init__(self, intent=None):
        self.intent = intent
        self.calls = []

    def parse(self, text):
        self.calls.append(text)
        return self.intent


class ReplyRecorder:
    def __init__(self):
        self.sent = []

    def __call__(self, chat_id, text):
        self.sent.append((chat_id, text))
        return True

    @property
    def texts(self):
        return [text for _, text in self.sent]


@pytest.fixture
def replies():
    return ReplyRecorder()


@pytest.fixture
def fake_model():
    return FakeGeminiModel


@pytest.fixture
def fake_parser():
    return FakeParser


@pytest.fixture
def make_user(django_user_model):
    def _make_user(email, first_name='', last_name='', username=None):
        return django_user_model.objects.create_user(
            username=username or email.split('@')[0],
            email=email,
            first_name=first_name,
            last_name=last_name,
        )
    return _make_user


@pytest.fixture
def telegram_message():
    def _telegram_message(text, user_id=111, chat_id=None, username='tester', first_name='Test', last_name=None):
        return {
            'message_id': 1,
            'from': {
                'id': user_id,
                'is_bot': False,
                'first_name': first_name,
                'last_name': last_name,
                'username': username,
            },
            'chat': {'id': chat_id if chat_id is not None else user_id, 'type': 'private'},
            'date': 1763596800,
            'text': text,
        }
    return _telegram_message


@pytest.fixture(autouse=True)
def telegram_settings(settings):
    settings.TELEGRAM_BOT_TOKEN = 'test-token'
    settings.TELEGRAM_API_BASE = 'https://api.telegram.test'
    settings.TELEGRAM_WEBHOOK_SECRET = ''
    settings.TELEGRAM_SETUP_TOKEN = ''
    settings.GOOGLE_AI_API_KEY = ''
    settings.LEAVE_MIN_CONFIDENCE = 0.7
    settings.LEAVE_REJECT_RELATIVE_DATES = True
    return settings
