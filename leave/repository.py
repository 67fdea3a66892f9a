"""
Narrow persistence interface shared by the Telegram pipeline and the web UI.

The pipeline modules never touch the ORM directly; they receive a
``LeaveRequestRepository`` so tests can swap in an in-memory double.
"""
from abc import ABC, abstractmethod

from django.contrib.auth.models import User
from django.db import transaction

from .models import LeaveRequest, TelegramUser


class LeaveRequestRepository(ABC):

    @abstractmethod
    def create(self, **fields):
        """Persist a new leave request and return it"""

    @abstractmethod
    def find_by_user_id(self, user_id):
        """Return the user's leave requests, newest first"""

    @abstractmethod
    def count_for_user(self, user_id):
        """Return how many leave requests the user has"""

    @abstractmethod
    def find_account_link(self, telegram_user_id):
        """Return the account link for a Telegram user id, or None"""

    @abstractmethod
    def create_account_link(self, **fields):
        """Insert a new account link; raises IntegrityError if the Telegram id is taken"""

    @abstractmethod
    def save_account_link(self, telegram_user_id, **fields):
        """Create or update the account link for a Telegram user id"""

    @abstractmethod
    def find_profile_by_email(self, email):
        """Return the application user with this email, or None"""


class DjangoLeaveRepository(LeaveRequestRepository):
    """Repository backed by the Django ORM"""

    def create(self, **fields):
        return LeaveRequest.objects.create(**fields)

    def find_by_user_id(self, user_id):
        return list(LeaveRequest.objects.filter(user_id=user_id).order_by('-submitted_at'))

    def count_for_user(self, user_id):
        return LeaveRequest.objects.filter(user_id=user_id).count()

    def find_account_link(self, telegram_user_id):
        return (
            TelegramUser.objects.select_related('user')
            .filter(telegram_user_id=telegram_user_id)
            .first()
        )

    def create_account_link(self, **fields):
        # Savepoint so a unique violation does not break the caller's transaction
        with transaction.atomic():
            return TelegramUser.objects.create(**fields)

    def save_account_link(self, telegram_user_id, **fields):
        with transaction.atomic():
            link, created = TelegramUser.objects.update_or_create(
                telegram_user_id=telegram_user_id,
                defaults=fields,
            )
        return link, created

    def find_profile_by_email(self, email):
        if not email:
            return None
        return User.objects.filter(email__iexact=email.strip()).order_by('id').first()
