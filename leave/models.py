from django.db import models
from django.db.models import Q
from django.contrib.auth.models import User


class TelegramUser(models.Model):
    """Links a Telegram account to an application user"""
    telegram_user_id = models.BigIntegerField(unique=True)
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='telegram_accounts')
    email = models.EmailField()
    telegram_username = models.CharField(max_length=150, blank=True, null=True)
    telegram_first_name = models.CharField(max_length=150, blank=True, null=True)
    telegram_last_name = models.CharField(max_length=150, blank=True, null=True)
    chat_id = models.BigIntegerField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        handle = f"@{self.telegram_username}" if self.telegram_username else self.telegram_user_id
        return f"{handle} -> {self.email}"


class LeaveRequest(models.Model):
    PERSONAL = 'Personal Leave'
    SICK = 'Sick Leave'
    VACATION = 'Vacation Leave'

    LEAVE_TYPES = [
        (PERSONAL, 'Personal Leave'),
        (SICK, 'Sick Leave'),
        (VACATION, 'Vacation Leave'),
    ]

    PENDING = 'pending'
    APPROVED = 'approved'
    REJECTED = 'rejected'

    STATUS_CHOICES = [
        (PENDING, 'Pending'),
        (APPROVED, 'Approved'),
        (REJECTED, 'Rejected'),
    ]

    MORNING = 'morning'
    AFTERNOON = 'afternoon'

    HALF_DAY_PERIODS = [
        (MORNING, 'Morning'),
        (AFTERNOON, 'Afternoon'),
    ]

    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='leave_requests')
    leave_type = models.CharField(max_length=20, choices=LEAVE_TYPES, default=PERSONAL)
    selected_dates = models.JSONField(default=list)
    # Full inclusive span, even for half-day requests
    days = models.PositiveIntegerField(default=1)
    reason = models.TextField(blank=True)
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=PENDING)
    is_half_day = models.BooleanField(default=False)
    half_day_period = models.CharField(max_length=10, choices=HALF_DAY_PERIODS, null=True, blank=True)
    submitted_at = models.DateTimeField(auto_now_add=True)

    # Approval tracking
    approved_at = models.DateTimeField(null=True, blank=True)
    approved_by = models.ForeignKey(
        User, on_delete=models.SET_NULL, null=True, blank=True, related_name='approved_leave_requests'
    )
    approved_by_name = models.CharField(max_length=150, null=True, blank=True)

    class Meta:
        ordering = ['-submitted_at']
        constraints = [
            models.CheckConstraint(
                condition=Q(is_half_day=False) | Q(half_day_period__isnull=False),
                name='half_day_requires_period',
            ),
        ]

    def __str__(self):
        first = self.selected_dates[0] if self.selected_dates else '?'
        last = self.selected_dates[-1] if self.selected_dates else '?'
        return f"{self.user.username}'s {self.leave_type} ({first} to {last})"

    @property
    def start_date(self):
        return self.selected_dates[0] if self.selected_dates else None

    @property
    def end_date(self):
        return self.selected_dates[-1] if self.selected_dates else None
