from django.contrib import admin, messages
from .leave_utils import approve_leave_request, effective_days
from .models import LeaveRequest, TelegramUser


@admin.register(LeaveRequest)
class LeaveRequestAdmin(admin.ModelAdmin):
    list_display = ['user', 'leave_type', 'start_date', 'end_date', 'display_days', 'status', 'submitted_at']
    list_filter = ['status', 'leave_type', 'is_half_day']
    search_fields = ['user__username', 'user__email', 'reason']
    readonly_fields = ['submitted_at', 'approved_at', 'approved_by', 'approved_by_name']
    actions = ['approve_selected', 'reject_selected']

    @admin.display(description='Days')
    def display_days(self, obj):
        return effective_days(obj)

    def _decide(self, request, queryset, approved):
        decided = 0
        for leave_request in queryset:
            try:
                approve_leave_request(leave_request, approved, request.user)
                decided += 1
            except ValueError as e:
                self.message_user(request, str(e), level=messages.WARNING)
        verb = 'approved' if approved else 'rejected'
        self.message_user(request, f"{decided} leave request(s) {verb}.")

    @admin.action(description='Approve selected pending requests')
    def approve_selected(self, request, queryset):
        self._decide(request, queryset, True)

    @admin.action(description='Reject selected pending requests')
    def reject_selected(self, request, queryset):
        self._decide(request, queryset, False)


@admin.register(TelegramUser)
class TelegramUserAdmin(admin.ModelAdmin):
    list_display = ['telegram_user_id', 'telegram_username', 'email', 'user', 'created_at']
    search_fields = ['telegram_username', 'email', 'user__username']
    readonly_fields = ['created_at', 'updated_at']
