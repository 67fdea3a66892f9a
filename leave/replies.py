"""Text templates for every outcome of the Telegram pipeline."""
from .leave_utils import display_name, effective_days, half_day_label
from .telegram_utils import escape_markdown

USAGE_EXAMPLES = (
    "• `Personal leave 15/11/2025 to 17/11/2025 for a family event`\n"
    "• `Sick leave on 20/11/2025`\n"
    "• `Half day morning leave on 21/11/2025 for a dentist appointment`"
)


def not_understood_reply():
    return (
        "❓ Sorry, I couldn't understand your message. Please try again.\n\n"
        f"*Examples:*\n{USAGE_EXAMPLES}"
    )


def need_specific_date_reply():
    return (
        "📅 Please tell me the exact date(s) of your leave.\n\n"
        "Relative dates like \"today\", \"tomorrow\" or \"next Monday\" are not accepted, "
        "use a calendar date such as `20/11/2025` or `2025-11-20`.\n"
        "For a half day, also say *morning* or *afternoon*.\n\n"
        f"*Examples:*\n{USAGE_EXAMPLES}"
    )


def not_linked_reply():
    return (
        "❌ Your Telegram account is not linked to the leave system yet.\n\n"
        "Send `/connect your.email@company.com` using the email of your leave system account."
    )


def leave_request_created_reply(user, leave_request):
    days = effective_days(leave_request)
    day_word = 'day' if days <= 1 else 'days'
    lines = [
        "✅ Leave request submitted!",
        "",
        f"👤 {escape_markdown(display_name(user))}",
        f"📅 From: {leave_request.start_date}",
        f"📅 To: {leave_request.end_date}",
        f"📊 Days: {days:g} {day_word}",
        f"💬 Reason: {escape_markdown(leave_request.reason)}",
        f"🏷️ Type: {leave_request.leave_type}",
    ]
    if leave_request.is_half_day:
        lines.append(f"🕐 Half day: {half_day_label(leave_request.half_day_period)}")
    lines += ["", "Status: ⏳ Pending approval"]
    return '\n'.join(lines)


def leave_request_failed_reply():
    return (
        "⚠️ Something went wrong while saving your leave request, it was *not* submitted.\n"
        "Please try again later or use the web form."
    )


def missing_email_reply():
    return (
        "📧 Please include the email of your leave system account.\n\n"
        "*Example:* `/connect your.email@company.com`"
    )


def user_not_found_reply(email):
    return (
        f"❌ No leave system account found for {escape_markdown(email)}.\n"
        "Please check the email address or ask an admin to create your account."
    )


def already_linked_reply(email):
    return f"ℹ️ This Telegram account is already linked to {escape_markdown(email)}."


def link_error_reply():
    return "⚠️ Something went wrong while linking your account. Please try again later."


def link_success_reply(user, email, leave_count=None):
    lines = [
        "✅ Your Telegram account is now linked!",
        "",
        f"👤 {escape_markdown(display_name(user))}",
        f"📧 {escape_markdown(email)}",
    ]
    if leave_count is not None:
        lines.append(f"📋 Existing leave requests: {leave_count}")
    lines += ["", "You can now send leave requests here, for example:", "`Sick leave on 20/11/2025`"]
    return '\n'.join(lines)
