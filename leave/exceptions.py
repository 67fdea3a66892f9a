class LeaveBotError(Exception):
    """Base class for errors raised by the leave bot pipeline"""


class InvalidLeaveIntent(LeaveBotError, ValueError):
    """A parsed intent does not meet the preconditions for creating a leave request"""


class LeaveRequestWriteError(LeaveBotError):
    """The leave request could not be persisted"""
