from .sms_client import TwilioSmsSender, MessageResult
from .dispatcher import NotificationDispatcher

__all__ = ["TwilioSmsSender", "MessageResult", "NotificationDispatcher"]
