"""Inbound notification (webhook) handling."""

from wechat_payment.notify.pipeline import NotifyHandler, NotifyPipeline, NotifyReply, NotifyState

__all__ = [
    "NotifyHandler",
    "NotifyPipeline",
    "NotifyReply",
    "NotifyState",
]
