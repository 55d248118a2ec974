"""Async client and notify middleware for the WeChat Pay v2 XML API."""

from wechat_payment.core.exceptions import WechatPayError
from wechat_payment.notify import NotifyPipeline
from wechat_payment.payments import MerchantCredentials, NotifyKind, Outcome, PaymentClient, SignType

__version__ = "1.0.0"

__all__ = [
    "MerchantCredentials",
    "NotifyKind",
    "NotifyPipeline",
    "Outcome",
    "PaymentClient",
    "SignType",
    "WechatPayError",
]
