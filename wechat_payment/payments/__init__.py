"""Gateway client, signing and XML envelope handling."""

from wechat_payment.payments.client import PaymentClient
from wechat_payment.payments.schemas import (
    BillReport,
    MerchantCredentials,
    NotifyKind,
    Outcome,
    SignType,
)
from wechat_payment.payments.signature import generate_sign, to_query_string, verify_sign
from wechat_payment.payments.transport import BaseTransport, HttpxTransport
from wechat_payment.payments.validator import validate_response
from wechat_payment.payments.xml import build_xml, parse_xml

__all__ = [
    "BaseTransport",
    "BillReport",
    "HttpxTransport",
    "MerchantCredentials",
    "NotifyKind",
    "Outcome",
    "PaymentClient",
    "SignType",
    "build_xml",
    "generate_sign",
    "parse_xml",
    "to_query_string",
    "validate_response",
    "verify_sign",
]
