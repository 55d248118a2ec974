"""WeChat Pay gateway client."""

import secrets
import string
import time
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from wechat_payment.core.exceptions import ConfigurationError, XmlParseError
from wechat_payment.core.logging import get_logger
from wechat_payment.payments.bill import parse_bill
from wechat_payment.payments.operations import (
    CLOSE_ORDER,
    DOWNLOAD_BILL,
    ORDER_QUERY,
    REFUND,
    REFUND_QUERY,
    SHORT_URL,
    UNIFIED_ORDER,
    OperationDescriptor,
    check_required,
    extend_with_defaults,
)
from wechat_payment.payments.schemas import BillReport, MerchantCredentials, SignType
from wechat_payment.payments.signature import generate_address_sign, generate_sign, sign_params
from wechat_payment.payments.tls import build_client_ssl_context
from wechat_payment.payments.transport import BaseTransport, HttpxTransport
from wechat_payment.payments.validator import validate_response
from wechat_payment.payments.xml import build_xml, parse_xml

if TYPE_CHECKING:
    from wechat_payment.core.config import PaymentSettings

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://api.mch.weixin.qq.com"
NONCE_CHARS = string.ascii_letters + string.digits

Params = Mapping[str, Any]


def generate_nonce_str(length: int = 32) -> str:
    """Random alphanumeric nonce."""
    return "".join(secrets.choice(NONCE_CHARS) for _ in range(length))


def generate_timestamp() -> str:
    """Unix timestamp in seconds, as string."""
    return str(int(time.time()))


class PaymentClient:
    """Client for the WeChat Pay v2 XML API.

    Every operation extends the caller's parameters with account defaults,
    checks required fields, signs, posts the XML envelope and validates the
    response. Failures are raised as ``WechatPayError`` subclasses; transport
    errors propagate as ``httpx.HTTPError``.
    """

    def __init__(
        self,
        credentials: MerchantCredentials,
        transport: BaseTransport | None = None,
        timeout: float = 10.0,
        base_url: str = DEFAULT_BASE_URL,
    ) -> None:
        self.credentials = credentials
        self.base_url = base_url.rstrip("/")
        if transport is None:
            ssl_context = None
            if credentials.cert_path is not None:
                ssl_context = build_client_ssl_context(
                    credentials.cert_path,
                    credentials.cert_passphrase,
                )
            transport = HttpxTransport(timeout=timeout, ssl_context=ssl_context)
        self.transport = transport

    @classmethod
    def from_settings(
        cls,
        settings: "PaymentSettings | None" = None,
        transport: BaseTransport | None = None,
    ) -> "PaymentClient":
        """Create client from PaymentSettings (environment by default)."""
        if settings is None:
            from wechat_payment.core.config import get_settings

            settings = get_settings()

        return cls(
            credentials=settings.credentials(),
            transport=transport,
            timeout=settings.request_timeout,
            base_url=settings.api_base_url,
        )

    def _account_defaults(self) -> dict[str, Any]:
        return {
            "appid": self.credentials.app_id,
            "mch_id": self.credentials.mch_id,
            "sub_mch_id": self.credentials.sub_mch_id,
            "nonce_str": generate_nonce_str(),
            "notify_url": self.credentials.notify_url,
            "op_user_id": self.credentials.mch_id,
        }

    def _prepare(self, operation: OperationDescriptor, params: Params, sign_type: SignType) -> dict[str, Any]:
        request = extend_with_defaults(params, operation.defaults, self._account_defaults())
        check_required(request, operation)
        return sign_params(request, self.credentials.partner_key, sign_type)

    async def _post(self, operation: OperationDescriptor, request: dict[str, Any]) -> str:
        if operation.secure and not self.credentials.has_certificate:
            raise ConfigurationError(
                message=f"{operation.name} requires a client certificate",
                details={"operation": operation.name},
            )

        logger.info(
            "Gateway call: operation=%s, out_trade_no=%s",
            operation.name,
            request.get("out_trade_no"),
        )
        return await self.transport.post(
            f"{self.base_url}{operation.path}",
            build_xml(request),
            secure=operation.secure,
        )

    def _validate(self, operation: OperationDescriptor, raw: str, sign_type: SignType) -> dict[str, str]:
        try:
            return validate_response(parse_xml(raw), self.credentials, sign_type)
        except Exception as e:
            logger.warning("Gateway call failed: operation=%s, error=%r", operation.name, e)
            raise

    async def _signed_request(
        self,
        operation: OperationDescriptor,
        params: Params,
        sign_type: SignType | str = SignType.MD5,
    ) -> dict[str, str]:
        sign_type = SignType.parse(sign_type)
        request = self._prepare(operation, params, sign_type)
        raw = await self._post(operation, request)
        return self._validate(operation, raw, sign_type)

    async def unified_order(self, order: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        """Create a prepaid order (``/pay/unifiedorder``).

        Requires body, out_trade_no, total_fee, spbill_create_ip, trade_type;
        openid (or sub_openid) for JSAPI and product_id for NATIVE.
        """
        return await self._signed_request(UNIFIED_ORDER, order, sign_type)

    async def order_query(self, query: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        """Query an order by transaction_id or out_trade_no."""
        return await self._signed_request(ORDER_QUERY, query, sign_type)

    async def close_order(self, order: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        return await self._signed_request(CLOSE_ORDER, order, sign_type)

    async def refund(self, refund: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        """Request a refund over the certificate-authenticated endpoint."""
        return await self._signed_request(REFUND, refund, sign_type)

    async def refund_query(self, query: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        return await self._signed_request(REFUND_QUERY, query, sign_type)

    async def short_url(self, params: Params, sign_type: SignType | str = SignType.MD5) -> dict[str, str]:
        return await self._signed_request(SHORT_URL, params, sign_type)

    async def download_bill(self, params: Params, sign_type: SignType | str = SignType.MD5) -> BillReport:
        """Download the daily bill.

        The gateway answers with CSV on success and an XML envelope on
        failure, so an XML parse failure here means a report to parse.
        """
        sign_type = SignType.parse(sign_type)
        request = self._prepare(DOWNLOAD_BILL, params, sign_type)
        raw = await self._post(DOWNLOAD_BILL, request)

        try:
            record = parse_xml(raw)
        except XmlParseError:
            report = parse_bill(raw)
            logger.info("Bill downloaded: bill_date=%s, rows=%d", request.get("bill_date"), len(report.records))
            return report

        # An XML answer is always an error envelope.
        validate_response(record, self.credentials, sign_type)
        return BillReport()

    async def get_brand_pay_request_params(
        self,
        order: Params,
        sign_type: SignType | str = SignType.MD5,
    ) -> dict[str, str]:
        """Place a JSAPI order and build the ``getBrandWCPayRequest`` payload.

        Returns:
            appId, timeStamp, nonceStr, package, signType and paySign
        """
        sign_type = SignType.parse(sign_type)
        order = {"trade_type": "JSAPI", **order}
        result = await self.unified_order(order, sign_type)

        params = {
            "appId": self.credentials.app_id,
            "timeStamp": generate_timestamp(),
            "nonceStr": generate_nonce_str(),
            "package": f"prepay_id={result['prepay_id']}",
            "signType": sign_type.value,
        }
        params["paySign"] = generate_sign(params, self.credentials.partner_key, sign_type)
        return params

    def get_edit_address_params(self, url: str, access_token: str) -> dict[str, str]:
        """Build the ``editAddress`` JS-API payload (SHA1 ``addrSign``).

        Args:
            url: Page URL the address editor is opened from
            access_token: OAuth access token of the user
        """
        timestamp = generate_timestamp()
        nonce_str = generate_nonce_str()
        addr_sign = generate_address_sign(
            {
                "appid": self.credentials.app_id,
                "url": url,
                "timestamp": timestamp,
                "noncestr": nonce_str,
                "accesstoken": access_token,
            }
        )
        return {
            "appId": self.credentials.app_id,
            "scope": "jsapi_address",
            "signType": "sha1",
            "addrSign": addr_sign,
            "timeStamp": timestamp,
            "nonceStr": nonce_str,
        }
