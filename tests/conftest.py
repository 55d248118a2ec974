"""Pytest fixtures for gateway and notify tests."""

import base64
from collections.abc import Callable
from pathlib import Path

import pytest
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes

from wechat_payment.core.config import PaymentSettings
from wechat_payment.payments.crypto import derive_refund_key
from wechat_payment.payments.schemas import MerchantCredentials
from wechat_payment.payments.signature import sign_params
from wechat_payment.payments.transport import BaseTransport
from wechat_payment.payments.xml import build_xml

APP_ID = "wx2421b1c4370ec43b"
MCH_ID = "10000100"
PARTNER_KEY = "192006250b4c09247ec02edce69f6a2d"
NOTIFY_URL = "https://example.com/wechat/notify"


class RecordingTransport(BaseTransport):
    """Transport returning a canned body and recording every call."""

    def __init__(self, response: str = "") -> None:
        self.response = response
        self.calls: list[tuple[str, str, bool]] = []

    async def post(self, url: str, body: str, *, secure: bool = False) -> str:
        self.calls.append((url, body, secure))
        return self.response


@pytest.fixture
def credentials() -> MerchantCredentials:
    """Merchant without a client certificate."""
    return MerchantCredentials(
        app_id=APP_ID,
        mch_id=MCH_ID,
        partner_key=PARTNER_KEY,
        notify_url=NOTIFY_URL,
    )


@pytest.fixture
def cert_credentials(credentials) -> MerchantCredentials:
    """Merchant with a (never loaded) client certificate."""
    return credentials.model_copy(
        update={"cert_path": Path("apiclient_cert.p12"), "cert_passphrase": MCH_ID}
    )


@pytest.fixture
def settings() -> PaymentSettings:
    return PaymentSettings(
        _env_file=None,
        app_id=APP_ID,
        mch_id=MCH_ID,
        partner_key=PARTNER_KEY,
        notify_url=NOTIFY_URL,
    )


@pytest.fixture
def transport() -> RecordingTransport:
    return RecordingTransport()


@pytest.fixture
def signed_envelope() -> Callable[..., str]:
    """Build a signed XML envelope from the merchant's identity plus fields."""

    def _build(key: str = PARTNER_KEY, **fields: str) -> str:
        record = {
            "return_code": "SUCCESS",
            "result_code": "SUCCESS",
            "appid": APP_ID,
            "mch_id": MCH_ID,
            "nonce_str": "5K8264ILTKCH16CQ2502SI8ZNMTM67VS",
            **fields,
        }
        record = {k: v for k, v in record.items() if v is not None}
        return build_xml(sign_params(record, key))

    return _build


@pytest.fixture
def encrypt_req_info() -> Callable[[str], str]:
    """Encrypt a refund payload the way the gateway does (AES-256-ECB, PKCS#7)."""

    def _encrypt(plaintext: str, partner_key: str = PARTNER_KEY) -> str:
        padder = padding.PKCS7(128).padder()
        padded = padder.update(plaintext.encode("utf-8")) + padder.finalize()
        encryptor = Cipher(algorithms.AES(derive_refund_key(partner_key)), modes.ECB()).encryptor()
        return base64.b64encode(encryptor.update(padded) + encryptor.finalize()).decode("ascii")

    return _encrypt
