"""Settings tests."""

from pathlib import Path

import pytest
from pydantic import ValidationError

from wechat_payment.core.config import PaymentSettings, get_settings
from wechat_payment.payments.schemas import MerchantCredentials


@pytest.fixture
def env(monkeypatch):
    monkeypatch.setenv("WECHAT_PAY_APP_ID", "wx2421b1c4370ec43b")
    monkeypatch.setenv("WECHAT_PAY_MCH_ID", "10000100")
    monkeypatch.setenv("WECHAT_PAY_PARTNER_KEY", "192006250b4c09247ec02edce69f6a2d")
    monkeypatch.setenv("WECHAT_PAY_CERT_PATH", "/etc/wechat/apiclient_cert.p12")
    monkeypatch.setenv("WECHAT_PAY_REQUEST_TIMEOUT", "5")
    get_settings.cache_clear()
    yield
    get_settings.cache_clear()


class TestPaymentSettings:
    def test_from_environment(self, env):
        settings = PaymentSettings(_env_file=None)

        assert settings.app_id == "wx2421b1c4370ec43b"
        assert settings.cert_path == Path("/etc/wechat/apiclient_cert.p12")
        assert settings.request_timeout == 5.0
        assert settings.api_base_url == "https://api.mch.weixin.qq.com"

    def test_credentials(self, env):
        credentials = PaymentSettings(_env_file=None).credentials()

        assert isinstance(credentials, MerchantCredentials)
        assert credentials.mch_id == "10000100"
        assert credentials.sub_mch_id is None
        assert credentials.has_certificate

    def test_get_settings_cached(self, env):
        assert get_settings() is get_settings()

    def test_missing_required(self, monkeypatch):
        for name in ("WECHAT_PAY_APP_ID", "WECHAT_PAY_MCH_ID", "WECHAT_PAY_PARTNER_KEY"):
            monkeypatch.delenv(name, raising=False)
        with pytest.raises(ValidationError):
            PaymentSettings(_env_file=None)


class TestMerchantCredentials:
    def test_frozen(self, credentials):
        with pytest.raises(ValidationError):
            credentials.partner_key = "changed"

    def test_repr_hides_key(self, credentials):
        assert credentials.partner_key not in repr(credentials)
        assert credentials.partner_key not in str(credentials)
