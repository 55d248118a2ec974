from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from wechat_payment.payments.schemas import MerchantCredentials


class PaymentSettings(BaseSettings):
    """Merchant settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="WECHAT_PAY_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Merchant account
    app_id: str = Field(
        ...,
        min_length=1,
        description="Official account / application appid",
    )
    mch_id: str = Field(
        ...,
        min_length=1,
        description="Merchant id",
    )
    sub_mch_id: str | None = Field(
        default=None,
        description="Sub-merchant id (service provider mode)",
    )
    partner_key: str = Field(
        ...,
        min_length=1,
        description="API key used for signing and refund decryption",
    )
    notify_url: str | None = Field(
        default=None,
        description="Default payment notify URL for unified orders",
    )

    # Client certificate for refund and other secure endpoints
    cert_path: Path | None = Field(
        default=None,
        description="Client certificate, PEM bundle or PKCS#12 (.p12/.pfx)",
    )
    cert_passphrase: str | None = Field(
        default=None,
        description="Client certificate passphrase (usually the mch_id)",
    )

    # Transport
    api_base_url: str = Field(
        default="https://api.mch.weixin.qq.com",
        description="Gateway base URL (sandbox: https://api.mch.weixin.qq.com/sandboxnew)",
    )
    request_timeout: float = Field(
        default=10.0,
        gt=0,
        description="Outbound request timeout in seconds",
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    def credentials(self) -> MerchantCredentials:
        """Build immutable credentials for a client or notify pipeline."""
        return MerchantCredentials(
            app_id=self.app_id,
            mch_id=self.mch_id,
            sub_mch_id=self.sub_mch_id,
            partner_key=self.partner_key,
            notify_url=self.notify_url,
            cert_path=self.cert_path,
            cert_passphrase=self.cert_passphrase,
        )


@lru_cache
def get_settings() -> PaymentSettings:
    """Get settings (cached)."""
    return PaymentSettings()
