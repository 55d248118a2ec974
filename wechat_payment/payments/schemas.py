"""Payment schemas shared by the client and the notify pipeline."""

import hashlib
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from wechat_payment.core.exceptions import UnsupportedSignTypeError, error_name


class MerchantCredentials(BaseModel):
    """Merchant account credentials (immutable per client instance)."""

    model_config = ConfigDict(frozen=True)

    app_id: str = Field(..., min_length=1, description="appid")
    mch_id: str = Field(..., min_length=1, description="Merchant id")
    sub_mch_id: str | None = Field(default=None, description="Sub-merchant id")
    partner_key: str = Field(..., min_length=1, description="API signing key")
    notify_url: str | None = Field(default=None, description="Default notify URL")
    cert_path: Path | None = Field(default=None, description="Client certificate path")
    cert_passphrase: str | None = Field(default=None, description="Client certificate passphrase")

    @property
    def has_certificate(self) -> bool:
        return self.cert_path is not None

    def __repr__(self) -> str:
        return f"MerchantCredentials(app_id={self.app_id!r}, mch_id={self.mch_id!r}, sub_mch_id={self.sub_mch_id!r})"

    __str__ = __repr__


class SignType(str, Enum):
    """Digest algorithms accepted by the gateway for ``sign``."""

    MD5 = "MD5"
    SHA1 = "SHA1"

    @classmethod
    def parse(cls, value: "str | SignType") -> "SignType":
        """Resolve a sign type name, case-insensitively.

        Raises:
            UnsupportedSignTypeError: If the name is not a supported algorithm
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).upper())
        except ValueError:
            raise UnsupportedSignTypeError(str(value)) from None

    def hexdigest(self, data: str) -> str:
        return hashlib.new(self.value.lower(), data.encode("utf-8")).hexdigest()


class ReturnCode(str, Enum):
    SUCCESS = "SUCCESS"
    FAIL = "FAIL"


class Decryption(str, Enum):
    """How a validated notify record is turned into the handler's record."""

    NONE = "none"
    REFUND = "refund"


class NotifyKind(str, Enum):
    """Inbound notification flavors."""

    PAYMENT = "payment"
    REFUND = "refund"
    PAY_FEEDBACK = "pay_feedback"
    PACKAGE_QUERY = "package_query"
    ALARM = "alarm"

    @property
    def decryption(self) -> Decryption:
        if self is NotifyKind.REFUND:
            return Decryption.REFUND
        return Decryption.NONE


@dataclass(frozen=True)
class Outcome:
    """Result a notify handler hands back to the pipeline."""

    success: bool
    error: BaseException | None = None

    @classmethod
    def ok(cls) -> "Outcome":
        return cls(success=True)

    @classmethod
    def fail(cls, error: BaseException) -> "Outcome":
        return cls(success=False, error=error)

    @classmethod
    def from_value(cls, value: Any) -> "Outcome":
        """Coerce a handler return value: exceptions fail, anything else succeeds."""
        if isinstance(value, cls):
            return value
        if isinstance(value, BaseException):
            return cls.fail(value)
        return cls.ok()

    def to_reply(self) -> dict[str, str]:
        """Fields of the XML reply sent back to the gateway."""
        if self.success:
            return {"return_code": ReturnCode.SUCCESS.value}
        reason = error_name(self.error) if self.error is not None else ReturnCode.FAIL.value
        return {"return_code": ReturnCode.FAIL.value, "return_msg": reason}


@dataclass
class BillReport:
    """Parsed download-bill report."""

    records: list[dict[str, str]] = field(default_factory=list)
    summary: dict[str, str] = field(default_factory=dict)
