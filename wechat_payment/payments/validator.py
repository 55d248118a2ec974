"""Ordered validation of gateway envelopes (responses and notifications)."""

from wechat_payment.core.exceptions import (
    BusinessError,
    InvalidAppIdError,
    InvalidMchIdError,
    InvalidSignatureError,
    InvalidSubMchIdError,
    ProtocolError,
)
from wechat_payment.payments.schemas import MerchantCredentials, ReturnCode, SignType
from wechat_payment.payments.signature import SIGN_FIELD, verify_sign


def _same(expected: str | None, actual: str | None) -> bool:
    # Missing and empty identity fields are equivalent.
    return (expected or None) == (actual or None)


def validate_response(
    record: dict[str, str],
    credentials: MerchantCredentials,
    sign_type: SignType | str = SignType.MD5,
    require_sign: bool = True,
) -> dict[str, str]:
    """Run the envelope checks in order, raising on the first failure.

    Order: return_code, result_code, appid, mch_id, sub_mch_id, sign.

    Args:
        record: Parsed envelope
        credentials: Merchant credentials the envelope must belong to
        sign_type: Digest used to recompute ``sign``
        require_sign: When False, ``sign`` is only checked if present

    Returns:
        The record, unchanged

    Raises:
        ProtocolError: return_code is FAIL (message = return_msg)
        BusinessError: result_code is FAIL (message = err_code)
        InvalidAppIdError, InvalidMchIdError, InvalidSubMchIdError: identity mismatch
        InvalidSignatureError: sign missing or wrong
    """
    if record.get("return_code") == ReturnCode.FAIL:
        raise ProtocolError(
            message=record.get("return_msg") or None,
            details={"return_msg": record.get("return_msg")},
        )

    if record.get("result_code") == ReturnCode.FAIL:
        raise BusinessError(
            message=record.get("err_code") or None,
            details={
                "err_code": record.get("err_code"),
                "err_code_des": record.get("err_code_des"),
            },
        )

    if not _same(credentials.app_id, record.get("appid")):
        raise InvalidAppIdError(details={"appid": record.get("appid")})

    if not _same(credentials.mch_id, record.get("mch_id")):
        raise InvalidMchIdError(details={"mch_id": record.get("mch_id")})

    if not _same(credentials.sub_mch_id, record.get("sub_mch_id")):
        raise InvalidSubMchIdError(details={"sub_mch_id": record.get("sub_mch_id")})

    if require_sign or record.get(SIGN_FIELD):
        if not verify_sign(record, credentials.partner_key, sign_type):
            raise InvalidSignatureError()

    return record
