"""Gateway signature utilities (canonical query string + MD5/SHA1)."""

import hmac
from collections.abc import Mapping
from typing import Any

from wechat_payment.payments.schemas import SignType

SIGN_FIELD = "sign"


def to_query_string(params: Mapping[str, Any]) -> str:
    """Build canonical string for signature.

    Keys with ``None`` or empty values are dropped, the rest sorted by key.
    Values are not escaped.
    Format: key1=value1&key2=value2
    """
    pairs = [
        (key, str(value))
        for key, value in params.items()
        if value is not None and str(value) != ""
    ]
    return "&".join(f"{k}={v}" for k, v in sorted(pairs))


def generate_sign(
    params: Mapping[str, Any],
    partner_key: str,
    sign_type: SignType | str = SignType.MD5,
) -> str:
    """Generate request/response signature.

    Formula: UPPER(HASH(query_string&key=partner_key)), where an existing
    ``sign`` field is excluded from the query string.

    Args:
        params: Parameter set to sign
        partner_key: Merchant API key
        sign_type: MD5 (default) or SHA1

    Returns:
        Hex digest in uppercase
    """
    sign_type = SignType.parse(sign_type)
    unsigned = {k: v for k, v in params.items() if k != SIGN_FIELD}
    data = f"{to_query_string(unsigned)}&key={partner_key}"
    return sign_type.hexdigest(data).upper()


def verify_sign(
    record: Mapping[str, Any],
    partner_key: str,
    sign_type: SignType | str = SignType.MD5,
) -> bool:
    """Verify ``sign`` of a parsed record.

    Returns:
        True if signature is present and valid
    """
    signature = record.get(SIGN_FIELD)
    if not signature:
        return False
    expected = generate_sign(record, partner_key, sign_type)
    # compare_digest only accepts ASCII str; gateway input may be anything
    return hmac.compare_digest(str(signature).upper().encode("utf-8"), expected.encode("utf-8"))


def sign_params(
    params: Mapping[str, Any],
    partner_key: str,
    sign_type: SignType | str = SignType.MD5,
) -> dict[str, Any]:
    """Return a copy of ``params`` with ``sign`` set."""
    signed = dict(params)
    signed[SIGN_FIELD] = generate_sign(params, partner_key, sign_type)
    return signed


def generate_address_sign(params: Mapping[str, Any]) -> str:
    """Generate ``addrSign`` for the JS-API address editor.

    Formula: lower(SHA1(query_string)) over appid, url, timestamp, noncestr
    and accesstoken. No key is appended.
    """
    return SignType.SHA1.hexdigest(to_query_string(params))
