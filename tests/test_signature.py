"""Canonical query string and signature tests."""

import hashlib

import pytest

from wechat_payment.core.exceptions import UnsupportedSignTypeError
from wechat_payment.payments.schemas import SignType
from wechat_payment.payments.signature import (
    generate_address_sign,
    generate_sign,
    sign_params,
    to_query_string,
    verify_sign,
)

KEY = "192006250b4c09247ec02edce69f6a2d"

# Example from the gateway signing guide
DOC_PARAMS = {
    "appid": "wxd930ea5d5a258f4f",
    "mch_id": "10000100",
    "device_info": "1000",
    "body": "test",
    "nonce_str": "ibuaiVcKdpRxkhJA",
}


class TestQueryString:
    def test_sorted_by_key(self):
        assert to_query_string({"b": "2", "a": "1", "c": "3"}) == "a=1&b=2&c=3"

    def test_insertion_order_is_irrelevant(self):
        forward = {"appid": "wx1", "body": "test", "total_fee": 1}
        backward = dict(reversed(list(forward.items())))
        assert to_query_string(forward) == to_query_string(backward)

    def test_empty_and_none_values_dropped(self):
        assert to_query_string({"a": "1", "b": "", "c": None, "d": 0}) == "a=1&d=0"

    def test_values_are_not_escaped(self):
        assert to_query_string({"url": "https://x.test/?a=1"}) == "url=https://x.test/?a=1"

    def test_numbers_stringified(self):
        assert to_query_string({"total_fee": 100}) == "total_fee=100"


class TestGenerateSign:
    def test_documented_example(self):
        """
        Scenario: Sign the parameter set from the gateway guide
        Expected: The documented uppercase MD5 signature
        """
        assert generate_sign(DOC_PARAMS, KEY) == "9A0A8659F005D6984697E2CA0A9CF3B7"

    def test_md5_formula(self):
        expected = hashlib.md5(
            f"{to_query_string(DOC_PARAMS)}&key={KEY}".encode()
        ).hexdigest().upper()
        assert generate_sign(DOC_PARAMS, KEY) == expected

    def test_sha1_formula(self):
        expected = hashlib.sha1(
            f"{to_query_string(DOC_PARAMS)}&key={KEY}".encode()
        ).hexdigest().upper()
        assert generate_sign(DOC_PARAMS, KEY, SignType.SHA1) == expected
        assert generate_sign(DOC_PARAMS, KEY, "sha1") == expected

    def test_idempotent(self):
        assert generate_sign(DOC_PARAMS, KEY) == generate_sign(DOC_PARAMS, KEY)

    def test_existing_sign_ignored(self):
        signed = {**DOC_PARAMS, "sign": "WHATEVER"}
        assert generate_sign(signed, KEY) == generate_sign(DOC_PARAMS, KEY)

    def test_input_not_mutated(self):
        signed = {**DOC_PARAMS, "sign": "WHATEVER"}
        generate_sign(signed, KEY)
        assert signed["sign"] == "WHATEVER"

    def test_unknown_sign_type_rejected(self):
        with pytest.raises(UnsupportedSignTypeError) as exc_info:
            generate_sign(DOC_PARAMS, KEY, "SHA512")
        assert exc_info.value.sign_type == "SHA512"

    def test_sign_params_adds_sign(self):
        signed = sign_params(DOC_PARAMS, KEY)
        assert signed["sign"] == generate_sign(DOC_PARAMS, KEY)
        assert "sign" not in DOC_PARAMS


class TestVerifySign:
    def test_valid(self):
        assert verify_sign(sign_params(DOC_PARAMS, KEY), KEY)

    def test_lowercase_signature_accepted(self):
        record = sign_params(DOC_PARAMS, KEY)
        record["sign"] = record["sign"].lower()
        assert verify_sign(record, KEY)

    def test_tampered_field(self):
        record = sign_params(DOC_PARAMS, KEY)
        record["body"] = "tampered"
        assert not verify_sign(record, KEY)

    def test_wrong_key(self):
        assert not verify_sign(sign_params(DOC_PARAMS, KEY), "other-key")

    def test_missing_sign(self):
        assert not verify_sign(DOC_PARAMS, KEY)


class TestAddressSign:
    def test_sha1_without_key(self):
        params = {
            "appid": "wx17ef1eaef46752cb",
            "url": "http://open.weixin.qq.com/",
            "timestamp": "1384841012",
            "noncestr": "123456",
            "accesstoken": "OezXcEiiBSKSxW0eoylIeBFk1b8VbNtfWALJ5g6aMgZHaqZwK4euEskSn78Qd5pLsfQtuMdgmhajVM5QDm24W8X3tJ18kz5mhmkUcI3RoLm7qGgh1cEnCHejWQo8s5L3VvsFAdawhFxUuLmgh5FRA",
        }
        expected = hashlib.sha1(to_query_string(params).encode()).hexdigest()
        assert generate_address_sign(params) == expected
        assert expected == expected.lower()


class TestSignType:
    @pytest.mark.parametrize("name", ["MD5", "md5", "Md5"])
    def test_parse_md5(self, name):
        assert SignType.parse(name) is SignType.MD5

    def test_parse_enum_passthrough(self):
        assert SignType.parse(SignType.SHA1) is SignType.SHA1

    def test_parse_unknown(self):
        with pytest.raises(UnsupportedSignTypeError):
            SignType.parse("HMAC-SHA256")


class TestVerifySignNonAscii:
    @pytest.mark.parametrize("signature", ["é", "签名", "9A0A8659F005D6984697E2CA0A9CF3B7é"])
    def test_rejected_not_raised(self, signature):
        record = {**DOC_PARAMS, "sign": signature}
        assert verify_sign(record, KEY) is False

    def test_non_ascii_field_value_still_verifies(self):
        record = sign_params({**DOC_PARAMS, "body": "腾讯充值中心-QQ会员充值"}, KEY)
        assert verify_sign(record, KEY)
