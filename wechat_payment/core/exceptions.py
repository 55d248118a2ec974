from typing import Any


class WechatPayError(Exception):
    """Base payment gateway exception.

    ``error_code`` is the name reported back to the gateway in ``return_msg``.
    """

    error_code: str = "WechatPayError"
    message: str = "A payment gateway error occurred"

    def __init__(
        self,
        message: str | None = None,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.message = message or self.__class__.message
        self.error_code = error_code or self.__class__.error_code
        self.details = details or {}
        super().__init__(self.message)

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(error_code={self.error_code!r}, message={self.message!r})"


class ConfigurationError(WechatPayError):
    """Client used without the configuration an operation needs."""

    error_code = "ConfigurationError"
    message = "Payment client is not configured for this operation"


class UnsupportedSignTypeError(WechatPayError):
    """Signature algorithm name is not one of the supported sign types."""

    error_code = "UnsupportedSignType"
    message = "Unsupported sign type"

    def __init__(self, sign_type: str) -> None:
        self.sign_type = sign_type
        super().__init__(
            message=f"Unsupported sign type: {sign_type!r}",
            details={"sign_type": sign_type},
        )


class MethodNotAllowedError(WechatPayError):
    """Notify endpoint called with something other than POST."""

    error_code = "NotImplemented"
    message = "Only POST is accepted"


class BadMessageError(WechatPayError):
    """Request body could not be read."""

    error_code = "BadMessage"
    message = "Failed to read request body"


class XmlParseError(WechatPayError):
    """Malformed XML document."""

    error_code = "XMLParseError"
    message = "Failed to parse XML"

    def __init__(self, raw: str | bytes, message: str | None = None) -> None:
        self.raw = raw
        super().__init__(message=message)


class XmlBuildError(WechatPayError):
    """Parameter set cannot be encoded as XML."""

    error_code = "XMLBuildError"
    message = "Failed to build XML"


class ProtocolError(WechatPayError):
    """``return_code`` is FAIL."""

    error_code = "ProtocolError"
    message = "Gateway reported a protocol failure"


class BusinessError(WechatPayError):
    """``result_code`` is FAIL."""

    error_code = "BusinessError"
    message = "Gateway reported a business failure"


class InvalidAppIdError(WechatPayError):
    error_code = "InvalidAppId"
    message = "appid does not match"


class InvalidMchIdError(WechatPayError):
    error_code = "InvalidMchId"
    message = "mch_id does not match"


class InvalidSubMchIdError(WechatPayError):
    error_code = "InvalidSubMchId"
    message = "sub_mch_id does not match"


class InvalidSignatureError(WechatPayError):
    error_code = "InvalidSignature"
    message = "Signature does not match"


class MissingParameterError(WechatPayError):
    """Required request fields are absent."""

    error_code = "MissingParameter"
    message = "Missing required parameters"

    def __init__(self, missing: list[str], operation: str | None = None) -> None:
        self.missing = missing
        self.operation = operation
        super().__init__(
            message=f"Missing required parameters: {', '.join(missing)}",
            details={"missing": missing, "operation": operation},
        )


class DecryptionError(WechatPayError):
    """Encrypted notify field could not be decoded."""

    error_code = "DecryptionError"
    message = "Failed to decrypt notify payload"


def error_name(error: BaseException) -> str:
    """Name reported to the gateway for ``error``."""
    if isinstance(error, WechatPayError):
        return error.error_code
    return type(error).__name__
