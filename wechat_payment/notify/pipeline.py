"""Inbound notification pipeline.

One pipeline serves every notify flavor. The flavor only decides whether the
validated envelope is handed to the handler as is, or whether its encrypted
``req_info`` is decrypted and parsed first (refund notifications).

States: AWAITING_BODY -> VALIDATING -> [DECRYPTING] -> DISPATCHED -> REPLIED.
Any failure jumps straight to REPLIED with a FAIL envelope.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any

from wechat_payment.core.exceptions import (
    BadMessageError,
    DecryptionError,
    MethodNotAllowedError,
    WechatPayError,
)
from wechat_payment.core.logging import get_logger
from wechat_payment.payments.crypto import decrypt_req_info, derive_refund_key
from wechat_payment.payments.schemas import Decryption, MerchantCredentials, NotifyKind, Outcome, SignType
from wechat_payment.payments.validator import validate_response
from wechat_payment.payments.xml import build_xml, parse_xml

logger = get_logger(__name__)

BodyReader = Callable[[], Awaitable[bytes]]
NotifyHandler = Callable[[dict[str, str], Any], Awaitable[Any]]

ENCRYPTED_FIELD = "req_info"


class NotifyState(str, Enum):
    AWAITING_BODY = "awaiting_body"
    VALIDATING = "validating"
    DECRYPTING = "decrypting"
    DISPATCHED = "dispatched"
    REPLIED = "replied"


@dataclass(frozen=True)
class NotifyReply:
    """XML reply for the gateway."""

    body: str
    success: bool
    media_type: str = "application/xml"


class NotifyPipeline:
    """Validate, decrypt and dispatch one notification per call.

    Holds only immutable credentials; safe to share between requests.
    """

    def __init__(
        self,
        credentials: MerchantCredentials,
        kind: NotifyKind = NotifyKind.PAYMENT,
        sign_type: SignType | str = SignType.MD5,
    ) -> None:
        self.credentials = credentials
        self.kind = kind
        self.sign_type = SignType.parse(sign_type)
        self._refund_key = derive_refund_key(credentials.partner_key)

    def reply(self, outcome: Outcome) -> NotifyReply:
        """Encode an outcome as the gateway reply."""
        return NotifyReply(body=build_xml(outcome.to_reply()), success=outcome.success)

    def fail(self, error: BaseException) -> NotifyReply:
        logger.warning("Notify rejected: kind=%s, error=%r", self.kind.value, error)
        return self.reply(Outcome.fail(error))

    def _transition(self, state: NotifyState) -> None:
        logger.debug("Notify %s: %s", self.kind.value, state.value)

    def _validate(self, body: bytes) -> dict[str, str]:
        record = parse_xml(body)
        # Refund notifications are not signed; req_info is encrypted instead.
        return validate_response(
            record,
            self.credentials,
            self.sign_type,
            require_sign=self.kind.decryption is not Decryption.REFUND,
        )

    def _decrypt(self, record: dict[str, str]) -> dict[str, str]:
        encrypted = record.get(ENCRYPTED_FIELD)
        if not encrypted:
            raise DecryptionError(message=f"Missing {ENCRYPTED_FIELD}")
        return parse_xml(decrypt_req_info(self._refund_key, encrypted))

    async def process(
        self,
        method: str,
        read_body: BodyReader,
        handler: NotifyHandler,
        context: Any = None,
    ) -> NotifyReply | None:
        """Run one notification through the pipeline.

        Args:
            method: HTTP method of the inbound request
            read_body: Coroutine returning the full body (memoized by caller)
            handler: ``handler(record, context)`` returning an Outcome, an
                exception, any other value (success) or None (not handled)
            context: Passed through to the handler (usually the request)

        Returns:
            Reply to send, or None when the handler let the request fall through
        """
        if method.upper() != "POST":
            return self.fail(MethodNotAllowedError())

        self._transition(NotifyState.AWAITING_BODY)
        try:
            body = await read_body()
        except Exception as e:
            return self.fail(BadMessageError(message=f"Failed to read body: {e}"))

        self._transition(NotifyState.VALIDATING)
        try:
            record = self._validate(body)
            if self.kind.decryption is Decryption.REFUND:
                self._transition(NotifyState.DECRYPTING)
                record = self._decrypt(record)
        except WechatPayError as e:
            return self.fail(e)
        except Exception as e:
            logger.exception("Notify validation failed: kind=%s", self.kind.value)
            return self.fail(e)

        self._transition(NotifyState.DISPATCHED)
        try:
            result = await handler(record, context)
        except Exception as e:
            logger.exception("Notify handler failed: kind=%s", self.kind.value)
            return self.fail(e)

        if result is None:
            return None

        outcome = Outcome.from_value(result)
        self._transition(NotifyState.REPLIED)
        if not outcome.success:
            logger.info("Notify handler replied FAIL: kind=%s, error=%r", self.kind.value, outcome.error)
        return self.reply(outcome)
