"""Gateway operation descriptors."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from wechat_payment.core.exceptions import MissingParameterError

ALTERNATIVE_SEPARATOR = "|"

ACCOUNT_DEFAULTS = ("appid", "mch_id", "sub_mch_id", "nonce_str")


@dataclass(frozen=True)
class OperationDescriptor:
    """One gateway API operation.

    ``required`` predicates may be ``a|b`` groups, satisfied by any member.
    ``conditional`` maps ``(field, value)`` to extra predicates applied when
    the request carries that value.
    """

    name: str
    path: str
    secure: bool = False
    required: tuple[str, ...] = ()
    defaults: tuple[str, ...] = ACCOUNT_DEFAULTS
    conditional: Mapping[tuple[str, str], tuple[str, ...]] = field(
        default_factory=lambda: MappingProxyType({})
    )

    def predicates_for(self, params: Mapping[str, Any]) -> list[str]:
        predicates = list(self.required)
        for (key, value), extra in self.conditional.items():
            if str(params.get(key, "")) == value:
                predicates.extend(extra)
        return predicates


UNIFIED_ORDER = OperationDescriptor(
    name="unified_order",
    path="/pay/unifiedorder",
    required=("body", "out_trade_no", "total_fee", "spbill_create_ip", "trade_type"),
    defaults=ACCOUNT_DEFAULTS + ("notify_url",),
    conditional=MappingProxyType(
        {
            ("trade_type", "JSAPI"): ("openid|sub_openid",),
            ("trade_type", "NATIVE"): ("product_id",),
        }
    ),
)

ORDER_QUERY = OperationDescriptor(
    name="order_query",
    path="/pay/orderquery",
    required=("transaction_id|out_trade_no",),
)

CLOSE_ORDER = OperationDescriptor(
    name="close_order",
    path="/pay/closeorder",
    required=("out_trade_no",),
)

REFUND = OperationDescriptor(
    name="refund",
    path="/secapi/pay/refund",
    secure=True,
    required=("transaction_id|out_trade_no", "out_refund_no", "total_fee", "refund_fee"),
    defaults=ACCOUNT_DEFAULTS + ("op_user_id",),
)

REFUND_QUERY = OperationDescriptor(
    name="refund_query",
    path="/pay/refundquery",
    required=("transaction_id|out_trade_no|out_refund_no|refund_id",),
)

DOWNLOAD_BILL = OperationDescriptor(
    name="download_bill",
    path="/pay/downloadbill",
    required=("bill_date", "bill_type"),
)

SHORT_URL = OperationDescriptor(
    name="short_url",
    path="/tools/shorturl",
    required=("long_url",),
)

OPERATIONS: dict[str, OperationDescriptor] = {
    op.name: op
    for op in (
        UNIFIED_ORDER,
        ORDER_QUERY,
        CLOSE_ORDER,
        REFUND,
        REFUND_QUERY,
        DOWNLOAD_BILL,
        SHORT_URL,
    )
}


def _present(params: Mapping[str, Any], key: str) -> bool:
    value = params.get(key)
    return value is not None and str(value) != ""


def extend_with_defaults(
    params: Mapping[str, Any],
    keys: tuple[str, ...],
    defaults: Mapping[str, Any],
) -> dict[str, Any]:
    """Return a new parameter set with account defaults filled in.

    Only keys in ``keys`` are considered, empty defaults are skipped and
    caller values always win.
    """
    extended = {k: defaults[k] for k in keys if _present(defaults, k)}
    extended.update(params)
    return extended


def missing_parameters(params: Mapping[str, Any], predicates: list[str]) -> list[str]:
    """Predicates not satisfied by ``params``."""
    return [
        predicate
        for predicate in predicates
        if not any(_present(params, key) for key in predicate.split(ALTERNATIVE_SEPARATOR))
    ]


def check_required(params: Mapping[str, Any], operation: OperationDescriptor) -> None:
    """Raise MissingParameterError naming every unsatisfied predicate."""
    missing = missing_parameters(params, operation.predicates_for(params))
    if missing:
        raise MissingParameterError(missing, operation=operation.name)
