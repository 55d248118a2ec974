"""API module."""

from collections.abc import Mapping

from fastapi import FastAPI

from wechat_payment.api.middleware.notify import NotifyMiddleware
from wechat_payment.core.config import PaymentSettings
from wechat_payment.core.logging import setup_logging
from wechat_payment.notify.pipeline import NotifyHandler, NotifyPipeline
from wechat_payment.payments.schemas import NotifyKind

DEFAULT_NOTIFY_PATHS: dict[NotifyKind, str] = {
    NotifyKind.PAYMENT: "/wechat/notify",
    NotifyKind.REFUND: "/wechat/refund-notify",
    NotifyKind.PAY_FEEDBACK: "/wechat/pay-feedback",
    NotifyKind.PACKAGE_QUERY: "/wechat/package-query",
    NotifyKind.ALARM: "/wechat/alarm",
}


def create_api(
    settings: PaymentSettings,
    handlers: Mapping[NotifyKind, NotifyHandler],
    paths: Mapping[NotifyKind, str] | None = None,
) -> FastAPI:
    """Create FastAPI application answering gateway notifications.

    Args:
        settings: Merchant settings
        handlers: Business handler per notify flavor; flavors without a
            handler are not mounted
        paths: Override of DEFAULT_NOTIFY_PATHS
    """
    setup_logging(settings.log_level)

    app = FastAPI(
        title="WeChat Pay Notify API",
        description="Gateway notification endpoints",
        version="1.0.0",
    )

    credentials = settings.credentials()
    paths = {**DEFAULT_NOTIFY_PATHS, **(paths or {})}

    for kind, handler in handlers.items():
        app.add_middleware(
            NotifyMiddleware,
            path=paths[kind],
            pipeline=NotifyPipeline(credentials, kind),
            handler=handler,
        )

    return app


__all__ = ["DEFAULT_NOTIFY_PATHS", "NotifyMiddleware", "create_api"]
