"""Notify middleware for gateway callbacks."""

from fastapi import Request
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.responses import Response

from wechat_payment.notify.pipeline import NotifyHandler, NotifyPipeline


class NotifyMiddleware(BaseHTTPMiddleware):
    """Answers gateway notifications posted to one path.

    The handler receives the validated (and, for refunds, decrypted) record
    plus the request. If it returns None the request continues down the
    stack unanswered by this layer.
    """

    def __init__(
        self,
        app,
        path: str,
        pipeline: NotifyPipeline,
        handler: NotifyHandler,
    ) -> None:
        """Initialize notify middleware.

        Args:
            app: FastAPI/Starlette application
            path: Notify URL path, e.g. /wechat/notify
            pipeline: Pipeline for this notify flavor
            handler: Business handler for validated records
        """
        super().__init__(app)
        self.path = path.rstrip("/") or "/"
        self.pipeline = pipeline
        self.handler = handler

    async def dispatch(self, request: Request, call_next) -> Response:
        """Process notify requests, pass everything else through."""
        if (request.url.path.rstrip("/") or "/") != self.path:
            return await call_next(request)

        # Request.body() buffers and caches the body
        reply = await self.pipeline.process(
            request.method,
            request.body,
            self.handler,
            context=request,
        )
        if reply is None:
            return await call_next(request)

        return Response(content=reply.body, media_type=reply.media_type)
