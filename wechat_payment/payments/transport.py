"""HTTP transport for signed XML requests."""

import ssl
from abc import ABC, abstractmethod

import httpx

from wechat_payment.core.exceptions import ConfigurationError
from wechat_payment.core.logging import get_logger

logger = get_logger(__name__)

XML_HEADERS = {"Content-Type": "text/xml; charset=utf-8"}


class BaseTransport(ABC):
    """Abstract transport for gateway calls.

    Allows replacing the HTTP implementation without touching the client.
    """

    @abstractmethod
    async def post(self, url: str, body: str, *, secure: bool = False) -> str:
        """POST ``body`` and return the response text.

        Args:
            url: Full endpoint URL
            body: XML envelope
            secure: Present the merchant client certificate

        Returns:
            Raw response body
        """


class HttpxTransport(BaseTransport):
    """httpx-based transport, plain or mutually authenticated."""

    def __init__(
        self,
        timeout: float = 10.0,
        ssl_context: ssl.SSLContext | None = None,
        http_transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize transport.

        Args:
            timeout: Request timeout in seconds
            ssl_context: Context with the client certificate, for secure calls
            http_transport: Custom httpx transport (tests, proxies)
        """
        self.timeout = timeout
        self.ssl_context = ssl_context
        self.http_transport = http_transport

    async def post(self, url: str, body: str, *, secure: bool = False) -> str:
        """POST over httpx. HTTP errors propagate as ``httpx.HTTPError``."""
        if secure and self.ssl_context is None and self.http_transport is None:
            raise ConfigurationError(
                message="Client certificate is required for this operation",
                details={"url": url},
            )

        verify: ssl.SSLContext | bool = self.ssl_context if secure and self.ssl_context else True

        async with httpx.AsyncClient(
            timeout=self.timeout,
            verify=verify,
            transport=self.http_transport,
        ) as client:
            response = await client.post(
                url,
                content=body.encode("utf-8"),
                headers=XML_HEADERS,
            )
            logger.debug("Gateway response: url=%s, status=%d", url, response.status_code)
            response.raise_for_status()
            return response.text
