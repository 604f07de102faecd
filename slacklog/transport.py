"""Delivery of rendered messages to a Slack incoming webhook."""

from abc import ABC, abstractmethod

import httpx

from .blocks import SlackMessage

DEFAULT_TIMEOUT = 10.0


class WebhookTransport(ABC):
    """Posts one message to one webhook URL.

    Failures are raised as-is; the caller decides what a failed delivery
    means. ``post`` is used for synchronous delivery and ``apost`` from the
    background event loop.
    """

    @abstractmethod
    def post(self, url: str, message: SlackMessage) -> None: ...

    @abstractmethod
    async def apost(self, url: str, message: SlackMessage) -> None: ...

    def close(self) -> None:
        """Release synchronous resources."""

    async def aclose(self) -> None:
        """Release resources bound to the background event loop."""


class HttpxWebhookTransport(WebhookTransport):
    """Default transport built on :mod:`httpx`.

    Parameters
    ----------
    client : httpx.Client | None
        Client used by :meth:`post`. Created lazily when not supplied.
    async_client : httpx.AsyncClient | None
        Client used by :meth:`apost`. Created lazily, inside the event loop
        that first uses it, when not supplied.
    timeout : float
        Timeout in seconds for clients created by the transport.

    Clients passed in are owned by the caller and never closed here.
    """

    def __init__(
        self,
        client: httpx.Client | None = None,
        async_client: httpx.AsyncClient | None = None,
        timeout: float = DEFAULT_TIMEOUT,
    ):
        self._client = client
        self._async_client = async_client
        self._owns_client = client is None
        self._owns_async_client = async_client is None
        self._timeout = timeout

    def post(self, url: str, message: SlackMessage) -> None:
        if self._client is None:
            self._client = httpx.Client(timeout=self._timeout)
        response = self._client.post(url, json=message.to_dict())
        response.raise_for_status()

    async def apost(self, url: str, message: SlackMessage) -> None:
        if self._async_client is None:
            self._async_client = httpx.AsyncClient(timeout=self._timeout)
        response = await self._async_client.post(url, json=message.to_dict())
        response.raise_for_status()

    def close(self) -> None:
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None

    async def aclose(self) -> None:
        if self._owns_async_client and self._async_client is not None:
            await self._async_client.aclose()
            self._async_client = None
