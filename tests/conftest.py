"""Shared test fixtures for slacklog tests."""

import asyncio
import threading
import time
from datetime import datetime, timezone

import pytest

from slacklog.blocks import SlackMessage
from slacklog.transport import WebhookTransport


class RecordingTransport(WebhookTransport):
    """In-memory transport that records every delivered message.

    ``delay`` makes asynchronous deliveries take a while; ``fail_with`` makes
    every delivery raise the given exception.
    """

    def __init__(self, delay: float = 0.0, fail_with: Exception | None = None):
        self.delay = delay
        self.fail_with = fail_with
        self.sent: list[tuple[str, SlackMessage]] = []
        self.completed = 0
        self.closed = False
        self.aclosed = False
        self._lock = threading.Lock()

    def post(self, url: str, message: SlackMessage) -> None:
        if self.delay:
            time.sleep(self.delay)
        self._record(url, message)

    async def apost(self, url: str, message: SlackMessage) -> None:
        if self.delay:
            await asyncio.sleep(self.delay)
        self._record(url, message)

    def close(self) -> None:
        self.closed = True

    async def aclose(self) -> None:
        self.aclosed = True

    def _record(self, url: str, message: SlackMessage) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        with self._lock:
            self.sent.append((url, message))
            self.completed += 1


@pytest.fixture
def transport():
    return RecordingTransport()


@pytest.fixture
def fixed_time():
    return datetime(2024, 3, 1, 12, 30, 45, tzinfo=timezone.utc)


@pytest.fixture
def make_transport():
    """Factory for transports with a delay or a failure configured."""
    return RecordingTransport
