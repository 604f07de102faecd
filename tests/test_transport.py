"""Tests for the httpx webhook transport."""

import asyncio
import json

import httpx
import pytest

from slacklog.blocks import DividerBlock, SectionBlock, SlackMessage, markdown
from slacklog.transport import HttpxWebhookTransport

URL = "https://hooks.slack.test/services/T000/B000/XXXX"


def sample_message():
    return SlackMessage(blocks=[DividerBlock(), SectionBlock(text=markdown("hello"))])


class Recorder:
    def __init__(self, status=200):
        self.status = status
        self.requests = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status, text="ok")


class TestSyncPost:
    def test_posts_json_payload(self):
        recorder = Recorder()
        client = httpx.Client(transport=httpx.MockTransport(recorder))
        HttpxWebhookTransport(client=client).post(URL, sample_message())

        (request,) = recorder.requests
        assert request.method == "POST"
        assert str(request.url) == URL
        assert json.loads(request.content) == {
            "blocks": [
                {"type": "divider"},
                {"type": "section", "text": {"type": "mrkdwn", "text": "hello"}},
            ]
        }

    def test_http_error_raised(self):
        client = httpx.Client(transport=httpx.MockTransport(Recorder(status=404)))
        with pytest.raises(httpx.HTTPStatusError):
            HttpxWebhookTransport(client=client).post(URL, sample_message())

    def test_network_error_raised_unchanged(self):
        def refuse(request):
            raise httpx.ConnectError("refused", request=request)

        client = httpx.Client(transport=httpx.MockTransport(refuse))
        with pytest.raises(httpx.ConnectError):
            HttpxWebhookTransport(client=client).post(URL, sample_message())

    def test_injected_client_not_closed(self):
        client = httpx.Client(transport=httpx.MockTransport(Recorder()))
        transport = HttpxWebhookTransport(client=client)
        transport.close()
        assert not client.is_closed


class TestAsyncPost:
    def test_posts_json_payload(self):
        recorder = Recorder()
        client = httpx.AsyncClient(transport=httpx.MockTransport(recorder))
        transport = HttpxWebhookTransport(async_client=client)

        async def run():
            await transport.apost(URL, sample_message())
            await client.aclose()

        asyncio.run(run())
        assert len(recorder.requests) == 1

    def test_http_error_raised(self):
        client = httpx.AsyncClient(transport=httpx.MockTransport(Recorder(status=500)))
        transport = HttpxWebhookTransport(async_client=client)

        async def run():
            try:
                await transport.apost(URL, sample_message())
            finally:
                await client.aclose()

        with pytest.raises(httpx.HTTPStatusError):
            asyncio.run(run())
