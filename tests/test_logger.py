"""Tests for the StructuredLogger front-end."""

from unittest.mock import MagicMock

import pytest

from slacklog.attrs import Attr, flatten_attrs
from slacklog.handler import SlackHandler, new_slack_handler
from slacklog.levels import Level
from slacklog.logger import StructuredLogger

URL = "https://hooks.slack.test/services/T000/B000/XXXX"


def mock_handler(enabled=True):
    handler = MagicMock(spec=SlackHandler)
    handler.enabled.return_value = enabled
    return handler


class TestLevels:
    def test_level_methods_map_correctly(self):
        handler = mock_handler()
        logger = StructuredLogger(handler)

        logger.trace("m")
        logger.debug("m")
        logger.info("m")
        logger.notice("m")
        logger.warning("m")
        logger.error("m")
        logger.fatal("m")
        logger.panic("m")

        levels = [c[0][0].level for c in handler.handle.call_args_list]
        assert levels == [
            Level.TRACE,
            Level.DEBUG,
            Level.INFO,
            Level.NOTICE,
            Level.WARN,
            Level.ERROR,
            Level.FATAL,
            Level.PANIC,
        ]

    def test_disabled_level_skips_handler(self):
        handler = mock_handler(enabled=False)
        StructuredLogger(handler).debug("quiet")
        handler.handle.assert_not_called()


class TestRecords:
    def test_message_and_attrs(self):
        handler = mock_handler()
        StructuredLogger(handler).info("hello", Attr("first", 1), second=2)

        record = handler.handle.call_args[0][0]
        assert record.message == "hello"
        assert [a.key for a in record.attrs] == ["first", "second"]

    def test_call_site_is_caller(self):
        handler = mock_handler()
        StructuredLogger(handler).info("where")

        call_site = handler.handle.call_args[0][0].call_site
        assert call_site.file == __file__
        assert call_site.function == "test_call_site_is_caller"

    def test_log_with_explicit_level(self):
        handler = mock_handler()
        StructuredLogger(handler).log(Level.WARN, "explicit")
        record = handler.handle.call_args[0][0]
        assert record.level == Level.WARN
        assert record.call_site.function == "test_log_with_explicit_level"

    def test_timestamp_is_aware(self):
        handler = mock_handler()
        StructuredLogger(handler).info("now")
        assert handler.handle.call_args[0][0].time.tzinfo is not None

    def test_non_attr_positional_rejected(self):
        with pytest.raises(TypeError):
            StructuredLogger(mock_handler()).info("bad", "not-an-attr")


class TestDerivation:
    def test_with_attrs_and_group(self, transport):
        logger = StructuredLogger(new_slack_handler(URL, transport=transport))
        child = logger.with_attrs(root_key="1").with_group("group1").with_attrs(k1="v1")

        assert [a.key for a in flatten_attrs(child.handler.attrs)] == ["root_key", "group1.k1"]
        assert logger.handler.attrs == ()

    def test_end_to_end(self, transport):
        logger = StructuredLogger(new_slack_handler(URL, transport=transport, enable_async=True))
        logger.with_group("job").with_attrs(id=7).error("failed", attempt=3)
        logger.shutdown()

        (_, message), = transport.sent
        texts = [b.text for b in message.blocks[5:]]
        assert texts == ["*attempt*: `3`", "*job.id*: `7`"]

    def test_handler_errors_propagate(self, make_transport):
        failing = make_transport(fail_with=ConnectionError("down"))
        logger = StructuredLogger(new_slack_handler(URL, transport=failing))
        with pytest.raises(ConnectionError):
            logger.error("boom")
