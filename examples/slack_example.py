import os
import sys
from datetime import datetime, timedelta

from slacklog import (
    Attr,
    Level,
    Masked,
    SlackMessageFormatter,
    StructuredLogger,
    default_formatter_options,
    err,
    group,
    group_value,
    new_slack_handler,
)

# this example posts one message per level, then a couple of messages with attributes.
# set SLACKLOG_WEBHOOK_URL to an incoming webhook of a test channel before running it.


class User:
    def __init__(self, username: str, password: str, addresses: list[dict[str, str]]):
        self.username = username
        self.password = password
        self.addresses = addresses

    def log_value(self):
        entries = [
            group(f"{i:03d}", **addr) for i, addr in enumerate(self.addresses)
        ]
        return group_value(
            Attr("username", self.username),
            Attr("password", Masked(self.password)),
            group("addresses", *entries),
        )


def main():
    url = os.environ.get("SLACKLOG_WEBHOOK_URL", "")
    if not url:
        print("SLACKLOG_WEBHOOK_URL not set", file=sys.stderr)
        sys.exit(1)

    options = default_formatter_options()
    options.application_name = "slacklog"
    options.application_icon_url = "https://d1nhio0ox7pgb.cloudfront.net/_img/v_collection_png/512x512/shadow/log.png"
    options.include_source = True

    handler = new_slack_handler(
        url,
        level=Level.TRACE,
        enable_async=True,
        record_formatter=SlackMessageFormatter(options),
    )
    logger = StructuredLogger(handler)

    try:
        logger.trace("this is a trace message")
        logger.debug("this is a debug message")
        logger.info("this is an info message")
        logger.notice("this is a notice message")
        logger.warning("this is a warning message")

        nested = logger.with_attrs(root_key="1").with_group("group1").with_attrs(k1="v1")
        nested.error("this is an error message")
        nested.fatal("this is a fatal message")

        logger.info(
            "this is an info message with attributes",
            Attr("pie", 3.14),
            Attr("took", timedelta(seconds=5)),
            Attr("now", datetime.now()),
            group("group", group1Attr="value"),
        )

        try:
            try:
                raise KeyError("some other error")
            except KeyError as e:
                raise RuntimeError("some error") from e
        except RuntimeError as e:
            logger.error(
                "this is an error message with attributes",
                err("error", e),
                Attr("admin", User("admin", "admin123", [
                    {"street": "1234 Acme Way", "city": "New York", "postal_code": "12345"},
                    {"street": "555 Sunset Blvd", "city": "Hollywood", "postal_code": "90028"},
                ])),
            )
    finally:
        logger.shutdown()


if __name__ == "__main__":
    main()
