"""Core error types for :mod:`slacklog`."""


class SlackLogException(Exception):
    """Base class for all slacklog exceptions."""

    def __init__(self, exception: Exception, source: str = "Unknown", note: str = ""):
        super().__init__(f"<{source}> {note}: {exception}")
        self.exception = exception
        self.source = source
        self.note = note

    def __str__(self):
        return f"<{self.source}> {self.note}: {self.exception}"


class FormattingError(SlackLogException):
    """A rendering hook failed while a record was being formatted."""


class ConfigurationError(ValueError):
    """Invalid construction-time options."""
