"""Slack message blocks produced by the formatter.

The classes mirror the subset of Slack's Block Kit used for log messages:
divider, context and section blocks with markdown text and image elements.
``SlackMessage.to_dict()`` yields the JSON body posted to an incoming
webhook.
"""

from dataclasses import dataclass, field
from typing import Any, Literal

MARKDOWN = "mrkdwn"


@dataclass(frozen=True)
class TextObject:
    text: str
    type: Literal["mrkdwn", "plain_text"] = MARKDOWN

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text}


@dataclass(frozen=True)
class ImageElement:
    image_url: str
    alt_text: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"type": "image", "image_url": self.image_url, "alt_text": self.alt_text}


ContextElement = TextObject | ImageElement


@dataclass(frozen=True)
class DividerBlock:
    type: Literal["divider"] = "divider"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type}


@dataclass(frozen=True)
class ContextBlock:
    elements: tuple[ContextElement, ...]
    type: Literal["context"] = "context"

    @property
    def text(self) -> str:
        """Newline-joined text of the block's text elements."""
        return "\n".join(e.text for e in self.elements if isinstance(e, TextObject))

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "elements": [e.to_dict() for e in self.elements]}


@dataclass(frozen=True)
class SectionBlock:
    text: TextObject
    type: Literal["section"] = "section"

    def to_dict(self) -> dict[str, Any]:
        return {"type": self.type, "text": self.text.to_dict()}


Block = DividerBlock | ContextBlock | SectionBlock


def context_block(*elements: ContextElement) -> ContextBlock:
    return ContextBlock(elements=tuple(elements))


def markdown(text: str) -> TextObject:
    return TextObject(text=text, type=MARKDOWN)


@dataclass
class SlackMessage:
    """An incoming-webhook message made of an ordered list of blocks.

    ``text`` is the optional notification fallback shown by clients that
    cannot render blocks; it is omitted from the payload when empty.
    """

    blocks: list[Block] = field(default_factory=list)
    text: str = ""

    def append(self, *blocks: Block) -> None:
        self.blocks.extend(blocks)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"blocks": [b.to_dict() for b in self.blocks]}
        if self.text:
            payload["text"] = self.text
        return payload
