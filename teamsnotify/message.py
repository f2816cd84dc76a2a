"""Message Card payloads for Office 365 / Microsoft Teams incoming webhooks.

Only the simple card is supported: a title, a text body and an optional accent color.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Optional

from teamsnotify.errors import MissingText, MissingTitle, SerializationError

MESSAGE_CARD_TYPE = "MessageCard"
MESSAGE_CARD_CONTEXT = "https://schema.org/extensions"


class TeamsMessage:
    """Anything the client can post: validates itself, then serializes to bytes."""

    def validate(self) -> None:  # pragma: no cover
        raise NotImplementedError

    def serialize(self) -> bytes:  # pragma: no cover
        raise NotImplementedError


@dataclass
class MessageCard(TeamsMessage):
    title: str = ""
    text: str = ""
    color: str = ""
    _payload: Optional[bytes] = field(default=None, init=False, repr=False, compare=False)

    def validate(self) -> None:
        if not self.title:
            raise MissingTitle("invalid message card: title required")
        if not self.text:
            raise MissingText("invalid message card: text required")

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "@type": MESSAGE_CARD_TYPE,
            "@context": MESSAGE_CARD_CONTEXT,
        }
        # Empty optional fields stay off the wire.
        if self.title:
            out["title"] = self.title
        if self.text:
            out["text"] = self.text
        if self.color:
            out["color"] = self.color
        return out

    def serialize(self) -> bytes:
        """Encode the card as compact UTF-8 JSON and remember it as the current payload."""
        try:
            encoded = json.dumps(self.to_dict(), ensure_ascii=False, separators=(",", ":")).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise SerializationError(f"error marshalling MessageCard to JSON: {e}") from e
        self._payload = encoded
        return encoded

    def payload(self) -> bytes:
        if self._payload is None:
            raise RuntimeError("MessageCard.serialize() must be called before payload().")
        return self._payload
