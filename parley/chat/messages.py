"""
Outbound messages.

A Message pairs a platform rendering kind with an opaque payload. The
dispatcher never looks inside the payload; only the kind matters when an
event asks to open a dialog.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class DialogDelivery(Enum):
    """How a dialog-open message reaches the user."""

    SEND = "send"  # opened natively through an outbound send
    RETURN = "return"  # must be the body of the inbound HTTP response
    NONE = "none"  # not a dialog-open message


class MessageType(str, Enum):
    """Rendering kinds understood by the supported platforms."""

    PLAIN_TEXT = "plainText"

    MATTERMOST_ATTACHMENT = "mattermost.attachment"
    MATTERMOST_DIALOG_OPEN = "mattermost.dialog.open"

    SLACK_BLOCK = "slack.block"
    SLACK_VIEW_OPEN = "slack.view.open"
    SLACK_VIEW_UPDATE = "slack.view.update"

    MSTEAMS_ADAPTIVE_CARD = "msteams.adaptiveCard"
    MSTEAMS_DIALOG_OPEN = "msteams.dialog.open"

    @property
    def dialog_delivery(self) -> DialogDelivery:
        return _DIALOG_DELIVERY.get(self, DialogDelivery.NONE)


_DIALOG_DELIVERY = {
    MessageType.MATTERMOST_DIALOG_OPEN: DialogDelivery.SEND,
    MessageType.SLACK_VIEW_OPEN: DialogDelivery.SEND,
    MessageType.MSTEAMS_DIALOG_OPEN: DialogDelivery.RETURN,
}


@dataclass
class Message:
    """Outgoing chat message."""

    type: MessageType
    payload: Any
    mentions: list[dict[str, Any]] = field(default_factory=list)

    @classmethod
    def text(cls, text: str) -> "Message":
        """Plain text message."""
        return cls(type=MessageType.PLAIN_TEXT, payload=text)
