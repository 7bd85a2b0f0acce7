"""
Canonical Context

Platform-agnostic representation of one inbound chat occurrence, produced by
the normalization layer and consumed by a single dispatch.
"""

import copy
from dataclasses import dataclass, field, fields
from enum import Enum
from typing import Any


class ChatPlatform(str, Enum):
    """Chat backends a bot can be attached to."""

    MATTERMOST = "mattermost"
    SLACK = "slack"
    MSTEAMS = "msteams"


class ChattingType(str, Enum):
    """Kind of conversation an occurrence came from."""

    PERSONAL = "personal"
    PUBLIC_CHANNEL = "publicChannel"
    PRIVATE_CHANNEL = "privateChannel"
    GROUP = "group"
    UNKNOWN = "unknown"


class PayloadKind(str, Enum):
    """What the payload of a context carries."""

    MESSAGE = "message"
    EVENT = "event"


class ActionType(str, Enum):
    """Interactive component actions carried by platform events."""

    BUTTON_CLICK = "button.click"
    DROPDOWN_SELECT = "dropdown.select"
    DIALOG_OPEN = "dialog.open"
    DIALOG_SUBMIT = "dialog.submit"
    UNSUPPORTED = "unsupported"


@dataclass
class ChatName:
    """Id and display name of a team, tenant or similar."""

    id: str = ""
    name: str = ""


@dataclass
class ChatUser:
    """Represents a chat user."""

    id: str
    name: str
    email: str = ""


@dataclass
class ChatChannel:
    """Represents a chat channel."""

    id: str
    name: str = ""


@dataclass(frozen=True)
class CommandAdjective:
    """Options and trailing arguments of a parsed command."""

    arguments: tuple[str, ...] = ()
    option: dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class ParsedCommand:
    """
    A chat message parsed into command segments.

    Example: "@bot zos job list status --owner IBMUSER" gives scope "zos",
    resource "job", verb "list", object "status" and option {"owner": "IBMUSER"}.
    """

    raw_message: str
    scope: str = ""
    resource: str = ""
    verb: str = ""
    object: str = ""
    adjective: CommandAdjective = field(default_factory=CommandAdjective)
    bot_user_name: str = ""


@dataclass(frozen=True)
class EventAction:
    """The interactive action that produced an event."""

    id: str
    type: ActionType
    token: str = ""


@dataclass(frozen=True)
class PlatformEvent:
    """An interactive event addressed to one plugin."""

    plugin_id: str
    action: EventAction
    payload: dict[str, Any] = field(default_factory=dict)


# Fields that clones reference instead of copying
_SHARED_FIELDS = frozenset({"bot", "platform_context"})


@dataclass
class ChattingContext:
    """
    Where an occurrence happened and how to answer it.

    ``bot`` is the owning bot's outbound channel and ``platform_context``
    holds the raw transport objects of the inbound call (turn context,
    request). Both are shared, so deep copies keep the references instead of
    copying them.
    """

    platform: ChatPlatform
    user: ChatUser
    channel: ChatChannel
    team: ChatName = field(default_factory=ChatName)
    tenant: ChatName = field(default_factory=ChatName)
    chatting_type: ChattingType = ChattingType.UNKNOWN
    bot: Any = None
    platform_context: dict[str, Any] = field(default_factory=dict)

    def __deepcopy__(self, memo: dict[int, Any]) -> "ChattingContext":
        clone = self.__class__.__new__(self.__class__)
        memo[id(self)] = clone
        for f in fields(self):
            value = getattr(self, f.name)
            if f.name not in _SHARED_FIELDS:
                value = copy.deepcopy(value, memo)
            setattr(clone, f.name, value)
        return clone


@dataclass
class CanonicalContext:
    """One normalized inbound occurrence."""

    payload_kind: PayloadKind
    payload_data: ParsedCommand | PlatformEvent
    chatting: ChattingContext
    extra: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        expected = ParsedCommand if self.payload_kind == PayloadKind.MESSAGE else PlatformEvent
        if not isinstance(self.payload_data, expected):
            raise TypeError(
                f"{self.payload_kind.value} payload must be {expected.__name__}, "
                f"got {type(self.payload_data).__name__}"
            )

    @property
    def command(self) -> ParsedCommand:
        """Payload of a message context."""
        if not isinstance(self.payload_data, ParsedCommand):
            raise TypeError("Context does not carry a message payload")
        return self.payload_data

    @property
    def event(self) -> PlatformEvent:
        """Payload of an event context."""
        if not isinstance(self.payload_data, PlatformEvent):
            raise TypeError("Context does not carry an event payload")
        return self.payload_data

    @property
    def is_dialog_open(self) -> bool:
        """Check if this is an event asking to open a dialog."""
        return (
            isinstance(self.payload_data, PlatformEvent)
            and self.payload_data.action.type == ActionType.DIALOG_OPEN
        )

    def clone(self) -> "CanonicalContext":
        """Independent copy for one listener; only the bot handle is shared."""
        return copy.deepcopy(self)


@dataclass
class Executor:
    """Identity a listener acts on behalf of, built fresh per dispatch."""

    id: str
    name: str
    team: ChatName
    channel: ChatChannel
    email: str
    chatting_type: ChattingType

    @classmethod
    def from_context(cls, context: CanonicalContext) -> "Executor":
        chatting = context.chatting
        return cls(
            id=chatting.user.id,
            name=chatting.user.name,
            team=copy.deepcopy(chatting.team),
            channel=copy.deepcopy(chatting.channel),
            email=chatting.user.email,
            chatting_type=chatting.chatting_type,
        )
