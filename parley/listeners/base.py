"""
Chat Listener Base Classes

Defines the contract plugin listeners implement. A listener decides whether
it applies to a context (match) and produces the reply messages (process).

Example implementation:
    class JobListener(CommandListener):
        name = "zos-job"
        plugin_id = "@acme/zos"
        plugin_version = "1.2.0"
        priority = 10
        scope = "zos"

        async def process_message(self, context):
            executor = self.get_executor(context)
            view = get_view(context.chatting.platform, self.plugin_id)
            return view.get_output(ViewData(title="Jobs"), executor)
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Any

from parley.chat.context import CanonicalContext, Executor, ParsedCommand, PlatformEvent
from parley.chat.messages import Message
from parley.errors import PrincipalMissingError


class ListenerKind(str, Enum):
    """Payload kind a listener is bound to."""

    MESSAGE = "message"
    EVENT = "event"


class ChatListener(ABC):
    """Shared behaviour of message and event listeners."""

    # Class attributes that subclasses must define
    name: str
    plugin_id: str
    plugin_version: str = "0.0.0"
    priority: int = 100
    description: str = ""

    kind: ListenerKind

    def __init__(self) -> None:
        """Initialize the listener."""
        self._validate_class_attributes()

    def _validate_class_attributes(self) -> None:
        """Validate that required class attributes are defined."""
        for attr in ("name", "plugin_id"):
            if not getattr(self, attr, None):
                raise ValueError(f"Listener {self.__class__.__name__} must define '{attr}'")

    def get_executor(self, context: CanonicalContext) -> Executor:
        """Identity the listener acts for."""
        return Executor.from_context(context)

    def get_principal(self, context: CanonicalContext) -> Any:
        """
        Principal attached by the security collaborator.

        Raises:
            PrincipalMissingError: If no principal was resolved for the user
        """
        principal = context.extra.get("principal")
        if principal is None:
            raise PrincipalMissingError(
                f"No principal for user {context.chatting.user.name}",
                listener=self.name,
            )
        return principal

    def get_info(self) -> dict[str, Any]:
        """Get listener information as a dictionary."""
        return {
            "name": self.name,
            "kind": self.kind.value,
            "plugin_id": self.plugin_id,
            "plugin_version": self.plugin_version,
            "priority": self.priority,
            "description": self.description,
        }

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(name={self.name!r}, plugin={self.plugin_id!r})>"


class MessageListener(ChatListener):
    """Listener for chat messages addressed to the bot."""

    kind = ListenerKind.MESSAGE

    @abstractmethod
    def match_message(self, context: CanonicalContext) -> bool:
        """
        Decide whether this listener handles the message.

        The context is a private clone; anything stored in ``context.extra``
        is visible to ``process_message`` of the same listener only.
        """
        ...

    @abstractmethod
    async def process_message(self, context: CanonicalContext) -> list[Message]:
        """Produce the reply messages for a matched message."""
        ...

    def get_command(self, context: CanonicalContext) -> ParsedCommand:
        return context.command


class CommandListener(MessageListener):
    """Message listener that matches on the command scope."""

    scope: str

    def match_message(self, context: CanonicalContext) -> bool:
        command = self.get_command(context)
        if command.scope != self.scope:
            return False
        context.extra["command"] = command
        return True


class EventListener(ChatListener):
    """Listener for interactive events of its own plugin."""

    kind = ListenerKind.EVENT

    @abstractmethod
    def match_event(self, context: CanonicalContext) -> bool:
        """Decide whether this listener handles the event."""
        ...

    @abstractmethod
    async def process_event(self, context: CanonicalContext) -> list[Message]:
        """Produce the reply messages for a matched event."""
        ...

    def get_event(self, context: CanonicalContext) -> PlatformEvent:
        return context.event


@dataclass(frozen=True)
class ListenerRegistryEntry:
    """One registered listener of a plugin."""

    name: str
    kind: ListenerKind
    plugin_id: str
    plugin_version: str
    priority: int
    instance: MessageListener | EventListener

    def __post_init__(self) -> None:
        if self.instance.kind != self.kind:
            raise ValueError(
                f"Listener {self.name} is a {self.instance.kind.value} listener, "
                f"cannot register as {self.kind.value}"
            )

    @classmethod
    def from_listener(
        cls,
        listener: MessageListener | EventListener,
        priority: int | None = None,
    ) -> "ListenerRegistryEntry":
        """Build an entry from a listener's class attributes."""
        return cls(
            name=listener.name,
            kind=listener.kind,
            plugin_id=listener.plugin_id,
            plugin_version=str(listener.plugin_version),
            priority=listener.priority if priority is None else priority,
            instance=listener,
        )

    @property
    def key(self) -> tuple[str, ListenerKind, str]:
        return (self.plugin_id, self.kind, self.name)

    @property
    def chat_plugin(self) -> dict[str, Any]:
        """Plugin description copied into each listener's context."""
        return {
            "package": self.plugin_id,
            "version": self.plugin_version,
            "priority": self.priority,
        }

    def match(self, context: CanonicalContext) -> bool:
        if self.kind == ListenerKind.MESSAGE:
            return bool(self.instance.match_message(context))  # type: ignore[union-attr]
        return bool(self.instance.match_event(context))  # type: ignore[union-attr]

    async def process(self, context: CanonicalContext) -> list[Message]:
        if self.kind == ListenerKind.MESSAGE:
            return await self.instance.process_message(context)  # type: ignore[union-attr]
        return await self.instance.process_event(context)  # type: ignore[union-attr]
