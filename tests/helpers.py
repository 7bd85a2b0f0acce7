"""Listener test doubles shared by the test modules."""

import asyncio

from parley.chat.context import CanonicalContext
from parley.chat.messages import Message
from parley.listeners.base import EventListener, MessageListener

PLUGIN_ID = "@test/plugin"


class RecordingMessageListener(MessageListener):
    """Message listener whose behaviour is set per test."""

    def __init__(
        self,
        name: str,
        calls: list[str] | None = None,
        plugin_id: str = PLUGIN_ID,
        priority: int = 100,
        matches: bool | Exception = True,
        messages: list[Message] | None = None,
        error: Exception | None = None,
        wait_for: asyncio.Event | None = None,
    ) -> None:
        self.name = name
        self.plugin_id = plugin_id
        self.priority = priority
        self.calls = calls if calls is not None else []
        self.matches = matches
        self.messages = messages if messages is not None else [Message.text(f"reply from {name}")]
        self.error = error
        self.wait_for = wait_for
        self.match_calls = 0
        self.seen: list[CanonicalContext] = []
        super().__init__()

    def match_message(self, context: CanonicalContext) -> bool:
        self.match_calls += 1
        if isinstance(self.matches, Exception):
            raise self.matches
        return self.matches

    async def process_message(self, context: CanonicalContext) -> list[Message]:
        self.calls.append(self.name)
        self.seen.append(context)
        if self.wait_for is not None:
            await self.wait_for.wait()
        if self.error is not None:
            raise self.error
        return list(self.messages)


class RecordingEventListener(EventListener):
    """Event listener whose behaviour is set per test."""

    def __init__(
        self,
        name: str,
        calls: list[str] | None = None,
        plugin_id: str = PLUGIN_ID,
        priority: int = 100,
        matches: bool = True,
        messages: list[Message] | None = None,
        error: Exception | None = None,
    ) -> None:
        self.name = name
        self.plugin_id = plugin_id
        self.priority = priority
        self.calls = calls if calls is not None else []
        self.matches = matches
        self.messages = messages if messages is not None else [Message.text(f"reply from {name}")]
        self.error = error
        self.match_calls = 0
        super().__init__()

    def match_event(self, context: CanonicalContext) -> bool:
        self.match_calls += 1
        return self.matches

    async def process_event(self, context: CanonicalContext) -> list[Message]:
        self.calls.append(self.name)
        if self.error is not None:
            raise self.error
        return list(self.messages)

