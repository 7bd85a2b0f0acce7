"""
Chat Adapter Base

Outbound side of a chat platform. Each bot owns one adapter; the Response
Router hands it the messages produced for a context.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

import structlog

from parley.chat.context import CanonicalContext, ChatPlatform
from parley.chat.messages import Message

logger = structlog.get_logger(__name__)


class ChatAdapter(ABC):
    """
    Abstract base class for the outbound channel of a chat platform.

    Platform clients (Mattermost REST, Slack Web API, Bot Framework) live
    outside this package and implement this interface.
    """

    platform: ChatPlatform
    name: str = "base"

    @abstractmethod
    async def send(self, context: CanonicalContext, messages: list[Message]) -> None:
        """
        Deliver messages to the conversation of a context.

        Implementations must deliver in list order and raise on failure.

        Args:
            context: The (cloned) context the messages answer
            messages: Messages to deliver
        """
        pass

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__}(platform={self.platform.value!r})>"


@dataclass
class SentBatch:
    """One call to MemoryAdapter.send."""

    channel_id: str
    messages: list[Message] = field(default_factory=list)


class MemoryAdapter(ChatAdapter):
    """
    Adapter that keeps everything it is asked to send.

    Used for local runs without a chat server and in tests.
    """

    name = "memory"

    def __init__(self, platform: ChatPlatform = ChatPlatform.MATTERMOST) -> None:
        self.platform = platform
        self.sent: list[SentBatch] = []

    async def send(self, context: CanonicalContext, messages: list[Message]) -> None:
        batch = SentBatch(channel_id=context.chatting.channel.id, messages=list(messages))
        self.sent.append(batch)
        logger.debug("Recorded outbound messages", channel=batch.channel_id, count=len(messages))

    @property
    def messages(self) -> list[Message]:
        """All recorded messages in delivery order."""
        return [m for batch in self.sent for m in batch.messages]

    def clear(self) -> None:
        self.sent.clear()
