"""
Pytest configuration and shared fixtures.
"""

from collections.abc import Callable
from typing import Any

import pytest

from parley.chat.adapter import MemoryAdapter
from parley.chat.context import (
    ActionType,
    CanonicalContext,
    ChatChannel,
    ChatName,
    ChatPlatform,
    ChatUser,
    ChattingContext,
    ChattingType,
    EventAction,
    PayloadKind,
    PlatformEvent,
)
from parley.chat.parser import parse_command
from parley.chat.router import ResponseRouter
from parley.config import DispatchSettings
from parley.listeners.dispatcher import Dispatcher
from parley.listeners.registry import ListenerRegistry
from parley.runtime import AppContext
from tests.helpers import PLUGIN_ID


@pytest.fixture
def settings() -> DispatchSettings:
    """Default dispatch settings for tests."""
    return DispatchSettings(fan_out_limit=-1, listener_timeout=None, bot_user_name=None)


@pytest.fixture
def app(settings: DispatchSettings) -> AppContext:
    """Runtime context without touching global logging configuration."""
    return AppContext.create(settings, setup_logging=False)


@pytest.fixture
def registry(app: AppContext) -> ListenerRegistry:
    """Fresh listener registry for each test."""
    return ListenerRegistry(app)


@pytest.fixture
def adapter() -> MemoryAdapter:
    """Outbound channel that records what it is asked to send."""
    return MemoryAdapter(ChatPlatform.SLACK)


@pytest.fixture
def router(app: AppContext) -> ResponseRouter:
    return ResponseRouter(app)


@pytest.fixture
def dispatcher(app: AppContext, registry: ListenerRegistry, router: ResponseRouter) -> Dispatcher:
    return Dispatcher(app, registry=registry, router=router)


@pytest.fixture
def calls() -> list[str]:
    """Shared log of listener invocations."""
    return []


def _chatting(adapter: Any, platform: ChatPlatform) -> ChattingContext:
    return ChattingContext(
        platform=platform,
        user=ChatUser(id="u1", name="alice", email="alice@example.com"),
        channel=ChatChannel(id="c1", name="general"),
        team=ChatName(id="t1", name="ops"),
        chatting_type=ChattingType.PUBLIC_CHANNEL,
        bot=adapter,
    )


@pytest.fixture
def make_message(adapter: MemoryAdapter) -> Callable[..., CanonicalContext]:
    """Factory for message contexts."""

    def _make(
        text: str = "@bot zos job list",
        platform: ChatPlatform = ChatPlatform.SLACK,
    ) -> CanonicalContext:
        return CanonicalContext(
            payload_kind=PayloadKind.MESSAGE,
            payload_data=parse_command(text),
            chatting=_chatting(adapter, platform),
        )

    return _make


@pytest.fixture
def make_event(adapter: MemoryAdapter) -> Callable[..., CanonicalContext]:
    """Factory for event contexts."""

    def _make(
        plugin_id: str = PLUGIN_ID,
        action: ActionType = ActionType.BUTTON_CLICK,
        platform: ChatPlatform = ChatPlatform.SLACK,
    ) -> CanonicalContext:
        return CanonicalContext(
            payload_kind=PayloadKind.EVENT,
            payload_data=PlatformEvent(
                plugin_id=plugin_id,
                action=EventAction(id="a1", type=action, token="trigger-1"),
            ),
            chatting=_chatting(adapter, platform),
        )

    return _make
