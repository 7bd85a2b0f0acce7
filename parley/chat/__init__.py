"""
Parley Chat Layer

Canonical context types, outbound messages, platform views and the
Response Router.
"""

from parley.chat.adapter import ChatAdapter, MemoryAdapter
from parley.chat.context import (
    ActionType,
    CanonicalContext,
    ChatChannel,
    ChatName,
    ChatPlatform,
    ChatUser,
    ChattingContext,
    ChattingType,
    CommandAdjective,
    EventAction,
    Executor,
    ParsedCommand,
    PayloadKind,
    PlatformEvent,
)
from parley.chat.messages import DialogDelivery, Message, MessageType
from parley.chat.parser import parse_command
from parley.chat.router import ResponseRouter
from parley.chat.views import DialogData, DialogField, ViewAction, ViewData, get_view

__all__ = [
    # Context
    "ActionType",
    "CanonicalContext",
    "ChatChannel",
    "ChatName",
    "ChatPlatform",
    "ChatUser",
    "ChattingContext",
    "ChattingType",
    "CommandAdjective",
    "EventAction",
    "Executor",
    "ParsedCommand",
    "PayloadKind",
    "PlatformEvent",
    "parse_command",
    # Messages
    "DialogDelivery",
    "Message",
    "MessageType",
    # Views
    "DialogData",
    "DialogField",
    "ViewAction",
    "ViewData",
    "get_view",
    # Outbound
    "ChatAdapter",
    "MemoryAdapter",
    "ResponseRouter",
]
