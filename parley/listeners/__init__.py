"""Listener engine - plugin listeners, registry and dispatch."""

from parley.listeners.base import (
    ChatListener,
    CommandListener,
    EventListener,
    ListenerKind,
    ListenerRegistryEntry,
    MessageListener,
)
from parley.listeners.dispatcher import DispatchResult, DispatchState, Dispatcher
from parley.listeners.registry import ListenerRegistry

__all__ = [
    "ChatListener",
    "CommandListener",
    "EventListener",
    "MessageListener",
    "ListenerKind",
    "ListenerRegistryEntry",
    "ListenerRegistry",
    "Dispatcher",
    "DispatchResult",
    "DispatchState",
]
