"""
Listener Registry

Holds the listeners registered by chat plugins and hands them to the
dispatcher in dispatch order: priority ascending, then registration order.
Listeners are discovered via Python entry_points for pip-installable plugins.
"""

import importlib.metadata
import threading
from collections.abc import Iterator

from parley.errors import DuplicateListenerError, ListenerLoadError, ListenerNotFoundError
from parley.listeners.base import (
    ChatListener,
    EventListener,
    ListenerKind,
    ListenerRegistryEntry,
    MessageListener,
)
from parley.runtime import AppContext

# Entry point group for chat plugin listeners
LISTENER_ENTRY_POINT = "parley.listeners"


class ListenerRegistry:
    """
    Registry of chat listeners.

    Registration normally happens once at plugin-load time, before traffic is
    accepted. A coarse lock guards writes and snapshot creation so that a
    matching pass running next to a hot reload still sees a consistent list.

    Usage:
        registry = ListenerRegistry(app)
        registry.discover_listeners()

        for entry in registry.list_entries(ListenerKind.MESSAGE):
            print(entry.name, entry.priority)
    """

    def __init__(self, app: AppContext) -> None:
        """Initialize an empty registry."""
        self.app = app
        self.log = app.get_logger("registry")
        self._entries: list[ListenerRegistryEntry] = []
        self._keys: set[tuple[str, ListenerKind, str]] = set()
        self._snapshots: dict[ListenerKind, tuple[ListenerRegistryEntry, ...]] = {}
        self._lock = threading.Lock()
        self._discovered = False

    def register(self, entry: ListenerRegistryEntry) -> None:
        """
        Register a listener entry.

        Args:
            entry: The entry to register

        Raises:
            DuplicateListenerError: If (plugin_id, kind, name) is already registered
        """
        with self._lock:
            if entry.key in self._keys:
                raise DuplicateListenerError(entry.plugin_id, entry.kind.value, entry.name)
            self._entries.append(entry)
            self._keys.add(entry.key)
            self._snapshots.pop(entry.kind, None)

        self.log.info(
            "Registered listener",
            listener=entry.name,
            type=entry.kind.value,
            plugin=entry.plugin_id,
            version=entry.plugin_version,
            priority=entry.priority,
        )

    def register_listener(
        self,
        listener: MessageListener | EventListener,
        priority: int | None = None,
    ) -> ListenerRegistryEntry:
        """
        Register a listener instance using its class attributes.

        Args:
            listener: The listener instance
            priority: Override of the listener's own priority

        Returns:
            The registered entry
        """
        entry = ListenerRegistryEntry.from_listener(listener, priority=priority)
        self.register(entry)
        return entry

    def unregister(self, plugin_id: str, kind: ListenerKind, name: str) -> ListenerRegistryEntry:
        """
        Remove one listener; the order of the remaining ones is unchanged.

        Raises:
            ListenerNotFoundError: If the listener is not registered
        """
        key = (plugin_id, kind, name)
        with self._lock:
            if key not in self._keys:
                raise ListenerNotFoundError(
                    f"Listener '{name}' of kind '{kind.value}' not registered by '{plugin_id}'"
                )
            entry = next(e for e in self._entries if e.key == key)
            self._entries.remove(entry)
            self._keys.discard(key)
            self._snapshots.pop(kind, None)

        self.log.info("Unregistered listener", listener=name, type=kind.value, plugin=plugin_id)
        return entry

    def list_entries(self, kind: ListenerKind) -> tuple[ListenerRegistryEntry, ...]:
        """
        Entries of one kind in dispatch order.

        Priority ascending; equal priorities keep registration order. The
        returned tuple is a snapshot and never changes afterwards.
        """
        with self._lock:
            snapshot = self._snapshots.get(kind)
            if snapshot is None:
                # sorted() is stable, so ties stay in insertion order
                snapshot = tuple(
                    sorted(
                        (e for e in self._entries if e.kind == kind),
                        key=lambda e: e.priority,
                    )
                )
                self._snapshots[kind] = snapshot
            return snapshot

    def get_entry(self, plugin_id: str, kind: ListenerKind, name: str) -> ListenerRegistryEntry:
        """
        Get a registered entry.

        Raises:
            ListenerNotFoundError: If the listener is not registered
        """
        for entry in self.list_entries(kind):
            if entry.key == (plugin_id, kind, name):
                return entry
        raise ListenerNotFoundError(f"Listener '{name}' not registered by '{plugin_id}'")

    def has_listener(self, plugin_id: str, kind: ListenerKind, name: str) -> bool:
        """Check if a listener is registered."""
        with self._lock:
            return (plugin_id, kind, name) in self._keys

    def discover_listeners(self) -> int:
        """
        Discover, instantiate and register listeners from entry_points.

        Listeners that fail to load are logged and skipped. Registering the
        same listener twice is a plugin packaging error and is raised.

        Returns:
            Number of listeners registered
        """
        if self._discovered:
            return 0

        discovered_count = 0
        try:
            entry_points = importlib.metadata.entry_points(group=LISTENER_ENTRY_POINT)
        except Exception as e:
            self.log.warning("Failed to load entry_points", error=str(e))
            entry_points = ()

        for ep in entry_points:
            try:
                listener = self._load_listener(ep.name, ep.load())
            except Exception as e:
                self.log.warning(
                    "Failed to load listener from entry_point",
                    listener=ep.name,
                    error=str(e),
                )
                continue
            self.register_listener(listener)
            discovered_count += 1

        self._discovered = True
        self.log.info("Listener discovery complete", count=discovered_count)
        return discovered_count

    def _load_listener(
        self,
        name: str,
        listener_class: type,
    ) -> MessageListener | EventListener:
        """Instantiate a listener class loaded from an entry point."""
        if not (isinstance(listener_class, type) and issubclass(listener_class, ChatListener)):
            raise ListenerLoadError(
                f"Listener {name} ({listener_class!r}) must inherit from MessageListener or EventListener"
            )
        try:
            return listener_class()
        except Exception as e:
            raise ListenerLoadError(f"Failed to instantiate listener {name}: {e}") from e

    def get_all_info(self) -> list[dict[str, object]]:
        """Information about all listeners in dispatch order."""
        return [
            {**entry.instance.get_info(), "name": entry.name, "priority": entry.priority}
            for kind in ListenerKind
            for entry in self.list_entries(kind)
        ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)

    def __iter__(self) -> Iterator[ListenerRegistryEntry]:
        for kind in ListenerKind:
            yield from self.list_entries(kind)
