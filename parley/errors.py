"""
Parley error taxonomy.

Registration errors propagate to the plugin loader. Matching, processing and
routing errors are built for logging by the dispatcher and never reach the
transport layer.
"""


class ParleyError(Exception):
    """Base class for all Parley errors."""

    pass


class DuplicateListenerError(ParleyError):
    """Raised when a listener with the same (plugin, kind, name) is registered twice."""

    def __init__(self, plugin_id: str, kind: str, name: str) -> None:
        super().__init__(
            f"Listener '{name}' of kind '{kind}' is already registered by plugin '{plugin_id}'"
        )
        self.plugin_id = plugin_id
        self.kind = kind
        self.name = name


class ListenerNotFoundError(ParleyError):
    """Raised when a requested listener is not registered."""

    pass


class ListenerLoadError(ParleyError):
    """Raised when a listener class cannot be turned into a registry entry."""

    pass


class DispatchError(ParleyError):
    """Base class for errors raised while dispatching one inbound occurrence."""

    def __init__(self, message: str, listener: str | None = None) -> None:
        super().__init__(message)
        self.listener = listener


class MatchError(DispatchError):
    """A listener's matcher raised; the listener is treated as not matching."""

    pass


class ProcessError(DispatchError):
    """A listener's processing failed; the listener contributes no messages."""

    pass


class ListenerTimeoutError(ProcessError):
    """A listener did not finish within the configured timeout."""

    pass


class PrincipalMissingError(ProcessError):
    """A listener needs a resolved principal but none was attached to the context."""

    pass


class RoutingError(DispatchError):
    """Outbound delivery failed or no outbound channel could be resolved."""

    pass
