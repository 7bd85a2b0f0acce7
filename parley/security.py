"""
Security collaborator contract.

Credential handling lives outside Parley. The dispatcher only asks a
resolver for the principal of the chat user and attaches whatever it gets to
each listener's context.
"""

from typing import Any, Protocol, runtime_checkable

from parley.chat.context import ChatUser


@runtime_checkable
class PrincipalResolver(Protocol):
    """Resolves the principal a chat user acts as."""

    def resolve(self, user: ChatUser) -> Any | None:
        """Return the principal for the user, or None if not logged in."""
        ...


class StaticPrincipalResolver:
    """Resolver backed by a fixed mapping of chat user id to principal."""

    def __init__(self, principals: dict[str, Any] | None = None) -> None:
        self._principals: dict[str, Any] = dict(principals or {})

    def resolve(self, user: ChatUser) -> Any | None:
        return self._principals.get(user.id)

    def login(self, user_id: str, principal: Any) -> None:
        self._principals[user_id] = principal

    def logout(self, user_id: str) -> None:
        self._principals.pop(user_id, None)
