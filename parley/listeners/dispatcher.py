"""
Listener Dispatcher

Matches one canonical context against the registered listeners of its
payload kind, invokes the matched listeners one after another up to the
fan-out limit, and routes what they return.

    RECEIVED -> MATCHING -> NO_MATCH
                         -> MATCHED             (fan-out limit 0)
                         -> MATCHED -> PROCESSING -> RESPONDED
                                                  -> PARTIAL_FAILURE
    (any step) -> FAILED   only when an exception escapes the pipeline

Nothing raised while matching, processing or routing reaches the caller.
"""

import asyncio
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from parley.chat.context import CanonicalContext, PayloadKind
from parley.chat.messages import Message
from parley.chat.router import ResponseRouter
from parley.errors import ListenerTimeoutError, MatchError, ProcessError
from parley.listeners.base import ListenerKind, ListenerRegistryEntry
from parley.listeners.registry import ListenerRegistry
from parley.runtime import AppContext
from parley.security import PrincipalResolver


class DispatchState(Enum):
    """States of one dispatch."""

    RECEIVED = "received"
    MATCHING = "matching"
    NO_MATCH = "no_match"
    MATCHED = "matched"
    PROCESSING = "processing"
    RESPONDED = "responded"
    PARTIAL_FAILURE = "partial_failure"
    FAILED = "failed"


@dataclass
class DispatchResult:
    """Outcome of dispatching one inbound occurrence."""

    state: DispatchState = DispatchState.RECEIVED
    matched: list[str] = field(default_factory=list)
    invoked: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    returned: bool = False
    payload: Any = None


class Dispatcher:
    """
    Dispatch engine for chat listeners.

    Exposes one match/process pair per payload kind for the transport layer
    and ``register_chat_listener`` for the plugin loader.
    """

    def __init__(
        self,
        app: AppContext,
        registry: ListenerRegistry | None = None,
        router: ResponseRouter | None = None,
        resolver: PrincipalResolver | None = None,
    ) -> None:
        self.app = app
        self.log = app.get_logger("dispatcher")
        self.registry = registry if registry is not None else ListenerRegistry(app)
        self.router = router if router is not None else ResponseRouter(app)
        self.resolver = resolver
        # Timed out listener tasks that are still running
        self._detached: set[asyncio.Task[Any]] = set()

    @property
    def settings(self):
        return self.app.settings

    def register_chat_listener(self, entry: ListenerRegistryEntry) -> None:
        """Plugin loader entry point."""
        self.registry.register(entry)

    # Matching

    def match_message(self, context: CanonicalContext) -> bool:
        """Check whether any listener handles an inbound message."""
        return self._match(context, ListenerKind.MESSAGE)

    def match_event(self, context: CanonicalContext) -> bool:
        """Check whether any listener of the event's plugin handles it."""
        return self._match(context, ListenerKind.EVENT)

    def _is_addressed(self, context: CanonicalContext) -> bool:
        bot_user_name = self.settings.bot_user_name
        if not bot_user_name:
            return True
        return f"@{bot_user_name}" in context.command.raw_message

    def _match(self, context: CanonicalContext, kind: ListenerKind) -> bool:
        # Drop results of an earlier pass before cloning
        context.extra.pop("listeners", None)
        context.extra.pop("contexts", None)
        listeners: list[ListenerRegistryEntry] = []
        contexts: list[CanonicalContext] = []

        try:
            if context.payload_kind != PayloadKind(kind.value):
                self.log.error(
                    "Wrong payload type",
                    expected=kind.value,
                    payload_type=context.payload_kind.value,
                )
            elif kind == ListenerKind.MESSAGE and not self._is_addressed(context):
                context.extra["addressed"] = False
                self.log.info("The message is not for the bot", bot=self.settings.bot_user_name)
            else:
                context.extra["addressed"] = True
                entries = self.registry.list_entries(kind)
                for entry in entries:
                    listener_context = self._match_entry(entry, context)
                    if listener_context is not None:
                        listeners.append(entry)
                        contexts.append(listener_context)

                self.log.info(
                    "Listeners matched",
                    kind=kind.value,
                    matched=len(listeners),
                    registered=len(entries),
                    listeners=[e.name for e in listeners],
                )
        except Exception as e:
            self.log.error("Listener matching failed", kind=kind.value, error=str(e), exc_info=True)
            listeners, contexts = [], []
        finally:
            context.extra["listeners"] = listeners
            context.extra["contexts"] = contexts

        return len(listeners) > 0

    def _match_entry(
        self,
        entry: ListenerRegistryEntry,
        context: CanonicalContext,
    ) -> CanonicalContext | None:
        """Run one matcher on a private clone; the clone is returned on a match."""
        if entry.kind == ListenerKind.EVENT and context.event.plugin_id != entry.plugin_id:
            return None

        try:
            listener_context = context.clone()
            listener_context.extra["chat_plugin"] = entry.chat_plugin
            matched = entry.match(listener_context)
        except Exception as e:
            error = MatchError(f"Matcher raised {type(e).__name__}: {e}", listener=entry.name)
            self.log.error(
                "Listener match failed",
                listener=entry.name,
                plugin=entry.plugin_id,
                error=str(error),
                exc_info=True,
            )
            return None
        return listener_context if matched else None

    # Processing

    async def process_message(self, context: CanonicalContext) -> None:
        """Transport entry point for messages; replies are always sent."""
        await self.dispatch(context, ListenerKind.MESSAGE)

    async def process_event(self, context: CanonicalContext) -> Any | None:
        """
        Transport entry point for events.

        Returns:
            The dialog payload the platform expects as the response body of
            the inbound call, or None
        """
        result = await self.dispatch(context, ListenerKind.EVENT)
        return result.payload if result.returned else None

    async def dispatch(
        self,
        context: CanonicalContext,
        kind: ListenerKind | None = None,
    ) -> DispatchResult:
        """
        Run the whole pipeline for one occurrence.

        Reuses the listeners of a prior match_* call on the same context.

        Args:
            context: The inbound occurrence
            kind: Listener kind the caller expects; defaults to the context's
                payload kind. A mismatch ends in NO_MATCH.
        """
        result = DispatchResult()
        if kind is None:
            kind = ListenerKind(context.payload_kind.value)
        log = self.log.bind(
            kind=kind.value,
            platform=context.chatting.platform.value,
            channel=context.chatting.channel.id,
            user=context.chatting.user.id,
        )

        try:
            self._transition(result, DispatchState.MATCHING)
            if context.payload_kind != PayloadKind(kind.value):
                log.error(
                    "Wrong payload type",
                    expected=kind.value,
                    payload_type=context.payload_kind.value,
                )
                self._transition(result, DispatchState.NO_MATCH)
                return result

            if "listeners" not in context.extra:
                self._match(context, kind)
            listeners: list[ListenerRegistryEntry] = context.extra["listeners"]
            contexts: list[CanonicalContext] = context.extra["contexts"]
            result.matched = [e.name for e in listeners]

            if not listeners:
                self._transition(result, DispatchState.NO_MATCH)
                await self._reply_unknown(context, kind)
                return result

            self._transition(result, DispatchState.MATCHED)
            limit = self.settings.effective_fan_out(len(listeners))
            log.info(
                "Listeners selected",
                invoking=limit,
                matched=len(listeners),
                fan_out_limit=self.settings.fan_out_limit,
            )
            if limit == 0:
                # Matching still ran; processing is switched off
                return result

            principal = self._resolve_principal(context) if kind == ListenerKind.MESSAGE else None

            self._transition(result, DispatchState.PROCESSING)
            for entry, listener_context in zip(listeners[:limit], contexts[:limit]):
                if kind == ListenerKind.MESSAGE and self.resolver is not None:
                    listener_context.extra["principal"] = principal

                result.invoked.append(entry.name)
                messages = await self._invoke(entry, listener_context)
                if messages is None:
                    result.failed.append(entry.name)
                    continue

                log.debug(
                    "Listener produced messages",
                    listener=entry.name,
                    types=[m.type.value for m in messages],
                )

                if context.is_dialog_open:
                    returned, payload = await self.router.deliver_dialog(listener_context, messages)
                    if returned:
                        # Earlier sends stand; only the rest of the fan-out is skipped
                        result.returned = True
                        result.payload = payload
                        break
                else:
                    await self.router.send(listener_context, messages)

            self._transition(
                result,
                DispatchState.PARTIAL_FAILURE if result.failed else DispatchState.RESPONDED,
            )
        except Exception as e:
            self._transition(result, DispatchState.FAILED)
            log.error("Dispatch failed", error=str(e), exc_info=True)

        return result

    def _transition(self, result: DispatchResult, state: DispatchState) -> None:
        self.log.debug("Dispatch state", previous=result.state.value, state=state.value)
        result.state = state

    def _resolve_principal(self, context: CanonicalContext) -> Any | None:
        if self.resolver is None:
            return None
        try:
            return self.resolver.resolve(context.chatting.user)
        except Exception as e:
            # Listeners that need a principal fail on their own
            self.log.error(
                "Principal resolution failed",
                user=context.chatting.user.id,
                error=str(e),
            )
            return None

    async def _reply_unknown(self, context: CanonicalContext, kind: ListenerKind) -> None:
        reply = self.settings.unknown_message_reply
        if kind == ListenerKind.MESSAGE and reply and context.extra.get("addressed"):
            await self.router.send(context, [Message.text(reply)])

    async def _invoke(
        self,
        entry: ListenerRegistryEntry,
        context: CanonicalContext,
    ) -> list[Message] | None:
        """
        Run one listener with fault isolation.

        Returns:
            The listener's messages, or None if it failed or timed out
        """
        timeout = self.settings.listener_timeout
        try:
            if timeout is None:
                output = await entry.process(context)
            else:
                task = asyncio.ensure_future(entry.process(context))
                try:
                    output = await asyncio.wait_for(asyncio.shield(task), timeout)
                except asyncio.TimeoutError:
                    self._detach(entry, task)
                    raise ListenerTimeoutError(
                        f"Listener did not finish within {timeout}s",
                        listener=entry.name,
                    ) from None
            return list(output or [])
        except ProcessError as e:
            self.log.error(
                "Listener process failed",
                listener=entry.name,
                plugin=entry.plugin_id,
                error=str(e),
                error_type=type(e).__name__,
            )
        except Exception as e:
            error = ProcessError(f"{type(e).__name__}: {e}", listener=entry.name)
            self.log.error(
                "Listener process failed",
                listener=entry.name,
                plugin=entry.plugin_id,
                error=str(error),
                error_type=type(e).__name__,
                exc_info=True,
            )
        return None

    def _detach(self, entry: ListenerRegistryEntry, task: asyncio.Task[Any]) -> None:
        """Stop waiting for a timed out listener and log how it ends."""
        self._detached.add(task)

        def _done(finished: asyncio.Task[Any]) -> None:
            self._detached.discard(finished)
            if not finished.cancelled() and finished.exception() is not None:
                self.log.warning(
                    "Detached listener failed",
                    listener=entry.name,
                    error=str(finished.exception()),
                )

        task.add_done_callback(_done)

    @property
    def detached_count(self) -> int:
        """Timed out listeners that are still running."""
        return len(self._detached)
