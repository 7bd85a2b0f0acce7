"""
Response Router

Delivers the messages produced by a listener to the outbound channel of the
platform the context came from.
"""

from typing import Any

from parley.chat.adapter import ChatAdapter
from parley.chat.context import CanonicalContext, ChatPlatform
from parley.chat.messages import DialogDelivery, Message
from parley.errors import RoutingError
from parley.runtime import AppContext


class ResponseRouter:
    """
    Route outbound messages to the right chat adapter.

    Adapters can be registered per platform; otherwise the bot handle carried
    by the context is used. Delivery failures are logged and never raised.
    """

    def __init__(
        self,
        app: AppContext,
        adapters: dict[ChatPlatform, ChatAdapter] | None = None,
    ) -> None:
        self.app = app
        self.log = app.get_logger("router")
        self._adapters: dict[ChatPlatform, ChatAdapter] = dict(adapters or {})

    def register_adapter(self, adapter: ChatAdapter) -> None:
        """Use an adapter for every context of its platform."""
        self._adapters[adapter.platform] = adapter
        self.log.debug("Registered chat adapter", platform=adapter.platform.value)

    def resolve(self, context: CanonicalContext) -> Any:
        """
        Find the outbound channel for a context.

        Raises:
            RoutingError: If neither a registered adapter nor a bot handle exists
        """
        adapter = self._adapters.get(context.chatting.platform)
        if adapter is None:
            adapter = context.chatting.bot
        if adapter is None:
            raise RoutingError(
                f"No outbound channel for platform {context.chatting.platform.value}"
            )
        return adapter

    async def send(self, context: CanonicalContext, messages: list[Message]) -> bool:
        """
        Deliver messages in order.

        Args:
            context: Context the messages answer
            messages: Messages to deliver

        Returns:
            True if the transport accepted the messages
        """
        if not messages:
            self.log.debug("Nothing to send", channel=context.chatting.channel.id)
            return False

        try:
            adapter = self.resolve(context)
            await adapter.send(context, list(messages))
        except Exception as e:
            error = e if isinstance(e, RoutingError) else RoutingError(str(e))
            self.log.error(
                "Failed to deliver messages",
                platform=context.chatting.platform.value,
                channel=context.chatting.channel.id,
                count=len(messages),
                error=str(error),
                error_type=type(e).__name__,
            )
            return False

        self.log.debug(
            "Messages delivered",
            platform=context.chatting.platform.value,
            channel=context.chatting.channel.id,
            types=[m.type.value for m in messages],
        )
        return True

    async def deliver_dialog(
        self,
        context: CanonicalContext,
        messages: list[Message],
    ) -> tuple[bool, Any]:
        """
        Deliver the reply to a dialog-open action.

        The first message decides: kinds opened natively are sent, kinds the
        platform expects in the inbound response are returned instead.

        Returns:
            (returned, payload): returned is True when payload must become the
            response body of the inbound call
        """
        if not messages:
            self.log.warning("Dialog-open listener returned no messages")
            return False, None

        first = messages[0]
        delivery = first.type.dialog_delivery
        if delivery == DialogDelivery.SEND:
            await self.send(context, messages)
            return False, None
        if delivery == DialogDelivery.RETURN:
            self.log.debug("Returning dialog payload to caller", type=first.type.value)
            return True, first.payload

        self.log.error("Wrong message type for dialog open", type=first.type.value)
        return False, None
