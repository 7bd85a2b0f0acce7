"""
Platform Views

Render platform-neutral view data into the message kinds of one chat
platform. The view is picked once by platform tag with ``get_view``; every
variant exposes the same two operations:

    get_output(data, executor) -> list[Message]
    get_dialog(dialog, executor, trigger) -> Message
"""

from dataclasses import dataclass, field
from typing import Any, Protocol

from parley.chat.context import ChatPlatform, Executor
from parley.chat.messages import Message, MessageType

# Action ids with this prefix ask the platform layer to open a dialog
DIALOG_OPEN_PREFIX = "DIALOG_OPEN_"


@dataclass
class ViewAction:
    """A button attached to a view."""

    id: str
    label: str
    opens_dialog: bool = False

    @property
    def action_id(self) -> str:
        return f"{DIALOG_OPEN_PREFIX}{self.id}" if self.opens_dialog else self.id


@dataclass
class ViewData:
    """Platform-neutral content of a reply."""

    title: str
    text: str = ""
    fields: list[tuple[str, str]] = field(default_factory=list)
    actions: list[ViewAction] = field(default_factory=list)


@dataclass
class DialogField:
    """A single text input of a dialog."""

    name: str
    label: str
    placeholder: str = ""
    optional: bool = False


@dataclass
class DialogData:
    """Platform-neutral content of a dialog."""

    id: str
    title: str
    elements: list[DialogField] = field(default_factory=list)
    submit_label: str = "Submit"


class ChatView(Protocol):
    """Capability shared by every platform view."""

    platform: ChatPlatform
    plugin_id: str

    def get_output(self, data: ViewData, executor: Executor) -> list[Message]:
        ...

    def get_dialog(self, dialog: DialogData, executor: Executor, trigger: str = "") -> Message:
        ...


class MattermostView:
    """Mattermost message attachments and interactive dialogs."""

    platform = ChatPlatform.MATTERMOST

    def __init__(self, plugin_id: str, messaging_endpoint: str = "") -> None:
        self.plugin_id = plugin_id
        self.messaging_endpoint = messaging_endpoint

    def _action(self, action: ViewAction) -> dict[str, Any]:
        return {
            "id": action.action_id,
            "name": action.label,
            "integration": {
                "url": self.messaging_endpoint,
                "context": {
                    "pluginId": self.plugin_id,
                    "action": {"id": action.action_id},
                },
            },
        }

    def get_output(self, data: ViewData, executor: Executor) -> list[Message]:
        attachment: dict[str, Any] = {
            "title": data.title,
            "text": data.text,
            "fields": [
                {"short": True, "title": label, "value": value}
                for label, value in data.fields
            ],
            "footer": f"Requested by @{executor.name}",
        }
        if data.actions:
            attachment["actions"] = [self._action(a) for a in data.actions]
        return [
            Message(
                type=MessageType.MATTERMOST_ATTACHMENT,
                payload={"channel_id": executor.channel.id, "props": {"attachments": [attachment]}},
            )
        ]

    def get_dialog(self, dialog: DialogData, executor: Executor, trigger: str = "") -> Message:
        return Message(
            type=MessageType.MATTERMOST_DIALOG_OPEN,
            payload={
                "trigger_id": trigger,
                "url": self.messaging_endpoint,
                "dialog": {
                    "callback_id": f"{self.plugin_id}:{dialog.id}",
                    "title": dialog.title,
                    "elements": [
                        {
                            "display_name": e.label,
                            "name": e.name,
                            "type": "text",
                            "placeholder": e.placeholder,
                            "optional": e.optional,
                        }
                        for e in dialog.elements
                    ],
                    "submit_label": dialog.submit_label,
                    "state": executor.id,
                },
            },
        )


class SlackView:
    """Slack Block Kit messages and modal views."""

    platform = ChatPlatform.SLACK

    def __init__(self, plugin_id: str) -> None:
        self.plugin_id = plugin_id

    @staticmethod
    def _plain(text: str) -> dict[str, Any]:
        return {"type": "plain_text", "text": text}

    def get_output(self, data: ViewData, executor: Executor) -> list[Message]:
        blocks: list[dict[str, Any]] = [
            {"type": "header", "text": self._plain(data.title)},
        ]
        if data.text:
            blocks.append({"type": "section", "text": {"type": "mrkdwn", "text": data.text}})
        if data.fields:
            blocks.append(
                {
                    "type": "section",
                    "fields": [
                        {"type": "mrkdwn", "text": f"*{label}*\n{value}"}
                        for label, value in data.fields
                    ],
                }
            )
        if data.actions:
            blocks.append(
                {
                    "type": "actions",
                    "elements": [
                        {
                            "type": "button",
                            "action_id": f"{self.plugin_id}:{a.action_id}",
                            "text": self._plain(a.label),
                        }
                        for a in data.actions
                    ],
                }
            )
        blocks.append(
            {
                "type": "context",
                "elements": [{"type": "mrkdwn", "text": f"Requested by <@{executor.id}>"}],
            }
        )
        return [
            Message(
                type=MessageType.SLACK_BLOCK,
                payload={"channel": executor.channel.id, "text": data.title, "blocks": blocks},
            )
        ]

    def get_dialog(self, dialog: DialogData, executor: Executor, trigger: str = "") -> Message:
        return Message(
            type=MessageType.SLACK_VIEW_OPEN,
            payload={
                "trigger_id": trigger,
                "view": {
                    "type": "modal",
                    "callback_id": f"{self.plugin_id}:{dialog.id}",
                    "title": self._plain(dialog.title),
                    "submit": self._plain(dialog.submit_label),
                    "private_metadata": executor.channel.id,
                    "blocks": [
                        {
                            "type": "input",
                            "block_id": e.name,
                            "optional": e.optional,
                            "label": self._plain(e.label),
                            "element": {
                                "type": "plain_text_input",
                                "action_id": e.name,
                                "placeholder": self._plain(e.placeholder or e.label),
                            },
                        }
                        for e in dialog.elements
                    ],
                },
            },
        )


class MsteamsView:
    """Microsoft Teams adaptive cards and task module dialogs."""

    platform = ChatPlatform.MSTEAMS
    card_version = "1.4"

    def __init__(self, plugin_id: str) -> None:
        self.plugin_id = plugin_id

    def _card(self, body: list[dict[str, Any]], actions: list[dict[str, Any]]) -> dict[str, Any]:
        return {
            "type": "AdaptiveCard",
            "$schema": "http://adaptivecards.io/schemas/adaptive-card.json",
            "version": self.card_version,
            "body": body,
            "actions": actions,
        }

    def get_output(self, data: ViewData, executor: Executor) -> list[Message]:
        body: list[dict[str, Any]] = [
            {"type": "TextBlock", "text": data.title, "weight": "Bolder", "size": "Medium"},
        ]
        if data.text:
            body.append({"type": "TextBlock", "text": data.text, "wrap": True})
        if data.fields:
            body.append(
                {
                    "type": "FactSet",
                    "facts": [{"title": label, "value": value} for label, value in data.fields],
                }
            )
        body.append(
            {"type": "TextBlock", "text": f"Requested by <at>{executor.name}</at>", "isSubtle": True}
        )
        actions = [
            {
                "type": "Action.Submit",
                "title": a.label,
                "data": {"pluginId": self.plugin_id, "action": {"id": a.action_id, "token": ""}},
            }
            for a in data.actions
        ]
        return [
            Message(
                type=MessageType.MSTEAMS_ADAPTIVE_CARD,
                payload=self._card(body, actions),
                mentions=[{"id": executor.id, "name": executor.name}],
            )
        ]

    def get_dialog(self, dialog: DialogData, executor: Executor, trigger: str = "") -> Message:
        body = [
            {
                "type": "Input.Text",
                "id": e.name,
                "label": e.label,
                "placeholder": e.placeholder,
                "isRequired": not e.optional,
            }
            for e in dialog.elements
        ]
        submit = {
            "type": "Action.Submit",
            "title": dialog.submit_label,
            "data": {
                "pluginId": self.plugin_id,
                "action": {"id": dialog.id, "token": trigger},
                "executor": executor.id,
            },
        }
        return Message(
            type=MessageType.MSTEAMS_DIALOG_OPEN,
            payload={
                "task": {
                    "type": "continue",
                    "value": {
                        "title": dialog.title,
                        "card": {
                            "contentType": "application/vnd.microsoft.card.adaptive",
                            "content": self._card(body, [submit]),
                        },
                    },
                }
            },
        )


_VIEWS: dict[ChatPlatform, type] = {
    ChatPlatform.MATTERMOST: MattermostView,
    ChatPlatform.SLACK: SlackView,
    ChatPlatform.MSTEAMS: MsteamsView,
}


def get_view(platform: ChatPlatform, plugin_id: str, **options: Any) -> ChatView:
    """
    Select the view variant for a platform.

    Args:
        platform: Target chat platform
        plugin_id: Plugin whose actions the view will carry
        **options: Variant specific options (e.g. messaging_endpoint for Mattermost)

    Raises:
        ValueError: If the platform has no view
    """
    try:
        view_class = _VIEWS[ChatPlatform(platform)]
    except (KeyError, ValueError) as e:
        raise ValueError(f"No view for chat platform: {platform}") from e
    return view_class(plugin_id, **options)
