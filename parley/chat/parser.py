"""
Chat Command Parser

Turns a raw chat message such as
``@bot zos job list status --owner IBMUSER -p 'my prefix'``
into a ParsedCommand.
"""

import shlex

import structlog

from parley.chat.context import CommandAdjective, ParsedCommand

logger = structlog.get_logger(__name__)

# Positional segments in order after the bot mention
_SEGMENTS = ("scope", "resource", "verb", "object")


def _tokenize(text: str) -> list[str]:
    try:
        return shlex.split(text)
    except ValueError as e:
        # Unbalanced quotes
        logger.debug("Falling back to whitespace split", error=str(e))
        return text.split()


def _is_option(token: str) -> bool:
    return token.startswith("-") and len(token) > 1 and token != "--"


def parse_command(text: str) -> ParsedCommand:
    """
    Parse a chat message into command segments.

    Args:
        text: Raw message text, normally starting with the bot mention

    Returns:
        ParsedCommand with positional segments, arguments and options
    """
    tokens = _tokenize(text)
    positionals: list[str] = []
    options: dict[str, str] = {}

    i = 0
    only_positionals = False
    while i < len(tokens):
        token = tokens[i]
        i += 1

        if only_positionals or not _is_option(token):
            if token == "--":
                only_positionals = True
            else:
                positionals.append(token)
            continue

        key = token.lstrip("-")
        if "=" in key:
            key, value = key.split("=", 1)
            options[key] = value
        elif i < len(tokens) and not _is_option(tokens[i]) and tokens[i] != "--":
            options[key] = tokens[i]
            i += 1
        else:
            options[key] = "true"

    segments = dict.fromkeys(_SEGMENTS, "")
    bot_user_name = ""
    if positionals:
        bot_user_name = positionals[0].removeprefix("@")
    for name, value in zip(_SEGMENTS, positionals[1:]):
        segments[name] = value

    command = ParsedCommand(
        raw_message=text,
        adjective=CommandAdjective(
            arguments=tuple(positionals[1 + len(_SEGMENTS):]),
            option=options,
        ),
        bot_user_name=bot_user_name,
        **segments,
    )
    logger.debug("Parsed command", scope=command.scope, verb=command.verb)
    return command
