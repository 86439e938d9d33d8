"""
Descriptors for the slash commands and buttons the event router dispatches to.

A plugin module exports ``COMMANDS`` and/or ``BUTTONS`` lists built from
these descriptors. The registries key them by name / custom id; the command
schema is what gets upserted to Discord at startup.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Awaitable, Callable, Dict, List, Mapping, Sequence, Tuple

import discord

if TYPE_CHECKING:
    from guildcord.core.interaction_context import InteractionContext

InteractionHandler = Callable[["InteractionContext"], Awaitable[None]]

# Discord limits descriptions to 100 characters
MAX_DESCRIPTION_LENGTH = 100

# Application command type for chat-input (slash) commands
CHAT_INPUT_COMMAND_TYPE = 1


@dataclass(frozen=True)
class CommandOption:
    """One option of a slash command."""
    name: str
    description: str
    option_type: discord.SlashCommandOptionType = discord.SlashCommandOptionType.string
    required: bool = True
    choices: Tuple[str, ...] = ()

    def to_payload(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "type": self.option_type.value,
            "name": self.name,
            "description": self.description[:MAX_DESCRIPTION_LENGTH],
            "required": self.required,
        }
        if self.choices:
            payload["choices"] = [{"name": choice, "value": choice} for choice in self.choices]
        return payload


@dataclass(frozen=True)
class CommandDescriptor:
    """A slash command: its unique name, the coroutine handling it and its registration schema."""
    name: str
    handler: InteractionHandler
    schema: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ButtonDescriptor:
    """A persistent button, keyed by the ``custom_id`` it is posted with."""
    custom_id: str
    handler: InteractionHandler


def slash_command(
    name: str,
    description: str,
    handler: InteractionHandler,
    options: Sequence[CommandOption] = (),
) -> CommandDescriptor:
    """Build a :class:`CommandDescriptor` together with its chat-input schema."""
    schema: Dict[str, Any] = {
        "type": CHAT_INPUT_COMMAND_TYPE,
        "name": name,
        "description": description[:MAX_DESCRIPTION_LENGTH],
    }
    if options:
        schema["options"] = [option.to_payload() for option in options]
    return CommandDescriptor(name=name, handler=handler, schema=schema)


def schema_payloads(descriptors: Sequence[CommandDescriptor]) -> List[Dict[str, Any]]:
    """Return plain-dict copies of the schemas, ready for a bulk upsert."""
    return [dict(descriptor.schema) for descriptor in descriptors]
