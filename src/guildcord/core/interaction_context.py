"""
Per-interaction context handed to command and button handlers.

Handlers talk to Discord only through this object, which lets it track the
acknowledgement state of the interaction explicitly instead of relying on
``interaction.response.is_done()``. The router reads :attr:`ack_state` to
decide whether its failure notice has to be a reply or a follow-up.
"""

from __future__ import annotations

from typing import Any, Dict, Optional

import discord

from guildcord.core.errors import InteractionAlreadyAcknowledged, InteractionNotAcknowledged
from guildcord.datatypes.discord_datatypes import GuildID, UserID
from guildcord.datatypes.interaction_datatypes import AckState, InteractionKind


class InteractionContext:
    """Wraps one ``discord.Interaction`` for the duration of a router cycle.

    Attributes:
        interaction (discord.Interaction): The raw py-cord interaction.
        kind (InteractionKind): Command or button.
        services: Collaborators handlers may need (see ``guildcord.bot.services``).
        ack_state (AckState): Current acknowledgement state; starts UNACKNOWLEDGED.
    """

    def __init__(self, interaction: discord.Interaction, kind: InteractionKind, services: Any = None) -> None:
        self.interaction = interaction
        self.kind = kind
        self.services = services
        self.ack_state = AckState.UNACKNOWLEDGED
        self._data: Dict[str, Any] = dict(interaction.data or {})

    # --------------------------
    # Request details
    # --------------------------
    @property
    def user(self):
        return self.interaction.user

    @property
    def user_id(self) -> UserID:
        return UserID(self.interaction.user.id)

    @property
    def guild(self) -> Optional[discord.Guild]:
        return self.interaction.guild

    @property
    def guild_id(self) -> Optional[GuildID]:
        guild_id = self.interaction.guild_id
        return GuildID(guild_id) if guild_id is not None else None

    @property
    def command_name(self) -> Optional[str]:
        return self._data.get("name")

    @property
    def custom_id(self) -> Optional[str]:
        return self._data.get("custom_id")

    @property
    def handler_key(self) -> Optional[str]:
        """The registry key for this interaction: command name or button custom id."""
        if self.kind is InteractionKind.BUTTON:
            return self.custom_id
        return self.command_name

    @property
    def options(self) -> Dict[str, Any]:
        """Top-level option values keyed by option name."""
        return {
            option["name"]: option.get("value")
            for option in self._data.get("options") or []
            if "name" in option
        }

    def option(self, name: str, default: Any = None) -> Any:
        return self.options.get(name, default)

    @property
    def is_acknowledged(self) -> bool:
        return self.ack_state is not AckState.UNACKNOWLEDGED

    # --------------------------
    # Responses
    # --------------------------
    async def reply(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        view: Optional[discord.ui.View] = None,
        ephemeral: bool = False,
    ) -> None:
        """Send the initial response. Only valid while UNACKNOWLEDGED."""
        if self.is_acknowledged:
            raise InteractionAlreadyAcknowledged(
                f"Interaction for {self.handler_key!r} is already {self.ack_state.value}"
            )
        kwargs: Dict[str, Any] = {"ephemeral": ephemeral}
        if embed is not None:
            kwargs["embed"] = embed
        if view is not None:
            kwargs["view"] = view
        await self.interaction.response.send_message(content, **kwargs)
        self.ack_state = AckState.REPLIED

    async def defer(self, *, ephemeral: bool = False) -> None:
        """Acknowledge now and respond later through :meth:`follow_up`."""
        if self.is_acknowledged:
            raise InteractionAlreadyAcknowledged(
                f"Interaction for {self.handler_key!r} is already {self.ack_state.value}"
            )
        await self.interaction.response.defer(ephemeral=ephemeral)
        self.ack_state = AckState.DEFERRED

    async def follow_up(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        ephemeral: bool = False,
    ) -> None:
        """Send a follow-up message. Only valid once REPLIED or DEFERRED."""
        if not self.is_acknowledged:
            raise InteractionNotAcknowledged(
                f"Interaction for {self.handler_key!r} has not been replied to or deferred"
            )
        kwargs: Dict[str, Any] = {"ephemeral": ephemeral}
        if content is not None:
            kwargs["content"] = content
        if embed is not None:
            kwargs["embed"] = embed
        await self.interaction.followup.send(**kwargs)

    async def respond(
        self,
        content: Optional[str] = None,
        *,
        embed: Optional[discord.Embed] = None,
        ephemeral: bool = False,
    ) -> None:
        """Reply when unacknowledged, follow up otherwise."""
        if self.is_acknowledged:
            await self.follow_up(content, embed=embed, ephemeral=ephemeral)
        else:
            await self.reply(content, embed=embed, ephemeral=ephemeral)
