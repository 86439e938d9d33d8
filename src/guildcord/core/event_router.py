"""
Event router: gates inbound interactions and dispatches them to handlers.

Every interaction runs through the same fixed sequence, and any step may end
the cycle early:

1. classify it (slash command, button, anything else is dropped)
2. resolve the handler from the matching registry (unknown keys are dropped)
3. command cooldown gate
4. command blacklist gate
5. await the handler
6. turn a handler exception into a single generic failure notice

Buttons skip steps 3 and 4. Messages bypass all of this and are fanned out
to the message hooks (URL filter, chat XP), each isolated from the others.
"""

from __future__ import annotations

import datetime
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Optional, Sequence

import discord

from guildcord.core.cooldown_tracker import CooldownTracker
from guildcord.core.interaction_context import InteractionContext
from guildcord.core.membership_store import MembershipStore
from guildcord.core.registry import ButtonRegistry, CommandRegistry
from guildcord.datatypes.interaction_datatypes import DispatchOutcome, InteractionKind
from guildcord.ui.embeds import warning
from guildcord.util.logger import get_logger

logger = get_logger("event_router")

MessageHook = Callable[[discord.Message], Awaitable[None]]

BLACKLIST_NOTICE = "You cannot use my commands since you are blacklisted"
COMMAND_FAILURE_NOTICE = "An error occurred while executing this command!"
BUTTON_FAILURE_NOTICE = "An error occurred with this button!"


def cooldown_notice(cooldown_ms: int) -> str:
    return f"You are on a {cooldown_ms / 1000:g} second cooldown, calm down good sir."


@dataclass
class RouterState:
    """
    Everything the router reads or mutates while gating an interaction.

    Attributes:
        commands (CommandRegistry): Frozen slash-command registry.
        buttons (ButtonRegistry): Frozen button registry.
        cooldowns (CooldownTracker): Per-user command cooldowns.
        membership (MembershipStore): Blacklist lookups.
        cooldown_ms (int): Length of a command cooldown window.
        owner_id (int | None): Mentioned in failure notices when set.
    """
    commands: CommandRegistry
    buttons: ButtonRegistry
    cooldowns: CooldownTracker
    membership: MembershipStore
    cooldown_ms: int
    owner_id: Optional[int] = None


class EventRouter:
    """Single entry point for interactions and messages coming from py-cord."""

    def __init__(
        self,
        state: RouterState,
        services: Any = None,
        message_hooks: Sequence[MessageHook] = (),
    ) -> None:
        self.state = state
        self.services = services
        self.message_hooks = tuple(message_hooks)

    # --------------------------
    # Classification
    # --------------------------
    @staticmethod
    def classify(interaction: discord.Interaction) -> InteractionKind:
        if interaction.type == discord.InteractionType.application_command:
            return InteractionKind.COMMAND
        if interaction.type == discord.InteractionType.component:
            component_type = (interaction.data or {}).get("component_type")
            if component_type == discord.ComponentType.button.value:
                return InteractionKind.BUTTON
        return InteractionKind.UNKNOWN

    # --------------------------
    # Interactions
    # --------------------------
    async def dispatch_interaction(self, interaction: discord.Interaction) -> DispatchOutcome:
        """Run one interaction through the gating sequence and report where it ended."""
        kind = self.classify(interaction)
        if kind is InteractionKind.COMMAND:
            return await self._dispatch_command(interaction)
        if kind is InteractionKind.BUTTON:
            return await self._dispatch_button(interaction)
        return DispatchOutcome.DROPPED

    async def _dispatch_command(self, interaction: discord.Interaction) -> DispatchOutcome:
        name = (interaction.data or {}).get("name")
        descriptor = self.state.commands.get(name)
        if descriptor is None:
            # Stale client-side command that is no longer registered
            logger.debug("[ROUTER] Ignoring unregistered command %r", name)
            return DispatchOutcome.NO_HANDLER

        ctx = InteractionContext(interaction, InteractionKind.COMMAND, self.services)

        if not self.state.cooldowns.try_acquire(ctx.user_id, self.state.cooldown_ms):
            await self._send_notice(ctx, content=cooldown_notice(self.state.cooldown_ms))
            return DispatchOutcome.COOLDOWN

        if self.state.membership.is_blacklisted(ctx.user_id):
            logger.info("[ROUTER] Blacklisted user %s tried /%s", ctx.user_id, name)
            await self._send_notice(ctx, embed=warning(BLACKLIST_NOTICE))
            return DispatchOutcome.BLACKLISTED

        return await self._invoke(ctx, descriptor.handler, f"Command: {name}", COMMAND_FAILURE_NOTICE)

    async def _dispatch_button(self, interaction: discord.Interaction) -> DispatchOutcome:
        custom_id = (interaction.data or {}).get("custom_id")
        descriptor = self.state.buttons.get(custom_id)
        if descriptor is None:
            logger.debug("[ROUTER] Ignoring unregistered button %r", custom_id)
            return DispatchOutcome.NO_HANDLER

        ctx = InteractionContext(interaction, InteractionKind.BUTTON, self.services)
        return await self._invoke(ctx, descriptor.handler, f"Button: {custom_id}", BUTTON_FAILURE_NOTICE)

    async def _invoke(self, ctx: InteractionContext, handler, label: str, failure_text: str) -> DispatchOutcome:
        try:
            await handler(ctx)
        except Exception:
            logger.exception(
                "[ROUTER] %s @ %s failed (user %s, %s)",
                label,
                datetime.datetime.now(datetime.timezone.utc).isoformat(),
                ctx.user_id,
                ctx.ack_state.value,
            )
            await self._send_notice(ctx, embed=warning(self._failure_text(failure_text)))
            return DispatchOutcome.FAILED
        return DispatchOutcome.HANDLED

    def _failure_text(self, base: str) -> str:
        if self.state.owner_id:
            return f"{base} Please contact <@{self.state.owner_id}>"
        return base

    async def _send_notice(
        self,
        ctx: InteractionContext,
        *,
        content: Optional[str] = None,
        embed: Optional[discord.Embed] = None,
    ) -> None:
        """Send an ephemeral notice via reply or follow-up, whichever the ack state allows."""
        try:
            await ctx.respond(content, embed=embed, ephemeral=True)
        except Exception as exc:
            logger.error("[ROUTER] Could not deliver notice for %r: %s", ctx.handler_key, exc)

    # --------------------------
    # Messages
    # --------------------------
    async def dispatch_message(self, message: discord.Message) -> None:
        """Hand ``message`` to every hook; a failing hook does not stop the rest."""
        for hook in self.message_hooks:
            try:
                await hook(message)
            except Exception:
                logger.exception(
                    "[ROUTER] Message hook %s failed on message %s",
                    getattr(hook, "__qualname__", hook),
                    getattr(message, "id", "?"),
                )
