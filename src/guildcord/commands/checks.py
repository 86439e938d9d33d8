"""Permission checks shared by the admin handlers."""

from __future__ import annotations

from guildcord.core.interaction_context import InteractionContext
from guildcord.ui.embeds import warning

NO_PERMISSION_NOTICE = "You do not have permission to use this command."
GUILD_ONLY_NOTICE = "This command can only be used in a server."


def has_permissions(ctx: InteractionContext, **required: bool) -> bool:
    """Return True when the invoking member holds every permission in ``required``."""
    permissions = getattr(ctx.user, "guild_permissions", None)
    if permissions is None:
        return False
    return all(getattr(permissions, name, False) == value for name, value in required.items())


async def ensure_guild(ctx: InteractionContext) -> bool:
    if ctx.guild is not None:
        return True
    await ctx.reply(embed=warning(GUILD_ONLY_NOTICE), ephemeral=True)
    return False


async def ensure_permissions(ctx: InteractionContext, **required: bool) -> bool:
    """Reply with a refusal and return False unless the member holds ``required``."""
    if not await ensure_guild(ctx):
        return False
    if has_permissions(ctx, **required):
        return True
    await ctx.reply(embed=warning(NO_PERMISSION_NOTICE), ephemeral=True)
    return False
