"""
URL filter for guild messages.

Any http(s) link in a message must be whitelisted, either as the exact URL
or by its host (with or without a leading ``www.``). Members who can manage
messages are trusted and never filtered.
"""

from __future__ import annotations

import re
from typing import List
from urllib.parse import urlsplit

import discord

from guildcord.core.membership_store import MembershipStore
from guildcord.util.logger import get_logger

logger = get_logger("url_filter")

URL_PATTERN = re.compile(r"https?://[^\s<>\"']+", re.IGNORECASE)
TRAILING_PUNCTUATION = ".,;:!?)]}>"
WARNING_LIFETIME_SECONDS = 10


class UrlFilter:
    """Message hook removing links that are not whitelisted."""

    def __init__(self, membership: MembershipStore, enabled: bool = True) -> None:
        self.membership = membership
        self.enabled = enabled

    @staticmethod
    def extract_urls(content: str) -> List[str]:
        return [match.rstrip(TRAILING_PUNCTUATION) for match in URL_PATTERN.findall(content or "")]

    @staticmethod
    def candidates(url: str) -> List[str]:
        """Forms of ``url`` that may appear on the whitelist, most specific first."""
        forms = [url]
        try:
            host = urlsplit(url).hostname
        except ValueError:
            host = None
        if host:
            forms.append(host)
            if host.startswith("www."):
                forms.append(host[len("www."):])
        return forms

    def is_allowed(self, url: str) -> bool:
        return any(self.membership.is_whitelisted_url(form) for form in self.candidates(url))

    @staticmethod
    def is_exempt(message: discord.Message) -> bool:
        if message.guild is None or message.author.bot:
            return True
        permissions = getattr(message.author, "guild_permissions", None)
        return bool(permissions and permissions.manage_messages)

    async def filter_url(self, message: discord.Message) -> bool:
        """
        Delete ``message`` if it links somewhere not whitelisted.

        Returns:
            bool: True when the message was removed.
        """
        if not self.enabled or self.is_exempt(message):
            return False

        blocked = [url for url in self.extract_urls(message.content) if not self.is_allowed(url)]
        if not blocked:
            return False

        try:
            await message.delete()
        except discord.NotFound:
            return False
        except discord.HTTPException as exc:
            logger.error("[URL-FILTER] Could not delete message %s: %s", message.id, exc)
            return False

        logger.info("[URL-FILTER] Removed message %s from %s linking %s", message.id, message.author.id, blocked[0])
        try:
            await message.channel.send(
                f"{message.author.mention}, that link is not allowed here.",
                delete_after=WARNING_LIFETIME_SECONDS,
            )
        except discord.HTTPException as exc:
            logger.warning("[URL-FILTER] Could not warn %s: %s", message.author.id, exc)
        return True
