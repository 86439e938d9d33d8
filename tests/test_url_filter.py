from types import SimpleNamespace
from unittest.mock import AsyncMock, MagicMock

import discord
import pytest

from guildcord.core.membership_store import MembershipStore
from guildcord.moderation.url_filter import WARNING_LIFETIME_SECONDS, UrlFilter


def _store(*urls: str) -> MembershipStore:
    store = MembershipStore(source=MagicMock())
    for url in urls:
        store.add_whitelisted_url(url)
    return store


def _message(content: str, *, manage_messages: bool = False, bot: bool = False, in_guild: bool = True):
    message = MagicMock()
    message.id = 1
    message.content = content
    message.guild = SimpleNamespace(id=5) if in_guild else None
    message.author = MagicMock()
    message.author.id = 10
    message.author.bot = bot
    message.author.mention = "<@10>"
    message.author.guild_permissions = SimpleNamespace(manage_messages=manage_messages)
    message.delete = AsyncMock()
    message.channel.send = AsyncMock()
    return message


def test_extract_urls_strips_trailing_punctuation() -> None:
    urls = UrlFilter.extract_urls("see https://example.com/a, and (http://foo.org).")

    assert urls == ["https://example.com/a", "http://foo.org"]


def test_whitelist_matches_url_host_or_bare_host() -> None:
    url_filter = UrlFilter(_store("youtube.com", "https://docs.python.org/3/"))

    assert url_filter.is_allowed("https://www.youtube.com/watch?v=1")
    assert url_filter.is_allowed("https://YOUTUBE.com/")
    assert url_filter.is_allowed("https://docs.python.org/3/")
    assert not url_filter.is_allowed("https://docs.python.org/2/")
    assert not url_filter.is_allowed("https://evil.example/")


@pytest.mark.asyncio
async def test_blocked_link_is_deleted_and_author_warned() -> None:
    url_filter = UrlFilter(_store("youtube.com"))
    message = _message("check https://evil.example/x")

    assert await url_filter.filter_url(message) is True

    message.delete.assert_awaited_once()
    message.channel.send.assert_awaited_once_with(
        "<@10>, that link is not allowed here.", delete_after=WARNING_LIFETIME_SECONDS
    )


@pytest.mark.asyncio
async def test_allowed_or_linkless_messages_are_kept() -> None:
    url_filter = UrlFilter(_store("youtube.com"))

    for content in ("hello there", "https://youtube.com/watch?v=2"):
        message = _message(content)
        assert await url_filter.filter_url(message) is False
        message.delete.assert_not_awaited()


@pytest.mark.asyncio
async def test_exempt_authors_and_disabled_filter() -> None:
    url_filter = UrlFilter(_store())

    for message in (
        _message("https://evil.example", manage_messages=True),
        _message("https://evil.example", bot=True),
        _message("https://evil.example", in_guild=False),
    ):
        assert await url_filter.filter_url(message) is False
        message.delete.assert_not_awaited()

    disabled = UrlFilter(_store(), enabled=False)
    message = _message("https://evil.example")
    assert await disabled.filter_url(message) is False


@pytest.mark.asyncio
async def test_failed_delete_is_logged_not_raised() -> None:
    url_filter = UrlFilter(_store())
    message = _message("https://evil.example")
    message.delete.side_effect = discord.Forbidden(MagicMock(status=403), "Missing Permissions")

    assert await url_filter.filter_url(message) is False
    message.channel.send.assert_not_awaited()
