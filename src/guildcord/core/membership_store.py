"""
In-memory blacklist and URL whitelist, hydrated from storage at startup.

The sets are a read cache: they are loaded once, and after that only the
admin handlers patch them (alongside their database writes). Lookups are
plain set membership so the router can call them on every interaction.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Protocol, Set, Union

from guildcord.core.errors import MembershipStoreUnavailable
from guildcord.database.db_connection import ConnectionManager, db_connection
from guildcord.datatypes.discord_datatypes import UserID
from guildcord.repositories.membership_repo import MembershipRepo
from guildcord.util.logger import get_logger

logger = get_logger("membership_store")

UserLike = Union[UserID, int, str]


@dataclass(frozen=True)
class MembershipSnapshot:
    """Result of :meth:`MembershipStore.load`."""
    blacklist: frozenset
    whitelist: frozenset


class MembershipSource(Protocol):
    """Where the store reads its two collections from."""

    async def fetch_blacklist(self) -> List[str]: ...

    async def fetch_whitelist(self) -> List[str]: ...


class SQLiteMembershipSource:
    """Reads both collections through the shared aiosqlite connection."""

    def __init__(self, connection_manager: ConnectionManager = db_connection) -> None:
        self.connection_manager = connection_manager

    async def fetch_blacklist(self) -> List[str]:
        async with self.connection_manager.read() as conn:
            return await MembershipRepo.list_blacklist(conn)

    async def fetch_whitelist(self) -> List[str]:
        async with self.connection_manager.read() as conn:
            return await MembershipRepo.list_whitelist(conn)


def normalize_url(url: str) -> str:
    """Whitelist entries are compared stripped and case-folded."""
    return url.strip().lower()


class MembershipStore:
    """Owns the blacklisted user ids and the whitelisted URLs."""

    def __init__(self, source: MembershipSource | None = None) -> None:
        self.source: MembershipSource = source or SQLiteMembershipSource()
        self._blacklist: Set[UserID] = set()
        self._whitelist: Set[str] = set()
        self.loaded = False

    async def load(self) -> MembershipSnapshot:
        """
        Replace both sets with the contents of the backing store.

        Raises:
            MembershipStoreUnavailable: When either collection cannot be read.
                Both sets are left empty so the bot can keep running.
        """
        self._blacklist = set()
        self._whitelist = set()
        self.loaded = False

        try:
            raw_blacklist = await self.source.fetch_blacklist()
            raw_whitelist = await self.source.fetch_whitelist()
        except Exception as exc:
            logger.error("[DB-INIT] Could not load blacklist/whitelist, continuing with empty sets: %s", exc)
            raise MembershipStoreUnavailable(str(exc)) from exc

        blacklist = set(self._coerce_user_ids(raw_blacklist))
        whitelist = {normalize_url(url) for url in raw_whitelist if url and url.strip()}

        self._blacklist = blacklist
        self._whitelist = whitelist
        self.loaded = True
        logger.info("[DB-INIT] Successfully set up local blacklist (%d entries)", len(blacklist))
        logger.info("[DB-INIT] Successfully set up local url whitelist (%d entries)", len(whitelist))
        return self.snapshot()

    @staticmethod
    def _coerce_user_ids(raw: Iterable[str]) -> Iterable[UserID]:
        for value in raw:
            try:
                yield UserID(value)
            except ValueError:
                logger.warning("[DB-INIT] Skipping malformed blacklist entry %r", value)

    def snapshot(self) -> MembershipSnapshot:
        return MembershipSnapshot(blacklist=frozenset(self._blacklist), whitelist=frozenset(self._whitelist))

    # --------------------------
    # Lookups
    # --------------------------
    def is_blacklisted(self, user_id: UserLike) -> bool:
        try:
            return UserID(user_id) in self._blacklist
        except ValueError:
            return False

    def is_whitelisted_url(self, url: str) -> bool:
        return normalize_url(url) in self._whitelist

    # --------------------------
    # Cache maintenance for admin handlers
    # --------------------------
    def add_blacklisted(self, user_id: UserLike) -> None:
        self._blacklist.add(UserID(user_id))

    def remove_blacklisted(self, user_id: UserLike) -> None:
        self._blacklist.discard(UserID(user_id))

    def add_whitelisted_url(self, url: str) -> None:
        self._whitelist.add(normalize_url(url))

    def remove_whitelisted_url(self, url: str) -> None:
        self._whitelist.discard(normalize_url(url))
