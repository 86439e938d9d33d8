from __future__ import annotations
from pathlib import Path
import fcntl
from typing import Any, Dict, List, Tuple
import yaml

from guildcord.configuration.xp_settings import XPSettings
from guildcord.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()

DEFAULT_COMMAND_COOLDOWN_MS = 5000
DEFAULT_DATABASE_PATH = "./data/guildcord.db"


def _optional_int(value: Any) -> int | None:
    if value in (None, ""):
        return None
    try:
        # 0 is the placeholder used in the shipped config
        return int(value) or None
    except (TypeError, ValueError):
        logger.warning("[APP CONFIGURATION] Ignoring non-integer id %r", value)
        return None


class AppConfig:
    """File-lock based accessor around the YAML application configuration.

    The class caches the contents of ``./config/app_config.yml`` and exposes
    typed properties for the values the bot consumes. Reads take a shared
    ``fcntl`` lock so an editor saving the file mid-read cannot hand us a
    truncated document.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.error("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _section(self, *path: str) -> Dict[str, Any]:
        node: Any = self._data
        for key in path:
            node = node.get(key, {}) if isinstance(node, dict) else {}
        return node if isinstance(node, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the cached configuration mapping. Callers must not mutate it."""
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # Bot identity
    # --------------------------
    @property
    def application_id(self) -> int | None:
        return _optional_int(self._section("bot").get("application_id"))

    @property
    def guild_id(self) -> int | None:
        return _optional_int(self._section("bot").get("guild_id"))

    @property
    def owner_id(self) -> int | None:
        """User mentioned in failure notices as the person to contact."""
        return _optional_int(self._section("bot").get("owner_id"))

    # --------------------------
    # Settings
    # --------------------------
    @property
    def command_cooldown_ms(self) -> int:
        value = self._section("settings").get("command_cooldown_ms", DEFAULT_COMMAND_COOLDOWN_MS)
        try:
            return max(0, int(value))
        except (TypeError, ValueError):
            logger.warning("[APP CONFIGURATION] Invalid command_cooldown_ms %r; using default", value)
            return DEFAULT_COMMAND_COOLDOWN_MS

    @property
    def level_channel_id(self) -> int | None:
        return _optional_int(self._section("settings", "channels").get("levels"))

    @property
    def level_roles(self) -> List[Tuple[int, int]]:
        """Return ``(threshold, role_id)`` pairs ordered by threshold.

        Entries whose key or value is not an integer are logged and dropped;
        placeholder role ids (0 or empty) are dropped silently.
        """
        pairs: List[Tuple[int, int]] = []
        for threshold, role_id in self._section("settings", "roles", "levels").items():
            if role_id in (None, "", 0):
                continue
            try:
                pairs.append((int(threshold), int(role_id)))
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Skipping level role %r -> %r", threshold, role_id)
        return sorted(pairs)

    @property
    def verified_role_id(self) -> int | None:
        return _optional_int(self._section("settings", "roles").get("verified"))

    @property
    def xp_settings(self) -> XPSettings:
        return XPSettings(self._section("xp"))

    @property
    def url_filter_enabled(self) -> bool:
        return bool(self._section("url_filter").get("enabled", True))

    @property
    def database_path(self) -> Path:
        raw = self._section("database").get("path") or DEFAULT_DATABASE_PATH
        return Path(str(raw)).resolve()


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
