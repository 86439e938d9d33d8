from typing import Any, Dict


class XPSettings:
    """Typed accessors for the ``xp`` block of the application config.

    Only the explicit helpers below are exposed; unknown keys remain
    reachable through :meth:`get`.
    """

    def __init__(self, data: Dict[str, Any] | None = None) -> None:
        self.data: Dict[str, Any] = data or {}

    def get(self, key: str, default: Any = None) -> Any:
        """Return the value for `key` or `default` if missing."""
        return self.data.get(key, default)

    @property
    def enabled(self) -> bool:
        return bool(self.data.get("enabled", True))

    @property
    def min_gain(self) -> int:
        return int(self.data.get("min_gain", 15))

    @property
    def max_gain(self) -> int:
        # An inverted range collapses onto min_gain
        return max(self.min_gain, int(self.data.get("max_gain", 25)))

    @property
    def message_cooldown_seconds(self) -> float:
        return float(self.data.get("message_cooldown_seconds", 60.0))
