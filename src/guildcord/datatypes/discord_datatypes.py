"""
Type-safe wrapper classes for Discord identifiers.

Snowflakes arrive as ints from py-cord objects and as strings from
interaction payloads and the database. Wrapping them keeps set membership
(blacklist, cooldowns) consistent no matter which form a caller holds.
"""

from __future__ import annotations

from typing import Any, Union


class Snowflake:
    """
    Base wrapper storing a Discord snowflake as a canonical decimal string.

    Subclasses only differ by name, so a ``UserID`` never compares equal to
    a ``GuildID`` with the same digits. Raw ``int`` and ``str`` values
    compare equal to the wrapper. The hash follows the ``int`` form, so a set
    of wrappers can be probed with a raw int but not with a raw string.

    Example:
        >>> uid = UserID(123456789012345678)
        >>> uid == "123456789012345678"
        True
        >>> int(uid)
        123456789012345678
    """

    __slots__ = ("_value",)

    def __init__(self, value: Union[str, int, "Snowflake"]) -> None:
        if isinstance(value, Snowflake):
            self._value = value._value
        elif isinstance(value, bool):
            raise ValueError(f"Cannot create {type(self).__name__} from bool")
        elif isinstance(value, int):
            self._value = str(value)
        elif isinstance(value, str):
            self._value = str(int(value.strip()))
        else:
            raise ValueError(f"Cannot create {type(self).__name__} from {type(value).__name__}: {value}")

    @classmethod
    def from_int(cls, value: int):
        return cls(value)

    @classmethod
    def from_object(cls, obj: Any):
        """Build the wrapper from anything exposing an ``id`` attribute."""
        return cls(obj.id)

    def to_int(self) -> int:
        """Convert to an integer for Discord API calls."""
        return int(self._value)

    def __int__(self) -> int:
        return int(self._value)

    def __str__(self) -> str:
        return self._value

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._value!r})"

    def __eq__(self, other: object) -> bool:
        if isinstance(other, Snowflake):
            return type(other) is type(self) and self._value == other._value
        if isinstance(other, str):
            return self._value == other
        if isinstance(other, int) and not isinstance(other, bool):
            return self._value == str(other)
        return NotImplemented

    def __hash__(self) -> int:
        return hash(int(self._value))


class UserID(Snowflake):
    """Discord user snowflake."""

    __slots__ = ()

    @classmethod
    def from_user(cls, user: Any) -> "UserID":
        return cls(user.id)


class GuildID(Snowflake):
    """Discord guild snowflake."""

    __slots__ = ()

    @classmethod
    def from_guild(cls, guild: Any) -> "GuildID":
        return cls(guild.id)


class ChannelID(Snowflake):
    """Discord channel snowflake."""

    __slots__ = ()


class RoleID(Snowflake):
    """Discord role snowflake."""

    __slots__ = ()
