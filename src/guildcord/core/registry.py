"""
Command and button registries.

Both are filled once at startup from a static tuple of plugin modules and
then frozen. Loading is collect-and-continue: a broken plugin or descriptor
is logged and skipped so one bad module cannot keep the others from
registering.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType, ModuleType
from typing import Dict, Generic, Iterable, List, Mapping, Optional, Tuple, TypeVar

from guildcord.core.errors import DuplicateRegistrationError, RegistryFrozenError
from guildcord.datatypes.command_datatypes import ButtonDescriptor, CommandDescriptor
from guildcord.util.logger import get_logger

logger = get_logger("registry")

D = TypeVar("D", CommandDescriptor, ButtonDescriptor)


class _Registry(Generic[D]):
    """Key -> descriptor mapping that becomes read-only after :meth:`freeze`."""

    kind = "entry"
    export_name = ""

    def __init__(self) -> None:
        self._entries: Dict[str, D] = {}
        self._frozen = False

    @staticmethod
    def key_of(descriptor: D) -> Optional[str]:
        raise NotImplementedError

    @property
    def frozen(self) -> bool:
        return self._frozen

    def register(self, descriptor: D) -> None:
        """
        Add ``descriptor`` under its key.

        Raises:
            RegistryFrozenError: After :meth:`freeze`.
            ValueError: If the key is missing or the handler is not callable.
            DuplicateRegistrationError: If the key is already taken.
        """
        if self._frozen:
            raise RegistryFrozenError(f"{self.kind} registry is frozen")

        key = self.key_of(descriptor)
        if not isinstance(key, str) or not key.strip():
            raise ValueError(f"{self.kind} descriptor has no identifier: {descriptor!r}")
        if not callable(getattr(descriptor, "handler", None)):
            raise ValueError(f"{self.kind} {key!r} has no callable handler")
        if key in self._entries:
            raise DuplicateRegistrationError(f"{self.kind} {key!r} is already registered")

        self._entries[key] = descriptor

    def freeze(self) -> None:
        self._frozen = True

    def get(self, key: Optional[str]) -> Optional[D]:
        if key is None:
            return None
        return self._entries.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    @property
    def entries(self) -> Mapping[str, D]:
        return MappingProxyType(self._entries)


class CommandRegistry(_Registry[CommandDescriptor]):
    """Slash commands keyed by name."""

    kind = "command"
    export_name = "COMMANDS"

    @staticmethod
    def key_of(descriptor: CommandDescriptor) -> Optional[str]:
        return getattr(descriptor, "name", None)

    def schemas(self) -> List[dict]:
        """Registration payloads for every command, in registration order."""
        return [dict(descriptor.schema) for descriptor in self._entries.values()]


class ButtonRegistry(_Registry[ButtonDescriptor]):
    """Buttons keyed by custom id."""

    kind = "button"
    export_name = "BUTTONS"

    @staticmethod
    def key_of(descriptor: ButtonDescriptor) -> Optional[str]:
        return getattr(descriptor, "custom_id", None)


@dataclass
class PluginLoadReport:
    """What :func:`load_plugins` managed to register and what it skipped."""
    loaded: List[str] = field(default_factory=list)
    failures: List[Tuple[str, str]] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures


def load_plugins(registry: _Registry, plugins: Iterable[ModuleType]) -> PluginLoadReport:
    """
    Register every descriptor exported by ``plugins``.

    Each module is expected to export a list named after the registry
    (``COMMANDS`` or ``BUTTONS``). Missing exports and invalid descriptors
    are logged and recorded in the report; loading always runs to the end.
    """
    report = PluginLoadReport()
    plugins = tuple(plugins)
    logger.info("[FILE-LOAD] Loading %s plugins, expecting %d modules", registry.kind, len(plugins))

    for module in plugins:
        module_name = getattr(module, "__name__", repr(module))
        descriptors = getattr(module, registry.export_name, None)
        if descriptors is None:
            logger.error("[FILE-LOAD] Unloaded: %s (no %s export)", module_name, registry.export_name)
            report.failures.append((module_name, f"missing {registry.export_name}"))
            continue
        try:
            descriptors = list(descriptors)
        except TypeError:
            logger.error("[FILE-LOAD] Unloaded: %s (%s is not a list)", module_name, registry.export_name)
            report.failures.append((module_name, f"{registry.export_name} is not iterable"))
            continue

        for descriptor in descriptors:
            try:
                registry.register(descriptor)
            except Exception as exc:
                logger.error("[FILE-LOAD] Unloaded %s from %s: %s", registry.kind, module_name, exc)
                report.failures.append((module_name, str(exc)))
                continue
            key = registry.key_of(descriptor)
            report.loaded.append(key)
            logger.debug("[FILE-LOAD] Loaded %s %r from %s", registry.kind, key, module_name)

    logger.info("[FILE-LOAD] %d %ss are loaded", len(report.loaded), registry.kind)
    return report
