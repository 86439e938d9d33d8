"""Exception hierarchy for Guildcord's core components."""


class GuildcordError(Exception):
    """Base class for every error raised by Guildcord itself."""


class RegistryFrozenError(GuildcordError):
    """Raised when registering into a registry after startup finished."""


class DuplicateRegistrationError(GuildcordError):
    """Raised when a command name or button id is registered twice."""


class MembershipStoreUnavailable(GuildcordError):
    """Raised by ``MembershipStore.load`` when the backing store cannot be read.

    The store is left empty; callers are expected to log and carry on.
    """


class InteractionAlreadyAcknowledged(GuildcordError):
    """Raised when replying or deferring an interaction that already got its initial response."""


class InteractionNotAcknowledged(GuildcordError):
    """Raised when sending a follow-up before the interaction was replied to or deferred."""
