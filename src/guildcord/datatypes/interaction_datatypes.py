"""Enumerations describing an interaction as it moves through the event router."""

from enum import Enum


class InteractionKind(Enum):
    """What an inbound interaction is, as far as the router cares."""
    COMMAND = "command"
    BUTTON = "button"
    UNKNOWN = "unknown"


class AckState(Enum):
    """
    Acknowledgement state of a single in-flight interaction.

    Discord accepts exactly one initial response (a reply or a deferral).
    Anything after that has to go through the follow-up webhook.
    """
    UNACKNOWLEDGED = "unacknowledged"
    REPLIED = "replied"
    DEFERRED = "deferred"


class DispatchOutcome(Enum):
    """Terminal state of one router cycle."""
    DROPPED = "dropped"
    NO_HANDLER = "no_handler"
    COOLDOWN = "cooldown"
    BLACKLISTED = "blacklisted"
    HANDLED = "handled"
    FAILED = "failed"
