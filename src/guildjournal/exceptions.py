"""
guildjournal/exceptions.py

Error taxonomy for the achievement and council engine.

The reducer raises these; GuildStore catches GuildError, logs it and keeps
the previous state. CollaboratorError never leaves guildjournal.integration.
"""


class GuildError(Exception):
    """Base class for all guildjournal errors."""


class ValidationError(GuildError):
    """An event is missing required fields or violates a precondition."""


class NotFoundError(GuildError):
    """A badge, requirement, request or colony id does not exist."""


class InvalidTransitionError(GuildError):
    """A council request was resolved from a non-pending status."""


class CollaboratorError(GuildError):
    """The generative content service failed or returned garbage."""


class SnapshotVersionError(GuildError):
    """A persisted snapshot was written by an incompatible schema."""
