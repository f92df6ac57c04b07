"""Custom exceptions for squad operations.

Every error carries the message shown to the caller in the response
envelope; storage details never reach it.
"""


class SquadError(Exception):
    """Base exception for all squad-related errors."""

    message = "Something bad happened, try again later"

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class SquadNotFoundError(SquadError):
    """Raised when no squad exists with the requested ID."""

    message = "That squad doesn't exist"


class NotOwnerError(SquadError):
    """Raised when the caller tries to change a squad they do not own."""

    message = "You don't own that squad"


class DuplicateNameError(SquadError):
    """Raised when the owner already has a live squad with that name."""

    message = "You already have a squad with that name"


class InvalidSquadError(SquadError):
    """Raised when required squad fields are missing or malformed."""

    message = "A squad needs a name, a faction and serialized data"


class PersistenceError(SquadError):
    """Raised when the store fails; the message never includes storage detail."""

    message = "Something bad happened saving that squad, try again later"
