class AuctionError(Exception):
    """Base class for auction server errors."""

class RosterFullError(AuctionError):
    """Raised when a join is attempted while every seat is taken."""

class UnknownParticipantError(AuctionError):
    """Raised when an operation names a participant that is not seated."""
