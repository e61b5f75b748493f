class AuctionError(Exception):
    """Base class for errors raised by the auction runner."""


class InvariantError(AuctionError):
    """
    Internal consistency of the assignment was violated.

    Raised when a bidder that already holds an item submits a bid, when the
    assignment is reset in the middle of a phase, or when the verification
    layer finds the two index maps out of sync. Always a defect, never a
    runtime condition to recover from.
    """


class ConvergenceError(AuctionError):
    """
    The phase cap was exhausted before the relative error reached delta.

    The last completed phase's result is kept in ``result``.
    """

    def __init__(self, message, result=None):
        super().__init__(message)
        self.result = result


class DistanceNotComputedError(AuctionError):
    """Cost or distance was requested before run() completed."""


class InvalidIndexError(AuctionError, IndexError):
    """A cost was requested for a pair with a missing bidder or item."""
