"""Error taxonomy shared by the estimators and the screening layer."""

from __future__ import annotations


class AdaptiveMIError(Exception):
    """Base class for all errors raised by this package."""


class InvalidInputError(AdaptiveMIError, ValueError):
    """Input rejected before any partitioning starts.

    Raised for length mismatches, non-finite values, non-positive chi-square
    criteria, samples that are too small and unknown method names.
    """


class PartitionCapacityError(AdaptiveMIError, RuntimeError):
    """The pending-rectangle stack grew beyond its configured capacity."""

    def __init__(self, capacity: int, pending: int) -> None:
        self.capacity = int(capacity)
        self.pending = int(pending)
        super().__init__(
            f"Pending rectangle stack exceeded its capacity "
            f"({self.pending} > {self.capacity})."
        )


class EstimationCancelledError(AdaptiveMIError, RuntimeError):
    """The host signalled cancellation between two stack pops."""


__all__ = [
    "AdaptiveMIError",
    "InvalidInputError",
    "PartitionCapacityError",
    "EstimationCancelledError",
]
