"""Input validation helpers and the package error taxonomy."""

from .data_utils import (
    as_finite_vector,
    check_matching_length,
    check_positive,
    check_sample_size,
)
from .exceptions import (
    AdaptiveMIError,
    EstimationCancelledError,
    InvalidInputError,
    PartitionCapacityError,
)

__all__ = [
    "as_finite_vector",
    "check_matching_length",
    "check_positive",
    "check_sample_size",
    "AdaptiveMIError",
    "EstimationCancelledError",
    "InvalidInputError",
    "PartitionCapacityError",
]
