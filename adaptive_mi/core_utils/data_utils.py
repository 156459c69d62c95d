from __future__ import annotations

from typing import Sequence

import numpy as np

from .exceptions import InvalidInputError


def as_finite_vector(values: Sequence[float] | np.ndarray, name: str) -> np.ndarray:
    """Coerce ``values`` to a contiguous 1-D float64 array of finite numbers.

    Parameters
    ----------
    values
        Sample values, any array-like of reals.
    name
        Label used in error messages.

    Returns
    -------
    np.ndarray
        Shape (n,), dtype float64.

    Raises
    ------
    InvalidInputError
        If the input is not one-dimensional, cannot be read as floats, or
        holds NaN/Inf entries.
    """
    try:
        array = np.ascontiguousarray(values, dtype=np.float64)
    except (TypeError, ValueError) as exc:
        raise InvalidInputError(f"{name} must be numeric: {exc}") from exc

    if array.ndim != 1:
        raise InvalidInputError(
            f"{name} must be one-dimensional; got shape {array.shape}."
        )

    finite = np.isfinite(array)
    if not finite.all():
        bad = np.flatnonzero(~finite)
        preview = ", ".join(str(int(i)) for i in bad[:5])
        raise InvalidInputError(
            f"{name} contains {bad.size} non-finite value(s) at case(s): {preview}."
        )
    return array


def check_sample_size(n_cases: int, minimum: int, name: str = "sample") -> int:
    """Return ``n_cases`` as int, raising if it is below ``minimum``."""
    n = int(n_cases)
    if n < minimum:
        raise InvalidInputError(
            f"{name} needs at least {minimum} cases for a 2x2 split; got {n}."
        )
    return n


def check_matching_length(values: np.ndarray, n_cases: int, name: str) -> None:
    """Raise unless ``values`` has exactly ``n_cases`` entries."""
    if values.shape[0] != n_cases:
        raise InvalidInputError(
            f"{name} has {values.shape[0]} cases but the estimator was built "
            f"for {n_cases}."
        )


def check_positive(value: float, name: str) -> float:
    """Return ``value`` as float, raising unless it is finite and > 0."""
    number = float(value)
    if not np.isfinite(number) or number <= 0.0:
        raise InvalidInputError(f"{name} must be a positive finite number; got {value!r}.")
    return number


__all__ = [
    "as_finite_vector",
    "check_sample_size",
    "check_matching_length",
    "check_positive",
]
