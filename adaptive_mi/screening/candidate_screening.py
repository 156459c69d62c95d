"""Screen candidate predictors by their mutual information with a target.

One :class:`MutualInformationAdaptive` is built for the dependent variable and
reused for every candidate, one candidate at a time. Optionally each estimate
is backed by a permutation p-value, and the p-values are corrected across
candidates with Benjamini-Hochberg.
"""

from __future__ import annotations

import logging
from typing import Dict, Mapping, Optional, Sequence, Union

import numpy as np
import pandas as pd

from adaptive_mi import config
from adaptive_mi.core_utils.exceptions import InvalidInputError
from adaptive_mi.information_metrics.mutual_information.adaptive import (
    AdaptivePartitionSettings,
    MutualInformationAdaptive,
)
from adaptive_mi.information_metrics.mutual_information.permutation import (
    permutation_test_adaptive_mi,
)

from .multiple_testing import benjamini_hochberg_correction

logger = logging.getLogger(__name__)

Candidates = Union[pd.DataFrame, Mapping[str, Sequence[float] | np.ndarray]]


def _iter_candidates(candidates: Candidates):
    if isinstance(candidates, pd.DataFrame):
        for column in candidates.columns:
            yield str(column), candidates[column].to_numpy()
    elif isinstance(candidates, Mapping):
        for name, values in candidates.items():
            yield str(name), values
    else:
        raise TypeError(
            "Expected a pandas DataFrame or a mapping of name -> values for candidates."
        )


def screen_candidates(
    dependent: Sequence[float] | np.ndarray | pd.Series,
    candidates: Candidates,
    *,
    respect_ties: bool = False,
    chi_crit: float = config.CHI_CRITERION,
    settings: Optional[AdaptivePartitionSettings] = None,
    permutations: int = 0,
    alpha: float = config.SIGNIFICANCE_ALPHA,
    random_state: int | None = None,
    n_jobs: int | None = None,
    skip_invalid: bool = False,
) -> pd.DataFrame:
    """Rank candidate variables by adaptive MI with ``dependent``.

    Parameters
    ----------
    dependent : array-like
        Target variable, shape (n,).
    candidates : DataFrame or mapping
        One column (or entry) of length n per candidate.
    respect_ties : bool
        Never cut between tied values (applied to target and candidates).
    chi_crit : float
        Chi-square rejection threshold.
    settings : AdaptivePartitionSettings, optional
        Further partition constants.
    permutations : int
        Permutations per candidate for p-values; 0 skips significance testing.
    alpha : float
        FDR level for the Benjamini-Hochberg decision.
    random_state : int | None
        Seed; candidate ``i`` uses a child seed spawned from it.
    n_jobs : int | None
        Parallel jobs over permutation batches of a single candidate.
    skip_invalid : bool
        Log and skip invalid candidates instead of raising.

    Returns
    -------
    pd.DataFrame
        One row per screened candidate sorted by ``mutual_information``
        descending (ties broken by name), with columns ``candidate``,
        ``mutual_information``, ``n_leaves``, ``n_splits`` and, when
        ``permutations > 0``, ``p_value``, ``p_value_bh`` and ``significant``.
        ``attrs["skipped"]`` maps skipped candidate names to the reason.
    """
    estimator = MutualInformationAdaptive(
        dependent,
        respect_ties=respect_ties,
        chi_crit=chi_crit,
        settings=settings,
    )

    records: list[dict] = []
    skipped: Dict[str, str] = {}
    seed_sequence = np.random.SeedSequence(random_state)

    for name, values in _iter_candidates(candidates):
        try:
            result = estimator.partition(values, respect_ties)
        except InvalidInputError as exc:
            if not skip_invalid:
                raise
            logger.warning("Skipping candidate %r: %s", name, exc)
            skipped[name] = str(exc)
            continue

        record = {
            "candidate": name,
            "mutual_information": result.mutual_information,
            "n_leaves": result.n_leaves,
            "n_splits": result.n_splits,
        }
        if permutations > 0:
            seed = int(seed_sequence.spawn(1)[0].generate_state(1)[0])
            _, p_value = permutation_test_adaptive_mi(
                estimator,
                values,
                permutations=permutations,
                random_state=seed,
                n_jobs=n_jobs,
                respect_ties=respect_ties,
            )
            record["p_value"] = p_value
        records.append(record)
        logger.info(
            "Candidate %r: MI %.6g nats over %d leaves%s.",
            name,
            result.mutual_information,
            result.n_leaves,
            f", p={record['p_value']:.4g}" if "p_value" in record else "",
        )

    logger.info(
        "Screened %d candidate(s) over %d cases (%d skipped).",
        len(records),
        estimator.n,
        len(skipped),
    )

    columns = ["candidate", "mutual_information", "n_leaves", "n_splits"]
    if permutations > 0:
        columns += ["p_value"]
    table = pd.DataFrame.from_records(records, columns=columns)

    if permutations > 0:
        rejected, adjusted = benjamini_hochberg_correction(
            table["p_value"].to_numpy(dtype=float), alpha=alpha
        )
        table["p_value_bh"] = adjusted
        table["significant"] = rejected

    table = table.sort_values(
        by=["mutual_information", "candidate"],
        ascending=[False, True],
        kind="mergesort",
    ).reset_index(drop=True)
    table.attrs["skipped"] = skipped
    return table


__all__ = ["screen_candidates"]
