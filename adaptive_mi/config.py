"""
Central configuration for the adaptive mutual-information library.
"""

# --- Adaptive Partitioning Parameters ---

# Chi-square rejection threshold for the 2x2 split test (1 degree of freedom,
# Yates-corrected). 6.0 corresponds to roughly a 1-2% significance level.
CHI_CRITERION: float = 6.0

# The finer 4x4 check must exceed this multiple of the 2x2 criterion.
REFINED_CHI_MULTIPLIER: float = 3.0

# A rectangle not split by the 2x2 test is re-checked on a 4x4 grid only when
# both of its rank extents (stop - start) exceed this value.
REFINE_MIN_EXTENT: int = 30

# Sub-rectangles with fewer cases than this are folded into the sum directly
# instead of being tested again.
MIN_CASES_TO_RECURSE: int = 3

# Smallest sample an estimator accepts (a 2x2 split needs a handful of points).
MIN_CASES: int = 4

# Relative tolerance below which adjacent sorted values count as tied:
# v[i+1] - v[i] < TIE_TOLERANCE * (1 + |v[i]| + |v[i+1]|)
TIE_TOLERANCE: float = 1e-12

# Floor applied to probability products and ratios before taking a logarithm.
LOG_FLOOR: float = 1e-30

# Pending-rectangle capacity is STACK_CAPACITY_FACTOR * n + 1 unless overridden.
# Every split shrinks both rank extents, so depth stays below n and at most
# three siblings per level wait on the stack.
STACK_CAPACITY_FACTOR: int = 3

# --- Parzen Window Parameters ---

# Bandwidth rule passed to scipy.stats.gaussian_kde (None -> Scott's rule).
PARZEN_BANDWIDTH: float | str | None = None

# Integration tolerances, looser for large samples.
PARZEN_LARGE_N: int = 200
PARZEN_ACCURACY_LARGE_N: float = 1e-5
PARZEN_ACCURACY_SMALL_N: float = 1e-6

# Number of kernel bandwidths added on each side of the data range.
PARZEN_RANGE_BANDWIDTHS: float = 3.0

# --- KNN Baseline Parameters ---

# Neighbours used by the scikit-learn k-nearest-neighbour estimator.
KNN_NEIGHBORS: int = 3

# --- Significance Testing Parameters ---

# Default number of permutations for permutation tests.
N_PERMUTATIONS: int = 100

# Default significance level (alpha) for screening decisions.
SIGNIFICANCE_ALPHA: float = 0.05
