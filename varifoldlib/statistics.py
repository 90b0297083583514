"""
Error statistics between an estimated and an expected scalar field.

Usage
-----
    from varifoldlib.statistics import ErrorStatistics

    stats = ErrorStatistics(H, exp_H)
    stats.linf, stats.l2
    stats.summary()
"""

import numpy as np


def absolute_difference(estimated, expected) -> np.ndarray:
    """Elementwise ``|estimated - expected|``."""
    a = np.asarray(estimated, dtype=np.float64)
    b = np.asarray(expected, dtype=np.float64)
    if a.shape != b.shape:
        raise ValueError(f"Shapes differ: {a.shape} vs {b.shape}")
    return np.abs(a - b)


class ErrorStatistics:
    """Read-only comparison of two equal-length scalar sequences.

    Non-finite entries in either input (failed elements) are excluded from
    the summaries and counted in ``n_excluded``.

    Parameters
    ----------
    estimated : array_like, shape (n,)
    expected : array_like, shape (n,)
    """

    def __init__(self, estimated, expected):
        estimated = np.array(estimated, dtype=np.float64).reshape(-1)
        expected = np.array(expected, dtype=np.float64).reshape(-1)
        if len(estimated) != len(expected):
            raise ValueError(
                f"Cannot compare {len(estimated)} estimated values with "
                f"{len(expected)} expected values"
            )
        diff = absolute_difference(estimated, expected)
        mask = np.isfinite(diff)
        for a in (estimated, expected, diff):
            a.setflags(write=False)
        self._estimated = estimated
        self._expected = expected
        self._diff = diff
        self._finite = diff[mask]
        self.n_excluded = int(np.count_nonzero(~mask))

    @property
    def absolute_difference(self) -> np.ndarray:
        return self._diff

    @property
    def n(self) -> int:
        """Number of compared (finite) entries."""
        return len(self._finite)

    @property
    def min(self) -> float:
        return float(self._finite.min()) if self.n else float("nan")

    @property
    def max(self) -> float:
        return float(self._finite.max()) if self.n else float("nan")

    @property
    def linf(self) -> float:
        return self.max

    @property
    def l2(self) -> float:
        """Root mean square difference."""
        return float(np.sqrt(np.mean(self._finite ** 2))) if self.n else float("nan")

    @property
    def mean(self) -> float:
        return float(self._finite.mean()) if self.n else float("nan")

    @property
    def variance(self) -> float:
        return float(self._finite.var()) if self.n else float("nan")

    def summary(self) -> dict:
        return {
            "min": self.min,
            "max": self.max,
            "linf": self.linf,
            "l2": self.l2,
            "mean": self.mean,
            "variance": self.variance,
            "n": self.n,
            "n_excluded": self.n_excluded,
        }

    def __repr__(self):
        return (f"ErrorStatistics(n={self.n}, linf={self.linf:.6g}, "
                f"l2={self.l2:.6g})")
