"""
Kernel-weighted local curvature vectors.

For a sample ``f`` at position ``b`` every other sample ``f'`` inside the
kernel ball contributes the part of its radial offset ``p(f') - b`` that is
orthogonal to its own normal, scaled by ``1 / |p(f') - b|`` and by the
kernel weight. The curvature vector is

    k(f) = - sum w(f') proj(p(f') - b, n(f')) / |p(f') - b|
           / (sum w(f') * radius)

Elements without any weighted neighbour raise
``DegenerateNeighborhoodError``; batch evaluation records them instead of
aborting.

Usage
-----
    from varifoldlib.operators.curvature import LocalCurvatureEstimator

    est = LocalCurvatureEstimator(samples, radius=0.3, distribution="c")
    k0 = est.estimate(0)
    field = est.estimate_all(workers=4)
    field.vectors, field.valid, field.failures
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from typing import Optional, Union

import numpy as np

from varifoldlib._config import DistributionType, check_radius, parse_distribution
from varifoldlib._errors import DegenerateNeighborhoodError
from varifoldlib.operators.kernel import RadialKernel
from varifoldlib.operators.neighborhood import NeighborhoodQuery, make_neighborhood

logger = logging.getLogger(__name__)


def projection(v, n):
    """Component of ``v`` orthogonal to ``n``: ``v - n (v.n) / |n|^2``.

    Works row-wise on (m, 3) arrays. Rows with a zero normal are returned
    unchanged.
    """
    v = np.asarray(v, dtype=np.float64)
    n = np.asarray(n, dtype=np.float64)
    nn = np.sum(n * n, axis=-1, keepdims=True)
    vn = np.sum(v * n, axis=-1, keepdims=True)
    scale = np.divide(vn, nn, out=np.zeros_like(vn), where=nn > 0)
    return v - n * scale


@dataclass
class CurvatureField:
    """Per-element curvature vectors from a batch evaluation.

    Attributes
    ----------
    vectors : np.ndarray, shape (n, 3)
        Curvature vectors; rows of failed elements are NaN.
    valid : np.ndarray of bool, shape (n,)
        False where the element failed.
    failures : dict
        Element index -> ``DegenerateNeighborhoodError``.
    """
    vectors: np.ndarray
    valid: np.ndarray
    failures: dict = field(default_factory=dict)

    @property
    def n_failed(self) -> int:
        return len(self.failures)


class LocalCurvatureEstimator:
    """Curvature vector per sample from kernel-weighted normal variation.

    Parameters
    ----------
    samples : SampleSet
        Positions and normals, e.g. from a ``NormalSource``.
    radius : float
        Kernel radius.
    distribution : DistributionType or str
        Kernel shape ('fd', 'c' or 'hs').
    neighborhood : str or NeighborhoodQuery
        Backend name ('brute-force', 'kdtree') or a prebuilt query over
        ``samples.positions``.
    """

    def __init__(self, samples, radius: float,
                 distribution: Union[DistributionType, str] = DistributionType.HALF_SPHERE,
                 neighborhood: Union[str, NeighborhoodQuery] = "brute-force"):
        self.samples = samples
        self.radius = check_radius(radius)
        self.distribution = parse_distribution(distribution)
        if isinstance(neighborhood, NeighborhoodQuery):
            if len(neighborhood) != len(samples):
                raise ValueError(
                    f"Neighborhood holds {len(neighborhood)} points for "
                    f"{len(samples)} samples"
                )
            self.neighborhood = neighborhood
        else:
            self.neighborhood = make_neighborhood(samples.positions, neighborhood)

    def __len__(self):
        return len(self.samples)

    def estimate(self, f: int) -> np.ndarray:
        """Curvature vector of sample ``f``.

        Raises
        ------
        DegenerateNeighborhoodError
            If no other sample has positive kernel weight.
        """
        positions = self.samples.positions
        normals = self.samples.normals
        b = positions[f]
        kernel = RadialKernel(b, self.radius, self.distribution)

        idx = self.neighborhood.points_in_ball(b, self.radius)
        idx = idx[idx != f]
        w = kernel(positions, idx)[:, 0] if len(idx) else np.zeros(0)
        offsets = positions[idx] - b
        dist = np.linalg.norm(offsets, axis=1)
        # Coincident samples give no direction
        keep = (w > 0) & (dist > 0)
        w, offsets, dist = w[keep], offsets[keep], dist[keep]

        sum_weights = float(np.sum(w))
        if sum_weights <= 0.0:
            raise DegenerateNeighborhoodError(f, self.radius,
                                              getattr(self.samples, "method", None))

        proj = projection(offsets, normals[idx[keep]])
        sum_vector = np.sum(w[:, None] * proj / dist[:, None], axis=0)
        return -sum_vector / (sum_weights * self.radius)

    def _try_estimate(self, f: int):
        try:
            return self.estimate(f), None
        except DegenerateNeighborhoodError as e:
            return None, e

    def estimate_all(self, workers: Optional[int] = None) -> CurvatureField:
        """Curvature vectors of all samples.

        Parameters
        ----------
        workers : int or None
            Number of threads. None or 1 runs serially. Every element writes
            only its own row, so the result does not depend on scheduling.

        Returns
        -------
        CurvatureField
        """
        n = len(self.samples)
        out = np.full((n, 3), np.nan)
        failures = {}

        if workers is not None and workers > 1:
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(self._try_estimate, range(n)))
        else:
            results = []
            percent = 0
            for f in range(n):
                if f * 100 // n > percent:
                    percent = f * 100 // n
                    logger.debug(f"Computing varifolds: {percent}%")
                results.append(self._try_estimate(f))

        for f, (vec, err) in enumerate(results):
            if err is None:
                out[f] = vec
            else:
                failures[f] = err

        valid = np.ones(n, dtype=bool)
        if failures:
            valid[list(failures)] = False
            logger.warning(
                f"{len(failures)} of {n} elements have no weighted neighbour "
                f"within radius {self.radius} (first: {min(failures)})"
            )
        return CurvatureField(vectors=out, valid=valid,
                              failures=dict(sorted(failures.items())))
