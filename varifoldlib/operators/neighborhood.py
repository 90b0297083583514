"""
Radius-ball queries over a fixed point set.

Two interchangeable backends return the same index sets: a numpy linear
scan (default) and a scipy ``cKDTree``. Both return indices of points at
distance strictly less than the radius, sorted ascending.

Usage
-----
    from varifoldlib.operators.neighborhood import make_neighborhood

    nq = make_neighborhood(centroids, backend="kdtree")
    idx = nq.points_in_ball(centroids[0], 0.5)
"""

from abc import ABC, abstractmethod

import numpy as np
from scipy.spatial import cKDTree

from varifoldlib._config import check_radius
from varifoldlib._errors import UpstreamDataError
from varifoldlib.operators._registry import MethodRegistry

neighborhood_backends = MethodRegistry("neighborhood")


class NeighborhoodQuery(ABC):
    """Immutable point set answering radius-ball index queries.

    Parameters
    ----------
    points : array_like, shape (n, 3)
        Positions; copied and frozen at construction.
    """

    def __init__(self, points):
        points = np.array(points, dtype=np.float64)
        if points.ndim != 2 or (len(points) and points.shape[1] != 3):
            raise UpstreamDataError(
                f"Expected an (n, 3) array of positions, got shape {points.shape}"
            )
        points = points.reshape(-1, 3)
        points.setflags(write=False)
        self._points = points

    @property
    def points(self) -> np.ndarray:
        return self._points

    def __len__(self):
        return len(self._points)

    @abstractmethod
    def points_in_ball(self, center, radius: float) -> np.ndarray:
        """Indices of points with ``|p - center| < radius``, sorted ascending."""


class BruteForceNeighborhood(NeighborhoodQuery):
    """Linear scan over all points, O(n) per query."""

    def points_in_ball(self, center, radius: float) -> np.ndarray:
        radius = check_radius(radius)
        d = np.linalg.norm(self._points - np.asarray(center, dtype=np.float64),
                           axis=1)
        return np.flatnonzero(d < radius)


class KDTreeNeighborhood(NeighborhoodQuery):
    """scipy ``cKDTree`` backed queries, O(log n + k) per query."""

    def __init__(self, points):
        super().__init__(points)
        self._tree = cKDTree(self._points) if len(self._points) else None

    def points_in_ball(self, center, radius: float) -> np.ndarray:
        radius = check_radius(radius)
        if self._tree is None:
            return np.zeros(0, dtype=np.intp)
        center = np.asarray(center, dtype=np.float64)
        # Widened query, then the same strict test as the linear scan
        idx = np.asarray(
            self._tree.query_ball_point(center, radius * (1.0 + 1e-9)),
            dtype=np.intp,
        )
        if len(idx) == 0:
            return idx
        d = np.linalg.norm(self._points[idx] - center, axis=1)
        return np.sort(idx[d < radius])


neighborhood_backends.register("brute-force", BruteForceNeighborhood)
neighborhood_backends.register("kdtree", KDTreeNeighborhood)


def make_neighborhood(points, backend: str = "brute-force") -> NeighborhoodQuery:
    """Build a NeighborhoodQuery over ``points`` with the named backend."""
    return neighborhood_backends[backend](points)
