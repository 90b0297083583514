"""
Radial weighting kernels.

A kernel is centred on a point and weights every other point by a function
of the normalised distance ``t = d / radius``. Points at ``t >= 1`` carry
zero weight and zero derivative.

=============  ======================  =====================
distribution   weight(t)               weight_derivative(t)
=============  ======================  =====================
flat disc      3 / (4 pi)              0
cone           (1 - t) pi / 12         -pi / 12
half sphere    (1 - t^2) / (2 pi)      -t / pi
=============  ======================  =====================

Usage
-----
    kernel = RadialKernel(center, radius=0.5, distribution="c")
    wd = kernel(points)          # (n, 2) array of (weight, derivative)
    wd = kernel(points, idx)     # only rows idx of points
"""

import numpy as np

from varifoldlib._config import DistributionType, check_radius, parse_distribution


def _flat_disc_weight(t):
    return np.full_like(t, 3.0 / (4.0 * np.pi))


def _flat_disc_derivative(t):
    return np.zeros_like(t)


def _cone_weight(t):
    return (1.0 - t) * np.pi / 12.0


def _cone_derivative(t):
    return np.full_like(t, -np.pi / 12.0)


def _half_sphere_weight(t):
    return (1.0 - t * t) / (2.0 * np.pi)


def _half_sphere_derivative(t):
    return -t / np.pi


# (weight, weight_derivative) per distribution, defined for 0 <= t < 1
KERNEL_FUNCTIONS = {
    DistributionType.FLAT_DISC: (_flat_disc_weight, _flat_disc_derivative),
    DistributionType.CONE: (_cone_weight, _cone_derivative),
    DistributionType.HALF_SPHERE: (_half_sphere_weight, _half_sphere_derivative),
}


def kernel_weight(t, distribution):
    """Weight of ``distribution`` at normalised distance(s) ``t``.

    Zero wherever ``t >= 1``.
    """
    t = np.asarray(t, dtype=np.float64)
    fn, _ = KERNEL_FUNCTIONS[parse_distribution(distribution)]
    inside = t < 1.0
    return np.where(inside, fn(np.where(inside, t, 0.0)), 0.0)


def kernel_weight_derivative(t, distribution):
    """Derivative of the weight with respect to ``t``; zero where ``t >= 1``."""
    t = np.asarray(t, dtype=np.float64)
    _, dfn = KERNEL_FUNCTIONS[parse_distribution(distribution)]
    inside = t < 1.0
    return np.where(inside, dfn(np.where(inside, t, 0.0)), 0.0)


class RadialKernel:
    """Kernel of given shape centred on a point.

    Parameters
    ----------
    center : array_like, shape (3,)
        Centre of the kernel.
    radius : float
        Support radius, must be positive.
    distribution : DistributionType or str
        Kernel shape ('fd', 'c' or 'hs').
    """

    def __init__(self, center, radius: float,
                 distribution=DistributionType.HALF_SPHERE):
        self.center = np.array(center, dtype=np.float64)
        self.center.setflags(write=False)
        self.radius = check_radius(radius)
        self.distribution = parse_distribution(distribution)

    def __repr__(self):
        return (f"RadialKernel(center={self.center.tolist()}, "
                f"radius={self.radius}, distribution={self.distribution.name})")

    def weight(self, t):
        return kernel_weight(t, self.distribution)

    def weight_derivative(self, t):
        return kernel_weight_derivative(t, self.distribution)

    def ratios(self, points) -> np.ndarray:
        """Normalised distances ``|p - center| / radius`` for each point."""
        points = np.atleast_2d(np.asarray(points, dtype=np.float64))
        return np.linalg.norm(points - self.center, axis=1) / self.radius

    def __call__(self, points, indices=None) -> np.ndarray:
        """Evaluate ``(weight, weight_derivative)`` at each point.

        Parameters
        ----------
        points : array_like, shape (n, 3)
            Points to weight.
        indices : sequence of int or None
            If given, only ``points[indices]`` are evaluated, in that order.

        Returns
        -------
        np.ndarray, shape (m, 2)
            Column 0 holds weights, column 1 derivatives. Rows follow the
            order of ``points`` (or ``indices``).
        """
        points = np.asarray(points, dtype=np.float64)
        if indices is not None:
            points = points[np.asarray(indices, dtype=np.intp)]
        if len(points) == 0:
            return np.zeros((0, 2))
        t = self.ratios(points)
        return np.column_stack([self.weight(t), self.weight_derivative(t)])
