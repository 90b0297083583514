"""
Varifolds and signed scalar curvature.

A varifold here is the record (position, plane normal, curvature vector) of
one face or vertex. ``compute_varifolds`` assembles them for a chosen
method; ``signed_norms`` turns curvature vectors into a signed scalar and
``sign_consistency_pass`` re-signs that scalar by a 1-ring majority vote.

Usage
-----
    from varifoldlib import VarifoldConfig, compute_varifolds
    from varifoldlib.varifold import compute_signed_curvatures

    config = VarifoldConfig(radius=0.3, distribution="hs", method="tnfc")
    varifolds = compute_varifolds(mesh, config)
    H = compute_signed_curvatures(varifolds, mesh, config.radius)
"""

import logging
from typing import NamedTuple, Optional

import numpy as np

from varifoldlib._config import VarifoldConfig
from varifoldlib.operators.curvature import CurvatureField, LocalCurvatureEstimator
from varifoldlib.operators.normals import SampleSet, make_normal_source

logger = logging.getLogger(__name__)


class Varifold(NamedTuple):
    position: np.ndarray
    plane_normal: np.ndarray
    curvature: np.ndarray


class VarifoldSet:
    """Samples of one method paired with their curvature vectors.

    Parameters
    ----------
    samples : SampleSet
    field : CurvatureField
        Output of ``LocalCurvatureEstimator.estimate_all`` on ``samples``.
    """

    def __init__(self, samples: SampleSet, field: CurvatureField):
        if len(samples) != len(field.vectors):
            raise ValueError(
                f"{len(samples)} samples but {len(field.vectors)} curvature vectors"
            )
        curvatures = np.array(field.vectors, dtype=np.float64)
        curvatures.setflags(write=False)
        valid = np.array(field.valid, dtype=bool)
        valid.setflags(write=False)
        self.samples = samples
        self.curvatures = curvatures
        self.valid = valid
        self.failures = dict(field.failures)

    @property
    def positions(self) -> np.ndarray:
        return self.samples.positions

    @property
    def normals(self) -> np.ndarray:
        return self.samples.normals

    @property
    def element(self) -> str:
        return self.samples.element

    @property
    def method(self):
        return self.samples.method

    def __len__(self):
        return len(self.samples)

    def __getitem__(self, i) -> Varifold:
        return Varifold(self.samples.positions[i], self.samples.normals[i],
                        self.curvatures[i])

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]


def compute_varifolds(mesh, config: VarifoldConfig,
                      corrected_normals=None) -> VarifoldSet:
    """Varifolds of every sample element of ``mesh`` for ``config.method``.

    Parameters
    ----------
    mesh : SurfaceMesh
    config : VarifoldConfig
    corrected_normals : array_like or None
        Per-face normals, required when ``config.method`` is 'cnfc'.

    Returns
    -------
    VarifoldSet
        One varifold per face or vertex, in mesh order.
    """
    source = make_normal_source(config.method, normals=corrected_normals)
    samples = source(mesh)
    logger.info(f"Computing {len(samples)} varifolds on {samples.element} "
                f"(method={config.method}, kernel={config.distribution.name}, "
                f"radius={config.radius})")
    estimator = LocalCurvatureEstimator(samples, config.radius,
                                        config.distribution, config.neighborhood)
    field = estimator.estimate_all(workers=config.workers)
    logger.info(f"Computed {len(samples) - field.n_failed} varifolds")
    return VarifoldSet(samples, field)


def signed_norms(varifolds) -> np.ndarray:
    """``sign(n . k) * |k|`` per varifold, the sign being -1 unless n . k > 0.

    Failed elements (NaN curvature) stay NaN.
    """
    k = np.asarray(varifolds.curvatures, dtype=np.float64)
    n = np.asarray(varifolds.normals, dtype=np.float64)
    dots = np.sum(n * k, axis=1)
    sign = np.where(dots > 0, 1.0, -1.0)
    return np.where(np.isnan(dots), np.nan, sign * np.linalg.norm(k, axis=1))


def inclusion_weight(mesh, element: str, center, radius: Optional[float], j: int) -> float:
    """Weight of 1-ring neighbour ``j`` in the ball of ``radius`` at ``center``.

    Without a radius every neighbour has weight 1.
    """
    if radius is None:
        return 1.0
    if element == "faces":
        return mesh.face_inclusion_ratio(center, radius, j)
    return mesh.vertex_inclusion_ratio(center, radius, j)


def sign_consistency_pass(values, mesh, element: str = "faces",
                          radius: Optional[float] = None) -> np.ndarray:
    """Re-sign a scalar field by a 1-ring majority vote.

    For each element ``i`` the values of its mesh 1-ring neighbours (faces
    sharing an edge, or vertices sharing an edge) with positive inclusion
    weight are summed. The output is ``|s[i]|`` when that sum is >= 0 and
    ``-|s[i]|`` otherwise. Magnitudes are never changed.

    Parameters
    ----------
    values : array_like, shape (n,)
        Signed scalar per element. NaN neighbours are left out of the sum.
    mesh : SurfaceMesh
    element : str
        'faces' or 'vertices'.
    radius : float or None
        Ball radius for the inclusion weight; None includes the whole 1-ring.

    Returns
    -------
    np.ndarray
        New array; ``values`` is read, never written.
    """
    frozen = np.array(values, dtype=np.float64)
    frozen.setflags(write=False)
    if len(frozen) != mesh.n_elements(element):
        raise ValueError(
            f"{len(frozen)} values for {mesh.n_elements(element)} {element}"
        )
    centers = mesh.element_positions(element)
    out = np.empty_like(frozen)
    for i in range(len(frozen)):
        total = 0.0
        for j in mesh.neighbors(i, element):
            if j == i or np.isnan(frozen[j]):
                continue
            if inclusion_weight(mesh, element, centers[i], radius, j) > 0:
                total += frozen[j]
        out[i] = abs(frozen[i]) if total >= 0 else -abs(frozen[i])
    return out


def compute_signed_curvatures(varifolds: VarifoldSet, mesh,
                              radius: Optional[float] = None) -> np.ndarray:
    """Signed curvature norms followed by one sign consistency pass."""
    return sign_consistency_pass(signed_norms(varifolds), mesh,
                                 varifolds.element, radius)
