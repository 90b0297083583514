"""
Shape evaluation: estimate, sign, compare with ground truth, publish.

``evaluate_shape`` runs the full pipeline on a mesh and hands the resulting
fields to a ``FieldSink``:

* "Local Curvature" (vector) and "Used Normals" (vector),
* "Computed H" (signed curvature after the sign consistency pass),
* "True H" and "Error H He-H" when an expected mean curvature is given.

``kernel_weights_field`` publishes the kernel weights around one element,
which is handy to inspect the kernel support on a given mesh.

Usage
-----
    from varifoldlib import VarifoldConfig
    from varifoldlib.evaluate import evaluate_shape
    from varifoldlib.shapes import make_sphere, sphere_curvatures

    mesh = make_sphere(1.0, subdivisions=3)
    H_true, _ = sphere_curvatures(mesh.face_centroids())
    result = evaluate_shape(mesh, VarifoldConfig(radius=0.3), expected_mean=H_true)
    result.stats.l2
"""

import logging
from dataclasses import dataclass
from typing import Optional

import numpy as np

from varifoldlib._config import VarifoldConfig
from varifoldlib._errors import UpstreamDataError
from varifoldlib.operators.kernel import RadialKernel
from varifoldlib.operators.neighborhood import make_neighborhood
from varifoldlib.statistics import ErrorStatistics
from varifoldlib.varifold import VarifoldSet, compute_signed_curvatures, compute_varifolds

logger = logging.getLogger(__name__)


@dataclass
class EvaluationResult:
    """Outputs of ``evaluate_shape``.

    Attributes
    ----------
    varifolds : VarifoldSet
        Positions, normals and curvature vectors per element.
    H : np.ndarray
        Signed curvature per element (NaN for failed elements).
    expected_H : np.ndarray or None
        Ground truth, if supplied.
    stats : ErrorStatistics or None
        Comparison of ``H`` with ``expected_H``.
    """
    varifolds: VarifoldSet
    H: np.ndarray
    expected_H: Optional[np.ndarray] = None
    stats: Optional[ErrorStatistics] = None

    @property
    def element(self) -> str:
        return self.varifolds.element


def _minmax(values) -> tuple:
    finite = np.asarray(values)[np.isfinite(values)]
    if finite.size == 0:
        return float("nan"), float("nan")
    return float(finite.min()), float(finite.max())


def evaluate_shape(mesh, config: VarifoldConfig, expected_mean=None,
                   corrected_normals=None, sink=None) -> EvaluationResult:
    """Estimate curvature on ``mesh`` and compare it with ``expected_mean``.

    Parameters
    ----------
    mesh : SurfaceMesh
    config : VarifoldConfig
    expected_mean : array_like or None
        Ground-truth mean curvature per face (or per vertex for 'dnfc').
    corrected_normals : array_like or None
        Per-face normals for the 'cnfc' method.
    sink : FieldSink or None
        Receiver of the result fields.

    Returns
    -------
    EvaluationResult
    """
    varifolds = compute_varifolds(mesh, config, corrected_normals=corrected_normals)
    H = compute_signed_curvatures(varifolds, mesh, config.radius)

    lo, hi = _minmax(H)
    logger.info(f"Computed mean curvatures: min={lo} max={hi}")

    expected_H = None
    stats = None
    if expected_mean is not None:
        expected_H = np.asarray(expected_mean, dtype=np.float64).reshape(-1)
        if len(expected_H) != len(H):
            raise UpstreamDataError(
                f"Expected curvature has {len(expected_H)} values, the "
                f"{config.method} estimate has {len(H)} {varifolds.element}"
            )
        lo, hi = _minmax(expected_H)
        logger.info(f"Expected mean curvatures: min={lo} max={hi}")
        stats = ErrorStatistics(H, expected_H)
        logger.info(f"|He-H|_oo = {stats.linf}")
        logger.info(f"|He-H|_2  = {stats.l2}")

    if sink is not None:
        on = varifolds.element
        sink.add_vector_field("Local Curvature", varifolds.curvatures, on=on)
        sink.add_vector_field("Used Normals", varifolds.normals, on=on)
        sink.add_scalar_field("Computed H", H, on=on)
        if stats is not None:
            sink.add_scalar_field("True H", expected_H, on=on)
            sink.add_scalar_field("Error H He-H", stats.absolute_difference, on=on)

    return EvaluationResult(varifolds=varifolds, H=H, expected_H=expected_H,
                            stats=stats)


def kernel_weights_field(mesh, config: VarifoldConfig, center_element: int = 0,
                         sink=None) -> tuple:
    """Kernel weight and derivative of every element around one element.

    Elements are faces (centroids) or vertices according to
    ``config.method``. Elements outside the ball get zero.

    Returns
    -------
    weights, derivatives : np.ndarray, shape (n,)
    """
    element = config.method.element
    positions = mesh.element_positions(element)
    if not 0 <= center_element < len(positions):
        raise IndexError(
            f"center_element {center_element} out of range for "
            f"{len(positions)} {element}"
        )
    nq = make_neighborhood(positions, config.neighborhood)
    center = positions[center_element]
    kernel = RadialKernel(center, config.radius, config.distribution)
    idx = nq.points_in_ball(center, config.radius)
    wd = kernel(positions, idx)

    weights = np.zeros(len(positions))
    derivatives = np.zeros(len(positions))
    weights[idx] = wd[:, 0]
    derivatives[idx] = wd[:, 1]
    logger.info(f"{len(idx)} {element} inside the kernel ball around "
                f"element {center_element}")

    if sink is not None:
        sink.add_scalar_field("Radial Distance", weights, on=element)
        sink.add_scalar_field("Radial Distance Derivative", derivatives, on=element)
    return weights, derivatives
