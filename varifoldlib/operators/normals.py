"""
Normal sources: the (position, normal) samples fed to the estimator.

One strategy per method, all producing a ``SampleSet`` aligned with the
mesh's own face or vertex indexing:

* ``tnfc`` (TrivialNormalSource): face centroids with facet normals.
* ``dnfc`` (DualNormalSource): vertices with area-weighted vertex normals.
* ``cnfc`` (CorrectedNormalSource): face centroids with externally
  estimated normals (e.g. integral-invariant normals of a digital surface).

``pot`` and ``vi`` are declared methods without an estimator; resolving them
raises ``UnimplementedMethodError``.

Usage
-----
    from varifoldlib.operators.normals import make_normal_source

    source = make_normal_source("cnfc", normals=ii_normals)
    samples = source(mesh)
    samples.positions, samples.normals, samples.indices
"""

from abc import ABC, abstractmethod
from typing import NamedTuple, Optional

import numpy as np

from varifoldlib._config import Method, parse_method
from varifoldlib._errors import (
    ConfigurationError,
    UnimplementedMethodError,
    UpstreamDataError,
)
from varifoldlib.operators._registry import MethodRegistry

normal_sources = MethodRegistry("normal source")


class SamplePoint(NamedTuple):
    """One sample: position, (not necessarily unit) normal and owner index."""
    position: np.ndarray
    normal: np.ndarray
    index: int


class SampleSet:
    """Immutable parallel arrays of sample positions, normals and indices.

    Parameters
    ----------
    positions : array_like, shape (n, 3)
    normals : array_like, shape (n, 3)
    indices : array_like of int, shape (n,)
        Owning face or vertex index of each sample.
    element : str
        'faces' or 'vertices'.
    method : Method or None
        Method that produced the samples.
    """

    def __init__(self, positions, normals, indices, element: str = "faces",
                 method: Optional[Method] = None):
        positions = np.array(positions, dtype=np.float64).reshape(-1, 3)
        normals = np.array(normals, dtype=np.float64).reshape(-1, 3)
        indices = np.array(indices, dtype=np.intp).reshape(-1)
        if not (len(positions) == len(normals) == len(indices)):
            raise UpstreamDataError(
                f"Sample arrays differ in length: {len(positions)} positions, "
                f"{len(normals)} normals, {len(indices)} indices"
            )
        for a in (positions, normals, indices):
            a.setflags(write=False)
        self.positions = positions
        self.normals = normals
        self.indices = indices
        self.element = element
        self.method = method

    def __len__(self):
        return len(self.positions)

    def __getitem__(self, i) -> SamplePoint:
        return SamplePoint(self.positions[i], self.normals[i], int(self.indices[i]))

    def __iter__(self):
        for i in range(len(self)):
            yield self[i]

    def __repr__(self):
        return (f"SampleSet(n={len(self)}, element={self.element!r}, "
                f"method={self.method})")


class NormalSource(ABC):
    """Strategy producing a ``SampleSet`` from a mesh."""

    method: Method
    element: str = "faces"

    @abstractmethod
    def __call__(self, mesh) -> SampleSet:
        """Samples aligned with ``mesh`` face or vertex indexing."""


class TrivialNormalSource(NormalSource):
    """Face centroids with facet normals computed from vertex positions."""

    method = Method.TRIVIAL_NORMAL_FACE_CENTROID
    element = "faces"

    def __call__(self, mesh) -> SampleSet:
        return SampleSet(mesh.face_centroids(), mesh.face_normals(),
                         np.arange(mesh.n_faces), self.element, self.method)


class DualNormalSource(NormalSource):
    """Vertex positions with area-weighted averages of incident face normals."""

    method = Method.DUAL_NORMAL_FACE_CENTROID
    element = "vertices"

    def __call__(self, mesh) -> SampleSet:
        # A vertex used by no face has no normal to average
        unused = [v for v in range(mesh.n_vertices) if not mesh.incident_faces(v)]
        if unused:
            raise UpstreamDataError(
                f"{len(unused)} vertices belong to no face, first {unused[:5]}"
            )
        return SampleSet(mesh.positions, mesh.vertex_normals(),
                         np.arange(mesh.n_vertices), self.element, self.method)


class CorrectedNormalSource(NormalSource):
    """Face centroids with externally supplied per-face normals.

    Parameters
    ----------
    normals : array_like, shape (n_faces, 3)
        Normal estimates indexed like the mesh faces.
    """

    method = Method.CORRECTED_NORMAL_FACE_CENTROID
    element = "faces"

    def __init__(self, normals=None):
        if normals is None:
            raise ConfigurationError(
                f"Method {self.method} requires an externally computed "
                f"per-face normal array"
            )
        self.normals = np.asarray(normals, dtype=np.float64)

    def __call__(self, mesh) -> SampleSet:
        if self.normals.ndim != 2 or self.normals.shape != (mesh.n_faces, 3):
            raise UpstreamDataError(
                f"Corrected normals have shape {self.normals.shape}, "
                f"expected ({mesh.n_faces}, 3) to match the mesh faces"
            )
        if not np.all(np.isfinite(self.normals)):
            raise UpstreamDataError("Corrected normals contain non-finite values")
        return SampleSet(mesh.face_centroids(), self.normals,
                         np.arange(mesh.n_faces), self.element, self.method)


def _unimplemented(method: Method):
    def factory(**kwargs):
        raise UnimplementedMethodError(method)
    return factory


normal_sources.register(Method.TRIVIAL_NORMAL_FACE_CENTROID, TrivialNormalSource)
normal_sources.register(Method.DUAL_NORMAL_FACE_CENTROID, DualNormalSource)
normal_sources.register(Method.CORRECTED_NORMAL_FACE_CENTROID, CorrectedNormalSource)
normal_sources.register(Method.PROBABILISTIC_OF_TRIVIALS,
                        _unimplemented(Method.PROBABILISTIC_OF_TRIVIALS))
normal_sources.register(Method.VERTEX_INTERPOLATION,
                        _unimplemented(Method.VERTEX_INTERPOLATION))


def make_normal_source(method, normals=None) -> NormalSource:
    """Resolve the NormalSource for ``method``.

    Parameters
    ----------
    method : Method or str
        Method tag or token.
    normals : array_like or None
        Per-face normals, required by (and only used for) 'cnfc'.
    """
    method = parse_method(method)
    factory = normal_sources[method]
    if method is Method.CORRECTED_NORMAL_FACE_CENTROID:
        return factory(normals=normals)
    return factory()
