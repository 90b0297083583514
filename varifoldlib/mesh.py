"""
Polygonal surface mesh consumed by the estimators.

Faces are ordered vertex index lists of any length >= 3 (quads from digital
surfaces, triangles from the shape generators). Normals, centroids and
adjacency are computed on demand and cached; the mesh itself is never
mutated after construction.

Usage
-----
    from varifoldlib.mesh import SurfaceMesh

    mesh = SurfaceMesh(positions, faces)
    mesh.face_centroids()        # (n_faces, 3)
    mesh.face_normals()          # unit facet normals
    mesh.neighbor_faces(0)       # faces sharing an edge with face 0
"""

import logging
from functools import cached_property
from typing import Sequence

import numpy as np

from varifoldlib._errors import UpstreamDataError

logger = logging.getLogger(__name__)


def normalized(a, axis=-1):
    """Normalise rows of ``a``; zero rows are left as zero."""
    a = np.asarray(a, dtype=np.float64)
    l2 = np.linalg.norm(a, axis=axis, keepdims=True)
    return a / np.where(l2 == 0, 1.0, l2)


class SurfaceMesh:
    """Oriented polygonal surface.

    Parameters
    ----------
    positions : array_like, shape (n_vertices, 3)
        Vertex coordinates.
    faces : sequence of sequence of int
        Each face is an ordered (counter-clockwise seen from outside)
        list of vertex indices.
    """

    def __init__(self, positions, faces: Sequence[Sequence[int]]):
        positions = np.array(positions, dtype=np.float64)
        if positions.ndim != 2 or positions.shape[1] != 3:
            raise UpstreamDataError(
                f"positions must have shape (n, 3), got {positions.shape}"
            )
        if not np.all(np.isfinite(positions)):
            raise UpstreamDataError("positions contain non-finite values")
        n = len(positions)
        checked = []
        for f, face in enumerate(faces):
            face = tuple(int(i) for i in face)
            if len(face) < 3:
                raise UpstreamDataError(
                    f"face {f} has {len(face)} vertices, at least 3 required"
                )
            if min(face) < 0 or max(face) >= n:
                raise UpstreamDataError(
                    f"face {f} references a vertex outside [0, {n})"
                )
            checked.append(face)
        positions.setflags(write=False)
        self._positions = positions
        self._faces = tuple(checked)

    def __repr__(self):
        return f"SurfaceMesh(n_vertices={self.n_vertices}, n_faces={self.n_faces})"

    @property
    def positions(self) -> np.ndarray:
        return self._positions

    @property
    def faces(self) -> tuple:
        return self._faces

    @property
    def n_vertices(self) -> int:
        return len(self._positions)

    @property
    def n_faces(self) -> int:
        return len(self._faces)

    def incident_vertices(self, f: int) -> tuple:
        return self._faces[f]

    def n_elements(self, element: str) -> int:
        """Number of faces or vertices, ``element`` being 'faces' or 'vertices'."""
        if element == "faces":
            return self.n_faces
        elif element == "vertices":
            return self.n_vertices
        raise ValueError(f"Unknown element kind: {element!r}")

    # Geometry

    def face_centroid(self, f: int) -> np.ndarray:
        return self._positions[list(self._faces[f])].mean(axis=0)

    def face_centroids(self) -> np.ndarray:
        return self._centroids

    @cached_property
    def _centroids(self) -> np.ndarray:
        c = np.array([self.face_centroid(f) for f in range(self.n_faces)],
                     dtype=np.float64).reshape(-1, 3)
        c.setflags(write=False)
        return c

    @cached_property
    def _area_vectors(self) -> np.ndarray:
        # Newell's formula: half the sum of edge cross products, whose norm
        # is the polygon area and direction its normal.
        out = np.zeros((self.n_faces, 3))
        for f, face in enumerate(self._faces):
            p = self._positions[list(face)]
            out[f] = 0.5 * np.cross(p, np.roll(p, -1, axis=0)).sum(axis=0)
        out.setflags(write=False)
        return out

    def face_areas(self) -> np.ndarray:
        return np.linalg.norm(self._area_vectors, axis=1)

    def face_normals(self) -> np.ndarray:
        """Unit facet normals computed from vertex positions."""
        return normalized(self._area_vectors)

    def vertex_normals(self) -> np.ndarray:
        """Unit vertex normals: area-weighted average of incident face normals.

        The unnormalised Newell vectors already carry the face area, so the
        weighted sum is their plain sum.
        """
        acc = np.zeros((self.n_vertices, 3))
        for f, face in enumerate(self._faces):
            for v in face:
                acc[v] += self._area_vectors[f]
        isolated = np.flatnonzero(np.linalg.norm(acc, axis=1) == 0)
        if len(isolated):
            logger.debug(f"{len(isolated)} vertices have a zero normal")
        return normalized(acc)

    # Adjacency

    @cached_property
    def _edge_faces(self) -> dict:
        edges = {}
        for f, face in enumerate(self._faces):
            for a, b in zip(face, face[1:] + face[:1]):
                edges.setdefault((min(a, b), max(a, b)), []).append(f)
        return edges

    @cached_property
    def _face_neighbors(self) -> tuple:
        nbrs = [set() for _ in range(self.n_faces)]
        for faces in self._edge_faces.values():
            for f in faces:
                nbrs[f].update(g for g in faces if g != f)
        return tuple(tuple(sorted(s)) for s in nbrs)

    @cached_property
    def _vertex_neighbors(self) -> tuple:
        nbrs = [set() for _ in range(self.n_vertices)]
        for a, b in self._edge_faces:
            if a != b:
                nbrs[a].add(b)
                nbrs[b].add(a)
        return tuple(tuple(sorted(s)) for s in nbrs)

    @cached_property
    def _vertex_faces(self) -> tuple:
        inc = [[] for _ in range(self.n_vertices)]
        for f, face in enumerate(self._faces):
            for v in set(face):
                inc[v].append(f)
        return tuple(tuple(s) for s in inc)

    def neighbor_faces(self, f: int) -> tuple:
        """Faces sharing an edge with face ``f`` (``f`` excluded)."""
        return self._face_neighbors[f]

    def neighbor_vertices(self, v: int) -> tuple:
        """Vertices sharing an edge with vertex ``v`` (``v`` excluded)."""
        return self._vertex_neighbors[v]

    def incident_faces(self, v: int) -> tuple:
        return self._vertex_faces[v]

    def neighbors(self, i: int, element: str) -> tuple:
        """1-ring of element ``i`` for 'faces' or 'vertices'."""
        if element == "faces":
            return self.neighbor_faces(i)
        elif element == "vertices":
            return self.neighbor_vertices(i)
        raise ValueError(f"Unknown element kind: {element!r}")

    def face_inclusion_ratio(self, center, radius: float, f: int) -> float:
        """Fraction of the vertices of face ``f`` strictly inside the ball."""
        p = self._positions[list(self._faces[f])]
        d = np.linalg.norm(p - np.asarray(center, dtype=np.float64), axis=1)
        return float(np.count_nonzero(d < radius)) / len(p)

    def vertex_inclusion_ratio(self, center, radius: float, v: int) -> float:
        """1.0 if vertex ``v`` lies strictly inside the ball, else 0.0."""
        d = np.linalg.norm(self._positions[v] - np.asarray(center, dtype=np.float64))
        return 1.0 if d < radius else 0.0

    def element_positions(self, element: str) -> np.ndarray:
        """Face centroids or vertex positions."""
        if element == "faces":
            return self.face_centroids()
        elif element == "vertices":
            return self.positions
        raise ValueError(f"Unknown element kind: {element!r}")
