"""
Test surfaces with known curvature.

Generators return a ``SurfaceMesh`` with outward oriented faces. The
``*_curvatures`` functions return the analytic mean and Gaussian curvature
at arbitrary points (typically face centroids or vertices), with the
convention that a sphere with outward normals has positive mean curvature.

Usage
-----
    from varifoldlib.shapes import make_torus, torus_curvatures

    mesh = make_torus(3.0, 1.0, 20, 20)
    H, K = torus_curvatures(mesh.face_centroids(), 3.0, 1.0)
"""

import numpy as np

from varifoldlib.mesh import SurfaceMesh, normalized


def make_sphere(radius: float = 1.0, subdivisions: int = 3, center=(0.0, 0.0, 0.0)):
    """Icosphere: an icosahedron subdivided ``subdivisions`` times.

    Each subdivision splits every triangle in four and projects the new
    vertices on the sphere, giving ``20 * 4**subdivisions`` faces.
    """
    phi = (1.0 + np.sqrt(5.0)) / 2.0
    verts = [
        (-1, phi, 0), (1, phi, 0), (-1, -phi, 0), (1, -phi, 0),
        (0, -1, phi), (0, 1, phi), (0, -1, -phi), (0, 1, -phi),
        (phi, 0, -1), (phi, 0, 1), (-phi, 0, -1), (-phi, 0, 1),
    ]
    faces = [
        (0, 11, 5), (0, 5, 1), (0, 1, 7), (0, 7, 10), (0, 10, 11),
        (1, 5, 9), (5, 11, 4), (11, 10, 2), (10, 7, 6), (7, 1, 8),
        (3, 9, 4), (3, 4, 2), (3, 2, 6), (3, 6, 8), (3, 8, 9),
        (4, 9, 5), (2, 4, 11), (6, 2, 10), (8, 6, 7), (9, 8, 1),
    ]
    verts = [tuple(normalized(np.array(v, dtype=np.float64))) for v in verts]

    for _ in range(subdivisions):
        midpoints = {}

        def midpoint(a, b):
            key = (min(a, b), max(a, b))
            if key not in midpoints:
                m = normalized((np.array(verts[a]) + np.array(verts[b])) / 2.0)
                verts.append(tuple(m))
                midpoints[key] = len(verts) - 1
            return midpoints[key]

        new_faces = []
        for a, b, c in faces:
            ab, bc, ca = midpoint(a, b), midpoint(b, c), midpoint(c, a)
            new_faces += [(a, ab, ca), (b, bc, ab), (c, ca, bc), (ab, bc, ca)]
        faces = new_faces

    positions = radius * np.array(verts) + np.asarray(center, dtype=np.float64)
    return SurfaceMesh(positions, faces)


def make_plane(size: float = 1.0, n: int = 10, triangulate: bool = False):
    """Square patch ``[-size/2, size/2]^2`` in the z = 0 plane, normal +z.

    Built from ``n x n`` quads (the layout of a digital surface), or
    ``2 n^2`` triangles when ``triangulate`` is True.
    """
    t = np.linspace(-size / 2.0, size / 2.0, n + 1)
    X, Y = np.meshgrid(t, t, indexing="ij")
    positions = np.column_stack([X.ravel(), Y.ravel(), np.zeros(X.size)])

    def vid(i, j):
        return i * (n + 1) + j

    faces = []
    for i in range(n):
        for j in range(n):
            a, b, c, d = vid(i, j), vid(i + 1, j), vid(i + 1, j + 1), vid(i, j + 1)
            if triangulate:
                faces += [(a, b, c), (a, c, d)]
            else:
                faces.append((a, b, c, d))
    return SurfaceMesh(positions, faces)


def make_torus(major_radius: float = 3.0, minor_radius: float = 1.0,
               n_major: int = 20, n_minor: int = 20, center=(0.0, 0.0, 0.0)):
    """Torus around the z axis made of ``n_major * n_minor`` quads."""
    u = 2.0 * np.pi * np.arange(n_major) / n_major
    v = 2.0 * np.pi * np.arange(n_minor) / n_minor
    U, V = np.meshgrid(u, v, indexing="ij")
    ring = major_radius + minor_radius * np.cos(V)
    positions = np.column_stack([
        (ring * np.cos(U)).ravel(),
        (ring * np.sin(U)).ravel(),
        (minor_radius * np.sin(V)).ravel(),
    ]) + np.asarray(center, dtype=np.float64)

    def vid(i, j):
        return (i % n_major) * n_minor + (j % n_minor)

    faces = [
        (vid(i, j), vid(i + 1, j), vid(i + 1, j + 1), vid(i, j + 1))
        for i in range(n_major) for j in range(n_minor)
    ]
    return SurfaceMesh(positions, faces)


def sphere_curvatures(points, radius: float = 1.0):
    """Mean and Gaussian curvature of a sphere (constant over the surface)."""
    n = len(np.atleast_2d(points))
    return np.full(n, 1.0 / radius), np.full(n, 1.0 / radius ** 2)


def plane_curvatures(points):
    n = len(np.atleast_2d(points))
    return np.zeros(n), np.zeros(n)


def torus_curvatures(points, major_radius: float = 3.0, minor_radius: float = 1.0,
                     center=(0.0, 0.0, 0.0)):
    """Mean and Gaussian curvature of a torus at the points' tube angle.

    With ``v`` the angle around the tube, the principal curvatures are
    ``cos v / (R + r cos v)`` and ``1 / r``.
    """
    p = np.atleast_2d(np.asarray(points, dtype=np.float64)) - np.asarray(center)
    v = np.arctan2(p[:, 2], np.hypot(p[:, 0], p[:, 1]) - major_radius)
    k1 = np.cos(v) / (major_radius + minor_radius * np.cos(v))
    k2 = np.full_like(k1, 1.0 / minor_radius)
    return 0.5 * (k1 + k2), k1 * k2


def sphere_normals(points, center=(0.0, 0.0, 0.0)):
    """Exact outward unit normals of a sphere at the points' directions."""
    return normalized(np.atleast_2d(np.asarray(points, dtype=np.float64))
                      - np.asarray(center))


def plane_normals(points):
    n = len(np.atleast_2d(points))
    return np.tile([0.0, 0.0, 1.0], (n, 1))


def torus_normals(points, major_radius: float = 3.0, center=(0.0, 0.0, 0.0)):
    """Exact outward unit normals of a torus at the points' tube angles."""
    p = np.atleast_2d(np.asarray(points, dtype=np.float64)) - np.asarray(center)
    u = np.arctan2(p[:, 1], p[:, 0])
    v = np.arctan2(p[:, 2], np.hypot(p[:, 0], p[:, 1]) - major_radius)
    return np.column_stack([np.cos(v) * np.cos(u), np.cos(v) * np.sin(u), np.sin(v)])
