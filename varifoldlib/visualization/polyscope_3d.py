"""Polyscope-based 3D visualization (optional dependency).

All functions gracefully fail with an ImportError message if polyscope
is not installed.

Usage
-----
    from varifoldlib.visualization.polyscope_3d import PolyscopeFieldSink

    sink = PolyscopeFieldSink(mesh, name='studied mesh')
    sink.add_scalar_field('Computed H', H)
    sink.add_vector_field('Local Curvature', curvatures)
    sink.show()
"""

import numpy as np

from varifoldlib.visualization._sink import FieldSink, _check_on


def _check_polyscope():
    try:
        import polyscope
        return polyscope
    except ImportError:
        raise ImportError(
            "polyscope is required for 3D visualization. "
            "Install it with: pip install polyscope"
        )


def register_surface_mesh(mesh, name: str = 'mesh'):
    """Register a SurfaceMesh as a polyscope surface mesh.

    Faces are passed as a list of vertex lists so that quads from digital
    surfaces are kept as polygons.

    Returns
    -------
    ps_mesh
        Polyscope SurfaceMesh object.
    """
    ps = _check_polyscope()
    ps.init()
    faces = [list(face) for face in mesh.faces]
    if len({len(face) for face in faces}) == 1:
        faces = np.array(faces, dtype=np.int64)
    return ps.register_surface_mesh(name, np.asarray(mesh.positions), faces)


class PolyscopeFieldSink(FieldSink):
    """Adds fields as quantities of a registered polyscope surface mesh.

    Parameters
    ----------
    mesh : SurfaceMesh
        Mesh to register.
    name : str
        Surface mesh name in polyscope.
    """

    def __init__(self, mesh, name: str = 'mesh'):
        self.name = name
        self.ps_mesh = register_surface_mesh(mesh, name=name)

    def add_scalar_field(self, name: str, values, on: str = "faces") -> None:
        values = np.asarray(values, dtype=np.float64)
        if _check_on(on) == "faces":
            self.ps_mesh.add_scalar_quantity(name, values, defined_on='faces')
        else:
            self.ps_mesh.add_scalar_quantity(name, values, defined_on='vertices')

    def add_vector_field(self, name: str, values, on: str = "faces") -> None:
        values = np.asarray(values, dtype=np.float64)
        if _check_on(on) == "faces":
            self.ps_mesh.add_vector_quantity(name, values, defined_on='faces')
        else:
            self.ps_mesh.add_vector_quantity(name, values, defined_on='vertices')

    def show(self) -> None:
        _check_polyscope().show()
