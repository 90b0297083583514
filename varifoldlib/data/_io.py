"""Save and load per-element result fields to/from JSON files.

The format stores the mesh (vertex positions and faces) together with named
scalar and vector fields, each tagged with the elements it is defined on.
It is human-readable and can be reloaded into a ``SurfaceMesh``.

Usage
-----
    from varifoldlib.data import save_fields, load_fields

    save_fields(mesh, {'Computed H': ('faces', H)}, path='fields.json')
    mesh2, fields, meta = load_fields('fields.json')
"""

import json
from pathlib import Path
from typing import Optional

import numpy as np

from varifoldlib._errors import UpstreamDataError
from varifoldlib.mesh import SurfaceMesh
from varifoldlib.visualization._sink import FieldSink, _check_on

FORMAT = 'varifoldlib_fields_v1'


def _to_json_array(values: np.ndarray) -> list:
    # JSON has no NaN; failed elements are written as null
    values = np.asarray(values, dtype=np.float64)
    return np.where(np.isfinite(values), values, None).tolist()


def _from_json_array(values: list) -> np.ndarray:
    return np.array(values, dtype=np.float64)


def save_fields(
    mesh,
    fields: dict,
    path: str = 'fields.json',
    extra_meta: Optional[dict] = None,
) -> str:
    """Serialize a mesh and its fields to a JSON file.

    Parameters
    ----------
    mesh : SurfaceMesh
        Mesh the fields are attached to.
    fields : dict
        Field name -> ``(on, values)`` with ``on`` 'faces' or 'vertices'.
        Scalar fields have shape (n,), vector fields (n, 3).
    path : str or Path
        Output file path.
    extra_meta : dict or None
        Additional metadata to store.

    Returns
    -------
    str
        The path written to (for chaining).
    """
    out_fields = {}
    for name, (on, values) in fields.items():
        values = np.asarray(values, dtype=np.float64)
        expected = mesh.n_elements(_check_on(on))
        if len(values) != expected:
            raise ValueError(
                f"Field {name!r} has {len(values)} values for {expected} {on}"
            )
        out_fields[name] = {
            'on': on,
            'kind': 'vector' if values.ndim == 2 else 'scalar',
            'values': _to_json_array(values),
        }

    state = {
        'format': FORMAT,
        'n_vertices': mesh.n_vertices,
        'n_faces': mesh.n_faces,
        'positions': np.asarray(mesh.positions).tolist(),
        'faces': [list(face) for face in mesh.faces],
        'fields': out_fields,
    }

    if extra_meta:
        state['meta'] = extra_meta

    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(state, f, indent=2)

    return str(path)


def load_fields(path: str) -> tuple:
    """Load a mesh and its fields from a JSON file.

    Returns
    -------
    mesh : SurfaceMesh
        Reconstructed mesh.
    fields : dict
        Field name -> ``(on, values)``; missing values are NaN.
    meta : dict
        Extra metadata stored with the file.
    """
    with open(path) as f:
        state = json.load(f)

    if state.get('format') != FORMAT:
        raise UpstreamDataError(
            f"{path} is not a {FORMAT} file (format={state.get('format')!r})"
        )

    mesh = SurfaceMesh(np.array(state['positions'], dtype=np.float64).reshape(-1, 3),
                       state['faces'])
    fields = {}
    for name, fdata in state.get('fields', {}).items():
        values = _from_json_array(fdata['values'])
        if fdata.get('kind') == 'vector':
            values = values.reshape(-1, 3)
        fields[name] = (fdata['on'], values)

    return mesh, fields, dict(state.get('meta', {}))


class JsonFieldSink(FieldSink):
    """Collects fields and writes them with ``save_fields`` on ``write()``.

    Parameters
    ----------
    mesh : SurfaceMesh
    path : str or Path
        Output file path.
    """

    def __init__(self, mesh, path: str = 'fields.json'):
        self.mesh = mesh
        self.path = path
        self.fields: dict = {}

    def add_scalar_field(self, name: str, values, on: str = "faces") -> None:
        self.fields[name] = (_check_on(on),
                             np.array(values, dtype=np.float64).reshape(-1))

    def add_vector_field(self, name: str, values, on: str = "faces") -> None:
        self.fields[name] = (_check_on(on),
                             np.array(values, dtype=np.float64).reshape(-1, 3))

    def write(self, extra_meta: Optional[dict] = None) -> str:
        return save_fields(self.mesh, self.fields, path=self.path,
                           extra_meta=extra_meta)
