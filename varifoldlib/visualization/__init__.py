"""Field sinks and visualization for varifold results.

Submodules
----------
_sink         : FieldSink interface and in-memory sink
matplotlib_3d : Face scalar field plot
polyscope_3d  : Polyscope surface mesh sink (optional)
"""

from varifoldlib.visualization._sink import FieldSink, MemoryFieldSink
from varifoldlib.visualization.matplotlib_3d import plot_face_scalar_field

__all__ = [
    'FieldSink',
    'MemoryFieldSink',
    'plot_face_scalar_field',
]
