"""
varifoldlib: kernel-weighted varifold curvature estimation on surface meshes.

Submodules
----------
operators     : Kernels, neighbourhood queries, normal sources, curvature vectors
varifold      : Varifold assembly, signed curvature and sign consistency pass
statistics    : Error statistics against ground truth
mesh          : Polygonal surface mesh
shapes        : Test surfaces with analytic curvature
evaluate      : End-to-end evaluation publishing fields to a sink
data          : JSON field files
visualization : Field sinks, matplotlib and polyscope output
"""

from varifoldlib._config import (
    DistributionType,
    Method,
    VarifoldConfig,
    parse_distribution,
    parse_method,
)
from varifoldlib._errors import (
    VarifoldError,
    ConfigurationError,
    UpstreamDataError,
    DegenerateNeighborhoodError,
    UnimplementedMethodError,
)
from varifoldlib.mesh import SurfaceMesh
from varifoldlib.statistics import ErrorStatistics
from varifoldlib.varifold import (
    Varifold,
    VarifoldSet,
    compute_varifolds,
    signed_norms,
    sign_consistency_pass,
    compute_signed_curvatures,
)

__version__ = '0.1.0'

__all__ = [
    'DistributionType', 'Method', 'VarifoldConfig',
    'parse_distribution', 'parse_method',
    'VarifoldError', 'ConfigurationError', 'UpstreamDataError',
    'DegenerateNeighborhoodError', 'UnimplementedMethodError',
    'SurfaceMesh', 'ErrorStatistics',
    'Varifold', 'VarifoldSet', 'compute_varifolds',
    'signed_norms', 'sign_consistency_pass', 'compute_signed_curvatures',
]
