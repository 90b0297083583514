"""
Discrete operators for varifold curvature estimation.

Submodules
----------
kernel       : Radial weighting kernels (RadialKernel)
neighborhood : Radius-ball queries (BruteForceNeighborhood, KDTreeNeighborhood)
normals      : Normal sources per method (Trivial, Dual, Corrected)
curvature    : Kernel-weighted curvature vectors (LocalCurvatureEstimator)
"""

from varifoldlib.operators._registry import MethodRegistry
from varifoldlib.operators.kernel import RadialKernel, kernel_weight, kernel_weight_derivative
from varifoldlib.operators.neighborhood import (
    NeighborhoodQuery,
    BruteForceNeighborhood,
    KDTreeNeighborhood,
    make_neighborhood,
)
from varifoldlib.operators.normals import (
    SamplePoint,
    SampleSet,
    NormalSource,
    TrivialNormalSource,
    DualNormalSource,
    CorrectedNormalSource,
    make_normal_source,
)
from varifoldlib.operators.curvature import (
    CurvatureField,
    LocalCurvatureEstimator,
    projection,
)

__all__ = [
    'MethodRegistry',
    'RadialKernel', 'kernel_weight', 'kernel_weight_derivative',
    'NeighborhoodQuery', 'BruteForceNeighborhood', 'KDTreeNeighborhood',
    'make_neighborhood',
    'SamplePoint', 'SampleSet', 'NormalSource',
    'TrivialNormalSource', 'DualNormalSource', 'CorrectedNormalSource',
    'make_normal_source',
    'CurvatureField', 'LocalCurvatureEstimator', 'projection',
]
