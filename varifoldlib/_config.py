"""
Run configuration: kernel radius, distribution, method and backend.

Tokens are the short command line tags
("fd", "c", "hs" for kernels and "tnfc", "dnfc", "cnfc", "pot", "vi" for
methods). Unknown tokens raise ``ConfigurationError`` instead of falling
back to a default.

Usage
-----
    from varifoldlib import VarifoldConfig

    config = VarifoldConfig(radius=0.3, distribution="c", method="tnfc")
    config.distribution   # DistributionType.CONE
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from varifoldlib._errors import ConfigurationError


class DistributionType(str, Enum):
    """Shape of the radial weighting kernel."""
    FLAT_DISC = "fd"
    CONE = "c"
    HALF_SPHERE = "hs"

    def __str__(self):
        return self.value


class Method(str, Enum):
    """Strategy used to sample positions and normals on the surface."""
    TRIVIAL_NORMAL_FACE_CENTROID = "tnfc"
    DUAL_NORMAL_FACE_CENTROID = "dnfc"
    CORRECTED_NORMAL_FACE_CENTROID = "cnfc"
    PROBABILISTIC_OF_TRIVIALS = "pot"
    VERTEX_INTERPOLATION = "vi"

    def __str__(self):
        return self.value

    @property
    def element(self) -> str:
        """'faces' or 'vertices': the mesh elements carrying one sample."""
        if self is Method.DUAL_NORMAL_FACE_CENTROID:
            return "vertices"
        return "faces"


def _parse_token(token, enum_cls, what: str):
    if isinstance(token, enum_cls):
        return token
    if isinstance(token, str):
        key = token.strip()
        for member in enum_cls:
            if key == member.value or key.upper() == member.name:
                return member
    raise ConfigurationError(
        f"Unknown {what} token {token!r}. "
        f"Expected one of {[m.value for m in enum_cls]}"
    )


def parse_distribution(token) -> DistributionType:
    """Map 'fd', 'c' or 'hs' (or a member name) to a DistributionType."""
    return _parse_token(token, DistributionType, "distribution")


def parse_method(token) -> Method:
    """Map 'tnfc', 'dnfc', 'cnfc', 'pot' or 'vi' (or a member name) to a Method."""
    return _parse_token(token, Method, "method")


def check_radius(radius) -> float:
    """Return ``radius`` as a float, raising if it is not positive and finite."""
    try:
        r = float(radius)
    except (TypeError, ValueError):
        raise ConfigurationError(f"Radius must be a real number, got {radius!r}")
    if not math.isfinite(r) or r <= 0.0:
        raise ConfigurationError(f"Radius must be positive and finite, got {r}")
    return r


@dataclass
class VarifoldConfig:
    """Parameters for a varifold curvature estimation run.

    Attributes
    ----------
    radius : float
        Kernel radius; samples at distance >= radius carry no weight.
    distribution : DistributionType or str
        Kernel shape ('fd', 'c' or 'hs').
    method : Method or str
        Normal sampling method ('tnfc', 'dnfc', 'cnfc', 'pot' or 'vi').
    neighborhood : str
        Registered neighbourhood backend ('brute-force' or 'kdtree').
    workers : int or None
        Thread count for the per-element loop. None runs serially.
    """
    radius: float = 1.0
    distribution: Union[DistributionType, str] = DistributionType.HALF_SPHERE
    method: Union[Method, str] = Method.TRIVIAL_NORMAL_FACE_CENTROID
    neighborhood: str = "brute-force"
    workers: Optional[int] = None

    def __post_init__(self):
        from varifoldlib.operators.neighborhood import neighborhood_backends

        self.radius = check_radius(self.radius)
        self.distribution = parse_distribution(self.distribution)
        self.method = parse_method(self.method)
        if self.neighborhood not in neighborhood_backends:
            raise ConfigurationError(
                f"Unknown neighborhood backend {self.neighborhood!r}. "
                f"Available: {neighborhood_backends.available()}"
            )
        if self.workers is not None and int(self.workers) < 1:
            raise ConfigurationError(
                f"workers must be a positive integer or None, got {self.workers}"
            )
