"""
Field sinks: where per-face or per-vertex results are handed off.

The estimators never render or persist anything themselves. A sink accepts
named scalar and vector fields attached to faces or vertices; concrete
sinks draw them (polyscope), keep them in memory or write them to disk
(``varifoldlib.data.JsonFieldSink``).
"""

from abc import ABC, abstractmethod

import numpy as np

ELEMENTS = ("faces", "vertices")


def _check_on(on: str) -> str:
    if on not in ELEMENTS:
        raise ValueError(f"Fields attach to 'faces' or 'vertices', got {on!r}")
    return on


class FieldSink(ABC):
    """Receiver of named per-element fields."""

    @abstractmethod
    def add_scalar_field(self, name: str, values, on: str = "faces") -> None:
        """Attach a scalar field of shape (n,)."""

    @abstractmethod
    def add_vector_field(self, name: str, values, on: str = "faces") -> None:
        """Attach a vector field of shape (n, 3)."""


class MemoryFieldSink(FieldSink):
    """Keeps fields in dictionaries, keyed by name.

    ``scalars[name]`` and ``vectors[name]`` hold ``(on, array)`` pairs.
    """

    def __init__(self):
        self.scalars: dict[str, tuple[str, np.ndarray]] = {}
        self.vectors: dict[str, tuple[str, np.ndarray]] = {}

    def add_scalar_field(self, name: str, values, on: str = "faces") -> None:
        self.scalars[name] = (_check_on(on),
                              np.array(values, dtype=np.float64).reshape(-1))

    def add_vector_field(self, name: str, values, on: str = "faces") -> None:
        self.vectors[name] = (_check_on(on),
                              np.array(values, dtype=np.float64).reshape(-1, 3))

    def __contains__(self, name: str) -> bool:
        return name in self.scalars or name in self.vectors

    def names(self) -> list[str]:
        return list(self.scalars) + list(self.vectors)
