"""
Shared method registry for pluggable computational methods.

Usage
-----
    neighborhood_backends = MethodRegistry("neighborhood")
    neighborhood_backends.register("kdtree", KDTreeNeighborhood)
    cls = neighborhood_backends["kdtree"]
    neighborhood_backends.available()  # ["kdtree"]
"""

from typing import Callable, Hashable


class MethodRegistry:
    """Registry for pluggable computational methods.

    Parameters
    ----------
    name : str
        Human-readable name for error messages (e.g., "neighborhood").
    """

    def __init__(self, name: str):
        self.name = name
        self._methods: dict[Hashable, Callable] = {}

    def register(self, key: Hashable, fn: Callable) -> None:
        """Register a method under the given key."""
        self._methods[key] = fn

    def __getitem__(self, key: Hashable) -> Callable:
        if key not in self._methods:
            raise KeyError(
                f"Unknown {self.name} method: {key!r}. "
                f"Available: {self.available()}"
            )
        return self._methods[key]

    def __contains__(self, key: Hashable) -> bool:
        return key in self._methods

    def available(self) -> list[str]:
        """Return list of registered method names."""
        return [str(k) for k in self._methods.keys()]
