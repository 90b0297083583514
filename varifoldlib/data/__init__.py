"""Data handling: save/load mesh result fields."""

from varifoldlib.data._io import save_fields, load_fields, JsonFieldSink

__all__ = ['save_fields', 'load_fields', 'JsonFieldSink']
