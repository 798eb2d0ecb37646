"""Core shell state for cypher-shell."""

from .parameters import ParameterStore

__all__ = ["ParameterStore"]
