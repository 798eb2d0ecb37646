"""Collaborators of the shell core: output rendering and history."""

from .historian import Historian
from .pretty_printer import OutputFormat, PrettyPrinter, format_value

__all__ = ["Historian", "OutputFormat", "PrettyPrinter", "format_value"]
