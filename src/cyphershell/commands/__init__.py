"""Built-in command handling for cypher-shell."""

from .registry import (
    COMMAND_MARKER,
    CommandInvocation,
    CommandRegistry,
    CommandSpec,
    split_command,
    tokenize,
)
from .builtins import ShellCapabilities, register_builtins

__all__ = [
    "COMMAND_MARKER",
    "CommandInvocation",
    "CommandRegistry",
    "CommandSpec",
    "ShellCapabilities",
    "register_builtins",
    "split_command",
    "tokenize",
]
