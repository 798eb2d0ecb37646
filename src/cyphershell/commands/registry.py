"""Command registration and dispatch for shell built-ins."""
import logging
import shlex
from dataclasses import dataclass
from typing import Callable, Optional

from cyphershell.exceptions import ArgumentCountError

logger = logging.getLogger(__name__)

COMMAND_MARKER = ":"

Executor = Callable[[list[str]], None]


@dataclass(frozen=True)
class CommandSpec:
    """A built-in command: its name, arity and the function that runs it."""
    name: str
    executor: Executor
    min_args: int = 0
    max_args: Optional[int] = 0  # None means any number
    usage: str = ""
    description: str = ""
    greedy: bool = False  # last argument takes the rest of the line verbatim

    def __post_init__(self):
        if not self.name.startswith(COMMAND_MARKER) or len(self.name) < 2:
            raise ValueError(f"Command names must start with '{COMMAND_MARKER}': {self.name!r}")
        if self.max_args is not None and self.max_args < self.min_args:
            raise ValueError(f"max_args is lower than min_args for {self.name}")
        if self.greedy and not self.max_args:
            raise ValueError(f"A greedy command needs a fixed, positive max_args: {self.name}")

    def accepts(self, count: int) -> bool:
        if count < self.min_args:
            return False
        return self.max_args is None or count <= self.max_args


@dataclass(frozen=True)
class CommandInvocation:
    spec: CommandSpec
    raw_args: str = ""


def split_command(line: str) -> Optional[tuple[str, str]]:
    """
    Split a command line into its name and raw argument string.

    Returns:
        (name, raw_args), or None when the line is not a command
    """
    line = line.strip()
    if not line.startswith(COMMAND_MARKER):
        return None
    parts = line.split(maxsplit=1)
    name = parts[0]
    raw_args = parts[1].strip() if len(parts) > 1 else ""
    return name, raw_args


def tokenize(raw_args: str, limit: Optional[int] = None) -> list[str]:
    """
    Split arguments on whitespace, keeping quoted segments together.

    Args:
        raw_args: Argument string following the command name
        limit: When given, at most ``limit`` tokens are returned and the last
            one is the unparsed remainder of the string

    Raises:
        ValueError: On an unterminated quote
    """
    lexer = shlex.shlex(raw_args, posix=True)
    lexer.whitespace_split = True
    lexer.commenters = ""

    tokens: list[str] = []
    while limit is None or len(tokens) < limit - 1:
        token = lexer.get_token()
        if token is None:
            return tokens
        tokens.append(token)

    rest = raw_args[lexer.instream.tell():].strip()
    if rest:
        tokens.append(rest)
    return tokens


class CommandRegistry:
    """Maps command names to their specs and runs invocations."""

    def __init__(self):
        self._commands: dict[str, CommandSpec] = {}

    def register(self, spec: CommandSpec, replace: bool = False):
        """
        Add a command.

        Raises:
            ValueError: If the name is taken and ``replace`` is not set
        """
        if spec.name in self._commands and not replace:
            raise ValueError(f"Command already registered: {spec.name}")
        self._commands[spec.name] = spec

    def get(self, name: str) -> Optional[CommandSpec]:
        return self._commands.get(name)

    def names(self) -> set[str]:
        return set(self._commands)

    def specs(self) -> list[CommandSpec]:
        return sorted(self._commands.values(), key=lambda spec: spec.name)

    def resolve(self, line: str) -> Optional[CommandInvocation]:
        """Return the invocation for ``line``, or None if it names no registered command."""
        split = split_command(line)
        if split is None:
            return None
        name, raw_args = split
        spec = self._commands.get(name)
        if spec is None:
            return None
        return CommandInvocation(spec=spec, raw_args=raw_args)

    def invoke(self, invocation: CommandInvocation):
        """
        Check the argument count and run the command.

        Raises:
            ArgumentCountError: If the arguments do not match the command's arity
        """
        spec = invocation.spec
        try:
            args = tokenize(invocation.raw_args, spec.max_args if spec.greedy else None)
        except ValueError as e:
            raise ArgumentCountError(
                f"Incorrect number of arguments for {spec.name}: {e}\nusage: {spec.name} {spec.usage}".rstrip()
            ) from e

        if not spec.accepts(len(args)):
            raise ArgumentCountError(
                f"Incorrect number of arguments.\nusage: {spec.name} {spec.usage}".rstrip()
            )

        logger.debug("Invoking %s with %r", spec.name, args)
        spec.executor(args)
