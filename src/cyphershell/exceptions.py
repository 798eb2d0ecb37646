"""Errors raised by the shell core.

Every error is raised where it is detected and propagates unchanged up to the
runner, which decides how to display it.
"""
from typing import Optional


class ShellError(Exception):
    """Base class for all shell errors."""
    pass


class ShellConnectionError(ShellError):
    """Raised when the database cannot be reached or authentication fails."""
    pass


class StateError(ShellError):
    """Raised when an operation is not allowed in the current session state."""
    pass


class AlreadyConnectedError(StateError):
    """Raised when connecting a session that is already connected."""
    pass


class NotConnectedError(StateError):
    """Raised when an operation requires a connection."""

    def __init__(self, message: str = "Not connected to Neo4j"):
        super().__init__(message)


class ArgumentCountError(ShellError):
    """Raised when a command is invoked with the wrong number of arguments."""
    pass


class UnknownCommandError(ShellError):
    """Raised when a line carries the command marker but names no command."""
    pass


class StatementError(ShellError):
    """Raised when the server rejects a statement.

    The server message is kept verbatim; the status code, when known, is
    available as ``code``.
    """

    def __init__(self, message: str, code: Optional[str] = None):
        super().__init__(message)
        self.code = code


class ParameterError(ShellError):
    """Raised when a parameter literal cannot be evaluated."""
    pass


class ExitRequested(Exception):
    """Raised by the exit command to stop the run loop."""

    def __init__(self, code: int = 0):
        super().__init__(f"Exit requested with code {code}")
        self.code = code
