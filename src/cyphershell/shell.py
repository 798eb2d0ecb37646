"""The shell coordinator: routes input lines to commands or to the database."""
from typing import Any, Optional, Set

from rich.console import Console

from cyphershell.commands import CommandRegistry, register_builtins, split_command
from cyphershell.config import ConnectionConfig
from cyphershell.core import ParameterStore
from cyphershell.exceptions import NotConnectedError, UnknownCommandError
from cyphershell.handlers import BoltStateHandler, StatementResult
from cyphershell.services import Historian, PrettyPrinter


class CypherShell:
    """Single entry point used by the runners.

    Combines the session handler, the parameter store and the command
    registry. Commands only see the capabilities described by
    ``ShellCapabilities``.
    """

    def __init__(self, bolt_handler: BoltStateHandler, printer: PrettyPrinter,
                 console: Console, historian: Optional[Historian] = None):
        self.bolt = bolt_handler
        self.printer = printer
        self.console = console
        self.historian = historian or Historian()
        self.parameters = ParameterStore(bolt_handler)
        self.commands = CommandRegistry()
        register_builtins(self.commands, self, console, self.historian)

    def execute(self, line: str):
        """
        Run one line of input: a built-in command or a Cypher statement.

        Raises:
            UnknownCommandError: If the line starts with ':' but names no command
            NotConnectedError: If a statement is given while disconnected
            ShellError: Any other failure from the command or the database
        """
        line = line.strip()
        if not line:
            return

        invocation = self.commands.resolve(line)
        if invocation is not None:
            self.commands.invoke(invocation)
            return

        split = split_command(line)
        if split is not None:
            raise UnknownCommandError(f"Could not find command {split[0]}, use :help to see available commands")

        result = self.run_statement(line)
        if result is not None:
            self.console.print(self.printer.format(result))

    def run_statement(self, statement: str) -> Optional[StatementResult]:
        """Run a statement with the current parameters bound."""
        if not self.is_connected():
            raise NotConnectedError()
        return self.bolt.run_statement(statement, self.parameters.get_all())

    # Connection

    def connect(self, config: ConnectionConfig):
        self.bolt.connect(config)

    def is_connected(self) -> bool:
        return self.bolt.is_connected()

    def disconnect(self):
        self.bolt.disconnect()
        self.parameters.clear()

    def reset(self):
        # Parameters go even when the old transaction fails to close.
        try:
            self.bolt.reset()
        finally:
            self.parameters.clear()

    # Transactions

    def begin_transaction(self):
        self.bolt.begin_transaction()

    def commit_transaction(self):
        self.bolt.commit_transaction()

    def rollback_transaction(self):
        self.bolt.rollback_transaction()

    # Parameters

    def set(self, name: str, literal: str) -> Any:
        if not self.is_connected():
            raise NotConnectedError(f"Cannot set parameter {name}: not connected to Neo4j")
        return self.parameters.set(name, literal)

    def unset(self, name: str) -> Optional[Any]:
        if not self.is_connected():
            raise NotConnectedError(f"Cannot unset parameter {name}: not connected to Neo4j")
        return self.parameters.unset(name)

    def get_query_params(self) -> dict[str, Any]:
        return self.parameters.get_all()

    def get_command_names(self) -> Set[str]:
        return self.commands.names()
