"""Built-in shell commands."""
from typing import Any, Optional, Protocol

from rich.console import Console
from rich.table import Table
from rich.text import Text

from cyphershell.commands.registry import COMMAND_MARKER, CommandRegistry, CommandSpec
from cyphershell.exceptions import ExitRequested, UnknownCommandError
from cyphershell.services import Historian, format_value


class ShellCapabilities(Protocol):
    """The part of the shell that commands are allowed to drive."""

    def is_connected(self) -> bool: ...

    def begin_transaction(self) -> None: ...

    def commit_transaction(self) -> None: ...

    def rollback_transaction(self) -> None: ...

    def reset(self) -> None: ...

    def set(self, name: str, literal: str) -> Any: ...

    def unset(self, name: str) -> Optional[Any]: ...

    def get_query_params(self) -> dict[str, Any]: ...


def register_builtins(registry: CommandRegistry, shell: ShellCapabilities,
                      console: Console, historian: Historian):
    """Register every built-in command against ``shell``."""

    def show_help(args: list[str]):
        if not args:
            table = Table(show_header=True, header_style="bold bright_blue",
                          border_style="bright_blue", title="Available commands")
            table.add_column("Command", style="bold bright_red")
            table.add_column("Usage")
            table.add_column("Description")
            for spec in registry.specs():
                table.add_row(spec.name, Text(spec.usage), spec.description)
            console.print(table)
            console.print("For help on a specific command type: :help [bold]command[/bold]")
            return

        name = args[0] if args[0].startswith(COMMAND_MARKER) else COMMAND_MARKER + args[0]
        spec = registry.get(name)
        if spec is None:
            raise UnknownCommandError(f"No such command: {args[0]}")
        usage = Text("usage: ", style="bold bright_red")
        usage.append(f"{spec.name} {spec.usage}".rstrip())
        console.print(usage)
        console.print(f"\n{spec.description}", markup=False)

    def set_param(args: list[str]):
        shell.set(args[0], args[1])

    def unset_param(args: list[str]):
        shell.unset(args[0])

    def show_params(args: list[str]):
        params = shell.get_query_params()
        if not params:
            console.print("[dim]No parameters set[/dim]")
            return
        for name in sorted(params):
            console.print(f":param {name} => {format_value(params[name])}", markup=False)

    def show_history(args: list[str]):
        for index, line in enumerate(historian.get_history(), start=1):
            console.print(f"{index:>4}  {line}", markup=False, highlight=False)

    def begin(args: list[str]):
        shell.begin_transaction()

    def commit(args: list[str]):
        shell.commit_transaction()

    def rollback(args: list[str]):
        shell.rollback_transaction()

    def reset(args: list[str]):
        shell.reset()

    def exit_shell(args: list[str]):
        raise ExitRequested(0)

    specs = [
        CommandSpec(":help", show_help, min_args=0, max_args=1, usage="[command]",
                    description="Show this help message, or help for one command"),
        CommandSpec(":set", set_param, min_args=2, max_args=2, greedy=True, usage="name value",
                    description="Set the value of a query parameter; the value is any Cypher expression"),
        CommandSpec(":unset", unset_param, min_args=1, max_args=1, usage="name",
                    description="Remove a query parameter"),
        CommandSpec(":params", show_params, description="Print all currently set query parameters"),
        CommandSpec(":begin", begin, description="Open a transaction"),
        CommandSpec(":commit", commit, description="Commit the currently open transaction"),
        CommandSpec(":rollback", rollback, description="Roll back the currently open transaction"),
        CommandSpec(":reset", reset,
                    description="Discard any open transaction and clear all query parameters"),
        CommandSpec(":history", show_history, description="Print a list of the lines entered so far"),
        CommandSpec(":exit", exit_shell, description="Exit the shell"),
    ]
    for spec in specs:
        registry.register(spec)
