"""Run loops driving the shell: interactive prompt or a single statement."""
import logging
from typing import Optional

from rich.console import Console
from rich.prompt import Prompt
from rich.text import Text

from cyphershell.exceptions import ExitRequested, ShellError
from cyphershell.handlers import SessionState
from cyphershell.services import Historian
from cyphershell.shell import CypherShell

logger = logging.getLogger(__name__)


class ShellPrompt(Prompt):
    prompt_suffix = "> "


class ShellRunner:
    """Base class of the run loops."""

    def __init__(self, shell: CypherShell, console: Console):
        self.shell = shell
        self.console = console

    def run_until_end(self) -> int:
        """Run until done and return the process exit code."""
        raise NotImplementedError

    def print_error(self, error: Exception):
        self.console.print(Text(str(error), style="bold bright_red"))


class StringShellRunner(ShellRunner):
    """Executes one statement or command given on the command line."""

    def __init__(self, shell: CypherShell, console: Console, statement: str):
        super().__init__(shell, console)
        self.statement = statement

    def run_until_end(self) -> int:
        try:
            self.shell.execute(self.statement)
        except ExitRequested as e:
            return e.code
        except ShellError as e:
            self.print_error(e)
            return 1
        return 0


class InteractiveShellRunner(ShellRunner):
    """Reads lines from the terminal until :exit or end of input."""

    def __init__(self, shell: CypherShell, console: Console, historian: Historian):
        super().__init__(shell, console)
        self.historian = historian

    def prompt_text(self) -> str:
        marker = "#" if self.shell.bolt.state is SessionState.CONNECTED_IN_TRANSACTION else ""
        return f"[bold bright_blue]neo4j{marker}[/bold bright_blue]"

    def read_line(self) -> str:
        return ShellPrompt.ask(self.prompt_text(), console=self.console)

    def run_until_end(self) -> int:
        while True:
            try:
                line = self.read_line()
            except KeyboardInterrupt:
                self.console.print("\n[bold bright_red]Interrupted. Type :exit to exit.[/bold bright_red]")
                continue
            except EOFError:
                self.console.print()
                return 0

            self.historian.add(line)
            try:
                self.shell.execute(line)
            except ExitRequested as e:
                return e.code
            except ShellError as e:
                logger.debug("Command failed", exc_info=True)
                self.print_error(e)
            except KeyboardInterrupt:
                self.console.print("\n[bold bright_red]Interrupted.[/bold bright_red]")
            except Exception as e:
                # One bad line must not end the session.
                logger.exception("Unexpected error while running %r", line)
                self.console.print(Text(f"Unexpected error: {e}", style="bold bright_red"))


def get_shell_runner(shell: CypherShell, console: Console, historian: Historian,
                     statement: Optional[str] = None) -> ShellRunner:
    """Pick the string runner when a statement was given, the interactive one otherwise."""
    if statement is not None:
        return StringShellRunner(shell, console, statement)
    return InteractiveShellRunner(shell, console, historian)
