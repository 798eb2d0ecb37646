#!/usr/bin/env python3
"""
Command-line interface entry point for cypher-shell.

This module parses the command line, connects the shell and hands over to
the interactive or one-shot runner.
"""
import argparse
import logging
import os
import sys
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler
from rich.prompt import Prompt
from rich.text import Text

from cyphershell import __version__
from cyphershell.config import ConnectionConfig, load_environment, parse_address
from cyphershell.exceptions import ShellError
from cyphershell.handlers import BoltStateHandler
from cyphershell.runner import get_shell_runner
from cyphershell.services import Historian, OutputFormat, PrettyPrinter
from cyphershell.shell import CypherShell

logger = logging.getLogger(__name__)


def build_parser(defaults: ConnectionConfig) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cypher-shell",
        description="A command line shell where you can execute Cypher against a Neo4j instance.",
    )
    parser.add_argument("cypher", nargs="?", default=None,
                        help="an optional Cypher statement to execute and then exit")
    parser.add_argument("-a", "--address", default=f"{defaults.host}:{defaults.port}",
                        help="address and port to connect to (default: %(default)s)")
    parser.add_argument("-u", "--username", default=defaults.username,
                        help="username to connect as (default: %(default)s)")
    parser.add_argument("-p", "--password", default=defaults.password,
                        help="password to connect with")
    parser.add_argument("-d", "--database", default=os.getenv("NEO4J_DATABASE") or None,
                        help="database to connect to (default: server default)")
    parser.add_argument("--format", choices=[f.value for f in OutputFormat], default=OutputFormat.VERBOSE.value,
                        help="desired output format (default: %(default)s)")
    parser.add_argument("--debug", action="store_true", help="print debug logging")
    parser.add_argument("-v", "--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def configure_logging(debug: bool, console: Console):
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )


def print_welcome_message(console: Console, config: ConnectionConfig):
    message = f"Connected to Neo4j at [bold]{config.driver_url}[/bold]"
    if config.username:
        message += f" as user [bold]{config.username}[/bold]"
    message += ".\nType [bold]:help[/bold] for a list of available commands."
    console.print(message)


def main(argv: Optional[list[str]] = None, console: Optional[Console] = None,
         bolt_handler: Optional[BoltStateHandler] = None) -> int:
    """Main entry point for the CLI application. Returns the exit code."""
    load_environment()
    console = console or Console()
    try:
        defaults = ConnectionConfig.from_env()
    except ValueError as e:
        console.print(Text(f"NEO4J_ADDRESS: {e}", style="bold bright_red"))
        return 1
    args = build_parser(defaults).parse_args(argv)
    configure_logging(args.debug, console)

    try:
        host, port = parse_address(args.address)
    except ValueError as e:
        console.print(Text(str(e), style="bold bright_red"))
        return 1

    password = args.password
    if not password and args.cypher is None and sys.stdin.isatty():
        password = Prompt.ask("password", password=True, console=console)

    config = ConnectionConfig(host=host, port=port, username=args.username, password=password)
    logger.debug("Starting shell with %r", config)
    output_format = OutputFormat(args.format)
    historian = Historian()
    shell = CypherShell(
        bolt_handler or BoltStateHandler(database=args.database),
        PrettyPrinter(output_format),
        console,
        historian,
    )

    try:
        shell.connect(config)
    except ShellError as e:
        console.print(Text(f"❌ {e}", style="bold bright_red"))
        return 1

    if output_format is OutputFormat.VERBOSE:
        print_welcome_message(console, config)

    runner = get_shell_runner(shell, console, historian, args.cypher)
    try:
        return runner.run_until_end()
    finally:
        shell.disconnect()


def run():
    sys.exit(main())


if __name__ == "__main__":
    run()
