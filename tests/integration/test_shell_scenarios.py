"""
End-to-end scenarios through the shell, the runners and a fake Neo4j driver.
"""
import io

import pytest
from rich.console import Console

from cyphershell.config import ConnectionConfig
from cyphershell.exceptions import ArgumentCountError, NotConnectedError, StateError
from cyphershell.handlers import BoltStateHandler
from cyphershell.runner import InteractiveShellRunner, StringShellRunner
from cyphershell.services import Historian, PrettyPrinter
from cyphershell.shell import CypherShell


class FakeRecord:
    def __init__(self, data):
        self._data = data

    def keys(self):
        return self._data.keys()

    def __getitem__(self, item):
        return self._data[item]


class FakeResult:
    def __init__(self, keys, rows):
        self._keys = keys
        self._rows = rows

    def keys(self):
        return tuple(self._keys)

    def __iter__(self):
        return iter(FakeRecord(dict(zip(self._keys, row))) for row in self._rows)

    def consume(self):
        return None


class FakeRunner:
    """Answers `RETURN <int or $param> [AS `name`]` and nothing else."""

    def __init__(self, log):
        self.log = log

    def run(self, statement, parameters=None):
        parameters = parameters or {}
        self.log.append(statement)
        if not statement.startswith("RETURN "):
            return FakeResult([], [])
        expr, _, name = statement[len("RETURN "):].partition(" AS ")
        name = name.strip("`") or expr
        value = parameters[expr[1:]] if expr.startswith("$") else int(expr)
        return FakeResult([name], [[value]])


class FakeTransaction(FakeRunner):
    def commit(self):
        self.log.append("COMMIT")

    def rollback(self):
        self.log.append("ROLLBACK")

    def close(self):
        self.log.append("CLOSE")


class FakeSession(FakeRunner):
    def begin_transaction(self):
        self.log.append("BEGIN")
        return FakeTransaction(self.log)

    def close(self):
        pass


class FakeDriver:
    def __init__(self, log):
        self.log = log

    def verify_connectivity(self):
        pass

    def session(self, database=None):
        return FakeSession(self.log)

    def close(self):
        pass


@pytest.fixture
def log():
    return []


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def shell(log, output):
    console = Console(file=output, width=120, color_system=None)
    handler = BoltStateHandler(driver_factory=lambda url, auth=None: FakeDriver(log))
    return CypherShell(handler, PrettyPrinter(), console, Historian())


@pytest.fixture
def config():
    return ConnectionConfig(password="secret")


def test_set_then_unset_parameter(shell, config):
    shell.connect(config)

    shell.execute(":set bob 99")
    assert shell.get_query_params() == {"bob": 99}

    shell.execute(":unset bob")
    assert shell.get_query_params() == {}


def test_plain_statement_is_rendered(shell, config, output):
    shell.connect(config)

    shell.execute("RETURN 999")

    assert "999" in output.getvalue()


def test_parameters_are_bound_to_statements(shell, config, output):
    shell.connect(config)
    shell.execute(":set bob 41")

    shell.execute("RETURN $bob")

    assert "41" in output.getvalue()


def test_set_while_disconnected_reports_not_connected(shell):
    with pytest.raises(NotConnectedError) as excinfo:
        shell.execute(":set bob 99")
    assert "not connected" in str(excinfo.value).lower()


@pytest.mark.parametrize("line", ["RETURN 1", "MATCH (n) RETURN n", "CREATE (n)"])
def test_statements_while_disconnected_fail(shell, line, log):
    with pytest.raises(NotConnectedError):
        shell.execute(line)
    assert log == []


def test_transaction_round_trip(shell, config, log):
    shell.connect(config)

    shell.execute(":begin")
    shell.execute("CREATE (n)")
    shell.execute(":commit")

    assert log == ["BEGIN", "CREATE (n)", "COMMIT"]


def test_reset_discards_transaction_and_parameters(shell, config, log):
    shell.connect(config)
    shell.execute(":set bob 1")
    shell.execute(":begin")

    shell.execute(":reset")

    assert log[-1] == "CLOSE"
    assert shell.get_query_params() == {}
    with pytest.raises(StateError):
        shell.execute(":commit")


def test_help_with_too_many_arguments_changes_nothing(shell, config, log, output):
    shell.connect(config)
    shell.execute(":set bob 1")
    before = list(log)

    with pytest.raises(ArgumentCountError):
        shell.execute(":help extra1 extra2")

    assert log == before
    assert shell.get_query_params() == {"bob": 1}


def test_string_runner_exit_codes(shell, config, output):
    shell.connect(config)

    assert StringShellRunner(shell, shell.console, "RETURN 5").run_until_end() == 0
    assert StringShellRunner(shell, shell.console, ":nope").run_until_end() == 1
    assert "Could not find command :nope" in output.getvalue()


def test_interactive_runner_continues_after_errors(shell, config, output):
    shell.connect(config)
    historian = shell.historian
    lines = iter([":bogus", "RETURN 7", ":history", ":exit", "RETURN 8"])

    runner = InteractiveShellRunner(shell, shell.console, historian)
    runner.read_line = lambda: next(lines)

    assert runner.run_until_end() == 0
    text = output.getvalue()
    assert "Could not find command :bogus" in text
    assert "7" in text
    assert historian.get_history() == [":bogus", "RETURN 7", ":history", ":exit"]


def test_interactive_runner_stops_at_end_of_input(shell, config):
    shell.connect(config)

    def read_line():
        raise EOFError

    runner = InteractiveShellRunner(shell, shell.console, shell.historian)
    runner.read_line = read_line

    assert runner.run_until_end() == 0


def test_interactive_runner_survives_unexpected_errors(shell, config, output):
    shell.connect(config)
    # The fake driver raises KeyError for an unbound parameter.
    lines = iter(["RETURN $missing", "RETURN 9", ":exit"])

    runner = InteractiveShellRunner(shell, shell.console, shell.historian)
    runner.read_line = lambda: next(lines)

    assert runner.run_until_end() == 0
    text = output.getvalue()
    assert "Unexpected error" in text
    assert "9" in text
    assert shell.is_connected()
