import io
import re
from types import SimpleNamespace

import pytest
from rich.console import Console

from cyphershell.config import ConnectionConfig
from cyphershell.handlers import BoltStateHandler
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
    def __init__(self, keys=(), rows=(), summary=None):
        self._keys = list(keys)
        self._records = [FakeRecord(dict(zip(self._keys, row))) for row in rows]
        self._summary = summary or SimpleNamespace(
            result_available_after=1, result_consumed_after=0, counters=None
        )

    def keys(self):
        return tuple(self._keys)

    def __iter__(self):
        return iter(self._records)

    def consume(self):
        return self._summary


RETURN_AS = re.compile(r"^RETURN (?P<expr>.+) AS `(?P<name>\w+)`$")


def evaluate_literal(expr, parameters):
    """Understands just enough Cypher to answer RETURN statements in tests."""
    expr = expr.strip()
    if expr.startswith("$"):
        return parameters[expr[1:]]
    if expr.startswith("'") and expr.endswith("'"):
        return expr[1:-1]
    if expr.startswith("[") and expr.endswith("]"):
        inner = expr[1:-1].strip()
        return [evaluate_literal(part, parameters) for part in inner.split(",")] if inner else []
    if expr == "null":
        return None
    try:
        return int(expr)
    except ValueError:
        return float(expr)


def literal_responder(statement, parameters):
    match = RETURN_AS.match(statement)
    if match:
        value = evaluate_literal(match.group("expr"), parameters)
        return FakeResult([match.group("name")], [[value]])
    if statement.startswith("RETURN "):
        expr = statement[len("RETURN "):]
        return FakeResult([expr], [[evaluate_literal(expr, parameters)]])
    return FakeResult()


class FakeTransaction:
    def __init__(self, responder, commit_error=None):
        self._responder = responder
        self._commit_error = commit_error
        self.statements = []
        self.committed = False
        self.rolled_back = False
        self.closed = False

    def run(self, statement, parameters=None):
        self.statements.append((statement, parameters))
        return self._responder(statement, parameters or {})

    def commit(self):
        if self._commit_error:
            raise self._commit_error
        self.committed = True

    def rollback(self):
        self.rolled_back = True

    def close(self):
        self.closed = True


class FakeSession:
    def __init__(self, responder=literal_responder):
        self.responder = responder
        self.statements = []
        self.transactions = []
        self.commit_error = None
        self.closed = False

    def run(self, statement, parameters=None):
        self.statements.append((statement, parameters))
        return self.responder(statement, parameters or {})

    def begin_transaction(self):
        transaction = FakeTransaction(self.responder, self.commit_error)
        self.transactions.append(transaction)
        return transaction

    def close(self):
        self.closed = True


class FakeDriver:
    def __init__(self, session, connect_error=None):
        self._session = session
        self._connect_error = connect_error
        self.database = None
        self.closed = False

    def verify_connectivity(self):
        if self._connect_error:
            raise self._connect_error

    def session(self, database=None):
        self.database = database
        return self._session

    def close(self):
        self.closed = True


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture
def fake_driver(fake_session):
    return FakeDriver(fake_session)


@pytest.fixture
def bolt_handler(fake_driver):
    """A handler whose driver factory hands out the fake driver."""
    return BoltStateHandler(driver_factory=lambda url, auth=None: fake_driver)


@pytest.fixture
def connection_config():
    return ConnectionConfig(host="localhost", port=7687, username="neo4j", password="secret")


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def console(output):
    return Console(file=output, width=120, color_system=None, force_terminal=False)


@pytest.fixture
def shell(bolt_handler, console):
    return CypherShell(bolt_handler, PrettyPrinter(), console, Historian())


@pytest.fixture
def connected_shell(shell, connection_config):
    shell.connect(connection_config)
    return shell
