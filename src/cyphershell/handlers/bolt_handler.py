"""Neo4j session handling: connection/transaction state and statement execution."""
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from neo4j import GraphDatabase
from neo4j.exceptions import DriverError, Neo4jError, ResultConsumedError, TransactionError

from cyphershell.config import ConnectionConfig
from cyphershell.exceptions import (
    AlreadyConnectedError,
    NotConnectedError,
    ShellConnectionError,
    StateError,
    StatementError,
)

logger = logging.getLogger(__name__)


class SessionState(Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    CONNECTED_IN_TRANSACTION = "connected in transaction"


@dataclass
class StatementResult:
    """Records and summary of one executed statement."""
    keys: list[str]
    records: list[dict[str, Any]] = field(default_factory=list)
    summary: Any = None


def _server_message(error: Neo4jError) -> str:
    return getattr(error, "message", None) or str(error)


class BoltStateHandler:
    """Owns the session state machine and proxies statements to the Neo4j driver.

    Connecting while already connected raises AlreadyConnectedError; call
    disconnect() first to switch servers.
    """

    def __init__(self, driver_factory: Callable[..., Any] = GraphDatabase.driver,
                 database: Optional[str] = None):
        """
        Args:
            driver_factory: Callable building a driver from (url, auth=...)
            database: Database name for the session, server default when None
        """
        self._driver_factory = driver_factory
        self.database = database
        self.driver = None
        self._session = None
        self._transaction = None
        self._state = SessionState.DISCONNECTED

    @property
    def state(self) -> SessionState:
        return self._state

    def is_connected(self) -> bool:
        return self._state is not SessionState.DISCONNECTED

    def connect(self, config: ConnectionConfig):
        """
        Open a driver and session for the given configuration.

        Raises:
            AlreadyConnectedError: If a connection is already open
            ShellConnectionError: If the server cannot be reached or rejects the credentials
        """
        if self.is_connected():
            raise AlreadyConnectedError(f"Already connected to {config.driver_url}")

        driver = None
        try:
            driver = self._driver_factory(config.driver_url, auth=config.auth)
            driver.verify_connectivity()
            session = driver.session(database=self.database)
        except (Neo4jError, DriverError, ValueError, OSError) as e:
            if driver is not None:
                driver.close()
            logger.debug("Connection to %s failed: %s", config.driver_url, e)
            message = _server_message(e) if isinstance(e, Neo4jError) else str(e)
            raise ShellConnectionError(f"Unable to connect to {config.driver_url}: {message}") from e

        self.driver = driver
        self._session = session
        self._state = SessionState.CONNECTED
        logger.debug("Connected to %s", config.driver_url)

    def disconnect(self):
        """Close the session and driver. Does nothing when already disconnected."""
        if not self.is_connected():
            return
        try:
            if self._transaction is not None:
                self._transaction.close()
            self._session.close()
            self.driver.close()
        finally:
            self._transaction = None
            self._session = None
            self.driver = None
            self._state = SessionState.DISCONNECTED
            logger.debug("Disconnected")

    def _require_connected(self):
        if not self.is_connected():
            raise NotConnectedError()

    def begin_transaction(self):
        """
        Open an explicit transaction.

        Raises:
            NotConnectedError: If disconnected
            StateError: If a transaction is already open
        """
        self._require_connected()
        if self._state is SessionState.CONNECTED_IN_TRANSACTION:
            raise StateError("There is already an open transaction")
        try:
            self._transaction = self._session.begin_transaction()
        except Neo4jError as e:
            raise StatementError(_server_message(e), getattr(e, "code", None)) from e
        except DriverError as e:
            raise ShellConnectionError(str(e)) from e
        self._state = SessionState.CONNECTED_IN_TRANSACTION
        logger.debug("Transaction opened")

    def _end_transaction(self, commit: bool):
        self._require_connected()
        if self._state is not SessionState.CONNECTED_IN_TRANSACTION:
            raise StateError("There is no open transaction to " + ("commit" if commit else "rollback"))
        transaction = self._transaction
        try:
            if commit:
                transaction.commit()
            else:
                transaction.rollback()
        except Neo4jError as e:
            raise StatementError(_server_message(e), getattr(e, "code", None)) from e
        except DriverError as e:
            raise StatementError(str(e)) from e
        finally:
            self._transaction = None
            self._state = SessionState.CONNECTED
        logger.debug("Transaction %s", "committed" if commit else "rolled back")

    def commit_transaction(self):
        """Commit the open transaction. Raises StateError when none is open."""
        self._end_transaction(commit=True)

    def rollback_transaction(self):
        """Roll back the open transaction. Raises StateError when none is open."""
        self._end_transaction(commit=False)

    def reset(self):
        """
        Return to the plain connected state, discarding any open transaction.

        Raises:
            NotConnectedError: If disconnected
        """
        self._require_connected()
        transaction = self._transaction
        self._transaction = None
        self._state = SessionState.CONNECTED
        if transaction is not None:
            try:
                transaction.close()
            except (Neo4jError, DriverError) as e:
                raise StatementError(f"Transaction could not be discarded cleanly: {e}") from e
        logger.debug("Session reset")

    def run_statement(self, statement: str,
                      parameters: Optional[dict[str, Any]] = None) -> Optional[StatementResult]:
        """
        Execute a Cypher statement, inside the open transaction if there is one.

        Args:
            statement: Cypher statement text
            parameters: Values bound to the statement's $parameters

        Returns:
            StatementResult, or None for statements that produce no columns

        Raises:
            NotConnectedError: If disconnected
            StatementError: If the server rejects the statement, or the open
                transaction can no longer run it
            ShellConnectionError: If the connection is lost
        """
        self._require_connected()
        runner = self._transaction if self._transaction is not None else self._session
        logger.debug("Running statement: %s", statement)

        try:
            result = runner.run(statement, parameters or {})
            keys = list(result.keys())
            records = [{key: record[key] for key in keys} for record in result]
            summary = result.consume()
        except Neo4jError as e:
            raise StatementError(_server_message(e), getattr(e, "code", None)) from e
        except (TransactionError, ResultConsumedError) as e:
            # Client-side misuse of a live connection, not a lost one.
            raise StatementError(str(e)) from e
        except DriverError as e:
            raise ShellConnectionError(str(e)) from e

        if not keys:
            return None
        return StatementResult(keys=keys, records=records, summary=summary)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.disconnect()
