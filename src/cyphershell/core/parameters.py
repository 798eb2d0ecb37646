"""Named query parameters, evaluated by the database itself."""
import logging
import re
from typing import Any, Optional

from cyphershell.exceptions import ParameterError, StatementError
from cyphershell.handlers import BoltStateHandler

logger = logging.getLogger(__name__)

NAME_PATTERN = re.compile(r"^[^\W\d]\w*$")


class ParameterStore:
    """Holds the parameters bound to every statement the shell runs.

    Values are produced by running ``RETURN <literal>`` on the live session,
    so they get exactly the types Cypher would give them.
    """

    def __init__(self, bolt_handler: BoltStateHandler):
        self.bolt = bolt_handler
        self._params: dict[str, Any] = {}

    def set(self, name: str, literal: str) -> Any:
        """
        Evaluate a Cypher literal and store the result under ``name``.

        Args:
            name: Parameter name, referenced as $name in statements
            literal: Cypher expression, e.g. ``99``, ``'bob'`` or ``[1, 2]``

        Returns:
            The evaluated value

        Raises:
            ParameterError: If the name is invalid, the shell is not connected,
                or the expression does not evaluate
        """
        if not NAME_PATTERN.match(name):
            raise ParameterError(f"Invalid parameter name: {name}")
        if not self.bolt.is_connected():
            raise ParameterError(f"Failed to set value of parameter {name}: not connected to Neo4j")

        # The name is escaped so keywords like `count` are usable.
        statement = f"RETURN {literal} AS `{name}`"
        try:
            result = self.bolt.run_statement(statement, self.get_all())
        except StatementError as e:
            raise ParameterError(f"Failed to set value of parameter {name}: {e}") from e

        if result is None or not result.records:
            raise ParameterError(f"Failed to set value of parameter {name}")

        value = result.records[0][name]
        self._params[name] = value
        logger.debug("Parameter %s set to %r", name, value)
        return value

    def unset(self, name: str) -> Optional[Any]:
        """Remove ``name``. Returns the previous value, or None when it was not set."""
        return self._params.pop(name, None)

    def get_all(self) -> dict[str, Any]:
        return dict(self._params)

    def clear(self):
        self._params.clear()

    def __contains__(self, name: str) -> bool:
        return name in self._params

    def __len__(self) -> int:
        return len(self._params)
