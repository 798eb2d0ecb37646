"""Database session handlers for cypher-shell."""

from .bolt_handler import BoltStateHandler, SessionState, StatementResult

__all__ = ["BoltStateHandler", "SessionState", "StatementResult"]
