"""
cypher-shell - An interactive command shell for Neo4j.

Runs Cypher statements against a Neo4j session and offers built-in commands
for transactions and query parameters.
"""

__version__ = "1.0.0"

from .shell import CypherShell

__all__ = ["CypherShell"]
