"""Rendering of statement results for the console."""
from enum import Enum
from typing import Any

from rich.console import Group, RenderableType
from rich.table import Table
from rich.text import Text

from cyphershell.handlers import StatementResult

# Update counters reported after a statement, in display order.
COUNTER_LABELS = [
    ("nodes_created", "Added {} nodes"),
    ("nodes_deleted", "Deleted {} nodes"),
    ("relationships_created", "Created {} relationships"),
    ("relationships_deleted", "Deleted {} relationships"),
    ("properties_set", "Set {} properties"),
    ("labels_added", "Added {} labels"),
    ("labels_removed", "Removed {} labels"),
    ("indexes_added", "Added {} indexes"),
    ("indexes_removed", "Removed {} indexes"),
    ("constraints_added", "Added {} constraints"),
    ("constraints_removed", "Removed {} constraints"),
]


class OutputFormat(str, Enum):
    VERBOSE = "verbose"
    PLAIN = "plain"


def format_value(value: Any, quote_strings: bool = True) -> str:
    """
    Render a single value the way Cypher would write it.

    Graph entities are recognised by shape rather than type so that both
    driver objects and lookalikes render the same.
    """
    if value is None:
        return "NULL"
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return f'"{value}"' if quote_strings else value

    kind = value.__class__.__name__
    if kind == "Node":
        labels = "".join(f":{label}" for label in sorted(value.labels))
        props = _format_properties(dict(value))
        return f"({labels}{' ' + props if props else ''})"
    if kind == "Relationship":
        props = _format_properties(dict(value))
        return f"[:{value.type}{' ' + props if props else ''}]"
    if kind == "Path":
        return _format_path(value)

    if isinstance(value, dict):
        return "{" + ", ".join(f"{k}: {format_value(v)}" for k, v in value.items()) + "}"
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(format_value(v) for v in value) + "]"
    return str(value)


def _format_properties(props: dict[str, Any]) -> str:
    if not props:
        return ""
    return "{" + ", ".join(f"{k}: {format_value(v)}" for k, v in props.items()) + "}"


def _format_path(path: Any) -> str:
    nodes = list(path.nodes)
    if not nodes:
        return ""
    parts = [format_value(nodes[0])]
    previous = nodes[0]
    for relationship, node in zip(path.relationships, nodes[1:]):
        rel = format_value(relationship)
        if relationship.start_node.element_id == previous.element_id:
            parts.append(f"-{rel}->")
        else:
            parts.append(f"<-{rel}-")
        parts.append(format_value(node))
        previous = node
    return "".join(parts)


class PrettyPrinter:
    """Turns a StatementResult into something the console can print."""

    def __init__(self, output_format: OutputFormat = OutputFormat.VERBOSE):
        self.format_mode = OutputFormat(output_format)

    def format(self, result: StatementResult) -> RenderableType:
        if self.format_mode is OutputFormat.PLAIN:
            return self.format_plain(result)
        return self.format_verbose(result)

    def format_plain(self, result: StatementResult) -> str:
        lines = [", ".join(result.keys)]
        for record in result.records:
            lines.append(", ".join(format_value(record.get(key)) for key in result.keys))
        return "\n".join(lines)

    def format_verbose(self, result: StatementResult) -> RenderableType:
        table = Table(show_header=True,
                      header_style="bold bright_blue",
                      border_style="bright_blue")
        for key in result.keys:
            table.add_column(key, overflow="fold")
        for record in result.records:
            # Top-level strings are shown bare inside table cells.
            table.add_row(*(Text(format_value(record.get(key), quote_strings=False)) for key in result.keys))

        return Group(table, Text(self.format_summary(result), style="dim"))

    def format_summary(self, result: StatementResult) -> str:
        count = len(result.records)
        line = f"{count} row{'s' if count != 1 else ''} available"

        summary = result.summary
        available = getattr(summary, "result_available_after", None)
        consumed = getattr(summary, "result_consumed_after", None)
        if available is not None:
            line += f" after {available} ms"
            if consumed is not None:
                line += f", consumed after another {consumed} ms"

        updates = self.format_counters(getattr(summary, "counters", None))
        if updates:
            line += "\n" + updates
        return line

    @staticmethod
    def format_counters(counters: Any) -> str:
        if counters is None:
            return ""
        parts = []
        for attribute, label in COUNTER_LABELS:
            amount = getattr(counters, attribute, 0)
            if isinstance(amount, int) and amount > 0:
                parts.append(label.format(amount))
        return ", ".join(parts)
