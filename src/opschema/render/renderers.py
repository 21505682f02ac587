from __future__ import annotations

import json
from typing import Iterable

from rich import box
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich.tree import Tree

from opschema.core import events as ev
from opschema.errors import ValidationError

RULE_WIDTH = 64
RULE_LINE = "-" * RULE_WIDTH
MAX_LISTED_ERRORS = 20


def run_events(events: Iterable[ev.OpschemaEvent], renderer: "Renderer") -> int:
    exit_code = 0
    for event in events:
        renderer.handle(event)
        if isinstance(event, ev.ValidationCompleted):
            exit_code = 0 if event.ok else 1
    renderer.close()
    return exit_code


class Renderer:
    def handle(self, event: ev.OpschemaEvent) -> None:  # noqa: D401
        """Handle a single event."""

    def close(self) -> None:
        return None


class ValidationPlainRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._errors: list[str] = []

    def handle(self, event: ev.OpschemaEvent) -> None:
        if isinstance(event, ev.ValidationStarted):
            self.console.print(f"Validating {event.label} ({event.kind}, {event.presence})\n{RULE_LINE}")
            return
        if isinstance(event, ev.BatchStarted):
            self.console.print(
                f"Validating {event.label}: {event.total} values on {event.workers} workers\n{RULE_LINE}"
            )
            return
        if isinstance(event, ev.SchemaInvalid):
            self.console.print(f"Schema FAIL: {escape(event.message)}")
            return
        if isinstance(event, ev.ValidationRejected):
            prefix = _index_prefix(event.index)
            for item in event.errors:
                self._errors.append(f"{prefix}{_format_error_item(item)}")
            return
        if isinstance(event, ev.BatchCompleted):
            self.console.print(f"Passed: {event.passed}")
            self.console.print(f"Failed: {event.failed}")
            return
        if isinstance(event, ev.ValidationCompleted):
            if self._errors:
                self.console.print("")
                self.console.print("Errors")
                self.console.print(RULE_LINE)
                for error in self._errors[:MAX_LISTED_ERRORS]:
                    self.console.print(f"- {error}")
                if len(self._errors) > MAX_LISTED_ERRORS:
                    self.console.print(f"...and {len(self._errors) - MAX_LISTED_ERRORS} more")
            self.console.print("")
            if event.ok:
                self.console.print("VALIDATE OK")
            else:
                self.console.print("VALIDATE FAIL")


class ValidationRichRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._label = ""
        self._results: list[tuple[str, str]] = []
        self._errors: list[str] = []
        self._schema_errors: list[str] = []

    def handle(self, event: ev.OpschemaEvent) -> None:
        if isinstance(event, (ev.ValidationStarted, ev.BatchStarted)):
            self._label = event.label
            return
        if isinstance(event, ev.ValidationPassed):
            self._results.append((_result_name(event.label, event.index), "success"))
            return
        if isinstance(event, ev.ValidationRejected):
            self._results.append((_result_name(event.label, event.index), "failed"))
            prefix = _index_prefix(event.index)
            for item in event.errors:
                self._errors.append(f"{prefix}{_format_error_item(item)}")
            return
        if isinstance(event, ev.SchemaInvalid):
            self._schema_errors.append(event.message)
            return
        if isinstance(event, ev.ValidationCompleted):
            self._render_summary(event)

    def _render_summary(self, event: ev.ValidationCompleted) -> None:
        self.console.print(f"Validation: {self._label}")
        self.console.print(RULE_LINE)
        if self._results:
            table = Table(show_header=True, box=box.MINIMAL)
            table.add_column("Value", style="bold")
            table.add_column("Status")
            for name, status in self._results:
                table.add_row(name, _status_text(status))
            self.console.print(table)
        if self._schema_errors:
            body = "\n".join(f"- {escape(message)}" for message in self._schema_errors)
            self.console.print(
                Panel(body, title="Schema error", box=box.ROUNDED, title_align="left", border_style="red3")
            )
        if self._errors:
            lines = [f"- {error}" for error in self._errors[:MAX_LISTED_ERRORS]]
            if len(self._errors) > MAX_LISTED_ERRORS:
                lines.append(f"...and {len(self._errors) - MAX_LISTED_ERRORS} more")
            self.console.print(
                Panel(
                    "\n".join(lines),
                    title=f"Errors ({len(self._errors)})",
                    box=box.ROUNDED,
                    title_align="left",
                )
            )
        self.console.print("")
        overall = "success" if event.ok else "failed"
        self.console.print(Text.assemble(Text("Validation status: "), _status_badge(overall)))


class ValidationJsonRenderer(Renderer):
    def __init__(self, console: Console):
        self.console = console
        self._errors: list[dict[str, object]] = []
        self._passed = 0
        self._failed = 0

    def handle(self, event: ev.OpschemaEvent) -> None:
        if isinstance(event, ev.ValidationPassed):
            self._passed += 1
            return
        if isinstance(event, ev.ValidationRejected):
            self._failed += 1
            for item in event.errors:
                entry: dict[str, object] = dict(item)
                if event.index is not None:
                    entry["index"] = event.index
                self._errors.append(entry)
            return
        if isinstance(event, ev.SchemaInvalid):
            self._errors.append({"field": "", "rule": "schema", "message": event.message})
            return
        if isinstance(event, ev.ValidationCompleted):
            payload = {
                "ok": event.ok,
                "label": event.label,
                "passed": self._passed,
                "failed": self._failed,
                "errors": self._errors,
            }
            self.console.print(json.dumps(payload, indent=2, sort_keys=True), markup=False, highlight=False)


def error_tree(error: ValidationError, *, label: str = "value") -> Tree:
    tree = Tree(_node_text(label, error))
    _add_details(tree, error)
    return tree


def _add_details(branch: Tree, error: ValidationError) -> None:
    for detail in error.details:
        child = branch.add(_node_text(detail.field or detail.path or "(root)", detail))
        _add_details(child, detail)


def _node_text(name: str, error: ValidationError) -> Text:
    style = "bold" if error.details else "red"
    return Text.assemble(
        Text(name, style=style),
        Text(f" [{error.rule}] ", style="bright_black"),
        Text(error.message),
    )


def _format_error_item(item: dict[str, str]) -> str:
    field = item.get("field") or "(root)"
    return escape(f"{field}: {item.get('message', '')} ({item.get('rule', '')})")


def _index_prefix(index: int | None) -> str:
    if index is None:
        return ""
    return f"#{index} "


def _result_name(label: str, index: int | None) -> str:
    if index is None:
        return label
    return f"{label}[{index}]"


def _status_badge(status: str) -> Text:
    normalized = status.strip().lower()
    label = {
        "success": "ok",
        "failed": "fail",
    }.get(normalized, normalized)
    style = {
        "success": "bold black on green3",
        "failed": "bold white on red3",
    }.get(normalized, "bold white on grey35")
    return Text(f" {label} ", style=style)


def _status_text(status: str) -> Text:
    normalized = status.strip().lower()
    style = {
        "success": "green",
        "failed": "red",
    }.get(normalized, "default")
    word = {"success": "ok", "failed": "fail"}.get(normalized, normalized)
    return Text(word, style=style)
