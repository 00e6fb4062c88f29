"""Core tool types: definitions, contexts, edit records and path helpers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


class ToolError(Exception):
    """A tool invocation failed; the message is reported back to the model."""


@dataclass(frozen=True)
class ToolDefinition:
    """Name, description and JSON-schema parameters of a tool."""

    name: str
    description: str
    parameters: dict[str, Any]


@dataclass
class EditRecord:
    """What a file looked like around an edit or write, for later restoring."""

    file_path: Path
    # Full content before the operation; None when the file did not exist.
    pre_snapshot: str | None
    # (old_text, new_text) pairs in application order; empty for writes.
    edits: list[tuple[str, str]] = field(default_factory=list)
    # Full content after the operation; set for writes, None for edits.
    post_snapshot: str | None = None
    reverted: bool = False


class EditStore:
    """Numbered store of edit records, ids starting at 1."""

    def __init__(self) -> None:
        self._next_id = 1
        self._records: dict[int, EditRecord] = {}

    def insert(self, record: EditRecord) -> int:
        """Store a record and return its new id."""
        edit_id = self._next_id
        self._next_id += 1
        self._records[edit_id] = record
        return edit_id

    def get(self, edit_id: int) -> EditRecord | None:
        """Return the record with this id, or None."""
        return self._records.get(edit_id)

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, edit_id: object) -> bool:
        return edit_id in self._records


@dataclass
class ToolContext:
    """Shared state handed to every tool execution."""

    cwd: Path
    edit_store: EditStore = field(default_factory=EditStore)
    stop: threading.Event = field(default_factory=threading.Event)
    lsp_dirty: list[Path] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.cwd = Path(self.cwd)


class Tool(ABC):
    """A tool the model can invoke."""

    @abstractmethod
    def definition(self) -> ToolDefinition:
        """Return the tool's schema definition."""

    @abstractmethod
    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        """Run the tool; return its output or raise ToolError."""

    @property
    def name(self) -> str:
        return self.definition().name


@dataclass(frozen=True)
class TruncatedOutput:
    """Tool output after size limits were applied."""

    content: str
    truncated: bool
    original_size: int
    exit_code: int | None = None


def _text_lines(text: str) -> list[str]:
    """Split on newlines, dropping a final empty piece and trailing carriage returns."""
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def _normalize_lexical(path: Path) -> Path:
    parts: list[str] = []
    anchor = path.anchor
    for part in path.parts:
        if part == "..":
            if parts and not (anchor and len(parts) == 1):
                parts.pop()
        elif part != ".":
            parts.append(part)
    return Path(*parts) if parts else Path()


def resolve_path(cwd: Path | str, requested: str) -> Path:
    """Resolve ``requested`` under ``cwd``, refusing anything outside it."""
    cwd = Path(cwd)
    joined = cwd if requested == "" else cwd / requested
    try:
        cwd_canonical = cwd.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise ToolError(f"Cannot resolve repo root: {exc}") from exc

    outside = ToolError(
        f"Path '{requested}' is outside the repo root ({cwd_canonical})"
    )
    # Lexical check first, so traversal to missing targets reports the escape.
    if not _normalize_lexical(joined).is_relative_to(cwd_canonical):
        raise outside

    try:
        canonical = joined.resolve(strict=True)
    except (OSError, RuntimeError) as exc:
        raise ToolError(f"Path '{requested}' does not exist") from exc

    # Symlinks may point elsewhere once resolved.
    if not canonical.is_relative_to(cwd_canonical):
        raise outside
    return canonical


def truncate_output(content: str, max_lines: int, max_bytes: int) -> TruncatedOutput:
    """Cap ``content`` at ``max_bytes`` bytes, else at ``max_lines`` lines."""
    encoded = content.encode("utf-8")
    original_size = len(encoded)
    if original_size > max_bytes:
        head = encoded[:max_bytes].decode("utf-8", errors="ignore")
        return TruncatedOutput(
            content=head + "\n\n[Output truncated: exceeded max size]",
            truncated=True,
            original_size=original_size,
        )
    lines = _text_lines(content)
    if len(lines) > max_lines:
        body = "\n".join(lines[:max_lines])
        return TruncatedOutput(
            content=f"{body}\n\n[Output truncated: {len(lines)} lines (limit {max_lines})]",
            truncated=True,
            original_size=original_size,
        )
    return TruncatedOutput(content=content, truncated=False, original_size=original_size)