"""Write whole files inside the repository, recording them for restoring."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from repotools.base import (
    EditRecord,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
    _text_lines,
)


def _normalize_under(root: Path, path_str: str) -> Path:
    base = root
    for part in path_str.split("/"):
        if part in ("", "."):
            continue
        base = base.parent if part == ".." else base / part
    return base


class WriteTool(Tool):
    """Create or overwrite a file, creating parent directories as needed."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="write",
            description=(
                "Write content to a file. Creates parent directories if needed. "
                "If the file exists, it is overwritten."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "File path relative to repo root",
                    },
                    "content": {
                        "type": "string",
                        "description": "Content to write to the file",
                    },
                },
                "required": ["path", "content"],
            },
        )

    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        path_str = params.get("path")
        if not isinstance(path_str, str):
            raise ToolError("Missing required field: path")
        content = params.get("content")
        if not isinstance(content, str):
            raise ToolError("Missing required field: content")

        target = ctx.cwd / path_str
        try:
            cwd_canon = ctx.cwd.resolve(strict=True)
        except (OSError, RuntimeError) as exc:
            raise ToolError(f"Cannot resolve repo root: {exc}") from exc

        target_normalized = _normalize_under(cwd_canon, path_str)
        if not target_normalized.is_relative_to(cwd_canon):
            raise ToolError(
                f"Path '{path_str}' resolves outside repo root ({target_normalized})"
            )

        try:
            pre_snapshot: str | None = target.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError):
            pre_snapshot = None

        try:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_bytes(content.encode("utf-8"))
        except OSError as exc:
            raise ToolError(str(exc)) from exc

        ctx.lsp_dirty.append(target_normalized)
        edit_id = ctx.edit_store.insert(
            EditRecord(
                file_path=target_normalized,
                pre_snapshot=pre_snapshot,
                edits=[],
                post_snapshot=content,
                reverted=False,
            )
        )
        line_count = len(_text_lines(content))
        return f"edit_id: {edit_id}\nWritten: {target} ({line_count} lines)"