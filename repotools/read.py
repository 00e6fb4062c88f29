"""Read a file with line numbers, within line and byte limits."""

from __future__ import annotations

from typing import Any

from repotools.base import Tool, ToolContext, ToolDefinition, ToolError, _text_lines, resolve_path

DEFAULT_LIMIT = 2000
MAX_BYTES = 50 * 1024


def _int_param(params: dict[str, Any], key: str, default: int) -> int:
    value = params.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return max(value, 1)
    return default


class ReadTool(Tool):
    """Show a file's lines with their numbers."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="read",
            description=(
                "Read the contents of a file. Shows line numbers and enforces a limit of "
                "2000 lines / 50 KB. If the file is large, use offset to read a portion."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "path": {
                        "type": "string",
                        "description": "File path relative to repo root",
                    },
                    "offset": {
                        "type": "integer",
                        "description": "Starting line number (1-indexed, default 1)",
                        "minimum": 1,
                    },
                    "limit": {
                        "type": "integer",
                        "description": "Max lines to read (default 2000)",
                        "minimum": 1,
                    },
                },
                "required": ["path"],
            },
        )

    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        path_str = params.get("path")
        if not isinstance(path_str, str):
            raise ToolError("Missing required field: path")

        resolved = resolve_path(ctx.cwd, path_str)
        if not resolved.is_file():
            raise ToolError(f"Not a file: {resolved}")

        offset = _int_param(params, "offset", 1)
        max_lines = _int_param(params, "limit", DEFAULT_LIMIT)

        try:
            text = resolved.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolError(str(exc)) from exc

        all_lines = _text_lines(text)
        total_lines = len(all_lines)

        if offset > total_lines:
            return f"File has {total_lines} lines, offset {offset} is past end of file.\n"

        shown: list[str] = []
        total_size = 0
        for line in all_lines[offset - 1 : offset - 1 + max_lines]:
            line_bytes = len(line.encode("utf-8")) + 1
            if total_size + line_bytes > MAX_BYTES:
                break
            total_size += line_bytes
            shown.append(line)

        out = [f"{num:>6} | {line}\n" for num, line in enumerate(shown, start=offset)]
        end_line = offset + len(shown) - 1
        if end_line < total_lines:
            out.append(f"... (showing lines {offset}-{end_line} of {total_lines})")
        return "".join(out)