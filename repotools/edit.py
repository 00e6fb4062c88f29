"""Edit files by replacing text, exactly first and fuzzily as a fallback."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from repotools.base import (
    EditRecord,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
    resolve_path,
)
from repotools.textedit import (
    apply_edit,
    build_context_window,
    count_fuzzy_matches,
    find_changed_lines,
)


def normalize(content: str) -> str:
    """Strip a leading BOM and turn CRLF line endings into LF."""
    if content.startswith("\ufeff"):
        content = content[1:]
    return content.replace("\r\n", "\n")


@dataclass(frozen=True)
class _EditInput:
    old_text: str
    new_text: str


def _parse_edits(params: dict[str, Any]) -> list[_EditInput]:
    edits_param = params.get("edits")
    if isinstance(edits_param, list):
        edits = []
        for number, item in enumerate(edits_param, start=1):
            fields = item if isinstance(item, dict) else {}
            old_text = fields.get("oldText")
            if not isinstance(old_text, str):
                raise ToolError(f"Edit #{number}: missing oldText")
            new_text = fields.get("newText")
            if not isinstance(new_text, str):
                raise ToolError(f"Edit #{number}: missing newText")
            edits.append(_EditInput(old_text, new_text))
        return edits

    old_text = params.get("old_text")
    if not isinstance(old_text, str):
        raise ToolError("Missing required field: old_text")
    new_text = params.get("new_text")
    if not isinstance(new_text, str):
        raise ToolError("Missing required field: new_text")
    return [_EditInput(old_text, new_text)]


class EditTool(Tool):
    """Find-and-replace edits on one file, recorded for later restoring."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="edit",
            description=(
                "Edit a file by finding and replacing text. Supports exact match first, "
                "then fuzzy fallback (NFKC normalization, smart quotes normalization, "
                "trailing whitespace tolerance). Multiple disjoint edits can be applied "
                "in one call via the 'edits' array."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "file_path": {
                        "type": "string",
                        "description": "File path relative to repo root",
                    },
                    "old_text": {
                        "type": "string",
                        "description": "Existing text to replace",
                    },
                    "new_text": {
                        "type": "string",
                        "description": "New text to replace with",
                    },
                    "edits": {
                        "type": "array",
                        "description": "Multiple disjoint edits for the same file",
                        "items": {
                            "type": "object",
                            "properties": {
                                "oldText": {
                                    "type": "string",
                                    "description": "Existing text to replace",
                                },
                                "newText": {
                                    "type": "string",
                                    "description": "New text to replace with",
                                },
                            },
                            "required": ["oldText", "newText"],
                        },
                    },
                },
                "oneOf": [
                    {"required": ["file_path", "old_text", "new_text"]},
                    {"required": ["file_path", "edits"]},
                ],
            },
        )

    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        file_path = params.get("file_path")
        if not isinstance(file_path, str):
            raise ToolError("Missing required field: file_path")

        resolved = resolve_path(ctx.cwd, file_path)
        if not resolved.is_file():
            raise ToolError(f"Not a file: {resolved}")

        edits = _parse_edits(params)
        if not edits:
            raise ToolError("No edits provided")

        try:
            raw = resolved.read_bytes().decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            raise ToolError(str(exc)) from exc
        original = normalize(raw)

        for number, edit in enumerate(edits, start=1):
            count = count_fuzzy_matches(original, edit.old_text)
            if count == 0:
                raise ToolError(f"Edit #{number}: oldText not found in file (exact + fuzzy)")
            if count > 1:
                raise ToolError(f"Edit #{number}: oldText matches {count} times (ambiguous)")

        content = original
        for index, edit in reversed(list(enumerate(edits))):
            content = apply_edit(content, edit.old_text, edit.new_text, index)

        try:
            resolved.write_bytes(content.encode("utf-8"))
        except OSError as exc:
            raise ToolError(str(exc)) from exc

        changed_lines = find_changed_lines(content, [e.new_text for e in edits])

        ctx.lsp_dirty.append(resolved)
        edit_id = ctx.edit_store.insert(
            EditRecord(
                file_path=resolved,
                pre_snapshot=original,
                edits=[(e.old_text, e.new_text) for e in edits],
                post_snapshot=None,
                reverted=False,
            )
        )
        return build_context_window(file_path, content, changed_lines, len(edits), edit_id)