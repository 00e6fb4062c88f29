"""Undo or redo previously recorded edits and writes."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

from repotools.base import (
    EditRecord,
    Tool,
    ToolContext,
    ToolDefinition,
    ToolError,
    resolve_path,
)
from repotools.textedit import apply_edit, count_fuzzy_matches

logger = logging.getLogger(__name__)

DEFAULT_MODE = "revert_patch"
MODES = ("revert_patch", "apply_patch", "pre_snapshot", "post_snapshot")


def _read(path: Path) -> str:
    try:
        return path.read_bytes().decode("utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ToolError(str(exc)) from exc


def _write(path: Path, content: str) -> None:
    try:
        path.write_bytes(content.encode("utf-8"))
    except OSError as exc:
        raise ToolError(str(exc)) from exc


def _restore_pre(path: Path, record: EditRecord) -> None:
    """Put back the pre-edit content, or delete the file if it did not exist."""
    if record.pre_snapshot is None:
        try:
            path.unlink()
        except OSError:
            pass
    else:
        _write(path, record.pre_snapshot)


def _restore_pre_msg(record: EditRecord, edit_id: int) -> str:
    if record.pre_snapshot is None:
        return f"Deleted file (it did not exist before edit {edit_id})"
    return f"Restored file to pre-edit snapshot (edit {edit_id})"


def _post_content(record: EditRecord) -> str:
    """Content right after the operation, recomputed from the edits if needed."""
    if record.post_snapshot is not None:
        return record.post_snapshot
    content = record.pre_snapshot or ""
    for old, new in record.edits:
        content = apply_edit(content, old, new, 0)
    return content


class RestoreEditTool(Tool):
    """Restore a file relative to a recorded edit."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="restore_edit",
            description=(
                "Restore a file to a state relative to a previously recorded edit. "
                "Use this instead of git checkout when an edit needs to be undone. "
                "Modes:\n"
                "- revert_patch (default): surgically undo the edit by reversing the "
                "string replacements; falls back to pre_snapshot if the patched text "
                "is no longer present\n"
                "- apply_patch: re-apply the edit (useful after a revert)\n"
                "- pre_snapshot: restore the full file to its state before the edit\n"
                "- post_snapshot: restore the full file to its state immediately after "
                "the edit"
            ),
            parameters={
                "type": "object",
                "properties": {
                    "id": {
                        "type": "integer",
                        "description": "The edit ID returned by a previous edit tool call.",
                    },
                    "mode": {
                        "type": "string",
                        "enum": list(MODES),
                        "description": "Which state to restore. Defaults to revert_patch.",
                    },
                },
                "required": ["id"],
            },
        )

    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        edit_id = params.get("id")
        if not isinstance(edit_id, int) or isinstance(edit_id, bool) or edit_id < 0:
            raise ToolError("Missing or invalid required field: id")

        mode = params.get("mode")
        if not isinstance(mode, str):
            mode = DEFAULT_MODE

        record = ctx.edit_store.get(edit_id)
        if record is None:
            raise ToolError(f"No edit with id {edit_id} found")

        resolved = resolve_path(ctx.cwd, str(record.file_path))

        if mode == "pre_snapshot":
            return self._pre_snapshot(resolved, record, edit_id)
        if mode == "post_snapshot":
            _write(resolved, _post_content(record))
            return f"Restored file to post-edit snapshot (edit {edit_id})"
        if mode == "apply_patch":
            return self._apply_patch(resolved, record, edit_id)
        if mode == "revert_patch":
            return self._revert_patch(resolved, record, edit_id)
        raise ToolError(f"Unknown mode: {mode}")

    @staticmethod
    def _pre_snapshot(path: Path, record: EditRecord, edit_id: int) -> str:
        if record.reverted:
            raise ToolError(f"Edit {edit_id} has already been reverted")
        _restore_pre(path, record)
        record.reverted = True
        return _restore_pre_msg(record, edit_id)

    @staticmethod
    def _apply_patch(path: Path, record: EditRecord, edit_id: int) -> str:
        if not record.edits:
            _write(path, _post_content(record))
            record.reverted = False
            return f"Re-applied (write) for edit {edit_id}"

        content = _read(path)
        for index, (old, new) in enumerate(record.edits):
            count = count_fuzzy_matches(content, old)
            if count == 0:
                raise ToolError(
                    f"apply_patch: oldText not found for sub-edit {index} (edit {edit_id})"
                )
            if count > 1:
                raise ToolError(
                    f"apply_patch: oldText matches {count} times (ambiguous) "
                    f"for sub-edit {index} (edit {edit_id})"
                )
            content = apply_edit(content, old, new, index)
        _write(path, content)
        record.reverted = False
        return f"Re-applied patch for edit {edit_id}"

    @staticmethod
    def _revert_patch(path: Path, record: EditRecord, edit_id: int) -> str:
        if record.reverted:
            raise ToolError(f"Edit {edit_id} has already been reverted")

        if not record.edits:
            _restore_pre(path, record)
            record.reverted = True
            return _restore_pre_msg(record, edit_id)

        content = _read(path)
        failed = False
        for index, (old, new) in enumerate(reversed(record.edits)):
            count = count_fuzzy_matches(content, new)
            if count != 1:
                logger.warning(
                    "Patch revert sub-edit %d: new_text matches %d times (expected 1)",
                    index,
                    count,
                )
                failed = True
                break
            try:
                content = apply_edit(content, new, old, index)
            except ToolError as exc:
                logger.warning("Patch revert sub-edit %d failed: %s", index, exc)
                failed = True
                break

        if failed:
            _restore_pre(path, record)
            record.reverted = True
            return (
                "Patch revert failed (text not found); restored full pre-edit "
                f"snapshot for edit {edit_id}. Other changes to this file since edit "
                f"{edit_id} were also reverted."
            )

        _write(path, content)
        record.reverted = True
        return f"Reverted patch for edit {edit_id}"