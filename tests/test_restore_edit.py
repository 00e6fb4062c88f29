import pytest

from repotools.base import ToolContext, ToolError
from repotools.edit import EditTool
from repotools.restore_edit import RestoreEditTool
from repotools.write import WriteTool


@pytest.fixture
def ctx(tmp_path):
    return ToolContext(tmp_path)


def _edit(ctx, path, old, new):
    EditTool().execute({"file_path": path, "old_text": old, "new_text": new}, ctx)
    return len(ctx.edit_store)


def test_revert_patch_restores_original(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("alpha\nbeta\ngamma\n")
    edit_id = _edit(ctx, "a.txt", "beta", "BETA")
    assert (tmp_path / "a.txt").read_text() == "alpha\nBETA\ngamma\n"
    msg = RestoreEditTool().execute({"id": edit_id}, ctx)
    assert msg == f"Reverted patch for edit {edit_id}"
    assert (tmp_path / "a.txt").read_text() == "alpha\nbeta\ngamma\n"
    assert ctx.edit_store.get(edit_id).reverted is True


def test_double_revert_rejected(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("one two\n")
    edit_id = _edit(ctx, "a.txt", "two", "three")
    tool = RestoreEditTool()
    tool.execute({"id": edit_id}, ctx)
    with pytest.raises(ToolError, match="already been reverted"):
        tool.execute({"id": edit_id}, ctx)


def test_apply_patch_after_revert(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("one two\n")
    edit_id = _edit(ctx, "a.txt", "two", "three")
    tool = RestoreEditTool()
    tool.execute({"id": edit_id, "mode": "revert_patch"}, ctx)
    msg = tool.execute({"id": edit_id, "mode": "apply_patch"}, ctx)
    assert msg == f"Re-applied patch for edit {edit_id}"
    assert (tmp_path / "a.txt").read_text() == "one three\n"
    assert ctx.edit_store.get(edit_id).reverted is False


def test_apply_patch_old_text_missing(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("one two\n")
    edit_id = _edit(ctx, "a.txt", "two", "three")
    with pytest.raises(ToolError, match="oldText not found for sub-edit 0"):
        RestoreEditTool().execute({"id": edit_id, "mode": "apply_patch"}, ctx)


def test_pre_snapshot_mode(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("keep\nchange\n")
    edit_id = _edit(ctx, "a.txt", "change", "changed")
    msg = RestoreEditTool().execute({"id": edit_id, "mode": "pre_snapshot"}, ctx)
    assert msg == f"Restored file to pre-edit snapshot (edit {edit_id})"
    assert (tmp_path / "a.txt").read_text() == "keep\nchange\n"


def test_post_snapshot_mode_recomputes_edit(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("keep\nchange\n")
    edit_id = _edit(ctx, "a.txt", "change", "changed")
    tool = RestoreEditTool()
    tool.execute({"id": edit_id, "mode": "pre_snapshot"}, ctx)
    msg = tool.execute({"id": edit_id, "mode": "post_snapshot"}, ctx)
    assert msg == f"Restored file to post-edit snapshot (edit {edit_id})"
    assert (tmp_path / "a.txt").read_text() == "keep\nchanged\n"


def test_revert_falls_back_to_pre_snapshot(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("start\n")
    edit_id = _edit(ctx, "a.txt", "start", "middle")
    (tmp_path / "a.txt").write_text("something else\n")
    msg = RestoreEditTool().execute({"id": edit_id}, ctx)
    assert msg.startswith("Patch revert failed (text not found)")
    assert (tmp_path / "a.txt").read_text() == "start\n"
    assert ctx.edit_store.get(edit_id).reverted is True


def test_revert_write_of_new_file_deletes_it(tmp_path, ctx):
    WriteTool().execute({"path": "new.txt", "content": "fresh"}, ctx)
    msg = RestoreEditTool().execute({"id": 1}, ctx)
    assert msg == "Deleted file (it did not exist before edit 1)"
    assert not (tmp_path / "new.txt").exists()


def test_revert_and_reapply_overwrite(tmp_path, ctx):
    (tmp_path / "f.txt").write_text("old")
    WriteTool().execute({"path": "f.txt", "content": "new"}, ctx)
    tool = RestoreEditTool()
    msg = tool.execute({"id": 1}, ctx)
    assert msg == "Restored file to pre-edit snapshot (edit 1)"
    assert (tmp_path / "f.txt").read_text() == "old"
    msg = tool.execute({"id": 1, "mode": "apply_patch"}, ctx)
    assert msg == "Re-applied (write) for edit 1"
    assert (tmp_path / "f.txt").read_text() == "new"


def test_missing_id(ctx):
    with pytest.raises(ToolError, match="Missing or invalid required field: id"):
        RestoreEditTool().execute({}, ctx)


def test_unknown_id(ctx):
    with pytest.raises(ToolError, match="No edit with id 42 found"):
        RestoreEditTool().execute({"id": 42}, ctx)


def test_unknown_mode(tmp_path, ctx):
    (tmp_path / "a.txt").write_text("x y\n")
    edit_id = _edit(ctx, "a.txt", "y", "z")
    with pytest.raises(ToolError, match="Unknown mode: sideways"):
        RestoreEditTool().execute({"id": edit_id, "mode": "sideways"}, ctx)


def test_definition_modes():
    definition = RestoreEditTool().definition()
    assert definition.name == "restore_edit"
    assert definition.parameters["properties"]["mode"]["enum"] == [
        "revert_patch",
        "apply_patch",
        "pre_snapshot",
        "post_snapshot",
    ]
    assert definition.parameters["required"] == ["id"]