# repotools

Tools that a coding agent can call to work inside one repository directory.

Each tool describes itself with a `ToolDefinition`, which holds a name, a
description and a JSON-Schema `parameters` dict. Each tool runs against a
shared `ToolContext` whose `cwd` is the repository root. Paths that lead
outside the root are refused, whether they do so directly or through a
symlink.

## Tools

| name           | class                                   | what it does |
|----------------|-----------------------------------------|--------------|
| `bash`         | `repotools.bash.BashTool`               | runs a command with `bash -c` in `ctx.cwd`. The timeout defaults to 60 s and is capped at 300 s. Output is capped at 2000 lines or 50 KB. |
| `read`         | `repotools.read.ReadTool`               | shows a file with line numbers. `offset` and `limit` select lines; output is capped at 50 KB. |
| `edit`         | `repotools.edit.EditTool`               | finds and replaces text, trying an exact match first and a fuzzy match second. Several disjoint edits can go in one call through `edits`. |
| `write`        | `repotools.write.WriteTool`             | writes a file and creates any missing parent directories. |
| `restore_edit` | `repotools.restore_edit.RestoreEditTool`| undoes or redoes a recorded edit or write. |

`edit` and `write` return an `edit_id`. `restore_edit` takes that `id` and a
`mode`:

- `revert_patch` is the default. It reverses the replacements and falls back
  to the pre-edit snapshot if the replaced text can no longer be found.
- `apply_patch` applies the edit again.
- `pre_snapshot` restores the file as it was before the edit.
- `post_snapshot` restores the file as it was right after the edit.

Fuzzy matching applies NFKC normalisation and folds smart quotes, dashes and
special spaces to their plain forms. It also ignores trailing whitespace, so an
edit still matches when it uses `"` where the file has `“`.

## Use

```python
from pathlib import Path

from repotools.base import ToolContext, ToolError
from repotools.registry import all_tools, find_tool

ctx = ToolContext(Path("."))
tools = all_tools()

definitions = [tool.definition() for tool in tools]

edit = find_tool(tools, "edit")
try:
    print(edit.execute(
        {"file_path": "src/app.py", "old_text": "x = 1", "new_text": "x = 2"},
        ctx,
    ))
except ToolError as err:
    print(f"Error: {err}")
```

A tool returns its result as text. When it fails it raises `ToolError`.

The context also carries some state between calls:

- `ctx.lsp_dirty` collects the paths of files that were edited or written.
- `ctx.edit_store` keeps the records that `restore_edit` uses.
- `ctx.stop` is a `threading.Event`. Setting it cancels a running `bash` command.

`find_tool` raises `ToolError` for an unknown name.

The helpers below can also be used on their own:

- `repotools.base`: `resolve_path` and `truncate_output`.
- `repotools.textedit`: `fuzzy_normalize`, `apply_edit`, `count_fuzzy_matches`,
  `find_changed_lines` and `build_context_window`.

## What it does not do

This package is a library of tools only. It provides:

- no command-line program;
- no client for talking to a model;
- no conversation loop;
- no language-server diagnostics.

`ctx.lsp_dirty` is only filled in, and nothing in the package reads it.

Edit records live in memory inside the `ToolContext` and are lost when it goes
away.

## Tests

```
pip install -e ".[test]"
pytest
```