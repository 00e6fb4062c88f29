"""The set of available tools and lookup by name."""

from __future__ import annotations

from collections.abc import Iterable

from repotools.base import Tool, ToolError
from repotools.bash import BashTool
from repotools.edit import EditTool
from repotools.read import ReadTool
from repotools.restore_edit import RestoreEditTool
from repotools.write import WriteTool


def all_tools() -> list[Tool]:
    """Return one instance of every available tool."""
    return [BashTool(), EditTool(), ReadTool(), RestoreEditTool(), WriteTool()]


def find_tool(tools: Iterable[Tool], name: str) -> Tool:
    """Return the tool called ``name``; raise ToolError if there is none."""
    for tool in tools:
        if tool.definition().name == name:
            return tool
    raise ToolError(f"Unknown tool '{name}'")