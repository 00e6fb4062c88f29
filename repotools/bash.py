"""Run shell commands in the repository with a timeout and output limits."""

from __future__ import annotations

import subprocess
import time
from typing import Any

from repotools.base import Tool, ToolContext, ToolDefinition, ToolError, truncate_output

DEFAULT_TIMEOUT_SECS = 60
MAX_TIMEOUT_SECS = 300
MAX_LINES = 2000
MAX_BYTES = 50 * 1024
_POLL_SECS = 0.05


def _int_param(params: dict[str, Any], key: str) -> int | None:
    value = params.get(key)
    if isinstance(value, int) and not isinstance(value, bool):
        return value
    return None


def _timeout_secs(params: dict[str, Any]) -> int:
    value = _int_param(params, "timeout")
    if value is None:
        return DEFAULT_TIMEOUT_SECS
    if value < 0:
        # A negative request is treated as an enormous one and capped.
        return MAX_TIMEOUT_SECS
    return min(max(value, 1), MAX_TIMEOUT_SECS)


def combine_output(
    stdout: bytes,
    stderr: bytes,
    exit_code: int | None,
    kill_reason: str | None,
    timeout_secs: int,
) -> str:
    """Merge stdout, stderr, exit code and kill reason into one report."""
    stdout_text = stdout.decode("utf-8", errors="replace")
    stderr_text = stderr.decode("utf-8", errors="replace")
    parts: list[str] = []

    if kill_reason == "Timeout":
        parts.append(f"[Command timed out after {timeout_secs}s]\n")
    elif kill_reason is not None:
        parts.append(f"[{kill_reason}]\n")

    def add_block(text: str) -> None:
        parts.append(text)
        if not text.endswith("\n"):
            parts.append("\n")

    if stdout_text:
        add_block(stdout_text)
    if stderr_text:
        parts.append("[stderr]\n")
        add_block(stderr_text)

    if exit_code is not None and exit_code != 0:
        parts.append(f"exit_code: {exit_code}\n")

    output = "".join(parts)
    return output or "[Command completed with no output]\n"


class BashTool(Tool):
    """Execute a bash command in the context's working directory."""

    def definition(self) -> ToolDefinition:
        return ToolDefinition(
            name="bash",
            description=(
                "Execute a bash command in the repo directory. Returns stdout; stderr is shown "
                "under a [stderr] label when present. On failure also shows exit_code. "
                "Enforces a 60-second timeout and output cap of 2000 lines / 50 KB. "
                "Use for builds, tests, git, and shell tasks. For search use `rg`; "
                "for listing files use `rg --files` (gitignore-aware) or `fd`."
            ),
            parameters={
                "type": "object",
                "properties": {
                    "command": {
                        "type": "string",
                        "description": "Bash command to execute",
                    },
                    "timeout": {
                        "type": "integer",
                        "description": "Timeout in seconds (default 60, max 300)",
                        "minimum": 1,
                        "maximum": 300,
                    },
                    "description": {
                        "type": "string",
                        "description": "Optional description of what this command does",
                    },
                },
                "required": ["command"],
            },
        )

    def execute(self, params: dict[str, Any], ctx: ToolContext) -> str:
        command = params.get("command")
        if not isinstance(command, str):
            raise ToolError("Missing required field: command")

        timeout_secs = _timeout_secs(params)

        try:
            proc = subprocess.Popen(
                ["bash", "-c", command],
                cwd=ctx.cwd,
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.PIPE,
            )
        except OSError as exc:
            return f"Failed to spawn bash: {exc}"

        deadline = time.monotonic() + timeout_secs
        with proc:
            while True:
                try:
                    out, err = proc.communicate(timeout=_POLL_SECS)
                    break
                except subprocess.TimeoutExpired:
                    pass
                if time.monotonic() >= deadline:
                    out, err = self._kill(proc)
                    return combine_output(out, err, None, "Timeout", timeout_secs)
                if ctx.stop.is_set():
                    out, err = self._kill(proc)
                    return combine_output(out, err, None, "Command cancelled", 0)

        kill_reason = "Command cancelled" if ctx.stop.is_set() else None
        returncode = proc.returncode
        exit_code = returncode if returncode is not None and returncode >= 0 else None
        content = combine_output(out or b"", err or b"", exit_code, kill_reason, timeout_secs)
        return truncate_output(content, MAX_LINES, MAX_BYTES).content

    @staticmethod
    def _kill(proc: subprocess.Popen) -> tuple[bytes, bytes]:
        proc.kill()
        out, err = proc.communicate()
        return out or b"", err or b""