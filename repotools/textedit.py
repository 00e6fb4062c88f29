"""Text matching, fuzzy editing and context-window rendering for file tools."""

from __future__ import annotations

import json
import unicodedata
from collections.abc import Iterable

from repotools.base import ToolError

CONTEXT_LINES = 3

_CHAR_MAP = {
    "\u2018": "'",
    "\u2019": "'",
    "\u201b": "'",
    "\u201c": '"',
    "\u201d": '"',
    "\u201e": '"',
    "\u2013": "-",
    "\u2014": "-",
    "\u2212": "-",
    "\u00a0": " ",
    "\u202f": " ",
    "\u3000": " ",
    **{chr(c): " " for c in range(0x2000, 0x200B)},
}
_TRANSLATION = str.maketrans(_CHAR_MAP)


def _lines(text: str) -> list[str]:
    if not text:
        return []
    parts = text.split("\n")
    if parts[-1] == "":
        parts.pop()
    return [p[:-1] if p.endswith("\r") else p for p in parts]


def fuzzy_normalize(text: str) -> str:
    """NFKC-normalize, fold quotes, dashes and spaces, strip trailing whitespace."""
    folded = unicodedata.normalize("NFKC", text).translate(_TRANSLATION)
    return "\n".join(line.rstrip() for line in _lines(folded)).rstrip()


def _map_normalized_pos(original: str, norm_pos: int) -> int | None:
    orig_pos = 0
    norm = 0
    for ch in original:
        if norm >= norm_pos:
            return orig_pos
        nxt = norm + len(unicodedata.normalize("NFKC", ch))
        if nxt > norm_pos:
            return orig_pos + 1
        norm = nxt
        orig_pos += 1
    return len(original) if norm >= norm_pos else None


def apply_edit(original: str, old_text: str, new_text: str, index: int) -> str:
    """Replace the first match of ``old_text``, exact first then fuzzy."""
    pos = original.find(old_text)
    if pos != -1:
        return original[:pos] + new_text + original[pos + len(old_text):]

    norm_original = fuzzy_normalize(original)
    norm_old = fuzzy_normalize(old_text)
    pos = norm_original.find(norm_old)
    if pos != -1:
        start = _map_normalized_pos(original, pos)
        if start is None:
            raise ToolError(f"Edit #{index + 1}: could not map fuzzy match position")
        end = _map_normalized_pos(original, pos + len(norm_old))
        if end is None:
            raise ToolError(f"Edit #{index + 1}: could not map fuzzy match end position")
        return original[:start] + new_text + original[end:]

    preview = json.dumps(old_text[:100], ensure_ascii=False)
    raise ToolError(
        f"Edit #{index + 1}: oldText not found (exact + fuzzy). oldText (first 100): {preview}"
    )


def count_fuzzy_matches(content: str, text: str) -> int:
    """Count non-overlapping fuzzy matches of ``text`` in ``content``."""
    return fuzzy_normalize(content).count(fuzzy_normalize(text))


def _line_of(content: str, pos: int) -> int:
    return content.count("\n", 0, pos) + 1


def _line_range(content: str, start: int, end: int) -> tuple[int, int]:
    start_line = _line_of(content, start)
    end_line = _line_of(content, end)
    if end > 0 and content[end - 1] == "\n":
        end_line -= 1
    return start_line, max(end_line, start_line)


def find_changed_lines(final_content: str, new_texts: Iterable[str]) -> set[int]:
    """Return 1-indexed lines holding each new text, claiming matches without overlap."""
    claimed: list[tuple[int, int]] = []
    changed: set[int] = set()
    for new_text in new_texts:
        search_from = 0
        while (found := final_content.find(new_text, search_from)) != -1:
            span = (found, found + len(new_text))
            if not any(s < span[1] and span[0] < e for s, e in claimed):
                claimed.append(span)
                first, last = _line_range(final_content, *span)
                changed.update(range(first, last + 1))
                break
            search_from = found + 1
    return changed


def build_context_window(
    file_path: str,
    content: str,
    changed_lines: set[int],
    edit_count: int,
    edit_id: int,
) -> str:
    """Render numbered lines around the changed lines, marking changes with ``~|``."""
    header = f"edit_id: {edit_id}\n{edit_count} edit(s) applied to {file_path}\n"
    if not changed_lines:
        return header

    lines = _lines(content)
    total = len(lines)
    windows = sorted(
        (max(ln - CONTEXT_LINES, 1), min(ln + CONTEXT_LINES, total)) for ln in changed_lines
    )
    merged: list[list[int]] = []
    for start, end in windows:
        if merged and start <= merged[-1][1] + 1:
            merged[-1][1] = max(merged[-1][1], end)
        else:
            merged.append([start, end])

    out = [header]
    if merged[0][0] > 1:
        out.append("...\n")
    for i, (start, end) in enumerate(merged):
        if i:
            out.append("...\n")
        for num in range(start, end + 1):
            text = lines[num - 1] if 0 < num <= total else ""
            sep = "~| " if num in changed_lines else " | "
            out.append(f"{num:>6}{sep}{text}\n")
    if merged[-1][1] < total:
        out.append("...\n")
    return "".join(out)