"""Error text shared by the editor core and shell.

Every message reads ``ER Editor / <where>: <what went wrong>. Fix: <what to do>.``
"""

from __future__ import annotations

import re

__all__ = ["EDITOR_ERROR_CONTEXT", "as_editor_error", "editor_error"]

EDITOR_ERROR_CONTEXT = "ER Editor"

_EDITOR_ERROR_SHAPE = re.compile(r"^[^:\n]+: .+\. Fix: .+\.$")


def editor_error(location: str, issue: str, hint: str, *, context: str = EDITOR_ERROR_CONTEXT) -> str:
    where = str(location).strip() or "Unknown"
    what = str(issue).strip() or "unknown issue"
    how = str(hint).strip() or "undo the last action and retry"
    prefix = f"{str(context).strip()} / " if str(context).strip() else ""
    return f"{prefix}{where}: {what}. Fix: {how}."


def as_editor_error(
    raw: object,
    *,
    location: str,
    hint: str,
    context: str = EDITOR_ERROR_CONTEXT,
) -> str:
    """Pass editor-shaped text through; wrap anything else (e.g. a TclError) in the shape."""
    text = str(raw).strip()
    if _EDITOR_ERROR_SHAPE.match(text):
        return text
    return editor_error(location, text, hint, context=context)
