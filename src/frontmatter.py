"""Post-process the exporter's front matter.

Adds ``series`` and ``meta_title``, then rewrites or drops ``date``.
"""

from __future__ import annotations

import re
from datetime import datetime

from orgjekyll.errors import FrontMatterError
from orgjekyll.metadata import format_meta_title

OPENING_MARKER = "---\n"
CLOSING_MARKER = "\n---\n"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

_DATE_LINE_RE = re.compile(r"^date: .*$", re.MULTILINE)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def patch_front_matter(
    html: str,
    *,
    title: str,
    timestamp: datetime,
    is_page: bool,
    series: str | None = None,
    meta_title: str | None = None,
) -> str:
    """Return *html* with its front matter completed for Jekyll.

    Inserted lines go right after the opening ``---``; the ``date`` line is
    then looked up backwards from the closing marker, so insertions never
    shift it out of range.

    Raises:
        FrontMatterError: If the block markers or the ``date`` line are
            missing.
    """
    if not html.startswith(OPENING_MARKER):
        raise FrontMatterError("Exporter output does not start with '---'")
    closing = html.find(CLOSING_MARKER, len(OPENING_MARKER) - 1)
    if closing == -1:
        raise FrontMatterError("Exporter output has no closing '---'")

    block = html[len(OPENING_MARKER) : closing + 1]
    rest = html[closing + 1 :]

    inserted: list[str] = []
    if series:
        inserted.append(f"series: {_quote(series)}\n")
    if meta_title:
        inserted.append(f"meta_title: {_quote(format_meta_title(meta_title, title))}\n")
    block = "".join(inserted) + block

    matches = list(_DATE_LINE_RE.finditer(block))
    if not matches:
        raise FrontMatterError("Front matter has no 'date:' line")
    date_line = matches[-1]

    if is_page:
        end = date_line.end() + 1 if block[date_line.end() : date_line.end() + 1] == "\n" else date_line.end()
        block = block[: date_line.start()] + block[end:]
    else:
        block = (
            block[: date_line.start()]
            + f"date: {timestamp.strftime(DATE_FORMAT)}"
            + block[date_line.end() :]
        )

    return OPENING_MARKER + block + rest
