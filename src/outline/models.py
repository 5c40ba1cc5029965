"""Pure data models for the outline heading index.

No I/O here. ``OrgDocument`` in ``orgjekyll.outline.document`` builds these
from file text and owns every mutation.
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from dataclasses import dataclass, field
from datetime import datetime

_TIMESTAMP_RE = re.compile(
    r"[<\[](?P<date>\d{4}-\d{2}-\d{2})"
    r"(?:\s+[^\s\d>\]]+)?"
    r"(?:\s+(?P<time>\d{1,2}:\d{2}))?"
    r"[^>\]]*[>\]]"
)
_LINK_RE = re.compile(r"\[\[([^\]]+)\](?:\[([^\]]+)\])?\]")
_EMPHASIS_RE = re.compile(r"(?<![\w])([*/=~+_])(\S|\S.*?\S)\1(?![\w])")


def parse_timestamp(text: str) -> datetime | None:
    """Parse the first Org timestamp in *text*.

    Handles active (``<...>``) and inactive (``[...]``) stamps, with or
    without a weekday and a time. A date-only stamp resolves to midnight.
    """
    match = _TIMESTAMP_RE.search(text)
    if not match:
        return None
    stamp = match.group("date")
    clock = match.group("time") or "00:00"
    try:
        return datetime.strptime(f"{stamp} {clock}", "%Y-%m-%d %H:%M")
    except ValueError:
        return None


def format_timestamp(when: datetime, *, active: bool = True) -> str:
    """Render *when* as an Org timestamp like ``<2021-03-04 Thu 09:30>``."""
    body = when.strftime("%Y-%m-%d %a %H:%M")
    return f"<{body}>" if active else f"[{body}]"


def strip_markup(text: str) -> str:
    """Strip links and emphasis markers from heading text."""
    text = _LINK_RE.sub(lambda m: m.group(2) or m.group(1), text)
    previous = None
    while previous != text:
        previous = text
        text = _EMPHASIS_RE.sub(lambda m: m.group(2), text)
    return " ".join(text.split())


@dataclass(eq=False)
class OrgEntry:
    """One heading of an outline document and its subtree bounds.

    Line indices are 0-based offsets into the document's line list.
    ``start`` is the heading line, ``end`` is exclusive and covers all
    descendants, ``meta_end`` is the first line after the heading, its
    planning line and its property drawer.
    """

    level: int
    title: str
    start: int
    end: int
    meta_end: int
    todo: str | None = None
    priority: str | None = None
    tags: list[str] = field(default_factory=list)
    properties: dict[str, str] = field(default_factory=dict)
    scheduled: datetime | None = None
    closed: datetime | None = None
    planning_line: int | None = None
    drawer_start: int | None = None
    drawer_end: int | None = None
    parent: OrgEntry | None = field(default=None, repr=False)
    children: list[OrgEntry] = field(default_factory=list, repr=False)

    @property
    def plain_title(self) -> str:
        """Heading text without task keyword, priority, tags or markup."""
        return strip_markup(self.title)

    def get_local(self, key: str) -> str | None:
        """Return this entry's own value for property *key* (case-insensitive)."""
        return self.properties.get(key.upper())

    def ancestors(self) -> Iterator[OrgEntry]:
        """Yield parents from the nearest up to the top-level entry."""
        node = self.parent
        while node is not None:
            yield node
            node = node.parent

    def contains_line(self, index: int) -> bool:
        return self.start <= index < self.end
