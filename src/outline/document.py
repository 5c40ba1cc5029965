"""Heading index over an Org-mode file, with property write-back.

Only the structure the export pipeline needs is read: headings (level, task
keyword, priority, tags), planning lines, and property drawers. Body markup
is left untouched; rendering it is the exporter's job.
"""

from __future__ import annotations

import logging
import re
from datetime import datetime
from pathlib import Path

from orgjekyll.errors import NotInPostError
from orgjekyll.outline.models import OrgEntry, format_timestamp, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_TODO_KEYWORDS = ("TODO", "DONE")

_HEADING_RE = re.compile(r"^(?P<stars>\*+)[ \t]+(?P<rest>.*?)[ \t]*$")
_PRIORITY_RE = re.compile(r"^\[#(?P<priority>[A-Z0-9])\][ \t]*")
_TAGS_RE = re.compile(r"[ \t]+(?P<tags>:(?:[\w@#%]+:)+)$")
_PLANNING_RE = re.compile(r"^\s*(?:SCHEDULED|DEADLINE|CLOSED):")
_PLANNING_ITEM_RE = re.compile(
    r"(?P<kind>SCHEDULED|DEADLINE|CLOSED):\s*(?P<stamp><[^>]*>|\[[^\]]*\])"
)
_DRAWER_START_RE = re.compile(r"^\s*:PROPERTIES:\s*$", re.IGNORECASE)
_DRAWER_END_RE = re.compile(r"^\s*:END:\s*$", re.IGNORECASE)
_PROPERTY_RE = re.compile(r"^\s*:(?P<key>[^:\s]+):(?:[ \t]+(?P<value>.*?))?[ \t]*$")
_KEYWORD_RE = re.compile(r"^#\+(?P<key>[A-Za-z_]+):[ \t]*(?P<value>.*?)[ \t]*$")
_FAST_KEY_RE = re.compile(r"\(.*\)$")


class OrgDocument:
    """An Org file split into lines with an index of its headings.

    Entries carry parent back-references. Every write-back goes through
    ``set_property`` or ``schedule``, which keep the line indices of all
    entries consistent, and marks the document as modified.
    """

    def __init__(self, text: str, path: Path | None = None) -> None:
        self.path = path
        self.lines: list[str] = text.splitlines(keepends=True)
        self.modified = False
        self.file_properties: dict[str, str] = {}
        self.file_tags: list[str] = []
        self.todo_keywords: tuple[str, ...] = DEFAULT_TODO_KEYWORDS
        self.entries: list[OrgEntry] = []
        self._index()

    @classmethod
    def load(cls, path: Path) -> OrgDocument:
        """Read and index the Org file at *path*."""
        return cls(path.read_text(encoding="utf-8"), path=path)

    # ------------------------------------------------------------------
    # Text access
    # ------------------------------------------------------------------

    @property
    def text(self) -> str:
        return "".join(self.lines)

    @property
    def header(self) -> str:
        """Everything before the first heading."""
        first = self.entries[0].start if self.entries else len(self.lines)
        return "".join(self.lines[:first])

    def subtree_text(self, entry: OrgEntry) -> str:
        """Exact text of *entry*'s subtree: its heading and all descendants."""
        return "".join(self.lines[entry.start : entry.end])

    def save(self) -> None:
        """Write the document back to its file if it was modified."""
        if not self.modified:
            return
        if self.path is None:
            raise ValueError("Document has no path to save to")
        self.path.write_text(self.text, encoding="utf-8")
        self.modified = False
        logger.info("Saved %s", self.path)

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def entry_at(self, line: int) -> OrgEntry | None:
        """Return the innermost entry containing 1-based *line*."""
        index = line - 1
        found: OrgEntry | None = None
        for entry in self.entries:
            if entry.start > index:
                break
            if entry.contains_line(index):
                found = entry
        return found

    def find_post_root(self, entry: OrgEntry | None) -> OrgEntry:
        """Walk up from *entry* to the nearest entry with a task state.

        Raises:
            NotInPostError: If no such entry exists up to the top level.
        """
        node = entry
        while node is not None:
            if node.todo:
                return node
            node = node.parent
        raise NotInPostError("Not inside an entry with a TODO state")

    def find_heading(self, search: str) -> OrgEntry | None:
        """Return the first entry whose heading text matches *search*."""
        wanted = " ".join(search.split())
        for entry in self.entries:
            if wanted in (" ".join(entry.title.split()), entry.plain_title):
                return entry
        return None

    def get_inherited(self, entry: OrgEntry, key: str) -> str | None:
        """Look *key* up on *entry*, then its ancestors, then ``#+PROPERTY:``."""
        value = entry.get_local(key)
        if value is not None:
            return value
        for ancestor in entry.ancestors():
            value = ancestor.get_local(key)
            if value is not None:
                return value
        return self.file_properties.get(key.upper())

    def tags_for(self, entry: OrgEntry) -> list[str]:
        """File tags, ancestor tags and local tags in document order."""
        chain = [*reversed(list(entry.ancestors())), entry]
        tags: list[str] = []
        for tag in self.file_tags + [t for node in chain for t in node.tags]:
            if tag not in tags:
                tags.append(tag)
        return tags

    # ------------------------------------------------------------------
    # Write-back
    # ------------------------------------------------------------------

    def set_property(self, entry: OrgEntry, key: str, value: str) -> None:
        """Set *key* in *entry*'s property drawer, creating the drawer if needed."""
        key_upper = key.upper()
        if entry.drawer_start is None or entry.drawer_end is None:
            at = entry.meta_end
            self._insert(at, [":PROPERTIES:\n", f":{key}: {value}\n", ":END:\n"])
            entry.drawer_start = at
            entry.drawer_end = at + 2
        else:
            for index in range(entry.drawer_start + 1, entry.drawer_end):
                match = _PROPERTY_RE.match(self.lines[index])
                if match and match.group("key").upper() == key_upper:
                    indent = self.lines[index][: len(self.lines[index]) - len(self.lines[index].lstrip())]
                    self.lines[index] = f"{indent}:{match.group('key')}: {value}\n"
                    break
            else:
                end_line = self.lines[entry.drawer_end]
                indent = end_line[: len(end_line) - len(end_line.lstrip())]
                self._insert(entry.drawer_end, [f"{indent}:{key}: {value}\n"])
        entry.properties[key_upper] = value
        self.modified = True
        logger.debug("Set %s=%r on %r", key, value, entry.title)

    def schedule(self, entry: OrgEntry, when: datetime) -> None:
        """Give *entry* a ``SCHEDULED`` timestamp."""
        stamp = f"SCHEDULED: {format_timestamp(when)}"
        if entry.planning_line is None:
            at = entry.start + 1
            self._insert(at, [stamp + "\n"])
            entry.planning_line = at
        else:
            line = self.lines[entry.planning_line].rstrip("\n")
            if "SCHEDULED:" in line:
                line = re.sub(r"SCHEDULED:\s*<[^>]*>", stamp, line)
            else:
                line = f"{line} {stamp}"
            self.lines[entry.planning_line] = line + "\n"
        entry.scheduled = when
        self.modified = True
        logger.debug("Scheduled %r at %s", entry.title, when)

    def _insert(self, at: int, new_lines: list[str]) -> None:
        if at > 0 and at == len(self.lines) and not self.lines[-1].endswith("\n"):
            self.lines[-1] += "\n"
        self.lines[at:at] = new_lines
        delta = len(new_lines)
        for entry in self.entries:
            if entry.start >= at:
                entry.start += delta
            if entry.end >= at:
                entry.end += delta
            if entry.meta_end >= at:
                entry.meta_end += delta
            if entry.planning_line is not None and entry.planning_line >= at:
                entry.planning_line += delta
            if entry.drawer_start is not None and entry.drawer_start >= at:
                entry.drawer_start += delta
            if entry.drawer_end is not None and entry.drawer_end >= at:
                entry.drawer_end += delta

    # ------------------------------------------------------------------
    # Indexing
    # ------------------------------------------------------------------

    def _index(self) -> None:
        heading_lines = [i for i, line in enumerate(self.lines) if _HEADING_RE.match(line)]
        first = heading_lines[0] if heading_lines else len(self.lines)
        self._read_keywords(self.lines[:first])

        stack: list[OrgEntry] = []
        for position, start in enumerate(heading_lines):
            entry = self._parse_entry(start)
            while stack and stack[-1].level >= entry.level:
                stack.pop()
            if stack:
                entry.parent = stack[-1]
                stack[-1].children.append(entry)
            stack.append(entry)
            entry.end = len(self.lines)
            for later in heading_lines[position + 1 :]:
                later_match = _HEADING_RE.match(self.lines[later])
                if later_match and len(later_match.group("stars")) <= entry.level:
                    entry.end = later
                    break
            self.entries.append(entry)

    def _read_keywords(self, header_lines: list[str]) -> None:
        todo_words: list[str] = []
        for line in header_lines:
            match = _KEYWORD_RE.match(line)
            if not match:
                continue
            key = match.group("key").upper()
            value = match.group("value")
            if key in ("TODO", "SEQ_TODO", "TYP_TODO"):
                todo_words.extend(
                    _FAST_KEY_RE.sub("", word) for word in value.split() if word != "|"
                )
            elif key == "PROPERTY" and value:
                prop, _, prop_value = value.partition(" ")
                self.file_properties[prop.upper()] = prop_value.strip()
            elif key == "FILETAGS":
                self.file_tags.extend(t for t in value.split(":") if t.strip())
        if todo_words:
            self.todo_keywords = tuple(todo_words)

    def _parse_entry(self, start: int) -> OrgEntry:
        match = _HEADING_RE.match(self.lines[start])
        assert match is not None
        level = len(match.group("stars"))
        rest = match.group("rest")

        todo = None
        first, _, remainder = rest.partition(" ")
        if first in self.todo_keywords:
            todo = first
            rest = remainder.lstrip()

        priority = None
        prio_match = _PRIORITY_RE.match(rest)
        if prio_match:
            priority = prio_match.group("priority")
            rest = rest[prio_match.end() :]

        tags: list[str] = []
        tags_match = _TAGS_RE.search(rest)
        if tags_match:
            tags = [t for t in tags_match.group("tags").split(":") if t]
            rest = rest[: tags_match.start()]

        entry = OrgEntry(
            level=level,
            title=rest.strip(),
            start=start,
            end=start + 1,
            meta_end=start + 1,
            todo=todo,
            priority=priority,
            tags=tags,
        )

        cursor = start + 1
        if cursor < len(self.lines) and _PLANNING_RE.match(self.lines[cursor]):
            entry.planning_line = cursor
            for item in _PLANNING_ITEM_RE.finditer(self.lines[cursor]):
                stamp = parse_timestamp(item.group("stamp"))
                if item.group("kind") == "SCHEDULED":
                    entry.scheduled = stamp
                elif item.group("kind") == "CLOSED":
                    entry.closed = stamp
            cursor += 1

        if cursor < len(self.lines) and _DRAWER_START_RE.match(self.lines[cursor]):
            for index in range(cursor + 1, len(self.lines)):
                line = self.lines[index]
                if _DRAWER_END_RE.match(line):
                    entry.drawer_start = cursor
                    entry.drawer_end = index
                    cursor = index + 1
                    break
                if _HEADING_RE.match(line):
                    break
                prop = _PROPERTY_RE.match(line)
                if prop:
                    entry.properties[prop.group("key").upper()] = prop.group("value") or ""
            if entry.drawer_start is None:
                # unterminated drawer
                entry.properties.clear()

        entry.meta_end = cursor
        return entry
