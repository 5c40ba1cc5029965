"""Jekyll HTML exporter backed by the ``pandoc`` CLI."""

from __future__ import annotations

import logging
import re
import subprocess

from orgjekyll.errors import ExporterError
from orgjekyll.exporter.base import BlogExporter, ExportOptions

logger = logging.getLogger(__name__)

_HEADING_RE = re.compile(r"^(?P<stars>\*+)(?P<rest>[ \t].*)?$", re.DOTALL)
_PLANNING_RE = re.compile(r"^\s*(?:SCHEDULED|DEADLINE|CLOSED):")
_DRAWER_START_RE = re.compile(r"^\s*:PROPERTIES:\s*$", re.IGNORECASE)
_DRAWER_END_RE = re.compile(r"^\s*:END:\s*$", re.IGNORECASE)


def _quote(value: str) -> str:
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


def split_subtree(source: str) -> tuple[str, str]:
    """Split *source* into the shared header and the root's body.

    The root heading line, its planning line and its property drawer are
    dropped; descendant headings are promoted so that direct children of
    the root come out as level 2.
    """
    lines = source.splitlines(keepends=True)
    first = next((i for i, line in enumerate(lines) if _HEADING_RE.match(line)), None)
    if first is None:
        return source, ""

    header = "".join(lines[:first])
    root_level = len(_HEADING_RE.match(lines[first]).group("stars"))
    cursor = first + 1
    if cursor < len(lines) and _PLANNING_RE.match(lines[cursor]):
        cursor += 1
    if cursor < len(lines) and _DRAWER_START_RE.match(lines[cursor]):
        for index in range(cursor + 1, len(lines)):
            if _DRAWER_END_RE.match(lines[index]):
                cursor = index + 1
                break

    shift = root_level - 1
    body: list[str] = []
    for line in lines[cursor:]:
        match = _HEADING_RE.match(line)
        if match and shift:
            stars = match.group("stars")
            line = stars[: max(len(stars) - shift, 1)] + (match.group("rest") or "\n")
        body.append(line)
    return header, "".join(body)


def render_front_matter(options: ExportOptions) -> str:
    lines = [
        "---",
        f"layout: {options.layout}",
        f"title: {_quote(options.title)}",
        f"date: {options.date.strftime('%Y-%m-%d %H:%M')}",
    ]
    if options.categories:
        lines.append(f"categories: {options.categories}")
    lines.append("---")
    return "\n".join(lines) + "\n"


class PandocExporter(BlogExporter):
    """Exports with ``pandoc --from org --to html5`` and a Jekyll front matter."""

    def __init__(
        self,
        *,
        binary: str = "pandoc",
        extra_args: list[str] | None = None,
        timeout: int = 60,
    ) -> None:
        self.binary = binary
        self.extra_args = list(extra_args or [])
        self.timeout = timeout

    def export(self, source: str, options: ExportOptions) -> str:
        header, body = split_subtree(source)
        html = self._run_pandoc(header + body)
        return render_front_matter(options) + html

    def _run_pandoc(self, org_text: str) -> str:
        cmd = [self.binary, "--from", "org", "--to", "html5", *self.extra_args]
        logger.debug("Running %s", " ".join(cmd))
        try:
            result = subprocess.run(
                cmd,
                input=org_text,
                capture_output=True,
                text=True,
                timeout=self.timeout,
            )
        except FileNotFoundError as exc:
            raise ExporterError(f"pandoc not found, is '{self.binary}' on the PATH?") from exc
        except subprocess.TimeoutExpired as exc:
            raise ExporterError(f"pandoc timed out after {self.timeout}s") from exc

        if result.returncode != 0:
            raise ExporterError(
                f"pandoc failed (exit {result.returncode}): {result.stderr[:500]}"
            )
        return result.stdout
