"""Build the exporter's input: shared header plus the post root's subtree.

Links are normalized on the way so that the exporter emits site-relative
URLs:

* ``file:`` links into the blog directory become ``file:/...`` and images
  under ``images/`` become literal ``[[/images/...]]`` links.
* ``[[*Heading]]`` links to other posts become ``[[/name.html]]`` using the
  target's ``filename`` property.
"""

from __future__ import annotations

import logging
import re
import subprocess
from dataclasses import dataclass
from pathlib import Path

from orgjekyll.metadata import FILENAME_PROPERTY, strip_date_prefix
from orgjekyll.outline import OrgDocument, OrgEntry

logger = logging.getLogger(__name__)

_FILE_LINK_RE = re.compile(r"\[\[file:(?P<target>[^\]]+)\](?:\[(?P<desc>[^\]]*)\])?\]")
_IMAGE_TARGET_RE = re.compile(r"^file:(?P<path>/images/\S+)$")
_HEADING_LINK_RE = re.compile(r"\[\[\*(?P<search>[^\]]+)\](?:\[(?P<desc>[^\]]*)\])?\]")


@dataclass(frozen=True)
class AssemblyContext:
    """What the link rewrites need to know, passed explicitly."""

    document: OrgDocument
    root: OrgEntry
    blog_dir: str


def _org_link(target: str, desc: str | None) -> str:
    return f"[[{target}][{desc}]]" if desc else f"[[{target}]]"


def _blog_prefixes(blog_dir: str) -> list[str]:
    raw = blog_dir.rstrip("/") + "/"
    expanded = str(Path(blog_dir).expanduser()).rstrip("/") + "/"
    return list(dict.fromkeys([raw, expanded]))


def rewrite_file_links(text: str, blog_dir: str) -> str:
    """Rewrite ``file:`` links pointing into *blog_dir* to root-relative form."""
    prefixes = _blog_prefixes(blog_dir)

    def _replace(match: re.Match[str]) -> str:
        target = match.group("target")
        desc = match.group("desc")
        expanded = str(Path(target).expanduser()) if target.startswith("~") else target
        for prefix in prefixes:
            if expanded.startswith(prefix) or target.startswith(prefix):
                source = target if target.startswith(prefix) else expanded
                new_target = "file:/" + source[len(prefix) :]
                break
        else:
            return match.group(0)
        image = _IMAGE_TARGET_RE.match(new_target)
        if image:
            return _org_link(image.group("path"), desc)
        return _org_link(new_target, desc)

    return _FILE_LINK_RE.sub(_replace, text)


def rewrite_heading_links(text: str, document: OrgDocument, root: OrgEntry) -> str:
    """Point ``[[*Heading]]`` links at the target post's URL.

    Links to the post being exported, to unknown headings, or to entries
    without a ``filename`` are left alone.
    """

    def _replace(match: re.Match[str]) -> str:
        search = match.group("search")
        target = document.find_heading(search)
        if target is None:
            logger.debug("Heading link not resolved: %s", search)
            return match.group(0)
        if target is root:
            return match.group(0)
        filename = target.get_local(FILENAME_PROPERTY)
        if not filename:
            logger.debug("Heading %r has no filename, link kept", search)
            return match.group(0)
        url = f"/{strip_date_prefix(filename)}.html"
        return _org_link(url, match.group("desc") or target.plain_title)

    return _HEADING_LINK_RE.sub(_replace, text)


def spellcheck(text: str, command: list[str], *, timeout: int = 20) -> list[str]:
    """Run *command* (``aspell list`` style) over *text*; return unknown words.

    Best effort: any failure to run the checker returns an empty list.
    """
    try:
        result = subprocess.run(
            command,
            input=text,
            capture_output=True,
            text=True,
            timeout=timeout,
        )
    except (OSError, subprocess.SubprocessError) as exc:
        logger.debug("Spellcheck skipped: %s", exc)
        return []
    if result.returncode != 0:
        logger.debug("Spellcheck exited %d: %s", result.returncode, result.stderr[:200])
        return []
    words = list(dict.fromkeys(w for w in result.stdout.split() if w))
    if words:
        logger.warning("Possible misspellings: %s", ", ".join(words))
    return words


def assemble_source(context: AssemblyContext) -> str:
    """Return ``header + subtree`` with both link rewrites applied."""
    document = context.document
    text = document.header + document.subtree_text(context.root)
    text = rewrite_file_links(text, context.blog_dir)
    return rewrite_heading_links(text, document, context.root)
