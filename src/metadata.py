"""Front-matter metadata derived from the post root's outline properties."""

from __future__ import annotations

import logging
import re
from datetime import datetime
from urllib.parse import quote

from pydantic import BaseModel, Field

from orgjekyll.errors import MissingFilenameError
from orgjekyll.outline import OrgDocument, OrgEntry

logger = logging.getLogger(__name__)

LAYOUT_PROPERTY = "EXPORT_JEKYLL_LAYOUT"
FILENAME_PROPERTY = "filename"
SERIES_PROPERTY = "series"
META_TITLE_PROPERTY = "meta_title"

_PARENTHETICAL_RE = re.compile(r"\([^)]*\)")
_NON_ALNUM_RE = re.compile(r"[\W_]+")
_DATE_PREFIX_RE = re.compile(r"^\d{4}-\d{2}-\d{2}-")


class PostMetadata(BaseModel):
    """Everything the later stages need to know about the post root."""

    title: str
    layout: str = "post"
    filename: str | None = None
    timestamp: datetime
    tags: list[str] = Field(default_factory=list)
    series: str | None = None
    meta_title: str | None = None

    @property
    def is_page(self) -> bool:
        return self.layout == "page"

    @property
    def categories(self) -> str:
        return categories_string(self.tags)

    @property
    def name(self) -> str:
        """Output file name without extension."""
        return self.filename or synthesize_filename(self.title, self.timestamp)


def tag_to_category(tag: str) -> str:
    """Convert an Org tag to a category token.

    Org tags cannot hold periods or hyphens, so ``__`` stands for ``.`` and a
    single ``_`` for ``-``.
    """
    return tag.replace("__", ".").replace("_", "-")


def categories_string(tags: list[str]) -> str:
    return " ".join(tag_to_category(tag) for tag in tags)


def slugify(title: str) -> str:
    """``"Hello World (draft)"`` → ``"hello-world"``."""
    text = _PARENTHETICAL_RE.sub("", title).lower()
    text = _NON_ALNUM_RE.sub("-", text).strip("-")
    return quote(text)


def synthesize_filename(title: str, timestamp: datetime) -> str:
    return f"{timestamp.strftime('%Y-%m-%d')}-{slugify(title)}"


def strip_date_prefix(name: str) -> str:
    """Drop a leading ``YYYY-MM-DD-`` from *name*, if there is one."""
    return _DATE_PREFIX_RE.sub("", name, count=1)


def format_meta_title(template: str, title: str) -> str:
    """Fill the single ``%s`` slot of *template* with *title*."""
    return template.replace("%s", title, 1)


def resolve_metadata(
    document: OrgDocument,
    root: OrgEntry,
    *,
    now: datetime,
    default_layout: str = "post",
    write_back: bool = True,
) -> PostMetadata:
    """Read the post root's properties into a ``PostMetadata``.

    When *write_back* is set, an entry with neither a ``CLOSED`` nor a
    ``SCHEDULED`` timestamp is scheduled at *now*, and a synthesized filename
    is stored in the entry's ``filename`` property.

    Raises:
        MissingFilenameError: If the layout is ``page`` and the entry has
            no ``filename`` property.
    """
    layout = document.get_inherited(root, LAYOUT_PROPERTY) or default_layout
    filename = root.get_local(FILENAME_PROPERTY) or None
    title = root.plain_title

    if layout == "page" and not filename:
        raise MissingFilenameError(f"Pages need a :{FILENAME_PROPERTY}: property ({title!r})")

    timestamp = root.closed or root.scheduled
    if timestamp is None:
        timestamp = now
        if write_back:
            document.schedule(root, now)

    metadata = PostMetadata(
        title=title,
        layout=layout,
        filename=filename,
        timestamp=timestamp,
        tags=list(reversed(document.tags_for(root))),
        series=document.get_inherited(root, SERIES_PROPERTY) or None,
        meta_title=root.get_local(META_TITLE_PROPERTY) or None,
    )

    if filename is None:
        metadata.filename = synthesize_filename(title, timestamp)
        logger.info("Synthesized filename %s", metadata.filename)
        if write_back:
            document.set_property(root, FILENAME_PROPERTY, metadata.filename)

    return metadata
