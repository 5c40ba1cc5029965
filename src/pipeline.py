"""Export pipeline: Org subtree → Jekyll HTML file in the blog directory."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path

from orgjekyll.assembler import AssemblyContext, assemble_source, spellcheck
from orgjekyll.config import OrgJekyllConfig
from orgjekyll.errors import HeadingNotFoundError, UserInputError
from orgjekyll.exporter import BlogExporter, ExportOptions, create_exporter
from orgjekyll.frontmatter import patch_front_matter
from orgjekyll.links import canonicalize_links
from orgjekyll.metadata import PostMetadata, resolve_metadata
from orgjekyll.outline import OrgDocument, OrgEntry
from orgjekyll.writer import (
    CommitMessageHistory,
    commit_messages,
    output_path,
    show_post,
    write_post,
)

logger = logging.getLogger(__name__)


@dataclass
class ExportResult:
    """Outcome of one export."""

    path: Path
    metadata: PostMetadata
    html: str
    written: bool
    messages: list[str] = field(default_factory=list)


def locate_post_root(
    document: OrgDocument,
    *,
    line: int | None = None,
    heading: str | None = None,
) -> OrgEntry:
    """Find the post root from a cursor given as a line or a heading.

    Raises:
        HeadingNotFoundError: If *heading* matches no entry.
        NotInPostError: If no enclosing entry has a task state.
        UserInputError: If neither cursor form is given.
    """
    if heading is not None:
        entry = document.find_heading(heading)
        if entry is None:
            raise HeadingNotFoundError(f"No heading matches {heading!r}")
    elif line is not None:
        entry = document.entry_at(line)
    else:
        raise UserInputError("Give a --line or a --heading to export")
    return document.find_post_root(entry)


def inspect_post(
    document: OrgDocument,
    config: OrgJekyllConfig,
    *,
    line: int | None = None,
    heading: str | None = None,
    now: datetime | None = None,
) -> tuple[PostMetadata, Path]:
    """Resolve metadata and output path without touching any file."""
    root = locate_post_root(document, line=line, heading=heading)
    metadata = resolve_metadata(
        document,
        root,
        now=now or datetime.now(),
        default_layout=config.export.default_layout,
        write_back=False,
    )
    path = output_path(
        config.blog.path,
        metadata.name,
        is_page=metadata.is_page,
        posts_subdir=config.blog.posts_subdir,
    )
    return metadata, path


def export_to_blog(
    org_file: Path,
    config: OrgJekyllConfig,
    *,
    line: int | None = None,
    heading: str | None = None,
    dont_show: bool = False,
    dry_run: bool = False,
    exporter: BlogExporter | None = None,
    now: datetime | None = None,
) -> ExportResult:
    """Export the post around the cursor in *org_file* into the blog.

    Args:
        org_file: The Org document holding the post.
        config: Loaded configuration.
        line: 1-based cursor line inside the post.
        heading: Alternatively, the heading text of an entry inside the post.
        dont_show: Skip opening the written file.
        dry_run: Run every stage but write nothing (neither the post, the
            Org file, nor the history).
        exporter: Exporter override; defaults to pandoc.
        now: Clock override.

    Returns:
        The export result with the final HTML and destination path.
    """
    now = now or datetime.now()
    document = OrgDocument.load(org_file)
    root = locate_post_root(document, line=line, heading=heading)
    logger.info("Post root: %s (line %d)", root.title, root.start + 1)

    metadata = resolve_metadata(
        document,
        root,
        now=now,
        default_layout=config.export.default_layout,
        write_back=not dry_run,
    )

    if config.spellcheck.enabled:
        spellcheck(
            document.subtree_text(root),
            config.spellcheck.command,
            timeout=config.spellcheck.timeout,
        )

    source = assemble_source(
        AssemblyContext(document=document, root=root, blog_dir=config.blog.directory)
    )

    exporter = exporter or create_exporter(config.export)
    html = exporter.export(
        source,
        ExportOptions(
            title=metadata.title,
            layout=metadata.layout,
            categories=metadata.categories,
            date=now,
        ),
    )

    html = patch_front_matter(
        html,
        title=metadata.title,
        timestamp=metadata.timestamp,
        is_page=metadata.is_page,
        series=metadata.series,
        meta_title=metadata.meta_title,
    )
    html = canonicalize_links(
        html,
        blog_dir=config.blog.directory,
        base_url=config.blog.base_url,
    )

    path = output_path(
        config.blog.path,
        metadata.name,
        is_page=metadata.is_page,
        posts_subdir=config.blog.posts_subdir,
    )
    messages = commit_messages(metadata.title)

    if dry_run:
        logger.info("Dry run, would write %s", path)
        return ExportResult(path=path, metadata=metadata, html=html, written=False, messages=messages)

    write_post(path, html)
    document.save()

    history_path = config.history.path
    history = CommitMessageHistory.load(history_path, max_entries=config.history.max_entries)
    for message in messages:
        history.push(message)
    history.save(history_path)

    if not dont_show:
        show_post(path)

    return ExportResult(path=path, metadata=metadata, html=html, written=True, messages=messages)
