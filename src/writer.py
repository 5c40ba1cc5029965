"""Write the finished post into the blog and record commit-message snippets."""

from __future__ import annotations

import json
import logging
from pathlib import Path

import typer
from pydantic import BaseModel, Field

logger = logging.getLogger(__name__)

POSTS_SUBDIR = "_posts"


def output_path(blog_dir: Path, name: str, *, is_page: bool, posts_subdir: str = POSTS_SUBDIR) -> Path:
    """Pages live at the blog root, posts under ``_posts/``."""
    base = blog_dir if is_page else blog_dir / posts_subdir
    return base / f"{name}.html"


def write_post(path: Path, text: str) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    logger.info("Wrote %s", path)


def show_post(path: Path) -> None:
    """Open *path* with the system's default viewer."""
    code = typer.launch(str(path))
    if code:
        logger.warning("Viewer exited with status %d for %s", code, path)


class CommitMessageHistory(BaseModel):
    """Ring of reusable text snippets, newest first."""

    entries: list[str] = Field(default_factory=list)
    max_entries: int = 60

    def push(self, text: str) -> None:
        if text in self.entries:
            self.entries.remove(text)
        self.entries.insert(0, text)
        del self.entries[self.max_entries :]

    @classmethod
    def load(cls, path: Path, *, max_entries: int = 60) -> CommitMessageHistory:
        if not path.exists():
            return cls(max_entries=max_entries)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
            return cls.model_validate({**data, "max_entries": max_entries})
        except (json.JSONDecodeError, ValueError, TypeError, OSError):
            logger.warning("Corrupt commit-message history at %s, starting fresh", path)
            return cls(max_entries=max_entries)

    def save(self, path: Path) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(
            self.model_dump_json(include={"entries"}, indent=2),
            encoding="utf-8",
        )


def commit_messages(title: str) -> list[str]:
    """Snippets for the commit that publishes *title*, in push order."""
    return [f"UPDATE: {title}", f"POST: {title}"]
