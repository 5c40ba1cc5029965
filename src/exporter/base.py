"""Base class for subtree-to-HTML exporters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from pydantic import BaseModel


class ExportOptions(BaseModel):
    """Per-export settings handed to the exporter with the source text."""

    title: str
    layout: str = "post"
    categories: str = ""
    date: datetime


class BlogExporter(ABC):
    """Turns an assembled Org source into a front-matter-delimited HTML document."""

    @abstractmethod
    def export(self, source: str, options: ExportOptions) -> str:
        """Export *source* (shared header followed by one subtree).

        Returns:
            ``---`` delimited front matter followed by body HTML.
        """
