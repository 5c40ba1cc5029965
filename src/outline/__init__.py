"""Heading index over Org-mode documents."""

from orgjekyll.outline.document import OrgDocument
from orgjekyll.outline.models import OrgEntry, format_timestamp, parse_timestamp, strip_markup

__all__ = [
    "OrgDocument",
    "OrgEntry",
    "format_timestamp",
    "parse_timestamp",
    "strip_markup",
]
