"""Export a single Org-mode subtree as a Jekyll blog post."""

__version__ = "0.3.0"
