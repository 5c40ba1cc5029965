"""Shared fixtures: a small blog outline and an isolated config."""

from __future__ import annotations

from pathlib import Path

import pytest

from orgjekyll.config import OrgJekyllConfig

SAMPLE_ORG = """\
#+TITLE: Endless Parentheses
#+OPTIONS: toc:nil
#+PROPERTY: series Emacs tips
#+TODO: TODO READY | DONE

* Blog
:PROPERTIES:
:EXPORT_JEKYLL_LAYOUT: post
:END:
** DONE Hello World (draft)                      :emacs:org_mode:
CLOSED: [2021-03-04 Thu 09:30]
:PROPERTIES:
:meta_title: %s | Endless
:END:
Body with a [[*Older post][link]] and [[file:~/Git-Projects/blog/images/cat.png]].
*** A section
Text here.
** TODO Older post
:PROPERTIES:
:filename: 2020-01-02-older-post
:END:
Older body.
** Notes
Not a post.
* Pages
:PROPERTIES:
:EXPORT_JEKYLL_LAYOUT: page
:END:
** TODO About
About text.
** TODO Contact
:PROPERTIES:
:filename: contact
:END:
Contact text.
"""

# 1-based lines inside SAMPLE_ORG
HELLO_BODY_LINE = 15
SECTION_LINE = 17
NOTES_LINE = 24
ABOUT_LINE = 30
CONTACT_LINE = 35


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    """Remove env vars that load_config reads."""
    for key in (
        "ORGJEKYLL_BLOG_DIR",
        "ORGJEKYLL_BASE_URL",
        "ORGJEKYLL_PANDOC",
        "ORGJEKYLL_HISTORY_FILE",
        "ORGJEKYLL_SPELLCHECK",
    ):
        monkeypatch.delenv(key, raising=False)


@pytest.fixture
def org_file(tmp_path: Path) -> Path:
    path = tmp_path / "blog.org"
    path.write_text(SAMPLE_ORG, encoding="utf-8")
    return path


@pytest.fixture
def config(tmp_path: Path) -> OrgJekyllConfig:
    return OrgJekyllConfig.model_validate(
        {
            "blog": {"directory": str(tmp_path / "blog")},
            "spellcheck": {"enabled": False},
            "history": {"file": str(tmp_path / "history.json")},
        }
    )
