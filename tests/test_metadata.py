"""Tests for post metadata resolution."""

from datetime import datetime

import pytest

from conftest import ABOUT_LINE, CONTACT_LINE, SAMPLE_ORG
from orgjekyll.errors import MissingFilenameError
from orgjekyll.metadata import (
    PostMetadata,
    categories_string,
    format_meta_title,
    resolve_metadata,
    slugify,
    strip_date_prefix,
    synthesize_filename,
    tag_to_category,
)
from orgjekyll.outline import OrgDocument

NOW = datetime(2021, 6, 1, 9, 30)


def _resolve(doc: OrgDocument, line: int | None = None, heading: str | None = None, **kwargs):
    entry = doc.entry_at(line) if line is not None else doc.find_heading(heading)
    root = doc.find_post_root(entry)
    return resolve_metadata(doc, root, now=NOW, **kwargs)


class TestHelpers:
    def test_tag_to_category(self):
        assert tag_to_category("org_mode") == "org-mode"
        assert tag_to_category("emacs__25") == "emacs.25"
        assert tag_to_category("a__b_c") == "a.b-c"

    def test_categories_string(self):
        assert categories_string(["org_mode", "emacs"]) == "org-mode emacs"
        assert categories_string([]) == ""

    def test_slugify_drops_parentheticals(self):
        assert slugify("Hello World (draft)") == "hello-world"

    def test_slugify_collapses_punctuation(self):
        assert slugify("What's new in Emacs 25.1?") == "what-s-new-in-emacs-25-1"

    def test_slugify_keeps_non_ascii_letters(self):
        assert slugify("Café Olé") == "caf%C3%A9-ol%C3%A9"

    def test_synthesize_filename(self):
        assert synthesize_filename("Hello World", datetime(2021, 3, 4, 9, 30)) == "2021-03-04-hello-world"

    def test_strip_date_prefix(self):
        assert strip_date_prefix("2020-01-02-older-post") == "older-post"
        assert strip_date_prefix("contact") == "contact"

    def test_format_meta_title(self):
        assert format_meta_title("%s | Endless", "Hello") == "Hello | Endless"
        assert format_meta_title("Static", "Hello") == "Static"


class TestPostMetadata:
    def test_name_prefers_filename(self):
        meta = PostMetadata(title="Hi", filename="custom", timestamp=NOW)
        assert meta.name == "custom"

    def test_name_synthesized(self):
        meta = PostMetadata(title="Hi There", timestamp=NOW)
        assert meta.name == "2021-06-01-hi-there"

    def test_is_page(self):
        assert PostMetadata(title="x", layout="page", timestamp=NOW).is_page
        assert not PostMetadata(title="x", timestamp=NOW).is_page


class TestResolveMetadata:
    def test_closed_post(self):
        doc = OrgDocument(SAMPLE_ORG)
        meta = _resolve(doc, heading="A section")

        assert meta.title == "Hello World (draft)"
        assert meta.layout == "post"
        assert meta.timestamp == datetime(2021, 3, 4, 9, 30)
        assert meta.tags == ["org_mode", "emacs"]
        assert meta.categories == "org-mode emacs"
        assert meta.series == "Emacs tips"
        assert meta.meta_title == "%s | Endless"
        assert meta.filename == "2021-03-04-hello-world"

    def test_synthesized_filename_written_back(self):
        doc = OrgDocument(SAMPLE_ORG)
        _resolve(doc, heading="Hello World (draft)")
        hello = doc.find_heading("Hello World (draft)")
        assert hello.get_local("filename") == "2021-03-04-hello-world"
        assert doc.modified

    def test_closed_post_is_not_rescheduled(self):
        doc = OrgDocument(SAMPLE_ORG)
        _resolve(doc, heading="Hello World (draft)")
        assert "SCHEDULED" not in doc.text

    def test_unscheduled_post_is_scheduled_now(self):
        doc = OrgDocument(SAMPLE_ORG)
        meta = _resolve(doc, heading="Older post")
        assert meta.timestamp == NOW
        assert meta.filename == "2020-01-02-older-post"
        assert "** TODO Older post\nSCHEDULED: <2021-06-01 Tue 09:30>\n" in doc.text

    def test_scheduled_timestamp_is_used(self):
        doc = OrgDocument("* TODO Post\nSCHEDULED: <2020-05-06 Wed 07:00>\n")
        meta = resolve_metadata(doc, doc.entries[0], now=NOW)
        assert meta.timestamp == datetime(2020, 5, 6, 7, 0)

    def test_no_write_back(self):
        doc = OrgDocument(SAMPLE_ORG)
        meta = _resolve(doc, heading="Older post", write_back=False)
        assert meta.timestamp == NOW
        assert not doc.modified
        assert doc.text == SAMPLE_ORG

    def test_page_with_filename(self):
        doc = OrgDocument(SAMPLE_ORG)
        meta = _resolve(doc, line=CONTACT_LINE)
        assert meta.is_page
        assert meta.name == "contact"

    def test_page_without_filename_fails_before_writing(self):
        doc = OrgDocument(SAMPLE_ORG)
        with pytest.raises(MissingFilenameError, match="filename"):
            _resolve(doc, line=ABOUT_LINE)
        assert not doc.modified

    def test_default_layout(self):
        doc = OrgDocument("* TODO Post\nBody\n")
        meta = resolve_metadata(doc, doc.entries[0], now=NOW, default_layout="article")
        assert meta.layout == "article"

    def test_empty_meta_title_is_none(self):
        doc = OrgDocument("* TODO Post\n:PROPERTIES:\n:meta_title:\n:END:\n")
        meta = resolve_metadata(doc, doc.entries[0], now=NOW, write_back=False)
        assert meta.meta_title is None
