"""Tests for link canonicalization in exported HTML."""

from pathlib import Path

from orgjekyll.links import canonicalize_links

BLOG = "/home/me/blog/"
BASE = "http://endlessparentheses.com/"


def _canon(html: str) -> str:
    return canonicalize_links(html, blog_dir=BLOG, base_url=BASE)


class TestCanonicalizeLinks:
    def test_file_scheme_into_blog(self):
        assert _canon('<a href="file:///home/me/blog/other.html">x</a>') == '<a href="/other.html">x</a>'

    def test_base_url(self):
        assert _canon('<a href="http://endlessparentheses.com/foo.html">') == '<a href="/foo.html">'

    def test_root_relative_file_link(self):
        assert _canon('<a href="file:/other.html">') == '<a href="/other.html">'

    def test_image_src_scheme_stripped(self):
        assert _canon('<img src="file:///images/cat.png" />') == '<img src="/images/cat.png" />'

    def test_external_links_untouched(self):
        html = '<a href="https://gnu.org/">gnu</a><a href="/local.html">l</a>'
        assert _canon(html) == html

    def test_idempotent(self):
        html = (
            '<a href="file:///home/me/blog/a.html">a</a>'
            '<a href="http://endlessparentheses.com/b.html">b</a>'
        )
        once = _canon(html)
        assert _canon(once) == once

    def test_tilde_blog_dir(self):
        home = str(Path("~").expanduser()).rstrip("/")
        html = f'<a href="file://{home}/blog/x.html">'
        out = canonicalize_links(html, blog_dir="~/blog", base_url=BASE)
        assert out == '<a href="/x.html">'

    def test_base_url_without_slash(self):
        out = canonicalize_links(
            '<a href="http://example.com/p.html">', blog_dir=BLOG, base_url="http://example.com"
        )
        assert out == '<a href="/p.html">'
