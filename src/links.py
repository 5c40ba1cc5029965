"""Make links in exported HTML root-relative."""

from __future__ import annotations

import re
from pathlib import Path

_FILE_SCHEME_RE = re.compile(r'((?:href|src)=")file:(?://)?(?=/)')


def _with_slash(prefix: str) -> str:
    return prefix.rstrip("/") + "/"


def canonicalize_links(html: str, *, blog_dir: str, base_url: str) -> str:
    """Strip ``file://`` and site prefixes from ``href``/``src`` values.

    ``href="file:///home/me/blog/bar"`` and
    ``href="http://example.com/bar"`` both become ``href="/bar"`` when the
    blog directory is ``/home/me/blog`` and the base URL
    ``http://example.com``. Already-canonical output is left unchanged.
    """
    html = _FILE_SCHEME_RE.sub(r"\1", html)

    prefixes = {_with_slash(base_url), _with_slash(blog_dir), _with_slash(str(Path(blog_dir).expanduser()))}
    alternatives = "|".join(re.escape(p) for p in sorted(prefixes, key=len, reverse=True))
    return re.sub(rf'href="(?:{alternatives})', 'href="/', html)
