"""Extraction of ``go-import`` meta tags from a ``?go-get=1`` page.

A vanity import server answers ``https://example.com/module?go-get=1`` with
HTML carrying a tag such as::

    <meta name="go-import" content="example.com/module git https://github.com/org/repo">
"""
from __future__ import annotations

import html.parser
from dataclasses import dataclass
from typing import List, Optional


@dataclass(frozen=True)
class MetaImport:
    """One ``go-import`` declaration."""
    prefix: str
    vcs: str
    repo_url: str


class _GoImportParser(html.parser.HTMLParser):
    """Collect go-import meta tags until the document body starts."""

    def __init__(self) -> None:
        super().__init__(convert_charrefs=True)
        self.imports: List[MetaImport] = []
        self._done = False

    def handle_starttag(self, tag, attrs):
        if self._done:
            return
        if tag == "body":
            self._done = True
            return
        if tag != "meta":
            return
        attrs_dict = {k.lower(): (v or "") for k, v in attrs}
        if attrs_dict.get("name", "").lower() != "go-import":
            return
        parts = attrs_dict.get("content", "").split()
        if len(parts) == 3:
            self.imports.append(MetaImport(prefix=parts[0], vcs=parts[1], repo_url=parts[2]))

    def handle_startendtag(self, tag, attrs):
        self.handle_starttag(tag, attrs)

    def handle_endtag(self, tag):
        if tag == "head":
            self._done = True


def parse_meta_imports(document: str) -> List[MetaImport]:
    """Return every well-formed go-import declaration in the document head."""
    parser = _GoImportParser()
    parser.feed(document)
    parser.close()
    return parser.imports


def match_meta_import(
    imports: List[MetaImport],
    import_path: str,
    supported_vcs: Optional[List[str]] = None,
) -> Optional[MetaImport]:
    """Pick the declaration whose prefix serves ``import_path``.

    The prefix must equal the path or be a ``/``-bounded prefix of it. ``mod``
    declarations and VCS kinds outside ``supported_vcs`` are ignored. The
    longest matching prefix wins.
    """
    best: Optional[MetaImport] = None
    for meta in imports:
        if meta.vcs == "mod":
            continue
        if supported_vcs is not None and meta.vcs not in supported_vcs:
            continue
        if import_path != meta.prefix and not import_path.startswith(meta.prefix + "/"):
            continue
        if best is None or len(meta.prefix) > len(best.prefix):
            best = meta
    return best
