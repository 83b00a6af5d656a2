"""Description sanitizer — last line of defense before text reaches a browser.

Checks interpolate values (paths, versions, server banners) into their
descriptions and some checks come from third-party extensions, so every
serialized title and description passes through here.
"""

from __future__ import annotations

import html

from bs4 import BeautifulSoup
from bs4.element import PreformattedString

ALLOWED_TAGS = frozenset(
    {"br", "p", "strong", "b", "em", "i", "u", "code", "pre", "ul", "ol", "li"}
)

# Removed together with everything inside them.
DROPPED_ELEMENTS = ["script", "style", "iframe"]


class DescriptionSanitizer:
    """Allow-list HTML filter built on BeautifulSoup's ``html.parser``."""

    def __init__(self, allowed_tags: frozenset[str] = ALLOWED_TAGS) -> None:
        self.allowed_tags = allowed_tags

    def sanitize(self, description: str) -> str:
        """Keep allow-listed formatting tags (without attributes), unwrap the rest."""
        if not description:
            return ""

        soup = self._parse(description)
        for tag in soup.find_all(True):
            if tag.name in self.allowed_tags:
                tag.attrs = {}
            else:
                tag.unwrap()
        return str(soup)

    def strip_tags(self, text: str) -> str:
        """Return ``text`` with every tag removed, safe to embed in HTML.

        Entities are decoded while parsing, so ``<``, ``>`` and ``&`` are
        escaped again on the way out.
        """
        return html.escape(self.plain_text(text), quote=False)

    def plain_text(self, text: str) -> str:
        """Return the decoded text of ``text``. Not safe for HTML output."""
        if not text:
            return ""
        return self._parse(text).get_text()

    def _parse(self, markup: str) -> BeautifulSoup:
        soup = BeautifulSoup(markup, "html.parser")
        for element in soup.find_all(DROPPED_ELEMENTS):
            element.decompose()
        # comments, doctypes, CDATA and processing instructions
        for comment in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
            comment.extract()
        return soup


default_sanitizer = DescriptionSanitizer()
