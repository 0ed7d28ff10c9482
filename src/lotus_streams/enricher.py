"""Enricher — the main API.  Turns a plain-text note into safe HTML.

Usage:
    from lotus_streams import Enricher, to_html

    print(to_html("hi @alice, see http://example.com #news"))
    # hi <a href='#'>@alice</a>, see
    # <a href='http://example.com'>http://example.com</a>
    # <a href='/search?search=%23news'>#news</a>

    enricher = Enricher()        # reusable, thread-safe
    result = enricher.enrich("cc @bob@example.org")
    print(result.spans[0].domain)     # "example.org"

The output is meant to be produced exactly once per raw text.  Feeding it
back in escapes it a second time.
"""

from __future__ import annotations
import logging
from dataclasses import dataclass, field
from typing import Callable, Optional

from .patterns import scan
from .types import HASHTAG, KINDS, LINK, MENTION, EnrichedText, Span

logger = logging.getLogger(__name__)

_ESCAPES = str.maketrans({
    "&": "&amp;",
    "<": "&lt;",
    ">": "&gt;",
    '"': "&quot;",
    "'": "&#39;",
})

MentionResolver = Callable[[str, Optional[str]], Optional[str]]


def escape_html(text: str) -> str:
    """Escape HTML special characters.  Nothing else is touched."""
    return text.translate(_ESCAPES)


@dataclass
class EnricherConfig:
    """Configuration for the Enricher."""
    search_path: str = "/search?search="   # hashtag links: search_path + "%23" + tag
    mention_href: str = "#"                # used when no resolver answers
    # Resolves (username, domain) to a profile url; None falls back to mention_href
    mention_resolver: MentionResolver | None = None
    # Token kinds to leave as plain (escaped) text
    skip_kinds: set[str] = field(default_factory=set)


class Enricher:
    """Plain text to annotated HTML.

    Stage 1: Escape the raw text
    Stage 2: Absolute urls become links
    Stage 3: @user and @user@domain become mention links
    Stage 4: #tag becomes a search link
    """

    def __init__(self, config: EnricherConfig | None = None) -> None:
        self.config = config or EnricherConfig()
        self._kinds = tuple(k for k in KINDS if k not in self.config.skip_kinds)

    def enrich(self, text: str, html: str | None = None) -> EnrichedText:
        """Enrich text, unless pre-rendered html is given.

        Returns an EnrichedText with the markup and the spans it annotated.
        """
        if html:
            return EnrichedText(html=html)

        spans = scan(text, self._kinds)
        logger.debug("enriched %d chars, %d spans", len(text), len(spans))
        return EnrichedText(html=self.render(text, spans), spans=spans)

    def to_html(self, text: str, html: str | None = None) -> str:
        return self.enrich(text, html).html

    def render(self, text: str, spans: list[Span]) -> str:
        """Escape text and wrap each span (sorted, non-overlapping) in an anchor."""
        out: list[str] = []
        pos = 0
        for span in spans:
            out.append(escape_html(text[pos:span.start]))
            out.append(self._anchor(span))
            pos = span.end
        out.append(escape_html(text[pos:]))
        return "".join(out)

    def mention_url(self, username: str, domain: str | None = None) -> str:
        resolver = self.config.mention_resolver
        url = resolver(username, domain) if resolver else None
        return url or self.config.mention_href

    def _anchor(self, span: Span) -> str:
        if span.kind == LINK:
            url = escape_html(span.value)
            return f"<a href='{url}'>{url}</a>"
        if span.kind == MENTION:
            # The domain is consumed by the match but only the username shows.
            href = escape_html(self.mention_url(span.value, span.domain))
            return f"<a href='{href}'>@{escape_html(span.value)}</a>"
        if span.kind == HASHTAG:
            tag = escape_html(span.value)
            return f"<a href='{escape_html(self.config.search_path)}%23{tag}'>#{tag}</a>"
        raise ValueError(f"unknown span kind: {span.kind!r}")


_default = Enricher()


def to_html(text: str, html: str | None = None) -> str:
    """Produce the HTML for a note's plain text with the default config.

    A non-empty ``html`` is returned verbatim; callers may pre-render.
    """
    return _default.to_html(text, html)
