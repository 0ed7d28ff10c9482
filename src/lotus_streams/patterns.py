"""Token grammar for note enrichment: links, @mentions and #hashtags.

Tokens are found on the raw text, never on escaped output, so a match can
not end halfway through an HTML entity.  Kinds are scanned in priority
order and each kind only looks at the regions no earlier kind claimed:
a URL query string like ``?q=@me#frag`` belongs to the link, full stop.
"""

from __future__ import annotations
import re
from collections.abc import Callable, Iterable
from typing import Any

import regex

from .types import HASHTAG, KINDS, LINK, MENTION, Span

# Absolute address; trailing punctuation like "." or ")" stays outside.
LINK_PATTERN = re.compile(r"https?://\S+[a-zA-Z0-9/}]")

# Almost anything goes in a username except what messes with urls, and it
# can't end in sentence punctuation or a closing bracket/quote.  The escapable
# characters never appear in a username either.
_NAME_CHAR = r"""[^ \t\n\r\f&?=@%/#<>"']"""
_NAME_LAST = r"""[^ \t\n\r\f&?=@%/#<>"'.!:;,\]})]"""
_NAME = _NAME_CHAR + "*" + _NAME_LAST

# "@user" or "@user@domain", at the start or after whitespace / an opener.
MENTION_PATTERN = re.compile(
    r"""(?<![^ \t\n\r\f"'(\[{])"""
    r"@(" + _NAME + r")"
    r"(?:@(" + _NAME + r"))?"
)

# "#tag" at the start or after ASCII whitespace (checked in _hashtag).  A tag
# is letters, marks, numbers and connector punctuation, so decomposed accents,
# Indic vowel signs and "‿" stay inside it; stdlib re has no \p classes.
HASHTAG_PATTERN = regex.compile(r"#([\p{L}\p{M}\p{N}\p{Pc}]+)")
_HASHTAG_BOUNDARY = " \t\n\r\f\v"


def _link(m: re.Match[str]) -> Span:
    return Span(kind=LINK, start=m.start(), end=m.end(), text=m.group(), value=m.group())


def _mention(m: re.Match[str]) -> Span:
    return Span(
        kind=MENTION,
        start=m.start(),
        end=m.end(),
        text=m.group(),
        value=m.group(1),
        domain=m.group(2),
    )


def _hashtag(m: regex.Match[str]) -> Span | None:
    start = m.start()
    if start > 0 and m.string[start - 1] not in _HASHTAG_BOUNDARY:
        return None
    return Span(kind=HASHTAG, start=start, end=m.end(), text=m.group(), value=m.group(1))


# Each tokenizer: (kind, compiled_regex, span_builder) in priority order.
# A builder returns None to reject a match.
_TOKENIZERS: list[tuple[str, Any, Callable[[Any], Span | None]]] = [
    (LINK, LINK_PATTERN, _link),
    (MENTION, MENTION_PATTERN, _mention),
    (HASHTAG, HASHTAG_PATTERN, _hashtag),
]


def scan(text: str, kinds: Iterable[str] = KINDS) -> list[Span]:
    """Tokenize text into sorted, non-overlapping spans."""
    wanted = set(kinds)
    spans: list[Span] = []
    for kind, pattern, build in _TOKENIZERS:
        if kind not in wanted:
            continue
        # pos/endpos keep lookbehinds honest: the character before a gap is
        # still visible, so nothing right after a link counts as a boundary.
        for start, end in _gaps(spans, len(text)):
            found = (build(m) for m in pattern.finditer(text, start, end))
            spans.extend(s for s in found if s is not None)
        spans.sort(key=lambda s: s.start)
    return spans


def _gaps(spans: list[Span], length: int) -> list[tuple[int, int]]:
    """Regions of the text not covered by any span (spans must be sorted)."""
    gaps: list[tuple[int, int]] = []
    pos = 0
    for s in spans:
        if s.start > pos:
            gaps.append((pos, s.start))
        pos = s.end
    if pos < length:
        gaps.append((pos, length))
    return gaps
