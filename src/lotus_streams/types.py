"""Core types."""

from __future__ import annotations
from dataclasses import dataclass, field

LINK = "link"
MENTION = "mention"
HASHTAG = "hashtag"

# Annotation order matters: earlier kinds claim text first.
KINDS: tuple[str, ...] = (LINK, MENTION, HASHTAG)


@dataclass(frozen=True, slots=True)
class Span:
    """A single detected token in the raw (unescaped) text."""
    kind: str              # "link" | "mention" | "hashtag"
    start: int
    end: int
    text: str
    value: str             # url, username or tag body
    domain: str | None = None  # mentions only: the "@domain" suffix

    def to_dict(self) -> dict[str, object]:
        return {
            "kind": self.kind,
            "start": self.start,
            "end": self.end,
            "text": self.text,
            "value": self.value,
            "domain": self.domain,
        }


@dataclass(slots=True)
class EnrichedText:
    """Result of enriching a plain-text value."""
    html: str
    spans: list[Span] = field(default_factory=list)
