"""lotus-streams — activity stream objects and safe note enrichment."""

from .enricher import Enricher, EnricherConfig, escape_html, to_html
from .patterns import scan
from .config import create_enricher, load_config, load_from_yaml
from .types import EnrichedText, Span
from .objects import (
    Activity, Article, Audio, Comment, File, Image, Note, Person, Place,
    Product, Question, Review, StreamObject,
)

__all__ = [
    "Enricher", "EnricherConfig", "escape_html", "to_html",
    "scan",
    "create_enricher", "load_config", "load_from_yaml",
    "EnrichedText", "Span",
    "Activity", "Article", "Audio", "Comment", "File", "Image", "Note",
    "Person", "Place", "Product", "Question", "Review", "StreamObject",
]
__version__ = "0.1.0"
