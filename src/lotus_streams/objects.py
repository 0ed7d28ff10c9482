"""Activity stream objects — people, notes, articles, activities and friends.

Every type is a plain dataclass with three views of itself:

    to_canonical_map()  snake_case dict, nested objects left as objects
    to_json_hash()      Activity Streams JSON conventions (camelCase, objectType)
    to_json()           the JSON hash as a string

Shared optional fields live on StreamObject; each type spells out its own
map explicitly and folds the shared part in with ``**``.
"""

from __future__ import annotations
import json
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Any, ClassVar

from .enricher import to_html

STANDARD_TYPES = (
    "article", "audio", "bookmark", "comment", "file", "folder",
    "group", "list", "note", "person", "image",
    "place", "playlist", "product", "review", "service", "status",
    "video",
)

STANDARD_VERBS = (
    "favorite", "follow", "like", "make-friend", "join", "play",
    "post", "save", "share", "tag", "update",
)


def _json_value(value: Any) -> Any:
    """Render nested objects, dates and containers for the JSON hash."""
    if isinstance(value, StreamObject):
        return value.to_json_hash()
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return [_json_value(v) for v in value]
    if isinstance(value, dict):
        return {k: _json_value(v) for k, v in value.items()}
    return value


def _normalize(value: str | None, standard: tuple[str, ...]) -> str | None:
    """Lower-case standard names; uncommon ones are kept as given."""
    if value is None:
        return None
    lowered = value.strip().lower()
    return lowered if lowered in standard else value


@dataclass(kw_only=True)
class StreamObject:
    """Fields every activity stream object may carry."""

    object_type: ClassVar[str] = "object"

    author: Person | None = None
    content: str | None = None
    title: str | None = None
    display_name: str | None = None
    summary: str | None = None
    url: str | None = None
    uid: str | None = None
    published: datetime | None = None
    updated: datetime | None = None

    def common_map(self) -> dict[str, Any]:
        return {
            "author": self.author,
            "content": self.content,
            "title": self.title,
            "display_name": self.display_name,
            "summary": self.summary,
            "url": self.url,
            "uid": self.uid,
            "published": self.published,
            "updated": self.updated,
        }

    def common_json(self) -> dict[str, Any]:
        return {
            "objectType": self.object_type,
            "id": self.uid,
            "author": _json_value(self.author),
            "content": self.content,
            "title": self.title,
            "displayName": self.display_name,
            "summary": self.summary,
            "url": self.url,
            "published": _json_value(self.published),
            "updated": _json_value(self.updated),
        }

    def to_canonical_map(self) -> dict[str, Any]:
        return self.common_map()

    def to_json_hash(self) -> dict[str, Any]:
        return self.common_json()

    def to_json(self) -> str:
        return json.dumps(self.to_json_hash(), ensure_ascii=False)


@dataclass(kw_only=True)
class Person(StreamObject):
    """Someone who writes, posts, follows or gets mentioned."""

    object_type: ClassVar[str] = "person"

    uri: str | None = None
    name: str | None = None
    email: str | None = None
    gender: str | None = None
    nickname: str | None = None
    preferred_username: str | None = None
    birthday: date | None = None
    anniversary: date | None = None
    note: str | None = None
    address: dict[str, Any] | None = None
    organization: dict[str, Any] | None = None
    extended_name: dict[str, Any] | None = None
    account: dict[str, Any] | None = None

    @property
    def short_name(self) -> str | None:
        """Best short label for this person."""
        return self.display_name or self.preferred_username or self.nickname or self.name

    def to_canonical_map(self) -> dict[str, Any]:
        return {
            "uri": self.uri,
            "name": self.name,
            "email": self.email,
            "gender": self.gender,
            "nickname": self.nickname,
            "preferred_username": self.preferred_username,
            "birthday": self.birthday,
            "anniversary": self.anniversary,
            "note": self.note,
            "address": self.address,
            "organization": self.organization,
            "extended_name": self.extended_name,
            "account": self.account,
            **self.common_map(),
        }

    def to_json_hash(self) -> dict[str, Any]:
        return {
            **self.common_json(),
            "uri": self.uri,
            "name": self.name,
            "email": self.email,
            "gender": self.gender,
            "nickname": self.nickname,
            "preferredUsername": self.preferred_username,
            "birthday": _json_value(self.birthday),
            "anniversary": _json_value(self.anniversary),
            "note": self.note,
            "address": self.address,
            "organization": self.organization,
            "extendedName": self.extended_name,
            "account": self.account,
        }


@dataclass(kw_only=True)
class Note(StreamObject):
    """A short plain-text post.  ``html`` is enriched from ``text`` unless given."""

    object_type: ClassVar[str] = "note"

    text: str = ""
    html: str | None = None
    title: str = "Untitled"

    def __post_init__(self) -> None:
        self.text = self.text or ""
        self.title = self.title or "Untitled"
        self.html = to_html(self.text, self.html)
        if self.content is None:
            self.content = self.html

    def to_canonical_map(self) -> dict[str, Any]:
        return {
            "text": self.text,
            "html": self.html,
            **self.common_map(),
        }

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "text": self.text}


@dataclass(kw_only=True)
class Article(StreamObject):
    object_type: ClassVar[str] = "article"


@dataclass(kw_only=True)
class Comment(StreamObject):
    object_type: ClassVar[str] = "comment"


@dataclass(kw_only=True)
class Image(StreamObject):
    object_type: ClassVar[str] = "image"

    full_image: str | None = None

    def to_canonical_map(self) -> dict[str, Any]:
        return {"full_image": self.full_image, **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "fullImage": self.full_image}


@dataclass(kw_only=True)
class Place(StreamObject):
    object_type: ClassVar[str] = "place"

    address: Any = None
    position: Any = None

    def to_canonical_map(self) -> dict[str, Any]:
        return {"address": self.address, "position": self.position, **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "address": self.address, "position": self.position}


@dataclass(kw_only=True)
class Question(StreamObject):
    object_type: ClassVar[str] = "question"

    options: list[Any] = field(default_factory=list)

    def to_canonical_map(self) -> dict[str, Any]:
        return {"options": list(self.options), **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "options": _json_value(self.options)}


@dataclass(kw_only=True)
class Audio(StreamObject):
    """Audio stream plus an optional embeddable player."""

    object_type: ClassVar[str] = "audio"

    embed_code: str | None = None   # HTML fragment that plays the stream
    stream: Any = None              # media link to the audio itself

    def to_canonical_map(self) -> dict[str, Any]:
        return {"embed_code": self.embed_code, "stream": self.stream, **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {
            **self.common_json(),
            "embedCode": self.embed_code,
            "stream": _json_value(self.stream),
        }


@dataclass(kw_only=True)
class File(StreamObject):
    object_type: ClassVar[str] = "file"

    file_url: str | None = None
    mime_type: str | None = None
    length: int | None = None
    md5: str | None = None

    def to_canonical_map(self) -> dict[str, Any]:
        return {
            "md5": self.md5,
            "file_url": self.file_url,
            "mime_type": self.mime_type,
            "length": self.length,
            **self.common_map(),
        }

    def to_json_hash(self) -> dict[str, Any]:
        return {
            **self.common_json(),
            "md5": self.md5,
            "fileUrl": self.file_url,
            "mimeType": self.mime_type,
            "length": self.length,
        }


@dataclass(kw_only=True)
class Product(StreamObject):
    object_type: ClassVar[str] = "product"

    full_image: str | None = None

    def to_canonical_map(self) -> dict[str, Any]:
        return {"full_image": self.full_image, **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "fullImage": self.full_image}


@dataclass(kw_only=True)
class Review(StreamObject):
    object_type: ClassVar[str] = "review"

    rating: float | None = None

    def to_canonical_map(self) -> dict[str, Any]:
        return {"rating": self.rating, **self.common_map()}

    def to_json_hash(self) -> dict[str, Any]:
        return {**self.common_json(), "rating": self.rating}


@dataclass(kw_only=True)
class Activity(StreamObject):
    """An action (``verb``) a Person took on an object.

    ``type`` and ``verb`` may be any string; the standard ones are
    normalized to lower case.  ``in_reply_to`` accepts a single activity.
    """

    object_type: ClassVar[str] = "activity"

    object: Any = None
    type: str | None = None
    verb: str | None = None
    target: Any = None
    actor: Person | None = None
    source: Any = None
    in_reply_to: Any = None
    replies: list[Activity] = field(default_factory=list)
    mentions: list[Person] = field(default_factory=list)
    likes: list[Person] = field(default_factory=list)
    shares: list[Person] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.type = _normalize(self.type, STANDARD_TYPES)
        self.verb = _normalize(self.verb, STANDARD_VERBS)
        if self.in_reply_to is None:
            self.in_reply_to = []
        elif not isinstance(self.in_reply_to, list):
            self.in_reply_to = [self.in_reply_to]

    def to_canonical_map(self) -> dict[str, Any]:
        return {
            "source": self.source,
            "in_reply_to": list(self.in_reply_to),
            "replies": list(self.replies),
            "mentions": list(self.mentions),
            "likes": list(self.likes),
            "shares": list(self.shares),
            "object": self.object,
            "target": self.target,
            "actor": self.actor,
            "verb": self.verb,
            "type": self.type,
            **self.common_map(),
        }

    def to_json_hash(self) -> dict[str, Any]:
        return {
            **self.common_json(),
            "object": _json_value(self.object),
            "actor": _json_value(self.actor),
            "target": _json_value(self.target),
            "type": self.type,
            "verb": self.verb,
            "source": _json_value(self.source),
            "inReplyTo": _json_value(self.in_reply_to),
            "replies": _json_value(self.replies),
            "mentions": _json_value(self.mentions),
            "likes": _json_value(self.likes),
            "shares": _json_value(self.shares),
        }
