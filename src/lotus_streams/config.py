"""YAML/dict config loader for lotus-streams.

Supports loading from a YAML file or a plain dict (for embedding
in a larger application config).

Example YAML:

    lotus_streams:
      enabled: true
      search_path: /search?search=
      mention_href: "#"
      mention_template: https://{domain}/users/{username}
      default_domain: example.org
      skip_kinds:
        - hashtag
"""

from __future__ import annotations
import logging
import string
from pathlib import Path
from typing import Any

import yaml

from .enricher import Enricher, EnricherConfig, MentionResolver, escape_html
from .types import EnrichedText, KINDS

logger = logging.getLogger(__name__)


class _NoopEnricher:
    """Escape-only enricher when annotation is disabled."""
    def enrich(self, text: str, html: str | None = None) -> EnrichedText:
        return EnrichedText(html=html or escape_html(text))
    def to_html(self, text: str, html: str | None = None) -> str:
        return self.enrich(text, html).html


def load_config(data: dict[str, Any] | None) -> dict[str, Any]:
    """Normalize a config dict (from YAML or inline)."""
    data = data or {}
    # Support nested under "lotus_streams" key or flat
    if "lotus_streams" in data:
        data = data["lotus_streams"] or {}

    skip_kinds = set(data.get("skip_kinds") or [])
    unknown = skip_kinds - set(KINDS)
    if unknown:
        raise ValueError(f"unknown token kinds in skip_kinds: {sorted(unknown)}")

    template = data.get("mention_template")
    if template is not None and not isinstance(template, str):
        raise ValueError("mention_template must be a string")
    if template:
        _template_fields(template)

    return {
        "enabled": data.get("enabled", True),
        "search_path": data.get("search_path", "/search?search="),
        "mention_href": data.get("mention_href", "#"),
        "mention_template": template,
        "default_domain": data.get("default_domain"),
        "skip_kinds": skip_kinds,
    }


def load_from_yaml(path: str | Path) -> dict[str, Any]:
    """Load config from a YAML file."""
    path = Path(path).expanduser()
    logger.debug("loading config from %s", path)
    with open(path) as f:
        return load_config(yaml.safe_load(f))


_TEMPLATE_FIELDS = {"username", "domain"}


def _template_fields(template: str) -> set[str]:
    """Placeholders used by a mention template.

    Only bare ``{username}`` and ``{domain}`` are allowed; anything else is
    rejected at load time so resolving a mention can not raise.
    """
    fields: set[str] = set()
    # Formatter.parse raises ValueError itself on unbalanced braces
    for _, name, format_spec, conversion in string.Formatter().parse(template):
        if name is None:
            continue
        if name not in _TEMPLATE_FIELDS or format_spec or conversion:
            raise ValueError(f"unsupported placeholder in mention_template: {{{name}}}")
        fields.add(name)
    return fields


def template_resolver(template: str, default_domain: str | None = None) -> MentionResolver:
    """Build a mention resolver from a url template.

    The template may use ``{username}`` and ``{domain}``.  Mentions without
    a domain use ``default_domain``; if a domain is needed and there is
    none, the resolver gives up and the mention keeps its placeholder href.
    """
    needs_domain = "domain" in _template_fields(template)

    def resolve(username: str, domain: str | None) -> str | None:
        domain = domain or default_domain
        if needs_domain and not domain:
            return None
        return template.format(username=username, domain=domain or "")

    return resolve


def create_enricher(config: dict[str, Any]) -> Enricher:
    """Create a fully configured enricher from a config dict."""
    cfg = load_config(config)

    if not cfg["enabled"]:
        # Escape only, no annotations
        return _NoopEnricher()

    resolver = None
    if cfg["mention_template"]:
        resolver = template_resolver(cfg["mention_template"], cfg["default_domain"])

    return Enricher(EnricherConfig(
        search_path=cfg["search_path"],
        mention_href=cfg["mention_href"],
        mention_resolver=resolver,
        skip_kinds=cfg["skip_kinds"],
    ))
