"""HTTP sidecar server for lotus-streams.

Runs as a lightweight stdlib HTTP server on localhost so that services
written in other stacks can enrich notes without embedding Python.

Endpoints:
    POST /enrich          — Enrich plain text (JSON body)
    POST /note            — Build a note as Activity Streams JSON
    GET  /health          — Health check

All endpoints expect/return JSON.
Body format for /enrich: {"text": "...", "html": "..."}   (html optional)
Body format for /note:   {"text": "...", "title": "...", "uid": "...", "url": "..."}
"""

from __future__ import annotations
import json
import logging
import os
from http.server import HTTPServer, BaseHTTPRequestHandler
from typing import Any

from .config import create_enricher, load_from_yaml
from .enricher import Enricher
from .objects import Note

logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("LOTUS_STREAMS_PORT", "18792"))
DEFAULT_CONFIG = os.environ.get("LOTUS_STREAMS_CONFIG", "")

# Optional request fields that must be strings when present
_STRING_FIELDS = ("text", "html", "title", "uid", "url")

# Shared state
_enricher: Enricher | None = None


def _get_enricher() -> Enricher:
    global _enricher
    if _enricher is None:
        if DEFAULT_CONFIG:
            _enricher = create_enricher(load_from_yaml(DEFAULT_CONFIG))
        else:
            _enricher = Enricher()
    return _enricher


def set_enricher(enricher: Enricher | None) -> None:
    """Replace the shared enricher (None resets to the configured default)."""
    global _enricher
    _enricher = enricher


class EnrichHandler(BaseHTTPRequestHandler):
    """HTTP request handler for the enrichment sidecar."""

    def _read_json(self) -> dict[str, Any]:
        length = int(self.headers.get("Content-Length", 0))
        body = self.rfile.read(length).decode("utf-8")
        data = json.loads(body) if body else {}
        if not isinstance(data, dict):
            raise ValueError("request body must be a JSON object")
        for key in _STRING_FIELDS:
            if data.get(key) is not None and not isinstance(data[key], str):
                raise ValueError(f"'{key}' must be a string")
        return data

    def _respond(self, status: int, data: Any) -> None:
        body = json.dumps(data, ensure_ascii=False).encode("utf-8")
        self.send_response(status)
        self.send_header("Content-Type", "application/json")
        self.send_header("Content-Length", str(len(body)))
        self.end_headers()
        self.wfile.write(body)

    def log_message(self, format: str, *args: Any) -> None:
        logger.debug("%s - " + format, self.address_string(), *args)

    def do_GET(self) -> None:
        if self.path == "/health":
            self._respond(200, {"status": "ok"})
        else:
            self._respond(404, {"error": "not found"})

    def do_POST(self) -> None:
        try:
            body = self._read_json()
        except ValueError as e:
            # bad JSON, bad utf-8 and wrong field types are all ValueErrors
            self._respond(400, {"error": str(e)})
            return

        try:
            enricher = _get_enricher()
            text = body.get("text") or ""

            if self.path == "/enrich":
                result = enricher.enrich(text, body.get("html"))
                self._respond(200, {
                    "html": result.html,
                    "spans": [s.to_dict() for s in result.spans],
                })

            elif self.path == "/note":
                note = Note(
                    text=text,
                    html=enricher.to_html(text, body.get("html")),
                    title=body.get("title"),
                    uid=body.get("uid"),
                    url=body.get("url"),
                )
                self._respond(200, note.to_json_hash())

            else:
                self._respond(404, {"error": "not found"})

        except Exception as e:
            logger.exception("request to %s failed", self.path)
            self._respond(500, {"error": str(e)})


def serve(port: int = DEFAULT_PORT) -> None:
    """Start the lotus-streams HTTP sidecar."""
    server = HTTPServer(("127.0.0.1", port), EnrichHandler)
    logger.info("lotus-streams sidecar listening on http://127.0.0.1:%d", port)
    logger.info("  config: %s", DEFAULT_CONFIG or "(defaults)")
    try:
        server.serve_forever()
    except KeyboardInterrupt:
        logger.info("shutting down")
        server.shutdown()


if __name__ == "__main__":
    import argparse
    parser = argparse.ArgumentParser(description="lotus-streams HTTP sidecar")
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    args = parser.parse_args()
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    serve(port=args.port)
