"""CLI interface for lotus-streams.

Usage:
    # Enrich a note (stdin: plain text, stdout: html)
    echo 'hi @alice, see http://example.com #news' | \
        python -m lotus_streams.cli enrich

    # Show the detected tokens too (stdout: JSON)
    echo 'cc @bob@example.org' | python -m lotus_streams.cli scan

    # Build an Activity Streams note (stdout: JSON)
    echo 'hello world' | python -m lotus_streams.cli note --title Hi

A YAML config may be given with --config (see lotus_streams.config).
"""

from __future__ import annotations
import argparse
import json
import logging
import os
import sys

from .config import create_enricher, load_from_yaml
from .enricher import Enricher
from .objects import Note


DEFAULT_CONFIG = os.environ.get("LOTUS_STREAMS_CONFIG", "")


def _build_enricher(args: argparse.Namespace) -> Enricher:
    if args.config:
        return create_enricher(load_from_yaml(args.config))
    return Enricher()


def cmd_enrich(args: argparse.Namespace) -> None:
    """Plain text on stdin to html on stdout."""
    enricher = _build_enricher(args)
    sys.stdout.write(enricher.to_html(sys.stdin.read()))
    sys.stdout.write("\n")


def cmd_scan(args: argparse.Namespace) -> None:
    """Plain text on stdin to html plus token metadata."""
    enricher = _build_enricher(args)
    result = enricher.enrich(sys.stdin.read())

    output = {
        "html": result.html,
        "spans": [s.to_dict() for s in result.spans],
    }
    json.dump(output, sys.stdout, ensure_ascii=False)
    sys.stdout.write("\n")


def cmd_note(args: argparse.Namespace) -> None:
    """Plain text on stdin to an Activity Streams note."""
    enricher = _build_enricher(args)
    text = sys.stdin.read()
    note = Note(
        text=text,
        html=enricher.to_html(text),
        title=args.title,
        uid=args.uid,
        url=args.url,
    )
    sys.stdout.write(note.to_json())
    sys.stdout.write("\n")


def main(argv: list[str] | None = None) -> None:
    parser = argparse.ArgumentParser(
        prog="lotus-streams",
        description="Activity stream objects and note enrichment",
    )
    parser.add_argument("--config", default=DEFAULT_CONFIG, help="YAML config path")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging on stderr")

    sub = parser.add_subparsers(dest="command", required=True)
    sub.add_parser("enrich", help="Enrich plain text (stdin) to html")
    sub.add_parser("scan", help="Enrich and list detected tokens as JSON")
    note = sub.add_parser("note", help="Build a note (stdin text) as JSON")
    note.add_argument("--title", default=None)
    note.add_argument("--uid", default=None)
    note.add_argument("--url", default=None)

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    cmds = {
        "enrich": cmd_enrich,
        "scan": cmd_scan,
        "note": cmd_note,
    }
    cmds[args.command](args)


if __name__ == "__main__":
    main()
