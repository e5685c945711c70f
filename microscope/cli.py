"""
microscope: command-line Microdata extractor.

Usage:
  microscope https://example.com/page          fetch and extract
  microscope --base-url https://example.com/ < page.html
  microscope URL --template "{type[0]} {properties[name][0]}"

Prints the extracted items as JSON (or one rendered template line per
top-level item). Exits 1 on fetch or parse failure, 2 on a bad template.
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from microscope.analyzer.orchestrator import parse_html, parse_url
from microscope.exceptions import FetchError, ParseError
from microscope.models.item import Microdata

err_console = Console(stderr=True)


class _Missing(dict):
    def __missing__(self, key):
        return ""


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="microscope",
        description="Extract HTML Microdata items as JSON.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--version", action="version", version="microscope 1.0.0"
    )
    parser.add_argument(
        "url", nargs="?", default=None,
        help="Page to fetch. Reads the document from stdin when omitted.",
    )
    parser.add_argument(
        "--base-url", default="",
        help="Base URL for relative links when reading stdin.",
    )
    parser.add_argument(
        "--charset", default=None,
        help="Declared charset of the stdin document (default: sniffed).",
    )
    parser.add_argument(
        "--render", action="store_true",
        help="Render the page in headless Chromium before extracting.",
    )
    parser.add_argument(
        "--template", default=None,
        help=(
            "str.format template applied to each top-level item; "
            "fields: type, id, properties, json."
        ),
    )
    parser.add_argument(
        "--indent", type=int, default=None,
        help="Indent JSON output by N spaces.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Log progress to stderr.",
    )
    return parser


def render_template(template: str, data: Microdata) -> List[str]:
    """One rendered line per top-level item."""
    lines = []
    for item in data.to_dict()["items"]:
        fields = _Missing(item)
        fields["json"] = json.dumps(item, separators=(",", ":"), ensure_ascii=False)
        lines.append(template.format_map(fields))
    return lines


def run(args: argparse.Namespace) -> int:
    try:
        if args.url:
            data = parse_url(args.url, render=args.render)
        else:
            data = parse_html(
                sys.stdin.buffer.read(),
                base_url=args.base_url,
                charset=args.charset,
            )
    except FetchError as e:
        err_console.print(f"[red]Fetch failed:[/red] {escape(str(e))}")
        return 1
    except ParseError as e:
        err_console.print(f"[red]Parse failed:[/red] {escape(str(e))}")
        return 1

    if args.template is not None:
        try:
            lines = render_template(args.template, data)
        except (KeyError, IndexError, AttributeError, ValueError) as e:
            err_console.print(f"[red]Invalid template:[/red] {escape(repr(e))}")
            return 2
        for line in lines:
            sys.stdout.write(line + "\n")
        return 0

    sys.stdout.write(data.to_json(indent=args.indent) + "\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO if args.verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        stream=sys.stderr,
    )

    return run(args)


if __name__ == "__main__":
    sys.exit(main())
