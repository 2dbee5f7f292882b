#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from wxformat.markup import adapt_for_wechat, format_html, minify_html, repair_html, validate_html

_TRANSFORMS = {
    "format": format_html,
    "minify": minify_html,
    "fix": repair_html,
    "adapt": adapt_for_wechat,
}


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Run the WeChat HTML helpers over a file or stdin.")
    parser.add_argument("command", choices=sorted([*_TRANSFORMS, "validate"]))
    parser.add_argument(
        "source",
        type=Path,
        nargs="?",
        default=None,
        help="HTML file to read (default: stdin).",
    )
    parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Optional output path.",
    )
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = parse_args(argv)
    if args.source is not None and not args.source.exists():
        print(f"File not found: {args.source}")
        return 1

    markup = args.source.read_text(encoding="utf-8") if args.source else sys.stdin.read()

    if args.command == "validate":
        result = validate_html(markup)
        output = json.dumps(result.as_dict(), ensure_ascii=False, indent=2)
        exit_code = 0 if result.is_valid else 2
    else:
        output = _TRANSFORMS[args.command](markup)
        exit_code = 0

    if args.out:
        args.out.parent.mkdir(parents=True, exist_ok=True)
        args.out.write_text(output, encoding="utf-8")
        print(f"Wrote {args.command} output to {args.out}")
    else:
        print(output)
    return exit_code


if __name__ == "__main__":
    raise SystemExit(main())
