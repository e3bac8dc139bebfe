"""Command-line interface.

Usage:
    rastro transform src/ --write
    rastro transform src/app/page.tsx          # prints the rewritten file
    rastro parse-stack trace.txt               # frames as JSON
    node app.js 2>&1 | rastro resolve-stack --skip 1

Exit codes: 0 on success, 1 when a path does not exist or cannot be read or
decoded, 2 on usage errors. One unreadable file does not stop the others.

"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import asdict
from pathlib import Path

from rastro import __version__
from rastro.adapters import (
    DEFAULT_EXCLUDE,
    DEFAULT_INCLUDE,
    FileFilter,
    iter_source_files,
    transform_file,
)
from rastro.errors import ConfigError
from rastro.stack import SourceLocationResolver, parse_stack

EXIT_OK = 0
EXIT_FAILURE = 1


def _read_input(path: str | None) -> str:
    if path is None or path == "-":
        return sys.stdin.read()
    return Path(path).read_text(encoding="utf-8")


def _cmd_transform(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    try:
        file_filter = FileFilter(include=args.include or None, exclude=args.exclude or None)
    except ConfigError as e:
        parser.error(str(e))

    exit_code = EXIT_OK
    single_file = len(args.paths) == 1 and Path(args.paths[0]).is_file()
    total = changed = 0

    for raw in args.paths:
        root = Path(raw)
        if not root.exists():
            print(f"rastro: {raw}: no such file or directory", file=sys.stderr)
            exit_code = EXIT_FAILURE
            continue
        for path in iter_source_files(root, file_filter):
            total += 1
            try:
                result = transform_file(path, write=args.write)
            except (OSError, UnicodeDecodeError) as e:
                print(f"rastro: {path}: {e}", file=sys.stderr)
                exit_code = EXIT_FAILURE
                continue
            if single_file and not args.write:
                sys.stdout.write(result.text)
                continue
            if result.changed:
                changed += 1
                verb = "rewrote" if args.write else "would rewrite"
                print(f"{verb} {path} ({len(result.edits)} edit(s))")

    if not single_file or args.write:
        verb = "rewritten" if args.write else "to rewrite"
        print(f"{changed} of {total} file(s) {verb}")
    return exit_code


def _cmd_parse_stack(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    try:
        text = _read_input(args.file)
    except (OSError, UnicodeDecodeError) as e:
        print(f"rastro: {args.file}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    frames = [frame.to_dict() for frame in parse_stack(text)]
    print(json.dumps(frames, indent=2))
    return EXIT_OK


def _cmd_resolve_stack(args: argparse.Namespace, parser: argparse.ArgumentParser) -> int:
    if args.skip < 0:
        parser.error("--skip must not be negative")
    try:
        text = _read_input(args.file)
    except (OSError, UnicodeDecodeError) as e:
        print(f"rastro: {args.file}: {e}", file=sys.stderr)
        return EXIT_FAILURE
    record = SourceLocationResolver().resolve(args.skip, text=text)
    print(json.dumps(asdict(record), indent=2))
    return EXIT_OK


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="rastro",
        description="Inject and resolve source locations for log calls",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    transform = subparsers.add_parser("transform", help="Inject __source into monitored calls")
    transform.add_argument("paths", nargs="+", metavar="PATH", help="Files or directories")
    transform.add_argument("--write", action="store_true", help="Rewrite files in place")
    transform.add_argument(
        "--include", default=DEFAULT_INCLUDE, metavar="RE", help="Files to rewrite (regex)"
    )
    transform.add_argument(
        "--exclude", default=DEFAULT_EXCLUDE, metavar="RE", help="Paths to skip (regex)"
    )
    transform.set_defaults(handler=_cmd_transform)

    parse_stack_cmd = subparsers.add_parser("parse-stack", help="Parse stack text into frames")
    parse_stack_cmd.add_argument(
        "file", nargs="?", metavar="FILE", help="Stack text (default stdin)"
    )
    parse_stack_cmd.set_defaults(handler=_cmd_parse_stack)

    resolve = subparsers.add_parser("resolve-stack", help="Resolve the first user frame")
    resolve.add_argument("file", nargs="?", metavar="FILE", help="Stack text (default stdin)")
    resolve.add_argument("--skip", type=int, default=0, metavar="N", help="User frames to skip")
    resolve.set_defaults(handler=_cmd_resolve_stack)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")

    return args.handler(args, parser)


if __name__ == "__main__":
    sys.exit(main())
