"""Command-line interface for help2mdx."""

from __future__ import annotations

import argparse
import os
import sys
from pathlib import Path

from .version import __version__

FROM_DIR_ENV = "HELP2MDX_FROM_DIR"
SITE_DIR_ENV = "HELP2MDX_SITE_DIR"

SUCCESS_MESSAGE = "Documentation converted successfully."
FAILURE_BANNER = "Conversion failed."


def _get_usage() -> str:
    return (
        f"help2mdx {__version__}\n"
        "Usage:\n"
        "  help2mdx [--help] [--version|--ver]\n"
        "  help2mdx --from-dir FROM_DIR [--site-dir SITE_DIR] [options]\n\n"
        "Options:\n"
        f"  --from-dir DIR     Help-center export holding index.html, templates/, inline-images/ (env: {FROM_DIR_ENV})\n"
        f"  --site-dir DIR     Documentation site root (default: current directory, env: {SITE_DIR_ENV})\n"
        "  --docs-dir DIR     Markdown output directory (default: SITE_DIR/docs)\n"
        "  --static-dir DIR   Static image directory (default: SITE_DIR/static/img)\n"
        "  --verbose          Verbose progress logs\n"
        "  --debug            Debug logs"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--ver", action="store_true")
    parser.add_argument("--from-dir", help="Help-center export directory")
    parser.add_argument("--site-dir", help="Documentation site root")
    parser.add_argument("--docs-dir", help="Markdown output directory")
    parser.add_argument("--static-dir", help="Static image directory")
    parser.add_argument("--verbose", action="store_true", help="Verbose progress logs")
    parser.add_argument("--debug", action="store_true", help="Debug logs")
    return parser


def _resolve_dir(value: str | None) -> Path | None:
    if not value:
        return None
    return Path(value).expanduser().resolve()


def _paths_overlap(first: Path, second: Path) -> bool:
    first, second = first.resolve(), second.resolve()
    return first == second or first in second.parents or second in first.parents


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    args, unknown = parser.parse_known_args(argv)
    if unknown:
        print(_get_usage())
        return 2

    if args.help:
        print(_get_usage())
        return 0

    if args.version or args.ver:
        print(__version__)
        return 0

    from_dir = _resolve_dir(args.from_dir or os.environ.get(FROM_DIR_ENV))
    if from_dir is None:
        print(_get_usage())
        print(f"Option --from-dir is required unless {FROM_DIR_ENV} is set", file=sys.stderr)
        return 6
    if not from_dir.is_dir():
        print(f"Source directory not found: {from_dir}", file=sys.stderr)
        return 6

    site_dir = _resolve_dir(args.site_dir or os.environ.get(SITE_DIR_ENV)) or Path.cwd()
    if site_dir.exists() and not site_dir.is_dir():
        print(f"Site path is not a directory: {site_dir}", file=sys.stderr)
        return 6

    from help2mdx import core

    core.setup_logging(args.verbose, args.debug)

    config = core.ConversionConfig(
        from_dir=from_dir,
        site_dir=site_dir,
        docs_dir=_resolve_dir(args.docs_dir),
        static_img_dir=_resolve_dir(args.static_dir),
        verbose=bool(args.verbose),
        debug=bool(args.debug),
    )

    for output_dir in (config.output_docs_dir, config.output_images_dir):
        if _paths_overlap(output_dir, from_dir):
            print(f"Output directory overlaps the source export: {output_dir} (source: {from_dir})", file=sys.stderr)
            return 7

    try:
        core.run_conversion_pipeline(config)
    except Exception as exc:
        print(FAILURE_BANNER, file=sys.stderr)
        print(str(exc) or repr(exc), file=sys.stderr)
        return core.EXIT_CONVERSION_FAILED

    print(SUCCESS_MESSAGE)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
