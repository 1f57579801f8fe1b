"""knead CLI — ``knead [root]`` builds, ``knead --dev [root]`` serves.

Entry point for the ``knead`` command-line interface.

Exit codes:
    0  build succeeded (or dev server stopped normally)
    1  build finished with errors, or the dev server could not start
    2  invalid configuration
"""

from __future__ import annotations

import argparse
import sys

EXIT_OK = 0
EXIT_FAILED = 1
EXIT_CONFIG = 2


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the knead CLI."""
    parser = argparse.ArgumentParser(
        prog="knead",
        description="Build a static site from templates, data and style sheets.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("root", nargs="?", default=".", help="Site root directory")
    parser.add_argument(
        "-d", "--dev",
        action="store_true",
        help="Start the development server instead of building",
    )

    # Defaults are None so that values from knead.yaml/knead.toml apply
    # unless overridden on the command line.
    parser.add_argument("--output", default=None, help="Output directory (build)")
    parser.add_argument("--host", default=None, help="Bind address (dev)")
    parser.add_argument("--port", type=int, default=None, help="Bind port (dev)")
    parser.add_argument(
        "--no-minify",
        dest="minify",
        action="store_const",
        const=False,
        default=None,
        help="Write HTML and CSS unminified",
    )
    parser.add_argument(
        "--clean",
        action="store_const",
        const=True,
        default=None,
        help="Empty the output directory before writing",
    )
    parser.add_argument(
        "--base-url", default=None, help="Deployed site URL (URL global, sitemap)",
    )
    parser.add_argument(
        "--workers", type=int, default=None, help="Render threads for builds",
    )
    return parser


def _get_version() -> str:
    """Get the package version."""
    from knead import __version__

    return __version__


def main(argv: list[str] | None = None) -> int:
    """CLI entry point.  Returns the process exit code."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from knead._errors import ConfigError, PortInUseError
    from knead.app import build, dev

    try:
        if args.dev:
            dev(root=args.root, host=args.host, port=args.port)
            return EXIT_OK

        report = build(
            root=args.root,
            output=args.output,
            minify=args.minify,
            clean=args.clean,
            base_url=args.base_url,
            workers=args.workers,
        )
    except ConfigError as exc:
        print(f"  Configuration error: {exc}", file=sys.stderr)
        return EXIT_CONFIG
    except PortInUseError as exc:
        print(f"  {exc}", file=sys.stderr)
        return EXIT_FAILED
    except KeyboardInterrupt:
        return EXIT_OK

    return EXIT_OK if report.ok else EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
