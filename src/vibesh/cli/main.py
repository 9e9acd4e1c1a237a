"""Command-line entry point.

Usage:
    vibesh                      interactive shell (direct mode)
    vibesh script.vsh           run a script (generative mode)
    cat lines.txt | vibesh      run piped input (direct mode)
    vibesh --mode retrieval     choose the initial mode
"""

import argparse
import sys
from collections.abc import Sequence

from vibesh import __version__
from vibesh.cli.app import ShellApp
from vibesh.config import get_settings
from vibesh.errors import InvalidModeError
from vibesh.logging import configure_logging
from vibesh.pipeline.models import Mode


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="vibesh",
        description="Interactive shell that turns natural language into commands.",
    )
    parser.add_argument(
        "script",
        nargs="?",
        help="Script file to run line by line (first line skipped if it is a shebang)",
    )
    parser.add_argument(
        "--mode",
        "-m",
        help=f"Initial mode: {', '.join(Mode.names())} (aliases: ai, rag)",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run vibesh and return the process exit code."""
    parser = build_parser()
    args = parser.parse_args(argv)

    mode: Mode | None = None
    if args.mode:
        try:
            mode = Mode.parse(args.mode)
        except InvalidModeError as e:
            parser.error(f"{e.message} (available: {', '.join(Mode.names())})")

    settings = get_settings()
    configure_logging(settings)

    app = ShellApp(settings)

    if args.script:
        return app.run_script(args.script, mode=mode or Mode.GENERATIVE)
    if not sys.stdin.isatty():
        return app.run_piped(sys.stdin, mode=mode or Mode.DIRECT)
    return app.run_interactive(mode=mode or Mode.DIRECT)


if __name__ == "__main__":
    sys.exit(main())
