"""Entry point for ``python -m convo_coach``.

Provides a CLI that runs the annotation pipeline over a saved upstream
response.  Uses stdlib :mod:`argparse` for argument parsing.

Subcommands:
    annotate -- Default. Annotate a feedback response.
    summary  -- Parse a GOOD/BAD summary response.

Exit codes:
    0 -- Completed successfully (including empty results).
    1 -- An error occurred (file not found, unreadable, not UTF-8, config error).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from convo_coach.config import ConfigError, Settings, load_settings
from convo_coach.demo_output import format_summary, print_annotated_transcript
from convo_coach.log import setup_logging
from convo_coach.pipeline import annotate_feedback
from convo_coach.summary import parse_summary

_STDIN = "-"


def build_parser() -> argparse.ArgumentParser:
    """Build and return the CLI argument parser with subcommands."""
    parser = argparse.ArgumentParser(
        prog="convo-coach",
        description="Turn upstream conversation feedback into annotated transcripts.",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- "annotate" subcommand (default) --------------------------------
    annotate_parser = subparsers.add_parser(
        "annotate",
        help="Annotate a saved feedback response.",
    )
    annotate_parser.add_argument(
        "response_file",
        type=str,
        help="Path to the raw response text, or '-' for stdin.",
    )
    annotate_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print the client JSON payload instead of the console report.",
    )
    annotate_parser.add_argument(
        "--marker",
        type=str,
        default=None,
        help=(
            "Override the highlight wrapper token "
            "(defaults to HIGHLIGHT_MARKER from config)."
        ),
    )
    annotate_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    # --- "summary" subcommand -------------------------------------------
    summary_parser = subparsers.add_parser(
        "summary",
        help="Parse a saved GOOD/BAD summary response.",
    )
    summary_parser.add_argument(
        "response_file",
        type=str,
        help="Path to the raw response text, or '-' for stdin.",
    )
    summary_parser.add_argument(
        "--json",
        action="store_true",
        default=False,
        help="Print JSON instead of the console report.",
    )
    summary_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    return parser


def _resolve_command(
    parser: argparse.ArgumentParser,
    argv: list[str],
) -> argparse.Namespace:
    """Parse *argv*, prepending ``annotate`` when no subcommand is given.

    ``python -m convo_coach response.txt`` and
    ``python -m convo_coach --json response.txt`` therefore both annotate.
    """
    known_subcommands = {"annotate", "summary"}
    if not argv:
        argv = ["annotate"]
    elif argv[0] in {"-h", "--help"}:
        pass
    elif argv[0] not in known_subcommands:
        argv = ["annotate", *argv]

    return parser.parse_args(argv)


def _read_response(name: str) -> str | None:
    """Read the response text, printing an error and returning ``None`` on failure."""
    if name == _STDIN:
        return sys.stdin.read()

    path = Path(name)
    if not path.exists():
        print(f"Error: File not found: {path}", file=sys.stderr)
        return None
    if not path.is_file():
        print(f"Error: Not a file: {path}", file=sys.stderr)
        return None

    try:
        return path.read_text(encoding="utf-8")
    except PermissionError:
        print(f"Error: Permission denied: {path}", file=sys.stderr)
        return None
    except UnicodeDecodeError:
        print(f"Error: File is not valid UTF-8: {path}", file=sys.stderr)
        return None


def _handle_annotate(args: argparse.Namespace, settings: Settings) -> int:
    raw = _read_response(args.response_file)
    if raw is None:
        return 1

    result = annotate_feedback(
        raw,
        highlight_marker=args.marker or settings.highlight_marker,
        critique_label=settings.critique_label,
    )

    if args.json:
        sys.stdout.write(result.to_payload().model_dump_json(indent=2) + "\n")
    else:
        print_annotated_transcript(result)
    return 0


def _handle_summary(args: argparse.Namespace) -> int:
    raw = _read_response(args.response_file)
    if raw is None:
        return 1

    summary = parse_summary(raw)
    if args.json:
        sys.stdout.write(summary.model_dump_json(indent=2) + "\n")
    else:
        sys.stdout.write(format_summary(summary) + "\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the convo-coach CLI.

    Args:
        argv: Command-line arguments.  Defaults to ``sys.argv[1:]``.

    Returns:
        Exit code: ``0`` on success, ``1`` on error.
    """
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    try:
        settings = load_settings()
    except ConfigError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    # --- Configure logging --------------------------------------------
    log_level = "DEBUG" if getattr(args, "verbose", False) else settings.log_level
    setup_logging(log_level)

    # --- Dispatch to subcommand handler -------------------------------
    if args.command == "summary":
        return _handle_summary(args)

    return _handle_annotate(args, settings)


if __name__ == "__main__":
    raise SystemExit(main())
