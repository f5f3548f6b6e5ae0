"""CLI entry point for boardsync."""

import argparse
from pathlib import Path

from .config import Settings
from .logging import setup_logging


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="boardsync",
        description="Kanban board with undo history, local snapshots and remote sync",
    )
    parser.add_argument(
        "--data-dir",
        type=Path,
        default=None,
        help="Directory for the persisted board and history (default: .boardsync)",
    )
    parser.add_argument(
        "--api-url",
        default=None,
        help="Base URL of the remote board service",
    )
    parser.add_argument(
        "--local-only",
        action="store_true",
        help="Never contact the remote service",
    )
    parser.add_argument(
        "--export",
        type=Path,
        default=None,
        metavar="DIR",
        help="Write a backup of the persisted board into DIR and exit",
    )
    parser.add_argument(
        "--import",
        dest="import_file",
        type=Path,
        default=None,
        metavar="FILE",
        help="Replace the persisted board with a backup FILE and exit",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="count",
        default=0,
        help="Increase logging verbosity (-v for INFO, -vv for DEBUG)",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Path to write logs to file",
    )
    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s 0.1.0",
    )
    return parser.parse_args(argv)


def build_settings(args: argparse.Namespace) -> Settings:
    """Settings from the environment, overridden by CLI flags."""
    settings_kwargs: dict = {}
    if args.data_dir:
        settings_kwargs["data_dir"] = args.data_dir
    if args.api_url:
        settings_kwargs["api_base_url"] = args.api_url
    if args.local_only:
        settings_kwargs["local_only"] = True
    if args.verbose:
        settings_kwargs["verbose"] = args.verbose
    if args.log_file:
        settings_kwargs["log_file"] = args.log_file
    return Settings(**settings_kwargs)


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = parse_args(argv)
    settings = build_settings(args)

    setup_logging(settings)

    if args.export is not None:
        from .cli.transfer import run_export

        raise SystemExit(run_export(settings, args.export))

    if args.import_file is not None:
        from .cli.transfer import run_import

        raise SystemExit(run_import(settings, args.import_file))

    # Import here so headless commands don't load textual
    from .app import run

    run(settings)


if __name__ == "__main__":
    main()
