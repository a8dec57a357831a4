"""Command-line interface for cl (``cl`` command).

Usage examples::

    cl added "Support for YAML output"
    cl fix "Crash when the changelog is empty"
    cl                      # show every pending change
    cl -f json -n
    cl aggregate
    cl yank 1.2.0
"""

from __future__ import annotations

import argparse
import logging
import os
import shlex
import subprocess
import sys
from pathlib import Path

from cl_cli import vcs
from cl_cli._version import __version__
from cl_cli.changelog import CATEGORY_ALIASES, Category
from cl_cli.config import Settings, resolve_settings
from cl_cli.engine import ChangelogEngine
from cl_cli.errors import EXIT_ERROR, EXIT_OK, ClError, RepositoryError
from cl_cli.renderer import FORMAT_ALIASES

# ── Helpers ──────────────────────────────────────────────────────────────────


def _settings(args: argparse.Namespace) -> Settings:
    return resolve_settings(root=args.root, changelog=args.changelog)


def _context(args: argparse.Namespace, settings: Settings) -> str:
    return args.context or vcs.current_context(settings.root)


def _stage(args: argparse.Namespace, settings: Settings, path: Path) -> None:
    """Stage *path* in git; failures only warn since the file is already written."""
    if args.no_stage:
        return
    try:
        vcs.stage(path, settings.root)
    except RepositoryError as exc:
        print(f"WARNING: Could not stage {path} ({exc}).", file=sys.stderr)


# ── Subcommand handlers ─────────────────────────────────────────────────────


def _handle_show(args: argparse.Namespace) -> int:
    """Print every pending change."""
    engine = ChangelogEngine.from_settings(_settings(args))
    output = engine.show(args.format, include_headings=not args.no_headings)
    if output:
        print(output)
    return EXIT_OK


def _handle_change(args: argparse.Namespace) -> int:
    """Record a change for the current branch."""
    settings = _settings(args)
    engine = ChangelogEngine.from_settings(settings)
    description = " ".join(args.description)
    path = engine.record_change(args.category.value, description, _context(args, settings))
    _stage(args, settings, path)
    print(f"Recorded {args.category.value} change in {path}")
    return EXIT_OK


def _handle_edit(args: argparse.Namespace) -> int:
    """Open the current branch's change file in $VISUAL or $EDITOR."""
    editor = os.environ.get("VISUAL") or os.environ.get("EDITOR")
    if not editor:
        print("ERROR: Neither $VISUAL nor $EDITOR is set.", file=sys.stderr)
        return EXIT_ERROR

    settings = _settings(args)
    engine = ChangelogEngine.from_settings(settings)
    path = engine.fragment_location(_context(args, settings))
    try:
        return subprocess.call([*shlex.split(editor), str(path)])
    except FileNotFoundError:
        print(f"ERROR: Could not launch editor '{editor}'.", file=sys.stderr)
        return EXIT_ERROR


def _handle_aggregate(args: argparse.Namespace) -> int:
    """Move every pending change into the Unreleased section."""
    settings = _settings(args)
    engine = ChangelogEngine.from_settings(settings)
    count = engine.aggregate(merge=args.merge)
    if count == 0:
        print("No pending changes to aggregate.")
        return EXIT_OK
    _stage(args, settings, settings.changelog_path)
    print(f"Aggregated {count} change(s) into {settings.changelog_path}")
    return EXIT_OK


def _handle_yank(args: argparse.Namespace) -> int:
    """Mark a release as yanked."""
    settings = _settings(args)
    engine = ChangelogEngine.from_settings(settings)
    release = engine.yank(args.version)
    _stage(args, settings, settings.changelog_path)
    print(f"Yanked release {release.version} in {settings.changelog_path}")
    return EXIT_OK


def _handle_init(args: argparse.Namespace) -> int:
    """Create CHANGELOG.md from the template."""
    settings = _settings(args)
    engine = ChangelogEngine.from_settings(settings)
    if not engine.init():
        print(f"ERROR: {settings.changelog_path} already exists.", file=sys.stderr)
        return EXIT_ERROR
    _stage(args, settings, settings.changelog_path)
    print(f"Created {settings.changelog_path}")
    return EXIT_OK


def _handle_dump(args: argparse.Namespace) -> int:
    """Print the whole changelog."""
    engine = ChangelogEngine.from_settings(_settings(args))
    print(engine.dump(args.format))
    return EXIT_OK


# ── Argument parser ─────────────────────────────────────────────────────────


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="cl",
        description=f"cl – conflict-free Keep a Changelog entries (v{__version__})",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=sorted(FORMAT_ALIASES),
        default="markdown",
        help="Output format when displaying changes (default: markdown)",
    )
    parser.add_argument(
        "-n",
        "--no-headings",
        action="store_true",
        default=False,
        help="Hide the headings when the output format is Markdown or YAML",
    )
    parser.add_argument(
        "--root",
        default=None,
        help="Project root (default: the enclosing git repository)",
    )
    parser.add_argument(
        "--changelog",
        default=None,
        help="Path of the changelog (default: <root>/CHANGELOG.md)",
    )
    parser.add_argument(
        "--context",
        default=None,
        help="Name of the change file to use (default: the current git branch)",
    )
    parser.add_argument(
        "--no-stage",
        action="store_true",
        default=False,
        help="Do not stage written files with git",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log what is being read and written",
    )
    parser.set_defaults(func=_handle_show)
    subparsers = parser.add_subparsers(dest="command")

    # ── cl added / changed / … ───────────────────────────────────────────
    for category in Category:
        alias = CATEGORY_ALIASES.get(category)
        change_parser = subparsers.add_parser(
            category.value.lower(),
            aliases=[alias] if alias else [],
            help=f"Create a change entry for the {category.value} section of the CHANGELOG",
        )
        change_parser.add_argument(
            "description",
            nargs="+",
            metavar="DESCRIPTION",
            help="The description of this change entry",
        )
        change_parser.set_defaults(func=_handle_change, category=category)

    # ── cl edit ──────────────────────────────────────────────────────────
    edit_parser = subparsers.add_parser("edit", help="Open the change file for direct editing")
    edit_parser.set_defaults(func=_handle_edit)

    # ── cl aggregate ─────────────────────────────────────────────────────
    aggregate_parser = subparsers.add_parser(
        "aggregate",
        help="Move all pending changes into the Unreleased section of the CHANGELOG",
    )
    aggregate_parser.add_argument(
        "--merge",
        action="store_true",
        default=False,
        help="Keep the entries already in the Unreleased section",
    )
    aggregate_parser.set_defaults(func=_handle_aggregate)

    # ── cl yank ──────────────────────────────────────────────────────────
    yank_parser = subparsers.add_parser("yank", help="Mark a release as [YANKED]")
    yank_parser.add_argument("version", help='Release version, e.g. "1.2.0"')
    yank_parser.set_defaults(func=_handle_yank)

    # ── cl init / dump ───────────────────────────────────────────────────
    init_parser = subparsers.add_parser("init", help="Create an empty CHANGELOG.md")
    init_parser.set_defaults(func=_handle_init)

    dump_parser = subparsers.add_parser(
        "dump",
        help="Print the whole CHANGELOG in the selected format",
    )
    dump_parser.set_defaults(func=_handle_dump)

    return parser


# ── Entrypoint ───────────────────────────────────────────────────────────────


def main(argv: list[str] | None = None) -> None:
    """CLI entrypoint (installed as ``cl``)."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    try:
        exit_code = args.func(args)
    except ClError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        exit_code = exc.exit_code
    except ValueError as exc:
        print(f"ERROR: {exc}", file=sys.stderr)
        exit_code = EXIT_ERROR
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
