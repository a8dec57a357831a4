"""Git helpers: repository root, current branch and staging."""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

from cl_cli.errors import RepositoryError

logger = logging.getLogger(__name__)


def _git(*args: str, cwd: Path | None = None) -> str:
    """Run ``git <args>`` and return its stripped stdout."""
    try:
        result = subprocess.run(
            ["git", *args],
            capture_output=True,
            text=True,
            check=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        raise RepositoryError("git is not installed or not on PATH.") from None
    except subprocess.CalledProcessError as exc:
        stderr = exc.stderr.strip() if exc.stderr else "unknown error"
        raise RepositoryError(f"git {args[0]} failed: {stderr}") from exc
    return result.stdout.strip()


def repository_root(start: Path | None = None) -> Path:
    """Top-level directory of the git repository containing *start*."""
    try:
        return Path(_git("rev-parse", "--show-toplevel", cwd=start))
    except RepositoryError as exc:
        raise RepositoryError(
            f"could not determine the repository root. Are you in a git repo? ({exc})"
        ) from exc


def current_context(root: Path | None = None) -> str:
    """Name of the checked-out branch, used to partition change files."""
    try:
        branch = _git("symbolic-ref", "--short", "HEAD", cwd=root)
    except RepositoryError as exc:
        raise RepositoryError(
            f"could not determine the current branch. Is HEAD detached? ({exc})"
        ) from exc
    if not branch:
        raise RepositoryError("could not determine the current branch.")
    return branch


def stage(path: Path, root: Path | None = None) -> None:
    """``git add`` *path* so the change is part of the next commit."""
    _git("add", "--", str(path), cwd=root)
    logger.debug("Staged %s", path)
