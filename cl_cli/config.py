"""Where the changelog and the change files live."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from cl_cli import vcs

CHANGELOG_FILENAME = "CHANGELOG.md"
FRAGMENT_DIRNAME = ".cl"


@dataclass(frozen=True)
class Settings:
    root: Path
    changelog_path: Path
    fragment_root: Path


def resolve_settings(
    root: str | Path | None = None,
    changelog: str | Path | None = None,
) -> Settings:
    """Build ``Settings`` for *root* (default: the enclosing git repository).

    *changelog* overrides the document location; relative paths are taken
    from the current directory.
    """
    base = Path(root) if root is not None else vcs.repository_root()
    document = Path(changelog) if changelog is not None else base / CHANGELOG_FILENAME
    return Settings(
        root=base,
        changelog_path=document,
        fragment_root=base / FRAGMENT_DIRNAME,
    )
