"""Parse a Keep-a-Changelog Markdown document into a ``Changelog``.

The grammar is line oriented and read in a single forward pass:

* Everything before the first ``## `` heading is the preamble, kept verbatim.
* ``## [Unreleased]`` opens the pending release.
* ``## [<version>] - <YYYY-MM-DD>`` opens a dated release, optionally
  followed by ``[YANKED]``.
* ``### <Category>`` opens one of the fixed category sections.
* ``- <text>`` adds a change to the open category.
* ``[label]: target`` lines are link reference definitions.
* Blank lines only separate sections.
"""

from __future__ import annotations

import datetime
import re
from enum import Enum
from pathlib import Path

from cl_cli.changelog import Category, Change, Changelog, Release, parse_version
from cl_cli.errors import MalformedDocument, UnexpectedEntry
from cl_cli.storage import FileStorage

# Regex helpers
_H1_RE = re.compile(r"^#\s+(.*)$")
_H2_RE = re.compile(r"^##\s+(.*)$")
_H3_RE = re.compile(r"^###\s+(.*)$")
_UNRELEASED_RE = re.compile(r"^\[Unreleased\]$", re.IGNORECASE)
_RELEASE_RE = re.compile(
    r"^\[(?P<version>[^\]]+)\]\s+-\s+(?P<date>\S+)(?P<yanked>\s+\[YANKED\])?$",
    re.IGNORECASE,
)
_ENTRY_RE = re.compile(r"^-\s+(.+)$")
_LINK_RE = re.compile(r"^\[(?P<label>[^\]]+)\]:\s*(?P<target>\S.*)$")


class _State(Enum):
    PREAMBLE = "preamble"
    IN_RELEASE = "release"
    IN_CATEGORY = "category"


# ── Parsing helpers ──────────────────────────────────────────────────────────


def _parse_release_heading(text: str, lineno: int) -> Release:
    """Return an empty ``Release`` for the text of a ``## `` heading."""
    if _UNRELEASED_RE.match(text):
        return Release()

    match = _RELEASE_RE.match(text)
    if not match:
        raise MalformedDocument(f"unrecognised release heading '## {text}'", lineno)

    version = parse_version(match.group("version"))
    try:
        date = datetime.date.fromisoformat(match.group("date"))
    except ValueError:
        raise MalformedDocument(
            f"invalid release date '{match.group('date')}'", lineno
        ) from None
    return Release(version=version, date=date, yanked=match.group("yanked") is not None)


def _validate_order(releases: list[Release], lines: list[int]) -> None:
    """Unreleased first, then strictly descending versions."""
    previous: Release | None = None
    for release, lineno in zip(releases, lines):
        if release.is_unreleased:
            if previous is not None:
                raise MalformedDocument("[Unreleased] must be the first release", lineno)
        elif previous is not None and not previous.is_unreleased:
            if release.version == previous.version:
                raise MalformedDocument(f"duplicate release {release.version}", lineno)
            if release.version > previous.version:
                raise MalformedDocument(
                    f"release {release.version} is listed after older release "
                    f"{previous.version}",
                    lineno,
                )
        previous = release


# ── Public API ───────────────────────────────────────────────────────────────


def parse_changelog(document: bytes | str) -> Changelog:
    """Parse a changelog document.

    An empty document yields an empty ``Changelog``.  Structural problems
    raise ``MalformedDocument`` (or its ``UnknownCategory`` / ``UnexpectedEntry``
    subclasses) and malformed versions raise ``InvalidVersion``.
    """
    if isinstance(document, bytes):
        try:
            document = document.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise MalformedDocument(f"document is not valid UTF-8: {exc.reason}") from None

    changelog = Changelog()
    preamble: list[str] = []
    heading_lines: list[int] = []
    state = _State.PREAMBLE
    release: Release | None = None
    category: Category | None = None

    for lineno, raw in enumerate(document.splitlines(keepends=True), start=1):
        line = raw.rstrip()

        h2 = _H2_RE.match(line)
        if h2:
            release = _parse_release_heading(h2.group(1).strip(), lineno)
            changelog.releases.append(release)
            heading_lines.append(lineno)
            category = None
            state = _State.IN_RELEASE
            continue

        if state is _State.PREAMBLE:
            preamble.append(raw)
            continue

        if not line:
            continue

        h3 = _H3_RE.match(line)
        if h3:
            category = Category.parse(h3.group(1), lineno)
            state = _State.IN_CATEGORY
            continue

        entry = _ENTRY_RE.match(line)
        if entry:
            if state is not _State.IN_CATEGORY:
                raise UnexpectedEntry(entry.group(1).strip(), lineno)
            release.add(Change(category, entry.group(1).strip()))
            continue

        link = _LINK_RE.match(line)
        if link:
            changelog.links.append((link.group("label"), link.group("target").strip()))
            continue

        if _H1_RE.match(line):
            raise MalformedDocument(f"unexpected top-level heading '{line}'", lineno)
        raise MalformedDocument(f"unrecognised line '{line}'", lineno)

    changelog.preamble = "".join(preamble)
    _validate_order(changelog.releases, heading_lines)
    return changelog


def parse_file(filepath: str | Path, *, storage: FileStorage | None = None) -> Changelog:
    """Parse the changelog at *filepath*; a missing file is an empty changelog."""
    data = (storage or FileStorage()).read(Path(filepath))
    if data is None:
        return Changelog()
    return parse_changelog(data)
