"""Changelog data model.

A ``Changelog`` is a verbatim preamble followed by an ordered list of
``Release`` objects.  Each release groups ``Change`` entries under the six
fixed Keep-a-Changelog categories.  The pending release has no version and
is called *Unreleased*.
"""

from __future__ import annotations

import datetime
from collections.abc import Iterable
from dataclasses import dataclass, field
from enum import Enum

from semver import Version

from cl_cli.errors import InvalidVersion, UnknownCategory

UNRELEASED = "Unreleased"


# ── Categories ───────────────────────────────────────────────────────────────


class Category(Enum):
    """The fixed change categories, in canonical display order."""

    ADDED = "Added"
    CHANGED = "Changed"
    DEPRECATED = "Deprecated"
    REMOVED = "Removed"
    FIXED = "Fixed"
    SECURITY = "Security"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def parse(cls, text: str, line: int | None = None) -> Category:
        """Return the category named by *text* (case-insensitive)."""
        key = text.strip().lower()
        try:
            return _CATEGORY_LOOKUP[key]
        except KeyError:
            raise UnknownCategory(text.strip(), line) from None


_CATEGORY_ORDER = list(Category)

CATEGORY_ALIASES = {
    Category.ADDED: "add",
    Category.CHANGED: "change",
    Category.DEPRECATED: "deprecate",
    Category.REMOVED: "remove",
    Category.FIXED: "fix",
}

_CATEGORY_LOOKUP = {c.value.lower(): c for c in Category}


# ── Versions ─────────────────────────────────────────────────────────────────


def parse_version(text: str) -> Version:
    """Parse a semantic version, raising ``InvalidVersion`` on bad input.

    Prerelease and build parts are kept, so ``str()`` gives back the text of
    a valid version unchanged.
    """
    try:
        return Version.parse(text.strip())
    except ValueError:
        raise InvalidVersion(text.strip()) from None


# ── Model ────────────────────────────────────────────────────────────────────


@dataclass(frozen=True)
class Change:
    """A single change entry."""

    category: Category
    description: str

    def to_dict(self) -> dict[str, str]:
        return {"category": self.category.value, "description": self.description}


@dataclass
class Release:
    """A dated release, or the Unreleased section when ``version`` is None."""

    version: Version | None = None
    date: datetime.date | None = None
    yanked: bool = False
    entries: dict[Category, list[Change]] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if self.version is None and (self.date is not None or self.yanked):
            raise ValueError("the Unreleased section has no date and cannot be yanked")
        if self.version is not None and self.date is None:
            raise ValueError(f"release {self.version} needs a date")

    @property
    def is_unreleased(self) -> bool:
        return self.version is None

    @property
    def title(self) -> str:
        return UNRELEASED if self.version is None else str(self.version)

    def add(self, change: Change) -> None:
        self.entries.setdefault(change.category, []).append(change)

    def categories(self) -> list[Category]:
        """Non-empty categories in canonical order."""
        return [c for c in _CATEGORY_ORDER if self.entries.get(c)]

    def changes(self) -> list[Change]:
        """All changes, category by category in canonical order."""
        return [change for c in self.categories() for change in self.entries[c]]


@dataclass
class Changelog:
    preamble: str = ""
    releases: list[Release] = field(default_factory=list)
    links: list[tuple[str, str]] = field(default_factory=list)

    @property
    def unreleased(self) -> Release | None:
        if self.releases and self.releases[0].is_unreleased:
            return self.releases[0]
        return None

    def set_unreleased(self, release: Release) -> None:
        """Replace the Unreleased section, inserting it first when absent."""
        if not release.is_unreleased:
            raise ValueError(f"release {release.title} is not the Unreleased section")
        if self.unreleased is not None:
            self.releases[0] = release
        else:
            self.releases.insert(0, release)

    def find_release(self, version: Version) -> Release | None:
        for release in self.releases:
            if release.version is not None and release.version == version:
                return release
        return None


# ── Release builder ──────────────────────────────────────────────────────────


def build_release(
    changes: Iterable[Change],
    *,
    version: Version | None = None,
    date: datetime.date | None = None,
    yanked: bool = False,
) -> Release:
    """Group *changes* by category into a new ``Release``.

    Within a category the input order is kept.  With no keyword arguments the
    result is an Unreleased section.
    """
    release = Release(version=version, date=date, yanked=yanked)
    for change in changes:
        release.add(change)
    return release
