"""Operations on the changelog and its pending change files.

``ChangelogEngine`` ties the parser, renderer and fragment store together:

* ``record_change`` – append a change to the current context's file.
* ``show`` – render every pending change without writing anything.
* ``yank`` – mark a published release as ``[YANKED]``.
* ``aggregate`` – move all pending changes into ``## [Unreleased]`` and
  delete the change files.

Each call is one read-modify-write cycle.  The document is always written in
a single atomic step, and change files are only removed after that write
succeeded.
"""

from __future__ import annotations

import logging
from pathlib import Path

from cl_cli import template
from cl_cli.changelog import Category, Change, Changelog, Release, build_release, parse_version
from cl_cli.config import Settings
from cl_cli.errors import ReleaseNotFound
from cl_cli.fragments import FragmentStore
from cl_cli.parser import parse_changelog
from cl_cli.renderer import (
    FORMAT_JSON,
    FORMAT_MARKDOWN,
    changelog_to_data,
    changes_to_data,
    dump_json,
    dump_yaml,
    normalize_format,
    render,
    render_markdown,
    render_release,
    release_heading,
)
from cl_cli.storage import FileStorage

logger = logging.getLogger(__name__)


class ChangelogEngine:
    def __init__(
        self,
        changelog_path: Path,
        fragments: FragmentStore,
        storage: FileStorage | None = None,
    ) -> None:
        self.changelog_path = Path(changelog_path)
        self.storage = storage or fragments.storage
        self.fragments = fragments

    @classmethod
    def from_settings(cls, settings: Settings, storage: FileStorage | None = None) -> ChangelogEngine:
        storage = storage or FileStorage()
        return cls(settings.changelog_path, FragmentStore(settings.fragment_root, storage), storage)

    # ── Document I/O ─────────────────────────────────────────────────────

    def load(self, *, from_template: bool = False) -> Changelog:
        """Parse the document; a missing one is empty (or the template)."""
        data = self.storage.read(self.changelog_path)
        if data is None:
            return parse_changelog(template.render() if from_template else b"")
        return parse_changelog(data)

    def save(self, changelog: Changelog) -> None:
        self.storage.write(self.changelog_path, render(changelog))

    def init(self) -> bool:
        """Create the document from the template unless it already exists."""
        if self.storage.read(self.changelog_path) is not None:
            return False
        self.storage.write(self.changelog_path, template.render().encode("utf-8"))
        logger.info("Created %s", self.changelog_path)
        return True

    # ── Change files ─────────────────────────────────────────────────────

    def record_change(self, category_text: str, description: str, context: str) -> Path:
        """Append a new change to *context*'s file and return its path."""
        category = Category.parse(category_text)
        description = " ".join(description.split())
        if not description:
            raise ValueError("a change needs a description")
        return self.fragments.append(context, Change(category, description))

    def fragment_location(self, context: str) -> Path:
        return self.fragments.ensure(context)

    # ── Queries ──────────────────────────────────────────────────────────

    def pending(self) -> list[Change]:
        """Existing Unreleased changes followed by every change file's changes."""
        unreleased = self.load().unreleased
        existing = unreleased.changes() if unreleased is not None else []
        return existing + self.fragments.read_all()

    def show(self, output_format: str = FORMAT_MARKDOWN, *, include_headings: bool = True) -> str:
        """Render the pending Unreleased release in *output_format*."""
        output_format = normalize_format(output_format)
        release = build_release(self.pending())

        if output_format == FORMAT_MARKDOWN:
            output = render_release(release)
            if not include_headings:
                output = output.replace(release_heading(release) + "\n", "", 1)
        elif output_format == FORMAT_JSON:
            output = dump_json(changes_to_data(release.changes()))
        else:
            output = dump_yaml(changes_to_data(release.changes()), include_headings=include_headings)
        return output.rstrip()

    def dump(self, output_format: str = FORMAT_JSON) -> str:
        """The whole parsed changelog in *output_format*."""
        output_format = normalize_format(output_format)
        changelog = self.load()
        if output_format == FORMAT_MARKDOWN:
            return render_markdown(changelog).rstrip()
        if output_format == FORMAT_JSON:
            return dump_json(changelog_to_data(changelog))
        return dump_yaml(changelog_to_data(changelog)).rstrip()

    # ── Mutations ────────────────────────────────────────────────────────

    def yank(self, version_text: str) -> Release:
        """Mark the release *version_text* as yanked and save the document."""
        version = parse_version(version_text)
        changelog = self.load()
        release = changelog.find_release(version)
        if release is None:
            raise ReleaseNotFound(version)
        release.yanked = True
        self.save(changelog)
        logger.info("Yanked release %s", version)
        return release

    def aggregate(self, *, merge: bool = False) -> int:
        """Move every pending change into the Unreleased release.

        By default the Unreleased entries are replaced by the changes from
        the change files; with ``merge`` they are kept and the new changes
        follow them.  Nothing is written when there are no change files.
        Returns the number of changes aggregated.
        """
        changelog = self.load(from_template=True)
        fragments = self.fragments.read_all()
        if not fragments:
            logger.info("No pending changes to aggregate")
            return 0

        existing: list[Change] = []
        if merge and changelog.unreleased is not None:
            existing = changelog.unreleased.changes()
        changelog.set_unreleased(build_release(existing + fragments))

        self.save(changelog)
        self.fragments.clear_all()
        logger.info("Aggregated %d change(s) into %s", len(fragments), self.changelog_path)
        return len(fragments)
