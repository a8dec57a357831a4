"""Render a ``Changelog`` back to Markdown, JSON or YAML.

The Markdown output is canonical: the same model always renders to the same
bytes, so that re-running ``cl aggregate`` on unchanged input leaves no diff.
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from typing import Any

import yaml

from cl_cli.changelog import UNRELEASED, Change, Changelog, Release

FORMAT_JSON = "json"
FORMAT_YAML = "yaml"
FORMAT_MARKDOWN = "markdown"

# Accepted spellings of each output format.
FORMAT_ALIASES = {
    "json": FORMAT_JSON,
    "yaml": FORMAT_YAML,
    "yml": FORMAT_YAML,
    "markdown": FORMAT_MARKDOWN,
    "md": FORMAT_MARKDOWN,
}


def normalize_format(name: str) -> str:
    try:
        return FORMAT_ALIASES[name.lower()]
    except KeyError:
        raise ValueError(f"unknown output format '{name}'") from None


# ── Markdown ─────────────────────────────────────────────────────────────────


def release_heading(release: Release) -> str:
    if release.is_unreleased:
        return f"## [{UNRELEASED}]"
    heading = f"## [{release.version}] - {release.date.isoformat()}"
    if release.yanked:
        heading += " [YANKED]"
    return heading


def render_release(release: Release) -> str:
    """Heading, then each non-empty category followed by a blank line."""
    lines = [release_heading(release)]
    for category in release.categories():
        lines.append(f"### {category.value}")
        lines.extend(f"- {change.description}" for change in release.entries[category])
        lines.append("")
    if len(lines) == 1:
        lines.append("")
    return "\n".join(lines) + "\n"


def render_markdown(changelog: Changelog) -> str:
    parts = [changelog.preamble]
    if changelog.preamble and not changelog.preamble.endswith("\n"):
        if changelog.releases or changelog.links:
            parts.append("\n")
    parts.extend(render_release(release) for release in changelog.releases)
    parts.extend(f"[{label}]: {target}\n" for label, target in changelog.links)
    return "".join(parts)


def render(changelog: Changelog) -> bytes:
    """Render *changelog* to the bytes of a Markdown document."""
    return render_markdown(changelog).encode("utf-8")


# ── Structured encodings ─────────────────────────────────────────────────────


def changes_to_data(changes: Iterable[Change]) -> list[dict[str, str]]:
    return [change.to_dict() for change in changes]


def release_to_data(release: Release) -> dict[str, Any]:
    return {
        "version": None if release.version is None else str(release.version),
        "date": None if release.date is None else release.date.isoformat(),
        "yanked": release.yanked,
        "changes": changes_to_data(release.changes()),
    }


def changelog_to_data(changelog: Changelog) -> dict[str, Any]:
    return {
        "preamble": changelog.preamble,
        "releases": [release_to_data(release) for release in changelog.releases],
        "links": [{"label": label, "target": target} for label, target in changelog.links],
    }


def dump_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)


def dump_yaml(data: Any, *, include_headings: bool = True) -> str:
    """YAML document; the ``---`` start marker is only written with headings."""
    return yaml.safe_dump(
        data,
        sort_keys=False,
        allow_unicode=True,
        explicit_start=include_headings,
        default_flow_style=False,
    )
