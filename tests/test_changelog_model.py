"""Tests for the changelog model and the release builder."""

from __future__ import annotations

import datetime

import pytest

from cl_cli.changelog import (
    Category,
    Change,
    Changelog,
    Release,
    build_release,
    parse_version,
)
from cl_cli.errors import InvalidVersion, UnknownCategory


class TestCategory:
    def test_canonical_order(self) -> None:
        assert [c.value for c in Category] == [
            "Added",
            "Changed",
            "Deprecated",
            "Removed",
            "Fixed",
            "Security",
        ]

    @pytest.mark.parametrize("text", ["fixed", "FIXED", " Fixed "])
    def test_parse_is_case_insensitive(self, text: str) -> None:
        assert Category.parse(text) is Category.FIXED

    def test_parse_unknown(self) -> None:
        with pytest.raises(UnknownCategory):
            Category.parse("Misc")


class TestVersion:
    def test_parse(self) -> None:
        version = parse_version(" 1.2.0 ")
        assert (version.major, version.minor, version.patch) == (1, 2, 0)

    @pytest.mark.parametrize(
        "text",
        [
            "1.0.0-alpha",
            "1.0.0-alpha.beta",
            "1.0.0-rc.1",
            "1.0.0-x.7.z.92",
            "1.0.0+20130313144700",
            "1.0.0-beta+exp.sha.5114f85",
        ],
    )
    def test_text_is_kept(self, text: str) -> None:
        assert str(parse_version(text)) == text

    def test_semver_precedence(self) -> None:
        ordered = [
            "1.0.0-alpha",
            "1.0.0-alpha.1",
            "1.0.0-alpha.beta",
            "1.0.0-beta",
            "1.0.0-rc.1",
            "1.0.0",
        ]
        versions = [parse_version(text) for text in ordered]
        assert sorted(reversed(versions)) == versions

    @pytest.mark.parametrize("text", ["banana", "1.0", "v1.0.0", "1.0.0-"])
    def test_invalid(self, text: str) -> None:
        with pytest.raises(InvalidVersion) as excinfo:
            parse_version(text)
        assert excinfo.value.text == text


class TestReleaseBuilder:
    def test_unreleased_shape(self) -> None:
        release = build_release([])
        assert release.is_unreleased
        assert release.date is None
        assert release.yanked is False
        assert release.entries == {}

    def test_groups_by_category_keeping_input_order(self) -> None:
        changes = [
            Change(Category.FIXED, "a"),
            Change(Category.ADDED, "b"),
            Change(Category.FIXED, "c"),
            Change(Category.ADDED, "d"),
        ]
        release = build_release(changes)
        assert [c.description for c in release.entries[Category.FIXED]] == ["a", "c"]
        assert [c.description for c in release.entries[Category.ADDED]] == ["b", "d"]

    def test_changes_in_canonical_order(self) -> None:
        release = build_release(
            [Change(Category.SECURITY, "s"), Change(Category.ADDED, "a")]
        )
        assert release.categories() == [Category.ADDED, Category.SECURITY]
        assert [c.description for c in release.changes()] == ["a", "s"]

    def test_dated_release(self) -> None:
        release = build_release(
            [Change(Category.ADDED, "a")],
            version=parse_version("1.0.0"),
            date=datetime.date(2020, 1, 1),
        )
        assert release.title == "1.0.0"
        assert release.changes() == [Change(Category.ADDED, "a")]

    def test_empty_release_is_truthy(self) -> None:
        release = build_release([])
        assert release
        assert Changelog(releases=[release]).unreleased is release

    def test_unreleased_cannot_be_yanked(self) -> None:
        with pytest.raises(ValueError):
            Release(yanked=True)

    def test_version_needs_date(self) -> None:
        with pytest.raises(ValueError):
            build_release([], version=parse_version("1.0.0"))


class TestChangelog:
    def test_set_unreleased_inserts_first(self) -> None:
        dated = Release(version=parse_version("1.0.0"), date=datetime.date(2020, 1, 1))
        changelog = Changelog(releases=[dated])
        changelog.set_unreleased(build_release([Change(Category.ADDED, "a")]))
        assert changelog.releases[0].is_unreleased
        assert changelog.releases[1] is dated

    def test_set_unreleased_replaces(self) -> None:
        changelog = Changelog(releases=[build_release([Change(Category.ADDED, "old")])])
        changelog.set_unreleased(build_release([Change(Category.ADDED, "new")]))
        assert len(changelog.releases) == 1
        assert changelog.unreleased.changes() == [Change(Category.ADDED, "new")]

    def test_set_unreleased_rejects_dated_release(self) -> None:
        with pytest.raises(ValueError):
            Changelog().set_unreleased(
                Release(version=parse_version("1.0.0"), date=datetime.date(2020, 1, 1))
            )

    def test_find_release(self) -> None:
        dated = Release(version=parse_version("1.0.0"), date=datetime.date(2020, 1, 1))
        changelog = Changelog(releases=[Release(), dated])
        assert changelog.find_release(parse_version("1.0.0+build.7")) is dated
        assert changelog.find_release(parse_version("2.0.0")) is None
