"""cl – conflict-free Keep a Changelog entries.

Provides the ``cl`` CLI plus a parser and renderer for Keep-a-Changelog
``CHANGELOG.md`` files.  Changes are first recorded in per-branch YAML files
under ``.cl/`` and later aggregated into the ``## [Unreleased]`` section.

The importable package is ``cl_cli``; the PyPI distribution name is
``cl-cli``.
"""
