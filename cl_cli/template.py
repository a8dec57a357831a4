"""Template for a new ``CHANGELOG.md``.

Part of the ``cl_cli`` package (PyPI: cl-cli).
"""

from __future__ import annotations

TEMPLATE = """\
# {title}

All notable changes to this project will be documented in this file.

The format is based on [Keep a Changelog](https://keepachangelog.com/en/1.1.0/),
and this project adheres to [Semantic Versioning](https://semver.org/spec/v2.0.0.html).

## [Unreleased]

"""


def render(*, title: str = "Changelog") -> str:
    """Return the text of an empty changelog document."""
    return TEMPLATE.format(title=title)
