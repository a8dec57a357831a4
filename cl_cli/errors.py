"""Error taxonomy for ``cl``.

Every failure the core can report is a ``ClError``.  The command-line layer
catches them, prints ``ERROR: <message>`` and exits with ``exit_code``.
"""

from __future__ import annotations

# ── Exit codes ───────────────────────────────────────────────────────────────

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_MISSING = 2
EXIT_INVALID = 3


class ClError(Exception):
    """Base class of every error raised by ``cl_cli``."""

    exit_code = EXIT_ERROR


# ── Document structure ───────────────────────────────────────────────────────


class MalformedDocument(ClError):
    """The changelog document does not follow the expected structure."""

    exit_code = EXIT_INVALID

    def __init__(self, message: str, line: int | None = None) -> None:
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


class UnknownCategory(MalformedDocument):
    """A category name is not one of the six fixed categories."""

    def __init__(self, text: str, line: int | None = None) -> None:
        self.text = text
        super().__init__(f"unknown change category '{text}'", line)


class UnexpectedEntry(MalformedDocument):
    """A bullet line appears outside of any category section."""

    def __init__(self, text: str, line: int | None = None) -> None:
        self.text = text
        super().__init__(f"change entry outside of a category section: '{text}'", line)


class InvalidVersion(ClError):
    """Version text is not a valid semantic version."""

    exit_code = EXIT_INVALID

    def __init__(self, text: str) -> None:
        self.text = text
        super().__init__(f"invalid version '{text}'")


# ── Lookups ──────────────────────────────────────────────────────────────────


class ReleaseNotFound(ClError):
    exit_code = EXIT_MISSING

    def __init__(self, version: object) -> None:
        self.version = version
        super().__init__(f"no release {version} in the changelog")


# ── Storage ──────────────────────────────────────────────────────────────────


class CorruptFragment(ClError):
    """A stored fragment container cannot be decoded."""

    exit_code = EXIT_INVALID

    def __init__(self, context: str, reason: str) -> None:
        self.context = context
        self.reason = reason
        super().__init__(f"change file for '{context}' is corrupt: {reason}")


class StorageFailure(ClError):
    def __init__(self, location: object, reason: str) -> None:
        self.location = location
        self.reason = reason
        super().__init__(f"{location}: {reason}")


class RepositoryError(ClError):
    """The git repository root or current branch could not be determined."""
