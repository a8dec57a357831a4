"""Per-context change files ("fragments") waiting to be aggregated.

Each context (normally a git branch) owns one YAML file under the fragment
root, so contributors on different branches never edit the same file::

    .cl/main.yml
    .cl/feature/login.yml

A file holds a YAML list of ``{category, description}`` mappings.

There is no locking.  Two processes appending to the same context at the
same time can lose an entry; callers serialise such access themselves.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from pathlib import Path, PurePosixPath

import yaml

from cl_cli.changelog import Category, Change
from cl_cli.errors import CorruptFragment, UnknownCategory
from cl_cli.storage import FileStorage

logger = logging.getLogger(__name__)

FRAGMENT_SUFFIX = ".yml"


# ── Encoding ─────────────────────────────────────────────────────────────────


def _decode(context: str, data: bytes) -> list[Change]:
    try:
        items = yaml.safe_load(data)
    except yaml.YAMLError as exc:
        raise CorruptFragment(context, f"invalid YAML: {exc}") from exc
    if items is None:
        return []
    if not isinstance(items, list):
        raise CorruptFragment(context, "expected a list of changes")

    changes: list[Change] = []
    for index, item in enumerate(items, start=1):
        if not isinstance(item, dict) or not {"category", "description"} <= item.keys():
            raise CorruptFragment(
                context, f"entry {index} must have 'category' and 'description' keys"
            )
        try:
            category = Category.parse(str(item["category"]))
        except UnknownCategory as exc:
            raise CorruptFragment(context, f"entry {index}: {exc}") from exc
        # A bullet is one line, so hand-edited block scalars are collapsed.
        description = item["description"]
        if not isinstance(description, str) or not description.split():
            raise CorruptFragment(context, f"entry {index} needs a non-empty text description")
        changes.append(Change(category, " ".join(description.split())))
    return changes


def _encode(changes: list[Change]) -> bytes:
    text = yaml.safe_dump(
        [change.to_dict() for change in changes],
        sort_keys=False,
        allow_unicode=True,
        default_flow_style=False,
    )
    return text.encode("utf-8")


# ── Store ────────────────────────────────────────────────────────────────────


class FragmentStore:
    """Change files partitioned by context identifier under *root*."""

    def __init__(self, root: Path, storage: FileStorage | None = None) -> None:
        self.root = Path(root)
        self.storage = storage or FileStorage()

    def path_for(self, context: str) -> Path:
        """Location of the container for *context*.

        ``/`` in a context nests it in sub-directories.  Empty, absolute and
        ``..`` contexts are rejected.
        """
        parts = PurePosixPath(context).parts
        if not context or context.startswith("/") or ".." in parts or "." in parts:
            raise ValueError(f"invalid context identifier '{context}'")
        return self.root.joinpath(*parts[:-1], parts[-1] + FRAGMENT_SUFFIX)

    def _context_for(self, path: Path) -> str:
        relative = path.relative_to(self.root)
        return relative.with_name(relative.name[: -len(FRAGMENT_SUFFIX)]).as_posix()

    def _containers(self, location: Path) -> Iterator[Path]:
        for child in self.storage.list_children(location):
            if self.storage.is_container(child):
                yield from self._containers(child)
            elif child.name.endswith(FRAGMENT_SUFFIX):
                yield child

    def contexts(self) -> list[str]:
        """Context identifiers that have a container, in storage order."""
        return [self._context_for(path) for path in self._containers(self.root)]

    def read(self, context: str) -> list[Change]:
        """Changes recorded for *context*; a missing container is empty."""
        data = self.storage.read(self.path_for(context))
        if data is None:
            return []
        return _decode(context, data)

    def append(self, context: str, change: Change) -> Path:
        """Add *change* to the end of *context*'s container."""
        changes = self.read(context)
        changes.append(change)
        path = self.path_for(context)
        self.storage.write(path, _encode(changes))
        logger.info("Recorded %s change for %s (%d pending)", change.category, context, len(changes))
        return path

    def ensure(self, context: str) -> Path:
        """Create an empty container for *context* when there is none."""
        path = self.path_for(context)
        if self.storage.read(path) is None:
            self.storage.write(path, b"")
        return path

    def read_all(self) -> list[Change]:
        """Every pending change, context by context.

        Contexts come in storage enumeration order; within a context the
        changes keep their insertion order.
        """
        changes: list[Change] = []
        for path in self._containers(self.root):
            data = self.storage.read(path)
            if data is not None:
                changes.extend(_decode(self._context_for(path), data))
        return changes

    def clear_all(self) -> None:
        """Delete every container and the now-empty directories below the root."""
        self._clear(self.root)

    def _clear(self, location: Path) -> None:
        for child in self.storage.list_children(location):
            if self.storage.is_container(child):
                self._clear(child)
                if not self.storage.list_children(child):
                    self.storage.delete(child)
            elif child.name.endswith(FRAGMENT_SUFFIX):
                self.storage.delete(child)
                logger.debug("Removed change file %s", child)
