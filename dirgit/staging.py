"""Staging index: pending changes layered over the head commit."""

import json
from typing import Mapping

from .blobs import BlobStore, digest
from .errors import NothingToRemove
from .kv.base import KVStore

INDEX_KEY = "__index__"
STAGED_KEY = "__staged__%s"


class StagingIndex:
    """Buffered additions and removals for the next commit.

    ``stage()`` / ``unstage()`` calls are recorded in the KV store so
    they survive between invocations. The sets of staged and removed
    paths live together under one key; staged content is kept per path.
    ``snapshot()`` turns them into the manifest of the next commit. A
    path is never both staged and marked removed.
    """

    def __init__(self, store: KVStore, blobs: BlobStore) -> None:
        self.store = store
        self.blobs = blobs

    def _load(self) -> tuple[set[str], set[str]]:
        raw = self.store.get(INDEX_KEY)
        if raw is None:
            return set(), set()
        data = json.loads(raw)
        return set(data["staged"]), set(data["removed"])

    def _save(self, staged: set[str], removed: set[str]) -> None:
        if not staged and not removed:
            self.store.remove(INDEX_KEY)
            return
        data = {"staged": sorted(staged), "removed": sorted(removed)}
        self.store.set(INDEX_KEY, json.dumps(data).encode())

    # -- Read operations --

    @property
    def additions(self) -> dict[str, bytes]:
        """Staged path -> captured content."""
        staged, _ = self._load()
        found = self.store.get_many(*(STAGED_KEY % p for p in sorted(staged)))
        return {p: found[STAGED_KEY % p] for p in sorted(staged) if STAGED_KEY % p in found}

    @property
    def removals(self) -> set[str]:
        return self._load()[1]

    def staged(self, path: str) -> bytes | None:
        """Captured content for ``path``, or None if not staged."""
        return self.store.get(STAGED_KEY % path)

    def is_staged(self, path: str) -> bool:
        return path in self._load()[0]

    def is_removed(self, path: str) -> bool:
        return path in self._load()[1]

    def is_empty(self) -> bool:
        return INDEX_KEY not in self.store

    # -- Write operations --

    def stage(self, path: str, content: bytes, head_manifest: Mapping[str, str]) -> bool:
        """Stage ``content`` for ``path``.

        Clears a pending removal of ``path``. Content identical to what
        the head commit records is not staged (and drops any earlier
        staged copy).

        Returns:
            True if the path is now staged.
        """
        staged, removed = self._load()
        removed.discard(path)
        if head_manifest.get(path) == digest(content):
            staged.discard(path)
            self.store.remove(STAGED_KEY % path)
            self._save(staged, removed)
            return False
        staged.add(path)
        self.store.set(STAGED_KEY % path, content)
        self._save(staged, removed)
        return True

    def unstage(self, path: str, head_manifest: Mapping[str, str]) -> bool:
        """Drop a staged addition and mark a tracked path for removal.

        Returns:
            True if ``path`` is tracked by the head (and is now marked
            removed).

        Raises:
            NothingToRemove: If ``path`` is neither staged nor tracked.
        """
        staged, removed = self._load()
        tracked = path in head_manifest
        if not tracked and path not in staged:
            raise NothingToRemove()
        staged.discard(path)
        self.store.remove(STAGED_KEY % path)
        if tracked:
            removed.add(path)
        self._save(staged, removed)
        return tracked

    def clear(self) -> None:
        """Discard all staged changes."""
        staged, _ = self._load()
        if staged:
            self.store.remove_many(*(STAGED_KEY % p for p in staged))
        self.store.remove(INDEX_KEY)

    # -- Commit support --

    def snapshot(self, head_manifest: Mapping[str, str]) -> dict[str, str]:
        """Build the next manifest from the head manifest.

        Removals are dropped and every addition is promoted into the
        blob store, overwriting the head's entry.
        """
        removed = self.removals
        manifest = dict(head_manifest)
        for path in removed:
            manifest.pop(path, None)
        for path, content in self.additions.items():
            manifest[path] = self.blobs.put(content)
        return manifest
