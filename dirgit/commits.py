"""Commit graph: an append-only DAG of immutable snapshots."""

import json
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Iterable, Iterator, Mapping

from .blobs import digest
from .errors import Ambiguous, EmptyMessage, NoSuchCommit, NotFound
from .kv.base import KVStore

COMMIT_KEY = "__commit__%s"
INITIAL_MESSAGE = "initial commit"


def _to_bytes(obj) -> bytes:
    """Encode a JSON-safe Python object to canonical bytes."""
    return json.dumps(obj, separators=(",", ":"), sort_keys=True).encode()


def _from_bytes(raw: bytes):
    """Decode bytes to a Python object."""
    return json.loads(raw)


def _content_hash(
    message: str,
    timestamp: float,
    manifest: Mapping[str, str],
    parents: tuple[str, ...],
) -> str:
    """Compute a content-addressable commit id.

    Hashes the message, timestamp, sorted manifest and parent ids, so
    recreating an identical commit yields the identical id.
    """
    return digest(
        _to_bytes(
            {
                "message": message,
                "timestamp": timestamp,
                "manifest": sorted(manifest.items()),
                "parents": list(parents),
            }
        )
    )


@dataclass(frozen=True)
class Commit:
    """An immutable snapshot of the tracked files."""

    id: str
    message: str
    timestamp: float
    manifest: dict[str, str] = field(default_factory=dict)
    parents: tuple[str, ...] = ()

    @property
    def parent(self) -> str | None:
        """First parent, or None for the root commit."""
        return self.parents[0] if self.parents else None

    @property
    def merge_parent(self) -> str | None:
        """Second parent of a merge commit, else None."""
        return self.parents[1] if len(self.parents) > 1 else None

    @property
    def is_merge(self) -> bool:
        return len(self.parents) > 1

    def to_bytes(self) -> bytes:
        return _to_bytes(
            {
                "message": self.message,
                "timestamp": self.timestamp,
                "manifest": self.manifest,
                "parents": list(self.parents),
            }
        )

    @classmethod
    def from_bytes(cls, commit_id: str, raw: bytes) -> "Commit":
        data = _from_bytes(raw)
        return cls(
            id=commit_id,
            message=data["message"],
            timestamp=data["timestamp"],
            manifest=dict(data["manifest"]),
            parents=tuple(data["parents"]),
        )


class CommitGraph:
    """All commits of a repository, keyed by id.

    Parents are plain id references to commits that already exist, so
    the graph is acyclic by construction. Ancestry is always derived
    by traversal; nothing caches per-branch history.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store
        self._cache: dict[str, Commit] = {}

    # -- Creation --

    def initialize(self) -> str:
        """Create the root commit: fixed message, epoch timestamp, no files."""
        return self._insert(INITIAL_MESSAGE, 0.0, {}, ())

    def create(
        self,
        manifest: Mapping[str, str],
        message: str,
        parents: Iterable[str],
        *,
        timestamp: float | None = None,
    ) -> str:
        """Create a commit and return its id.

        Raises:
            EmptyMessage: If ``message`` is blank.
            NoSuchCommit: If a parent does not exist.
        """
        if not message or not message.strip():
            raise EmptyMessage()
        parents = tuple(parents)
        for parent in parents:
            if parent not in self:
                raise NoSuchCommit()
        if timestamp is None:
            timestamp = time.time()
        return self._insert(message, float(timestamp), dict(manifest), parents)

    def _insert(
        self,
        message: str,
        timestamp: float,
        manifest: dict[str, str],
        parents: tuple[str, ...],
    ) -> str:
        commit_id = _content_hash(message, timestamp, manifest, parents)
        if commit_id not in self:
            commit = Commit(commit_id, message, timestamp, manifest, parents)
            self.store.set(COMMIT_KEY % commit_id, commit.to_bytes())
            self._cache[commit_id] = commit
        return commit_id

    # -- Lookup --

    def get(self, commit_id: str) -> Commit:
        commit = self._cache.get(commit_id)
        if commit is not None:
            return commit
        raw = self.store.get(COMMIT_KEY % commit_id)
        if raw is None:
            raise NoSuchCommit()
        commit = Commit.from_bytes(commit_id, raw)
        self._cache[commit_id] = commit
        return commit

    def __contains__(self, commit_id: str) -> bool:
        return commit_id in self._cache or COMMIT_KEY % commit_id in self.store

    def ids(self) -> list[str]:
        """Every commit id, sorted."""
        return self.store.scan(COMMIT_KEY)

    def commits(self) -> Iterator[Commit]:
        """Every commit in the graph."""
        for commit_id in self.ids():
            yield self.get(commit_id)

    def lookup_by_prefix(self, prefix: str) -> str:
        """Resolve an abbreviated (or full) commit id.

        Raises:
            NoSuchCommit: If no commit starts with ``prefix``.
            Ambiguous: If more than one does.
        """
        if not prefix:
            raise NoSuchCommit()
        if len(prefix) == 40 and prefix in self:
            return prefix
        matches = [c for c in self.ids() if c.startswith(prefix)]
        if not matches:
            raise NoSuchCommit()
        if len(matches) > 1:
            raise Ambiguous(prefix, matches)
        return matches[0]

    def find(self, message: str) -> list[str]:
        """Ids of every commit whose message is exactly ``message``."""
        found = [c.id for c in self.commits() if c.message == message]
        if not found:
            raise NotFound("Found no commit with that message.")
        return found

    # -- Traversal --

    def ancestors(self, commit_id: str) -> Iterator[str]:
        """Yield the first-parent chain from ``commit_id`` down to the root."""
        current: str | None = commit_id
        while current is not None:
            yield current
            current = self.get(current).parent

    def reachable(self, commit_id: str) -> Iterator[str]:
        """Yield every commit reachable from ``commit_id``, itself first.

        Breadth-first over all parents (first parent before merge
        parent), each commit once.
        """
        visited: set[str] = set()
        queue: deque[str] = deque([commit_id])
        while queue:
            current = queue.popleft()
            if current in visited:
                continue
            visited.add(current)
            yield current
            for parent in self.get(current).parents:
                if parent not in visited:
                    queue.append(parent)

    def is_ancestor(self, ancestor: str, descendant: str) -> bool:
        """True iff ``ancestor`` is reachable from ``descendant``."""
        return any(c == ancestor for c in self.reachable(descendant))

    def split_point(self, commit_a: str, commit_b: str) -> str:
        """Find the nearest common ancestor of two commits.

        Common ancestors are collected in ``commit_a``'s breadth-first
        order. Any of them that is an ancestor of another is discarded,
        since it can never be nearer. Of the remaining candidates, the
        first one in that order wins.
        """
        seen_b = set(self.reachable(commit_b))
        common = [c for c in self.reachable(commit_a) if c in seen_b]
        if not common:
            # Both histories start at the same root commit.
            raise NoSuchCommit(f"No common ancestor of {commit_a} and {commit_b}.")

        # Proper ancestors of some candidate; closed under taking parents.
        dominated: set[str] = set()
        for candidate in common:
            if candidate in dominated:
                continue
            stack = list(self.get(candidate).parents)
            while stack:
                parent = stack.pop()
                if parent in dominated:
                    continue
                dominated.add(parent)
                stack.extend(self.get(parent).parents)

        return next(c for c in common if c not in dominated)
