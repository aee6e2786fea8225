"""Repository: the version-control engine behind every command."""

import json
from dataclasses import dataclass, field

from loguru import logger

from .blobs import BlobStore, digest
from .branches import DEFAULT_BRANCH, BranchTable
from .checkout import CheckoutEngine
from .commits import Commit, CommitGraph
from .errors import (
    AlreadyCurrent,
    AlreadyInitialized,
    EmptyMessage,
    NoSuchBranch,
    NotFound,
    NothingToCommit,
    NotInitialized,
)
from .kv.base import KVStore
from .merge import MergeEngine, MergeResult
from .staging import StagingIndex
from .worktree import WorkingDirectory

UNRESOLVED_MERGE = "__unresolved_merge__"


@dataclass(frozen=True)
class Status:
    """Snapshot of branches, the staging index and the working directory."""

    current: str
    branches: tuple[str, ...]
    staged: tuple[str, ...]
    removed: tuple[str, ...]
    modified: dict[str, str] = field(default_factory=dict)  # path -> "modified" | "deleted"
    untracked: tuple[str, ...] = ()
    unresolved_merge: bool = False


class Repository:
    """A working directory under version control.

    All state lives in ``store``; the working directory is only read,
    overwritten and pruned. Each public method is one user-facing verb
    and raises a ``DirgitError`` before changing anything when it
    cannot proceed.
    """

    def __init__(self, store: KVStore, worktree: WorkingDirectory) -> None:
        self.store = store
        self.worktree = worktree
        self.blobs = BlobStore(store)
        self.graph = CommitGraph(store)
        self.branches = BranchTable(store)
        self.index = StagingIndex(store, self.blobs)
        self.checkout_engine = CheckoutEngine(self.blobs, self.index, worktree)
        self.merge_engine = MergeEngine(
            self.graph,
            self.branches,
            self.blobs,
            self.index,
            self.checkout_engine,
            worktree,
        )

    def __repr__(self) -> str:
        return f"Repository({str(self.worktree.root)!r})"

    def close(self) -> None:
        """Release the backing store."""
        self.store.close()

    # -- State --

    @property
    def is_initialized(self) -> bool:
        try:
            self.branches.current
        except NotInitialized:
            return False
        return True

    def require_initialized(self) -> None:
        if not self.is_initialized:
            raise NotInitialized()

    @property
    def current_branch(self) -> str:
        return self.branches.current

    @property
    def head(self) -> Commit:
        return self.graph.get(self.branches.head())

    @property
    def unresolved_conflicts(self) -> tuple[str, ...]:
        """Paths left with conflict markers by the last merge, if unresolved."""
        raw = self.store.get(UNRESOLVED_MERGE)
        return tuple(json.loads(raw)) if raw else ()

    def _set_unresolved(self, paths: tuple[str, ...]) -> None:
        if paths:
            self.store.set(UNRESOLVED_MERGE, json.dumps(list(paths)).encode())
        else:
            self.store.remove(UNRESOLVED_MERGE)

    # -- Verbs --

    def init(self, branch: str = DEFAULT_BRANCH) -> str:
        """Create the root commit and the initial branch.

        Returns:
            The root commit id.
        """
        if self.is_initialized:
            raise AlreadyInitialized()
        root = self.graph.initialize()
        self.branches.initialize(root, branch)
        logger.info("Initialized repository in {} on {}", self.worktree.root, branch)
        return root

    def add(self, path: str) -> bool:
        """Stage the working copy of ``path``.

        Returns:
            True if the path is staged, False if it matched the head.
        """
        if not self.worktree.exists(path):
            raise NotFound("File does not exist.")
        staged = self.index.stage(
            path, self.worktree.read_file(path), self.head.manifest
        )
        logger.debug("add {}: {}", path, "staged" if staged else "unchanged")
        return staged

    def commit(self, message: str) -> str:
        """Commit the staging index on the current branch.

        Raises:
            NothingToCommit: If nothing is staged.
            EmptyMessage: If ``message`` is blank.
        """
        if self.index.is_empty():
            raise NothingToCommit()
        if not message.strip():
            raise EmptyMessage()
        head = self.head
        manifest = self.index.snapshot(head.manifest)
        commit_id = self.graph.create(manifest, message, (head.id,))
        self.branches.advance(commit_id)
        self.index.clear()
        self._set_unresolved(())
        logger.info("Committed {} on {}: {}", commit_id[:7], self.current_branch, message)
        return commit_id

    def rm(self, path: str) -> None:
        """Unstage ``path``; if tracked, mark it removed and delete it."""
        if self.index.unstage(path, self.head.manifest):
            self.worktree.delete_file(path)
        logger.debug("rm {}", path)

    def log(self) -> list[Commit]:
        """The current head's first-parent history, newest first."""
        return [self.graph.get(c) for c in self.graph.ancestors(self.head.id)]

    def global_log(self) -> list[Commit]:
        """Every commit ever made, in id order."""
        return list(self.graph.commits())

    def find(self, message: str) -> list[str]:
        return self.graph.find(message)

    def branch(self, name: str) -> None:
        """Create ``name`` at the current head without switching to it."""
        self.branches.create(name, self.head.id)
        logger.info("Created branch {} at {}", name, self.head.id[:7])

    def rm_branch(self, name: str) -> None:
        self.branches.remove(name)
        logger.info("Removed branch {}", name)

    def checkout_branch(self, name: str) -> None:
        """Switch to ``name``, materializing its head commit."""
        if name not in self.branches:
            raise NoSuchBranch("No such branch exists.")
        if name == self.current_branch:
            raise AlreadyCurrent()
        target = self.graph.get(self.branches.head(name))
        self.checkout_engine.materialize(target.manifest, self.head.manifest)
        self.index.clear()
        self.branches.switch(name)
        self._set_unresolved(())
        logger.info("Switched to branch {}", name)

    def checkout_file(self, path: str, commit: str | None = None) -> None:
        """Restore one file from the head, or from an (abbreviated) commit id.

        Neither the head nor the staging index changes.
        """
        if commit is None:
            source = self.head
        else:
            source = self.graph.get(self.graph.lookup_by_prefix(commit))
        self.checkout_engine.restore(path, source.manifest)
        logger.debug("Restored {} from {}", path, source.id[:7])

    def reset(self, commit: str) -> str:
        """Move the current branch to ``commit`` and materialize it.

        Returns:
            The full commit id.
        """
        target = self.graph.get(self.graph.lookup_by_prefix(commit))
        self.checkout_engine.materialize(target.manifest, self.head.manifest)
        self.index.clear()
        self.branches.advance(target.id)
        self._set_unresolved(())
        logger.info("Reset {} to {}", self.current_branch, target.id[:7])
        return target.id

    def merge(self, branch: str) -> MergeResult:
        """Merge ``branch`` into the current branch.

        A conflicted merge still commits; the conflicting files are left
        with markers and recorded until the next commit resolves them.
        """
        result = self.merge_engine.merge(branch)
        self._set_unresolved(result.conflicts)
        return result

    def status(self) -> Status:
        head = self.head.manifest
        additions = self.index.additions
        removals = self.index.removals
        files = self.worktree.list_plain_files()
        on_disk = set(files)
        unresolved = bool(self.unresolved_conflicts)

        modified: dict[str, str] = {}
        if not unresolved:
            for name in files:
                content_id = digest(self.worktree.read_file(name))
                if name in additions:
                    if digest(additions[name]) != content_id:
                        modified[name] = "modified"
                elif name in head and name not in removals and head[name] != content_id:
                    modified[name] = "modified"
            for name in additions:
                if name not in on_disk:
                    modified[name] = "deleted"
            for name in head:
                if name not in on_disk and name not in removals and name not in additions:
                    modified[name] = "deleted"

        untracked = tuple(
            name
            for name in files
            if name not in additions and (name not in head or name in removals)
        )
        return Status(
            current=self.current_branch,
            branches=tuple(self.branches.names()),
            staged=tuple(sorted(additions)),
            removed=tuple(sorted(removals)),
            modified=dict(sorted(modified.items())),
            untracked=untracked,
            unresolved_merge=unresolved,
        )
