"""dirgit: a local version-control engine for a working directory."""

from .blobs import BlobStore, digest
from .branches import BranchTable
from .checkout import CheckoutEngine
from .commits import Commit, CommitGraph
from .errors import (
    AlreadyCurrent,
    AlreadyInitialized,
    Ambiguous,
    AncestorBranch,
    BranchExists,
    CannotRemoveCurrent,
    DirgitError,
    EmptyMessage,
    FileNotInCommit,
    NoSuchBranch,
    NoSuchCommit,
    NotFound,
    NothingToCommit,
    NothingToRemove,
    NotInitialized,
    SelfMerge,
    UncommittedChanges,
    UntrackedFileConflict,
)
from .kv.base import KVStore
from .merge import MergeEngine, MergePlan, MergeResult, classify, conflict_markers
from .repository import Repository, Status
from .staging import StagingIndex
from .store import repository
from .worktree import WorkingDirectory

__all__ = [
    "AlreadyCurrent",
    "AlreadyInitialized",
    "Ambiguous",
    "AncestorBranch",
    "BlobStore",
    "BranchExists",
    "BranchTable",
    "CannotRemoveCurrent",
    "CheckoutEngine",
    "Commit",
    "CommitGraph",
    "DirgitError",
    "EmptyMessage",
    "FileNotInCommit",
    "KVStore",
    "MergeEngine",
    "MergePlan",
    "MergeResult",
    "NoSuchBranch",
    "NoSuchCommit",
    "NotFound",
    "NotInitialized",
    "NothingToCommit",
    "NothingToRemove",
    "Repository",
    "SelfMerge",
    "StagingIndex",
    "Status",
    "UncommittedChanges",
    "UntrackedFileConflict",
    "WorkingDirectory",
    "classify",
    "conflict_markers",
    "digest",
    "repository",
]
