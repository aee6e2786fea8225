"""Three-way merge of two branch heads."""

from dataclasses import dataclass
from typing import Mapping

from loguru import logger

from .blobs import BlobStore
from .branches import BranchTable
from .checkout import CheckoutEngine
from .commits import CommitGraph
from .errors import AncestorBranch, NoSuchBranch, SelfMerge, UncommittedChanges
from .staging import StagingIndex
from .worktree import WorkingDirectory

CONFLICT_HEAD = b"<<<<<<< HEAD\n"
CONFLICT_SEP = b"=======\n"
CONFLICT_TAIL = b">>>>>>>\n"


@dataclass(frozen=True)
class MergePlan:
    """Per-path resolutions computed from split, current and given manifests.

    Paths not listed keep whatever the current branch has (or lacks).
    """

    take_given: tuple[str, ...]
    remove: tuple[str, ...]
    conflicts: tuple[str, ...]


@dataclass(frozen=True)
class MergeResult:
    """Result of a merge operation."""

    commit: str
    strategy: str  # "fast_forward", "three_way"
    split: str
    conflicts: tuple[str, ...] = ()

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)


def classify(
    split: Mapping[str, str],
    current: Mapping[str, str],
    given: Mapping[str, str],
) -> MergePlan:
    """Classify every path's three-way history.

    Manifests map paths to blob ids, so comparing ids compares content.
    A side that changed a path wins over a side that left it alone;
    when both sides changed it differently the path conflicts.
    """
    take_given: list[str] = []
    remove: list[str] = []
    conflicts: list[str] = []

    for path in sorted(set(split) | set(current) | set(given)):
        old = split.get(path)
        ours = current.get(path)
        theirs = given.get(path)

        if ours == theirs:
            continue  # same on both sides (possibly absent on both)
        if old is not None and ours == old:
            # Only given changed it
            if theirs is None:
                remove.append(path)
            else:
                take_given.append(path)
        elif old is not None and theirs == old:
            continue  # only current changed it
        elif old is None and ours is None:
            take_given.append(path)  # added only in given
        elif old is None and theirs is None:
            continue  # added only in current
        else:
            conflicts.append(path)

    return MergePlan(
        take_given=tuple(take_given),
        remove=tuple(remove),
        conflicts=tuple(conflicts),
    )


def conflict_markers(ours: bytes | None, theirs: bytes | None) -> bytes:
    """Render both sides of a conflicting file between markers.

    A side that lacks the file contributes nothing; a side that has it
    contributes its content followed by a newline.
    """
    ours_part = ours + b"\n" if ours is not None else b""
    theirs_part = theirs + b"\n" if theirs is not None else b""
    return CONFLICT_HEAD + ours_part + CONFLICT_SEP + theirs_part + CONFLICT_TAIL


class MergeEngine:
    """Merges a given branch into the current one.

    Every precondition, including the untracked-file check, is
    evaluated before the first write, so a raised error leaves the
    repository and the working directory untouched.
    """

    def __init__(
        self,
        graph: CommitGraph,
        branches: BranchTable,
        blobs: BlobStore,
        index: StagingIndex,
        checkout: CheckoutEngine,
        worktree: WorkingDirectory,
    ) -> None:
        self.graph = graph
        self.branches = branches
        self.blobs = blobs
        self.index = index
        self.checkout = checkout
        self.worktree = worktree

    def merge(self, given_branch: str) -> MergeResult:
        """Merge ``given_branch`` into the current branch.

        Returns:
            A MergeResult. ``strategy`` is ``"fast_forward"`` when the
            current head was an ancestor of the given head, otherwise
            ``"three_way"`` with any conflicting paths listed.

        Raises:
            NoSuchBranch: If ``given_branch`` does not exist.
            UncommittedChanges: If the staging index is not empty.
            SelfMerge: If ``given_branch`` is the current branch.
            UntrackedFileConflict: If the merge would clobber an
                untracked file.
            AncestorBranch: If the given head is already contained in
                the current branch.
        """
        if given_branch not in self.branches:
            raise NoSuchBranch()
        if not self.index.is_empty():
            raise UncommittedChanges()
        current_branch = self.branches.current
        if given_branch == current_branch:
            raise SelfMerge()

        current_head = self.branches.head()
        given_head = self.branches.head(given_branch)
        current = self.graph.get(current_head).manifest
        given = self.graph.get(given_head).manifest
        self.checkout.check_untracked(given, current)

        if self.graph.is_ancestor(given_head, current_head):
            raise AncestorBranch()
        if self.graph.is_ancestor(current_head, given_head):
            self.checkout.materialize(given, current)
            self.index.clear()
            self.branches.advance(given_head)
            logger.info(
                "Fast-forwarded {} to {}", current_branch, given_head[:7]
            )
            return MergeResult(
                commit=given_head, strategy="fast_forward", split=current_head
            )

        split = self.graph.split_point(current_head, given_head)
        logger.debug("Merge: split point {}", split[:7])
        plan = classify(self.graph.get(split).manifest, current, given)

        for path in plan.take_given:
            content = self.blobs.get(given[path])
            self.worktree.write_file(path, content)
            self.index.stage(path, content, current)
            logger.debug("Merge: taking {} from {}", path, given_branch)

        for path in plan.remove:
            self.worktree.delete_file(path)
            self.index.unstage(path, current)
            logger.debug("Merge: removing {}", path)

        for path in plan.conflicts:
            ours = self.blobs.get(current[path]) if path in current else None
            theirs = self.blobs.get(given[path]) if path in given else None
            content = conflict_markers(ours, theirs)
            self.worktree.write_file(path, content)
            self.index.stage(path, content, current)
            logger.warning("Merge conflict in {}", path)

        manifest = self.index.snapshot(current)
        commit_id = self.graph.create(
            manifest,
            f"Merged {given_branch} into {current_branch}.",
            (current_head, given_head),
        )
        self.branches.advance(commit_id)
        self.index.clear()
        logger.info(
            "Merged {} into {} as {} ({} conflicts)",
            given_branch,
            current_branch,
            commit_id[:7],
            len(plan.conflicts),
        )
        return MergeResult(
            commit=commit_id,
            strategy="three_way",
            split=split,
            conflicts=plan.conflicts,
        )
