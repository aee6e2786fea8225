"""Branch table: named, mutable pointers to head commits."""

from .errors import BranchExists, CannotRemoveCurrent, NoSuchBranch, NotInitialized
from .kv.base import KVStore

BRANCH_HEAD = "__branch_head__%s"
CURRENT_BRANCH = "__current_branch__"
DEFAULT_BRANCH = "master"


class BranchTable:
    """Maps branch names to head commit ids and tracks the current branch.

    A head is only an id. Removing a branch never touches the commits
    it pointed at.
    """

    def __init__(self, store: KVStore) -> None:
        self.store = store

    @property
    def current(self) -> str:
        raw = self.store.get(CURRENT_BRANCH)
        if raw is None:
            raise NotInitialized()
        return raw.decode()

    def head(self, name: str | None = None) -> str:
        """Head commit of ``name`` (default: the current branch)."""
        if name is None:
            name = self.current
        raw = self.store.get(BRANCH_HEAD % name)
        if raw is None:
            raise NoSuchBranch()
        return raw.decode()

    def __contains__(self, name: str) -> bool:
        return BRANCH_HEAD % name in self.store

    def names(self) -> list[str]:
        """All branch names, sorted."""
        return [name for name in self.store.scan(BRANCH_HEAD) if name]

    def create(self, name: str, commit_id: str) -> None:
        if name in self:
            raise BranchExists()
        self.store.set(BRANCH_HEAD % name, commit_id.encode())

    def remove(self, name: str) -> None:
        if name not in self:
            raise NoSuchBranch()
        if name == self.current:
            raise CannotRemoveCurrent()
        self.store.remove(BRANCH_HEAD % name)

    def advance(self, commit_id: str, name: str | None = None) -> None:
        """Point ``name`` (default: the current branch) at ``commit_id``."""
        if name is None:
            name = self.current
        elif name not in self:
            raise NoSuchBranch()
        self.store.set(BRANCH_HEAD % name, commit_id.encode())

    def switch(self, name: str) -> None:
        if name not in self:
            raise NoSuchBranch()
        self.store.set(CURRENT_BRANCH, name.encode())

    def initialize(self, commit_id: str, name: str = DEFAULT_BRANCH) -> None:
        """Create the first branch at ``commit_id`` and make it current."""
        self.store.set_many(
            **{
                BRANCH_HEAD % name: commit_id.encode(),
                CURRENT_BRANCH: name.encode(),
            }
        )
