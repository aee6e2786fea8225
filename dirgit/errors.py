"""dirgit error types.

Every error carries the single line shown to the user. The engine raises
them before touching any state, so catching one at the command boundary
always means nothing changed.
"""


class DirgitError(Exception):
    """Base class for all errors reported by the engine."""

    message = "dirgit error."

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.message)


class NotFound(DirgitError):
    """A blob, commit, branch or file lookup missed."""

    message = "Not found."


class NoSuchBranch(NotFound):
    message = "A branch with that name does not exist."


class NoSuchCommit(NotFound):
    message = "No commit with that id exists."


class FileNotInCommit(NotFound):
    message = "File does not exist in that commit."


class Ambiguous(DirgitError):
    """An abbreviated commit id matches more than one commit.

    Attributes:
        prefix: The abbreviated id.
        matches: Every full id sharing the prefix.
    """

    def __init__(self, prefix: str, matches: list[str]) -> None:
        self.prefix = prefix
        self.matches = matches
        super().__init__(
            f"Commit id {prefix} is ambiguous ({len(matches)} matches)."
        )


class EmptyMessage(DirgitError):
    message = "Please enter a commit message."


class NothingToCommit(DirgitError):
    message = "No changes added to the commit."


class NothingToRemove(DirgitError):
    message = "No reason to remove the file."


class UntrackedFileConflict(DirgitError):
    """An untracked working file would be overwritten.

    Attributes:
        path: The first offending file.
    """

    message = (
        "There is an untracked file in the way; "
        "delete it, or add and commit it first."
    )

    def __init__(self, path: str) -> None:
        self.path = path
        super().__init__()


class AlreadyCurrent(DirgitError):
    message = "No need to checkout the current branch."


class SelfMerge(DirgitError):
    message = "Cannot merge a branch with itself."


class UncommittedChanges(DirgitError):
    message = "You have uncommitted changes."


class AncestorBranch(DirgitError):
    message = "Given branch is an ancestor of the current branch."


class BranchExists(DirgitError):
    message = "A branch with that name already exists."


class CannotRemoveCurrent(DirgitError):
    message = "Cannot remove the current branch."


class AlreadyInitialized(DirgitError):
    message = (
        "A dirgit version-control system already exists "
        "in the current directory."
    )


class NotInitialized(DirgitError):
    message = "Not in an initialized dirgit directory."
