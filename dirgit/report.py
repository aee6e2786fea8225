"""Text rendering for log and status output."""

from datetime import datetime
from typing import Iterable

from .commits import Commit
from .repository import Status

DATE_FORMAT = "%a %b %d %H:%M:%S %Y %z"


def format_commit(commit: Commit) -> str:
    lines = ["===", f"commit {commit.id}"]
    if commit.is_merge:
        lines.append(f"Merge: {commit.parents[0][:7]} {commit.parents[1][:7]}")
    date = datetime.fromtimestamp(commit.timestamp).astimezone()
    lines.append(f"Date: {date.strftime(DATE_FORMAT)}")
    lines.append(commit.message)
    return "\n".join(lines) + "\n"


def format_log(commits: Iterable[Commit]) -> str:
    return "\n".join(format_commit(c) for c in commits)


def format_status(status: Status) -> str:
    """Render the five status sections, each followed by a blank line.

    The unstaged-modifications section keeps its header but lists
    nothing while a conflicted merge is unresolved.
    """
    sections = [
        (
            "Branches",
            [("*" if b == status.current else "") + b for b in status.branches],
        ),
        ("Staged Files", list(status.staged)),
        ("Removed Files", list(status.removed)),
        (
            "Modifications Not Staged For Commit",
            [f"{path} ({kind})" for path, kind in status.modified.items()],
        ),
        ("Untracked Files", list(status.untracked)),
    ]
    out = []
    for title, entries in sections:
        out.append(f"=== {title} ===")
        out.extend(entries)
        out.append("")
    return "\n".join(out) + "\n"
