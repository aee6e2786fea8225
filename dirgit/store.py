"""Repository factory function."""

import os
from pathlib import Path
from typing import Literal

from .errors import NotInitialized
from .kv.base import KVStore
from .kv.memory import Memory
from .repository import Repository
from .worktree import WorkingDirectory

REPO_DIR = ".dirgit"


def repository(
    path: str | os.PathLike = ".",
    kind: Literal["memory", "disk"] = "disk",
    *,
    create: bool = False,
) -> Repository:
    """Open the repository rooted at ``path``.

    Args:
        path: Working directory root (default: the current directory).
        kind: ``"disk"`` (default) keeps all state in a diskcache
            directory at ``<path>/.dirgit``; ``"memory"`` keeps it in
            process memory only.
        create: Allow creating the disk store. Without it a missing
            store means the directory was never initialized.

    Returns:
        A ``Repository``. Call ``init()`` on a fresh one.

    Raises:
        NotInitialized: If ``kind="disk"``, ``create`` is False and no
            store exists yet.
    """
    root = Path(path)
    backend: KVStore
    if kind == "memory":
        backend = Memory()
    elif kind == "disk":
        store_dir = root / REPO_DIR
        if not create and not store_dir.is_dir():
            raise NotInitialized()
        from .kv.disk import Disk

        backend = Disk(str(store_dir))
    else:
        raise ValueError(f"Unknown kind: {kind!r}")

    return Repository(backend, WorkingDirectory(root))
