"""Checkout/reset engine: materializes manifests into the working directory."""

from typing import Mapping

from loguru import logger

from .blobs import BlobStore, digest
from .errors import FileNotInCommit, UntrackedFileConflict
from .staging import StagingIndex
from .worktree import WorkingDirectory


class CheckoutEngine:
    """Writes a target manifest over the working directory.

    The working directory may have changed arbitrarily since the last
    command, so every whole-tree operation re-runs the untracked-file
    check before its first write.
    """

    def __init__(
        self,
        blobs: BlobStore,
        index: StagingIndex,
        worktree: WorkingDirectory,
    ) -> None:
        self.blobs = blobs
        self.index = index
        self.worktree = worktree

    def check_untracked(
        self, target: Mapping[str, str], head: Mapping[str, str]
    ) -> None:
        """Refuse to clobber untracked files.

        Raises:
            UntrackedFileConflict: If a working file that neither the head
                nor the index tracks would be overwritten by different
                content from ``target``.
        """
        for name in self.worktree.list_plain_files():
            if name in head or self.index.is_staged(name):
                continue
            blob_id = target.get(name)
            if blob_id is not None and digest(self.worktree.read_file(name)) != blob_id:
                raise UntrackedFileConflict(name)

    def materialize(
        self, target: Mapping[str, str], head: Mapping[str, str]
    ) -> None:
        """Make the working directory match ``target``.

        Writes every file of ``target`` and deletes files tracked by
        ``head`` that ``target`` lacks. Nothing is written if the
        untracked-file check fails.
        """
        self.check_untracked(target, head)
        for name, blob_id in target.items():
            self.worktree.write_file(name, self.blobs.get(blob_id))
        pruned = [name for name in head if name not in target]
        for name in pruned:
            self.worktree.delete_file(name)
        logger.debug(
            "Materialized {} files, pruned {}", len(target), len(pruned)
        )

    def restore(self, name: str, manifest: Mapping[str, str]) -> None:
        """Overwrite a single working file with its version in ``manifest``.

        Raises:
            FileNotInCommit: If ``manifest`` does not track ``name``.
        """
        blob_id = manifest.get(name)
        if blob_id is None:
            raise FileNotInCommit()
        self.worktree.write_file(name, self.blobs.get(blob_id))
