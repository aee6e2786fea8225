"""Working-directory file primitives."""

from pathlib import Path


class WorkingDirectory:
    """The user's files. Only top-level plain files are considered."""

    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)

    def path(self, name: str) -> Path:
        return self.root / name

    def exists(self, name: str) -> bool:
        return self.path(name).is_file()

    def read_file(self, name: str) -> bytes:
        return self.path(name).read_bytes()

    def write_file(self, name: str, data: bytes) -> None:
        self.path(name).write_bytes(data)

    def delete_file(self, name: str) -> None:
        self.path(name).unlink(missing_ok=True)

    def list_plain_files(self) -> list[str]:
        """Names of the plain files directly under the root, sorted."""
        if not self.root.is_dir():
            return []
        return sorted(p.name for p in self.root.iterdir() if p.is_file())
