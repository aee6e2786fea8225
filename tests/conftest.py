import pytest

from dirgit import Repository, WorkingDirectory
from dirgit.kv.memory import Memory


@pytest.fixture
def repo(tmp_path):
    """An initialized in-memory repository over a temporary directory."""
    r = Repository(Memory(), WorkingDirectory(tmp_path))
    r.init()
    return r


def write(repo, name, text):
    repo.worktree.write_file(name, text.encode())


def read(repo, name):
    return repo.worktree.read_file(name).decode()


def commit_file(repo, name, text, message=None):
    """Write, stage and commit one file; return the commit id."""
    write(repo, name, text)
    repo.add(name)
    return repo.commit(message or f"set {name}")
