"""Tests for merge classification and the merge operation."""

import pytest

from conftest import commit_file, read, write
from dirgit import (
    AncestorBranch,
    NoSuchBranch,
    SelfMerge,
    UncommittedChanges,
    UntrackedFileConflict,
    classify,
    conflict_markers,
    digest,
)


class TestClassify:
    def test_unchanged_everywhere(self):
        plan = classify({"f": "1"}, {"f": "1"}, {"f": "1"})
        assert plan.take_given == plan.remove == plan.conflicts == ()

    def test_same_change_on_both_sides(self):
        plan = classify({"f": "1"}, {"f": "2"}, {"f": "2"})
        assert plan.conflicts == ()
        assert plan.take_given == ()

    def test_modified_only_in_given(self):
        plan = classify({"f": "1"}, {"f": "1"}, {"f": "2"})
        assert plan.take_given == ("f",)

    def test_modified_only_in_current(self):
        plan = classify({"f": "1"}, {"f": "2"}, {"f": "1"})
        assert plan.take_given == plan.remove == plan.conflicts == ()

    def test_modified_differently(self):
        plan = classify({"f": "1"}, {"f": "2"}, {"f": "3"})
        assert plan.conflicts == ("f",)

    def test_removed_in_given_unmodified_in_current(self):
        plan = classify({"f": "1"}, {"f": "1"}, {})
        assert plan.remove == ("f",)

    def test_modified_in_current_removed_in_given(self):
        plan = classify({"f": "1"}, {"f": "2"}, {})
        assert plan.conflicts == ("f",)

    def test_removed_in_current_unmodified_in_given(self):
        plan = classify({"f": "1"}, {}, {"f": "1"})
        assert plan.take_given == plan.remove == plan.conflicts == ()

    def test_removed_in_current_modified_in_given(self):
        plan = classify({"f": "1"}, {}, {"f": "2"})
        assert plan.conflicts == ("f",)

    def test_removed_on_both_sides(self):
        plan = classify({"f": "1"}, {}, {})
        assert plan.take_given == plan.remove == plan.conflicts == ()

    def test_added_only_in_given(self):
        plan = classify({}, {}, {"f": "1"})
        assert plan.take_given == ("f",)

    def test_added_only_in_current(self):
        plan = classify({}, {"f": "1"}, {})
        assert plan.take_given == plan.remove == plan.conflicts == ()

    def test_added_identically(self):
        plan = classify({}, {"f": "1"}, {"f": "1"})
        assert plan.conflicts == ()

    def test_added_differently(self):
        plan = classify({}, {"f": "1"}, {"f": "2"})
        assert plan.conflicts == ("f",)

    def test_mixed_paths_sorted(self):
        plan = classify(
            {"a": "1", "b": "1", "c": "1"},
            {"a": "1", "b": "2", "c": "1"},
            {"a": "9", "b": "3", "z": "1"},
        )
        assert plan.take_given == ("a", "z")
        assert plan.conflicts == ("b",)
        assert plan.remove == ("c",)


class TestConflictMarkers:
    def test_both_sides(self):
        assert conflict_markers(b"y", b"z") == b"<<<<<<< HEAD\ny\n=======\nz\n>>>>>>>\n"

    def test_given_absent(self):
        assert conflict_markers(b"y", None) == b"<<<<<<< HEAD\ny\n=======\n>>>>>>>\n"

    def test_current_absent(self):
        assert conflict_markers(None, b"z") == b"<<<<<<< HEAD\n=======\nz\n>>>>>>>\n"


class TestMergePreconditions:
    def test_no_such_branch(self, repo):
        with pytest.raises(NoSuchBranch):
            repo.merge("nope")

    def test_uncommitted_changes(self, repo):
        repo.branch("feat")
        write(repo, "a.txt", "a")
        repo.add("a.txt")
        with pytest.raises(UncommittedChanges):
            repo.merge("feat")

    def test_no_such_branch_checked_before_uncommitted(self, repo):
        write(repo, "a.txt", "a")
        repo.add("a.txt")
        with pytest.raises(NoSuchBranch):
            repo.merge("nope")

    def test_self_merge(self, repo):
        with pytest.raises(SelfMerge):
            repo.merge("master")

    def test_untracked_file_in_the_way(self, repo):
        commit_file(repo, "a.txt", "a")
        repo.branch("feat")
        repo.checkout_branch("feat")
        commit_file(repo, "new.txt", "from feat")
        repo.checkout_branch("master")
        commit_file(repo, "a.txt", "a2")
        write(repo, "new.txt", "mine")
        head = repo.head.id
        with pytest.raises(UntrackedFileConflict):
            repo.merge("feat")
        assert repo.head.id == head
        assert read(repo, "new.txt") == "mine"

    def test_given_is_ancestor(self, repo):
        repo.branch("old")
        commit_file(repo, "a.txt", "a")
        head = repo.head.id
        with pytest.raises(AncestorBranch):
            repo.merge("old")
        assert repo.head.id == head


class TestFastForward:
    def test_fast_forward(self, repo):
        commit_file(repo, "a.txt", "a")
        repo.branch("feat")
        repo.checkout_branch("feat")
        feat_head = commit_file(repo, "b.txt", "b")
        repo.checkout_branch("master")

        result = repo.merge("feat")
        assert result.strategy == "fast_forward"
        assert result.commit == feat_head
        assert repo.current_branch == "master"
        assert repo.head.id == feat_head
        assert not repo.head.is_merge
        assert read(repo, "b.txt") == "b"
        assert repo.index.is_empty()


class TestThreeWayMerge:
    def test_conflict_scenario(self, repo):
        commit_file(repo, "file.txt", "x", "A")
        repo.branch("feat")
        b = commit_file(repo, "file.txt", "y", "B")
        repo.checkout_branch("feat")
        c = commit_file(repo, "file.txt", "z", "C")
        repo.checkout_branch("master")

        result = repo.merge("feat")
        expected = b"<<<<<<< HEAD\ny\n=======\nz\n>>>>>>>\n"
        assert result.conflicts == ("file.txt",)
        assert result.has_conflicts
        assert repo.worktree.read_file("file.txt") == expected

        head = repo.head
        assert head.id == result.commit
        assert head.parents == (b, c)
        assert head.message == "Merged feat into master."
        assert head.manifest["file.txt"] == digest(expected)
        assert repo.unresolved_conflicts == ("file.txt",)
        assert repo.index.is_empty()

    def test_clean_merge(self, repo):
        commit_file(repo, "shared.txt", "base")
        commit_file(repo, "doomed.txt", "bye")
        repo.branch("feat")
        commit_file(repo, "mine.txt", "master only")
        repo.checkout_branch("feat")
        commit_file(repo, "shared.txt", "feat edit")
        commit_file(repo, "theirs.txt", "feat only")
        repo.rm("doomed.txt")
        repo.commit("drop doomed")
        repo.checkout_branch("master")

        result = repo.merge("feat")
        assert result.strategy == "three_way"
        assert result.conflicts == ()
        assert read(repo, "shared.txt") == "feat edit"
        assert read(repo, "theirs.txt") == "feat only"
        assert read(repo, "mine.txt") == "master only"
        assert not repo.worktree.exists("doomed.txt")
        assert set(repo.head.manifest) == {"shared.txt", "mine.txt", "theirs.txt"}
        assert repo.head.is_merge
        assert repo.unresolved_conflicts == ()

    def test_identical_changes_do_not_conflict(self, repo):
        commit_file(repo, "f.txt", "base")
        repo.branch("feat")
        commit_file(repo, "f.txt", "same")
        commit_file(repo, "n.txt", "new")
        repo.checkout_branch("feat")
        commit_file(repo, "f.txt", "same")
        commit_file(repo, "n.txt", "new")
        commit_file(repo, "other.txt", "o")
        repo.checkout_branch("master")

        result = repo.merge("feat")
        assert result.conflicts == ()
        assert read(repo, "f.txt") == "same"
        assert b"<<<<<<<" not in repo.worktree.read_file("n.txt")

    def test_modified_here_removed_there(self, repo):
        commit_file(repo, "f.txt", "base")
        repo.branch("feat")
        commit_file(repo, "f.txt", "changed")
        repo.checkout_branch("feat")
        repo.rm("f.txt")
        repo.commit("remove f")
        repo.checkout_branch("master")

        result = repo.merge("feat")
        assert result.conflicts == ("f.txt",)
        assert read(repo, "f.txt") == "<<<<<<< HEAD\nchanged\n=======\n>>>>>>>\n"

    def test_second_merge_uses_new_split_point(self, repo):
        commit_file(repo, "a.txt", "a")
        repo.branch("feat")
        commit_file(repo, "a.txt", "a master")
        repo.checkout_branch("feat")
        commit_file(repo, "b.txt", "b1")
        repo.checkout_branch("master")
        first = repo.merge("feat")
        assert first.conflicts == ()

        repo.checkout_branch("feat")
        commit_file(repo, "b.txt", "b2")
        repo.checkout_branch("master")
        second = repo.merge("feat")
        assert second.conflicts == ()
        assert read(repo, "b.txt") == "b2"
        assert read(repo, "a.txt") == "a master"

    def test_commit_after_conflict_clears_marker(self, repo):
        commit_file(repo, "f.txt", "x")
        repo.branch("feat")
        commit_file(repo, "f.txt", "y")
        repo.checkout_branch("feat")
        commit_file(repo, "f.txt", "z")
        repo.checkout_branch("master")
        repo.merge("feat")

        commit_file(repo, "f.txt", "resolved")
        assert repo.unresolved_conflicts == ()


class TestMergeAfterPriorMerges:
    def test_given_reachable_only_through_longer_path(self, repo):
        commit_file(repo, "f.txt", "x")
        repo.branch("side")
        repo.branch("given")
        repo.checkout_branch("given")
        commit_file(repo, "g.txt", "g1")
        commit_file(repo, "g.txt", "g2")
        repo.checkout_branch("master")
        assert repo.merge("given").strategy == "fast_forward"
        commit_file(repo, "c.txt", "c1")
        commit_file(repo, "c.txt", "c2")
        repo.checkout_branch("side")
        commit_file(repo, "s.txt", "s")
        repo.checkout_branch("master")
        repo.merge("side")

        head = repo.head.id
        with pytest.raises(AncestorBranch):
            repo.merge("given")
        assert repo.head.id == head

    def test_nearest_split_avoids_false_conflict(self, repo):
        commit_file(repo, "f.txt", "x")
        repo.branch("side")
        commit_file(repo, "f.txt", "y")
        repo.branch("given")
        repo.checkout_branch("given")
        commit_file(repo, "f.txt", "g")
        repo.checkout_branch("master")
        commit_file(repo, "c.txt", "c1")
        commit_file(repo, "c.txt", "c2")
        repo.checkout_branch("side")
        commit_file(repo, "s.txt", "s")
        repo.checkout_branch("master")
        repo.merge("side")

        result = repo.merge("given")
        assert result.strategy == "three_way"
        assert result.conflicts == ()
        assert read(repo, "f.txt") == "g"
        assert read(repo, "s.txt") == "s"
        assert read(repo, "c.txt") == "c2"
