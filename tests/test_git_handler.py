"""
Integration tests for the git command line backend.
"""

import unittest
from pathlib import Path
from unittest import mock

from gitsemver.core.config import EngineConfig, RepositoryConfig
from gitsemver.core.exceptions import (
    MainBranchError,
    RepositoryError,
    TagCreationError,
    TraversalError,
)
from gitsemver.engine import VersionEngine
from gitsemver.graph.commit_graph import TraversalOrder
from gitsemver.graph.walker import CommitWalker
from gitsemver.repository.backend import InMemoryRepository, tag_release
from gitsemver.repository.git_handler import CommitReader, GitRepository, parse_commit_object
from gitsemver.repository.main_branch import MainBranchResolver

from gitrepo import GitRepoTestCase, requires_git


@requires_git
class TestGitRepository(GitRepoTestCase):
    """Tests for tag and history enumeration."""

    def test_open_from_subdirectory(self):
        """Test locating the repository root."""
        self.commit("chore: init", {"pkg/a.txt": "a"})

        repo = GitRepository.open(str(self.path / "pkg"))

        self.assertEqual(repo.path.resolve(), self.path.resolve())

    def test_open_outside_repository(self):
        """Test that a plain directory is not a repository."""
        with self.assertRaises(RepositoryError):
            GitRepository.open(self.tmpdir)

    def test_open_missing_directory(self):
        """Test opening a path that does not exist."""
        with self.assertRaises(RepositoryError):
            GitRepository.open(str(Path(self.tmpdir) / "missing"))

    def test_list_tags(self):
        """Test lightweight and annotated tags resolve to commits."""
        first = self.commit("chore: init")
        self.git("tag", "v1.0.0")
        second = self.commit("feat: x")
        self.git("tag", "-a", "api-v2.0.0", "-m", "api release")

        repo = GitRepository.open(str(self.path))

        self.assertEqual(repo.list_tags(), {first: "v1.0.0", second: "api-v2.0.0"})
        self.assertEqual(repo.list_tags(prefix="api"), {second: "api-v2.0.0"})

    def test_list_tags_empty(self):
        """Test a repository without tags."""
        self.commit("chore: init")

        self.assertEqual(GitRepository.open(str(self.path)).list_tags(), {})

    def test_iter_commits(self):
        """Test history enumeration with messages and files."""
        first = self.commit("chore: init", {"a.txt": "a"})
        second = self.commit("feat: add b\n\nBody text", {"dir/b.txt": "b", "c.txt": "c"})

        repo = GitRepository.open(str(self.path))
        commits = list(repo.iter_commits(include_files=True))

        self.assertEqual([c.hash for c in commits], [second, first])
        self.assertEqual(commits[0].message, "feat: add b\n\nBody text")
        self.assertEqual(commits[0].parents, (first,))
        self.assertEqual(sorted(commits[0].files), ["c.txt", "dir/b.txt"])
        self.assertEqual(commits[1].files, ("a.txt",))

    def test_iter_commits_merge_orders(self):
        """Test both traversal orders over a merge."""
        base = self.commit("chore: init")
        self.git("checkout", "--quiet", "-b", "feature")
        side = self.commit("feat: side")
        self.git("checkout", "--quiet", "main")
        main = self.commit("fix: main")
        self.git("merge", "--quiet", "--no-ff", "-m", "Merge feature", "feature")
        merge = self.git("rev-parse", "HEAD")

        repo = GitRepository.open(str(self.path))
        mainline = [c.hash for c in repo.iter_commits(order=TraversalOrder.MAINLINE)]
        branch = [c.hash for c in repo.iter_commits(order=TraversalOrder.BRANCH)]

        self.assertEqual(mainline, [merge, main, base, side])
        self.assertEqual(branch, [merge, side, base, main])

    def test_iter_commits_unknown_ref(self):
        """Test enumerating from a reference that does not exist."""
        self.commit("chore: init")

        with self.assertRaises(TraversalError):
            GitRepository.open(str(self.path)).iter_commits("does-not-exist")

    def test_walk_reads_only_visited_commits(self):
        """Test that a walk stopping at a tag near HEAD leaves older history unread."""
        for index in range(20):
            self.commit(f"chore: step {index}")
        self.git("tag", "v1.0.0")
        self.commit("fix: a")
        head = self.commit("fix: b")

        repo = GitRepository.open(str(self.path))
        requested = []
        original_read = CommitReader.read

        def counting_read(reader, commit_hash):
            requested.append(commit_hash)
            return original_read(reader, commit_hash)

        with mock.patch.object(CommitReader, "read", counting_read):
            result = CommitWalker().walk(repo, repo.list_tags(), TraversalOrder.MAINLINE)

        self.assertEqual(result.tag_name, "v1.0.0")
        self.assertEqual(result.commit_distance, 2)
        self.assertEqual(len(requested), 3)
        self.assertEqual(requested[0], head)

    def test_commit_reader(self):
        """Test reading single commits and closing the reader."""
        first = self.commit("chore: init")
        second = self.commit("feat: x\n\nBody", {"pkg/a.txt": "a"})
        repo = GitRepository.open(str(self.path))

        with CommitReader(repo, include_files=True) as reader:
            commit = reader.read(second)
            self.assertEqual(commit.parents, (first,))
            self.assertEqual(commit.message, "feat: x\n\nBody")
            self.assertEqual(commit.files, ("pkg/a.txt",))
            self.assertIsNone(reader.read("0" * 40))

        self.assertIsNone(reader._process)

    def test_head(self):
        """Test HEAD on a branch and detached."""
        first = self.commit("chore: init")
        self.git("checkout", "--quiet", "-b", "feature/x")
        repo = GitRepository.open(str(self.path))

        head = repo.head()
        self.assertEqual((head.name, head.hash, head.detached), ("feature/x", first, False))

        self.git("checkout", "--quiet", "--detach")
        head = repo.head()
        self.assertEqual((head.name, head.detached), ("HEAD", True))

    def test_head_without_commits(self):
        """Test HEAD of an empty repository."""
        with self.assertRaises(RepositoryError):
            GitRepository.open(str(self.path)).head()

    def test_tag_release(self):
        """Test creating an annotated tag once."""
        head = self.commit("chore: init")
        repo = GitRepository.open(str(self.path))

        self.assertTrue(tag_release(repo, "v0.1.0"))
        self.assertFalse(tag_release(repo, "v0.1.0"))

        self.assertTrue(repo.tag_exists("v0.1.0"))
        self.assertEqual(self.git("cat-file", "-t", "v0.1.0"), "tag")
        self.assertEqual(repo.list_tags(), {head: "v0.1.0"})

    def test_create_invalid_tag(self):
        """Test that invalid tag names are rejected before calling git."""
        head = self.commit("chore: init")

        with self.assertRaises(TagCreationError):
            GitRepository.open(str(self.path)).create_tag("bad tag", head, "bad tag")

    def test_remote_default_branch(self):
        """Test reading the remote's symbolic HEAD."""
        self.commit("chore: init")
        self.git("update-ref", "refs/remotes/origin/trunk", "HEAD")
        self.git("symbolic-ref", "refs/remotes/origin/HEAD", "refs/remotes/origin/trunk")

        repo = GitRepository.open(str(self.path))

        self.assertEqual(repo.remote_default_branch("origin"), "trunk")
        self.assertIsNone(repo.remote_default_branch("upstream"))


class TestParseCommitObject(unittest.TestCase):
    """Tests for decoding raw commit objects."""

    def test_signed_merge_commit(self):
        """Test parents and message around a multi-line signature header."""
        data = (
            b"tree " + b"1" * 40 + b"\n"
            b"parent " + b"a" * 40 + b"\n"
            b"parent " + b"b" * 40 + b"\n"
            b"author Test <test@example.com> 1700000000 +0000\n"
            b"committer Test <test@example.com> 1700000000 +0000\n"
            b"gpgsig -----BEGIN PGP SIGNATURE-----\n"
            b" \n"
            b" abcdef\n"
            b" -----END PGP SIGNATURE-----\n"
            b"\n"
            b"Merge branch 'feature'\n\nBREAKING CHANGE: removed x\n"
        )

        commit = parse_commit_object("c" * 40, data)

        self.assertEqual(commit.parents, ("a" * 40, "b" * 40))
        self.assertEqual(commit.message, "Merge branch 'feature'\n\nBREAKING CHANGE: removed x")
        self.assertEqual(commit.files, ())


class TestMainBranchResolver(unittest.TestCase):
    """Tests for default branch resolution."""

    def test_configured_branch_wins(self):
        """Test that explicit configuration skips detection."""
        repo = InMemoryRepository()
        repo.remote_heads["origin"] = "trunk"

        resolver = MainBranchResolver(repo, RepositoryConfig(main_branch="develop"))

        self.assertEqual(resolver(), "develop")

    def test_remote_head(self):
        """Test detection through the configured remote."""
        repo = InMemoryRepository()
        repo.remote_heads["upstream"] = "trunk"

        resolver = MainBranchResolver(repo, RepositoryConfig(remote="upstream"))

        self.assertEqual(resolver(), "trunk")

    def test_undetermined(self):
        """Test failure when no source knows the branch."""
        resolver = MainBranchResolver(
            InMemoryRepository(),
            RepositoryConfig(),
            gh_executable="gh-does-not-exist",
        )

        with self.assertRaises(MainBranchError):
            resolver()


@requires_git
class TestVersionEngine(GitRepoTestCase):
    """End-to-end tests against real repositories."""

    def engine(self, **versioning) -> VersionEngine:
        config = EngineConfig()
        config.repository.path = str(self.path)
        config.repository.main_branch = "main"
        for key, value in versioning.items():
            setattr(config.versioning, key, value)
        return VersionEngine(config)

    def test_first_release(self):
        """Test a repository without tags."""
        self.commit("feat: init")

        self.assertEqual(self.engine().run(), "0.1.0")

    def test_feature_branch(self):
        """Test a feature branch off a release."""
        self.commit("chore: init")
        self.git("tag", "v1.2.3")
        self.git("checkout", "--quiet", "-b", "feature/x")
        head = self.commit("feat: add x")

        self.assertEqual(self.engine().run(), f"v1.3.0-featurex.1.{head[:7]}")
        self.assertEqual(self.engine(release=True).run(), "v1.3.0")

    def test_mono_repo_module(self):
        """Test prefix and path filtering."""
        self.commit("chore: init", {"api/a.py": "1", "web/a.js": "1"})
        self.git("tag", "-a", "api-v1.0.0", "-m", "api-v1.0.0")
        self.commit("feat: web", {"web/a.js": "2"})
        self.commit("fix: api", {"api/a.py": "2"})

        engine = self.engine(prefix="api", filter_path="api/")

        self.assertEqual(engine.run(), "api-v1.0.1")

    def test_run_and_tag(self):
        """Test tagging HEAD with the computed version."""
        self.commit("chore: init")
        self.git("tag", "v0.1.0")
        head = self.commit("feat!: breaking")

        self.assertEqual(self.engine().run(tag=True), "v1.0.0")
        self.assertEqual(self.git("rev-list", "-n", "1", "v1.0.0"), head)

        # Tagged HEAD resolves to the same version again
        self.assertEqual(self.engine().run(tag=True), "v1.0.0")


if __name__ == "__main__":
    unittest.main()
