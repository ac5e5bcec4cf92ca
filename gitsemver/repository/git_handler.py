"""
Git operations handler.

Implements the repository backend on top of the git executable,
providing tag and history enumeration, HEAD inspection and tag
creation. History is read one commit at a time as a walk reaches it.
"""

import logging
import subprocess
from pathlib import Path
from typing import Dict, Iterator, List, Optional, Tuple

from gitsemver.core.config import RepositoryConfig
from gitsemver.core.exceptions import RepositoryError, TagCreationError, TraversalError
from gitsemver.graph.commit_graph import Commit, CommitGraph, TraversalOrder
from gitsemver.repository.backend import DETACHED_HEAD, HeadRef, RepositoryBackend
from gitsemver.utils.validation import validate_path, validate_tag_name

logger = logging.getLogger(__name__)

# Field separator used in for-each-ref output
FIELD_SEP = "\x00"

TAG_REF_PREFIX = "refs/tags/"
REMOTE_REF_PREFIX = "refs/remotes/"


class CommitReader:
    """
    Reads commits one at a time from a ``git cat-file --batch`` process.

    The process is started on the first read and ends on :meth:`close`.
    Changed files are listed with ``git diff-tree`` only when asked for.
    """

    def __init__(self, repo: "GitRepository", include_files: bool = False):
        self.repo = repo
        self.include_files = include_files
        self._process: Optional[subprocess.Popen] = None

    def __enter__(self) -> "CommitReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _start(self) -> subprocess.Popen:
        cmd = [self.repo.config.git_executable, "cat-file", "--batch"]
        logger.debug(f"Git command: {' '.join(cmd)}")
        try:
            return subprocess.Popen(
                cmd,
                stdin=subprocess.PIPE,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                cwd=self.repo.path,
            )
        except FileNotFoundError:
            raise RepositoryError(
                f"Git is not available on this system: {self.repo.config.git_executable}",
                details={"command": cmd},
            )

    def read(self, commit_hash: str) -> Optional[Commit]:
        """
        Read a single commit.

        Returns:
            The commit, or None if the object is not in the repository
            (e.g. beyond the boundary of a shallow clone).

        Raises:
            TraversalError: If git stops answering.
        """
        if self._process is None:
            self._process = self._start()
        process = self._process

        try:
            process.stdin.write(f"{commit_hash}\n".encode("ascii"))
            process.stdin.flush()
            header = process.stdout.readline().decode("ascii", errors="replace").split()
        except (BrokenPipeError, OSError) as e:
            raise TraversalError(
                f"couldn't get commits: {e}",
                details={"commit": commit_hash},
            )

        if not header:
            raise TraversalError(
                "couldn't get commits: git cat-file exited unexpectedly",
                details={"commit": commit_hash},
            )
        if len(header) != 3:
            logger.debug(f"Object {commit_hash} is {header[-1]}")
            return None

        object_hash, object_type, size = header
        data = process.stdout.read(int(size))
        process.stdout.read(1)
        if object_type != "commit":
            logger.debug(f"Object {object_hash} is a {object_type}, not a commit")
            return None

        files = self._changed_files(object_hash) if self.include_files else ()
        return parse_commit_object(object_hash, data, files)

    def _changed_files(self, commit_hash: str) -> Tuple[str, ...]:
        # Merge commits list no files without -m or -c
        result = self.repo._run([
            "diff-tree", "--no-commit-id", "--name-only", "-r", "--root", commit_hash,
        ])
        if result.returncode != 0:
            raise TraversalError(
                f"couldn't get changed files of {commit_hash[:7]}: {result.stderr.strip()}",
                details={"commit": commit_hash, "stderr": result.stderr},
            )
        return tuple(line for line in result.stdout.splitlines() if line.strip())

    def close(self) -> None:
        """Stop the cat-file process."""
        process, self._process = self._process, None
        if process is None:
            return

        process.stdin.close()
        try:
            process.wait(timeout=self.repo.config.git_timeout)
        except subprocess.TimeoutExpired:
            process.kill()
            process.wait()
        process.stdout.close()


def parse_commit_object(commit_hash: str, data: bytes, files: Tuple[str, ...] = ()) -> Commit:
    """Build a Commit from the raw contents of a commit object."""
    text = data.decode("utf-8", errors="replace")
    headers, _, message = text.partition("\n\n")

    parents = tuple(
        line[len("parent "):]
        for line in headers.split("\n")
        if line.startswith("parent ")
    )
    return Commit(
        hash=commit_hash,
        message=message.rstrip("\n"),
        parents=parents,
        files=files,
    )


class GitRepository(RepositoryBackend):
    """
    Repository backend driven by the git command line.

    Use :meth:`open` to locate the repository from any directory inside
    its working tree.
    """

    def __init__(self, path: Path, config: RepositoryConfig = None):
        self.path = Path(path)
        self.config = config or RepositoryConfig()

    @classmethod
    def open(cls, path: str = ".", config: RepositoryConfig = None) -> "GitRepository":
        """
        Open the repository containing ``path``.

        Args:
            path: Any directory inside the working tree.
            config: Repository configuration.

        Returns:
            GitRepository rooted at the top level of the working tree.

        Raises:
            RepositoryError: If no repository is found.
        """
        config = config or RepositoryConfig()

        is_valid, error = validate_path(path)
        if not is_valid:
            raise RepositoryError(
                f"couldn't open git repository: {error}",
                details={"path": path},
            )

        locator = cls(Path(path), config)
        result = locator._run(["rev-parse", "--show-toplevel"])
        if result.returncode != 0:
            raise RepositoryError(
                f"couldn't open git repository: {result.stderr.strip()}",
                details={"path": path, "stderr": result.stderr},
            )

        root = Path(result.stdout.strip())
        logger.debug(f"Opened repository at {root}")
        return cls(root, config)

    def _run(self, args: List[str]) -> subprocess.CompletedProcess:
        """Run a git command in the repository."""
        cmd = [self.config.git_executable, "-c", "core.quotePath=false"] + args
        logger.debug(f"Git command: {' '.join(cmd)}")

        try:
            return subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=self.path,
                timeout=self.config.git_timeout,
            )
        except subprocess.TimeoutExpired:
            raise RepositoryError(
                f"Git command timed out after {self.config.git_timeout} seconds",
                details={"command": cmd},
            )
        except FileNotFoundError:
            raise RepositoryError(
                f"Git is not available on this system: {self.config.git_executable}",
                details={"command": cmd},
            )

    def list_tags(self, prefix: Optional[str] = None) -> Dict[str, str]:
        result = self._run([
            "for-each-ref",
            "--format=%(refname)%00%(objectname)%00%(*objectname)",
            "refs/tags",
        ])
        if result.returncode != 0:
            raise TraversalError(
                f"couldn't get tags: {result.stderr.strip()}",
                details={"stderr": result.stderr},
            )

        tag_refs = {}
        for line in result.stdout.splitlines():
            if not line:
                continue
            refname, object_hash, peeled_hash = line.split(FIELD_SEP)
            name = refname[len(TAG_REF_PREFIX):]
            if prefix and not name.startswith(prefix):
                continue
            # Annotated tags point at a tag object; use the commit it targets
            tag_refs[peeled_hash or object_hash] = name

        logger.debug(f"Found {len(tag_refs)} tagged commits")
        return tag_refs

    def _resolve_commit(self, ref: str) -> str:
        result = self._run(["rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}"])
        if result.returncode != 0:
            raise TraversalError(
                f"couldn't get commits: unknown reference '{ref}'",
                details={"ref": ref, "stderr": result.stderr},
            )
        return result.stdout.strip()

    def iter_commits(
        self,
        start_ref: str = "HEAD",
        order: TraversalOrder = TraversalOrder.MAINLINE,
        include_files: bool = False,
    ) -> Iterator[Commit]:
        start = self._resolve_commit(start_ref)
        return self._walk_history(start, order, include_files)

    def _walk_history(
        self,
        start: str,
        order: TraversalOrder,
        include_files: bool,
    ) -> Iterator[Commit]:
        with CommitReader(self, include_files) as reader:
            graph = CommitGraph(loader=reader.read)
            yield from graph.ancestry(start, order)
        logger.debug(f"Read {len(graph)} commits from {start[:7]}")

    def head(self) -> HeadRef:
        result = self._run(["rev-parse", "--verify", "--quiet", "HEAD"])
        if result.returncode != 0:
            raise RepositoryError(
                "couldn't get head: repository has no commits",
                details={"stderr": result.stderr},
            )
        commit_hash = result.stdout.strip()

        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"])
        if result.returncode != 0:
            return HeadRef(DETACHED_HEAD, commit_hash, detached=True)
        return HeadRef(result.stdout.strip(), commit_hash)

    def remote_default_branch(self, remote: str) -> Optional[str]:
        """
        Read the default branch a remote advertises through its HEAD.

        Returns:
            Branch name, or None if the remote HEAD is not known locally.
        """
        result = self._run(["symbolic-ref", "--quiet", f"{REMOTE_REF_PREFIX}{remote}/HEAD"])
        if result.returncode != 0:
            return None

        target = result.stdout.strip()
        remote_prefix = f"{REMOTE_REF_PREFIX}{remote}/"
        if not target.startswith(remote_prefix):
            logger.warning(f"Unexpected remote HEAD target: {target}")
            return None
        return target[len(remote_prefix):] or None

    def tag_exists(self, name: str) -> bool:
        result = self._run(["rev-parse", "--verify", "--quiet", f"{TAG_REF_PREFIX}{name}"])
        return result.returncode == 0

    def create_tag(self, name: str, commit_hash: str, message: str) -> None:
        is_valid, error = validate_tag_name(name)
        if not is_valid:
            raise TagCreationError(name, error)

        result = self._run(["tag", "--annotate", name, "--message", message, commit_hash])
        if result.returncode != 0:
            raise TagCreationError(name, result.stderr.strip())
        logger.info(f"Created tag {name} at {commit_hash[:7]}")
