"""
Git backend implementation using GitPython.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Self

import git
import structlog

from gpass.exceptions import (
    AddError,
    CommitError,
    OpenError,
    RefDeleteError,
    RefWriteError,
    RepositoryError,
    RepositoryNotFoundError,
    WorktreeError,
)
from gpass.models.identity import Identity
from gpass.models.repository import CommitInfo, Reference, RefKind

logger = structlog.get_logger(__name__)


def _to_commit_info(commit: git.Commit) -> CommitInfo:
    message = commit.message
    if isinstance(message, bytes):
        message = message.decode("utf-8", errors="replace")
    return CommitInfo(
        hexsha=commit.hexsha,
        parents=tuple(parent.hexsha for parent in commit.parents),
        author_name=commit.author.name or "",
        author_email=commit.author.email or "",
        message=message,
        authored_at=commit.authored_datetime,
    )


class GitPythonBackend:
    """
    GitBackend over an on-disk repository opened with GitPython.

    Example:
        backend = GitPythonBackend.open(Path("~/secrets").expanduser())
        backend.checkout("alpha")
    """

    def __init__(self, repo: git.Repo) -> None:
        self._repo = repo

    @classmethod
    def open(cls, path: Path) -> Self:
        """
        Open an existing, non-bare repository rooted at ``path``.

        Raises:
            RepositoryNotFoundError: If there is no repository at ``path``.
            OpenError: If the repository cannot be used.
        """
        try:
            repo = git.Repo(path)
        except (git.exc.NoSuchPathError, git.exc.InvalidGitRepositoryError) as e:
            msg = f"No git repository found: {e}"
            raise RepositoryNotFoundError(msg, operation="load", path=str(path)) from e
        except (git.exc.GitError, OSError) as e:
            msg = f"Unable to open the repository: {e}"
            raise OpenError(msg, operation="load", path=str(path)) from e

        if repo.bare:
            repo.close()
            msg = "Bare repositories have no work tree"
            raise OpenError(msg, operation="load", path=str(path))

        logger.debug("Opened repository", path=str(path))
        return cls(repo)

    @property
    def working_dir(self) -> Path:
        return Path(self._repo.working_tree_dir)

    def resolve_ref(self, full_name: str) -> str | None:
        ref = git.Reference(self._repo, full_name, check_path=False)
        try:
            return ref.commit.hexsha
        except (ValueError, OSError):
            return None

    def write_ref(self, full_name: str, hexsha: str) -> None:
        try:
            self._repo.git.update_ref(full_name, hexsha)
        except git.exc.GitCommandError as e:
            msg = f"Unable to write reference: {str(e.stderr).strip()}"
            raise RefWriteError(msg, operation="write_ref", ref=full_name) from e

    def delete_ref(self, full_name: str) -> None:
        try:
            self._repo.git.update_ref("-d", full_name)
        except git.exc.GitCommandError as e:
            msg = f"Unable to delete reference: {str(e.stderr).strip()}"
            raise RefDeleteError(msg, operation="delete_ref", ref=full_name) from e

    def list_refs(self) -> list[Reference]:
        try:
            references = list(self._repo.references)
        except (git.exc.GitError, OSError, ValueError) as e:
            msg = f"Unable to list references: {e}"
            raise RepositoryError(msg, operation="list_refs") from e

        result: list[Reference] = []
        for ref in references:
            for kind in RefKind:
                name = kind.short_name(ref.path)
                if name is None:
                    continue
                try:
                    target = ref.commit.hexsha
                except (ValueError, OSError):
                    # dangling
                    continue
                result.append(Reference(kind=kind, name=name, target=target))
        return result

    def checkout(
        self,
        branch: str,
        *,
        create: bool = False,
        start_point: str | None = None,
        force: bool = False,
    ) -> None:
        args: list[str] = []
        if create:
            args.extend(["-B" if force else "-b", branch])
            if start_point is not None:
                args.append(start_point)
        else:
            args.append(branch)

        try:
            self._repo.git.checkout(*args)
        except git.exc.GitCommandError as e:
            msg = f"Unable to checkout branch: {str(e.stderr).strip()}"
            raise WorktreeError(msg, operation="checkout", branch=branch) from e
        logger.debug("Checked out branch", branch=branch, create=create)

    def checkout_orphan(self, branch: str) -> None:
        # switch --orphan empties the index and worktree of tracked files
        try:
            self._repo.git.switch("--orphan", branch)
        except git.exc.GitCommandError as e:
            msg = f"Unable to create a new branch: {str(e.stderr).strip()}"
            raise WorktreeError(msg, operation="checkout_orphan", branch=branch) from e
        logger.debug("Checked out orphan branch", branch=branch)

    def add(self, paths: Sequence[str]) -> None:
        try:
            self._repo.index.add(list(paths))
        except (git.exc.GitError, OSError, ValueError) as e:
            msg = f"Unable to git add the file: {e}"
            raise AddError(msg, operation="add", paths=list(paths)) from e

    def commit(
        self,
        message: str,
        author: Identity,
        *,
        parents: Sequence[str] | None = None,
        all: bool = False,
    ) -> CommitInfo:
        actor = git.Actor(author.name, author.email)
        try:
            if all:
                self._repo.git.add(update=True)
            parent_commits = (
                None if parents is None else [self._repo.commit(p) for p in parents]
            )
            commit = self._repo.index.commit(
                message,
                parent_commits=parent_commits,
                author=actor,
                committer=actor,
            )
        except (git.exc.BadName, git.exc.GitError, OSError, ValueError) as e:
            msg = f"Unable to commit: {e}"
            raise CommitError(msg, operation="commit") from e

        logger.debug("Committed", hexsha=commit.hexsha, parents=len(commit.parents))
        return _to_commit_info(commit)

    def read_commit(self, rev: str) -> CommitInfo:
        try:
            return _to_commit_info(self._repo.commit(rev))
        except (git.exc.BadName, git.exc.GitError, ValueError) as e:
            msg = f"Unable to read commit: {e}"
            raise RepositoryError(msg, operation="read_commit", rev=rev) from e

    def active_branch(self) -> str | None:
        try:
            return self._repo.active_branch.name
        except TypeError:
            return None

    def close(self) -> None:
        self._repo.close()
