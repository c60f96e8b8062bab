"""
Git backend protocol definition.

The repository state machine only talks to git through this capability set,
so it can run against GitPython or an in-memory fake.
"""

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol, runtime_checkable

from gpass.models.identity import Identity
from gpass.models.repository import CommitInfo, Reference


@runtime_checkable
class GitBackend(Protocol):
    """
    Abstract interface for reference, worktree and commit operations.

    Reference names passed to and returned from the backend are full names
    (``refs/heads/<name>``, ``refs/tags/<name>``); branch arguments to the
    checkout methods are short names.
    """

    @property
    def working_dir(self) -> Path:
        """Root of the worktree."""
        ...

    def resolve_ref(self, full_name: str) -> str | None:
        """Return the commit hash a reference points at, or None if it does not exist."""
        ...

    def write_ref(self, full_name: str, hexsha: str) -> None:
        """
        Point a reference at a commit, creating or overwriting it.

        Raises:
            RefWriteError: If the reference store rejects the write.
        """
        ...

    def delete_ref(self, full_name: str) -> None:
        """
        Raises:
            RefDeleteError: If the reference store rejects the deletion.
        """
        ...

    def list_refs(self) -> list[Reference]:
        """
        List branch and tag references.

        Raises:
            RepositoryError: If references cannot be enumerated.
        """
        ...

    def checkout(
        self,
        branch: str,
        *,
        create: bool = False,
        start_point: str | None = None,
        force: bool = False,
    ) -> None:
        """
        Switch the worktree onto ``branch``.

        With ``create``, the branch is created at ``start_point`` and the call
        fails if it already exists, unless ``force`` resets it.

        Raises:
            WorktreeError: If the checkout fails.
        """
        ...

    def checkout_orphan(self, branch: str) -> None:
        """
        Switch onto a new branch with no history and an empty index.

        Raises:
            WorktreeError: If the checkout fails.
        """
        ...

    def add(self, paths: Sequence[str]) -> None:
        """
        Stage paths relative to the worktree root.

        Raises:
            AddError: If staging fails.
        """
        ...

    def commit(
        self,
        message: str,
        author: Identity,
        *,
        parents: Sequence[str] | None = None,
        all: bool = False,
    ) -> CommitInfo:
        """
        Commit the index onto the checked-out branch.

        Args:
            message: Commit message.
            author: Author and committer.
            parents: Explicit parent hashes; None uses the branch tip.
            all: Stage modifications to tracked files first (``commit -a``).

        Raises:
            CommitError: If the commit cannot be created.
        """
        ...

    def read_commit(self, rev: str) -> CommitInfo:
        """
        Raises:
            RepositoryError: If ``rev`` does not name a commit.
        """
        ...

    def active_branch(self) -> str | None:
        """Short name of the checked-out branch, or None when detached."""
        ...

    def close(self) -> None:
        """Release the underlying repository handle."""
        ...
