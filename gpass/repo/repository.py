"""
Repository state machine.

Secrets are branches (``refs/heads/<secret>``) and preserved versions are
lightweight tags (``refs/tags/<version>``). Every transition goes through one
of the named operations below.
"""

from collections.abc import Callable
from pathlib import Path
from typing import Self

import structlog

from gpass.exceptions import (
    BranchNotFoundError,
    OriginNotFoundError,
    RefDeleteError,
    RepositoryError,
    TagNotFoundError,
    WorktreeError,
)
from gpass.models.identity import Identity
from gpass.models.repository import CommitInfo, RefKind
from gpass.repo.gitpython_backend import GitPythonBackend
from gpass.repo.protocol import GitBackend

logger = structlog.get_logger(__name__)

ORPHAN_COMMIT_MESSAGE = "creating branch for: {name}"


class Repository:
    """
    Branch, tag and commit transitions over a git repository.

    The handle is single-owner: worktree mutations are not safe to run
    concurrently against the same path.

    Example:
        with Repository.load(Path("~/secrets").expanduser()) as repo:
            repo.create_orphan_branch(identity, "alpha")
            repo.commit_file(identity, "alpha.asc", "add alpha")
            repo.add_tag_branch("alpha-v1", "alpha")
    """

    def __init__(self, backend: GitBackend) -> None:
        """
        Args:
            backend: Git capability set the state machine drives.
        """
        self._git = backend

    @classmethod
    def load(
        cls,
        path: Path,
        backend_factory: Callable[[Path], GitBackend] = GitPythonBackend.open,
    ) -> Self:
        """
        Open an existing repository.

        Raises:
            RepositoryNotFoundError: If there is no repository at ``path``.
            OpenError: If the repository cannot be opened.
        """
        path = Path(path).expanduser()
        backend = backend_factory(path)
        logger.info("Repository loaded", path=str(path))
        return cls(backend)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def close(self) -> None:
        self._git.close()

    @property
    def working_dir(self) -> Path:
        return self._git.working_dir

    def create_branch(self, origin: str, new: str) -> None:
        """
        Create ``new`` at the tip of ``origin`` and check it out.

        Raises:
            OriginNotFoundError: If ``origin`` does not resolve.
            WorktreeError: If the checkout fails, including when ``new`` exists.
        """
        origin_sha = self._git.resolve_ref(RefKind.BRANCH.full_name(origin))
        if origin_sha is None:
            msg = f"Origin branch not found: {origin}"
            raise OriginNotFoundError(msg, operation="create_branch", branch=origin)

        self._git.checkout(new, create=True, start_point=origin_sha)
        logger.info("Created branch", origin=origin, branch=new)

    def create_orphan_branch(self, identity: Identity, name: str) -> CommitInfo:
        """
        Start a disconnected history on a new branch with a root commit.

        Raises:
            WorktreeError: If the branch cannot be checked out.
            CommitError: If the root commit fails.
        """
        self._git.checkout_orphan(name)
        commit = self._git.commit(
            ORPHAN_COMMIT_MESSAGE.format(name=name),
            identity,
            parents=(),
        )
        logger.info("Created orphan branch", branch=name, hexsha=commit.hexsha)
        return commit

    def checkout_branch(self, name: str) -> None:
        """
        Switch the worktree onto an existing branch.

        Raises:
            BranchNotFoundError: If the branch does not exist.
            WorktreeError: If the checkout fails.
        """
        if self._git.resolve_ref(RefKind.BRANCH.full_name(name)) is None:
            msg = f"Branch not found: {name}"
            raise BranchNotFoundError(msg, operation="checkout_branch", branch=name)
        self._git.checkout(name)

    def add_tag_branch(self, tag: str, branch: str) -> None:
        """
        Point lightweight tag ``tag`` at the tip of ``branch``.

        An existing tag of the same name is overwritten.

        Raises:
            BranchNotFoundError: If the branch does not exist.
            RefWriteError: If the tag cannot be written.
        """
        branch_sha = self._git.resolve_ref(RefKind.BRANCH.full_name(branch))
        if branch_sha is None:
            msg = f"Branch not found: {branch}"
            raise BranchNotFoundError(msg, operation="add_tag_branch", branch=branch)

        self._git.write_ref(RefKind.TAG.full_name(tag), branch_sha)
        logger.info("Tagged branch", tag=tag, branch=branch, hexsha=branch_sha)

    def tag_branch(self, name: str, create: bool) -> None:
        """
        Materialise tag ``name`` as branch ``name`` and check it out.

        Args:
            name: Tag name, also used as the branch name.
            create: Create the branch; fails if it already exists. Otherwise
                the existing branch is reset onto the tag's commit.

        Raises:
            TagNotFoundError: If the tag does not exist.
            WorktreeError: If the checkout fails or, with ``create=False``, the
                branch does not exist.
        """
        tag_sha = self._git.resolve_ref(RefKind.TAG.full_name(name))
        if tag_sha is None:
            msg = f"Tag not found: {name}"
            raise TagNotFoundError(msg, operation="tag_branch", tag=name)

        if create:
            self._git.checkout(name, create=True, start_point=tag_sha)
        else:
            if self._git.resolve_ref(RefKind.BRANCH.full_name(name)) is None:
                msg = f"Unable to switch to missing branch: {name}"
                raise WorktreeError(msg, operation="tag_branch", branch=name)
            self._git.checkout(name, create=True, start_point=tag_sha, force=True)
        logger.info("Checked out tag as branch", tag=name, create=create)

    def commit_file(self, identity: Identity, filename: str | Path, message: str) -> CommitInfo:
        """
        Stage ``filename`` and commit every change in the worktree.

        Raises:
            AddError: If the file cannot be staged.
            CommitError: If the commit fails.
        """
        self._git.add([self._relative(filename)])
        commit = self._git.commit(message, identity, all=True)
        logger.info("Committed file", filename=str(filename), hexsha=commit.hexsha)
        return commit

    def commit(self, identity: Identity, message: str) -> CommitInfo:
        """
        Commit all modified tracked content (``git commit -a``).

        Raises:
            CommitError: If the commit fails.
        """
        commit = self._git.commit(message, identity, all=True)
        logger.info("Committed", hexsha=commit.hexsha)
        return commit

    def list_branches(self) -> list[str]:
        """
        Local branch names.

        Best-effort: returns an empty list if references cannot be listed.
        """
        return self._names(RefKind.BRANCH)

    def list_tags(self) -> list[str]:
        """
        Tag names.

        Best-effort: returns an empty list if references cannot be listed.
        """
        return self._names(RefKind.TAG)

    def branch_exists(self, name: str) -> bool:
        """Best-effort: False if references cannot be listed."""
        return name in self._names(RefKind.BRANCH)

    def tag_exists(self, name: str) -> bool:
        """Best-effort: False if references cannot be listed."""
        return name in self._names(RefKind.TAG)

    def remove_branch(self, name: str) -> None:
        """
        Delete a branch reference. Tags pointing into its history are kept.

        Raises:
            RefDeleteError: If the branch is checked out or the deletion is rejected.
        """
        if self._git.active_branch() == name:
            msg = f"Refusing to remove the checked-out branch: {name}"
            raise RefDeleteError(msg, operation="remove_branch", branch=name)
        self._git.delete_ref(RefKind.BRANCH.full_name(name))
        logger.info("Removed branch", branch=name)

    def head_commit(self, branch: str) -> CommitInfo:
        """
        Tip commit of a branch.

        Raises:
            BranchNotFoundError: If the branch does not exist.
        """
        sha = self._git.resolve_ref(RefKind.BRANCH.full_name(branch))
        if sha is None:
            msg = f"Branch not found: {branch}"
            raise BranchNotFoundError(msg, operation="head_commit", branch=branch)
        return self._git.read_commit(sha)

    def active_branch(self) -> str | None:
        return self._git.active_branch()

    def _names(self, kind: RefKind) -> list[str]:
        # Listing failures degrade to an empty result; callers use these as
        # non-failing predicates.
        try:
            refs = self._git.list_refs()
        except RepositoryError as e:
            logger.warning("Failed to list references", kind=kind.name, error=str(e))
            return []
        return [ref.name for ref in refs if ref.kind is kind]

    def _relative(self, filename: str | Path) -> str:
        path = Path(filename)
        if path.is_absolute():
            path = path.relative_to(self.working_dir)
        return path.as_posix()
