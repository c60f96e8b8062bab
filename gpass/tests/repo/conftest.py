from collections.abc import Sequence
from datetime import UTC, datetime
from pathlib import Path

import pytest

from gpass.exceptions import RefDeleteError, RepositoryError, WorktreeError
from gpass.models.identity import Identity
from gpass.models.repository import CommitInfo, Reference, RefKind
from gpass.repo.repository import Repository


class FakeGitBackend:
    """In-memory GitBackend recording references and commits."""

    def __init__(self, working_dir: Path) -> None:
        self._working_dir = working_dir
        self.refs: dict[str, str] = {}
        self.commits: dict[str, CommitInfo] = {}
        self.head: str | None = None
        self.staged: list[str] = []
        self.fail_listing = False
        self.closed = False

    def seed(self, branch: str, message: str = "initial commit") -> CommitInfo:
        commit = self._new_commit(message, "Seed", "seed@test.com", ())
        self.refs[RefKind.BRANCH.full_name(branch)] = commit.hexsha
        self.head = branch
        return commit

    @property
    def working_dir(self) -> Path:
        return self._working_dir

    def resolve_ref(self, full_name: str) -> str | None:
        return self.refs.get(full_name)

    def write_ref(self, full_name: str, hexsha: str) -> None:
        self.refs[full_name] = hexsha

    def delete_ref(self, full_name: str) -> None:
        if full_name not in self.refs:
            msg = "Unable to delete reference"
            raise RefDeleteError(msg, operation="delete_ref", ref=full_name)
        del self.refs[full_name]

    def list_refs(self) -> list[Reference]:
        if self.fail_listing:
            msg = "Unable to list references"
            raise RepositoryError(msg, operation="list_refs")
        result = []
        for full_name, target in self.refs.items():
            for kind in RefKind:
                name = kind.short_name(full_name)
                if name is not None:
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
        full_name = RefKind.BRANCH.full_name(branch)
        if create:
            if full_name in self.refs and not force:
                msg = f"a branch named '{branch}' already exists"
                raise WorktreeError(msg, operation="checkout", branch=branch)
            self.refs[full_name] = start_point or self.refs[RefKind.BRANCH.full_name(self.head)]
        elif full_name not in self.refs:
            msg = f"pathspec '{branch}' did not match"
            raise WorktreeError(msg, operation="checkout", branch=branch)
        self.head = branch

    def checkout_orphan(self, branch: str) -> None:
        if RefKind.BRANCH.full_name(branch) in self.refs:
            msg = f"a branch named '{branch}' already exists"
            raise WorktreeError(msg, operation="checkout_orphan", branch=branch)
        self.head = branch
        self.staged = []

    def add(self, paths: Sequence[str]) -> None:
        self.staged.extend(paths)

    def commit(
        self,
        message: str,
        author: Identity,
        *,
        parents: Sequence[str] | None = None,
        all: bool = False,
    ) -> CommitInfo:
        full_name = RefKind.BRANCH.full_name(self.head)
        if parents is None:
            tip = self.refs.get(full_name)
            parents = () if tip is None else (tip,)
        commit = self._new_commit(message, author.name, author.email, tuple(parents))
        self.refs[full_name] = commit.hexsha
        return commit

    def read_commit(self, rev: str) -> CommitInfo:
        if rev not in self.commits:
            msg = "Unable to read commit"
            raise RepositoryError(msg, operation="read_commit", rev=rev)
        return self.commits[rev]

    def active_branch(self) -> str | None:
        return self.head

    def close(self) -> None:
        self.closed = True

    def _new_commit(
        self, message: str, name: str, email: str, parents: tuple[str, ...]
    ) -> CommitInfo:
        hexsha = f"{len(self.commits) + 1:040x}"
        commit = CommitInfo(
            hexsha=hexsha,
            parents=parents,
            author_name=name,
            author_email=email,
            message=message,
            authored_at=datetime.now(UTC),
        )
        self.commits[hexsha] = commit
        return commit


@pytest.fixture
def fake_backend(tmp_path: Path) -> FakeGitBackend:
    backend = FakeGitBackend(tmp_path)
    backend.seed("main")
    return backend


@pytest.fixture
def repository(fake_backend: FakeGitBackend) -> Repository:
    return Repository(fake_backend)
