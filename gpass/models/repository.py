"""
Git reference and commit models.
"""

from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum


class RefKind(StrEnum):
    """Reference namespaces used for secrets and their versions."""

    BRANCH = "refs/heads/"
    TAG = "refs/tags/"

    def full_name(self, short_name: str) -> str:
        return f"{self.value}{short_name}"

    def short_name(self, full_name: str) -> str | None:
        """Strip the namespace prefix, or None if ``full_name`` is outside it."""
        if not full_name.startswith(self.value):
            return None
        return full_name[len(self.value) :]


@dataclass(frozen=True, kw_only=True)
class Reference:
    """
    A named pointer to a commit.

    Attributes:
        kind: Branch or tag namespace.
        name: Short name (without ``refs/heads/`` or ``refs/tags/``).
        target: Hex SHA of the commit the reference points at.
    """

    kind: RefKind
    name: str
    target: str

    @property
    def full_name(self) -> str:
        return self.kind.full_name(self.name)


@dataclass(frozen=True, kw_only=True)
class CommitInfo:
    """
    A commit as seen by the repository state machine.

    Attributes:
        hexsha: Commit hash.
        parents: Parent commit hashes, empty for a root commit.
        author_name: Author name.
        author_email: Author email.
        message: Commit message.
        authored_at: Author timestamp.
    """

    hexsha: str
    parents: tuple[str, ...]
    author_name: str
    author_email: str
    message: str
    authored_at: datetime

    @property
    def is_root(self) -> bool:
        return len(self.parents) == 0
