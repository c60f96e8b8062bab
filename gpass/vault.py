"""
Secret lifecycle.

Composes the crypto engine and the repository state machine: plaintext is
encrypted before it touches the worktree, and every stored secret is a
commit on its own branch.
"""

from pathlib import Path
from typing import Self

import structlog

from gpass.config import GpassConfig
from gpass.crypto.engine import CryptoEngine
from gpass.crypto.passphrase import PassphraseProvider
from gpass.exceptions import BranchNotFoundError, RepositoryError, SecretExistsError
from gpass.models.identity import Identity
from gpass.models.message import Message
from gpass.models.repository import CommitInfo
from gpass.repo.repository import Repository
from gpass.secret_file import load_key_file, read_secret

logger = structlog.get_logger(__name__)

SECRET_FILENAME = "secret"


class SecretVault:
    """
    Stores, reads and versions secrets.

    Each secret lives on branch ``<name>`` as a single armored file; versions
    are tags that can be restored as branches.

    Example:
        with SecretVault.from_config(load_config()) as vault:
            vault.create_secret("db-password", b"hunter2")
            vault.preserve_version("db-password", "db-password-2024")
            print(vault.read_secret("db-password"))
    """

    def __init__(
        self,
        repository: Repository,
        engine: CryptoEngine,
        identity: Identity,
        *,
        suffix: str = ".asc",
    ) -> None:
        """
        Args:
            repository: Loaded repository state machine.
            engine: Crypto engine with a built keyring.
            identity: Commit author.
            suffix: Secret file extension.
        """
        self._repo = repository
        self._engine = engine
        self._identity = identity
        self._filename = f"{SECRET_FILENAME}{suffix}"

    @classmethod
    def from_config(
        cls,
        config: GpassConfig,
        passphrase_provider: PassphraseProvider | None = None,
    ) -> Self:
        """
        Open the configured repository and build the keyring from the configured key.

        Raises:
            RepositoryNotFoundError: If the repository is missing.
            SecretReadError: If the key file cannot be read.
            KeyringError: If the keyring cannot be built.
        """
        repository = Repository.load(config.repository_path)
        engine = CryptoEngine(
            passphrase_provider=passphrase_provider,
            max_attempts=config.passphrase_attempts,
            cache_passphrases=config.cache_passphrases,
        )
        try:
            engine.build_keyring(load_key_file(config.private_key_path))
        except Exception:
            engine.close()
            repository.close()
            raise
        return cls(repository, engine, config.identity, suffix=config.secret_suffix)

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    def close(self) -> None:
        self._engine.close()
        self._repo.close()

    @property
    def secret_path(self) -> Path:
        """Path of the secret file in the current worktree."""
        return self._repo.working_dir / self._filename

    def create_secret(self, name: str, plaintext: bytes) -> CommitInfo:
        """
        Store a new secret on its own orphan branch.

        A failure after the branch was created removes it again and returns
        to the previously checked-out branch.

        Raises:
            SecretExistsError: If a branch with this name exists.
        """
        if self._repo.branch_exists(name):
            msg = f"Secret already exists: {name}"
            raise SecretExistsError(msg, name=name)

        encrypted = self._engine.encrypt(Message.plaintext(plaintext))
        previous = self._repo.active_branch()
        self._repo.create_orphan_branch(self._identity, name)
        try:
            self._engine.write_to_file(self.secret_path, encrypted)
            commit = self._repo.commit_file(self._identity, self._filename, f"add secret: {name}")
        except Exception:
            self._discard_branch(name, previous)
            raise
        logger.info("Secret created", name=name, hexsha=commit.hexsha)
        return commit

    def read_secret(self, name: str) -> bytes:
        """Check out the secret's branch (or restored version) and decrypt it."""
        self._repo.checkout_branch(name)
        return self._engine.decrypt(read_secret(self.secret_path)).data

    def update_secret(self, name: str, plaintext: bytes) -> CommitInfo:
        """
        Replace a secret's content with a new commit on its branch.

        The previous content stays reachable through history and any tags.
        """
        self._repo.checkout_branch(name)
        encrypted = self._engine.encrypt(Message.plaintext(plaintext))
        self.secret_path.unlink(missing_ok=True)
        self._engine.write_to_file(self.secret_path, encrypted)
        commit = self._repo.commit_file(self._identity, self._filename, f"update secret: {name}")
        logger.info("Secret updated", name=name, hexsha=commit.hexsha)
        return commit

    def preserve_version(self, name: str, version: str) -> None:
        """Tag the current state of a secret."""
        self._repo.add_tag_branch(version, name)

    def restore_version(self, version: str, *, create: bool = True) -> None:
        """Check out a preserved version as branch ``version``."""
        self._repo.tag_branch(version, create)

    def list_secrets(self) -> list[str]:
        return self._repo.list_branches()

    def list_versions(self) -> list[str]:
        return self._repo.list_tags()

    def remove_secret(self, name: str) -> None:
        """
        Delete a secret's branch. Preserved versions are kept.

        Raises:
            BranchNotFoundError: If there is no such secret.
        """
        if not self._repo.branch_exists(name):
            msg = f"Secret not found: {name}"
            raise BranchNotFoundError(msg, operation="remove_secret", branch=name)
        self._repo.remove_branch(name)

    def _discard_branch(self, name: str, previous: str | None) -> None:
        if previous is None:
            logger.warning("Cannot discard branch from a detached HEAD", branch=name)
            return
        try:
            self._repo.checkout_branch(previous)
            self._repo.remove_branch(name)
        except RepositoryError as e:
            logger.warning("Failed to discard partial secret", branch=name, error=str(e))
            return
        logger.info("Discarded partial secret", branch=name)
