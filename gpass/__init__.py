"""
gpass: OpenPGP-encrypted secrets versioned in a git repository.

Example:
    ```python
    from gpass import CryptoEngine, Identity, Message, Repository

    identity = Identity.from_git_config()

    with Repository.load(repo_path) as repo, CryptoEngine() as engine:
        engine.build_keyring(key_path.read_bytes())

        repo.create_orphan_branch(identity, "db-password")
        engine.write_to_file(
            repo.working_dir / "secret.asc",
            engine.encrypt(Message.plaintext(b"hunter2")),
        )
        repo.commit_file(identity, "secret.asc", "add secret: db-password")
    ```
"""

from gpass.config import GpassConfig, load_config, save_config
from gpass.crypto.engine import CryptoEngine
from gpass.crypto.keyring import Keyring
from gpass.exceptions import (
    AddError,
    AlreadyEncryptedError,
    BranchNotFoundError,
    CommitError,
    ConfigError,
    CryptoError,
    DecryptionError,
    EmptyMessageError,
    EncryptionError,
    GpassError,
    IdentityError,
    InvalidArmorError,
    KeyDecryptFailedError,
    KeyParseError,
    KeyringError,
    MessageError,
    NotArmoredError,
    NotEncryptedError,
    NotPrivateKeyError,
    OpenError,
    OriginNotFoundError,
    PersistenceError,
    RefDeleteError,
    RefusePlaintextWriteError,
    RefWriteError,
    RepositoryError,
    RepositoryNotFoundError,
    SecretExistsError,
    SecretFileExistsError,
    SecretReadError,
    TagNotFoundError,
    WorktreeError,
    WriteError,
    WritePermissionError,
    WrongMessageTypeError,
)
from gpass.models import CommitInfo, Identity, Message, Reference, RefKind
from gpass.repo.repository import Repository
from gpass.vault import SecretVault

__version__ = "0.1.0"

__all__ = [
    # Main entry points
    "CryptoEngine",
    "Keyring",
    "Repository",
    "SecretVault",
    "GpassConfig",
    "load_config",
    "save_config",
    # Models
    "Identity",
    "Message",
    "RefKind",
    "Reference",
    "CommitInfo",
    # Exceptions
    "GpassError",
    "ConfigError",
    "IdentityError",
    "SecretExistsError",
    "CryptoError",
    "KeyringError",
    "NotArmoredError",
    "NotPrivateKeyError",
    "KeyParseError",
    "KeyDecryptFailedError",
    "MessageError",
    "AlreadyEncryptedError",
    "NotEncryptedError",
    "InvalidArmorError",
    "WrongMessageTypeError",
    "EncryptionError",
    "DecryptionError",
    "PersistenceError",
    "EmptyMessageError",
    "RefusePlaintextWriteError",
    "SecretFileExistsError",
    "WritePermissionError",
    "WriteError",
    "SecretReadError",
    "RepositoryError",
    "RepositoryNotFoundError",
    "OpenError",
    "OriginNotFoundError",
    "BranchNotFoundError",
    "TagNotFoundError",
    "WorktreeError",
    "AddError",
    "CommitError",
    "RefWriteError",
    "RefDeleteError",
]
