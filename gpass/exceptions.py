"""
gpass exception hierarchy.

All exceptions inherit from GpassError for easy catching.
"""

from typing import Any


class GpassError(Exception):
    """Base exception for all gpass errors."""

    def __init__(self, message: str, **context: Any) -> None:
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self) -> str:
        if self.context:
            ctx = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
            return f"{self.message} ({ctx})"
        return self.message


class ConfigError(GpassError):
    """Configuration could not be loaded or saved."""


class IdentityError(GpassError):
    """The committing user's identity could not be resolved."""


class SecretExistsError(GpassError):
    """A secret with this name is already stored."""

    def __init__(self, message: str, *, name: str) -> None:
        super().__init__(message, name=name)
        self.name = name


class CryptoError(GpassError):
    """Cryptographic operation failed."""


class KeyringError(CryptoError):
    """Building the session keyring failed."""


class NotArmoredError(KeyringError):
    """Private key input is not ASCII-armored."""


class NotPrivateKeyError(KeyringError):
    """Armored block is not a private key block."""

    def __init__(self, message: str, *, armor_type: str | None = None) -> None:
        super().__init__(message, armor_type=armor_type)
        self.armor_type = armor_type


class KeyParseError(KeyringError):
    """Armored private key could not be read."""


class KeyDecryptFailedError(KeyringError):
    """No passphrase unlocked the private key."""

    def __init__(self, message: str, *, key_id: str | None = None) -> None:
        super().__init__(message, key_id=key_id)
        self.key_id = key_id


class MessageError(CryptoError):
    """Encrypting or decrypting a message failed."""


class AlreadyEncryptedError(MessageError):
    """Message is already encrypted."""


class NotEncryptedError(MessageError):
    """Message is plaintext."""


class InvalidArmorError(MessageError):
    """Message is not valid ASCII armor."""


class WrongMessageTypeError(MessageError):
    """Armored block is not a PGP MESSAGE."""

    def __init__(self, message: str, *, armor_type: str | None = None) -> None:
        super().__init__(message, armor_type=armor_type)
        self.armor_type = armor_type


class EncryptionError(MessageError):
    """Encryption failed or no keyring is loaded."""


class DecryptionError(MessageError):
    """No key in the keyring could decrypt the message."""


class PersistenceError(GpassError):
    """Secret file I/O failed."""

    def __init__(self, message: str, *, path: str) -> None:
        super().__init__(message, path=path)
        self.path = path


class EmptyMessageError(PersistenceError):
    """Refusing to write an empty message."""


class RefusePlaintextWriteError(PersistenceError):
    """Refusing to write unencrypted content to disk."""


class SecretFileExistsError(PersistenceError):
    """Secret files are write-once."""


class WritePermissionError(PersistenceError):
    """Permission denied while creating a secret file."""


class WriteError(PersistenceError):
    """Writing a secret file failed."""


class SecretReadError(PersistenceError):
    """Reading a secret or key file failed."""


class RepositoryError(GpassError):
    """Git repository operation failed."""

    def __init__(self, message: str, *, operation: str, **context: Any) -> None:
        super().__init__(message, operation=operation, **context)
        self.operation = operation


class RepositoryNotFoundError(RepositoryError):
    """No git repository at the given path."""


class OpenError(RepositoryError):
    """Repository exists but could not be opened."""


class OriginNotFoundError(RepositoryError):
    """Origin branch does not resolve."""


class BranchNotFoundError(RepositoryError):
    """Branch does not exist."""


class TagNotFoundError(RepositoryError):
    """Tag does not exist."""


class WorktreeError(RepositoryError):
    """Checkout of the worktree failed."""


class AddError(RepositoryError):
    """Staging a path failed."""


class CommitError(RepositoryError):
    """Creating a commit failed."""


class RefWriteError(RepositoryError):
    """Writing a reference failed."""


class RefDeleteError(RepositoryError):
    """Deleting a reference failed."""
