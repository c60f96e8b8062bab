"""
OpenPGP capabilities the crypto engine relies on.

The engine depends on these protocols only, so the OpenPGP library behind
them can be replaced.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from gpass.crypto.secure_bytes import SecureBytes


@runtime_checkable
class PrivateKey(Protocol):
    """Protocol for a private key entity (primary key plus subkeys)."""

    @property
    def key_id(self) -> str:
        """Short (16 hex digit) key ID of the primary key."""
        ...

    @property
    def fingerprint(self) -> str:
        """Full primary key fingerprint."""
        ...

    @property
    def is_protected(self) -> bool:
        """Whether the private material is passphrase-protected."""
        ...


@runtime_checkable
class PGPBackend(Protocol):
    """
    Abstract interface for PGP operations.

    Implementations raise gpass exceptions, never library-specific ones.
    """

    def armor_type(self, data: bytes) -> str | None:
        """
        Read the ASCII armor header of a block.

        Args:
            data: Candidate armored bytes.

        Returns:
            The armor type (e.g. ``"PGP MESSAGE"``), or None if ``data`` is
            not ASCII-armored.
        """
        ...

    def load_private_key(self, armored_key: str) -> PrivateKey:
        """
        Load a private key from ASCII-armored format.

        Raises:
            KeyParseError: If the key cannot be parsed.
            NotPrivateKeyError: If the key has no private material.
        """
        ...

    def verify_passphrase(self, private_key: PrivateKey, passphrase: SecureBytes | None) -> bool:
        """Check that ``passphrase`` unlocks the key's private material."""
        ...

    def encrypt(self, data: bytes, recipients: Sequence[PrivateKey]) -> str:
        """
        Encrypt ``data`` to every recipient.

        Returns:
            ASCII-armored ``PGP MESSAGE``.

        Raises:
            EncryptionError: If encryption fails.
        """
        ...

    def decrypt(
        self,
        armored_message: str,
        private_key: PrivateKey,
        passphrase: SecureBytes | None,
    ) -> bytes:
        """
        Decrypt a PGP message with a single key.

        Raises:
            DecryptionError: If this key cannot decrypt the message.
        """
        ...
