"""
Session keyring.

Holds the private key entities a session may encrypt to and decrypt with,
in the order they were loaded.
"""

from collections.abc import Iterator
from dataclasses import dataclass

import structlog

from gpass.crypto.protocol import PrivateKey
from gpass.crypto.secure_bytes import SecureBytes

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class KeyringEntry:
    """A verified private key with its passphrase, if retained."""

    key: PrivateKey
    passphrase: SecureBytes | None = None

    @property
    def key_id(self) -> str:
        return self.key.key_id


class Keyring:
    """
    Ordered collection of unlocked private key entities.

    Entries are only added once their private material is known to unlock.
    """

    def __init__(self) -> None:
        self._entries: list[KeyringEntry] = []

    def add(self, key: PrivateKey, passphrase: SecureBytes | None = None) -> KeyringEntry:
        """
        Append a key entity.

        Args:
            key: The verified private key.
            passphrase: Passphrase that unlocks it, or None to prompt on use.

        Returns:
            The new entry.
        """
        entry = KeyringEntry(key=key, passphrase=passphrase)
        self._entries.append(entry)
        logger.debug("Added key to keyring", key_id=key.key_id, size=len(self._entries))
        return entry

    def get(self, key_id: str) -> KeyringEntry | None:
        """Get the first entry with this key ID."""
        return next((e for e in self._entries if e.key_id == key_id), None)

    @property
    def keys(self) -> list[PrivateKey]:
        return [entry.key for entry in self._entries]

    def clear(self) -> None:
        """
        Drop every entry.

        Securely wipes all SecureBytes passphrases.
        """
        for entry in self._entries:
            if entry.passphrase is not None:
                entry.passphrase.clear()
        self._entries.clear()

    def __iter__(self) -> Iterator[KeyringEntry]:
        return iter(list(self._entries))

    def __len__(self) -> int:
        return len(self._entries)

    def __bool__(self) -> bool:
        return bool(self._entries)
