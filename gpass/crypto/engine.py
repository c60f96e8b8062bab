"""
Crypto engine for gpass.

Turns plaintext secrets into armored PGP messages addressed to every key in
the session keyring, and back.
"""

from pathlib import Path
from typing import Self

import structlog

from gpass.crypto.keyring import Keyring, KeyringEntry
from gpass.crypto.passphrase import PassphraseProvider, TerminalPassphraseProvider
from gpass.crypto.pgpy_backend import PgpyBackend
from gpass.crypto.protocol import PGPBackend, PrivateKey
from gpass.crypto.secure_bytes import SecureBytes
from gpass.exceptions import (
    AlreadyEncryptedError,
    DecryptionError,
    EncryptionError,
    InvalidArmorError,
    KeyDecryptFailedError,
    NotArmoredError,
    NotEncryptedError,
    NotPrivateKeyError,
    WrongMessageTypeError,
)
from gpass.models.message import Message
from gpass.secret_file import write_secret

logger = structlog.get_logger(__name__)

PRIVATE_KEY_ARMOR = "PGP PRIVATE KEY BLOCK"
MESSAGE_ARMOR = "PGP MESSAGE"


class CryptoEngine:
    """
    Encrypt/decrypt session owning a keyring.

    The keyring lives as long as the engine; ``close()`` scrubs retained
    passphrases.

    Example:
        with CryptoEngine() as engine:
            engine.build_keyring(key_bytes)
            armored = engine.encrypt(Message.plaintext(b"hunter2"))
            engine.write_to_file(path, armored)
    """

    def __init__(
        self,
        keyring: Keyring | None = None,
        pgp_backend: PGPBackend | None = None,
        passphrase_provider: PassphraseProvider | None = None,
        *,
        max_attempts: int = 3,
        cache_passphrases: bool = True,
    ) -> None:
        """
        Args:
            keyring: Session keyring. A new, empty one by default.
            pgp_backend: PGP backend for crypto operations. Defaults to PgpyBackend.
            passphrase_provider: Where passphrases come from. Defaults to the terminal.
            max_attempts: Passphrase attempts per key when building the keyring.
            cache_passphrases: Keep verified passphrases for the session instead of
                prompting again on decrypt.
        """
        if max_attempts <= 0:
            msg = "max_attempts must be positive"
            raise ValueError(msg)
        self._keyring = keyring if keyring is not None else Keyring()
        self._pgp = pgp_backend if pgp_backend is not None else PgpyBackend()
        self._passphrases = passphrase_provider or TerminalPassphraseProvider()
        self._max_attempts = max_attempts
        self._cache_passphrases = cache_passphrases

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    @property
    def keyring(self) -> Keyring:
        return self._keyring

    def build_keyring(
        self,
        private_key: bytes,
        passphrase_provider: PassphraseProvider | None = None,
    ) -> KeyringEntry:
        """
        Load an armored private key into the session keyring.

        Args:
            private_key: ASCII-armored private key block.
            passphrase_provider: Overrides the engine's provider for this key.

        Returns:
            The keyring entry that was added, or the existing entry when the
            same key is already loaded.

        Raises:
            NotArmoredError: If the input is not ASCII-armored.
            NotPrivateKeyError: If the armored block is not a private key.
            KeyParseError: If the key cannot be read.
            KeyDecryptFailedError: If no passphrase unlocked the key.
        """
        armor_type = self._pgp.armor_type(private_key)
        if armor_type is None:
            msg = "Not an armor encoded PGP private key"
            raise NotArmoredError(msg)
        if armor_type != PRIVATE_KEY_ARMOR:
            msg = "Not an OpenPGP private key"
            raise NotPrivateKeyError(msg, armor_type=armor_type)

        key = self._pgp.load_private_key(private_key.decode("ascii"))
        existing = self._keyring.get(key.key_id)
        if existing is not None:
            logger.debug("Private key already loaded", key_id=key.key_id)
            return existing

        passphrase = self._unlock(key, passphrase_provider or self._passphrases)

        if passphrase is not None and not self._cache_passphrases:
            passphrase.clear()
            passphrase = None

        entry = self._keyring.add(key, passphrase)
        logger.debug("Unlocked private key", key_id=key.key_id, fingerprint=key.fingerprint)
        return entry

    def encrypt(self, message: Message) -> Message:
        """
        Encrypt a plaintext message to every key in the keyring.

        Raises:
            AlreadyEncryptedError: If the message is already encrypted.
            EncryptionError: If no keyring is loaded or encryption fails.
        """
        if message.encrypted:
            msg = "The message is encrypted already"
            raise AlreadyEncryptedError(msg)
        if not self._keyring:
            msg = "Unable to load keyring for encryption: no keys loaded"
            raise EncryptionError(msg)

        armored = self._pgp.encrypt(message.data, self._keyring.keys)
        logger.debug("Encrypted message", recipients=len(self._keyring))
        return Message.armored(armored)

    def decrypt(self, message: Message) -> Message:
        """
        Decrypt an armored message with the first key in the keyring that can.

        Keys are tried in keyring order. A key that fails (not a recipient,
        wrong passphrase) is skipped; the keyring itself is left untouched.

        Raises:
            NotEncryptedError: If the message is plaintext.
            InvalidArmorError: If the message is not ASCII-armored.
            WrongMessageTypeError: If the armor type is not ``PGP MESSAGE``.
            DecryptionError: If no key could decrypt the message.
        """
        if not message.encrypted:
            msg = "The message is not encrypted"
            raise NotEncryptedError(msg)

        armor_type = self._pgp.armor_type(message.data)
        if armor_type is None:
            msg = "Invalid PGP message or not armor encoded"
            raise InvalidArmorError(msg)
        if armor_type != MESSAGE_ARMOR:
            msg = "This file is not a PGP message"
            raise WrongMessageTypeError(msg, armor_type=armor_type)

        armored = message.data.decode("ascii")
        for entry in self._keyring:
            try:
                plaintext = self._decrypt_with(armored, entry)
            except DecryptionError as e:
                logger.debug("Key could not decrypt message", key_id=entry.key_id, error=str(e))
                continue
            logger.debug("Decrypted message", key_id=entry.key_id)
            return Message.plaintext(plaintext)

        msg = "Unable to decrypt the message"
        raise DecryptionError(msg, keys_tried=len(self._keyring))

    def write_to_file(self, path: Path, message: Message) -> None:
        """Persist an encrypted message. See ``gpass.secret_file.write_secret``."""
        write_secret(path, message)

    def close(self) -> None:
        """Clear the keyring and scrub retained passphrases."""
        self._keyring.clear()

    def _decrypt_with(self, armored: str, entry: KeyringEntry) -> bytes:
        if entry.passphrase is not None or not entry.key.is_protected:
            return self._pgp.decrypt(armored, entry.key, entry.passphrase)

        passphrase = self._passphrases.provide_passphrase([entry.key])
        if passphrase is None:
            msg = "No passphrase provided"
            raise DecryptionError(msg, key_id=entry.key_id)
        with passphrase:
            return self._pgp.decrypt(armored, entry.key, passphrase)

    def _unlock(self, key: PrivateKey, provider: PassphraseProvider) -> SecureBytes | None:
        if not key.is_protected:
            return None

        for attempt in range(1, self._max_attempts + 1):
            passphrase = provider.provide_passphrase([key])
            if passphrase is None:
                break
            if self._pgp.verify_passphrase(key, passphrase):
                return passphrase
            passphrase.clear()
            logger.warning("Wrong passphrase", key_id=key.key_id, attempt=attempt)

        msg = "Failed to decrypt main private key"
        raise KeyDecryptFailedError(msg, key_id=key.key_id)
