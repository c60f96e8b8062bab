"""
OpenPGP operations backed by pgpy.

pgpy errors never escape this module; they are re-raised as gpass crypto errors.
"""

from collections.abc import Sequence
from dataclasses import dataclass

import pgpy
from pgpy.constants import SymmetricKeyAlgorithm
from pgpy.errors import PGPError
from pgpy.types import Armorable

from gpass.crypto.secure_bytes import SecureBytes
from gpass.exceptions import DecryptionError, EncryptionError, KeyParseError, NotPrivateKeyError

_ARMOR_PREFIX = "PGP "
_CIPHER = SymmetricKeyAlgorithm.AES256


@dataclass
class PgpyPrivateKey:
    """A loaded pgpy private key entity."""

    _key: pgpy.PGPKey

    @property
    def key_id(self) -> str:
        return str(self._key.fingerprint.keyid)

    @property
    def fingerprint(self) -> str:
        return str(self._key.fingerprint)

    @property
    def is_protected(self) -> bool:
        return bool(self._key.is_protected)

    @property
    def user_id(self) -> str | None:
        uids = self._key.userids
        return str(uids[0]) if uids else None

    @property
    def pgpy_key(self) -> pgpy.PGPKey:
        return self._key


class PgpyBackend:
    """
    Stateless pgpy adapter.

    Example:
        backend = PgpyBackend()
        key = backend.load_private_key(armored_key)
        armored = backend.encrypt(b"secret", [key])
        plaintext = backend.decrypt(armored, key, passphrase)
    """

    @staticmethod
    def armor_type(data: bytes) -> str | None:
        try:
            text = data.decode("ascii")
        except UnicodeDecodeError:
            return None
        if not Armorable.is_armor(text):
            return None
        try:
            magic = Armorable.ascii_unarmor(text)["magic"]
        except (ValueError, PGPError):
            return None
        if magic is None:
            return None
        return f"{_ARMOR_PREFIX}{magic}"

    @staticmethod
    def load_private_key(armored_key: str) -> PgpyPrivateKey:
        """
        Load a private key from ASCII-armored format.

        Args:
            armored_key: ASCII-armored private key.

        Returns:
            PgpyPrivateKey wrapper.

        Raises:
            KeyParseError: If the key cannot be parsed.
            NotPrivateKeyError: If the block only holds public material.
        """
        try:
            key, _ = pgpy.PGPKey.from_blob(armored_key)
        except (PGPError, ValueError, TypeError, IndexError, NotImplementedError) as e:
            msg = f"Unable to read armor decoded key: {e}"
            raise KeyParseError(msg) from e
        if key._key is None:
            # armor decoded but no key packet was recognised
            msg = "Unable to read armor decoded key: no key material"
            raise KeyParseError(msg)
        if key.is_public:
            msg = "Not an OpenPGP private key"
            raise NotPrivateKeyError(msg)
        return PgpyPrivateKey(_key=key)

    @staticmethod
    def verify_passphrase(private_key: PgpyPrivateKey, passphrase: SecureBytes | None) -> bool:
        """
        Check that a passphrase unlocks the key.

        pgpy unlocks the primary key and every subkey under the same passphrase,
        and wipes the unlocked material again on exit.
        """
        if not private_key.is_protected:
            return True
        if not passphrase:
            return False
        try:
            with private_key.pgpy_key.unlock(passphrase.as_text()):
                return True
        except PGPError:
            return False

    @staticmethod
    def encrypt(data: bytes, recipients: Sequence[PgpyPrivateKey]) -> str:
        """
        Encrypt data once, with one session key addressed to every recipient.

        Raises:
            EncryptionError: If there are no recipients or pgpy fails.
        """
        if not recipients:
            msg = "Unable to load keyring for encryption: no keys loaded"
            raise EncryptionError(msg)

        session_key = _CIPHER.gen_key()
        try:
            message = pgpy.PGPMessage.new(bytes(data))
            for recipient in recipients:
                message = recipient.pgpy_key.pubkey.encrypt(
                    message, cipher=_CIPHER, sessionkey=session_key
                )
            return str(message)
        except (PGPError, ValueError, TypeError, NotImplementedError) as e:
            msg = f"Encryption failed: {e}"
            raise EncryptionError(msg) from e
        finally:
            del session_key

    def decrypt(
        self,
        armored_message: str,
        private_key: PgpyPrivateKey,
        passphrase: SecureBytes | None,
    ) -> bytes:
        """
        Decrypt a PGP message with one key.

        Raises:
            DecryptionError: If the message is not encrypted to this key, the
                passphrase is wrong, or the payload is corrupt.
        """
        try:
            message = pgpy.PGPMessage.from_blob(armored_message)
        except (PGPError, ValueError, TypeError, IndexError, NotImplementedError) as e:
            msg = f"Unable to read the message: {e}"
            raise DecryptionError(msg) from e

        if not message.is_encrypted:
            msg = "The armored message carries no encrypted payload"
            raise DecryptionError(msg)

        key = private_key.pgpy_key
        try:
            if private_key.is_protected:
                if not passphrase:
                    msg = "No passphrase available for a protected key"
                    raise DecryptionError(msg, key_id=private_key.key_id)
                with key.unlock(passphrase.as_text()):
                    decrypted = key.decrypt(message)
            else:
                decrypted = key.decrypt(message)
        except (PGPError, ValueError, TypeError, NotImplementedError) as e:
            msg = f"Unable to decrypt the message: {e}"
            raise DecryptionError(msg, key_id=private_key.key_id) from e

        return self._normalize_decrypted_content(decrypted.message)

    @staticmethod
    def _normalize_decrypted_content(content: bytes | str | bytearray) -> bytes:
        if isinstance(content, (bytes, bytearray)):
            return bytes(content)
        return content.encode("utf-8")
