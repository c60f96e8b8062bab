"""
Cryptographic operations for gpass.

This module provides:
- The CryptoEngine session (keyring build, encrypt, decrypt)
- PGP backend protocol and its pgpy implementation
- Passphrase providers
- Secure memory handling
"""

from gpass.crypto.engine import MESSAGE_ARMOR, PRIVATE_KEY_ARMOR, CryptoEngine
from gpass.crypto.keyring import Keyring, KeyringEntry
from gpass.crypto.passphrase import (
    CallbackPassphraseProvider,
    PassphraseProvider,
    TerminalPassphraseProvider,
)
from gpass.crypto.pgpy_backend import PgpyBackend, PgpyPrivateKey
from gpass.crypto.protocol import PGPBackend, PrivateKey
from gpass.crypto.secure_bytes import SecureBytes

__all__ = [
    "CryptoEngine",
    "MESSAGE_ARMOR",
    "PRIVATE_KEY_ARMOR",
    "Keyring",
    "KeyringEntry",
    "PassphraseProvider",
    "TerminalPassphraseProvider",
    "CallbackPassphraseProvider",
    "PGPBackend",
    "PrivateKey",
    "PgpyBackend",
    "PgpyPrivateKey",
    "SecureBytes",
]
