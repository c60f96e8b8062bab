import base64
from collections.abc import Callable, Iterator, Sequence
from pathlib import Path

import git
import pgpy
import pytest
from pgpy.constants import (
    CompressionAlgorithm,
    HashAlgorithm,
    KeyFlags,
    PubKeyAlgorithm,
    SymmetricKeyAlgorithm,
)

from gpass.crypto.protocol import PrivateKey
from gpass.crypto.secure_bytes import SecureBytes
from gpass.models.identity import Identity

ALPHA_PASSPHRASE = "alpha-passphrase"
BETA_PASSPHRASE = "beta-passphrase"


def create_test_key(name: str, passphrase: str | None = None) -> pgpy.PGPKey:
    key = pgpy.PGPKey.new(PubKeyAlgorithm.RSAEncryptOrSign, 2048)
    uid = pgpy.PGPUID.new(name, comment="test", email=f"{name.lower()}@test.com")
    key.add_uid(
        uid,
        usage={KeyFlags.Sign, KeyFlags.EncryptCommunications, KeyFlags.EncryptStorage},
        hashes=[HashAlgorithm.SHA256],
        ciphers=[SymmetricKeyAlgorithm.AES256],
        compression=[CompressionAlgorithm.Uncompressed],
    )
    if passphrase is not None:
        key.protect(passphrase, SymmetricKeyAlgorithm.AES256, HashAlgorithm.SHA256)
    return key


def armor_block(kind: str, body: bytes) -> bytes:
    """ASCII-armor raw bytes under a ``PGP <kind>`` header, with a valid CRC24 line."""
    crc = 0xB704CE
    for byte in body:
        crc ^= byte << 16
        for _ in range(8):
            crc <<= 1
            if crc & 0x1000000:
                crc ^= 0x1864CFB
    checksum = base64.b64encode((crc & 0xFFFFFF).to_bytes(3, "big")).decode()
    lines = [
        f"-----BEGIN PGP {kind}-----",
        "",
        base64.b64encode(body).decode(),
        f"={checksum}",
        f"-----END PGP {kind}-----",
        "",
    ]
    return "\n".join(lines).encode("ascii")


class ScriptedPassphraseProvider:
    """Hands out queued passphrases, then reports exhaustion."""

    def __init__(self, *passphrases: str) -> None:
        self._queue = list(passphrases)
        self.calls: list[list[str]] = []

    def provide_passphrase(self, candidate_keys: Sequence[PrivateKey]) -> SecureBytes | None:
        self.calls.append([key.key_id for key in candidate_keys])
        if not self._queue:
            return None
        return SecureBytes.from_string(self._queue.pop(0))


@pytest.fixture(scope="session")
def alpha_key() -> pgpy.PGPKey:
    return create_test_key("Alpha", ALPHA_PASSPHRASE)


@pytest.fixture(scope="session")
def beta_key() -> pgpy.PGPKey:
    return create_test_key("Beta", BETA_PASSPHRASE)


@pytest.fixture(scope="session")
def plain_key() -> pgpy.PGPKey:
    return create_test_key("Plain")


@pytest.fixture
def alpha_armored(alpha_key: pgpy.PGPKey) -> bytes:
    return str(alpha_key).encode("ascii")


@pytest.fixture
def beta_armored(beta_key: pgpy.PGPKey) -> bytes:
    return str(beta_key).encode("ascii")


@pytest.fixture
def plain_armored(plain_key: pgpy.PGPKey) -> bytes:
    return str(plain_key).encode("ascii")


@pytest.fixture
def make_provider() -> Callable[..., ScriptedPassphraseProvider]:
    return ScriptedPassphraseProvider


@pytest.fixture
def identity(tmp_path: Path) -> Identity:
    return Identity(name="Test User", email="test@test.com", home_folder=tmp_path)


@pytest.fixture
def git_repo(tmp_path: Path) -> Iterator[git.Repo]:
    """A repository on ``main`` with one commit."""
    path = tmp_path / "secrets"
    repo = git.Repo.init(path, mkdir=True)
    with repo.config_writer() as writer:
        writer.set_value("user", "name", "Test User")
        writer.set_value("user", "email", "test@test.com")
    (path / "README").write_text("secrets\n")
    repo.index.add(["README"])
    actor = git.Actor("Test User", "test@test.com")
    repo.index.commit("initial commit", author=actor, committer=actor)
    repo.git.branch("-M", "main")
    yield repo
    repo.close()


@pytest.fixture
def alpha_passphrase() -> str:
    return ALPHA_PASSPHRASE


@pytest.fixture
def beta_passphrase() -> str:
    return BETA_PASSPHRASE


@pytest.fixture
def make_armor() -> Callable[[str, bytes], bytes]:
    return armor_block
