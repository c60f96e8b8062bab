"""
Secret payloads moving through the crypto engine.
"""

from dataclasses import dataclass, field
from typing import Self


@dataclass(frozen=True, kw_only=True)
class Message:
    """
    A byte payload that is either plaintext or an armored PGP message.

    Instances are never mutated; encryption and decryption return new ones.

    Attributes:
        data: Payload bytes.
        encrypted: True when ``data`` is OpenPGP-armored ciphertext.
    """

    data: bytes = field(repr=False)
    encrypted: bool

    @classmethod
    def plaintext(cls, data: bytes) -> Self:
        return cls(data=bytes(data), encrypted=False)

    @classmethod
    def armored(cls, data: bytes | str) -> Self:
        if isinstance(data, str):
            data = data.encode("ascii")
        return cls(data=bytes(data), encrypted=True)

    def __len__(self) -> int:
        return len(self.data)
