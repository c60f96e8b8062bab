"""
Passphrase storage for the lifetime of a keyring session.

Passphrases are kept in a private bytearray that is overwritten with zeros
when the session releases them.
"""

import ctypes
import hmac
from typing import Self


def _wipe(buffer: bytearray) -> None:
    size = len(buffer)
    if size:
        ctypes.memset((ctypes.c_char * size).from_buffer(buffer), 0, size)


class SecureBytes:
    """
    A passphrase that can be wiped in place.

    Equality is constant-time and a wiped value never equals anything.

    Example:
        with SecureBytes.from_string(getpass.getpass()) as passphrase:
            key.unlock(passphrase.as_text())
    """

    __slots__ = ("_buffer", "_wiped")

    __hash__ = None  # type: ignore[assignment]

    def __init__(self, data: bytes | bytearray) -> None:
        self._buffer = bytearray(data)
        self._wiped = False

    @classmethod
    def from_string(cls, text: str, encoding: str = "utf-8") -> Self:
        """Encode ``text``; the intermediate buffer is wiped."""
        encoded = bytearray(text, encoding)
        try:
            return cls(encoded)
        finally:
            _wipe(encoded)

    @property
    def is_cleared(self) -> bool:
        return self._wiped

    def clear(self) -> None:
        """Zero the buffer. Safe to call more than once."""
        if not self._wiped:
            _wipe(self._buffer)
            self._wiped = True

    def as_text(self, encoding: str = "utf-8") -> str:
        """
        Decode for libraries that only take ``str`` passphrases.

        The returned string is an ordinary, unwipeable copy.
        """
        return self._readable().decode(encoding)

    def __bytes__(self) -> bytes:
        return bytes(self._readable())

    def _readable(self) -> bytearray:
        if self._wiped:
            msg = "SecureBytes has been cleared"
            raise RuntimeError(msg)
        return self._buffer

    def __enter__(self) -> Self:
        return self

    def __exit__(self, *_: object) -> None:
        self.clear()

    def __del__(self) -> None:
        self.clear()

    def __len__(self) -> int:
        return len(self._buffer)

    def __bool__(self) -> bool:
        return not self._wiped and bool(self._buffer)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, SecureBytes):
            other_buffer = None if other._wiped else other._buffer
        elif isinstance(other, (bytes, bytearray)):
            other_buffer = other
        else:
            return NotImplemented
        if self._wiped or other_buffer is None:
            return False
        return hmac.compare_digest(self._buffer, other_buffer)

    def __repr__(self) -> str:
        state = "cleared" if self._wiped else f"{len(self._buffer)} bytes"
        return f"SecureBytes(<{state}>)"
