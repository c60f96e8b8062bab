"""
Passphrase acquisition.

Providers are asked once per candidate key; returning None means no further
passphrases are available.
"""

import getpass
import warnings
from collections.abc import Callable, Sequence
from typing import Protocol, runtime_checkable

import structlog

from gpass.crypto.protocol import PrivateKey
from gpass.crypto.secure_bytes import SecureBytes

logger = structlog.get_logger(__name__)

_PROMPT = "Enter passphrase: "


@runtime_checkable
class PassphraseProvider(Protocol):
    def provide_passphrase(self, candidate_keys: Sequence[PrivateKey]) -> SecureBytes | None:
        """
        Return a passphrase to try on ``candidate_keys``, or None when exhausted.
        """
        ...


class TerminalPassphraseProvider:
    """
    Reads passphrases from the controlling terminal with echo disabled.

    Without a terminal the provider reports exhaustion instead of reading
    piped input.

    Args:
        prompt: Prompt shown before reading.
        show_key_id: Prefix the prompt with the candidate key ID.
    """

    def __init__(self, prompt: str = _PROMPT, *, show_key_id: bool = True) -> None:
        self._prompt = prompt
        self._show_key_id = show_key_id

    def provide_passphrase(self, candidate_keys: Sequence[PrivateKey]) -> SecureBytes | None:
        prompt = self._prompt
        if self._show_key_id and candidate_keys:
            prompt = f"[{candidate_keys[0].key_id}] {prompt}"
        with warnings.catch_warnings():
            # getpass falls back to plain stdin without a terminal; refuse that
            warnings.simplefilter("error", getpass.GetPassWarning)
            try:
                return SecureBytes.from_string(getpass.getpass(prompt))
            except getpass.GetPassWarning:
                logger.warning("No terminal available for passphrase input")
                return None
            except EOFError:
                return None


class CallbackPassphraseProvider:
    """Adapts a plain callable into a PassphraseProvider."""

    def __init__(
        self, callback: Callable[[Sequence[PrivateKey]], bytes | str | SecureBytes | None]
    ) -> None:
        self._callback = callback

    def provide_passphrase(self, candidate_keys: Sequence[PrivateKey]) -> SecureBytes | None:
        value = self._callback(candidate_keys)
        if value is None or isinstance(value, SecureBytes):
            return value
        if isinstance(value, str):
            return SecureBytes.from_string(value)
        return SecureBytes(value)
