"""
Secret file persistence.

Secret files are write-once, owner-only, and only ever hold armored ciphertext.
"""

import os
from pathlib import Path

import structlog

from gpass.exceptions import (
    EmptyMessageError,
    RefusePlaintextWriteError,
    SecretFileExistsError,
    SecretReadError,
    WriteError,
    WritePermissionError,
)
from gpass.models.message import Message

logger = structlog.get_logger(__name__)

SECRET_FILE_MODE = 0o600


def write_secret(path: Path, message: Message) -> None:
    """
    Write an encrypted message to a new file.

    Args:
        path: Target path; must not exist yet.
        message: Encrypted, non-empty message.

    Raises:
        RefusePlaintextWriteError: If the message is not encrypted.
        EmptyMessageError: If the message has no content.
        SecretFileExistsError: If ``path`` already exists.
        WritePermissionError: If the file cannot be created for lack of permission.
        WriteError: On any other I/O failure.
    """
    path = Path(path)
    if not message.encrypted:
        msg = "Not allowed to write unencrypted content to a file"
        raise RefusePlaintextWriteError(msg, path=str(path))
    if len(message) == 0:
        msg = "The message content has not been loaded"
        raise EmptyMessageError(msg, path=str(path))

    try:
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_EXCL, SECRET_FILE_MODE)
    except FileExistsError as e:
        msg = "File already exists"
        raise SecretFileExistsError(msg, path=str(path)) from e
    except PermissionError as e:
        msg = f"Unable to create the file: {e}"
        raise WritePermissionError(msg, path=str(path)) from e
    except OSError as e:
        msg = f"Unable to create the file: {e}"
        raise WriteError(msg, path=str(path)) from e

    try:
        with os.fdopen(fd, "wb") as f:
            os.fchmod(f.fileno(), SECRET_FILE_MODE)
            f.write(message.data)
    except PermissionError as e:
        msg = f"Unable to change permissions on file to 0600: {e}"
        raise WritePermissionError(msg, path=str(path)) from e
    except OSError as e:
        msg = f"Unable to write to file: {e}"
        raise WriteError(msg, path=str(path)) from e

    logger.info("Secret file written", path=str(path), size=len(message))


def read_secret(path: Path) -> Message:
    """
    Read an armored secret file.

    Raises:
        SecretReadError: If the file cannot be read.
    """
    try:
        data = Path(path).read_bytes()
    except OSError as e:
        msg = f"Unable to read the secret file: {e}"
        raise SecretReadError(msg, path=str(path)) from e
    return Message.armored(data)


def load_key_file(path: Path) -> bytes:
    """
    Read a private key file.

    Raises:
        SecretReadError: If the file cannot be read.
    """
    try:
        return Path(path).expanduser().read_bytes()
    except OSError as e:
        msg = f"Unable to read the key file: {e}"
        raise SecretReadError(msg, path=str(path)) from e
