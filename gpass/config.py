"""
gpass configuration and its on-disk persistence.
"""

import json
import os
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any, Self

import structlog

from gpass.exceptions import ConfigError
from gpass.models.identity import Identity

logger = structlog.get_logger(__name__)

_APP_DIR = "gpass"
_CONFIG_FILE = "config.json"
_CONFIG_MODE = 0o600


@dataclass(frozen=True, kw_only=True)
class GpassConfig:
    """
    Attributes:
        name: Commit author name.
        email: Commit author email.
        repository: Path to the secrets git repository.
        private_key: Path to the armored private key file.
        home_folder: The user's home directory, if known.
        passphrase_attempts: Passphrase prompts per key before giving up.
        cache_passphrases: Keep verified passphrases for the session.
        secret_suffix: File extension of secret files inside each branch.
    """

    name: str
    email: str
    repository: str
    private_key: str
    home_folder: str | None = None
    passphrase_attempts: int = 3
    cache_passphrases: bool = True
    secret_suffix: str = ".asc"

    def __post_init__(self) -> None:
        if not self.repository:
            msg = "repository must not be empty"
            raise ValueError(msg)
        if not self.private_key:
            msg = "private_key must not be empty"
            raise ValueError(msg)
        if self.passphrase_attempts <= 0:
            msg = "passphrase_attempts must be positive"
            raise ValueError(msg)
        if not self.secret_suffix.startswith("."):
            msg = "secret_suffix must start with '.'"
            raise ValueError(msg)

    @property
    def identity(self) -> Identity:
        home = Path(self.home_folder) if self.home_folder else None
        return Identity(name=self.name, email=self.email, home_folder=home)

    @property
    def repository_path(self) -> Path:
        return Path(self.repository).expanduser()

    @property
    def private_key_path(self) -> Path:
        return Path(self.private_key).expanduser()

    @classmethod
    def from_identity(
        cls, identity: Identity, *, repository: Path, private_key: Path, **options: Any
    ) -> Self:
        return cls(
            name=identity.name,
            email=identity.email,
            home_folder=str(identity.home_folder) if identity.home_folder else None,
            repository=str(repository),
            private_key=str(private_key),
            **options,
        )

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        return {
            "user": {
                "name": data.pop("name"),
                "email": data.pop("email"),
                "home_folder": data.pop("home_folder"),
            },
            **data,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        data = dict(data)
        user = data.pop("user", None) or {}
        return cls(
            name=user.get("name", ""),
            email=user.get("email", ""),
            home_folder=user.get("home_folder"),
            **data,
        )


def default_config_path() -> Path:
    """``$XDG_CONFIG_HOME/gpass/config.json``, falling back to ``~/.config``."""
    base = os.environ.get("XDG_CONFIG_HOME") or str(Path.home() / ".config")
    return Path(base) / _APP_DIR / _CONFIG_FILE


def load_config(path: Path | None = None) -> GpassConfig:
    """
    Raises:
        ConfigError: If the file is missing, unreadable or invalid.
    """
    path = path or default_config_path()
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        msg = "No configuration found, run 'gpass init' first"
        raise ConfigError(msg, path=str(path)) from e
    except (OSError, json.JSONDecodeError) as e:
        msg = f"Failed to read the user config: {e}"
        raise ConfigError(msg, path=str(path)) from e

    if not isinstance(raw, dict):
        msg = "Configuration must be a JSON object"
        raise ConfigError(msg, path=str(path))
    try:
        return GpassConfig.from_dict(raw)
    except (TypeError, ValueError) as e:
        msg = f"Invalid configuration: {e}"
        raise ConfigError(msg, path=str(path)) from e


def save_config(config: GpassConfig, path: Path | None = None) -> Path:
    """
    Write the configuration as JSON, readable by the owner only.

    Raises:
        ConfigError: If the file cannot be written.
    """
    path = path or default_config_path()
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd = os.open(path, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, _CONFIG_MODE)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            json.dump(config.to_dict(), f, indent=2)
            f.write("\n")
    except OSError as e:
        msg = f"Failed to save the user config: {e}"
        raise ConfigError(msg, path=str(path)) from e

    logger.info("Configuration saved", path=str(path))
    return path
