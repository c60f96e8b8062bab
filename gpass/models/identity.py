"""
Committing-user identity.
"""

import configparser
from dataclasses import dataclass
from pathlib import Path
from typing import Self

import git
import structlog

from gpass.exceptions import IdentityError

logger = structlog.get_logger(__name__)

_GITCONFIG = ".gitconfig"


@dataclass(frozen=True, kw_only=True)
class Identity:
    """
    Author metadata for commits. Never stored as secret material.

    Attributes:
        name: ``user.name`` from the global git config.
        email: ``user.email`` from the global git config.
        home_folder: The user's home directory.
    """

    name: str
    email: str
    home_folder: Path | None = None

    @classmethod
    def from_git_config(cls, home_folder: Path | None = None) -> Self:
        """
        Resolve the identity from ``<home>/.gitconfig``.

        Missing ``user.name``/``user.email`` entries resolve to empty strings.

        Raises:
            IdentityError: If the home folder or git config cannot be read.
        """
        try:
            home = home_folder if home_folder is not None else Path.home()
        except RuntimeError as e:
            msg = f"Unable to determine the home folder: {e}"
            raise IdentityError(msg) from e

        config_path = home / _GITCONFIG
        if not config_path.is_file():
            msg = "Git config could not be read"
            raise IdentityError(msg, path=str(config_path))

        try:
            with git.GitConfigParser(str(config_path), read_only=True) as parser:
                name = parser.get_value("user", "name", default="")
                email = parser.get_value("user", "email", default="")
        except (configparser.Error, OSError) as e:
            msg = f"Git config could not be parsed: {e}"
            raise IdentityError(msg, path=str(config_path)) from e

        logger.debug("Resolved identity", path=str(config_path))
        return cls(name=str(name), email=str(email), home_folder=home)
