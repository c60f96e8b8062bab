"""
gpass stores OpenPGP-encrypted secrets in a git repository.

Each secret is its own branch holding a single armored file; preserved
versions are tags that can be restored as branches.

Set up a repository and private key once:

\b
    $ gpass init ~/secrets --key ~/.gnupg/private.asc

Store, read and version a secret:

\b
    $ gpass new db-password password.txt
    $ gpass show db-password
    $ gpass tag db-password db-password-2024
    $ gpass restore db-password-2024
"""

import functools
import logging
import sys
from collections.abc import Callable
from pathlib import Path
from typing import Any

import click
import structlog

from gpass import __version__
from gpass.config import GpassConfig, default_config_path, load_config, save_config
from gpass.crypto.engine import CryptoEngine
from gpass.exceptions import GpassError
from gpass.models.identity import Identity
from gpass.repo.repository import Repository
from gpass.secret_file import load_key_file
from gpass.vault import SecretVault

logger = structlog.get_logger(__name__)


class PathType(click.Path):
    def convert(self, value: Any, param: Any, ctx: Any) -> Path:
        return Path(super().convert(value, param, ctx))


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    )


def handle_errors(func: Callable[..., Any]) -> Callable[..., Any]:
    """Present gpass errors as one-line click errors."""

    @functools.wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except GpassError as e:
            raise click.ClickException(str(e)) from e

    return wrapper


def open_vault(ctx: click.Context) -> SecretVault:
    config = load_config(ctx.obj["config_path"])
    vault = SecretVault.from_config(config)
    ctx.call_on_close(vault.close)
    return vault


def read_plaintext(plaintext: Path | None) -> bytes:
    if plaintext is not None:
        return plaintext.read_bytes()
    text = click.edit()
    if not text:
        raise click.ClickException("New secret is empty")
    return text.encode("utf-8")


@click.group(help=__doc__)
@click.option(
    "-c", "--config", "config_path",
    type=PathType(dir_okay=False),
    default=default_config_path,
    show_default="$XDG_CONFIG_HOME/gpass/config.json",
    help="Configuration file.")
@click.option(
    "-d", "--debug",
    default=False,
    is_flag=True,
    help="Enable debug logging.")
@click.pass_context
def main(ctx: click.Context, config_path: Path, debug: bool) -> None:
    configure_logging(debug)
    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path


@main.command()
def version() -> None:
    """Show the application version."""
    click.echo(f"gpass {__version__}")


@main.command()
@click.argument(
    "repository",
    type=PathType(file_okay=False, dir_okay=True, exists=True))
@click.option(
    "-k", "--key",
    type=PathType(dir_okay=False, exists=True),
    required=True,
    help="Path to your local private key.")
@click.pass_context
@handle_errors
def init(ctx: click.Context, repository: Path, key: Path) -> None:
    """Initialize gpass for a git repository."""
    identity = Identity.from_git_config()

    with Repository.load(repository), CryptoEngine() as engine:
        engine.build_keyring(load_key_file(key))

    config = GpassConfig.from_identity(
        identity, repository=repository.resolve(), private_key=key.resolve()
    )
    path = save_config(config, ctx.obj["config_path"])
    click.echo(f"Successfully loaded your repository and private key\nConfig file written to {path}")


@main.command()
@click.argument("name")
@click.argument("plaintext", type=PathType(dir_okay=False, exists=True), required=False)
@click.pass_context
@handle_errors
def new(ctx: click.Context, name: str, plaintext: Path | None) -> None:
    """Create a new secret from a file or from $EDITOR."""
    data = read_plaintext(plaintext)
    commit = open_vault(ctx).create_secret(name, data)
    click.echo(f"Created secret {click.style(name, fg='green')} at {commit.hexsha[:8]}")


@main.command()
@click.argument("name")
@click.pass_context
@handle_errors
def show(ctx: click.Context, name: str) -> None:
    """Print the decrypted contents of a secret."""
    click.echo(open_vault(ctx).read_secret(name), nl=False)


@main.command()
@click.argument("name")
@click.argument("plaintext", type=PathType(dir_okay=False, exists=True), required=False)
@click.pass_context
@handle_errors
def update(ctx: click.Context, name: str, plaintext: Path | None) -> None:
    """Replace the contents of a secret."""
    data = read_plaintext(plaintext)
    commit = open_vault(ctx).update_secret(name, data)
    click.echo(f"Updated secret {click.style(name, fg='green')} at {commit.hexsha[:8]}")


@main.command()
@click.argument("name")
@click.argument("version")
@click.pass_context
@handle_errors
def tag(ctx: click.Context, name: str, version: str) -> None:
    """Preserve the current state of a secret as a version."""
    open_vault(ctx).preserve_version(name, version)
    click.echo(f"Tagged {click.style(name, fg='green')} as {version}")


@main.command()
@click.argument("version")
@click.option(
    "--create/--no-create",
    default=True,
    help="Create the branch, or reset an existing one onto the version.")
@click.pass_context
@handle_errors
def restore(ctx: click.Context, version: str, create: bool) -> None:
    """Check out a preserved version as a branch of the same name."""
    open_vault(ctx).restore_version(version, create=create)
    click.echo(f"Restored {click.style(version, fg='green')}")


@main.command()
@click.option("--versions", is_flag=True, default=False, help="List versions instead.")
@click.pass_context
@handle_errors
def ls(ctx: click.Context, versions: bool) -> None:
    """List stored secrets."""
    vault = open_vault(ctx)
    for name in vault.list_versions() if versions else vault.list_secrets():
        click.echo(name)


@main.command()
@click.argument("name")
@click.pass_context
@handle_errors
def rm(ctx: click.Context, name: str) -> None:
    """Delete a secret's branch. Preserved versions are kept."""
    open_vault(ctx).remove_secret(name)
    click.echo(f"Removed {click.style(name, fg='red')}")
