"""
Helpers shared by the licensing management commands.
"""

import os
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from django.core.management.base import CommandError


def add_password_arguments(parser, help_text: str):
    """Add --password and --password-env options to a command parser."""
    parser.add_argument("--password", help=help_text)
    parser.add_argument(
        "--password-env",
        metavar="VAR",
        help="Read the password from this environment variable instead",
    )


def resolve_password(options) -> Optional[str]:
    """Return the password from --password-env or --password, if given."""
    env_name = options.get("password_env")
    if env_name:
        value = os.environ.get(env_name)
        if not value:
            raise CommandError(f"Environment variable {env_name} is not set")
        return value
    return options.get("password")


def read_text_file(path: str) -> str:
    """Read a UTF-8 text file or fail the command."""
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise CommandError(f"Unable to read {path}: {e}") from e


def write_text_file(path: str, content: str, force: bool = False, private: bool = False):
    """
    Write a text file, refusing to overwrite unless forced.

    Args:
        path: Destination path
        content: File content
        force: Allow replacing an existing file
        private: Restrict permissions to the owner (0600)
    """
    target = Path(path)
    if target.exists() and not force:
        raise CommandError(f"{path} already exists; use --force to overwrite it")
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(content, encoding="utf-8")
    if private:
        os.chmod(target, 0o600)


def parse_datetime_argument(value: str) -> datetime:
    """
    Parse a date (``2024-01-01``) or ISO-8601 datetime argument as UTC.

    Naive datetimes are interpreted as UTC.
    """
    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as e:
        raise CommandError(f"Invalid date or datetime: {value!r}") from e
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
