"""Push authentication.

The credential scheme is picked from the remote URL: ssh-style remotes
(``git@host:path``, ``git://``, ``ssh://``) authenticate with a private
key, http(s) remotes with a username and password.
"""

from __future__ import annotations

from pathlib import Path
from typing import Union

from pydantic import BaseModel, ConfigDict

from .errors import AuthError


class BasicAuth(BaseModel):
    """Username/password (or token) credentials for http(s) remotes."""

    model_config = ConfigDict(frozen=True)

    username: str
    password: str = ""


class SSHKeyAuth(BaseModel):
    """Private-key credentials for ssh remotes."""

    model_config = ConfigDict(frozen=True)

    username: str = ""
    key_path: Path


PushAuth = Union[BasicAuth, SSHKeyAuth]


def sanitize_ssh_key_path(key: str) -> Path:
    """Expand a leading "~" in a key path to the user's home directory."""
    return Path(key).expanduser()


def select_auth(url: str, user: str, password: str, key: str) -> PushAuth:
    """Pick credentials for a remote URL.

    Args:
        url: Remote URL as configured in the repository.
        user: Username for either scheme.
        password: Password or token for http(s) remotes.
        key: Private key path for ssh remotes.

    Raises:
        AuthError: If the URL scheme is unsupported or the key is missing.
    """
    if url.startswith(("git", "ssh://")):
        key_path = sanitize_ssh_key_path(key)
        if not key or not key_path.is_file():
            raise AuthError(f"PEM file not found: {key}")
        return SSHKeyAuth(username=user, key_path=key_path)
    if url.startswith("http"):
        return BasicAuth(username=user, password=password)
    raise AuthError(f"unsupported remote URL: {url}")
