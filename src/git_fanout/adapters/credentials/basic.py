from __future__ import annotations
"""No-op and username/password credential providers."""

import base64
import logging

from git_fanout.domain.entities import CloneCommand
from git_fanout.domain.errors import CredentialError
from git_fanout.domain.ports import GitCredentials


LOGGER = logging.getLogger(__name__)


class NoCredentials(GitCredentials):
    """Leave the clone command untouched (public repositories, ambient git auth)."""

    def attach(self, command: CloneCommand) -> None:
        return None


class UsernamePasswordCredentials(GitCredentials):
    """HTTP basic authentication for HTTPS remotes.

    Code-hosting access tokens are passed as the username with an empty
    password. The header is scoped to the single clone through git
    configuration, never written into the remote URL. Remotes using other
    transports (SSH, local paths, `file://`) are left untouched.
    """

    def __init__(self, username: str, password: str = "") -> None:
        self._username = username
        self._password = password

    @classmethod
    def from_access_token(cls, token: str) -> UsernamePasswordCredentials:
        return cls(token, "")

    def attach(self, command: CloneCommand) -> None:
        if not self._username:
            raise CredentialError("Username/password credentials require a non-empty username")
        if not command.uri.lower().startswith(("https://", "http://")):
            LOGGER.debug(
                "basic credentials skipped for non-http remote",
                extra={"event": "credentials.basic.skipped", "clone_url": command.uri},
            )
            return

        raw = f"{self._username}:{self._password}".encode("utf-8")
        encoded = base64.b64encode(raw).decode("ascii")
        command.config["http.extraHeader"] = f"Authorization: Basic {encoded}"
