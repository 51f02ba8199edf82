from __future__ import annotations
"""SSH private-key identity for SSH remotes."""

import logging
import re
import shlex
from pathlib import Path

from git_fanout.domain.entities import CloneCommand
from git_fanout.domain.errors import CredentialError
from git_fanout.domain.ports import GitCredentials


_SCP_LIKE_PATTERN = re.compile(r"^(?:[\w.\-]+@)?[\w.\-]+:(?!//)")

LOGGER = logging.getLogger(__name__)


def default_private_key() -> Path:
    return Path.home() / ".ssh" / "id_rsa"


class SshKeyCredentials(GitCredentials):
    """Clone through `ssh -i <private_key>`.

    Host-key verification stays on unless `disable_host_key_checking` is set.
    Turning it off accepts any host key, including one presented by an
    attacker on first contact, and records nothing in `known_hosts`; only
    opt in for throwaway hosts or when keys are pinned elsewhere.

    Encrypted keys must be loaded into an `ssh-agent`; git cannot answer a
    passphrase prompt non-interactively.
    """

    def __init__(
        self,
        private_key: Path | None = None,
        *,
        disable_host_key_checking: bool = False,
        ssh_executable: str = "ssh",
    ) -> None:
        self._private_key = (private_key or default_private_key()).expanduser()
        self._disable_host_key_checking = disable_host_key_checking
        self._ssh_executable = ssh_executable

    @property
    def private_key(self) -> Path:
        return self._private_key

    def attach(self, command: CloneCommand) -> None:
        if not _is_ssh_uri(command.uri):
            raise CredentialError(
                f"Invalid git transport for SSH key credentials: {command.uri}"
            )
        if not self._private_key.is_file():
            raise CredentialError(f"SSH private key not found: {self._private_key}")

        parts = [
            self._ssh_executable,
            "-i",
            str(self._private_key.resolve()),
            "-o",
            "IdentitiesOnly=yes",
            "-o",
            "BatchMode=yes",
        ]
        if self._disable_host_key_checking:
            LOGGER.warning(
                "ssh host key checking disabled",
                extra={"event": "credentials.ssh.insecure", "clone_url": command.uri},
            )
            parts.extend(["-o", "StrictHostKeyChecking=no", "-o", "UserKnownHostsFile=/dev/null"])

        command.env["GIT_SSH_COMMAND"] = " ".join(shlex.quote(part) for part in parts)


def _is_ssh_uri(uri: str) -> bool:
    lowered = uri.lower()
    if lowered.startswith(("ssh://", "git+ssh://", "ssh+git://")):
        return True
    return bool(_SCP_LIKE_PATTERN.match(uri))
