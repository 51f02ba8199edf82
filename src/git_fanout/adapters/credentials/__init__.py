"""Transport credential providers for clone commands."""

from .basic import NoCredentials, UsernamePasswordCredentials
from .ssh_key import SshKeyCredentials

__all__ = [
	"NoCredentials",
	"SshKeyCredentials",
	"UsernamePasswordCredentials",
]
