"""Concrete repository actions."""

from .command_action import CommandAction

__all__ = [
	"CommandAction",
]
