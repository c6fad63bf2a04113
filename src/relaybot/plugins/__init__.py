"""Command plugin contract, loader and registry."""

from relaybot.plugins.base import CommandEntry, CommandPlugin
from relaybot.plugins.loader import load_plugins
from relaybot.plugins.registry import CommandRegistry

__all__ = ["CommandEntry", "CommandPlugin", "CommandRegistry", "load_plugins"]
