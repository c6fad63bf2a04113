"""Prefix detection and command splitting."""

from relaybot.commands.parse import ParsedCommand, match_prefix, parse_command, split_args

__all__ = ["ParsedCommand", "match_prefix", "parse_command", "split_args"]
