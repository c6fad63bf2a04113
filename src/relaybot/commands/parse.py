"""Command parsing utilities."""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass

from relaybot.config import PrefixConfig


@dataclass(frozen=True)
class ParsedCommand:
    prefix: str
    is_command: bool
    command: str
    args: tuple[str, ...]
    text: str


def match_prefix(body: str, prefixes: Sequence[str]) -> str | None:
    """Return the first prefix in declared order that starts ``body``.

    First match wins, not longest: with ``["!", "!!"]`` the body ``"!!x"``
    matches ``"!"``.
    """
    for prefix in prefixes:
        if body.startswith(prefix):
            return prefix
    return None


def _command_name(body: str, prefix: str) -> str:
    tokens = body[len(prefix):].strip().split(maxsplit=1)
    return tokens[0].lower() if tokens else ""


def split_args(body: str) -> tuple[str, ...]:
    """Whitespace tokens of the whole body minus the first (prefix+command) one."""
    return tuple(body.strip().split()[1:])


def parse_command(body: str, config: PrefixConfig) -> ParsedCommand:
    """Parse a normalized message body into a command invocation.

    Args:
        body: The normalized message body.
        config: Prefix configuration (single or multi mode).

    Returns:
        A ParsedCommand. ``is_command`` is False and ``command`` empty when
        no prefix matched or nothing follows the prefix.
    """
    body = body or ""
    if config.multi:
        matched = match_prefix(body, config.prefixes)
    else:
        matched = config.main if body.startswith(config.main) else None

    command = _command_name(body, matched) if matched is not None else ""
    args = split_args(body)
    return ParsedCommand(
        prefix=matched if matched is not None else config.main,
        is_command=bool(command),
        command=command,
        args=args,
        text=" ".join(args),
    )
