"""Sender identity and group permission resolution."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

import structlog

from relaybot.config import OwnerEntry
from relaybot.messages.models import InboundEvent, Participant
from relaybot.transport.base import Transport

logger = structlog.get_logger()

ADMIN_ROLES = frozenset({"admin", "superadmin"})


@dataclass(frozen=True)
class Identity:
    sender_id: str
    sender_number: str
    bot_id: str
    push_name: str
    is_owner: bool
    is_developer: bool
    is_creator: bool
    is_self: bool
    is_bot: bool


@dataclass(frozen=True)
class GroupContext:
    group_id: str
    name: str
    participants: tuple[Participant, ...]
    admin_ids: frozenset[str]
    owner_id: str | None
    bot_is_admin: bool
    sender_is_admin: bool
    sender_is_group_owner: bool


def decode_jid(jid: str) -> str:
    """Drop the device suffix: ``"62811:4@s.whatsapp.net"`` -> ``"62811@s.whatsapp.net"``."""
    if not jid:
        return ""
    user, at, server = jid.partition("@")
    if not at:
        return jid
    return f"{user.split(':', 1)[0]}@{server}"


def jid_number(jid: str) -> str:
    return jid.split("@", 1)[0]


def owner_ids(owners: Iterable[OwnerEntry], jid_domain: str) -> frozenset[str]:
    return frozenset(f"{owner.number}@{jid_domain}" for owner in owners)


def resolve_identity(
    event: InboundEvent,
    *,
    bot_id: str,
    owners: Sequence[OwnerEntry],
    jid_domain: str,
) -> Identity:
    """Derive who sent ``event`` and how much they are trusted.

    ``is_creator`` (bot itself or a configured owner) is the only flag that
    unlocks privileged paths; the others are informational.
    """
    bot_id = decode_jid(bot_id)
    if event.key.from_me:
        sender_id = f"{jid_number(bot_id)}@{jid_domain}" if bot_id else ""
    else:
        sender_id = decode_jid(event.key.participant or event.key.remote_jid)
    sender_number = jid_number(sender_id)

    owner_set = owner_ids(owners, jid_domain)
    return Identity(
        sender_id=sender_id,
        sender_number=sender_number,
        bot_id=bot_id,
        push_name=event.push_name or sender_number,
        is_owner=sender_id in owner_set,
        is_developer=any(o.number == sender_number and o.is_dev for o in owners),
        is_creator=bool(sender_id) and sender_id in owner_set | {bot_id},
        is_self=bool(sender_id) and sender_id == bot_id,
        is_bot=bool(sender_number) and sender_number in bot_id,
    )


def get_group_admins(participants: Iterable[Participant]) -> frozenset[str]:
    """Ids of participants whose role is exactly ``admin`` or ``superadmin``."""
    return frozenset(p.id for p in participants if p.admin in ADMIN_ROLES)


def empty_group_context(group_id: str) -> GroupContext:
    return GroupContext(
        group_id=group_id,
        name="",
        participants=(),
        admin_ids=frozenset(),
        owner_id=None,
        bot_is_admin=False,
        sender_is_admin=False,
        sender_is_group_owner=False,
    )


async def resolve_group_context(
    event: InboundEvent,
    identity: Identity,
    transport: Transport,
) -> GroupContext | None:
    """Fetch fresh group metadata for a group event.

    Returns None for direct chats. A failed fetch degrades to an empty
    context instead of raising.
    """
    if not event.is_group:
        return None

    try:
        metadata = await transport.fetch_group_metadata(event.chat)
    except Exception as e:
        logger.warning("identity.group_metadata_failed", chat=event.chat, error=str(e))
        return empty_group_context(event.chat)

    admins = get_group_admins(metadata.participants)
    sender = identity.sender_id
    if metadata.owner:
        is_group_owner = sender == decode_jid(metadata.owner)
    else:
        is_group_owner = sender in admins

    return GroupContext(
        group_id=event.chat,
        name=metadata.subject,
        participants=metadata.participants,
        admin_ids=admins,
        owner_id=metadata.owner,
        bot_is_admin=identity.bot_id in admins,
        sender_is_admin=sender in admins,
        sender_is_group_owner=is_group_owner,
    )
