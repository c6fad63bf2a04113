from relaybot.identity import Identity
from relaybot.messages.models import InboundEvent, MessageKey, MessageKind
from relaybot.mode import BotMode, ModeGate


def _identity(*, creator: bool) -> Identity:
    return Identity(
        sender_id="62833@s.whatsapp.net",
        sender_number="62833",
        bot_id="62800@s.whatsapp.net",
        push_name="someone",
        is_owner=creator,
        is_developer=False,
        is_creator=creator,
        is_self=False,
        is_bot=False,
    )


def _event(from_me: bool = False) -> InboundEvent:
    return InboundEvent(
        kind=MessageKind.CONVERSATION,
        key=MessageKey(remote_jid="62833@s.whatsapp.net", from_me=from_me),
    )


def test_public_mode_serves_everyone() -> None:
    gate = ModeGate()
    assert gate.mode is BotMode.PUBLIC
    assert gate.should_respond(_identity(creator=False), _event()) is True


def test_self_mode_serves_only_creators_and_own_messages() -> None:
    gate = ModeGate(BotMode.SELF)

    assert gate.should_respond(_identity(creator=False), _event()) is False
    assert gate.should_respond(_identity(creator=True), _event()) is True
    assert gate.should_respond(_identity(creator=False), _event(from_me=True)) is True


def test_switch_reports_whether_mode_changed() -> None:
    gate = ModeGate()

    assert gate.switch(BotMode.PUBLIC) is False
    assert gate.is_public is True
    assert gate.switch(BotMode.SELF) is True
    assert gate.mode is BotMode.SELF
    assert gate.switch(BotMode.SELF) is False
