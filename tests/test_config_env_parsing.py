from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from relaybot.config import BotConfig


def test_owners_accept_plain_string_with_dev_flag(monkeypatch) -> None:
    monkeypatch.setenv("RELAYBOT_OWNERS", "+62811:dev, 62822")

    config = BotConfig.load()

    assert [(o.number, o.is_dev) for o in config.owners] == [("62811", True), ("62822", False)]


def test_owners_accept_json(monkeypatch) -> None:
    monkeypatch.setenv("RELAYBOT_OWNERS", '[{"number": "62833", "is_dev": true}]')

    config = BotConfig.load()

    assert config.owners[0].number == "62833"
    assert config.owners[0].is_dev is True


def test_prefixes_accept_whitespace_separated_env(monkeypatch) -> None:
    monkeypatch.setenv("RELAYBOT_PREFIX_PREFIXES", ". ! ,")
    monkeypatch.setenv("RELAYBOT_PREFIX_MULTI", "false")

    config = BotConfig.load()

    assert config.prefix.prefixes == [".", "!", ","]
    assert config.prefix.multi is False


def test_debug_can_be_disabled_from_env(monkeypatch) -> None:
    monkeypatch.setenv("RELAYBOT_DEBUG_ENABLED", "false")

    assert BotConfig.load().debug.enabled is False


def test_yaml_sections_are_loaded(monkeypatch, tmp_path: Path) -> None:
    config_file = tmp_path / "relaybot.yaml"
    config_file.write_text(
        "bot_name: Relay\n"
        "handler_timeout_s: 5\n"
        "owners:\n"
        "  - number: '62811'\n"
        "    is_dev: true\n"
        "prefix:\n"
        "  multi: false\n"
        "  main: '!'\n"
        "  list: ['!', '.']\n"
        "debug:\n"
        "  shell_sigil: '$$'\n"
        "bridge:\n"
        "  base_url: http://bridge:3000\n",
        encoding="utf-8",
    )
    monkeypatch.setenv("RELAYBOT_CONFIG_PATH", str(config_file))

    config = BotConfig.load()

    assert config.bot_name == "Relay"
    assert config.handler_timeout_s == 5.0
    assert config.owners[0].is_dev is True
    assert config.prefix.main == "!"
    assert config.prefix.prefixes == ["!", "."]
    assert config.debug.shell_sigil == "$$"
    assert config.bridge.base_url == "http://bridge:3000"


def test_negative_handler_timeout_is_rejected(monkeypatch) -> None:
    monkeypatch.setenv("RELAYBOT_HANDLER_TIMEOUT_S", "-1")

    with pytest.raises(ValidationError):
        BotConfig.load()


def test_zero_handler_timeout_is_accepted() -> None:
    assert BotConfig(handler_timeout_s=0).handler_timeout_s == 0


def test_missing_yaml_uses_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.setenv("RELAYBOT_CONFIG_PATH", str(tmp_path / "absent.yaml"))

    config = BotConfig.load()

    assert config.prefix.prefixes == [".", "!", "#", "/"]
    assert config.debug.eval_sigil == ">"
    assert config.handler_timeout_s == 60.0
