"""relaybot configuration, loaded from relaybot.yaml and the environment."""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Annotated, Any

import yaml
from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


def _load_yaml_config() -> dict[str, Any]:
    """Load relaybot.yaml from RELAYBOT_CONFIG_PATH or the working directory."""
    config_path = os.getenv("RELAYBOT_CONFIG_PATH")
    search_paths = [Path(config_path)] if config_path else [Path("relaybot.yaml")]
    for path in search_paths:
        if path.exists():
            with open(path) as f:
                return yaml.safe_load(f) or {}
    return {}


def _split_list(value: Any) -> list[str]:
    """Accept a JSON list string, a comma separated string or a real list."""
    if value is None:
        return []
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return []
        if text.startswith("["):
            try:
                parsed = json.loads(text)
            except ValueError:
                parsed = None
            if isinstance(parsed, list):
                return [str(item).strip() for item in parsed if str(item).strip()]
        return [item.strip() for item in text.split(",") if item.strip()]
    if isinstance(value, (list, tuple, set)):
        return [str(item).strip() for item in value if str(item).strip()]
    return [str(value).strip()] if str(value).strip() else []


class OwnerEntry(BaseModel):
    """A configured bot owner, identified by phone number."""

    number: str
    is_dev: bool = False

    @field_validator("number", mode="before")
    @classmethod
    def _normalize_number(cls, value: Any) -> str:
        return str(value).strip().lstrip("+")


class PrefixConfig(BaseSettings):
    """Command prefix configuration."""

    multi: bool = Field(default=True, description="Accept any prefix from `prefixes`")
    main: str = Field(default=".", description="Prefix used in single mode")
    prefixes: Annotated[list[str], NoDecode] = Field(default_factory=lambda: [".", "!", "#", "/"])

    @field_validator("prefixes", mode="before")
    @classmethod
    def _parse_list(cls, value: Any) -> list[str]:
        # Prefixes are literal; a JSON list keeps "," usable as a prefix.
        if isinstance(value, str) and not value.strip().startswith("["):
            return [item for item in value.split() if item]
        return _split_list(value)

    model_config = SettingsConfigDict(env_prefix="RELAYBOT_PREFIX_")


class DebugConfig(BaseSettings):
    """Privileged debug capability (expression evaluation and shell access).

    Anything enabled here runs arbitrary code for a verified creator. Turn it
    off on deployments that do not need it.
    """

    enabled: bool = True
    eval_sigil: str = Field(default=">", description="Evaluate an expression or statements")
    return_sigil: str = Field(default="=>", description="Evaluate an expression, reply as JSON")
    shell_sigil: str = Field(default="$", description="Run a shell command")
    shell_timeout_s: float = Field(default=30.0, gt=0)
    max_output_chars: int = Field(default=4000, ge=200)

    model_config = SettingsConfigDict(env_prefix="RELAYBOT_DEBUG_")


class BridgeConfig(BaseSettings):
    """HTTP bridge transport configuration."""

    base_url: str = Field(default="http://127.0.0.1:3000", description="Bridge API base URL")
    api_key: str | None = None
    self_id: str | None = Field(default=None, description="Skip /me lookup when set")
    timeout_s: float = Field(default=15.0, gt=0)

    model_config = SettingsConfigDict(env_prefix="RELAYBOT_BRIDGE_")


class BotConfig(BaseSettings):
    """Root relaybot configuration."""

    # Identity
    bot_name: str = Field(default="relaybot")
    owner_name: str = Field(default="owner")
    owners: Annotated[list[OwnerEntry], NoDecode] = Field(default_factory=list)
    jid_domain: str = Field(default="s.whatsapp.net")

    # Time helpers exposed to plugins
    timezone: str = Field(default="Asia/Jakarta")
    time_format: str = Field(default="%H:%M:%S")
    date_format: str = Field(default="%d/%m/%Y")
    datetime_format: str = Field(default="%d/%m/%Y %H:%M:%S")

    # Dispatch
    plugins_dir: str = Field(default="plugins")
    handler_timeout_s: float | None = Field(
        default=60.0,
        ge=0,
        description="Upper bound for one plugin handler run. None or 0 = unbounded",
    )

    # Server
    host: str = Field(default="127.0.0.1")
    port: int = Field(default=8080, ge=1, le=65535)
    api_key: str = Field(default="", description="API key for the HTTP ingress. Empty = no auth")

    # Sub-configs
    prefix: PrefixConfig = Field(default_factory=PrefixConfig)
    debug: DebugConfig = Field(default_factory=DebugConfig)
    bridge: BridgeConfig = Field(default_factory=BridgeConfig)

    # Logging
    log_level: str = Field(default="INFO")
    log_format: str = Field(default="json", description="'json' or 'console'")

    model_config = SettingsConfigDict(
        env_prefix="RELAYBOT_",
        env_nested_delimiter="__",
    )

    @field_validator("owners", mode="before")
    @classmethod
    def _parse_owners(cls, value: Any) -> Any:
        """Accept `"628111:dev,628222"` as well as a list of mappings."""
        if isinstance(value, str) and not value.strip().startswith("["):
            owners = []
            for item in _split_list(value):
                number, _, flag = item.partition(":")
                owners.append({"number": number, "is_dev": flag.strip().lower() == "dev"})
            return owners
        if isinstance(value, str):
            return json.loads(value)
        return value

    @classmethod
    def load(cls) -> BotConfig:
        """Load config from YAML + env vars."""
        yaml_cfg = _load_yaml_config()

        prefix_data = yaml_cfg.pop("prefix", {})
        debug_data = yaml_cfg.pop("debug", {})
        bridge_data = yaml_cfg.pop("bridge", {})

        # Only pass YAML sub-configs if they have data;
        # otherwise let pydantic-settings pick up env vars
        kwargs: dict[str, Any] = {**yaml_cfg}
        if "list" in prefix_data:
            prefix_data["prefixes"] = prefix_data.pop("list")
        if prefix_data:
            kwargs["prefix"] = PrefixConfig(**prefix_data)
        if debug_data:
            kwargs["debug"] = DebugConfig(**debug_data)
        if bridge_data:
            kwargs["bridge"] = BridgeConfig(**bridge_data)

        return cls(**kwargs)


# Singleton
_config: BotConfig | None = None


def get_config() -> BotConfig:
    """Get or create the global config."""
    global _config
    if _config is None:
        _config = BotConfig.load()
    return _config
