"""
Configuration loading for the gateway and chat clients.
"""

import os
import logging
from typing import Dict, Any, Mapping, Optional
from dataclasses import dataclass, field
from pathlib import Path

import yaml

from .debug import debug_enabled
from .errors import GatewayConfigError

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://tool-gateway.citypost.us"
DEFAULT_CHAT_MODEL = "gpt-4o-mini"
DEFAULT_TIMEOUT = 30.0


@dataclass
class GatewayClientConfig:
    """Configuration for the tool gateway client."""
    base_url: str = DEFAULT_GATEWAY_URL
    api_key: str = ""
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class ChatClientConfig:
    """Configuration for the chat-completion client."""
    api_key: str = ""
    model: str = DEFAULT_CHAT_MODEL
    timeout: float = DEFAULT_TIMEOUT


@dataclass
class ClientsConfig:
    """Complete client configuration."""
    gateway: GatewayClientConfig = field(default_factory=GatewayClientConfig)
    chat: ChatClientConfig = field(default_factory=ChatClientConfig)
    debug: bool = False

    def validate(self, require_chat: bool = True) -> None:
        """
        Check that the required credentials and endpoints are present.

        Args:
            require_chat: Whether the chat API key is mandatory

        Raises:
            GatewayConfigError: Naming every missing setting
        """
        missing = []
        if not self.gateway.base_url.strip():
            missing.append("TOOL_GATEWAY_BASE_URL")
        if not self.gateway.api_key.strip():
            missing.append("TOOL_GATEWAY_API_KEY")
        if require_chat and not self.chat.api_key.strip():
            missing.append("OPENAI_API_KEY")
        if missing:
            raise GatewayConfigError(f"missing {', '.join(missing)}")


def _getenv(env: Mapping[str, str], key: str, default: str = "") -> str:
    value = env.get(key) or ""
    if not value.strip():
        return default
    return value.strip()


def _parse_timeout(value: Any, default: float = DEFAULT_TIMEOUT) -> float:
    if value is None or (isinstance(value, str) and not value.strip()):
        return default
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise GatewayConfigError(f"invalid timeout: {value!r}") from e
    if timeout <= 0:
        raise GatewayConfigError(f"timeout must be positive: {value!r}")
    return timeout


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> ClientsConfig:
    """
    Build configuration from environment variables.

    Args:
        environ: Environment mapping. Defaults to ``os.environ``.

    Returns:
        Configuration with defaults applied for blank values
    """
    env = os.environ if environ is None else environ
    timeout = _parse_timeout(_getenv(env, "HTTP_TIMEOUT_SECONDS"))

    return ClientsConfig(
        gateway=GatewayClientConfig(
            base_url=_getenv(env, "TOOL_GATEWAY_BASE_URL", DEFAULT_GATEWAY_URL),
            api_key=_getenv(env, "TOOL_GATEWAY_API_KEY"),
            timeout=timeout,
        ),
        chat=ChatClientConfig(
            api_key=_getenv(env, "OPENAI_API_KEY"),
            model=_getenv(env, "OPENAI_MODEL", DEFAULT_CHAT_MODEL),
            timeout=timeout,
        ),
        debug=debug_enabled(env),
    )


def load_config(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ClientsConfig:
    """
    Load client configuration from a YAML file.

    Args:
        config_path: Path to config file. If None, uses default location.
        environ: Environment used for ``${VAR}`` expansion and fallbacks

    Returns:
        Loaded configuration
    """
    env = os.environ if environ is None else environ

    if config_path is None:
        # Try common locations
        paths = [
            Path("config/gateway-clients.yaml"),
            Path("/etc/gateway-clients/clients.yaml"),
            Path.home() / ".config/gateway-clients/clients.yaml",
        ]
        for p in paths:
            if p.exists():
                config_path = str(p)
                break

    if config_path is None or not Path(config_path).exists():
        logger.warning("No client config file found, using environment")
        return config_from_env(env)

    try:
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise GatewayConfigError(f"Failed to load config from {config_path}: {e}") from e

    if not isinstance(data, dict):
        raise GatewayConfigError(f"Config file {config_path} must contain a mapping")

    return _parse_config(data, env)


def _expand(value: Any, env: Mapping[str, str]) -> Any:
    """Expand a whole-value ``${VAR}`` reference from the environment."""
    if isinstance(value, str) and value.startswith("${") and value.endswith("}"):
        return env.get(value[2:-1], "")
    return value


def _section_timeout(section: Mapping[str, Any], env: Mapping[str, str]) -> float:
    """Timeout from a config section; the environment is only read when it is unset."""
    value = _expand(section.get("timeout"), env)
    if value is None or (isinstance(value, str) and not value.strip()):
        return _parse_timeout(_getenv(env, "HTTP_TIMEOUT_SECONDS"))
    return _parse_timeout(value)


def _parse_config(data: Dict[str, Any], env: Mapping[str, str]) -> ClientsConfig:
    """Parse configuration dictionary, falling back to the environment."""
    gw_data = data.get("gateway") or {}
    chat_data = data.get("chat") or {}

    gateway = GatewayClientConfig(
        base_url=str(_expand(gw_data.get("base_url"), env) or _getenv(env, "TOOL_GATEWAY_BASE_URL", DEFAULT_GATEWAY_URL)).strip(),
        api_key=str(_expand(gw_data.get("api_key"), env) or _getenv(env, "TOOL_GATEWAY_API_KEY")).strip(),
        timeout=_section_timeout(gw_data, env),
    )
    chat = ChatClientConfig(
        api_key=str(_expand(chat_data.get("api_key"), env) or _getenv(env, "OPENAI_API_KEY")).strip(),
        model=str(_expand(chat_data.get("model"), env) or _getenv(env, "OPENAI_MODEL", DEFAULT_CHAT_MODEL)).strip(),
        timeout=_section_timeout(chat_data, env),
    )

    debug = data.get("debug")
    if debug is None:
        debug = debug_enabled(env)

    return ClientsConfig(gateway=gateway, chat=chat, debug=bool(debug))
