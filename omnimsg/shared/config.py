"""
Configuration Management

Provides configuration classes and environment-based configuration loading.
"""

import ipaddress
import json
import os
from dataclasses import dataclass, fields
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from .constants import (
    DEFAULT_BIND_ADDRESS,
    DEFAULT_BROADCAST_ADDRESS,
    DEFAULT_IDLE_INTERVAL_MS,
    DEFAULT_NICKNAME,
    DEFAULT_PORT,
    INPUT_AUTO,
    INPUT_MODES,
    MAX_PKT,
    RECEIVE_NONBLOCKING,
    RECEIVE_STRATEGIES,
    WAIT_SLEEP,
    WAIT_STRATEGIES,
)
from .exceptions import ConfigurationError

# ClientConfig field -> environment variable read by ClientConfig.from_env().
ENV_VARIABLES = {
    "nickname": "OMNIMSG_NICK",
    "port": "OMNIMSG_PORT",
    "broadcast_address": "OMNIMSG_BROADCAST",
    "bind_address": "OMNIMSG_BIND_ADDRESS",
    "idle_interval_ms": "OMNIMSG_IDLE_INTERVAL_MS",
    "receive_strategy": "OMNIMSG_RECEIVE_STRATEGY",
    "input_mode": "OMNIMSG_INPUT_MODE",
    "wait_strategy": "OMNIMSG_WAIT_STRATEGY",
}


@dataclass
class ClientConfig:
    """Messenger configuration settings."""

    nickname: str = DEFAULT_NICKNAME
    port: int = DEFAULT_PORT
    broadcast_address: str = DEFAULT_BROADCAST_ADDRESS
    bind_address: str = DEFAULT_BIND_ADDRESS
    idle_interval_ms: int = DEFAULT_IDLE_INTERVAL_MS
    receive_strategy: str = RECEIVE_NONBLOCKING
    input_mode: str = INPUT_AUTO
    wait_strategy: str = WAIT_SLEEP
    max_packet_size: int = MAX_PKT - 1

    @property
    def idle_interval(self) -> float:
        """Idle interval in seconds."""
        return self.idle_interval_ms / 1000.0

    @property
    def destination(self) -> tuple:
        """Broadcast destination as an address tuple."""
        return (self.broadcast_address, self.port)

    def validate(self) -> None:
        """Validate configuration values."""
        errors: List[str] = []

        if not isinstance(self.port, int) or not (1 <= self.port <= 65535):
            errors.append("port must be an integer between 1 and 65535")

        try:
            ipaddress.IPv4Address(self.broadcast_address)
        except (ipaddress.AddressValueError, ValueError):
            errors.append(f"broadcast_address must be an IPv4 address, got {self.broadcast_address!r}")

        if not isinstance(self.bind_address, str):
            errors.append("bind_address must be a string")

        if not isinstance(self.idle_interval_ms, int) or self.idle_interval_ms < 1:
            errors.append("idle_interval_ms must be a positive integer")

        if self.receive_strategy not in RECEIVE_STRATEGIES:
            errors.append(f"receive_strategy must be one of: {', '.join(RECEIVE_STRATEGIES)}")

        if self.input_mode not in INPUT_MODES:
            errors.append(f"input_mode must be one of: {', '.join(INPUT_MODES)}")

        if self.wait_strategy not in WAIT_STRATEGIES:
            errors.append(f"wait_strategy must be one of: {', '.join(WAIT_STRATEGIES)}")

        if not isinstance(self.max_packet_size, int) or self.max_packet_size < 1:
            errors.append("max_packet_size must be a positive integer")

        if errors:
            raise ConfigurationError(f"Client configuration validation failed: {'; '.join(errors)}")

    @classmethod
    def from_env(cls) -> "ClientConfig":
        """Load configuration from environment variables."""
        try:
            config = cls(
                nickname=os.getenv("OMNIMSG_NICK", cls.nickname),
                port=int(os.getenv("OMNIMSG_PORT", str(cls.port))),
                broadcast_address=os.getenv("OMNIMSG_BROADCAST", cls.broadcast_address),
                bind_address=os.getenv("OMNIMSG_BIND_ADDRESS", cls.bind_address),
                idle_interval_ms=int(
                    os.getenv("OMNIMSG_IDLE_INTERVAL_MS", str(cls.idle_interval_ms))
                ),
                receive_strategy=os.getenv("OMNIMSG_RECEIVE_STRATEGY", cls.receive_strategy),
                input_mode=os.getenv("OMNIMSG_INPUT_MODE", cls.input_mode),
                wait_strategy=os.getenv("OMNIMSG_WAIT_STRATEGY", cls.wait_strategy),
            )
            config.validate()
            return config
        except ValueError as e:
            raise ConfigurationError(f"Failed to load client configuration from environment: {e}")

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ClientConfig":
        """Create configuration from dictionary."""
        try:
            # Filter only known fields
            field_names = {f.name for f in fields(cls)}
            filtered_data = {k: v for k, v in data.items() if k in field_names}
            config = cls(**filtered_data)
            config.validate()
            return config
        except (TypeError, ValueError) as e:
            raise ConfigurationError(f"Failed to create client configuration from dictionary: {e}")


class ConfigurationLoader:
    """Configuration loader with support for multiple sources."""

    DEFAULT_CONFIG_PATHS = [
        "omnimsg.json",
        ".omnimsg.json",
        "omnimsg.yaml",
        ".omnimsg.yaml",
        "omnimsg.yml",
        ".omnimsg.yml",
    ]

    @staticmethod
    def find_default_config() -> Optional[str]:
        """Return the first default configuration file that exists."""
        for path in ConfigurationLoader.DEFAULT_CONFIG_PATHS:
            if os.path.exists(path):
                return path
        return None

    @staticmethod
    def load_from_file(config_path: Optional[Union[str, Path]] = None) -> Dict[str, Any]:
        """
        Load configuration from a JSON or YAML file.

        Args:
            config_path: Path to configuration file. If None, looks for default locations.

        Returns:
            Dictionary containing configuration values.

        Raises:
            ConfigurationError: If file cannot be loaded or parsed.
        """
        if config_path is None:
            config_path = ConfigurationLoader.find_default_config()

        if config_path is None:
            return {}

        config_path = Path(config_path)

        if not config_path.exists():
            raise ConfigurationError(f"Configuration file not found: {config_path}")

        try:
            with open(config_path, 'r', encoding='utf-8') as f:
                if config_path.suffix == '.json':
                    return json.load(f)
                elif config_path.suffix in ('.yml', '.yaml'):
                    try:
                        import yaml
                    except ImportError:
                        raise ConfigurationError("PyYAML is required for YAML configuration files. Install with: pip install PyYAML")
                    return yaml.safe_load(f) or {}
                else:
                    raise ConfigurationError(f"Unsupported configuration file format: {config_path.suffix}")
        except ConfigurationError:
            raise
        except json.JSONDecodeError as e:
            raise ConfigurationError(f"Invalid JSON in configuration file {config_path}: {e}")
        except Exception as e:
            raise ConfigurationError(f"Failed to load configuration from {config_path}: {e}")

    @staticmethod
    def load_client_config(
        config_path: Optional[Union[str, Path]] = None,
        use_env: bool = True,
        overrides: Optional[Dict[str, Any]] = None
    ) -> ClientConfig:
        """
        Load client configuration from file, environment and explicit overrides.

        Args:
            config_path: Path to configuration file.
            use_env: Whether to load from environment variables.
            overrides: Values that win over every other source (e.g. CLI flags).
                None values are ignored.

        Returns:
            ClientConfig instance.
        """
        config_data: Dict[str, Any] = {}

        # Load from file first
        file_config = ConfigurationLoader.load_from_file(config_path)
        config_data.update(file_config.get('client', {}))

        # Create base config from file data
        if config_data:
            config = ClientConfig.from_dict(config_data)
        else:
            config = ClientConfig()

        # Override with environment variables if requested
        if use_env:
            env_config = ClientConfig.from_env()
            # Any variable that is set wins over the file, even at its default value
            for field_name, env_name in ENV_VARIABLES.items():
                if os.getenv(env_name) is not None:
                    setattr(config, field_name, getattr(env_config, field_name))

        for key, value in (overrides or {}).items():
            if value is not None and hasattr(config, key):
                setattr(config, key, value)

        config.validate()
        return config

