"""
zkvault configuration.

Loaded from a TOML file::

    [storage]
    vault_root = "vault"
    users_file = "users.json"
    download_dir = "~/Downloads/zkvault"

    [crypto]
    rsa_key_size = 2048

    [logging]
    level = "INFO"

Lookup order: explicit path, ``$ZKVAULT_CONFIG``, ``./zkvault.toml``,
built-in defaults.
"""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import toml

from zkcrypto.keys import DEFAULT_KEY_SIZE, MIN_KEY_SIZE

CONFIG_ENV_VAR = "ZKVAULT_CONFIG"
DEFAULT_CONFIG_PATH = Path("zkvault.toml")


@dataclass
class StorageConfig:
    vault_root: Path = field(default_factory=lambda: Path("vault"))
    users_file: Path = field(default_factory=lambda: Path("users.json"))
    download_dir: Optional[Path] = None  # None = ~/Downloads/<user id>

    @property
    def key_slot_file(self) -> Path:
        return self.vault_root / "public_keys.json"


@dataclass
class CryptoConfig:
    rsa_key_size: int = DEFAULT_KEY_SIZE


@dataclass
class LoggingConfig:
    level: str = "INFO"


@dataclass
class Config:
    """Complete zkvault configuration."""

    storage: StorageConfig = field(default_factory=StorageConfig)
    crypto: CryptoConfig = field(default_factory=CryptoConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Config":
        config = cls()

        storage = data.get("storage", {})
        if "vault_root" in storage:
            config.storage.vault_root = Path(storage["vault_root"]).expanduser()
        if "users_file" in storage:
            config.storage.users_file = Path(storage["users_file"]).expanduser()
        if storage.get("download_dir"):
            config.storage.download_dir = Path(storage["download_dir"]).expanduser()

        crypto = data.get("crypto", {})
        if "rsa_key_size" in crypto:
            config.crypto.rsa_key_size = int(crypto["rsa_key_size"])

        log = data.get("logging", {})
        if "level" in log:
            config.logging.level = str(log["level"]).upper()

        config.validate()
        return config

    def validate(self) -> None:
        if self.crypto.rsa_key_size < MIN_KEY_SIZE:
            raise ValueError(f"crypto.rsa_key_size must be at least {MIN_KEY_SIZE}")
        if not isinstance(logging.getLevelName(self.logging.level), int):
            raise ValueError(f"unknown logging level: {self.logging.level}")


def load_config(path: Optional[Path] = None) -> Config:
    """Load configuration, falling back to defaults when no file exists."""
    if path is None:
        env_path = os.environ.get(CONFIG_ENV_VAR)
        if env_path:
            path = Path(env_path)
        elif DEFAULT_CONFIG_PATH.exists():
            path = DEFAULT_CONFIG_PATH

    if path is None:
        return Config()

    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"config file not found: {path}")
    return Config.from_dict(toml.load(path))


def setup_logging(config: Config) -> None:
    logging.basicConfig(
        level=config.logging.level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    )
