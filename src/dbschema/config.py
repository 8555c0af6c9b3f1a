"""Configuration management for dbschema."""

import configparser
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dbschema.exceptions import ConfigError
from dbschema.platforms import AbstractPlatform, get_platform
from dbschema.schema.schema import SchemaConfig
from dbschema.schema.table import DEFAULT_MAX_IDENTIFIER_LENGTH

CONFIG_FILE_NAME = ".dbschema.cfg"

PROFILE_KEYS = {
    "platform",
    "schema_name",
    "schema_path",
    "max_identifier_length",
    "explicit_foreign_key_indexes",
    "schema_assets_filter",
}

_TRUE_VALUES = {"1", "true", "yes", "on"}


def load_profile(profile: str = "DEFAULT", path: Optional[Path] = None) -> dict[str, str]:
    """Load settings from ~/.dbschema.cfg.

    Args:
        profile: Profile name to load (default: "DEFAULT")
        path: Config file to read instead of the one in the home directory

    Returns:
        Dict of the known settings found in the profile

    Raises:
        ConfigError: If the profile doesn't exist in an existing file
    """
    cfg_path = path or Path.home() / CONFIG_FILE_NAME
    if not cfg_path.exists():
        return {}

    config = configparser.ConfigParser()
    try:
        config.read(cfg_path)
    except configparser.Error as e:
        raise ConfigError(f"Cannot parse {cfg_path}: {e}") from e

    if profile not in config:
        available = [s for s in config.sections() if s != "DEFAULT"] or ["DEFAULT"]
        raise ConfigError(
            f"Profile '{profile}' not found in {cfg_path}. "
            f"Available profiles: {', '.join(available)}"
        )

    section = config[profile]
    return {key: section[key].strip() for key in PROFILE_KEYS if key in section}


def _to_bool(value: str) -> bool:
    return value.strip().lower() in _TRUE_VALUES


@dataclass
class Config:
    """Configuration for dbschema."""

    platform: str = "postgresql"
    schema_name: Optional[str] = None
    schema_path: str = "schema"
    max_identifier_length: Optional[int] = None
    explicit_foreign_key_indexes: bool = False
    schema_assets_filter: Optional[str] = None

    @classmethod
    def from_env(
        cls,
        *,
        platform: Optional[str] = None,
        schema_name: Optional[str] = None,
        schema_path: Optional[str] = None,
        max_identifier_length: Optional[int] = None,
        explicit_foreign_key_indexes: Optional[bool] = None,
        schema_assets_filter: Optional[str] = None,
        profile: Optional[str] = None,
        config_path: Optional[Path] = None,
    ) -> "Config":
        """Load configuration from ~/.dbschema.cfg, env vars, with CLI overrides.

        Priority (highest to lowest):
        1. Explicit parameters (CLI args)
        2. Environment variables (DBSCHEMA_*)
        3. ~/.dbschema.cfg profile
        4. Defaults
        """
        profile_name = profile or os.environ.get("DBSCHEMA_PROFILE", "DEFAULT")
        if profile is not None:
            profile_cfg = load_profile(profile_name, config_path)
        else:
            try:
                profile_cfg = load_profile(profile_name, config_path)
            except ConfigError:
                profile_cfg = {}

        def resolve(explicit, env_key, cfg_key):
            if explicit is not None:
                return explicit
            env_val = os.environ.get(env_key)
            if env_val is not None:
                return env_val
            return profile_cfg.get(cfg_key)

        max_length = resolve(
            max_identifier_length, "DBSCHEMA_MAX_IDENTIFIER_LENGTH", "max_identifier_length"
        )
        if max_length is not None:
            try:
                max_length = int(max_length)
            except ValueError as e:
                raise ConfigError(
                    f"max_identifier_length must be an integer, got '{max_length}'"
                ) from e

        explicit_indexes = resolve(
            explicit_foreign_key_indexes,
            "DBSCHEMA_EXPLICIT_FOREIGN_KEY_INDEXES",
            "explicit_foreign_key_indexes",
        )
        if isinstance(explicit_indexes, str):
            explicit_indexes = _to_bool(explicit_indexes)

        return cls(
            platform=resolve(platform, "DBSCHEMA_PLATFORM", "platform") or "postgresql",
            schema_name=resolve(schema_name, "DBSCHEMA_SCHEMA_NAME", "schema_name"),
            schema_path=resolve(schema_path, "DBSCHEMA_SCHEMA_PATH", "schema_path")
            or "schema",
            max_identifier_length=max_length,
            explicit_foreign_key_indexes=bool(explicit_indexes),
            schema_assets_filter=resolve(
                schema_assets_filter, "DBSCHEMA_SCHEMA_ASSETS_FILTER", "schema_assets_filter"
            ),
        )

    def get_platform(self) -> AbstractPlatform:
        """Platform instance named by this config.

        Raises:
            ConfigError: If the platform name is unknown.
        """
        return get_platform(self.platform)

    def to_schema_config(self) -> SchemaConfig:
        """SchemaConfig for schemas built under this configuration."""
        max_length = self.max_identifier_length
        if max_length is None:
            max_length = self.get_platform().get_max_identifier_length()
        return SchemaConfig(
            name=self.schema_name,
            max_identifier_length=max_length or DEFAULT_MAX_IDENTIFIER_LENGTH,
            explicit_foreign_key_indexes=self.explicit_foreign_key_indexes,
        )
