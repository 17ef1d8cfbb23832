"""
Bridge configuration management.

This module handles loading and accessing bridge configuration from multiple
sources with a clear priority order:

    1. Environment variables (highest priority) - for containerized hosts
    2. Config file (config/bridge.ini) - for static deployments
    3. Built-in defaults (lowest priority) - sensible fallbacks

Configuration is loaded once at module import time and cached. The
BridgeConfig dataclass provides typed access to all settings.

Usage:
    from script_bridge.config import config

    print(config.chat.bystanders_range)
    print(config.debug.echo)

Environment Variable Mapping:
    BRIDGE_LOG_LEVEL      -> logging.level
    BRIDGE_CHAT_RANGE     -> chat.bystanders_range
    BRIDGE_SCRIPTS_ROOT   -> scripts.scripts_root
    BRIDGE_DEBUG_ECHO     -> debug.echo
"""

import configparser
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

# =============================================================================
# PATH CONFIGURATION
# =============================================================================

# Project root directory (contains src/, config/, scripts/)
PROJECT_ROOT = Path(__file__).parent.parent.parent

# Config file paths
CONFIG_DIR = PROJECT_ROOT / "config"
CONFIG_FILE = CONFIG_DIR / "bridge.ini"
CONFIG_EXAMPLE = CONFIG_DIR / "bridge.example.ini"


# =============================================================================
# CONFIGURATION DATACLASSES
# =============================================================================


@dataclass
class LoggingSettings:
    """Logging configuration."""

    level: str = "INFO"
    format: Literal["simple", "detailed"] = "detailed"


@dataclass
class ChatSettings:
    """Speech formatting and reach for the chat command.

    Format strings accept ``{talker}``, ``{target}`` and ``{message}``.
    """

    bystanders_range: float = 5.0
    to_target_format: str = "{talker} says to you, {message}"
    to_bystanders_format: str = "{talker} says to {target}, {message}"
    no_target_format: str = "{talker} says, {message}"


@dataclass
class ScriptSettings:
    """World-script discovery."""

    scripts_root: str = "scripts"

    @property
    def absolute_root(self) -> Path:
        """Get absolute path to the scripts directory."""
        p = Path(self.scripts_root)
        if p.is_absolute():
            return p
        return PROJECT_ROOT / p


@dataclass
class DebugSettings:
    """Script debug output."""

    echo: bool = True


@dataclass
class BridgeConfig:
    """
    Complete bridge configuration.

    Aggregates all settings sections. Access via the module-level `config`
    singleton.
    """

    logging: LoggingSettings = field(default_factory=LoggingSettings)
    chat: ChatSettings = field(default_factory=ChatSettings)
    scripts: ScriptSettings = field(default_factory=ScriptSettings)
    debug: DebugSettings = field(default_factory=DebugSettings)


# =============================================================================
# CONFIGURATION LOADING
# =============================================================================


def _parse_bool(value: str) -> bool:
    """Parse a string value to boolean."""
    return value.lower() in ("true", "yes", "1", "on", "enabled")


def _load_from_ini(parser: configparser.ConfigParser, cfg: BridgeConfig) -> None:
    """Load configuration from parsed INI file into BridgeConfig."""
    # Logging section
    if parser.has_section("logging"):
        if parser.has_option("logging", "level"):
            cfg.logging.level = parser.get("logging", "level").upper()
        if parser.has_option("logging", "format"):
            val = parser.get("logging", "format").lower()
            if val in ("simple", "detailed"):
                cfg.logging.format = val  # type: ignore[assignment]

    # Chat section
    if parser.has_section("chat"):
        if parser.has_option("chat", "bystanders_range"):
            cfg.chat.bystanders_range = parser.getfloat("chat", "bystanders_range")
        # raw=True so a literal % in a format survives
        for name in ("to_target_format", "to_bystanders_format", "no_target_format"):
            if parser.has_option("chat", name):
                setattr(cfg.chat, name, parser.get("chat", name, raw=True))

    # Scripts section
    if parser.has_section("scripts"):
        if parser.has_option("scripts", "scripts_root"):
            cfg.scripts.scripts_root = parser.get("scripts", "scripts_root")

    # Debug section
    if parser.has_section("debug"):
        if parser.has_option("debug", "echo"):
            cfg.debug.echo = _parse_bool(parser.get("debug", "echo"))


def _apply_env_overrides(cfg: BridgeConfig) -> None:
    """Apply environment variable overrides to configuration."""
    if env_log := os.getenv("BRIDGE_LOG_LEVEL"):
        cfg.logging.level = env_log.upper()
    if env_range := os.getenv("BRIDGE_CHAT_RANGE"):
        cfg.chat.bystanders_range = float(env_range)
    if env_root := os.getenv("BRIDGE_SCRIPTS_ROOT"):
        cfg.scripts.scripts_root = env_root
    if env_echo := os.getenv("BRIDGE_DEBUG_ECHO"):
        cfg.debug.echo = _parse_bool(env_echo)


def load_config() -> BridgeConfig:
    """
    Load configuration from all sources with proper priority.

    Priority (highest wins):
        1. Environment variables
        2. config/bridge.ini
        3. config/bridge.example.ini (fallback for development)
        4. Built-in defaults

    Returns:
        BridgeConfig: Fully populated configuration object.
    """
    cfg = BridgeConfig()

    config_file = None
    if CONFIG_FILE.exists():
        config_file = CONFIG_FILE
    elif CONFIG_EXAMPLE.exists():
        config_file = CONFIG_EXAMPLE

    if config_file:
        parser = configparser.ConfigParser()
        parser.read(config_file)
        _load_from_ini(parser, cfg)

    _apply_env_overrides(cfg)

    return cfg


def reload_config() -> "BridgeConfig":
    """
    Reload configuration from disk and environment.

    This updates the module-level `config` singleton in place so modules
    holding a reference to it observe the new values.

    Returns:
        BridgeConfig: The reloaded configuration.
    """
    fresh = load_config()
    config.logging = fresh.logging
    config.chat = fresh.chat
    config.scripts = fresh.scripts
    config.debug = fresh.debug
    return config


_LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
}


def configure_logging(cfg: BridgeConfig | None = None) -> None:
    """Apply the logging section to the root logger.

    Hosts that manage logging themselves can skip this; the library only
    creates module loggers and never installs handlers on import.
    """
    cfg = cfg or config
    logging.basicConfig(
        level=getattr(logging, cfg.logging.level, logging.INFO),
        format=_LOG_FORMATS[cfg.logging.format],
        force=True,
    )


# =============================================================================
# MODULE-LEVEL SINGLETON
# =============================================================================

config = load_config()


# =============================================================================
# UTILITY FUNCTIONS
# =============================================================================


def get_config_status() -> dict:
    """
    Get configuration status for diagnostics.

    Returns a dictionary with configuration source information.
    """
    return {
        "config_file_exists": CONFIG_FILE.exists(),
        "config_file_path": str(CONFIG_FILE),
        "using_example": not CONFIG_FILE.exists() and CONFIG_EXAMPLE.exists(),
        "scripts_root": str(config.scripts.absolute_root),
        "bystanders_range": config.chat.bystanders_range,
        "debug_echo": config.debug.echo,
    }
