"""
Configuration management for Crypto Quick.
Handles loading/saving settings including proxy configuration.
"""

import json
import logging
import os
from dataclasses import dataclass, field, fields, asdict
from typing import Optional
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_API_BASE_URL = "https://api.coingecko.com/api/v3"
THEME_MODES = ("light", "dark", "system")


def default_config_dir() -> Path:
    """Per-user directory holding settings, logs and persisted data."""
    if os.name == 'nt':  # Windows
        return Path(os.environ.get('APPDATA', '')) / 'crypto-quick'
    return Path.home() / '.config' / 'crypto-quick'


@dataclass
class ProxyConfig:
    """Proxy configuration settings."""
    enabled: bool = False
    type: str = "http"  # "http" or "socks5"
    host: str = "127.0.0.1"
    port: int = 7890
    username: str = ""
    password: str = ""

    def get_proxy_url(self) -> Optional[str]:
        """Get proxy URL string for requests."""
        if not self.enabled:
            return None

        auth = ""
        if self.username and self.password:
            auth = f"{self.username}:{self.password}@"

        protocol = "socks5" if self.type == "socks5" else "http"
        return f"{protocol}://{auth}{self.host}:{self.port}"

    def get_proxies(self) -> dict:
        """Proxy mapping for a requests session."""
        proxy_url = self.get_proxy_url()
        if not proxy_url:
            return {}
        return {"http": proxy_url, "https": proxy_url}


@dataclass
class AppSettings:
    """Application settings."""
    version: str = "1.0.0"

    theme_mode: str = "system"  # "light", "dark", or "system"
    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = 10.0
    proxy: ProxyConfig = field(default_factory=ProxyConfig)
    window_width: int = 480
    window_height: int = 720

    @classmethod
    def from_dict(cls, data: dict) -> "AppSettings":
        """Build settings from a parsed settings.json, ignoring unknown keys."""
        if not isinstance(data, dict):
            raise TypeError("settings root must be an object")

        known = {f.name for f in fields(cls)} - {'proxy'}
        settings = cls(**{k: v for k, v in data.items() if k in known})

        proxy_data = data.get('proxy')
        if isinstance(proxy_data, dict):
            proxy_known = {f.name for f in fields(ProxyConfig)}
            settings.proxy = ProxyConfig(**{k: v for k, v in proxy_data.items() if k in proxy_known})

        if settings.theme_mode not in THEME_MODES:
            logger.warning(f"Unknown theme mode {settings.theme_mode!r}, using system")
            settings.theme_mode = "system"
        return settings


class SettingsManager:
    """Reads and writes settings.json in the per-user config directory."""

    def __init__(self, config_dir: Optional[Path] = None):
        self.config_dir = config_dir or default_config_dir()
        self.config_file = self.config_dir / 'settings.json'
        self.settings = AppSettings()

        self.config_dir.mkdir(parents=True, exist_ok=True)

    @property
    def data_dir(self) -> Path:
        """Directory for the watchlist and coin cache files."""
        return self.config_dir / 'data'

    def load(self) -> AppSettings:
        """
        Load settings from file.

        A missing file leaves the defaults in place; an unreadable one is
        replaced by defaults.

        Returns:
            Loaded settings
        """
        if not self.config_file.exists():
            return self.settings

        try:
            with open(self.config_file, 'r', encoding='utf-8') as f:
                self.settings = AppSettings.from_dict(json.load(f))
        except (json.JSONDecodeError, TypeError, OSError) as e:
            logger.warning(f"Error loading settings: {e}. Resetting to default settings")
            self.settings = AppSettings()

        return self.settings

    def save(self) -> None:
        """Save settings to file."""
        data = asdict(self.settings)

        with open(self.config_file, 'w', encoding='utf-8') as f:
            json.dump(data, f, indent=2, ensure_ascii=False)

    def update_proxy(self, proxy: ProxyConfig) -> None:
        """Update proxy configuration."""
        self.settings.proxy = proxy
        self.save()

    def update_theme(self, theme_mode: str) -> None:
        """Update theme mode."""
        if theme_mode not in THEME_MODES:
            raise ValueError(f"Unknown theme mode: {theme_mode}")
        self.settings.theme_mode = theme_mode
        self.save()

    def update_window_size(self, width: int, height: int) -> None:
        self.settings.window_width = width
        self.settings.window_height = height
        self.save()

    def reset_to_defaults(self) -> None:
        """Reset configuration to default values."""
        logger.info("Resetting configuration to defaults")
        self.settings = AppSettings()
        self.save()


# Global settings instance
_settings_manager: Optional[SettingsManager] = None


def get_settings_manager() -> SettingsManager:
    """Get the global settings manager instance."""
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
        _settings_manager.load()
    return _settings_manager
