import json

import pytest

from config.settings import AppSettings, ProxyConfig, SettingsManager


class TestSettingsManager:
    @pytest.fixture
    def temp_config_dir(self, tmp_path):
        return tmp_path / "crypto-quick"

    @pytest.fixture
    def settings_manager(self, temp_config_dir):
        return SettingsManager(temp_config_dir)

    def test_creates_config_dir(self, settings_manager, temp_config_dir):
        assert temp_config_dir.is_dir()
        assert settings_manager.data_dir == temp_config_dir / "data"

    def test_load_defaults_when_file_missing(self, settings_manager):
        settings = settings_manager.load()

        assert isinstance(settings, AppSettings)
        assert settings.theme_mode == "system"
        assert settings.api_base_url == "https://api.coingecko.com/api/v3"
        assert settings.proxy.enabled is False

    def test_save_and_load_persistence(self, settings_manager):
        settings_manager.settings.theme_mode = "dark"
        settings_manager.settings.window_width = 600
        settings_manager.save()

        assert settings_manager.config_file.exists()

        settings_manager.settings = AppSettings()
        loaded_settings = settings_manager.load()

        assert loaded_settings.theme_mode == "dark"
        assert loaded_settings.window_width == 600

    def test_load_handles_corrupted_file(self, settings_manager):
        with open(settings_manager.config_file, "w") as f:
            f.write("{invalid json")

        settings = settings_manager.load()

        assert isinstance(settings, AppSettings)
        assert settings.theme_mode == "system"

    def test_load_handles_non_object_root(self, settings_manager):
        settings_manager.config_file.write_text("[1, 2]")

        assert settings_manager.load() == AppSettings()

    def test_partial_config_load(self, settings_manager):
        with open(settings_manager.config_file, "w") as f:
            json.dump({"theme_mode": "light", "unknown_field": 1}, f)

        settings = settings_manager.load()

        assert settings.theme_mode == "light"
        assert settings.request_timeout == 10.0
        assert settings.proxy == ProxyConfig()

    def test_unknown_theme_falls_back_to_system(self, settings_manager):
        settings_manager.config_file.write_text(json.dumps({"theme_mode": "sepia"}))

        assert settings_manager.load().theme_mode == "system"

    def test_update_theme(self, settings_manager):
        settings_manager.update_theme("light")

        data = json.loads(settings_manager.config_file.read_text())
        assert data["theme_mode"] == "light"

        with pytest.raises(ValueError):
            settings_manager.update_theme("sepia")

    def test_proxy_update_persists(self, settings_manager):
        proxy = ProxyConfig(enabled=True, host="1.2.3.4", port=8080)

        settings_manager.update_proxy(proxy)

        settings_manager.settings = AppSettings()
        loaded = settings_manager.load()
        assert loaded.proxy.host == "1.2.3.4"
        assert loaded.proxy.enabled is True

    def test_reset_to_defaults(self, settings_manager):
        settings_manager.update_window_size(800, 900)

        settings_manager.reset_to_defaults()

        assert settings_manager.settings.window_width == 480
        assert json.loads(settings_manager.config_file.read_text())["window_height"] == 720


class TestProxyConfig:
    def test_disabled_proxy(self):
        proxy = ProxyConfig()

        assert proxy.get_proxy_url() is None
        assert proxy.get_proxies() == {}

    def test_http_proxy(self):
        proxy = ProxyConfig(enabled=True, host="10.0.0.1", port=3128)

        assert proxy.get_proxies() == {
            "http": "http://10.0.0.1:3128",
            "https": "http://10.0.0.1:3128",
        }

    def test_socks5_with_auth(self):
        proxy = ProxyConfig(
            enabled=True, type="socks5", host="h", port=1080, username="u", password="p"
        )

        assert proxy.get_proxy_url() == "socks5://u:p@h:1080"


class TestAppSettingsFromDict:
    def test_ignores_unknown_proxy_keys(self):
        settings = AppSettings.from_dict(
            {"proxy": {"enabled": True, "host": "proxy.local", "bypass": ["localhost"]}}
        )

        assert settings.proxy.enabled is True
        assert settings.proxy.host == "proxy.local"

    def test_non_object_proxy_keeps_default(self):
        assert AppSettings.from_dict({"proxy": "socks5://h:1"}).proxy == ProxyConfig()

    def test_rejects_non_object_root(self):
        with pytest.raises(TypeError):
            AppSettings.from_dict(["light"])
