"""
Tests for YAML settings loading
"""
import pytest
import yaml

from tokenkeep import settings as settings_module
from tokenkeep.settings import load_settings, set_token_settings


@pytest.fixture(autouse=True)
def clear_settings_cache(monkeypatch):
    monkeypatch.setattr(settings_module, "_cached_settings", None)
    monkeypatch.delenv("TOKENKEEP_DATABASE_URI", raising=False)
    monkeypatch.delenv("LOG_FORMAT", raising=False)


class TestLoadSettings:
    """Tests for load_settings"""

    def test_missing_file_gives_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path / "absent.yaml"))

        assert settings["tokens"] == {"secret_bytes": 16, "max_secret_attempts": 10}
        assert settings["listing"]["unknown_label"] == "Unknown"

    def test_file_merges_over_defaults(self, tmp_path):
        config_file = tmp_path / "settings.yaml"
        config_file.write_text(yaml.dump({"tokens": {"secret_bytes": 32}, "logging": {"level": "DEBUG"}}))

        settings = load_settings(str(config_file))

        assert settings["tokens"]["secret_bytes"] == 32
        assert settings["tokens"]["max_secret_attempts"] == 10
        assert settings["logging"] == {"level": "DEBUG", "format": "console"}

    def test_environment_overrides(self, tmp_path, monkeypatch):
        monkeypatch.setenv("TOKENKEEP_DATABASE_URI", "sqlite:///elsewhere.db")
        monkeypatch.setenv("LOG_FORMAT", "json")

        settings = load_settings(str(tmp_path / "absent.yaml"))

        assert settings["database"]["uri"] == "sqlite:///elsewhere.db"
        assert settings["logging"]["format"] == "json"


class TestSetTokenSettings:
    """Tests for set_token_settings"""

    def test_persists_values(self, tmp_path):
        config_file = str(tmp_path / "settings.yaml")

        set_token_settings(secret_bytes=24, max_secret_attempts=3, config_file=config_file)

        with open(config_file) as f:
            stored = yaml.safe_load(f)
        assert stored["tokens"] == {"secret_bytes": 24, "max_secret_attempts": 3}

    @pytest.mark.parametrize("kwargs", [{"secret_bytes": 4}, {"max_secret_attempts": 0}])
    def test_rejects_bad_values(self, tmp_path, kwargs):
        with pytest.raises(ValueError):
            set_token_settings(config_file=str(tmp_path / "settings.yaml"), **kwargs)
