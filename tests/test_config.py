import json
from datetime import time

import pytest

from deepbank.config import CONFIG_FILENAME, AppConfig, ConfigError


@pytest.mark.unit
def test_defaults(tmp_path):
    config = AppConfig.load(tmp_path)

    assert config.app_dir == tmp_path
    assert config.is_configured is False
    assert config.loading.timeout_seconds == 10
    assert config.loading.banner_seconds == 8
    assert config.operating_hours.opens == time(9)
    assert config.operating_hours.closes == time(21)
    assert config.operating_hours.timezone == "Africa/Luanda"


@pytest.mark.unit
def test_app_dir_from_environment(monkeypatch, tmp_path):
    monkeypatch.setenv("DEEPBANK_DIR", str(tmp_path))
    assert AppConfig.load().app_dir == tmp_path


@pytest.mark.unit
def test_require_backend_raises_when_unconfigured(tmp_path):
    with pytest.raises(ConfigError) as exc_info:
        AppConfig.load(tmp_path).require_backend()
    assert "DEEPBANK_BACKEND_URL" in str(exc_info.value)


@pytest.mark.unit
def test_load_from_file(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps(
            {
                "backend_url": "https://project.example.co",
                "api_key": "anon",
                "prefer_osc52": True,
                "loading": {"timeout_seconds": 12, "counted": False},
                "network": {"read_timeout": 30, "max_retries": 0},
                "operating_hours": {"opens": "08:30", "closes": "20:00"},
            }
        ),
        encoding="utf-8",
    )

    config = AppConfig.load(tmp_path)

    assert config.is_configured is True
    config.require_backend()
    assert config.prefer_osc52 is True
    assert config.loading.timeout_seconds == 12
    assert config.loading.counted is False
    assert config.timeout_config.read_timeout == 30
    assert config.retry_config.max_retries == 0
    assert config.operating_hours.opens == time(8, 30)
    assert config.operating_hours.closes == time(20)


@pytest.mark.unit
def test_environment_overrides_file(monkeypatch, tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text(
        json.dumps({"backend_url": "https://file.example.co", "api_key": "file"}),
        encoding="utf-8",
    )
    monkeypatch.setenv("DEEPBANK_BACKEND_URL", "https://env.example.co")
    monkeypatch.setenv("DEEPBANK_TIMEZONE", "UTC")
    monkeypatch.setenv("DEEPBANK_LOADING_TIMEOUT", "4")

    config = AppConfig.load(tmp_path)

    assert config.backend_url == "https://env.example.co"
    assert config.api_key == "file"
    assert config.operating_hours.timezone == "UTC"
    assert config.loading.timeout_seconds == 4


@pytest.mark.unit
def test_invalid_loading_timeout_is_ignored(monkeypatch, tmp_path):
    monkeypatch.setenv("DEEPBANK_LOADING_TIMEOUT", "soon")
    assert AppConfig.load(tmp_path).loading.timeout_seconds == 10


@pytest.mark.unit
def test_broken_file_raises(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError):
        AppConfig.load(tmp_path)


@pytest.mark.unit
def test_save_round_trip_without_api_key(tmp_path):
    config = AppConfig.load(tmp_path)
    config.backend_url = "https://project.example.co"
    config.api_key = "secret"
    config.loading.banner_seconds = 5
    path = config.save()

    saved = json.loads(path.read_text(encoding="utf-8"))
    assert "api_key" not in saved
    assert saved["operating_hours"]["opens"] == "09:00"

    reloaded = AppConfig.load(tmp_path)
    assert reloaded.backend_url == "https://project.example.co"
    assert reloaded.loading.banner_seconds == 5
