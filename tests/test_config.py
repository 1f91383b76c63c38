# tests/test_config.py
import json

import pytest
from pydantic import ValidationError

from compliance_health_check.utils.config import HealthCheckConfig, load_config_from_file


def test_defaults():
    config = HealthCheckConfig()
    assert config.share_expiry_days == 30
    assert config.history_page_size == 10
    assert config.export_formats == ["json", "excel"]
    assert config.frontend_url == "http://localhost:5173"


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("HEALTH_CHECK_SHARE_EXPIRY_DAYS", "45")
    monkeypatch.setenv("HEALTH_CHECK_EXPORT_FORMATS", "json")
    monkeypatch.setenv("HEALTH_CHECK_FRONTEND_URL", "https://app.example.com/")

    config = HealthCheckConfig()
    assert config.share_expiry_days == 45
    assert config.export_formats == ["json"]
    assert config.frontend_url == "https://app.example.com"


def test_explicit_values_win_over_environment(monkeypatch):
    monkeypatch.setenv("HEALTH_CHECK_LOG_LEVEL", "debug")
    assert HealthCheckConfig(log_level="warning").log_level == "WARNING"
    assert HealthCheckConfig().log_level == "DEBUG"


def test_invalid_values():
    with pytest.raises(ValidationError):
        HealthCheckConfig(share_expiry_days=400)
    with pytest.raises(ValidationError):
        HealthCheckConfig(export_formats=["pdf"])


def test_load_yaml_and_json(tmp_path):
    yaml_path = tmp_path / "config.yaml"
    yaml_path.write_text("share_expiry_days: 7\nlog_level: info\n")
    assert load_config_from_file(str(yaml_path)).share_expiry_days == 7

    json_path = tmp_path / "config.json"
    json_path.write_text(json.dumps({"history_page_size": 25}))
    assert load_config_from_file(str(json_path)).history_page_size == 25


def test_load_errors(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config_from_file(str(tmp_path / "missing.yaml"))

    ini_path = tmp_path / "config.ini"
    ini_path.write_text("[core]")
    with pytest.raises(ValueError):
        load_config_from_file(str(ini_path))


def test_validate_configuration():
    assert HealthCheckConfig(frontend_url="ftp://example.com").validate_configuration() == [
        "Frontend URL must start with http:// or https://"
    ]


def test_update_config_replaces_global(monkeypatch):
    from compliance_health_check.utils import config as config_module

    monkeypatch.setattr(config_module, "config", config_module.HealthCheckConfig())
    updated = config_module.update_config(share_expiry_days=14)
    assert updated.share_expiry_days == 14
    assert config_module.get_config() is updated


def test_ensure_directories(tmp_path):
    config = HealthCheckConfig(data_directory=str(tmp_path / "d"), output_directory=str(tmp_path / "o"))
    config.ensure_directories()
    assert (tmp_path / "d").is_dir()
    assert (tmp_path / "o").is_dir()
