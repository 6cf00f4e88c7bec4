import json
from pathlib import Path

import pytest

from codecollab.config.settings import CollabSettings, load_settings
from codecollab.core.errors import ConfigError
from codecollab.services.config_service import ConfigService


def _write_config(tmp_path, data) -> Path:
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data), encoding="utf-8")
    return path


def test_missing_config_file_gives_defaults(tmp_path):
    settings = load_settings(config_path=tmp_path / "none.json", env={})

    assert settings == CollabSettings()
    assert settings.model == "gpt-4"
    assert settings.poll_interval == 3.0
    assert settings.edit_policy == "overwrite"
    assert settings.busy_policy == "reject"
    assert settings.api_key is None


def test_values_are_read_from_nested_keys(tmp_path):
    path = _write_config(tmp_path, {
        "openai": {"api_key": "sk-file", "model": "gpt-4o", "temperature": 0.2},
        "polling": {"interval": 1, "max_attempts": 5, "max_seconds": 30},
        "edit_policy": "append",
        "busy_policy": "queue",
        "include_file_tree": False,
        "state_dir": str(tmp_path / "state"),
    })

    settings = load_settings(config_path=path, env={})

    assert settings.api_key == "sk-file"
    assert settings.model == "gpt-4o"
    assert settings.temperature == 0.2
    assert settings.poll_interval == 1.0
    assert settings.max_poll_attempts == 5
    assert settings.max_poll_seconds == 30
    assert settings.edit_policy == "append"
    assert settings.busy_policy == "queue"
    assert settings.include_file_tree is False
    assert settings.state_dir == tmp_path / "state"


def test_env_overrides_file_and_flags_override_env(tmp_path):
    path = _write_config(tmp_path, {"openai": {"api_key": "sk-file", "model": "gpt-4o"}})
    env = {
        "OPENAI_API_KEY": "sk-env",
        "CODECOLLAB_MODEL": "gpt-4.1",
        "CODECOLLAB_POLL_INTERVAL": "2.5",
    }

    settings = load_settings(config_path=path, env=env)
    assert settings.api_key == "sk-env"
    assert settings.model == "gpt-4.1"
    assert settings.poll_interval == 2.5

    settings = load_settings(config_path=path, env=env, model="gpt-3.5-turbo", poll_interval=None)
    assert settings.model == "gpt-3.5-turbo"
    assert settings.poll_interval == 2.5


def test_env_is_read_from_process_when_not_given(tmp_path, monkeypatch):
    monkeypatch.setenv("OPENAI_API_KEY", "sk-process")
    monkeypatch.delenv("CODECOLLAB_MODEL", raising=False)
    monkeypatch.delenv("CODECOLLAB_POLL_INTERVAL", raising=False)

    settings = load_settings(config_path=tmp_path / "none.json")

    assert settings.api_key == "sk-process"


@pytest.mark.parametrize(
    "data",
    [
        {"edit_policy": "merge"},
        {"busy_policy": "drop"},
        {"polling": {"interval": -1}},
    ],
)
def test_invalid_values_raise_config_error(tmp_path, data):
    with pytest.raises(ConfigError):
        load_settings(config_path=_write_config(tmp_path, data), env={})


def test_bad_env_poll_interval(tmp_path):
    with pytest.raises(ConfigError):
        load_settings(config_path=tmp_path / "none.json", env={"CODECOLLAB_POLL_INTERVAL": "soon"})


def test_invalid_json_raises_config_error(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{oops", encoding="utf-8")

    with pytest.raises(ConfigError):
        ConfigService(config_path=path).load()


def test_non_object_config_raises(tmp_path):
    with pytest.raises(ConfigError):
        ConfigService(config_path=_write_config(tmp_path, ["a", "b"])).load()


def test_config_service_dotted_get(tmp_path):
    service = ConfigService(config_path=_write_config(tmp_path, {"openai": {"api_key": "sk-x"}}))
    service.load()

    assert service.get("openai.api_key") == "sk-x"
    assert service.get("openai.missing", "dflt") == "dflt"
    assert service.get("openai.api_key.deeper") is None


def test_missing_config_file_loads_empty(tmp_path):
    service = ConfigService(config_path=tmp_path / "absent" / "config.json")

    assert service.load() == {}
    assert service.get("openai.api_key", "dflt") == "dflt"
