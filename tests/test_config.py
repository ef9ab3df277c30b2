import pytest

from npm_peek.core.config import CONFIG_PATH_ENV_VAR, REGISTRY_ENV_VAR, TIMEOUT_ENV_VAR, Settings, load_settings
from npm_peek.domain.errors import UnknownRegistry
from npm_peek.domain.models import Registry


def test_defaults_without_environment():
    settings = load_settings({})
    assert settings.default_registry == Registry.BLUE
    assert settings.registry_url() == "http://npm.m2.blue.cdtapps.com"
    assert settings.registry_url("npm") == "https://registry.npmjs.org"
    assert settings.timeout_seconds == 30.0
    assert settings.max_archive_bytes is None


def test_environment_overrides():
    settings = load_settings({REGISTRY_ENV_VAR: "NPM", TIMEOUT_ENV_VAR: "5"})
    assert settings.default_registry == Registry.NPM
    assert settings.timeout_seconds == 5.0


def test_yaml_file_is_merged_with_presets(tmp_path):
    config_file = tmp_path / "npm-peek.yml"
    config_file.write_text(
        "registries:\n"
        "  blue: http://mirror.local/npm/\n"
        "default_registry: npm\n"
        "max_archive_bytes: 1048576\n",
        encoding="utf-8",
    )

    settings = load_settings({CONFIG_PATH_ENV_VAR: str(config_file)})

    assert settings.default_registry == Registry.NPM
    assert settings.registry_url("blue") == "http://mirror.local/npm"
    assert settings.registry_url("npm") == "https://registry.npmjs.org"
    assert settings.max_archive_bytes == 1048576


def test_environment_wins_over_file(tmp_path):
    config_file = tmp_path / "npm-peek.yml"
    config_file.write_text("default_registry: npm\n", encoding="utf-8")

    settings = load_settings({CONFIG_PATH_ENV_VAR: str(config_file), REGISTRY_ENV_VAR: "blue"})

    assert settings.default_registry == Registry.BLUE


def test_missing_config_file_is_an_error(tmp_path):
    with pytest.raises(ValueError, match="not found"):
        load_settings({CONFIG_PATH_ENV_VAR: str(tmp_path / "absent.yml")})


def test_malformed_config_file_is_an_error(tmp_path):
    config_file = tmp_path / "npm-peek.yml"
    config_file.write_text("- just\n- a list\n", encoding="utf-8")

    with pytest.raises(ValueError, match="mapping"):
        load_settings({CONFIG_PATH_ENV_VAR: str(config_file)})


def test_invalid_values_are_rejected():
    with pytest.raises(ValueError, match="Invalid configuration"):
        load_settings({TIMEOUT_ENV_VAR: "-1"})


def test_unknown_registry_name():
    with pytest.raises(UnknownRegistry):
        load_settings({REGISTRY_ENV_VAR: "pypi"})
    with pytest.raises(UnknownRegistry):
        Settings().registry_url("pypi")


def test_unknown_registry_key_in_file_is_rejected(tmp_path):
    config_file = tmp_path / "npm-peek.yml"
    config_file.write_text("registries:\n  custom: http://mirror.local/npm\n", encoding="utf-8")

    with pytest.raises(ValueError, match="custom"):
        load_settings({CONFIG_PATH_ENV_VAR: str(config_file)})


def test_settings_reject_unknown_registry_key():
    with pytest.raises(ValueError, match="unknown registry names"):
        Settings(registries={"npm": "https://registry.npmjs.org", "custom": "http://x"})
