import pytest

from i18nify import configuration
from i18nify.errors import ConfigurationError


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    for name in ("I18NIFY_CALL_NAME", "I18NIFY_TARGET_PATTERN", "I18NIFY_DEBUG"):
        monkeypatch.delenv(name, raising=False)
    configuration._load_config_instance.cache_clear()
    yield
    configuration._load_config_instance.cache_clear()


def test_defaults_apply_without_any_source(tmp_path):
    settings = configuration.get_settings(app_dir=tmp_path)
    assert settings.I18NIFY_CALL_NAME == "i18n"
    assert settings.compiled_pattern().search("中")
    assert not settings.compiled_pattern().search("a")


def test_environment_overrides_call_name(tmp_path, monkeypatch):
    monkeypatch.setenv("I18NIFY_CALL_NAME", "  $t  ")
    settings = configuration.get_settings(app_dir=tmp_path)
    assert settings.I18NIFY_CALL_NAME == "$t"


def test_dotenv_file_is_read(tmp_path):
    (tmp_path / ".env").write_text("I18NIFY_CALL_NAME=intl.t\n", encoding="utf-8")
    settings = configuration.get_settings(app_dir=tmp_path)
    assert settings.I18NIFY_CALL_NAME == "intl.t"


def test_invalid_values_are_reported_together(tmp_path, monkeypatch):
    monkeypatch.setenv("I18NIFY_CALL_NAME", "not valid()")
    monkeypatch.setenv("I18NIFY_TARGET_PATTERN", "[")
    with pytest.raises(ConfigurationError) as excinfo:
        configuration.get_settings(app_dir=tmp_path)
    message = str(excinfo.value)
    assert "I18NIFY_CALL_NAME" in message
    assert "I18NIFY_TARGET_PATTERN" in message


def test_process_environment_wins_over_dotenv(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text("I18NIFY_CALL_NAME=fromfile\nI18NIFY_DEBUG=true\n", encoding="utf-8")
    monkeypatch.setenv("I18NIFY_CALL_NAME", "fromenv")
    settings = configuration.get_settings(app_dir=tmp_path)
    assert settings.I18NIFY_CALL_NAME == "fromenv"
    assert settings.I18NIFY_DEBUG is True


def test_only_the_bad_setting_is_reported(tmp_path, monkeypatch):
    monkeypatch.setenv("I18NIFY_CALL_NAME", "1bad")
    with pytest.raises(ConfigurationError) as excinfo:
        configuration.get_settings(app_dir=tmp_path)
    lines = str(excinfo.value).splitlines()
    assert lines[0] == "Configuration validation errors detected:"
    assert len(lines) == 2
    assert "I18NIFY_CALL_NAME" in lines[1]
