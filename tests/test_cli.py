import pathlib
import re
from types import SimpleNamespace

import pytest

from i18nify import cli
from i18nify.rewriter import DEFAULT_TARGET_PATTERN


@pytest.fixture
def settings(monkeypatch):
    values = SimpleNamespace(
        I18NIFY_CALL_NAME="i18n",
        I18NIFY_DEBUG=False,
        compiled_pattern=lambda: re.compile(DEFAULT_TARGET_PATTERN),
    )
    monkeypatch.setattr(cli, "get_settings", lambda: values)
    return values


def test_derive_output_path_inserts_cache_before_extension():
    assert cli.derive_output_path(pathlib.Path("/src/index.js")) == pathlib.Path(
        "/src/index.cache.js"
    )
    assert cli.derive_output_path(pathlib.Path("/src/a.test.jsx")) == pathlib.Path(
        "/src/a.test.cache.jsx"
    )
    assert cli.derive_output_path(pathlib.Path("/src/Makefile")) == pathlib.Path(
        "/src/Makefile.cache"
    )


def test_resolve_paths_defaults_to_index_js(tmp_path):
    input_path, output_path = cli.resolve_paths(
        input_option=None, output_option=None, positionals=[], cwd=tmp_path
    )
    assert input_path == (tmp_path / "index.js").resolve()
    assert output_path == (tmp_path / "index.cache.js").resolve()


def test_resolve_paths_uses_positionals(tmp_path):
    input_path, output_path = cli.resolve_paths(
        input_option=None,
        output_option=None,
        positionals=["src/app.js", "build/app.js"],
        cwd=tmp_path,
    )
    assert input_path == (tmp_path / "src" / "app.js").resolve()
    assert output_path == (tmp_path / "build" / "app.js").resolve()


def test_resolve_paths_options_win_over_positionals(tmp_path):
    input_path, output_path = cli.resolve_paths(
        input_option="main.js",
        output_option=None,
        positionals=["ignored.js"],
        cwd=tmp_path,
    )
    assert input_path == (tmp_path / "main.js").resolve()
    assert output_path == (tmp_path / "main.cache.js").resolve()


def test_resolve_paths_keeps_absolute_paths(tmp_path):
    absolute = tmp_path / "abs" / "in.js"
    input_path, _ = cli.resolve_paths(
        input_option=str(absolute), output_option=None, positionals=[], cwd=pathlib.Path("/")
    )
    assert input_path == absolute.resolve()


def test_main_rewrites_default_input(tmp_path, monkeypatch, settings, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "index.js").write_text('const a = "你好";\n', encoding="utf-8")

    assert cli.main([]) == 0

    output = tmp_path / "index.cache.js"
    assert output.read_text(encoding="utf-8") == 'const a = i18n("nihao");\n'
    assert "Rewrite complete." in capsys.readouterr().out


def test_main_call_name_flag_overrides_settings(tmp_path, monkeypatch, settings):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "in.js").write_text('f("你好");', encoding="utf-8")

    assert cli.main(["-i", "in.js", "-o", "out/result.js", "--call-name", "t"]) == 0

    assert (tmp_path / "out" / "result.js").read_text(encoding="utf-8") == 'f(t("nihao"));'


def test_main_missing_input_fails(tmp_path, monkeypatch, settings, capsys):
    monkeypatch.chdir(tmp_path)
    assert cli.main(["nothing.js"]) == 1
    assert "Input file not found" in capsys.readouterr().out


def test_main_parse_failure_writes_nothing(tmp_path, monkeypatch, settings, capsys):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "bad.js").write_text("const = ;", encoding="utf-8")

    assert cli.main(["bad.js"]) == 1

    assert not (tmp_path / "bad.cache.js").exists()
    assert "no output was written" in capsys.readouterr().out


def test_main_refuses_output_equal_to_input(tmp_path, monkeypatch, settings):
    monkeypatch.chdir(tmp_path)
    (tmp_path / "a.js").write_text('f("你好");', encoding="utf-8")
    assert cli.main(["a.js", "a.js"]) == 1
    assert (tmp_path / "a.js").read_text(encoding="utf-8") == 'f("你好");'


def test_main_rejects_extra_positionals(settings):
    with pytest.raises(SystemExit):
        cli.main(["a.js", "b.js", "c.js"])


def test_main_reports_configuration_errors(monkeypatch, capsys):
    def failing_settings():
        raise cli.ConfigurationError("Configuration validation errors detected:\n- bad")

    monkeypatch.setattr(cli, "get_settings", failing_settings)
    assert cli.main([]) == 1
    assert "bad" in capsys.readouterr().out
