from click.testing import CliRunner

from pico_deprecated import VERSION
from pico_deprecated.__main__ import main


def test_events_lists_translation_table():
    result = CliRunner().invoke(main, ["events"])

    assert result.exit_code == 0
    lines = result.output.splitlines()
    assert any(line.split() == ["on_plugins_loaded", "plugins_loaded()"] for line in lines)
    assert any(line.split() == ["on_request_file", "-"] for line in lines)
    assert sum(line.startswith("on_content_parsed") for line in lines) == 2


def test_config_merges_legacy_file(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.yaml").write_text("b: 3\nc: 4\n")
    (tmp_path / "config.yaml").write_text("a: 1\nb: 2\n")

    result = CliRunner().invoke(main, ["config", str(tmp_path)])

    assert result.exit_code == 0
    assert result.output == "a: 1\nb: 2\nc: 4\n"


def test_config_without_any_files(tmp_path):
    result = CliRunner().invoke(main, ["-v", "config", str(tmp_path)])

    assert result.exit_code == 0
    assert result.output == "{}\n"


def test_config_rejects_non_mapping(tmp_path):
    config = tmp_path / "site.yaml"
    config.write_text("- a\n- b\n")

    result = CliRunner().invoke(main, ["config", str(tmp_path), "--config", str(config)])

    assert result.exit_code == 1


def test_config_reports_invalid_yaml(tmp_path):
    (tmp_path / "config").mkdir()
    (tmp_path / "config" / "config.yaml").write_text("key: [unclosed\n")

    result = CliRunner().invoke(main, ["config", str(tmp_path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)


def test_version():
    result = CliRunner().invoke(main, ["--version"])
    assert VERSION in result.output
