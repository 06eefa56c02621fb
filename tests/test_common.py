import pytest

from pico_deprecated.common import dump_yaml, load_legacy_config, merge_legacy_config


def test_legacy_wins_on_conflict():
    merged = merge_legacy_config({"b": 3, "c": 4}, {"a": 1, "b": 2})
    assert merged == {"a": 1, "b": 2, "c": 4}
    assert list(merged) == ["a", "b", "c"]


def test_merge_without_legacy_copies():
    config = {"b": 3}
    merged = merge_legacy_config(config, None)
    assert merged == config
    assert merged is not config
    assert merge_legacy_config(config, {}) == config


def test_load_legacy_config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text("site_title: Old Site\ncontent_ext: .md\n")
    assert load_legacy_config(str(path)) == {"site_title": "Old Site", "content_ext": ".md"}


@pytest.mark.parametrize("text", [
    "",
    "# only comments\n",
    "- a\n- b\n",
    "just a string\n",
    "key: [unclosed\n",
])
def test_load_legacy_config_ignores_non_mappings(tmp_path, text):
    path = tmp_path / "config.yaml"
    path.write_text(text)
    assert load_legacy_config(str(path)) is None


def test_load_legacy_config_missing_or_unreadable(tmp_path):
    assert load_legacy_config(str(tmp_path / "config.yaml")) is None
    # a directory can't be opened as a file
    assert load_legacy_config(str(tmp_path)) is None

    binary = tmp_path / "binary.yaml"
    binary.write_bytes(b"\xff\xfe\x00garbage")
    assert load_legacy_config(str(binary)) is None


def test_dump_yaml_keeps_order():
    assert dump_yaml({"b": 1, "a": "x"}) == "b: 1\na: x\n"
