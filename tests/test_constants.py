import pydantic
import pytest

from pico_deprecated import constants


def test_undefined_until_defined():
    assert constants.get_constants() is None
    assert not constants.is_defined("CONTENT_DIR")
    with pytest.raises(AttributeError):
        constants.CONTENT_DIR


def test_defined_once():
    first = constants.define_constants({"content_dir": "content/", "content_ext": ".md"})
    second = constants.define_constants({"content_dir": "other/", "content_ext": ".txt"})

    assert second is first
    assert constants.CONTENT_DIR == "content/"
    assert constants.CONTENT_EXT == ".md"
    assert constants.is_defined("CONTENT_EXT")
    assert not constants.is_defined("SOMETHING_ELSE")


def test_missing_keys_define_none():
    snapshot = constants.define_constants({})
    assert snapshot.content_dir is None
    assert constants.CONTENT_EXT is None


def test_snapshot_is_frozen():
    snapshot = constants.define_constants({"content_dir": "content/"})
    with pytest.raises(pydantic.ValidationError):
        snapshot.content_dir = "elsewhere/"


def test_unknown_attribute():
    with pytest.raises(AttributeError):
        constants.NOT_A_CONSTANT
