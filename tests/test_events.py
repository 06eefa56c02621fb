import pytest

from pico_deprecated.events import EVENT_MAP, LEGACY_EVENTS, LegacyEvent, LegacyHandlerIndex


class Shouter:
    def request_url(self, url):
        return url.upper()


class Suffixer:
    def request_url(self, url):
        return url + "/index"


class Mutator:
    def file_meta(self, meta):
        meta["seen"] = True


class Broken:
    def request_url(self, url):
        raise RuntimeError("boom")


def test_table_covers_every_deprecated_event():
    assert set(LEGACY_EVENTS) == {
        "plugins_loaded", "config_loaded", "request_url", "before_load_content",
        "after_load_content", "before_404_load_content", "after_404_load_content",
        "before_read_file_meta", "file_meta", "before_parse_content",
        "after_parse_content", "content_parsed", "get_page_data", "get_pages",
        "before_twig_register", "before_render", "after_render",
    }
    assert EVENT_MAP["on_request_file"] == ()
    assert [e.name for e in EVENT_MAP["on_content_parsed"]] == ["after_parse_content", "content_parsed"]
    assert LEGACY_EVENTS["get_page_data"].writable == ("pages",)


def test_writable_must_be_parameters():
    with pytest.raises(ValueError):
        LegacyEvent("broken", ("a",), writable=("b",))


def test_index_keeps_load_order():
    first, second = Shouter(), Suffixer()
    index = LegacyHandlerIndex([first, object(), second])
    assert index.handlers_for("request_url") == [first.request_url, second.request_url]
    assert index.handlers_for("file_meta") == []
    assert index.handlers_for("not_an_event") == []
    assert len(index) == 2


def test_dispatch_threads_results():
    index = LegacyHandlerIndex([Shouter(), Suffixer()])
    assert index.dispatch(LEGACY_EVENTS["request_url"], "/blog") == ["/BLOG/index"]


def test_in_place_mutation_is_kept():
    meta = {}
    index = LegacyHandlerIndex([Mutator()])
    (result,) = index.dispatch(LEGACY_EVENTS["file_meta"], meta)
    assert result is meta
    assert meta == {"seen": True}


def test_non_callable_attributes_are_skipped():
    class Attribute:
        request_url = "not a method"

    assert len(LegacyHandlerIndex([Attribute()])) == 0


def test_handler_errors_propagate_and_stop_dispatch():
    after = Suffixer()
    calls = []
    after.request_url = lambda url: calls.append(url)
    index = LegacyHandlerIndex([Broken(), after])

    with pytest.raises(RuntimeError, match="boom"):
        index.dispatch(LEGACY_EVENTS["request_url"], "/")
    assert calls == []


def test_dispatch_checks_argument_count():
    with pytest.raises(TypeError):
        LegacyHandlerIndex().dispatch(LEGACY_EVENTS["request_url"])


def test_multi_parameter_results():
    event = LEGACY_EVENTS["get_pages"]
    values = [[], "current", "previous", "next"]

    assert event.apply_result(values, None) == values
    assert event.apply_result(values, {"next_page": None}) == [[], "current", "previous", None]
    with pytest.raises(TypeError):
        event.apply_result(values, ("a", "b", "c", "d"))
    with pytest.raises(KeyError):
        event.apply_result(values, {"pagez": []})


def test_read_only_parameters_cannot_be_replaced():
    event = LEGACY_EVENTS["get_page_data"]
    assert event.apply_result([["T"], {}], ["X"]) == [["X"], {}]

    event = LEGACY_EVENTS["plugins_loaded"]
    assert event.apply_result([], "ignored") == []
