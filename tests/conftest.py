import pytest

from pico_deprecated import constants
from pico_deprecated.adapter import LegacyEventAdapter
from pico_deprecated.plugin_manager import Plugin, PluginRegistry


class Recorder:
    """Legacy plugin that records the deprecated events it receives"""

    def __init__(self):
        self.calls = []

    def plugins_loaded(self):
        self.calls.append(("plugins_loaded",))

    def request_url(self, url):
        self.calls.append(("request_url", url))

    def after_load_content(self, file, raw_content):
        self.calls.append(("after_load_content", file, raw_content))


class ModernPlugin(Plugin):
    def __init__(self):
        self.events = []

    def on_request_url(self, url):
        self.events.append(url)
        return url


@pytest.fixture(autouse=True)
def reset_constants(monkeypatch):
    monkeypatch.setattr(constants, "_CONSTANTS", None)


@pytest.fixture
def registry(tmp_path):
    return PluginRegistry(str(tmp_path))


@pytest.fixture
def adapter(registry):
    return registry.load(LegacyEventAdapter)
