"""
Serve features deprecated since 1.0

:class:`LegacyEventAdapter` exists for backward compatibility and is disabled
by default. It enables itself when a plugin that doesn't implement
:class:`~pico_deprecated.plugin_manager.PluginInterface` is loaded, unless the
user enabled or disabled it explicitly. While enabled it triggers the
deprecated events and enables ``PicoParsePagesContent`` and ``PicoExcerpt``.
Those plugins slow page loading down considerably; disable the adapter with
``LegacyEventAdapter.enabled: false`` in your config.

The following deprecated events are triggered:

=================================== ==================================================================
Event                               ... triggers the deprecated event
=================================== ==================================================================
on_plugins_loaded                   plugins_loaded()
on_config_loaded                    config_loaded(config)
on_request_url                      request_url(url)
on_content_loading                  before_load_content(file)
on_content_loaded                   after_load_content(file, raw_content)
on_404_content_loading              before_404_load_content(file)
on_404_content_loaded               after_404_load_content(file, raw_content)
on_meta_headers                     before_read_file_meta(headers)
on_meta_parsed                      file_meta(meta)
on_content_parsing                  before_parse_content(raw_content)
on_content_parsed                   after_parse_content(content)
on_content_parsed                   content_parsed(content)
on_single_page_loaded               get_page_data(pages, meta)
on_pages_loaded                     get_pages(pages, current_page, previous_page, next_page)
on_template_engine_registration     before_twig_register()
on_page_rendering                   before_render(variables, template_engine, template_name)
on_page_rendered                    after_render(output)
=================================== ==================================================================

Before 1.0 the config was stored in ``config.yaml`` in the root dir. If that
file exists its settings overwrite those from ``config/config.yaml``.
"""

from collections.abc import Mapping, MutableMapping
from os.path import join
from typing import Any, Dict, List, Optional, Tuple

from . import defaults
from .common import load_legacy_config, merge_legacy_config
from .constants import LegacyConstants, define_constants
from .events import LEGACY_EVENTS, LegacyHandlerIndex
from .plugin_manager import Plugin, PluginRegistry


class LegacyEventAdapter(Plugin):
    enabled = False

    def __init__(self) -> None:
        # File of the current request, see on_request_file()
        self.request_file: Optional[str] = None
        self.constants: Optional[LegacyConstants] = None
        self._index: Optional[LegacyHandlerIndex] = None
        self._index_revision: Optional[int] = None

    @property
    def root_dir(self) -> str:
        root_dir = self.get_arg("root_dir")
        if root_dir is None and self.plugins is not None:
            root_dir = self.plugins.root_dir
        return root_dir or "."

    @property
    def handlers(self) -> LegacyHandlerIndex:
        """
        Deprecated event handlers of the loaded plugins. Rebuilt whenever a
        plugin was loaded since the last build.
        """
        revision = self.plugins.revision if self.plugins is not None else 0
        if self._index is None or self._index_revision != revision:
            plugins = self.plugins.values() if self.plugins is not None else ()
            self._index = LegacyHandlerIndex(plugins)
            self._index_revision = revision
        return self._index

    def trigger_event(self, event_name: str, *args: Any) -> List[Any]:
        """
        Trigger a deprecated event on all plugins.

        :param event_name: Deprecated event to trigger.
        :type event_name: str
        :param args: Parameters to pass.

        :return: The parameters as left by the last handler.
        :rtype: List[Any]
        """
        return self.handlers.dispatch(LEGACY_EVENTS[event_name], *args)

    def on_plugins_loaded(self, plugins: Any) -> Any:
        """
        Enables this plugin on demand and triggers plugins_loaded()
        """
        loaded = plugins.values() if isinstance(plugins, Mapping) else plugins
        legacy = [plugin for plugin in loaded if not PluginRegistry.is_modern(plugin)]
        for plugin in legacy:
            self.logger.debug(f"{type(plugin).__name__} doesn't implement PluginInterface")

        if legacy:
            self.logger.warning(
                f"{len(legacy)} plugin(s) use deprecated events. Please update them to PluginInterface")
            # enable ourselves unless enabled or disabled explicitly
            if not self.enablement.is_explicit:
                self.set_enabled(True, True, True)
                self.logger.info("Enabled legacy event support")

        if self.is_enabled():
            self.trigger_event("plugins_loaded")
        return plugins

    def on_config_loaded(self, config: MutableMapping) -> MutableMapping:
        """
        Reads the legacy config, enables PicoParsePagesContent and
        PicoExcerpt, defines the deprecated constants and triggers
        config_loaded(config)
        """
        legacy_path = join(self.root_dir, defaults.legacy_config_name)
        legacy_config = load_legacy_config(legacy_path)
        if legacy_config is not None:
            self.logger.warning(
                f"{legacy_path} is deprecated, move your settings to "
                f"{join(defaults.config_dir, defaults.config_name)}")
            merged = merge_legacy_config(config, legacy_config)
            config.clear()
            config.update(merged)

        # Can't be done in on_plugins_loaded, the user might have disabled
        # us in the config
        for name in defaults.companion_plugins:
            plugin = self.plugins.get_plugin_by_name(name) if self.plugins is not None else None
            if plugin is None or not PluginRegistry.is_modern(plugin):
                continue
            if plugin.enablement.is_explicit:
                continue
            try:
                plugin.set_enabled(True, True, True)
            except RuntimeError as e:
                self.logger.warning(f"Not enabling {name}: {e}")
                continue
            self.logger.info(f"Enabled {name}")

        # CONTENT_DIR is deprecated since v0.9, CONTENT_EXT since v1.0
        self.constants = define_constants(config)

        (config,) = self.trigger_event("config_loaded", config)
        return config

    def on_request_url(self, url: str) -> str:
        # A new request starts
        self.request_file = None
        (url,) = self.trigger_event("request_url", url)
        return url

    def on_request_file(self, file: str) -> str:
        """
        Remembers the requested file for after_load_content() and
        after_404_load_content()
        """
        self.request_file = file
        return file

    def on_content_loading(self, file: str) -> str:
        (file,) = self.trigger_event("before_load_content", file)
        return file

    def on_content_loaded(self, raw_content: str) -> str:
        self.request_file, raw_content = self.trigger_event(
            "after_load_content", self.request_file, raw_content)
        return raw_content

    def on_404_content_loading(self, file: str) -> str:
        (file,) = self.trigger_event("before_404_load_content", file)
        return file

    def on_404_content_loaded(self, raw_content: str) -> str:
        self.request_file, raw_content = self.trigger_event(
            "after_404_load_content", self.request_file, raw_content)
        return raw_content

    def on_meta_headers(self, headers: Dict[str, str]) -> Dict[str, str]:
        (headers,) = self.trigger_event("before_read_file_meta", headers)
        return headers

    def on_meta_parsed(self, meta: Dict[str, Any]) -> Dict[str, Any]:
        (meta,) = self.trigger_event("file_meta", meta)
        return meta

    def on_content_parsing(self, raw_content: str) -> str:
        (raw_content,) = self.trigger_event("before_parse_content", raw_content)
        return raw_content

    def on_content_parsed(self, content: str) -> str:
        (content,) = self.trigger_event("after_parse_content", content)
        (content,) = self.trigger_event("content_parsed", content)
        return content

    def on_single_page_loaded(self, page_data: MutableMapping) -> MutableMapping:
        """
        Triggers get_page_data(pages, meta) with the values of ``page_data``
        as a plain list. Changes to the list are written back in order.
        """
        keys = list(page_data)
        pages = [page_data[key] for key in keys]

        pages, _ = self.trigger_event("get_page_data", pages, page_data.get("meta"))

        for key, value in zip(keys, pages):
            page_data[key] = value
        return page_data

    def on_pages_loaded(self, pages: Any, current_page: Any, previous_page: Any,
                        next_page: Any) -> Tuple[Any, Any, Any, Any]:
        pages, current_page, previous_page, next_page = self.trigger_event(
            "get_pages", pages, current_page, previous_page, next_page)
        return pages, current_page, previous_page, next_page

    def on_template_engine_registration(self) -> None:
        self.trigger_event("before_twig_register")

    def on_page_rendering(self, template_engine: Any, variables: Dict[str, Any],
                          template_name: str) -> Tuple[Any, Dict[str, Any], str]:
        """
        Triggers before_render(variables, template_engine, template_name).

        Since 1.0 the template name includes the file extension. Old plugins
        get the name without it, and the extension is added back afterwards.
        """
        extension = ""
        base, dot, suffix = template_name.rpartition(".")
        if dot:
            template_name, extension = base, dot + suffix

        variables, template_engine, template_name = self.trigger_event(
            "before_render", variables, template_engine, template_name)

        return template_engine, variables, template_name + extension

    def on_page_rendered(self, output: str) -> str:
        (output,) = self.trigger_event("after_render", output)
        return output
