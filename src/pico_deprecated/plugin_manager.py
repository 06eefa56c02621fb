"""
plugin_manager.py - Plugin base class and registry

This module provides the parts of the host's plugin framework that the
legacy compatibility layer observes:

- :class:`PluginInterface`, the modern plugin capability interface. Plugins
  that don't implement it are legacy (pre-1.0) plugins.
- :class:`Plugin`, the base class modern plugins extend. It tracks whether
  the plugin is enabled and who decided that (see
  :mod:`pico_deprecated.enablement`).
- :class:`PluginRegistry`, the ordered collection of loaded plugins.

Plugins are registered in load order and looked up by name::

    registry = PluginRegistry(root_dir)
    registry.load(LegacyEventAdapter)
    registry.load(SomeOldPlugin())
    registry["LegacyEventAdapter"].is_enabled()
"""

import functools
import inspect
import re
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterator, List, Optional, Tuple, Type, TypeVar, Union

from .common import getColoredLogger
from .enablement import Enablement, resolve

T = TypeVar('T', bound='Plugin')

logger = getColoredLogger("pico_deprecated.plugin_manager")


class ArgsBox:
    __slots__ = ('args',)
    def __init__(self, args: Dict[str, Any]) -> None:
        """
        Initialize ArgsBox with a dictionary of arguments.

        :param args: Dictionary of arguments.
        :type args: Dict[str, Any]
        """
        super().__setattr__('args', args)

    def __getitem__(self, key: str) -> Any:
        return self.args[key]

    def __getattr__(self, key: str) -> Any:
        if key == 'args':
            return super().__getattribute__('args')
        try:
            return self.args[key]
        except KeyError:
            raise AttributeError(f"ArgsBox has no attribute '{key}'")

    def __setattr__(self, key: str, value: Any) -> None:
        if key == 'args':
            super().__setattr__('args', value)
        else:
            self.args[key] = value

    def get(self, key: str, default: Any = None) -> Any:
        return self.args.get(key, default)

    def __contains__(self, key: str) -> bool:
        return key in self.args

    def __repr__(self) -> str:
        return f"ArgsBox({self.args!r})"


def interpret_bool(val: Any) -> Optional[bool]:
    """
    Interpret a value as a boolean, supporting bool, str, and int types.

    :param val: The value to interpret.
    :type val: Any

    :return: The interpreted boolean value, or None for unsupported types.
    :rtype: Optional[bool]
    """
    if isinstance(val, bool):
        return val
    if isinstance(val, str):
        return val.lower() in ['true', 'y', '1']
    if isinstance(val, int):
        return val != 0
    return None


RE_SNAKE_1 = re.compile(r'(.)([A-Z][a-z]+)')
RE_SNAKE_2 = re.compile(r'([a-z0-9])([A-Z])')

@functools.lru_cache(maxsize=128)
def camel_to_snake(name: str) -> str:
    """
    Convert CamelCase to snake_case.

    :param name: The CamelCase string to convert
    :type name: str

    :return: The converted snake_case string
    :rtype: str
    """
    s1 = RE_SNAKE_1.sub(r'\1_\2', name)
    return RE_SNAKE_2.sub(r'\1_\2', s1).lower()


class PluginInterface(ABC):
    """
    The modern plugin capability interface.

    Anything loaded into a :class:`PluginRegistry` that is not an instance of
    this class is treated as a legacy plugin.
    """

    @property
    @abstractmethod
    def name(self) -> str: ...

    @property
    @abstractmethod
    def enablement(self) -> Enablement: ...

    @abstractmethod
    def handle_event(self, event_name: str, *params: Any) -> Any: ...

    @abstractmethod
    def is_enabled(self) -> bool: ...

    @abstractmethod
    def set_enabled(self, enabled: bool, recursive: bool = True, auto: bool = False) -> None: ...

    @abstractmethod
    def is_status_changed(self) -> bool: ...


def _passthrough(params: Tuple[Any, ...]) -> Any:
    if not params:
        return None
    if len(params) == 1:
        return params[0]
    return params


class Plugin(PluginInterface):
    """
    Base class for all modern plugins.

    Subclasses set :attr:`enabled` to choose whether they run while nobody
    has decided otherwise, and list the names of plugins they need in
    :attr:`depends_on`. Event handlers are methods named after the event,
    e.g. ``on_config_loaded``.
    """

    #: Enabled state used while no decision has been made
    enabled: bool = True
    #: Names of plugins this plugin requires
    depends_on: Tuple[str, ...] = ()

    plugins: Optional['PluginRegistry'] = None
    logger = logger
    _enablement: Enablement = Enablement()

    def __preinit__(self, plugins: 'PluginRegistry', args: Dict[str, Any]) -> None:
        """
        Internal initialization method called by the registry before ``__init__``.

        :param plugins: The plugin registry.
        :type plugins: PluginRegistry
        :param args: Dictionary of arguments for this plugin.
        :type args: Dict
        """
        self.plugins = plugins
        self.args = ArgsBox(args)
        self._enablement = Enablement()
        self.logger = getColoredLogger(f"plugins.{camel_to_snake(self.name)}")

    @property
    def name(self) -> str:
        """
        Returns the name of this plugin, which is its class name.

        :return: The class name of this plugin.
        :rtype: str
        """
        return self.__class__.__name__

    @property
    def enablement(self) -> Enablement:
        return self._enablement

    def get_arg(self, arg_name: str) -> Any:
        """
        Get an argument value by name.

        :param arg_name: The argument name.
        :type arg_name: str

        :return: The argument value or None if not set.
        :rtype: Any
        """
        args = getattr(self, "args", None)
        if args is not None and arg_name in args:
            return args[arg_name]

        return None

    def get_arg_bool(self, arg_name: str, default: bool = False) -> bool:
        """
        Returns True if the argument is set and has a truthy value.

        :raises ValueError: If the argument exists but has an unsupported type.
        """
        value = self.get_arg(arg_name)
        if value is None:
            return default
        if (x := interpret_bool(value)) is not None:
            return x

        raise ValueError(f"Unsupported arg type: {type(value)}")

    def is_enabled(self) -> bool:
        return self._enablement.effective(self.enabled)

    def is_status_changed(self) -> bool:
        """
        Whether this plugin was enabled or disabled explicitly. Automatic
        decisions don't count.
        """
        return self._enablement.is_explicit

    def set_enabled(self, enabled: bool, recursive: bool = True, auto: bool = False) -> None:
        """
        Enable or disable this plugin.

        :param enabled: The new state.
        :type enabled: bool
        :param recursive: Also enable dependencies (when enabling) or disable
            dependants (when disabling) unless they were set explicitly.
        :type recursive: bool
        :param auto: True for an automatic decision, which never overrides an
            explicit one.
        :type auto: bool

        :raises RuntimeError: If a dependency or dependant is in the way. An
            automatic decision is rolled back before raising.
        """
        previous = self._enablement
        proposal = Enablement.default(enabled) if auto else Enablement.explicit(enabled)
        self._enablement = resolve(previous, proposal)

        if self.plugins is None:
            return
        try:
            if self.is_enabled():
                self._check_dependencies(recursive)
            else:
                self._check_dependants(recursive)
        except RuntimeError:
            if auto:
                self._enablement = previous
            raise

    def _check_dependencies(self, recursive: bool) -> None:
        for dependency in self.depends_on:
            plugin = self.plugins.get_plugin_by_name(dependency)
            if plugin is None or not self.plugins.is_modern(plugin):
                raise RuntimeError(
                    f"Unable to enable plugin {self.name}: required plugin {dependency} not found")
            if plugin.is_enabled():
                continue
            if recursive and not plugin.enablement.is_explicit:
                plugin.set_enabled(True, True, True)
            else:
                raise RuntimeError(
                    f"Unable to enable plugin {self.name}: required plugin {dependency} was disabled")

    def _check_dependants(self, recursive: bool) -> None:
        for dependant in self.get_dependants():
            if not dependant.is_enabled():
                continue
            if recursive and not dependant.enablement.is_explicit:
                dependant.set_enabled(False, True, True)
            else:
                raise RuntimeError(
                    f"Unable to disable plugin {self.name}: required by plugin {dependant.name}")

    def get_dependants(self) -> List['Plugin']:
        """
        Modern plugins in the registry that list this plugin in ``depends_on``.
        """
        if self.plugins is None:
            return []
        return [
            plugin for plugin in self.plugins.values()
            if self.plugins.is_modern(plugin) and self.name in getattr(plugin, "depends_on", ())
        ]

    def _config_enabled(self, config: Any) -> Optional[bool]:
        if not isinstance(config, dict):
            return None
        value = config.get(f"{self.name}.enabled")
        if value is None and isinstance(config.get(self.name), dict):
            value = config[self.name].get("enabled")
        if value is None:
            return None
        if (x := interpret_bool(value)) is not None:
            return x
        raise ValueError(f"Unsupported value for {self.name}.enabled: {value!r}")

    def handle_event(self, event_name: str, *params: Any) -> Any:
        """
        Run the handler for ``event_name`` if this plugin defines one.

        ``on_config_loaded`` first applies an explicit ``<Name>.enabled``
        setting from the config. Disabled plugins only see
        ``on_plugins_loaded``; for any other event they return the
        parameters unchanged.

        :param event_name: Name of the modern event.
        :type event_name: str
        :param params: Event parameters.

        :return: Whatever the handler returns, or the parameters when no
            handler ran (a single value, a tuple, or None).
        :rtype: Any
        """
        if event_name == "on_config_loaded" and params:
            enabled = self._config_enabled(params[0])
            if enabled is not None:
                self.set_enabled(enabled)

        if self.is_enabled() or event_name == "on_plugins_loaded":
            handler = getattr(self, event_name, None)
            if callable(handler):
                return handler(*params)
        return _passthrough(params)

    def get_plugins(self) -> 'PluginRegistry':
        return self.plugins

    def get_plugin(self, plugin_name: str) -> Any:
        """
        Look up another loaded plugin.

        :raises RuntimeError: If the plugin isn't loaded.
        """
        plugin = self.plugins.get_plugin_by_name(plugin_name) if self.plugins is not None else None
        if plugin is None:
            raise RuntimeError(f"Plugin {plugin_name} not found")
        return plugin

    def __repr__(self) -> str:
        return f"<{self.name} enabled={self.is_enabled()} {self._enablement.source.value}>"


class PluginRegistry:
    """
    Ordered collection of the loaded plugins, modern and legacy.
    """
    plugins: Dict[str, Any]
    aliases: Dict[str, str]

    def __init__(self, root_dir: str = ".", args: Optional[Dict[str, Any]] = None) -> None:
        """
        :param root_dir: The site's root directory.
        :type root_dir: str
        :param args: Arguments handed to every modern plugin.
        :type args: Dict[str, Any], optional
        """
        self.root_dir = root_dir
        self.args = dict(args or {})
        self.logger = logger

        self.plugins: Dict[str, Any] = {}
        self.aliases: Dict[str, str] = {}
        self._plugin_name_map: Dict[str, Any] = {}  # Lowercase name -> instance
        self.revision = 0

    @staticmethod
    def is_modern(plugin: Any) -> bool:
        """
        Does ``plugin`` implement the modern plugin capability interface?
        """
        return isinstance(plugin, PluginInterface)

    def load(self, plugin: Union[Type[T], Any], name: Optional[str] = None,
             args: Optional[Dict[str, Any]] = None) -> Any:
        """
        Load a plugin class or instance.

        Modern plugin classes are created with ``__new__``, pre-initialized
        with this registry and the arguments, and only then ``__init__``-ed
        so that ``__init__`` may use ``self.get_arg``. Legacy classes are
        called without arguments.

        :param plugin: Plugin class or instance.
        :param name: Registry name, defaults to the class name.
        :type name: str, optional
        :param args: Extra arguments for this plugin.
        :type args: Dict[str, Any], optional

        :return: The loaded plugin instance.

        :raises ValueError: If ``plugin`` is neither a class nor an object.
        """
        plugin_args = dict(self.args)
        plugin_args.update(args or {})

        if inspect.isclass(plugin):
            if issubclass(plugin, Plugin):
                instance = plugin.__new__(plugin)
                instance.__preinit__(self, plugin_args)
                instance.__init__()
            else:
                instance = plugin()
        elif plugin is None or inspect.isroutine(plugin) or inspect.ismodule(plugin):
            raise ValueError(f"Expected a plugin class or instance, got {plugin!r}")
        else:
            instance = plugin
            if isinstance(instance, Plugin) and instance.plugins is None:
                instance.__preinit__(self, plugin_args)

        if name is None:
            name = instance.name if self.is_modern(instance) else type(instance).__name__
        if not self.is_modern(instance):
            self.logger.warning(
                f"Loading legacy plugin {name}. It doesn't implement PluginInterface and relies on deprecated events"
            )

        self.plugins[name] = instance
        self._plugin_name_map[name.lower()] = instance
        class_name = type(instance).__name__
        if class_name != name:
            self.aliases[class_name] = name
        self.revision += 1
        return instance

    def get_plugin_by_name(self, plugin_name: str) -> Any:
        """
        Retrieve a loaded plugin by name, case-insensitively.

        :return: The plugin instance if found, else None.
        """
        if plugin_name in self.aliases:
            plugin_name = self.aliases[plugin_name]
        return self._plugin_name_map.get(plugin_name.lower(), None)

    def legacy_plugins(self) -> List[Any]:
        return [plugin for plugin in self.plugins.values() if not self.is_modern(plugin)]

    def values(self):
        return self.plugins.values()

    def items(self):
        return self.plugins.items()

    def __contains__(self, plugin: str) -> bool:
        return self.get_plugin_by_name(plugin) is not None

    def __getitem__(self, plugin: str) -> Any:
        p = self.get_plugin_by_name(plugin)
        if p is None:
            raise KeyError(plugin)
        return p

    def __iter__(self) -> Iterator[Any]:
        return iter(list(self.plugins.values()))

    def __len__(self) -> int:
        return len(self.plugins)
