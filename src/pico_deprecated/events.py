"""
pico_deprecated.events
======================

The deprecated events and how they are dispatched.

Every modern event maps to zero or more deprecated events. A deprecated
event is delivered to each loaded plugin that defines a method of that name,
in load order. Handlers may return updated values for the event's writable
parameters:

- ``None`` leaves every argument as it is. Mutating a mutable argument in
  place is still seen by later handlers and by the host.
- For events with one writable parameter, any other value replaces it.
- For events with several writable parameters, a mapping of parameter name
  to new value replaces those parameters.

Updated values are passed on to the next handler.
"""

import dataclasses
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Tuple

from .common import getColoredLogger

logger = getColoredLogger("pico_deprecated.events")


@dataclasses.dataclass(frozen=True)
class LegacyEvent:
    name: str
    params: Tuple[str, ...] = ()
    # Parameters handlers may replace. Defaults to all of them
    writable: Optional[Tuple[str, ...]] = None

    def __post_init__(self):
        if self.writable is None:
            object.__setattr__(self, "writable", self.params)
        unknown = set(self.writable) - set(self.params)
        if unknown:
            raise ValueError(f"{self.name}: writable parameters {sorted(unknown)} are not parameters")

    def apply_result(self, values: List[Any], result: Any) -> List[Any]:
        """
        Fold a handler's return value into the argument list.

        :param values: Current arguments, in parameter order.
        :type values: List[Any]
        :param result: What the handler returned.
        :type result: Any

        :return: The arguments for the next handler.
        :rtype: List[Any]

        :raises TypeError: If a multi-parameter event got something other
            than None or a mapping.
        :raises KeyError: If the mapping names a parameter that isn't writable.
        """
        if result is None or not self.writable:
            return values

        values = list(values)
        if len(self.writable) == 1:
            values[self.params.index(self.writable[0])] = result
            return values

        if not isinstance(result, Mapping):
            raise TypeError(
                f"Handler for {self.name} must return None or a mapping of "
                f"{', '.join(self.writable)}, got {type(result).__name__}")
        for key, value in result.items():
            if key not in self.writable:
                raise KeyError(f"{self.name} has no writable parameter {key!r}")
            values[self.params.index(key)] = value
        return values


# Modern event -> deprecated events it triggers, in order
EVENT_MAP: Dict[str, Tuple[LegacyEvent, ...]] = {
    "on_plugins_loaded": (LegacyEvent("plugins_loaded"),),
    "on_config_loaded": (LegacyEvent("config_loaded", ("config",)),),
    "on_request_url": (LegacyEvent("request_url", ("url",)),),
    # Only remembers the file for after_load_content
    "on_request_file": (),
    "on_content_loading": (LegacyEvent("before_load_content", ("file",)),),
    "on_content_loaded": (LegacyEvent("after_load_content", ("file", "raw_content")),),
    "on_404_content_loading": (LegacyEvent("before_404_load_content", ("file",)),),
    "on_404_content_loaded": (LegacyEvent("after_404_load_content", ("file", "raw_content")),),
    "on_meta_headers": (LegacyEvent("before_read_file_meta", ("headers",)),),
    "on_meta_parsed": (LegacyEvent("file_meta", ("meta",)),),
    "on_content_parsing": (LegacyEvent("before_parse_content", ("raw_content",)),),
    "on_content_parsed": (
        LegacyEvent("after_parse_content", ("content",)),
        # deprecated since v0.8
        LegacyEvent("content_parsed", ("content",)),
    ),
    "on_single_page_loaded": (LegacyEvent("get_page_data", ("pages", "meta"), writable=("pages",)),),
    "on_pages_loaded": (
        LegacyEvent("get_pages", ("pages", "current_page", "previous_page", "next_page")),
    ),
    "on_template_engine_registration": (LegacyEvent("before_twig_register"),),
    "on_page_rendering": (
        LegacyEvent("before_render", ("variables", "template_engine", "template_name")),
    ),
    "on_page_rendered": (LegacyEvent("after_render", ("output",)),),
}

LEGACY_EVENTS: Dict[str, LegacyEvent] = {
    event.name: event for events in EVENT_MAP.values() for event in events
}


class LegacyHandlerIndex:
    """
    Which loaded plugins handle which deprecated event.

    Built once from the plugin registry instead of looking methods up on
    every dispatch.
    """

    def __init__(self, plugins: Iterable[Any] = ()) -> None:
        self.handlers: Dict[str, List[Callable[..., Any]]] = {name: [] for name in LEGACY_EVENTS}
        for plugin in plugins:
            self.add(plugin)

    def add(self, plugin: Any) -> None:
        for name in LEGACY_EVENTS:
            handler = getattr(plugin, name, None)
            if callable(handler):
                self.handlers[name].append(handler)

    def handlers_for(self, legacy_name: str) -> List[Callable[..., Any]]:
        return self.handlers.get(legacy_name, [])

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self.handlers.values())

    def dispatch(self, event: LegacyEvent, *args: Any) -> List[Any]:
        """
        Call every handler of ``event`` in load order.

        Exceptions raised by a handler are not caught; the remaining handlers
        don't run.

        :param event: The deprecated event.
        :type event: LegacyEvent
        :param args: Arguments, in parameter order.

        :return: The arguments after the last handler ran.
        :rtype: List[Any]
        """
        if len(args) != len(event.params):
            raise TypeError(f"{event.name} takes {len(event.params)} arguments, got {len(args)}")

        values = list(args)
        handlers = self.handlers_for(event.name)
        if handlers:
            logger.debug(f"Triggering deprecated event {event.name} on {len(handlers)} handler(s)")
        for handler in handlers:
            result = handler(*values)
            values = event.apply_result(values, result)
        return values
