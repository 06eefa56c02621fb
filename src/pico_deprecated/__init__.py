from .common import getColoredLogger
from .plugin_manager import Plugin, PluginInterface, PluginRegistry
from .adapter import LegacyEventAdapter

from os.path import join, dirname

VERSION = open(join(dirname(__file__), "version.txt")).read().strip()

__all__ = [
    "getColoredLogger",
    "LegacyEventAdapter",
    "Plugin",
    "PluginInterface",
    "PluginRegistry",
    "VERSION",
]
