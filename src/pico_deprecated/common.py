import logging
import re
from typing import Any, Dict, Mapping, Optional

import coloredlogs
import yaml
from yamlcore import CoreDumper, CoreLoader


# Multi-line strings
# strings are represented as a literal block instead of "line1\nline2"
def literal_presenter(dumper, data):
    # Multiline strings get |, single line strings get nothing fancy
    if "\n" in data:
        return dumper.represent_scalar("tag:yaml.org,2002:str", data, style="|")
    return dumper.represent_scalar("tag:yaml.org,2002:str", data)


CoreDumper.add_representer(str, literal_presenter)


class PathHighlightingFormatter(coloredlogs.ColoredFormatter):
    def format(self, record):
        message = super().format(record)
        # Highlight anything that looks like an absolute path
        message = re.sub(
            r"(/[^ ]*)", coloredlogs.ansi_wrap(r"\1", color="blue", bold=True), message
        )
        return message


def getColoredLogger(name):
    """
    Get or create a coloredlogger at INFO.
    """
    logger = logging.getLogger(name)
    level = logging.INFO

    formatter = PathHighlightingFormatter(
        fmt="%(asctime)s %(name)s %(levelname)s %(message)s", datefmt="%H:%M:%S"
    )

    # Check if the logger already has handlers to prevent duplicate logs
    if not logger.handlers:
        handler = logging.StreamHandler()
        logger.setLevel(level)
        handler.setLevel(level)
        handler.setFormatter(formatter)
        logger.addHandler(handler)

    # pico_deprecated.adapter should not also log for pico_deprecated
    logger.propagate = False

    if not hasattr(logger, 'custom_set_level'):
        original_set_level = logger.setLevel

        def custom_set_level(level):
            # Call the original method, not the monkeypatched one
            original_set_level(level)
            for handler in logger.handlers:
                handler.setLevel(level)

        logger.custom_set_level = custom_set_level
        logger.setLevel = custom_set_level

    return logger


logger = getColoredLogger("pico_deprecated.config")


def load_yaml(path):
    """Load a YAML document with the YAML 1.2 core schema"""
    with open(path, "r") as f:
        return yaml.load(f, Loader=CoreLoader)


def dump_yaml(data) -> str:
    return yaml.dump(data, sort_keys=False, Dumper=CoreDumper)


def load_legacy_config(path) -> Optional[Dict[str, Any]]:
    '''
    Load a pre-1.0 config file. Returns None if the file does not exist,
    can't be read or parsed, or does not hold a mapping.
    '''
    try:
        legacy = load_yaml(path)
    except FileNotFoundError:
        return None
    except (OSError, UnicodeDecodeError, yaml.YAMLError) as e:
        logger.debug(f"Ignoring unreadable legacy config {path}: {e}")
        return None

    if not isinstance(legacy, dict):
        logger.debug(f"Ignoring legacy config {path}: expected a mapping, got {type(legacy).__name__}")
        return None
    return legacy


def merge_legacy_config(config: Mapping[str, Any], legacy: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
    """
    Merge a legacy config on top of a modern one. Legacy values win on
    conflict, modern-only keys survive unchanged. Legacy keys come first.

    :param config: The already loaded modern config.
    :type config: Mapping[str, Any]
    :param legacy: The legacy config, or None.
    :type legacy: Optional[Mapping[str, Any]]

    :return: A new merged mapping.
    :rtype: Dict[str, Any]
    """
    if not legacy:
        # Empty file, possibly one with all comments
        return dict(config)

    merged = dict(legacy)
    for key, value in config.items():
        if key not in merged:
            merged[key] = value
        elif merged[key] != value:
            logger.debug(f"legacy config overrides {key}: `{value!r}` → `{merged[key]!r}`")
    return merged
