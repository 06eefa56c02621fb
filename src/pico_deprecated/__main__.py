#!/usr/bin/env python3

import logging
import os
import sys
from os.path import join

import click
import yaml

from pico_deprecated import VERSION, getColoredLogger

from . import defaults
from .common import dump_yaml, load_legacy_config, load_yaml, merge_legacy_config
from .events import EVENT_MAP

logger = getColoredLogger("pico_deprecated")

PACKAGE_LOGGERS = (
    "pico_deprecated",
    "pico_deprecated.config",
    "pico_deprecated.constants",
    "pico_deprecated.events",
    "pico_deprecated.plugin_manager",
)


@click.group()
@click.version_option(VERSION)
@click.option("-v", "--verbose", count=True)
def main(verbose):
    if verbose:
        for name in PACKAGE_LOGGERS:
            getColoredLogger(name).setLevel(logging.DEBUG)


@main.command()
def events():
    """Show which deprecated events each event triggers"""
    for modern, legacy_events in EVENT_MAP.items():
        if not legacy_events:
            click.echo(f"{modern:<34} -")
            continue
        for event in legacy_events:
            click.echo(f"{modern:<34} {event.name}({', '.join(event.params)})")


@main.command()
@click.argument("root", type=click.Path(exists=True, file_okay=False))
@click.option("--config", "config_path", default=None,
              help="Path to the config file, defaults to ROOT/config/config.yaml")
def config(root, config_path):
    """Print the config with the deprecated root config.yaml applied"""
    if config_path is None:
        config_path = join(root, defaults.config_dir, defaults.config_name)

    if os.path.isfile(config_path):
        try:
            modern = load_yaml(config_path)
        except UnicodeDecodeError:
            logger.error(f"Config file {config_path} is not a valid unicode YAML file")
            sys.exit(1)
        except (OSError, yaml.YAMLError) as e:
            logger.error(f"Unable to load config file {config_path}: {e}")
            sys.exit(1)
    else:
        logger.info(f"Config file {config_path} not found, starting from an empty config")
        modern = {}

    if modern is None:
        modern = {}
    if not isinstance(modern, dict):
        logger.error(f"Config file {config_path} does not contain a mapping")
        sys.exit(1)

    legacy_path = join(root, defaults.legacy_config_name)
    legacy = load_legacy_config(legacy_path)
    if legacy is not None:
        logger.warning(f"Applying deprecated config {legacy_path}")

    click.echo(dump_yaml(merge_legacy_config(modern, legacy)), nl=False)


if __name__ == "__main__":
    main()
