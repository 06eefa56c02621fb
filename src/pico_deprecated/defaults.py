# Default values for the legacy compatibility layer

# Pre-1.0 config location, relative to the root dir. Since 1.0 the config
# lives in config/config.yaml
legacy_config_name = "config.yaml"
config_dir = "config"
config_name = "config.yaml"

# Plugins that are enabled alongside the adapter unless the user decided
# otherwise. Both slow down page loading considerably.
parse_pages_content_plugin = "PicoParsePagesContent"
excerpt_plugin = "PicoExcerpt"
companion_plugins = (parse_pages_content_plugin, excerpt_plugin)
