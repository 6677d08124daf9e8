"""Package-wide constants."""

from __future__ import annotations

PACKAGE_VERSION = "0.3.0"

# Config search order after an explicit --config and $CODETAG_CONFIG.
# "<argv0>.yaml" is prepended at runtime by the loader.
CONFIG_SEARCH_PATHS = ("~/.codetag.yaml", "/etc/codetag.yaml")
CONFIG_ENV_VAR = "CODETAG_CONFIG"

TAGS_KEY = "tags"
RESERVED_NAMESPACE_PREFIX = "_"
EMPTY_NAMESPACE_ALIAS = "_none"
FALLBACK_OPTION = "fallback"

DEFAULT_TAG_COMMAND = ("tmsu", "tag")
