"""Django settings for the pop-bangs launcher plugin."""

import os

TRUE_VALUES = {"1", "true", "yes", "on"}
FALSE_VALUES = {"0", "false", "no", "off"}


def env_int(name: str, default: int) -> int:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except ValueError:
        msg = f"{name} environment variable must be an integer, got {value!r}"
        raise ValueError(msg) from None


def env_bool(name: str, default: bool) -> bool:
    value = os.environ.get(name)
    if value is None or value == "":
        return default
    if value.lower() in TRUE_VALUES:
        return True
    if value.lower() in FALSE_VALUES:
        return False
    msg = f"{name} environment variable must be a boolean, got {value!r}"
    raise ValueError(msg)


DEBUG = env_bool("DEBUG", False)

INSTALLED_APPS = [
    "bangs",
]

# The plugin keeps its bangs in memory, no SQL database is used.
DATABASES: dict[str, dict[str, str]] = {}

USE_TZ = True

# stdout carries the launcher protocol, so every log line goes to stderr.
LOGGING = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "plugin": {
            "format": "[bangs] %(levelname)s %(name)s: %(message)s",
        },
    },
    "handlers": {
        "stderr": {
            "class": "logging.StreamHandler",
            "stream": "ext://sys.stderr",
            "formatter": "plugin",
        },
    },
    "loggers": {
        "bangs": {
            "handlers": ["stderr"],
            "level": os.environ.get(
                "BANGS_LOG_LEVEL",
                "DEBUG" if DEBUG else "WARNING",
            ).upper(),
            "propagate": False,
        },
    },
}

# Bangs plugin

BANGS_PLUGIN_NAME = "bangs"
BANGS_DATABASE_FILENAME = "db.json"
# Lowest precedence first, the user's directory last.
BANGS_PLUGIN_DIRS = [
    "/usr/lib/pop-launcher/plugins",
    "/etc/pop-launcher/plugins",
    "~/.local/share/pop-launcher/plugins",
]
BANGS_DATABASE_URL = os.environ.get(
    "BANGS_DATABASE_URL",
    "https://duckduckgo.com/bang.js",
)
BANGS_FETCH_TIMEOUT = env_int("BANGS_FETCH_TIMEOUT", 8)
BANGS_RESULT_LIMIT = env_int("BANGS_RESULT_LIMIT", 8)
BANGS_PREFIX_SCAN = env_bool("BANGS_PREFIX_SCAN", True)
BANGS_OPEN_COMMAND = os.environ.get("BANGS_OPEN_COMMAND", "xdg-open").split()
BANGS_PLACEHOLDER = "{{{s}}}"
BANGS_ICON = "web-browser"
