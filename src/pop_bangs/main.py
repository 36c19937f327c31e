"""Start script used as the plugin executable in plugin.ron."""

import os
import sys

from django.core.management import execute_from_command_line

DEFAULT_COMMAND = "serve"


def command_line(argv: list[str]) -> list[str]:
    """Build the Django command line, running the plugin when no command is given.

    Args:
        argv: The process arguments, program name first.

    """
    program, *args = argv or ["pop-bangs"]
    if not args or (
        args[0].startswith("-") and args[0] not in ("-h", "--help", "--version")
    ):
        args = [DEFAULT_COMMAND, *args]
    return [program, *args]


def main() -> None:
    """Configure Django and run the requested management command."""
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pop_bangs.settings")
    execute_from_command_line(command_line(sys.argv))


if __name__ == "__main__":
    main()
