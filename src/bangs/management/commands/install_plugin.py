import shutil
from importlib.resources import files
from pathlib import Path
from typing import Any

from django.conf import settings
from django.core.management import call_command
from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser

from bangs.paths import local_plugin_dir

EXECUTABLE = "pop-bangs"
MANIFEST = "plugin.ron"


def render_manifest(executable: str) -> str:
    template = files("bangs").joinpath(MANIFEST).read_text(encoding="utf-8")
    return template.replace("{bin}", executable)


class Command(BaseCommand):
    help = "Install the pop-launcher manifest and the bangs database."
    requires_system_checks: list[str] = []

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--bin",
            default=None,
            help=f"Path of the {EXECUTABLE} executable the launcher should run.",
        )
        parser.add_argument(
            "--skip-database",
            action="store_true",
            help="Do not download the database.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        executable = options["bin"] or shutil.which(EXECUTABLE)
        if not executable:
            msg = f"{EXECUTABLE} executable not found, pass --bin"
            raise CommandError(msg)

        plugin_dir = local_plugin_dir(
            settings.BANGS_PLUGIN_DIRS,
            settings.BANGS_PLUGIN_NAME,
        )
        plugin_dir.mkdir(parents=True, exist_ok=True)
        manifest = plugin_dir / MANIFEST
        manifest.write_text(
            render_manifest(str(Path(executable).resolve())),
            encoding="utf-8",
        )
        self.stdout.write(f"Wrote {manifest}")

        database = plugin_dir / settings.BANGS_DATABASE_FILENAME
        if options["skip_database"] or database.exists():
            return
        call_command("fetch_bangs", output=database, stdout=self.stdout)
