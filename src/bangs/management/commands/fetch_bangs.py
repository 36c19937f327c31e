from pathlib import Path
from typing import Any

import requests
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser

from bangs.fetch import download_database
from bangs.models import DataError
from bangs.paths import local_plugin_dir


def default_destination() -> Path:
    return (
        local_plugin_dir(settings.BANGS_PLUGIN_DIRS, settings.BANGS_PLUGIN_NAME)
        / settings.BANGS_DATABASE_FILENAME
    )


class Command(BaseCommand):
    help = "Download the bangs database into the local plugin directory."
    requires_system_checks: list[str] = []

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument("--url", default=None, help="Database URL.")
        parser.add_argument(
            "--output",
            type=Path,
            default=None,
            help="Where to store the database.",
        )

    def handle(self, *args: Any, **options: Any) -> None:
        url = options["url"] or settings.BANGS_DATABASE_URL
        destination = options["output"] or default_destination()
        try:
            database = download_database(
                destination,
                url=url,
                timeout=settings.BANGS_FETCH_TIMEOUT,
                placeholder=settings.BANGS_PLACEHOLDER,
            )
        except requests.RequestException as exc:
            msg = f"Download of {url} failed: {exc}"
            raise CommandError(msg) from exc
        except DataError as exc:
            msg = f"{url} is not a bangs database: {exc}"
            raise CommandError(msg) from exc

        self.stdout.write(
            self.style.SUCCESS(
                f"Saved {len(database)} bangs to {destination} "
                f"({database.defects} skipped)",
            ),
        )
