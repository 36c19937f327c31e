"""Run the bangs plugin on stdin/stdout for pop-launcher."""

import functools
import logging
import sys
from pathlib import Path
from typing import Any

import requests
from django.conf import settings
from django.core.management.base import BaseCommand
from django.core.management.base import CommandError
from django.core.management.base import CommandParser

from bangs.fetch import download_database
from bangs.models import DataError
from bangs.models import Database
from bangs.models import load_paths
from bangs.paths import find_database_files
from bangs.paths import local_plugin_dir
from bangs.protocol import BangsPlugin
from bangs.protocol import open_url

logger = logging.getLogger(__name__)


def database_paths(download: bool) -> list[Path]:
    """Find the database files, downloading the default one if none exist."""
    paths = find_database_files(
        settings.BANGS_PLUGIN_DIRS,
        settings.BANGS_PLUGIN_NAME,
        settings.BANGS_DATABASE_FILENAME,
    )
    if paths or not download:
        return paths

    logger.warning("No bangs database found, downloading the default database")
    destination = (
        local_plugin_dir(settings.BANGS_PLUGIN_DIRS, settings.BANGS_PLUGIN_NAME)
        / settings.BANGS_DATABASE_FILENAME
    )
    try:
        download_database(
            destination,
            url=settings.BANGS_DATABASE_URL,
            timeout=settings.BANGS_FETCH_TIMEOUT,
            placeholder=settings.BANGS_PLACEHOLDER,
        )
    except (requests.RequestException, DataError, OSError) as exc:
        logger.error("Default database download failed: %s", exc)  # noqa: TRY400
        return []
    return [destination]


class Command(BaseCommand):
    help = "Answer pop-launcher requests read from stdin."
    requires_system_checks: list[str] = []
    stealth_options = ("stdin",)

    def add_arguments(self, parser: CommandParser) -> None:
        parser.add_argument(
            "--database",
            action="append",
            type=Path,
            dest="databases",
            metavar="PATH",
            help="Bang database file, may be repeated. Later files win.",
        )
        parser.add_argument(
            "--no-download",
            action="store_false",
            dest="download",
            help="Do not download the default database when none is found.",
        )

    def load_database(self, options: dict[str, Any]) -> Database:
        paths = options["databases"] or database_paths(options["download"])
        try:
            return load_paths(paths, settings.BANGS_PLACEHOLDER)
        except DataError as exc:
            msg = f"Cannot load bangs database: {exc}"
            raise CommandError(msg) from exc

    def handle(self, *args: Any, **options: Any) -> None:
        database = self.load_database(options)
        if database.defects:
            logger.warning("Skipped %d malformed bangs", database.defects)

        plugin = BangsPlugin(
            database,
            self.stdout,
            opener=functools.partial(open_url, command=settings.BANGS_OPEN_COMMAND),
            prefix_scan=settings.BANGS_PREFIX_SCAN,
            limit=settings.BANGS_RESULT_LIMIT,
            icon=settings.BANGS_ICON,
            placeholder=settings.BANGS_PLACEHOLDER,
        )
        plugin.run(options.get("stdin") or sys.stdin)
