import logging
from pathlib import Path

import requests

from bangs.models import PLACEHOLDER
from bangs.models import Database
from bangs.models import load

logger = logging.getLogger(__name__)

DEFAULT_DATABASE_URL = "https://duckduckgo.com/bang.js"


def fetch_database(
    url: str = DEFAULT_DATABASE_URL,
    timeout: float = 8,
    placeholder: str = PLACEHOLDER,
) -> tuple[bytes, Database]:
    """Download a bang list and return the raw body with its parsed Database.

    Raises requests.RequestException on network or HTTP errors and
    UnreadableDatabaseError when the body is not a bang list.
    """
    logger.info("Downloading bangs database from %s", url)
    resp = requests.get(url, timeout=timeout)
    resp.raise_for_status()
    return resp.content, load(resp.content, placeholder)


def download_database(
    destination: Path,
    url: str = DEFAULT_DATABASE_URL,
    timeout: float = 8,
    placeholder: str = PLACEHOLDER,
) -> Database:
    """Download the database and store it at ``destination``."""
    content, database = fetch_database(url, timeout, placeholder)
    destination.parent.mkdir(parents=True, exist_ok=True)
    # write next to the target first so readers never see a partial file
    partial = destination.with_name(destination.name + ".part")
    partial.write_bytes(content)
    partial.replace(destination)
    logger.info("Saved %d bangs to %s", len(database), destination)
    return database
