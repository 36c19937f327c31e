"""Global pytest configuration for tests."""

import json
import os
from typing import Any

import django
import pytest
from django.conf import settings

if not settings.configured:
    os.environ.setdefault("DJANGO_SETTINGS_MODULE", "pop_bangs.settings")
    django.setup()

from bangs.models import Database
from bangs.models import load

from .constants import RECORDS


@pytest.fixture
def records() -> list[dict[str, Any]]:
    """Return a copy of the sample bang records."""
    return [dict(record) for record in RECORDS]


@pytest.fixture
def database(records: list[dict[str, Any]]) -> Database:
    """Build a database from the sample records."""
    return load(json.dumps(records))

