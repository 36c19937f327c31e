"""In-memory models for the bangs database."""

import json
import logging
from collections.abc import Iterable
from collections.abc import Iterator
from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Any

logger = logging.getLogger(__name__)

PLACEHOLDER = "{{{s}}}"

# DuckDuckGo's bang.js uses single letter keys
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "alias": ("t", "alias", "trigger"),
    "name": ("s", "name"),
    "url_template": ("u", "url", "url_template"),
    "category": ("c", "category"),
    "subcategory": ("sc", "subcategory"),
    "domain": ("d", "domain"),
    "relevance": ("r", "relevance"),
}


class DataError(Exception):
    """Base error for bang database problems."""


class UnreadableDatabaseError(DataError):
    """The database source is not a readable list of records."""


class InvalidRecordError(DataError):
    """A single record cannot be turned into a bang definition."""


@dataclass(frozen=True)
class BangDefinition:
    """A bang shortcut for quick search redirection."""

    alias: str
    name: str
    # e.g. 'https://en.wikipedia.org/wiki/Special:Search?search={{{s}}}'
    url_template: str
    category: str = ""
    subcategory: str = ""
    domain: str = ""
    relevance: int = 0

    def __str__(self) -> str:
        """Return string representation of the bang."""
        return f"!{self.alias} -> {self.url_template}"

    @property
    def key(self) -> str:
        return normalize_alias(self.alias)

    @property
    def title(self) -> str:
        """Return the launcher item name for the bang."""
        if self.domain:
            return f"{self.alias} | {self.name} ({self.domain})"
        return f"{self.alias} | {self.name}"

    @property
    def description(self) -> str:
        """Return the launcher item description for the bang."""
        return " > ".join(part for part in (self.category, self.subcategory) if part)


def normalize_alias(alias: str) -> str:
    """Return the lookup key of an alias."""
    return alias.lower()


def _field(record: Mapping[str, Any], name: str) -> Any:
    for key in FIELD_ALIASES[name]:
        if key in record:
            return record[key]
    return None


def _optional_text(record: Mapping[str, Any], name: str) -> str:
    value = _field(record, name)
    return value if isinstance(value, str) else ""


def parse_record(record: Any, placeholder: str = PLACEHOLDER) -> BangDefinition:
    """Build a bang definition from one decoded JSON record.

    Raises InvalidRecordError when the record breaks the definition
    invariants: a non-empty alias without whitespace, a name and a URL
    template holding exactly one placeholder.
    """
    if not isinstance(record, Mapping):
        raise InvalidRecordError(f"record is not an object: {record!r}")

    alias = _field(record, "alias")
    if not isinstance(alias, str) or not alias or any(c.isspace() for c in alias):
        raise InvalidRecordError(f"invalid alias: {alias!r}")

    name = _field(record, "name")
    if not isinstance(name, str):
        raise InvalidRecordError(f"!{alias}: missing name")

    url_template = _field(record, "url_template")
    if not isinstance(url_template, str):
        raise InvalidRecordError(f"!{alias}: missing url template")
    if url_template.count(placeholder) != 1:
        raise InvalidRecordError(
            f"!{alias}: url template must contain {placeholder} exactly once",
        )

    relevance = _field(record, "relevance")
    if not isinstance(relevance, int) or isinstance(relevance, bool):
        relevance = 0

    return BangDefinition(
        alias=alias,
        name=name,
        url_template=url_template,
        category=_optional_text(record, "category"),
        subcategory=_optional_text(record, "subcategory"),
        domain=_optional_text(record, "domain"),
        relevance=relevance,
    )


class Database(Mapping[str, BangDefinition]):
    """Read-only mapping of normalized alias to bang definition."""

    def __init__(
        self,
        definitions: Iterable[BangDefinition] = (),
        defects: int = 0,
    ) -> None:
        bangs: dict[str, BangDefinition] = {}
        # later definitions overwrite earlier ones
        for definition in definitions:
            bangs[definition.key] = definition
        self._bangs = MappingProxyType(bangs)
        self._by_length = tuple(sorted(bangs, key=lambda key: (len(key), key)))
        self.defects = defects

    def __getitem__(self, alias: str) -> BangDefinition:
        return self._bangs[normalize_alias(alias)]

    def __iter__(self) -> Iterator[str]:
        return iter(self._bangs)

    def __len__(self) -> int:
        return len(self._bangs)

    def __contains__(self, alias: object) -> bool:
        return isinstance(alias, str) and normalize_alias(alias) in self._bangs

    def __repr__(self) -> str:
        return f"<Database: {len(self)} bangs, {self.defects} defects>"

    def get(self, alias: str, default: Any = None) -> Any:  # type: ignore[override]
        """Return the definition for ``alias`` ignoring case, or ``default``."""
        return self._bangs.get(normalize_alias(alias), default)

    def with_prefix(self, prefix: str) -> Iterator[BangDefinition]:
        """Yield definitions whose alias starts with ``prefix``.

        Shorter aliases come first, equal lengths in alphabetical order.
        """
        prefix = normalize_alias(prefix)
        for key in self._by_length:
            if key.startswith(prefix):
                yield self._bangs[key]


def _decode(source: str | bytes) -> list[Any]:
    try:
        records = json.loads(source)
    except (UnicodeDecodeError, json.JSONDecodeError, RecursionError) as exc:
        raise UnreadableDatabaseError(f"not valid JSON: {exc}") from exc
    if not isinstance(records, list):
        raise UnreadableDatabaseError(
            f"expected a list of bangs, got {type(records).__name__}",
        )
    return records


def _parse_records(
    records: Iterable[Any],
    placeholder: str,
) -> tuple[list[BangDefinition], int]:
    definitions: list[BangDefinition] = []
    defects = 0
    for record in records:
        try:
            definitions.append(parse_record(record, placeholder))
        except InvalidRecordError as exc:
            defects += 1
            logger.debug("Skipping bang record: %s", exc)
    return definitions, defects


def load(source: str | bytes, placeholder: str = PLACEHOLDER) -> Database:
    """Parse a serialized bang list into a Database.

    Malformed records are skipped and counted in ``Database.defects``.
    Raises UnreadableDatabaseError when ``source`` is not a JSON array.
    """
    definitions, defects = _parse_records(_decode(source), placeholder)
    database = Database(definitions, defects=defects)
    logger.info("Loaded %d bangs (%d skipped)", len(database), defects)
    return database


def load_paths(
    paths: Iterable[Path],
    placeholder: str = PLACEHOLDER,
) -> Database:
    """Load and merge database files, later files winning on duplicates."""
    definitions: list[BangDefinition] = []
    defects = 0
    seen_any = False
    for path in paths:
        seen_any = True
        try:
            source = path.read_bytes()
        except OSError as exc:
            raise UnreadableDatabaseError(f"cannot read {path}: {exc}") from exc
        try:
            records = _decode(source)
        except UnreadableDatabaseError as exc:
            raise UnreadableDatabaseError(f"{path}: {exc}") from exc
        parsed, skipped = _parse_records(records, placeholder)
        definitions.extend(parsed)
        defects += skipped
        logger.info("Read %d bangs from %s (%d skipped)", len(parsed), path, skipped)

    if not seen_any:
        raise UnreadableDatabaseError("no bang database file found")

    return Database(definitions, defects=defects)
