from dataclasses import dataclass

from bangs.models import BangDefinition
from bangs.models import Database

SENTINEL = "!"
DEFAULT_LIMIT = 8


@dataclass(frozen=True)
class Query:
    """A user query split into its bang alias and search text."""

    raw_text: str
    alias_token: str
    remainder: str


@dataclass(frozen=True)
class Candidate:
    """A matched bang and the search text to substitute into it."""

    definition: BangDefinition
    rank: int
    remainder: str = ""


def parse_query(raw_text: str) -> Query | None:
    """Split "!w foo bar" into the alias "w" and the remainder "foo bar".

    Return None when the text does not start with a bang.
    """
    if not raw_text.startswith(SENTINEL):
        return None
    body = raw_text[len(SENTINEL) :]
    if not body or body[0].isspace():
        return None

    parts = body.split(maxsplit=1)
    alias_token = parts[0]
    remainder = parts[1].strip() if len(parts) > 1 else ""
    return Query(raw_text=raw_text, alias_token=alias_token, remainder=remainder)


def match(
    database: Database,
    raw_text: str,
    *,
    prefix_scan: bool = True,
    limit: int = DEFAULT_LIMIT,
) -> list[Candidate]:
    """Return the bangs matching ``raw_text``, best first.

    An exact alias gives a single candidate. Otherwise, when ``prefix_scan``
    is on, every alias starting with the typed token is returned, shorter
    aliases first, at most ``limit`` of them.
    """
    query = parse_query(raw_text)
    if query is None or limit <= 0:
        return []

    exact = database.get(query.alias_token)
    if exact is not None:
        return [Candidate(definition=exact, rank=0, remainder=query.remainder)]
    if not prefix_scan:
        return []

    candidates: list[Candidate] = []
    for rank, definition in enumerate(database.with_prefix(query.alias_token)):
        if rank >= limit:
            break
        candidates.append(
            Candidate(definition=definition, rank=rank, remainder=query.remainder),
        )
    return candidates
