"""pop-launcher plugin protocol: JSON messages, one per line."""

import itertools
import json
import logging
import subprocess
from collections.abc import Callable
from collections.abc import Iterable
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any
from typing import Protocol

from bangs.expand import TemplateError
from bangs.expand import expand
from bangs.matcher import DEFAULT_LIMIT
from bangs.matcher import Candidate
from bangs.matcher import match
from bangs.models import PLACEHOLDER
from bangs.models import Database

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Search:
    text: str


@dataclass(frozen=True)
class Activate:
    id: int


@dataclass(frozen=True)
class Complete:
    id: int


@dataclass(frozen=True)
class Exit:
    pass


@dataclass(frozen=True)
class Interrupt:
    pass


@dataclass(frozen=True)
class Unknown:
    line: str


Request = Search | Activate | Complete | Exit | Interrupt | Unknown

FINISHED = "Finished"
CLOSE = "Close"


def _candidate_id(value: Any) -> int | None:
    if isinstance(value, int) and not isinstance(value, bool) and value >= 0:
        return value
    return None


def decode_request(line: str) -> Request:
    """Decode one request line, returning Unknown for anything unexpected."""
    try:
        message = json.loads(line)
    except (json.JSONDecodeError, RecursionError):
        return Unknown(line)

    if message == "Exit":
        return Exit()
    if message == "Interrupt":
        return Interrupt()
    if not isinstance(message, dict):
        return Unknown(line)

    if isinstance(message.get("Search"), str):
        return Search(message["Search"])
    for key, kind in (("Activate", Activate), ("Complete", Complete)):
        if key in message:
            candidate_id = _candidate_id(message[key])
            if candidate_id is not None:
                return kind(candidate_id)
    return Unknown(line)


def append_response(
    candidate_id: int,
    candidate: Candidate,
    icon: str | None = None,
) -> dict[str, Any]:
    definition = candidate.definition
    return {
        "Append": {
            "id": candidate_id,
            "name": definition.title,
            "description": definition.description,
            "keywords": None,
            "icon": {"Name": icon} if icon else None,
            "exec": None,
            "window": None,
        },
    }


def fill_response(candidate: Candidate) -> dict[str, str]:
    """Return the response replacing the launcher input with the full bang."""
    return {"Fill": f"!{candidate.definition.alias} {candidate.remainder}"}


class CandidateTable:
    """Candidates of the most recent search, keyed by their result id.

    Ids keep increasing across searches so an id handed out for an older
    search never points at a newer candidate.
    """

    def __init__(self) -> None:
        self._ids = itertools.count()
        self._candidates: dict[int, Candidate] = {}

    def __len__(self) -> int:
        return len(self._candidates)

    def reset(self, candidates: Iterable[Candidate]) -> list[tuple[int, Candidate]]:
        """Replace the table with ``candidates`` and return them with new ids."""
        self._candidates = {next(self._ids): candidate for candidate in candidates}
        return list(self._candidates.items())

    def get(self, candidate_id: int) -> Candidate | None:
        return self._candidates.get(candidate_id)


class Writer(Protocol):
    def write(self, text: str) -> Any: ...

    def flush(self) -> Any: ...


def open_url(url: str, command: Sequence[str] = ("xdg-open",)) -> None:
    """Open ``url`` with the desktop's default handler without waiting."""
    subprocess.Popen(  # noqa: S603
        [*command, url],
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


class BangsPlugin:
    """Answer launcher requests from the bangs database."""

    def __init__(
        self,
        database: Database,
        out: Writer,
        *,
        opener: Callable[[str], None] = open_url,
        prefix_scan: bool = True,
        limit: int = DEFAULT_LIMIT,
        icon: str | None = None,
        placeholder: str = PLACEHOLDER,
    ) -> None:
        self.database = database
        self.out = out
        self.opener = opener
        self.prefix_scan = prefix_scan
        self.limit = limit
        self.icon = icon
        self.placeholder = placeholder
        self.candidates = CandidateTable()

    def send(self, response: Any) -> None:
        self.out.write(json.dumps(response) + "\n")
        self.out.flush()

    def run(self, lines: Iterable[str]) -> None:
        """Handle requests until Exit or the end of input."""
        for line in lines:
            line = line.strip()
            if not line:
                continue
            if not self.handle(decode_request(line)):
                break

    def handle(self, request: Request) -> bool:
        """Handle one request. Return False when the loop should stop."""
        if isinstance(request, Exit):
            return False
        if isinstance(request, Search):
            self.search(request.text)
        elif isinstance(request, Activate):
            self.activate(request.id)
        elif isinstance(request, Complete):
            self.complete(request.id)
        elif isinstance(request, Unknown):
            logger.warning("Ignoring unsupported request: %s", request.line)
            self.send(FINISHED)
        return True

    def search(self, text: str) -> None:
        candidates = match(
            self.database,
            text,
            prefix_scan=self.prefix_scan,
            limit=self.limit,
        )
        for candidate_id, candidate in self.candidates.reset(candidates):
            self.send(append_response(candidate_id, candidate, self.icon))
        self.send(FINISHED)

    def activate(self, candidate_id: int) -> None:
        candidate = self.candidates.get(candidate_id)
        if candidate is None:
            logger.info("Activate for unknown result id %d", candidate_id)
            self.send(FINISHED)
            return

        try:
            url = expand(candidate.definition, candidate.remainder, self.placeholder)
        except TemplateError:
            logger.exception("Cannot build URL for %s", candidate.definition)
            self.send(FINISHED)
            return

        logger.debug("Opening %s", url)
        try:
            self.opener(url)
        except OSError:
            logger.exception("Failed to open %s", url)
        self.send(CLOSE)

    def complete(self, candidate_id: int) -> None:
        candidate = self.candidates.get(candidate_id)
        if candidate is None:
            logger.info("Complete for unknown result id %d", candidate_id)
            self.send(FINISHED)
            return
        self.send(fill_response(candidate))
