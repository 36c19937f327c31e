"""Test cases for the pop-launcher protocol adapter."""

import io
import json
from typing import Any
from unittest.mock import MagicMock
from unittest.mock import patch

import pytest

from bangs.matcher import match
from bangs.models import Database
from bangs.protocol import Activate
from bangs.protocol import BangsPlugin
from bangs.protocol import CandidateTable
from bangs.protocol import Complete
from bangs.protocol import Exit
from bangs.protocol import Interrupt
from bangs.protocol import Search
from bangs.protocol import Unknown
from bangs.protocol import decode_request
from bangs.protocol import open_url


@pytest.fixture
def opener() -> MagicMock:
    """Return a stand-in for the URL opener."""
    return MagicMock()


@pytest.fixture
def out() -> io.StringIO:
    """Return a buffer collecting the plugin responses."""
    return io.StringIO()


@pytest.fixture
def plugin(database: Database, out: io.StringIO, opener: MagicMock) -> BangsPlugin:
    """Create a plugin writing its responses into a buffer."""
    return BangsPlugin(database, out, opener=opener, icon="web-browser")


def responses(out: io.StringIO) -> list[Any]:
    """Decode every response line written so far and clear the buffer."""
    lines = out.getvalue().splitlines()
    out.seek(0)
    out.truncate()
    return [json.loads(line) for line in lines]


@pytest.mark.parametrize(
    ("line", "request_"),
    [
        ('{"Search": "!w rust"}', Search("!w rust")),
        ('{"Activate": 3}', Activate(3)),
        ('{"Complete": 0}', Complete(0)),
        ('"Exit"', Exit()),
        ('"Interrupt"', Interrupt()),
        ('{"Search": "!w", "extra": true}', Search("!w")),
    ],
)
def test_decode_request(line: str, request_: Any) -> None:
    """Test decoding of the supported launcher requests."""
    assert decode_request(line) == request_


@pytest.mark.parametrize(
    "line",
    [
        "not json",
        '{"Activate": "zero"}',
        '{"Activate": -1}',
        '{"Activate": true}',
        '{"Search": 42}',
        '{"Context": 0}',
        '{"ActivateContext": {"id": 0, "context": 1}}',
        "42",
        "[]",
        pytest.param("[" * 100000, id="deeply-nested"),
    ],
)
def test_decode_unknown_request(line: str) -> None:
    """Test that unexpected request lines decode to Unknown."""
    assert decode_request(line) == Unknown(line)


def test_candidate_table_ids_never_repeat(database: Database) -> None:
    """Test that result ids keep increasing across searches."""
    table = CandidateTable()
    first = table.reset(match(database, "!zz"))
    second = table.reset(match(database, "!zz"))
    assert [i for i, _ in first] == [0, 1, 2]
    assert [i for i, _ in second] == [3, 4, 5]
    assert table.get(0) is None
    assert table.get(3) == second[0][1]
    assert len(table) == 3


def test_search_appends_results(plugin: BangsPlugin, out: io.StringIO) -> None:
    """Test that a search sends one Append per candidate and Finished."""
    plugin.handle(Search("!w rust programming language"))
    assert responses(out) == [
        {
            "Append": {
                "id": 0,
                "name": "w | Wikipedia (en.wikipedia.org)",
                "description": "Research > Reference",
                "keywords": None,
                "icon": {"Name": "web-browser"},
                "exec": None,
                "window": None,
            },
        },
        "Finished",
    ]


def test_search_without_bang_only_finishes(
    plugin: BangsPlugin, out: io.StringIO
) -> None:
    """Test that text without a bang only sends Finished."""
    plugin.handle(Search("plain text, no bang"))
    assert responses(out) == ["Finished"]


def test_activate_opens_url(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test that activating a result opens the expanded URL and closes."""
    plugin.handle(Search("!w rust programming language"))
    responses(out)
    plugin.handle(Activate(0))
    opener.assert_called_once_with(
        "https://en.wikipedia.org/wiki/Special:Search"
        "?search=rust%20programming%20language",
    )
    assert responses(out) == ["Close"]


def test_activate_empty_remainder(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test that an empty remainder opens the bare destination."""
    plugin.handle(Search("!w"))
    plugin.handle(Activate(0))
    opener.assert_called_once_with(
        "https://en.wikipedia.org/wiki/Special:Search?search=",
    )


def test_activate_stale_id(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test that an id from a discarded search is answered without opening."""
    plugin.handle(Search("!zz one"))
    plugin.handle(Search("!w two"))
    responses(out)
    assert plugin.handle(Activate(1)) is True
    opener.assert_not_called()
    assert responses(out) == ["Finished"]


def test_activate_opener_failure_still_closes(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test that a failing opener still closes the launcher."""
    opener.side_effect = FileNotFoundError("xdg-open")
    plugin.handle(Search("!g test"))
    responses(out)
    plugin.handle(Activate(0))
    assert responses(out) == ["Close"]


def test_complete_fills_alias(plugin: BangsPlugin, out: io.StringIO) -> None:
    """Test that completion fills in the full alias and the search text."""
    plugin.handle(Search("!zz rust book"))
    responses(out)
    plugin.handle(Complete(1))
    assert responses(out) == [{"Fill": "!zzb rust book"}]


def test_complete_unknown_id(plugin: BangsPlugin, out: io.StringIO) -> None:
    """Test that completing an unknown id only sends Finished."""
    plugin.handle(Complete(7))
    assert responses(out) == ["Finished"]


def test_run_until_exit(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test the request loop over a whole launcher session."""
    lines = [
        '{"Search": "!g test search"}\n',
        "garbage\n",
        "\n",
        '"Interrupt"\n',
        '{"Activate": 0}\n',
        '"Exit"\n',
        '{"Search": "!w never read"}\n',
    ]
    plugin.run(lines)
    assert [r if isinstance(r, str) else next(iter(r)) for r in responses(out)] == [
        "Append",
        "Finished",
        "Finished",
        "Close",
    ]
    opener.assert_called_once_with("https://www.google.com/search?q=test%20search")


def test_run_survives_deeply_nested_line(
    plugin: BangsPlugin, out: io.StringIO
) -> None:
    """Test that a line nested too deeply for the decoder does not stop the loop."""
    plugin.run(["[" * 100000 + "\n", '{"Search": "!w ok"}\n'])
    assert [r if isinstance(r, str) else next(iter(r)) for r in responses(out)] == [
        "Finished",
        "Append",
        "Finished",
    ]


def test_run_survives_lone_surrogate(
    plugin: BangsPlugin, out: io.StringIO, opener: MagicMock
) -> None:
    """Test that search text holding a lone surrogate can still be activated."""
    plugin.run(
        [
            r'{"Search": "!w a\ud800b"}',
            '{"Activate": 0}',
            '{"Search": "!w ok"}',
        ],
    )
    opener.assert_called_once_with(
        "https://en.wikipedia.org/wiki/Special:Search?search=a%ED%A0%80b",
    )
    assert [r if isinstance(r, str) else next(iter(r)) for r in responses(out)] == [
        "Append",
        "Finished",
        "Close",
        "Append",
        "Finished",
    ]


def test_open_url_runs_command() -> None:
    """Test that the URL is passed to the open command."""
    with patch("bangs.protocol.subprocess.Popen") as popen:
        open_url("https://example.com/?q=a%20b", command=["xdg-open"])
    args, _ = popen.call_args
    assert args[0] == ["xdg-open", "https://example.com/?q=a%20b"]
