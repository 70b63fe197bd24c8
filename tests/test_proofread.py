"""
Proofreading tests.

The LanguageTool server is never contacted: `requests` calls are
monkeypatched, and the book's checker is replaced by a fake where only
the gating logic is under test.
"""

import pytest
import requests
from pandocfilters import Emph, Header, Para, Space, Str

from bookmill import proofread
from bookmill.errors import ProofreadError
from bookmill.number import DEFAULT
from bookmill.options import BookOptions
from bookmill.proofread import GrammarChecker, checker_settings, is_proofread
from bookmill.tokens import PROOFREAD_CLASS


class FakeResponse:
    def __init__(self, status_code=200, payload=None):
        self.status_code = status_code
        self._payload = payload if payload is not None else {}
        self.text = str(self._payload)

    def json(self):
        if isinstance(self._payload, Exception):
            raise self._payload
        return self._payload


@pytest.fixture
def server(monkeypatch):
    """Fake LanguageTool server; set `server.matches` to the next answer."""

    class Server:
        matches = []
        checked = []
        up = True

    def fake_get(url, timeout=None):
        if not Server.up:
            raise requests.ConnectionError("connection refused")
        return FakeResponse(200, [{"code": "en"}])

    def fake_post(url, data=None, timeout=None):
        Server.checked.append(data["text"])
        return FakeResponse(200, {"matches": Server.matches})

    monkeypatch.setattr(proofread.requests, "get", fake_get)
    monkeypatch.setattr(proofread.requests, "post", fake_post)
    return Server


def _proof_options(**extra):
    options = BookOptions()
    options.set("proofread", "true")
    options.set("output.proofread.html", "proof.html")
    for key, value in extra.items():
        options.set(key.replace("_", "."), value)
    return options


# ── Gating ─────────────────────────────────────────────────


def test_not_proofread_by_default():
    assert not is_proofread(BookOptions())


def test_proofread_needs_an_output():
    options = BookOptions()
    options.set("proofread", "true")
    assert not is_proofread(options)

    options.set("output.proofread.pdf", "proof.pdf")
    assert is_proofread(options)


def test_checker_settings():
    assert checker_settings(_proof_options()) is None

    options = _proof_options()
    options.set("proofread.languagetool", "true")
    assert checker_settings(options) == (8081, "en")

    options.set("proofread.languagetool.port", "9000")
    options.set("lang", "fr")
    assert checker_settings(options) == (9000, "fr")


# ── Client ─────────────────────────────────────────────────


def test_unreachable_server(server):
    server.up = False
    with pytest.raises(ProofreadError) as exc_info:
        GrammarChecker(8081, "en")
    assert "could not connect" in exc_info.value.message


def test_check_chapter_wraps_flagged_words(server):
    """Test that a match becomes a proofreading span around the right word."""
    server.matches = [{"offset": 0, "length": 3, "message": "Possible spelling mistake"}]
    tokens = [Para([Str("Ths"), Space(), Str("is"), Space(), Str("fine")])]

    GrammarChecker(8081, "en").check_chapter(tokens)

    inlines = tokens[0]["c"]
    assert server.checked == ["Ths is fine"]
    assert inlines[0]["t"] == "Span"
    assert inlines[0]["c"][0] == ["", [PROOFREAD_CLASS], [["title", "Possible spelling mistake"]]]
    assert inlines[0]["c"][1] == [Str("Ths")]
    assert inlines[1:] == [Space(), Str("is"), Space(), Str("fine")]


def test_words_inside_emphasis_are_checked(server):
    """Test that formatted inlines are checked and annotated on their own."""
    server.matches = [{"offset": 0, "length": 4, "message": "Possible typo"}]
    tokens = [Para([Str("A"), Space(), Emph([Str("wrod")])])]

    GrammarChecker(8081, "en").check_chapter(tokens)

    assert server.checked == ["wrod", "A  "]
    emphasised = tokens[0]["c"][2]["c"]
    assert emphasised[0]["t"] == "Span"
    assert emphasised[0]["c"][1] == [Str("wrod")]


def test_match_spanning_several_words(server):
    server.matches = [{"offset": 4, "length": 8, "message": "Repeated word"}]
    tokens = [Header(1, ["", [], []], [Str("The"), Space(), Str("the"), Space(), Str("end")])]

    GrammarChecker(8081, "en").check_chapter(tokens)

    inlines = tokens[0]["c"][2]
    assert inlines[0] == Str("The")
    assert inlines[2]["t"] == "Span"
    assert inlines[2]["c"][1] == [Str("the"), Space(), Str("end")]


def test_overlapping_matches_keep_the_last(server):
    server.matches = [
        {"offset": 0, "length": 6, "message": "first"},
        {"offset": 4, "length": 2, "message": "second"},
    ]
    tokens = [Para([Str("abc"), Space(), Str("de")])]

    GrammarChecker(8081, "en").check_chapter(tokens)

    spans = [i for i in tokens[0]["c"] if i["t"] == "Span"]
    assert len(spans) == 1
    assert spans[0]["c"][0][2] == [["title", "second"]]


def test_invalid_json_answer(monkeypatch, server):
    monkeypatch.setattr(
        proofread.requests,
        "post",
        lambda url, data=None, timeout=None: FakeResponse(200, ValueError("no json")),
    )

    with pytest.raises(ProofreadError):
        GrammarChecker(8081, "en").check("Some text")


def test_non_object_json_answer(monkeypatch, server):
    monkeypatch.setattr(
        proofread.requests, "post", lambda url, data=None, timeout=None: FakeResponse(200, ["x"])
    )

    with pytest.raises(ProofreadError) as exc_info:
        GrammarChecker(8081, "en").check("Some text")
    assert "unexpected LanguageTool answer" in exc_info.value.message


def test_matches_not_a_list(monkeypatch, server):
    monkeypatch.setattr(
        proofread.requests,
        "post",
        lambda url, data=None, timeout=None: FakeResponse(200, {"matches": "none"}),
    )

    with pytest.raises(ProofreadError):
        GrammarChecker(8081, "en").check("Some text")


def test_server_error_answer(monkeypatch, server):
    monkeypatch.setattr(
        proofread.requests, "post", lambda url, data=None, timeout=None: FakeResponse(500, {})
    )

    with pytest.raises(ProofreadError) as exc_info:
        GrammarChecker(8081, "en").check("Some text")
    assert "500" in exc_info.value.message


# ── Book integration ───────────────────────────────────────


class FakeChecker:
    instances = []

    def __init__(self, port, lang):
        self.settings = (port, lang)
        self.chapters = []
        FakeChecker.instances.append(self)

    def check_chapter(self, tokens):
        self.chapters.append(tokens)


@pytest.fixture
def fake_checker(monkeypatch):
    FakeChecker.instances = []
    monkeypatch.setattr("bookmill.book.GrammarChecker", FakeChecker)
    return FakeChecker


PROOF_SETTINGS = [
    ("proofread", "true"),
    ("proofread.languagetool", "true"),
    ("output.proofread.html", "proof.html"),
]


def test_checker_built_once_per_settings(book, fake_checker):
    book.set_options(PROOF_SETTINGS)
    book.update_derived_state()

    assert len(fake_checker.instances) == 1
    assert book.checker.settings == (8081, "en")

    book.set_options([("proofread.languagetool.port", "9999")])
    assert len(fake_checker.instances) == 2
    assert book.checker.settings == (9999, "en")


def test_checker_dropped_when_disabled(book, fake_checker):
    book.set_options(PROOF_SETTINGS)
    book.set_options([("proofread.languagetool", "false")])

    assert book.checker is None


def test_unreachable_checker_is_reported(book, log, monkeypatch):
    def unreachable(port, lang):
        raise ProofreadError("could not connect to LanguageTool server")

    monkeypatch.setattr("bookmill.book.GrammarChecker", unreachable)
    book.set_options(PROOF_SETTINGS)

    assert book.checker is None
    assert "Proceeding without checking grammar" in log.getvalue()


def test_chapters_checked_only_when_proofreading(book, fake_checker):
    book.add_chapter_from_source(DEFAULT, "Not checked.\n")
    book.set_options(PROOF_SETTINGS)
    book.add_chapter_from_source(DEFAULT, "Checked.\n")

    assert len(book.checker.chapters) == 1


def test_checker_failure_does_not_stop_ingestion(book, log, fake_checker, monkeypatch):
    book.set_options(PROOF_SETTINGS)

    def broken(tokens):
        raise ProofreadError("server went away")

    monkeypatch.setattr(book.checker, "check_chapter", broken)
    book.add_chapter_from_source(DEFAULT, "Text.\n")

    assert len(book.chapters) == 1
    assert "server went away" in log.getvalue()


def test_malformed_server_answer_does_not_stop_ingestion(book, log, server, monkeypatch):
    book.set_options(PROOF_SETTINGS)
    monkeypatch.setattr(
        proofread.requests, "post", lambda url, data=None, timeout=None: FakeResponse(200, ["x"])
    )

    book.add_chapter_from_source(DEFAULT, "Text here.\n")

    assert len(book.chapters) == 1
    assert "Error running grammar check" in log.getvalue()


def test_bad_option_is_reported_not_raised(book, log):
    book.set_options([("proofread", "perhaps"), ("author", "Joan")])

    assert book.options.get_str("author") == "Joan"
    assert "could not set proofread to perhaps" in log.getvalue()
