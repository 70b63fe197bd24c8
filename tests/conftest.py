"""
Shared fixtures.

Books in tests use FakeParser instead of pandoc: it understands just enough
markdown (ATX headers, paragraphs, inline links and images) to produce
pandoc-shaped blocks, and records what it was asked to parse.
"""

import io
import re

import pytest
from pandocfilters import Header, Para, Space, Str

from bookmill import Book
from bookmill.errors import RenderError
from bookmill.renderers import BookRenderer
from bookmill.reporter import InfoLevel, Reporter

_HEADER = re.compile(r"^(#{1,6})\s+(.*)$")
_INLINE_REF = re.compile(r"^(!?)\[([^\]]*)\]\(([^)\s]*)\)$")


def _inlines(text):
    inlines = []
    for i, word in enumerate(text.split()):
        if i:
            inlines.append(Space())
        m = _INLINE_REF.match(word)
        if m:
            kind = "Image" if m.group(1) else "Link"
            inlines.append({"t": kind, "c": [["", [], []], [Str(m.group(2))], [m.group(3), ""]]})
        else:
            inlines.append(Str(word))
    return inlines


class FakeParser:
    """Stand-in for PandocParser."""

    def __init__(self):
        self.texts = []
        self.filenames = []

    def parse(self, text, filename=""):
        self.texts.append(text)
        self.filenames.append(filename)
        blocks = []
        for paragraph in re.split(r"\n\s*\n", text):
            paragraph = paragraph.strip()
            if not paragraph:
                continue
            m = _HEADER.match(paragraph)
            if m:
                blocks.append(Header(len(m.group(1)), ["", [], []], _inlines(m.group(2))))
            else:
                blocks.append(Para(_inlines(paragraph)))
        return blocks

    def api_version(self):
        return [1, 23, 1]


class StaticRenderer(BookRenderer):
    """Writes fixed bytes."""

    format_name = "Static"

    def __init__(self, payload=b"rendered"):
        self.payload = payload
        self.calls = 0

    def render(self, book, stream):
        self.calls += 1
        stream.write(self.payload)


class FailingRenderer(BookRenderer):
    format_name = "Failing"

    def render(self, book, stream):
        raise RenderError("renderer exploded")


@pytest.fixture
def log():
    """Captured reporter output."""
    return io.StringIO()


@pytest.fixture
def parser():
    return FakeParser()


@pytest.fixture
def book(parser, log):
    """A Book with the fake parser and a debug-level reporter."""
    return Book(parser=parser, reporter=Reporter(InfoLevel.DEBUG, stream=log))


@pytest.fixture
def book_dir(tmp_path):
    """Directory holding a book file; write chapters into it."""
    directory = tmp_path / "book"
    directory.mkdir()
    return directory


def write(path, content):
    """Write a text file, creating its directory."""
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content, encoding="utf-8")
    return path
