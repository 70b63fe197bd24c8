"""
Reporter and error formatting tests.
"""

import io

from bookmill.errors import BookError, MissingFileError, ParserError, Source
from bookmill.reporter import InfoLevel, Reporter


def test_verbosity_filters_messages():
    stream = io.StringIO()
    reporter = Reporter(InfoLevel.WARNING, stream=stream)

    reporter.debug("hidden debug")
    reporter.info("hidden info")
    reporter.warning("shown warning")
    reporter.error("shown error")

    assert stream.getvalue() == "  Warning: shown warning\n  ✗ shown error\n"


def test_set_verbosity():
    stream = io.StringIO()
    reporter = Reporter(InfoLevel.QUIET, stream=stream)
    reporter.error("nothing")
    reporter.set_verbosity(InfoLevel.INFO)
    reporter.success("done")

    assert stream.getvalue() == "  ✓ done\n"


def test_error_without_source():
    assert str(BookError("boom")) == "Error: boom"


def test_error_with_source():
    error = ParserError("bad", Source("chapter.md", 12))
    assert str(error) == "chapter.md:12: Error parsing markdown: bad"


def test_error_snapshots_source():
    source = Source("book.yaml", 1)
    error = MissingFileError(source, "book chapter", "one.md")
    source.set_line(2)

    assert error.source.line == 1
    assert error.message == "could not find book chapter: one.md"


def test_empty_source_is_falsy():
    assert not Source.empty()
    assert Source("x.md")
    assert str(Source("x.md")) == "x.md"
