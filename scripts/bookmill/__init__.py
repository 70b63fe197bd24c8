"""
bookmill — markdown chapters to HTML, EPUB, LaTeX, PDF and ODT.

Public API:
    from bookmill import Book
    from bookmill.number import DEFAULT, HIDDEN, UNNUMBERED, Number
    from bookmill.renderers import BookRenderer, BUILTIN_FORMATS
    from bookmill.reporter import InfoLevel
"""
__version__ = "0.4.0"

from bookmill.book import Book
from bookmill.errors import (
    BookError,
    BookOptionError,
    ConfigParserError,
    MissingFileError,
    ParserError,
    ProofreadError,
    RenderError,
    TemplateError,
)
from bookmill.number import DEFAULT, HIDDEN, UNNUMBERED, Number
from bookmill.renderers import BookRenderer
from bookmill.reporter import InfoLevel
