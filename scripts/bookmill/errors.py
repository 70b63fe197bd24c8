"""
Error kinds and source positions.

Every error raised while loading or rendering a book carries a snapshot of
the `Source` (file + line) that was being processed at the time.
"""


class Source:
    """Current file and line being processed."""

    def __init__(self, file=None, line=None):
        self.file = file
        self.line = line

    @classmethod
    def empty(cls):
        return cls()

    def set_line(self, line):
        self.line = line
        return self

    def unset_line(self):
        self.line = None
        return self

    def copy(self):
        return Source(self.file, self.line)

    def __bool__(self):
        return self.file is not None or self.line is not None

    def __str__(self):
        if self.line is None:
            return self.file or ""
        return f"{self.file or ''}:{self.line}"

    def __repr__(self):
        return f"Source({self.file!r}, {self.line!r})"


class BookError(Exception):
    """Base class for everything bookmill raises."""

    kind = "Error"

    def __init__(self, message, source=None):
        super().__init__(message)
        self.message = message
        self.source = source.copy() if source else Source.empty()

    def __str__(self):
        if self.source:
            return f"{self.source}: {self.kind}: {self.message}"
        return f"{self.kind}: {self.message}"


class ConfigParserError(BookError):
    """Malformed front matter, chapter directive or structured data."""

    kind = "Error parsing configuration file"


class BookOptionError(BookError):
    """Unknown option key or value of the wrong type. Never retried."""

    kind = "Error setting option"


class MissingFileError(BookError):
    """A book, chapter or template file could not be found."""

    kind = "File not found"

    def __init__(self, source, description, filename):
        super().__init__(f"could not find {description}: {filename}", source)
        self.description = description
        self.filename = filename


class ParserError(BookError):
    """Content could not be decoded or parsed into tokens."""

    kind = "Error parsing markdown"


class TemplateError(BookError):
    kind = "Error compiling template"


class RenderError(BookError):
    kind = "Error during rendering"


class ProofreadError(BookError):
    kind = "Error during proofreading"
