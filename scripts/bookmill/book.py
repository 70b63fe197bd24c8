"""
The Book: configuration, chapters, and rendering.

Usage:
    book = Book()
    book.load_file("my.book")      # options + chapters
    book.render_all()              # every output.<format> that is set

    book = Book()
    book.set_options([("author", "Joan Doe"), ("title", "A book")])
    book.add_chapter_from_source(DEFAULT, "# The beginning\\n\\nBla, bla.")
    book.render_format_to("html", sys.stdout.buffer)
"""

import os
import threading
from concurrent.futures import ThreadPoolExecutor, as_completed

from bookmill import ingest, loader, templates
from bookmill.cleaner import select_cleaner
from bookmill.errors import (
    BookError,
    BookOptionError,
    ConfigParserError,
    MissingFileError,
    ProofreadError,
    RenderError,
    Source,
)
from bookmill.number import HIDDEN
from bookmill.options import BookOptions
from bookmill.pandoc import PandocParser
from bookmill.proofread import GrammarChecker, checker_settings, is_proofread
from bookmill.renderers import BUILTIN_FORMATS, DEFAULT_FORMATS, PROOFREAD_FORMATS
from bookmill.reporter import Reporter


class Book:
    """
    A book: options, an ordered list of chapters, and the formats it can
    be rendered to.

    `chapters` holds (Number, tokens) pairs and `filenames` the matching
    source file names ("" for chapters added from memory); both always
    have the same length.
    """

    def __init__(self, parser=None, reporter=None):
        self.chapters = []
        self.filenames = []
        self.options = BookOptions()
        self.root = ""
        self.source = Source.empty()
        self.reporter = reporter or Reporter()
        self.parser = parser or PandocParser()

        # Derived from options, see update_derived_state()
        self.checker = None
        self._checker_settings = None
        self.update_derived_state()

        self._chapter_template = None
        self._template_lock = threading.Lock()

        self._formats = {}
        for key, description, renderer_cls in BUILTIN_FORMATS:
            self.add_format(key, description, renderer_cls())

    # ── Formats ────────────────────────────────────────────

    def add_format(self, format, description, renderer):
        """Register (or replace) the renderer for `format`."""
        self._formats[format] = (description, renderer)
        return self

    def formats(self):
        """(key, description) of every registered format."""
        return [(key, description) for key, (description, _) in self._formats.items()]

    # ── Options ────────────────────────────────────────────

    def set_options(self, options):
        """
        Set options from (key, value) string pairs.

        A pair that can't be set is reported, not raised.
        """
        for key, value in options:
            try:
                self.options.set(key, value)
            except BookOptionError as e:
                self.reporter.error(
                    f"Error initializing book: could not set {key} to {value}: {e}"
                )
        self.update_derived_state()
        return self

    def set_verbosity(self, verbosity):
        self.reporter.set_verbosity(verbosity)
        return self

    def update_derived_state(self):
        """Recompute the cleaner and grammar checker from the current options."""
        self.cleaner = select_cleaner(self.options)

        settings = checker_settings(self.options)
        if settings == self._checker_settings:
            return
        self._checker_settings = settings
        self.checker = None
        if settings is not None:
            try:
                self.checker = GrammarChecker(*settings)
            except ProofreadError as e:
                self.reporter.error(f"{e}. Proceeding without checking grammar.")

    def is_proofread(self):
        return is_proofread(self.options)

    def clean(self, text, tex=False):
        """Clean `text` according to `lang` and `input.clean*`."""
        return self.cleaner.clean(text, tex)

    # ── Loading ────────────────────────────────────────────

    def load_file(self, path):
        """
        Load a book configuration file.

        The directory of the file becomes the root for every path the book
        references (chapters, templates, cover...).
        """
        filename = str(path)
        self.source = Source(filename)
        self.options.source = self.source
        try:
            with open(filename, "rb") as f:
                raw = f.read()
        except FileNotFoundError:
            raise MissingFileError(Source.empty(), "book", filename)
        except OSError as e:
            raise ConfigParserError(f"could not read {filename}: {e}")

        self._set_root(filename)
        try:
            return self.read_config(raw)
        except ConfigParserError as e:
            if filename.endswith(".md"):
                raise ConfigParserError(
                    f"could not parse {filename} as a book file.\n"
                    f"Maybe you meant to load it with load_markdown_file()?"
                ) from e
            raise

    def read_config(self, source):
        """Read a book configuration from a str, bytes or file-like object."""
        text = self._read_source(source, ConfigParserError)
        return loader.read_config(self, text)

    def load_markdown_file(self, path):
        """
        Load a single markdown file as a whole book.

        Meant for short stories: the file becomes one chapter with a
        hidden title, and YAML blocks inside it set the options.
        """
        filename = str(path)
        self.source = Source(filename)
        self.options.source = self.source
        self._set_root(filename)
        self._single_file_defaults()
        self.add_chapter(HIDDEN, os.path.basename(filename))
        self.set_chapter_template()
        return self

    def read_markdown_config(self, source):
        """Like load_markdown_file, reading the markdown from memory."""
        self._single_file_defaults()
        self.add_chapter_from_source(HIDDEN, source)
        self.set_chapter_template()
        return self

    def _single_file_defaults(self):
        self.options.set("tex.class", "article")
        self.options.set("input.yaml_blocks", "true")
        self.update_derived_state()

    def _set_root(self, filename):
        self.root = os.path.dirname(filename)
        self.options.root = self.root

    def _read_source(self, source, error_cls):
        if hasattr(source, "read"):
            source = source.read()
        if isinstance(source, bytes):
            try:
                source = source.decode("utf-8")
            except UnicodeDecodeError as e:
                raise error_cls(f"could not read source: {e}", self.source)
        return source

    # ── Chapters ───────────────────────────────────────────

    def add_chapter(self, number, file):
        """Parse `file` (relative to the book root) and append it."""
        return ingest.add_chapter(self, number, file)

    def add_chapter_from_source(self, number, source):
        """Parse markdown from a str, bytes or file-like object and append it."""
        return ingest.add_chapter_from_source(self, number, source)

    # ── Templates ──────────────────────────────────────────

    def get_template(self, key):
        return templates.get_template(self.options, key, self.source)

    def set_chapter_template(self):
        """Compile `rendering.chapter_template` once and for all."""
        self._chapter_template = self._compile_chapter_template()

    def _compile_chapter_template(self):
        return templates.compile_template(
            self.options.get_str("rendering.chapter_template"),
            self.source,
            "could not compile template 'rendering.chapter_template'",
        )

    @property
    def chapter_template(self):
        if self._chapter_template is None:
            with self._template_lock:
                if self._chapter_template is None:
                    self._chapter_template = self._compile_chapter_template()
        return self._chapter_template

    def get_metadata(self, f):
        """Template variables for the book metadata, rendered with `f`."""
        return templates.metadata_vars(self.options, f, self.source)

    def get_chapter_header(self, n, title, f):
        """
        Title line of chapter `n`, from the chapter template, passed
        through `f` before being returned.
        """
        data = self.get_metadata(f)
        if title:
            data["has_chapter_title"] = True
        data["chapter_title"] = title
        data["number"] = str(n)
        return f(templates.render_template(self.chapter_template, data, self.source))

    # ── Rendering ──────────────────────────────────────────

    def _renderer(self, format):
        try:
            return self._formats[format]
        except KeyError:
            raise RenderError(f"unknown format {format}")

    def render_format_to(self, format, stream):
        """
        Render to a binary stream.

        Fails for unknown formats and for formats that produce several
        files (html_dir).
        """
        self.reporter.debug(f"Attempting to generate {format}...")
        description, renderer = self._renderer(format)
        renderer.render(self, stream)
        self.reporter.success(f"Successfully generated {description}")

    def render_format_to_file(self, format, path):
        """Render to `path`, creating the file (or directory)."""
        self.reporter.debug(f"Attempting to generate {format}...")
        description, renderer = self._renderer(format)
        renderer.render_to_file(self, path)
        self.reporter.success(f"Successfully generated {description}: {path}")

    def render_format(self, format):
        """Render to output.<format> if it is set; do nothing otherwise."""
        key = f"output.{format}"
        if not self.options.is_set(key):
            return
        try:
            self.render_format_to_file(format, self.options.get_path(key))
        except BookError as e:
            self.reporter.error(f"Error rendering {format}: {e}")

    def requested_formats(self):
        """Formats whose output.<format> option is set."""
        formats = [f for f in DEFAULT_FORMATS if self.options.is_set(f"output.{f}")]
        if self.is_proofread():
            formats += [f for f in PROOFREAD_FORMATS if self.options.is_set(f"output.{f}")]
        return formats

    def render_all(self):
        """
        Render every requested format, concurrently.

        Returns once all of them are done. A failing format is reported
        and does not stop the others.
        """
        formats = self.requested_formats()
        if not formats:
            self.reporter.warning(
                "bookmill generated no file because no output file was specified. "
                "Add output.{format} to your config file."
            )
            return formats

        with ThreadPoolExecutor(max_workers=len(formats)) as executor:
            future_to_format = {
                executor.submit(self.render_format, fmt): fmt for fmt in formats
            }
            for future in as_completed(future_to_format):
                fmt = future_to_format[future]
                try:
                    future.result()
                except Exception as e:
                    self.reporter.error(f"Error rendering {fmt}: {e}")
        return formats
