"""
Base renderer class for all output formats.

A renderer turns a loaded Book into one output. Streaming renderers
implement `render(book, stream)`; renderers that produce several files
(html_dir) override `render_to_file` instead and refuse to stream.

Shared logic (chapter assembly, pandoc invocation, template files) lives in
PandocRenderer.
"""

import os
import tempfile
from abc import ABC, abstractmethod

from pandocfilters import stringify

from bookmill import __version__, lang
from bookmill.errors import RenderError
from bookmill.number import chapter_numbers
from bookmill.pandoc import PANDOC, document, exec_cmd, pandoc_cmd
from bookmill.tokens import (
    clean_tokens,
    first_header,
    make_header,
    prepare_proofread,
)


class BookRenderer(ABC):
    """
    Interface every output format implements.

    Subclasses define:
        format_name:  str, human-readable name ("EPUB", "PDF", etc.)
        render():     write the output to a binary stream, or raise
                      RenderError if the format can't be streamed
    """

    format_name = None  # Override in subclass

    @abstractmethod
    def render(self, book, stream):
        ...

    def render_to_file(self, book, path):
        """Create `path` and render into it."""
        parent = os.path.dirname(path)
        if parent:
            os.makedirs(parent, exist_ok=True)
        try:
            with open(path, "wb") as f:
                self.render(book, f)
        except OSError as e:
            raise RenderError(f"could not write {path}: {e}")


class PandocRenderer(BookRenderer):
    """
    Renders the book's token sequences with pandoc.

    Subclasses set `proofread` to keep grammar annotations and `tex` when
    the output is LaTeX (affects cleaning and annotation markup).
    """

    proofread = False
    tex = False

    # ── Chapter assembly ───────────────────────────────────

    def chapters(self, book):
        """
        (number, title, blocks) for each chapter, ready for pandoc.

        Numbered chapters get their title from the chapter template; hidden
        chapters lose their first title; every title is marked unnumbered so
        that pandoc doesn't number it again.
        """
        numbers = chapter_numbers([number for number, _ in book.chapters])
        result = []
        for (number, tokens), n in zip(book.chapters, numbers):
            blocks = prepare_proofread(tokens, self.proofread, self.tex)
            index, header = first_header(blocks)
            title = stringify(header["c"][2]) if header else ""

            if number.kind == "hidden":
                if header:
                    del blocks[index]
            elif n is not None:
                text = book.get_chapter_header(n, title, lambda s: s)
                new_header = make_header(1, _unnumbered(header["c"][1] if header else None), text)
                if header:
                    blocks[index] = new_header
                else:
                    blocks.insert(0, new_header)
                title = text
            elif header:
                header["c"][1] = _unnumbered(header["c"][1])

            blocks = clean_tokens(blocks, book.cleaner, self.tex)
            result.append((n, title, blocks))
        return result

    def all_blocks(self, book):
        blocks = []
        for _, _, chapter in self.chapters(book):
            blocks.extend(chapter)
        return blocks

    # ── Pandoc invocation ──────────────────────────────────

    def metadata_args(self, book):
        """Pandoc --metadata arguments for every metadata option set."""
        args = []
        for key in book.options.metadata_keys():
            if book.options.is_set(key):
                args.extend(["--metadata", f"{key}={book.options.get_str(key)}"])
        args.extend(["--variable", f"bookmill_version={__version__}"])
        if self.proofread:
            note = lang.get_hash(book.options.get_str("lang")).get("proofread_note", "")
            args.extend(["--variable", f"proofread_note={note}"])
        return args

    def filter_args(self, book):
        """Resolve the Lua filters listed in `pandoc.filters`. Warns on missing."""
        filters = []
        for name in book.options.get_list("pandoc.filters"):
            path = os.path.join(book.root, name)
            if os.path.exists(path):
                filters.append(path)
            else:
                book.reporter.warning(f"filter '{name}' not found")
        return filters

    def run_pandoc(self, book, blocks, to, extra_args=None):
        """Feed blocks to pandoc, returning its output as bytes."""
        args = [f"--resource-path={book.root or '.'}"]
        args.extend(self.metadata_args(book))
        args.extend(extra_args or [])
        cmd = pandoc_cmd(PANDOC, to, args, filters=self.filter_args(book))
        book.reporter.debug(f"Running pandoc for {self.format_name}...")
        doc = document(book.parser.api_version(), blocks)
        return exec_cmd(cmd, f"{self.format_name} generation", input=doc)

    def template_file(self, book, key, directory, name=None):
        """Write the template `key` into `directory`, returning its path."""
        path = os.path.join(directory, name or key)
        with open(path, "w", encoding="utf-8") as f:
            f.write(book.get_template(key))
        return path


class PandocFileRenderer(PandocRenderer):
    """
    Renderer whose pandoc writer needs an output file (-o): zip containers
    like EPUB and ODT. Rendering to a stream goes through a temporary file.
    """

    extension = None  # Override in subclass

    def writer(self, book):
        raise NotImplementedError

    def pandoc_args(self, book, directory):
        return []

    def render(self, book, stream):
        with tempfile.TemporaryDirectory(prefix="bookmill-") as tmp:
            output = os.path.join(tmp, f"book{self.extension}")
            extra = ["-o", output] + self.pandoc_args(book, tmp)
            self.run_pandoc(book, self.all_blocks(book), self.writer(book), extra)
            with open(output, "rb") as f:
                stream.write(f.read())


def _unnumbered(attr):
    identifier, classes, pairs = attr or ["", [], []]
    if "unnumbered" not in classes:
        classes = classes + ["unnumbered"]
    return [identifier, classes, pairs]
