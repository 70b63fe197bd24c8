"""
Book file loader.

A book file is YAML front matter followed by a chapter list:

    author: Joan Doe
    title: An untitled book
    output.html: book.html

    ! intro.md          hidden title
    + chapter_01.md     numbered
    - interlude.md      unnumbered
    3. chapter_03.md    explicitly numbered (also `3:` or `3+`)

The front matter is read line by line. Whenever the buffered lines look
like a complete YAML mapping (the next line parses on its own as one), they
are applied to the options right away. The aim is that errors point at the
right line, and that a later option can depend on an earlier one.
"""

import yaml

from bookmill.errors import ConfigParserError
from bookmill.number import DEFAULT, HIDDEN, UNNUMBERED, Number

# Characters that end a line but leave a YAML value open on the next one
BLOCK_INDICATORS = (">", "|", ":", "-")

NUMBER_DELIMITERS = (".", ":", "+")

MARKERS = {"-": UNNUMBERED, "+": DEFAULT, "!": HIDDEN}


def is_chapter_line(line):
    return line[:1] in MARKERS or line[:1].isdigit() and line[:1].isascii()


def read_config(book, text):
    """Populate `book` from the text of a book file."""
    lines = text.splitlines()
    source = book.source
    line_number = 0

    # ── Front matter ───────────────────────────────────────
    buffer = ""
    while line_number < len(lines) and not is_chapter_line(lines[line_number]):
        line = lines[line_number]
        line_number += 1
        source.set_line(line_number)
        buffer += line + "\n"

        if line.strip().endswith(BLOCK_INDICATORS):
            continue

        if line_number >= len(lines):
            break
        if not _is_mapping(lines[line_number]):
            # Probably inside a multi-line value
            continue

        # BookOptionError propagates
        try:
            set_options_from_yaml(book, buffer)
        except ConfigParserError:
            # Keep accumulating until the value is complete
            continue
        buffer = ""

    set_options_from_yaml(book, buffer)
    book.update_derived_state()

    # ── Chapter list ───────────────────────────────────────
    while line_number < len(lines):
        line = lines[line_number].strip()
        line_number += 1
        source.set_line(line_number)
        if not line or line.startswith("#"):
            continue
        number, file = parse_chapter_line(line, source)
        book.add_chapter(number, file)

    source.unset_line()
    book.set_chapter_template()
    return book


def parse_chapter_line(line, source=None):
    """(Number, filename) for one line of the chapter list."""
    marker = line[0]
    if marker in MARKERS:
        return MARKERS[marker], get_filename(line[1:], source)

    if marker.isdigit() and marker.isascii():
        cut = min(
            (i for i in (line.find(d) for d in NUMBER_DELIMITERS) if i >= 0),
            default=-1,
        )
        if cut < 0:
            raise ConfigParserError("ill-formatted line specifying chapter number", source)
        try:
            value = int(line[:cut])
        except ValueError:
            raise ConfigParserError("error parsing chapter number", source)
        return Number.specified(value), get_filename(line[cut + 1:], source)

    raise ConfigParserError("found invalid chapter definition in the chapter list", source)


def get_filename(rest, source=None):
    words = rest.split()
    if len(words) > 1:
        raise ConfigParserError("chapter filenames must not contain whitespace", source)
    if not words:
        raise ConfigParserError("no chapter name specified", source)
    return words[0]


# ── YAML ───────────────────────────────────────────────────


def _is_mapping(line):
    """True if `line` alone parses as a one-document YAML mapping."""
    try:
        docs = list(yaml.safe_load_all(line))
    except yaml.YAMLError:
        return False
    return len(docs) > 0 and isinstance(docs[0], dict)


def set_options_from_yaml(book, text):
    """
    Apply a YAML mapping to the book options.

    Malformed YAML, or YAML that is not a mapping, raises ConfigParserError;
    an unknown key or a badly typed value raises BookOptionError. Text that
    holds no document at all (blank lines, comments) is a no-op.
    """
    book.options.source = book.source
    try:
        docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        raise ConfigParserError(f"YAML block was not valid YAML: {e}", book.source)

    if not docs or docs == [None]:
        return book
    if len(docs) != 1 or not isinstance(docs[0], dict):
        raise ConfigParserError("YAML part of the book is not a valid hashmap", book.source)

    for key, value in docs[0].items():
        book.options.set_yaml(key, value)
    return book
