"""
Chapter ingestion: source → numbered token sequence appended to the book.

Pipeline for one chapter:
    1. Read and decode the source (UTF-8)
    2. Pull out embedded YAML blocks, applying them as option overrides
    3. Parse the remaining text into tokens
    4. Make local links and images relative to the book root
    5. Run the grammar checker if a proofreading output needs it
    6. Append (number, tokens) and the filename to the book
"""

import os

import yaml

from bookmill.errors import BookOptionError, MissingFileError, ParserError, ProofreadError
from bookmill.proofread import is_proofread
from bookmill.tokens import add_offset, escapes_root

YAML_DELIMITERS = ("---", "...")


def add_chapter(book, number, file):
    """Read `file` (relative to the book root) and append it as a chapter."""
    book.reporter.debug(f"Parsing chapter: {file}...")

    path = os.path.join(book.root, file)
    try:
        with open(path, "rb") as f:
            raw = f.read()
    except FileNotFoundError:
        raise MissingFileError(book.source, "book chapter", path)
    except OSError as e:
        raise ParserError(f"could not read {path}: {e}", book.source)

    content = decode(raw, path, book.source)
    content = extract_yaml_blocks(book, content)
    tokens = book.parser.parse(content, file)
    tokens = _rewrite_paths(book, tokens, os.path.dirname(file), file)
    _proofread(book, tokens, file)

    book.chapters.append((number, tokens))
    book.filenames.append(file)
    return book


def add_chapter_from_source(book, number, source):
    """
    Append a chapter read from memory.

    `source` is a str, bytes, or a file-like object returning either.
    The chapter's filename is recorded as "".
    """
    if hasattr(source, "read"):
        source = source.read()
    if isinstance(source, bytes):
        source = decode(source, "source", book.source)

    content = extract_yaml_blocks(book, source)
    tokens = book.parser.parse(content, "")
    tokens = _rewrite_paths(book, tokens, "", "source")
    _proofread(book, tokens, "source")

    book.chapters.append((number, tokens))
    book.filenames.append("")
    return book


def decode(raw, name, source):
    try:
        return raw.decode("utf-8")
    except UnicodeDecodeError:
        raise ParserError(f"file {name} contains invalid UTF-8", source)


# ── Embedded YAML blocks ───────────────────────────────────


def extract_yaml_blocks(book, content):
    """
    Remove YAML blocks from a chapter and use them to set options.

    A block starts with a `---` line that follows a blank line (or opens the
    file) and ends with `---` or `...`. Blocks that are not a single valid
    mapping, or any block when `input.yaml_blocks` is off, are left in the
    text unchanged.
    """
    if not (
        content.startswith(("---\n", "---\r\n"))
        or "\n---\n" in content
        or "\n---\r\n" in content
    ):
        return content

    lines = content.splitlines()
    result = []
    previous_empty = True
    i = 0
    while i < len(lines):
        line = lines[i]
        i += 1
        if line == "---" and previous_empty:
            previous_empty = False
            block = []
            closing = None
            while i < len(lines):
                candidate = lines[i]
                i += 1
                if candidate in YAML_DELIMITERS:
                    closing = candidate
                    break
                block.append(candidate)

            if closing is not None and _apply_yaml_block(book, "".join(f"{b}\n" for b in block)):
                continue

            result.append(line)
            result.extend(block)
            if closing is not None:
                result.append(closing)
        elif not line:
            previous_empty = True
            result.append(line)
        else:
            previous_empty = False
            result.append(line)

    return "\n".join(result) + "\n"


def _apply_yaml_block(book, text):
    """Apply one YAML block to the book options. False if it was not used."""
    reporter = book.reporter
    try:
        docs = list(yaml.safe_load_all(text))
    except yaml.YAMLError as e:
        reporter.warning(f"Found something that looked like a YAML block:\n{text}")
        reporter.warning(
            f"... but it didn't parse correctly as YAML ('{e}'), so treating it like Markdown."
        )
        return False

    if not (
        len(docs) == 1
        and isinstance(docs[0], dict)
        and book.options.get_bool("input.yaml_blocks")
    ):
        reporter.debug(f"Ignoring YAML block:\n---\n{text}---")
        return False

    for key, value in docs[0].items():
        try:
            previous = book.options.set_yaml(key, value)
        except BookOptionError as e:
            reporter.error(f"Inline YAML block could not set {key!r} to {value!r}: {e}")
            continue
        if previous is not None:
            reporter.debug(
                f"Inline YAML block replaced {key!r} previously set to {previous!r} to {value!r}"
            )
        else:
            reporter.debug(f"Inline YAML block set {key!r} to {value!r}")

    book.update_derived_state()
    return True


# ── Path offsets ───────────────────────────────────────────


def resource_offsets(options, default):
    """
    (link offset, image offset) for a chapter whose directory is `default`.

    `resources.base_path` overrides both; otherwise
    `resources.base_path.links` / `resources.base_path.images` override
    one each.
    """
    if options.is_set("resources.base_path"):
        base = options.get_relative_path("resources.base_path")
        return base, base

    link_offset = default
    image_offset = default
    if options.is_set("resources.base_path.images"):
        image_offset = options.get_relative_path("resources.base_path.images")
    if options.is_set("resources.base_path.links"):
        link_offset = options.get_relative_path("resources.base_path.links")
    return link_offset, image_offset


def _rewrite_paths(book, tokens, default, name):
    link_offset, image_offset = resource_offsets(book.options, default)
    if escapes_root(link_offset) or escapes_root(image_offset):
        book.reporter.warning(
            f"book contains chapter '{name}' whose resources are in a directory above "
            f"the book file, this might cause problems"
        )
    return add_offset(link_offset, image_offset, tokens)


# ── Proofreading ───────────────────────────────────────────


def _proofread(book, tokens, name):
    if book.checker is None or not is_proofread(book.options):
        return
    book.reporter.info(f"Trying to run grammar check on {name}, this might take a while...")
    try:
        book.checker.check_chapter(tokens)
    except ProofreadError as e:
        book.reporter.error(f"Error running grammar check on {name}: {e}")
