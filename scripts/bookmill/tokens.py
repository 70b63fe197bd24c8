"""
Helpers for working with token sequences.

A token sequence is the list of block nodes of a pandoc JSON document.
Traversal and node constructors come from `pandocfilters`.
"""

import copy
import posixpath
import re

from pandocfilters import Header, RawInline, Space, Span, Str, walk

PROOFREAD_CLASS = "proofread-error"

_SCHEME = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*:")


# ── Local links and images ─────────────────────────────────


def is_local(target):
    """True for relative references: no scheme, not absolute, not a fragment."""
    return bool(target) and not (
        _SCHEME.match(target) or target.startswith(("/", "#", "\\"))
    )


def join_offset(offset, target):
    if not offset:
        return target
    return posixpath.normpath(posixpath.join(offset.replace("\\", "/"), target))


def add_offset(link_offset, image_offset, tokens):
    """
    Prefix every local link target with link_offset and every local image
    source with image_offset. Returns a new token sequence.
    """

    def action(key, value, format, meta):
        if key not in ("Link", "Image"):
            return None
        attr, inlines, (target, title) = value
        if not is_local(target):
            return None
        offset = link_offset if key == "Link" else image_offset
        return {"t": key, "c": [attr, inlines, [join_offset(offset, target), title]]}

    return walk(tokens, action, "", {})


def escapes_root(offset):
    """True if a relative offset points above the directory it is relative to."""
    if not offset:
        return False
    normalized = posixpath.normpath(offset.replace("\\", "/"))
    return normalized == ".." or normalized.startswith("../")


# ── Inline text ────────────────────────────────────────────


def inlines_from_text(text):
    """Turn plain text into Str/Space inlines."""
    inlines = []
    for i, word in enumerate(text.split()):
        if i:
            inlines.append(Space())
        inlines.append(Str(word))
    return inlines


def first_header(tokens):
    """Index and node of the first level-1 header, or (None, None)."""
    for i, block in enumerate(tokens):
        if block.get("t") == "Header" and block["c"][0] == 1:
            return i, block
    return None, None


def make_header(level, attr, text):
    return Header(level, attr, inlines_from_text(text))


# ── Proofreading annotations ───────────────────────────────


def proofread_span(inlines, message):
    return Span(["", [PROOFREAD_CLASS], [["title", message]]], inlines)


def prepare_proofread(tokens, keep, tex=False):
    """
    Copy of tokens with proofreading spans unwrapped (keep=False), kept
    as-is for HTML, or turned into `\\proofread{...}` for LaTeX.
    """

    def action(key, value, format, meta):
        if key == "Span" and PROOFREAD_CLASS in value[0][1]:
            if not keep:
                return value[1]
            if tex:
                return [RawInline("latex", "\\proofread{")] + value[1] + [RawInline("latex", "}")]
        return None

    return walk(copy.deepcopy(tokens), action, "", {})


# ── Cleaning ───────────────────────────────────────────────

_TEXT_NODES = ("Str", "Space", "SoftBreak")


def clean_tokens(tokens, cleaner, tex=False):
    """
    Run `cleaner` over every run of plain text.

    Adjacent Str/Space/SoftBreak nodes are merged before cleaning so that
    rules spanning a word boundary (French spacing, quotes) see the whole
    run, then split again on ordinary spaces.
    """

    def clean_list(nodes):
        result = []
        run = []

        def flush():
            if not run:
                return
            text = "".join(n["c"] if n["t"] == "Str" else " " for n in run)
            cleaned = cleaner.clean(text, tex)
            parts = cleaned.split(" ")
            for i, part in enumerate(parts):
                if i:
                    result.append(Space())
                if part:
                    result.append(Str(part))
            run.clear()

        for node in nodes:
            if isinstance(node, dict) and node.get("t") in _TEXT_NODES:
                run.append(node)
            else:
                flush()
                result.append(visit(node))
        flush()
        return result

    def visit(x):
        if isinstance(x, list):
            return clean_list(x)
        if isinstance(x, dict):
            if x.get("t") in ("Code", "CodeBlock", "RawBlock", "RawInline", "Math"):
                return x
            return {k: visit(v) for k, v in x.items()}
        return x

    return visit(tokens)
