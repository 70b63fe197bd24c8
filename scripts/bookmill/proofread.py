"""
Grammar checking against a local LanguageTool server.

Whether a checker should exist at all is derived from the options by
`checker_settings()`; the book creates or drops its checker accordingly.
"""

from typing import List, Optional, Tuple

import requests

from bookmill.errors import ProofreadError
from bookmill.tokens import proofread_span

PROOFREAD_OUTPUTS = (
    "output.proofread.html",
    "output.proofread.html_dir",
    "output.proofread.pdf",
)


def is_proofread(options) -> bool:
    """Proofreading is on and at least one proofreading output is requested."""
    return options.get_bool("proofread") and any(
        options.is_set(key) for key in PROOFREAD_OUTPUTS
    )


def checker_settings(options) -> Optional[Tuple[int, str]]:
    """(port, lang) of the LanguageTool server to use, or None."""
    if options.get_bool("proofread.languagetool") and is_proofread(options):
        return options.get_int("proofread.languagetool.port"), options.get_str("lang")
    return None


class GrammarChecker:
    """Client for the LanguageTool HTTP API (v2)."""

    def __init__(self, port: int, lang: str, timeout: int = 30):
        self.port = port
        self.lang = lang
        self.timeout = timeout
        self.api_url = f"http://localhost:{port}/v2"
        try:
            response = requests.get(f"{self.api_url}/languages", timeout=5)
        except requests.RequestException as e:
            raise ProofreadError(
                f"could not connect to LanguageTool server on port {port}: {e}"
            )
        if response.status_code != 200:
            raise ProofreadError(
                f"LanguageTool server on port {port} answered {response.status_code}"
            )

    @property
    def settings(self):
        return self.port, self.lang

    def check(self, text: str) -> List[dict]:
        """Matches reported by the server for `text`."""
        try:
            response = requests.post(
                f"{self.api_url}/check",
                data={"language": self.lang, "text": text},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise ProofreadError(f"LanguageTool request failed: {e}")
        if response.status_code != 200:
            raise ProofreadError(
                f"LanguageTool answered {response.status_code}: {response.text[:200]}"
            )
        try:
            body = response.json()
        except ValueError as e:
            raise ProofreadError(f"LanguageTool returned invalid JSON: {e}")
        matches = body.get("matches", []) if isinstance(body, dict) else None
        if not isinstance(matches, list):
            raise ProofreadError(f"unexpected LanguageTool answer: {response.text[:200]}")
        return [m for m in matches if isinstance(m, dict)]

    def check_chapter(self, tokens: list) -> None:
        """Wrap every flagged word of the chapter in a proofreading span."""
        for block in tokens:
            inlines = _block_inlines(block)
            if inlines:
                self._annotate(inlines)

    def _annotate(self, inlines):
        for node in inlines:
            children = _inline_children(node)
            if children:
                self._annotate(children)

        text, spans = _text_with_positions(inlines)
        if not text.strip():
            return
        ranges = []
        for match in self.check(text):
            start = match.get("offset", 0)
            length = match.get("length", 0)
            if not isinstance(start, int) or not isinstance(length, int):
                continue
            end = start + length
            hit = [i for i, (s, e) in spans.items() if s < end and e > start]
            if hit:
                ranges.append((min(hit), max(hit), match.get("message", "")))

        # Wrap from the end so earlier indices stay valid; drop overlaps
        last_start = len(inlines)
        for first, last, message in sorted(ranges, reverse=True):
            if last >= last_start:
                continue
            inlines[first:last + 1] = [proofread_span(inlines[first:last + 1], message)]
            last_start = first


def _block_inlines(block):
    kind = block.get("t")
    if kind in ("Para", "Plain"):
        return block["c"]
    if kind == "Header":
        return block["c"][2]
    return None


# Inline containers whose children are checked as text of their own
_NESTED_INLINES = {
    "Emph": None,
    "Strong": None,
    "Strikeout": None,
    "Underline": None,
    "SmallCaps": None,
    "Superscript": None,
    "Subscript": None,
    "Quoted": 1,
    "Span": 1,
    "Link": 1,
}


def _inline_children(node):
    kind = node.get("t")
    if kind not in _NESTED_INLINES:
        return None
    index = _NESTED_INLINES[kind]
    return node["c"] if index is None else node["c"][index]


def _text_with_positions(inlines):
    """
    Plain text of a list of inlines, with each Str's (start, end) offsets.

    Any other inline counts as a single space; formatted inlines are
    checked on their own by `_annotate`.
    """
    parts = []
    spans = {}
    pos = 0
    for i, node in enumerate(inlines):
        kind = node.get("t")
        if kind == "Str":
            piece = node["c"]
            spans[i] = (pos, pos + len(piece))
        else:
            # spaces, breaks and formatted inlines all count as a gap
            piece = " "
        parts.append(piece)
        pos += len(piece)
    return "".join(parts), spans
