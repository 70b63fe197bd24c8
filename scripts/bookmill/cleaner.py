"""
Typographic cleaning of input text.

Which cleaner applies is derived state: `select_cleaner(options)` is called
by the book whenever options that affect it may have changed, and nothing
else sets it.
"""

import re

NB_SPACE = "\u00a0"
NB_SPACE_NARROW = "\u202f"

_WHITESPACE = re.compile(r"\s+")
_DOUBLE_QUOTES = re.compile(r'"([^"]*)"')


class Off:
    """Leaves text untouched."""

    def clean(self, text, tex=False):
        return text

    def __eq__(self, other):
        return type(self) is type(other)


class Default:
    """
    Whitespace normalisation plus optional quote and ligature fixes.

    Runs of whitespace collapse to a single space (non-breaking spaces are
    kept as-is).
    """

    def __init__(self, smart_quotes=True, ligature_dashes=False, ligature_guillemets=False):
        self.smart_quotes = smart_quotes
        self.ligature_dashes = ligature_dashes
        self.ligature_guillemets = ligature_guillemets

    def clean(self, text, tex=False):
        text = _WHITESPACE.sub(lambda m: m.group(0) if _is_nbsp(m.group(0)) else " ", text)
        if self.ligature_dashes:
            text = text.replace("---", "—").replace("--", "–")
        if self.ligature_guillemets:
            text = text.replace("<<", "«").replace(">>", "»")
        if self.smart_quotes:
            text = _DOUBLE_QUOTES.sub("“\\1”", text)
            text = text.replace("'", "’")
        return text

    def _params(self):
        return (self.smart_quotes, self.ligature_dashes, self.ligature_guillemets)

    def __eq__(self, other):
        return type(self) is type(other) and self._params() == other._params()


class French(Default):
    """
    Default cleaning plus French spacing rules.

    Inserts a non-breaking space before `:` and inside guillemets, and a
    narrow one before `;`, `!` and `?`. LaTeX output gets regular
    non-breaking spaces only, since many fonts lack the narrow one.
    """

    _narrow_before = re.compile(r"(?<=[^\s;!?])\s*([;!?]+)")
    _wide_before = re.compile(r"(?<=\S)\s*(:)(?=\s|$)")

    def clean(self, text, tex=False):
        text = super().clean(text, tex)
        narrow = NB_SPACE if tex else NB_SPACE_NARROW
        text = self._narrow_before.sub(lambda m: narrow + m.group(1), text)
        text = self._wide_before.sub(lambda m: NB_SPACE + m.group(1), text)
        text = re.sub(r"«\s*", "«" + NB_SPACE, text)
        text = re.sub(r"\s*»", NB_SPACE + "»", text)
        return text


def _is_nbsp(s):
    return all(c in (NB_SPACE, NB_SPACE_NARROW) for c in s)


def select_cleaner(options):
    """Pick the cleaner implied by `input.clean*` and `lang`."""
    if not options.get_bool("input.clean"):
        return Off()
    params = dict(
        smart_quotes=options.get_bool("input.clean.smart_quotes"),
        ligature_dashes=options.get_bool("input.clean.ligature.dashes"),
        ligature_guillemets=options.get_bool("input.clean.ligature.guillemets"),
    )
    if options.get_str("lang").lower().startswith("fr"):
        return French(**params)
    return Default(**params)
