"""
Book options: schema, defaults, and typed access.

Every option a book file (or an inline YAML block) may set is declared in
OPTIONS below. Setting anything else is a BookOptionError.
"""

import datetime
import os

import yaml

from bookmill.errors import BookOptionError, Source


# (key, type, default, description)
#
# Types:
#   meta      metadata string, exposed to templates
#   str       plain string
#   bool/int  as in YAML
#   path      path, resolved against the book root
#   template  path of a template override (see templates.py)
#   list      list of strings
OPTIONS = [
    # Metadata
    ("author", "meta", "Anonymous", "Author of the book"),
    ("title", "meta", "Untitled", "Title of the book"),
    ("lang", "meta", "en", "Language of the book"),
    ("subject", "meta", None, "Subject of the book"),
    ("description", "meta", None, "Description of the book"),
    ("cover", "path", None, "Path to the cover image"),
    ("license", "meta", None, "License of the book"),
    ("version", "meta", None, "Version of the book"),
    ("date", "meta", None, "Date the book was revised"),
    ("subtitle", "meta", None, "Subtitle of the book"),

    # Output files
    ("output.html", "path", None, "Output file name for HTML rendering"),
    ("output.html_dir", "path", None, "Output directory for multi-file HTML rendering"),
    ("output.tex", "path", None, "Output file name for LaTeX rendering"),
    ("output.pdf", "path", None, "Output file name for PDF rendering"),
    ("output.epub", "path", None, "Output file name for EPUB rendering"),
    ("output.odt", "path", None, "Output file name for ODT rendering"),
    ("output.proofread.html", "path", None, "Output file name for proofread HTML"),
    ("output.proofread.html_dir", "path", None, "Output directory for proofread multi-file HTML"),
    ("output.proofread.pdf", "path", None, "Output file name for proofread PDF"),

    # Rendering
    (
        "rendering.chapter_template",
        "str",
        "{{ loc_chapter }} {{ number }}{% if has_chapter_title %}: {{ chapter_title }}{% endif %}",
        "Template for numbered chapter titles",
    ),

    # Input
    ("input.clean", "bool", True, "Clean input text (typographic normalisation)"),
    ("input.clean.smart_quotes", "bool", True, "Replace straight quotes with curly ones"),
    ("input.clean.ligature.dashes", "bool", False, "Replace -- and --- with en and em dashes"),
    ("input.clean.ligature.guillemets", "bool", False, "Replace << and >> with guillemets"),
    ("input.yaml_blocks", "bool", False, "Read YAML blocks embedded in chapters"),

    # Resources
    ("resources.base_path", "path", None, "Base path for both local links and images"),
    ("resources.base_path.links", "path", None, "Base path for local links"),
    ("resources.base_path.images", "path", None, "Base path for local images"),

    # Template overrides
    ("html.css", "template", None, "Stylesheet for HTML rendering"),
    ("html.css.print", "template", None, "Print stylesheet for HTML rendering"),
    ("html_single.html", "template", None, "Main template for standalone HTML"),
    ("html_dir.index.html", "template", None, "Index page template for multi-file HTML"),
    ("html_dir.chapter.html", "template", None, "Chapter page template for multi-file HTML"),
    ("epub.css", "template", None, "Stylesheet for EPUB rendering"),
    ("epub.chapter.xhtml", "template", None, "Chapter template for EPUB rendering"),
    ("tex.template", "template", None, "LaTeX document template"),

    # Format-specific
    ("epub.version", "int", 3, "EPUB version to generate (2 or 3)"),
    ("tex.class", "str", "book", "LaTeX document class"),
    ("tex.command", "str", "xelatex", "LaTeX engine used to build PDFs"),
    ("odt.reference", "path", None, "Reference document styling ODT output"),
    ("pandoc.filters", "list", [], "Lua filters passed to pandoc when rendering"),

    # Proofreading
    ("proofread", "bool", False, "Enable proofreading outputs"),
    ("proofread.languagetool", "bool", False, "Check grammar with a LanguageTool server"),
    ("proofread.languagetool.port", "int", 8081, "Port of the LanguageTool server"),
]

SCHEMA = {key: (kind, default, desc) for key, kind, default, desc in OPTIONS}

STRING_TYPES = ("meta", "str", "path", "template")

TRUE_VALUES = ("true", "yes", "on")
FALSE_VALUES = ("false", "no", "off")


class BookOptions:
    """
    Typed option store for one book.

    Usage:
        options = BookOptions()
        options.set("author", "Joan Doe")
        options.get_str("author")          # "Joan Doe"
        options.get_bool("input.clean")    # True (default)
        options.get_path("output.html")    # BookOptionError if not set
    """

    def __init__(self):
        self._values = {}
        for key, (kind, default, _) in SCHEMA.items():
            if default is not None:
                self._values[key] = list(default) if kind == "list" else default
        self.root = ""
        self.source = Source.empty()

    # ── Setting ────────────────────────────────────────────

    def set(self, key, value):
        """Set an option from its string representation."""
        kind = self._kind(key)
        if kind == "bool":
            lowered = value.strip().lower()
            if lowered in TRUE_VALUES:
                parsed = True
            elif lowered in FALSE_VALUES:
                parsed = False
            else:
                raise BookOptionError(
                    f"could not parse '{value}' as boolean for option '{key}'", self.source
                )
        elif kind == "int":
            try:
                parsed = int(value)
            except ValueError:
                raise BookOptionError(
                    f"could not parse '{value}' as integer for option '{key}'", self.source
                )
        elif kind == "list":
            try:
                parsed = yaml.safe_load(value)
            except yaml.YAMLError as e:
                raise BookOptionError(
                    f"could not parse '{value}' as a list for option '{key}': {e}", self.source
                )
            if isinstance(parsed, str):
                parsed = [parsed]
        else:
            parsed = value
        return self.set_yaml(key, parsed)

    def set_yaml(self, key, value):
        """
        Set an option from an already-parsed YAML value.

        Returns the previous value, or None if the option was unset.
        """
        if not isinstance(key, str):
            raise BookOptionError(f"option keys must be strings, got {key!r}", self.source)
        kind = self._kind(key)
        value = self._check(key, kind, value)
        previous = self._values.get(key)
        self._values[key] = value
        return previous

    def _kind(self, key):
        try:
            return SCHEMA[key][0]
        except KeyError:
            raise BookOptionError(f"unrecognized option '{key}'", self.source)

    def _check(self, key, kind, value):
        if kind in STRING_TYPES:
            # YAML turns `version: 1.0` into a float and `date:` into a date
            if isinstance(value, (int, float, datetime.date)) and not isinstance(value, bool):
                return str(value)
            if isinstance(value, str):
                return value
            expected = "a string"
        elif kind == "bool":
            if isinstance(value, bool):
                return value
            expected = "a boolean"
        elif kind == "int":
            if isinstance(value, int) and not isinstance(value, bool):
                return value
            expected = "an integer"
        else:
            if isinstance(value, list) and all(isinstance(v, str) for v in value):
                return list(value)
            expected = "a list of strings"
        raise BookOptionError(
            f"expected {expected} for option '{key}', found {value!r}", self.source
        )

    # ── Getters ────────────────────────────────────────────

    def get(self, key):
        self._kind(key)
        try:
            return self._values[key]
        except KeyError:
            raise BookOptionError(f"option '{key}' is not set", self.source)

    def is_set(self, key):
        return key in self._values

    def get_str(self, key):
        return self._typed(key, STRING_TYPES, "string")

    def get_bool(self, key):
        return self._typed(key, ("bool",), "boolean")

    def get_int(self, key):
        return self._typed(key, ("int",), "integer")

    def get_list(self, key):
        return list(self._typed(key, ("list",), "list"))

    def get_relative_path(self, key):
        """The path as written in the book file."""
        return self._typed(key, ("path", "template"), "path")

    def get_path(self, key):
        """The path, resolved against the book root."""
        return os.path.join(self.root, self.get_relative_path(key))

    def _typed(self, key, kinds, name):
        value = self.get(key)
        if SCHEMA[key][0] not in kinds:
            raise BookOptionError(f"option '{key}' is not a {name}", self.source)
        return value

    # ── Introspection ──────────────────────────────────────

    def metadata_keys(self):
        return [key for key, kind, _, _ in OPTIONS if kind == "meta"]

    def to_dict(self):
        return {key: (list(v) if isinstance(v, list) else v) for key, v in self._values.items()}

    def description(self, key):
        self._kind(key)
        return SCHEMA[key][2]
