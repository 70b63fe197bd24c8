"""
Template lookup and the chapter header template.

Document templates (HTML pages, EPUB chapters, the LaTeX document) are
pandoc templates shipped in templates/; a book overrides one by setting
the option with the same key to a file path. The chapter header template
(`rendering.chapter_template`) is a Jinja2 template rendered by bookmill.
"""

import os

import jinja2

from bookmill import __version__, lang
from bookmill.errors import (
    ConfigParserError,
    MissingFileError,
    RenderError,
    TemplateError,
)

TEMPLATE_DIR = os.path.join(os.path.dirname(os.path.abspath(__file__)), "templates")

# Template key → builtin file in templates/
BUILTIN_TEMPLATES = {
    "html.css": "html.css",
    "html.css.print": "html.print.css",
    "html_single.html": "html_single.html",
    "html_dir.index.html": "html_dir.index.html",
    "html_dir.chapter.html": "html_dir.chapter.html",
    "epub.css": "epub.css",
    "tex.template": "book.tex",
}

_env = jinja2.Environment(autoescape=False, keep_trailing_newline=False)


def builtin_name(options, key):
    """Builtin file for a template key, or None if the key is unknown."""
    if key == "epub.chapter.xhtml":
        if options.get_int("epub.version") == 3:
            return "epub3.chapter.xhtml"
        return "epub2.chapter.xhtml"
    return BUILTIN_TEMPLATES.get(key)


def get_template(options, key, source=None):
    """
    Content of a template: the user's file if the option is set,
    the builtin otherwise.
    """
    name = builtin_name(options, key)
    if name is None:
        raise ConfigParserError(f"invalid template '{key}'", source)

    if options.is_set(key):
        path = options.get_path(key)
        try:
            with open(path, encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            raise MissingFileError(source, f"template '{key}'", path)
        except (OSError, UnicodeDecodeError) as e:
            raise ConfigParserError(f"file '{path}' could not be read: {e}", source)

    with open(os.path.join(TEMPLATE_DIR, name), encoding="utf-8") as f:
        return f.read()


# ── Chapter header ─────────────────────────────────────────


def compile_template(text, source=None, error_msg="could not compile template"):
    try:
        return _env.from_string(text)
    except jinja2.TemplateSyntaxError as e:
        raise TemplateError(f"{error_msg}: {e.message} (line {e.lineno})", source)


def render_template(template, data, source=None):
    try:
        return template.render(**data)
    except jinja2.TemplateError as e:
        raise TemplateError(f"could not render template: {e}", source)


def metadata_vars(options, f, source=None):
    """
    Variables shared by every template: metadata (passed through `f`,
    which renders it for the target format), `lang_<code>` and the
    localised strings as `loc_<key>`.
    """
    book_lang = options.get_str("lang")
    data = {
        "bookmill_version": __version__,
        f"lang_{book_lang}": True,
    }
    for key in options.metadata_keys():
        if not options.is_set(key):
            continue
        var = key.replace(".", "_")
        try:
            data[var] = f(options.get_str(key))
        except Exception as e:
            raise RenderError(f"could not render `{var}` for metadata:\n{e}", source)
        data[f"has_{var}"] = True

    for key, value in lang.get_hash(book_lang).items():
        data[f"loc_{key}"] = value
    return data
