"""
Multi-file HTML renderer.

Writes a directory: index.html (table of contents), one page per chapter,
and the two stylesheets. Can't be rendered to a single stream.
"""

import html
import os
import tempfile

from bookmill.errors import RenderError
from bookmill.renderers.base import PandocRenderer


class HtmlDir(PandocRenderer):
    format_name = "HTML (multiple pages)"

    def render(self, book, stream):
        raise RenderError(
            f"{self.format_name} creates a directory and can not be rendered to a stream"
        )

    def render_to_file(self, book, path):
        try:
            os.makedirs(path, exist_ok=True)
        except OSError as e:
            raise RenderError(f"could not create directory {path}: {e}")

        chapters = self.chapters(book)
        pages = [page_name(i) for i in range(len(chapters))]
        toc_title = book.get_metadata(lambda s: s).get("loc_toc", "")

        with tempfile.TemporaryDirectory(prefix="bookmill-html-dir-") as tmp:
            chapter_template = self.template_file(book, "html_dir.chapter.html", tmp)
            index_template = self.template_file(book, "html_dir.index.html", tmp)

            for i, (_, title, blocks) in enumerate(chapters):
                extra = [
                    "--standalone",
                    f"--template={chapter_template}",
                    "--metadata", f"pagetitle={title or book.options.get_str('title')}",
                ]
                if i > 0:
                    prev_link = _link(pages[i - 1], f"← {chapters[i - 1][1]}")
                    extra += ["--variable", f"prev_link={prev_link}"]
                if i < len(chapters) - 1:
                    next_link = _link(pages[i + 1], f"{chapters[i + 1][1]} →")
                    extra += ["--variable", f"next_link={next_link}"]
                page = self.run_pandoc(book, blocks, "html5", extra)
                self._write(os.path.join(path, pages[i]), page)

            extra = [
                "--standalone",
                f"--template={index_template}",
                "--metadata", f"pagetitle={book.options.get_str('title')}",
                "--variable", f"toc_title={toc_title}",
            ]
            for page, (_, title, _) in zip(pages, chapters):
                if title:
                    extra += ["--variable", f"toc_entry={_link(page, title)}"]
            index = self.run_pandoc(book, [], "html5", extra)
            self._write(os.path.join(path, "index.html"), index)

        self._write(os.path.join(path, "stylesheet.css"), book.get_template("html.css").encode("utf-8"))
        self._write(os.path.join(path, "print.css"), book.get_template("html.css.print").encode("utf-8"))

    def _write(self, path, content):
        try:
            with open(path, "wb") as f:
                f.write(content)
        except OSError as e:
            raise RenderError(f"could not write {path}: {e}")


class ProofHtmlDir(HtmlDir):
    format_name = "HTML (multiple pages/proofreading)"
    proofread = True


def page_name(index):
    return f"chapter_{index + 1:03d}.html"


def _link(href, label):
    return f'<a href="{href}">{html.escape(label)}</a>'
