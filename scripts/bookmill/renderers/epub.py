"""
EPUB renderer.

Pipeline: pandoc → epub2/epub3 (per `epub.version`) with the
epub.chapter.xhtml template and epub.css, cover image if set.
"""

import os

from bookmill.renderers.base import PandocFileRenderer


class Epub(PandocFileRenderer):
    format_name = "EPUB"
    extension = ".epub"

    def writer(self, book):
        return "epub3" if book.options.get_int("epub.version") == 3 else "epub2"

    def pandoc_args(self, book, directory):
        extra = [
            "--toc",
            "--toc-depth", "1",
            "--split-level=1",
            f"--template={self.template_file(book, 'epub.chapter.xhtml', directory)}",
            "--css", self.template_file(book, "epub.css", directory),
        ]

        # Cover (per-book artifact)
        if book.options.is_set("cover"):
            cover = book.options.get_path("cover")
            if os.path.exists(cover):
                extra.extend(["--epub-cover-image", cover])
                book.reporter.debug(f"Cover: {cover}")
            else:
                book.reporter.warning(f"No cover image found at {cover}")
        return extra
