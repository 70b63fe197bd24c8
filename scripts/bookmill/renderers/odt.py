"""
ODT renderer.

Pipeline: pandoc → odt, styled by a reference document if `odt.reference`
is set (fonts, margins, headers).
"""

import os

from bookmill.renderers.base import PandocFileRenderer


class Odt(PandocFileRenderer):
    format_name = "ODT"
    extension = ".odt"

    def writer(self, book):
        return "odt"

    def pandoc_args(self, book, directory):
        extra = ["--toc", "--toc-depth", "1"]

        if book.options.is_set("odt.reference"):
            ref_path = book.options.get_path("odt.reference")
            if os.path.exists(ref_path):
                extra.append(f"--reference-doc={ref_path}")
                book.reporter.debug(f"Reference: {ref_path}")
            else:
                book.reporter.warning(f"No reference document found at {ref_path}")
        return extra
