"""
Standalone HTML renderer.

Pipeline: chapters → pandoc html5 with the html_single.html template,
stylesheets inlined so the page is self-contained.
"""

import tempfile

from bookmill.renderers.base import PandocRenderer


class HtmlSingle(PandocRenderer):
    format_name = "HTML"

    def render(self, book, stream):
        with tempfile.TemporaryDirectory(prefix="bookmill-html-") as tmp:
            template = self.template_file(book, "html_single.html", tmp)
            extra = [
                "--standalone",
                f"--template={template}",
                "--variable", f"stylesheet={book.get_template('html.css')}",
                "--variable", f"print_stylesheet={book.get_template('html.css.print')}",
                "--metadata", f"pagetitle={book.options.get_str('title')}",
            ]
            html = self.run_pandoc(book, self.all_blocks(book), "html5", extra)
        stream.write(html)


class ProofHtmlSingle(HtmlSingle):
    format_name = "HTML (proofreading)"
    proofread = True
