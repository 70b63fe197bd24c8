"""
LaTeX and PDF renderers.

Pipeline:
    1. Pandoc converts the chapters → LaTeX via the tex.template
    2. (PDF) The LaTeX engine compiles it, two passes for TOC/headers
"""

import os
import re
import tempfile

from bookmill.errors import RenderError
from bookmill.pandoc import check_tool, exec_cmd
from bookmill.renderers.base import PandocRenderer


class Latex(PandocRenderer):
    format_name = "LaTeX"
    tex = True

    def latex(self, book, directory):
        """The whole book as LaTeX source (bytes)."""
        template = self.template_file(book, "tex.template", directory, "book.tex")
        tex_class = book.options.get_str("tex.class")
        division = "chapter" if tex_class in ("book", "report", "memoir") else "section"
        extra = [
            "--standalone",
            f"--template={template}",
            f"--top-level-division={division}",
            "--variable", f"documentclass={tex_class}",
        ]
        return self.run_pandoc(book, self.all_blocks(book), "latex", extra)

    def render(self, book, stream):
        with tempfile.TemporaryDirectory(prefix="bookmill-tex-") as tmp:
            stream.write(self.latex(book, tmp))


class ProofLatex(Latex):
    format_name = "LaTeX (proofreading)"
    proofread = True


class Pdf(Latex):
    format_name = "PDF"

    job_name = "book"

    def render(self, book, stream):
        engine = book.options.get_str("tex.command")
        check_tool(engine)

        with tempfile.TemporaryDirectory(prefix="bookmill-pdf-") as tmp:
            tex_file = os.path.join(tmp, f"{self.job_name}.tex")
            with open(tex_file, "wb") as f:
                f.write(self.latex(book, tmp))
            book.reporter.debug(f"Generated {tex_file}")

            compile_cmd = [
                engine,
                "-interaction=nonstopmode",
                f"-output-directory={tmp}",
                f"-jobname={self.job_name}",
                tex_file,
            ]
            # Run from the book root so relative image paths resolve
            for pass_num in [1, 2]:
                book.reporter.debug(f"{engine} pass {pass_num}...")
                try:
                    exec_cmd(compile_cmd, f"{engine} pass {pass_num}", cwd=book.root)
                except RenderError as e:
                    raise RenderError(f"{e.message}{self._tex_errors(tmp)}")

            with open(os.path.join(tmp, f"{self.job_name}.pdf"), "rb") as f:
                stream.write(f.read())

    def _tex_errors(self, directory):
        """Useful errors from the engine's log file, as text to append."""
        log_file = os.path.join(directory, f"{self.job_name}.log")
        if not os.path.exists(log_file):
            return ""

        with open(log_file, "r", errors="replace") as f:
            log_content = f.read()

        errors = [
            line
            for line in log_content.splitlines()
            if line.startswith("!") or re.search(r"\bError\b", line)
        ]
        lines = errors[:10] or log_content.splitlines()[-20:]
        return "".join(f"\n    {line}" for line in lines)


class ProofPdf(Pdf):
    format_name = "PDF (proofreading)"
    proofread = True
