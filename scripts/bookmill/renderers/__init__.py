from bookmill.renderers.base import BookRenderer
from bookmill.renderers.epub import Epub
from bookmill.renderers.html import HtmlSingle, ProofHtmlSingle
from bookmill.renderers.html_dir import HtmlDir, ProofHtmlDir
from bookmill.renderers.latex import Latex, Pdf, ProofLatex, ProofPdf
from bookmill.renderers.odt import Odt

# (key, description, renderer class), registered on every new Book
BUILTIN_FORMATS = [
    ("html", "HTML (standalone page)", HtmlSingle),
    ("proofread.html", "HTML (standalone page/proofreading)", ProofHtmlSingle),
    ("html_dir", "HTML (multiple pages)", HtmlDir),
    ("proofread.html_dir", "HTML (multiple pages/proofreading)", ProofHtmlDir),
    ("tex", "LaTeX", Latex),
    ("proofread.tex", "LaTeX (proofreading)", ProofLatex),
    ("pdf", "PDF", Pdf),
    ("proofread.pdf", "PDF (proofreading)", ProofPdf),
    ("epub", "EPUB", Epub),
    ("odt", "ODT", Odt),
]

# render_all() looks at output.<key> for these, in this order
DEFAULT_FORMATS = ["pdf", "epub", "html_dir", "odt", "html", "tex"]

# ...and for these only when proofreading is on
PROOFREAD_FORMATS = ["proofread.pdf", "proofread.html_dir", "proofread.html"]

__all__ = ["BookRenderer", "BUILTIN_FORMATS", "DEFAULT_FORMATS", "PROOFREAD_FORMATS"]
