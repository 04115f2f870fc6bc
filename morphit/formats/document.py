"""Document formats handled by pandoc."""

from morphit.formats.models import DocumentFormat

# (pandoc name, display name, file extension)
_PANDOC_FORMATS: list[tuple[str, str, str]] = [
    # Common formats
    ("markdown", "Markdown", "md"),
    ("html", "HTML", "html"),
    ("latex", "LaTeX", "tex"),
    ("pdf", "PDF", "pdf"),
    ("docx", "Word Document (DOCX)", "docx"),
    ("rtf", "Rich Text Format (RTF)", "rtf"),
    ("epub", "EPUB", "epub"),
    ("plain", "Plain Text", "txt"),
    # Markdown variants
    ("commonmark", "CommonMark", "md"),
    ("gfm", "GitHub Flavored Markdown", "md"),
    ("markdown_strict", "Strict Markdown", "md"),
    ("markdown_phpextra", "PHP Markdown Extra", "md"),
    ("markdown_mmd", "MultiMarkdown", "md"),
    # Lightweight markup
    ("rst", "reStructuredText", "rst"),
    ("asciidoc", "AsciiDoc", "adoc"),
    ("textile", "Textile", "textile"),
    ("org", "Org Mode", "org"),
    ("muse", "Emacs Muse", "muse"),
    ("creole", "Creole", "creole"),
    ("djot", "Djot", "djot"),
    ("markua", "Markua", "markua"),
    ("t2t", "txt2tags", "t2t"),
    # Wiki dialects
    ("mediawiki", "MediaWiki", "wiki"),
    ("dokuwiki", "DokuWiki", "wiki"),
    ("tikiwiki", "TikiWiki", "wiki"),
    ("twiki", "TWiki", "wiki"),
    ("vimwiki", "Vimwiki", "wiki"),
    ("xwiki", "XWiki", "wiki"),
    ("zimwiki", "ZimWiki", "wiki"),
    ("jira", "Jira Wiki", "wiki"),
    # HTML variants
    ("html4", "HTML 4", "html"),
    ("html5", "HTML 5", "html"),
    ("chunkedhtml", "Chunked HTML", "zip"),
    # Ebooks
    ("epub2", "EPUB 2", "epub"),
    ("epub3", "EPUB 3", "epub"),
    ("fb2", "FictionBook2", "fb2"),
    # Documentation
    ("man", "Man Page", "man"),
    ("ms", "Roff ms", "ms"),
    ("mdoc", "mdoc", "mdoc"),
    ("texinfo", "GNU TexInfo", "texi"),
    ("haddock", "Haddock", "haddock"),
    # XML
    ("docbook", "DocBook", "xml"),
    ("docbook4", "DocBook 4", "xml"),
    ("docbook5", "DocBook 5", "xml"),
    ("jats", "JATS", "xml"),
    ("jats_archiving", "JATS Archiving", "xml"),
    ("jats_publishing", "JATS Publishing", "xml"),
    ("jats_articleauthoring", "JATS Article Authoring", "xml"),
    ("bits", "BITS", "xml"),
    ("tei", "TEI Simple", "xml"),
    ("opml", "OPML", "opml"),
    ("opendocument", "OpenDocument XML", "xml"),
    # Office
    ("odt", "OpenDocument Text (ODT)", "odt"),
    ("pptx", "PowerPoint (PPTX)", "pptx"),
    # Academic
    ("context", "ConTeXt", "tex"),
    ("biblatex", "BibLaTeX", "bib"),
    ("bibtex", "BibTeX", "bib"),
    ("csljson", "CSL JSON", "json"),
    ("ris", "RIS", "ris"),
    ("endnotexml", "EndNote XML", "xml"),
    # Presentations
    ("beamer", "LaTeX Beamer", "tex"),
    ("slidy", "Slidy", "html"),
    ("slideous", "Slideous", "html"),
    ("dzslides", "DZSlides", "html"),
    ("revealjs", "reveal.js", "html"),
    ("s5", "S5", "html"),
    # Other
    ("json", "JSON", "json"),
    ("native", "Native", "native"),
    ("icml", "InDesign ICML", "icml"),
    ("typst", "Typst", "typ"),
    ("ipynb", "Jupyter Notebook", "ipynb"),
    ("csv", "CSV", "csv"),
    ("tsv", "TSV", "tsv"),
    ("ansi", "ANSI Terminal", "ansi"),
]

_READABLE = {
    "markdown", "commonmark", "gfm", "markdown_strict", "markdown_phpextra", "markdown_mmd",
    "rst", "asciidoc", "textile", "org", "muse", "creole", "djot", "markua", "t2t",
    "mediawiki", "dokuwiki", "tikiwiki", "twiki", "vimwiki", "jira",
    "html", "html4", "html5",
    "epub", "epub2", "epub3", "fb2",
    "man", "ms", "mdoc", "texinfo", "haddock",
    "docbook", "docbook4", "docbook5", "jats", "jats_archiving", "jats_publishing",
    "jats_articleauthoring", "bits", "tei", "opml", "opendocument",
    "latex", "context",
    "biblatex", "bibtex", "csljson", "ris", "endnotexml",
    "docx", "odt", "rtf",
    "ipynb", "typst",
    "csv", "tsv",
    "json", "native",
}  # fmt: skip

_WRITABLE = {
    "markdown", "commonmark", "gfm", "markdown_strict", "markdown_phpextra", "markdown_mmd",
    "rst", "asciidoc", "markua",
    "mediawiki", "dokuwiki", "xwiki", "zimwiki", "jira",
    "html", "html4", "html5", "chunkedhtml",
    "epub", "epub2", "epub3", "fb2",
    "man", "ms", "texinfo",
    "docbook", "docbook4", "docbook5", "jats", "jats_archiving", "jats_publishing",
    "jats_articleauthoring", "bits", "tei", "opendocument",
    "latex", "context", "beamer",
    "biblatex", "bibtex", "csljson",
    "docx", "odt", "rtf", "pptx",
    "ipynb", "typst",
    "plain", "json", "native",
    "pdf", "icml",
    "slidy", "slideous", "dzslides", "revealjs", "s5",
    "ansi",
}  # fmt: skip

_TABULAR = {"csv", "tsv"}
_BIBLIOGRAPHY = {"biblatex", "bibtex", "csljson", "ris", "endnotexml"}

# pandoc has no plain-text reader; .txt input is read as markdown
_READER_OVERRIDES = {"plain": "markdown"}


def _category(name: str) -> str:
    if name in _TABULAR:
        return "tabular"
    if name in _BIBLIOGRAPHY:
        return "bibliography"
    return "general"


DOCUMENT_FORMATS: dict[str, DocumentFormat] = {
    name: DocumentFormat(
        id=name,
        extension=ext,
        display_name=display,
        reader=_READER_OVERRIDES.get(name, name if name in _READABLE else None),
        writable=name in _WRITABLE,
        category=_category(name),  # type: ignore[arg-type]
    )
    for name, display, ext in _PANDOC_FORMATS
}

# Input extension detection. No PDF: pandoc cannot read it.
DOCUMENT_EXTENSIONS: dict[str, str] = {
    "md": "markdown",
    "markdown": "markdown",
    "html": "html",
    "htm": "html",
    "tex": "latex",
    "docx": "docx",
    "odt": "odt",
    "rtf": "rtf",
    "epub": "epub",
    "txt": "plain",
    "text": "plain",
    "rst": "rst",
    "adoc": "asciidoc",
    "asciidoc": "asciidoc",
    "textile": "textile",
    "org": "org",
    "wiki": "mediawiki",
    "texi": "texinfo",
    "texinfo": "texinfo",
    "xml": "docbook",
    "json": "json",
    "csv": "csv",
    "tsv": "tsv",
    "ipynb": "ipynb",
    "typ": "typst",
    "bib": "bibtex",
    "fb2": "fb2",
    "opml": "opml",
    "man": "man",
    "ms": "ms",
    "t2t": "t2t",
}

_TABULAR_OUTPUTS = (
    "html", "html4", "html5", "latex", "markdown", "commonmark", "gfm",
    "rst", "asciidoc", "mediawiki", "dokuwiki", "plain", "json",
)  # fmt: skip

_BIBLIOGRAPHY_OUTPUTS = (
    "html", "html4", "html5", "latex", "markdown", "commonmark", "gfm",
    "biblatex", "bibtex", "csljson", "plain", "json",
)  # fmt: skip


def compatible_document_outputs(source: DocumentFormat) -> frozenset[DocumentFormat]:
    """Return the pandoc outputs reachable from ``source``.

    Tabular and bibliography inputs only convert to a reduced set. A format
    pandoc cannot read has no outputs at all.
    """
    if not source.readable:
        return frozenset()
    if source.category == "tabular":
        names: tuple[str, ...] | set[str] = _TABULAR_OUTPUTS
    elif source.category == "bibliography":
        names = _BIBLIOGRAPHY_OUTPUTS
    else:
        names = _WRITABLE
    return frozenset(DOCUMENT_FORMATS[name] for name in names)
