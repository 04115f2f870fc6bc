"""Tests for the format registry."""

from pathlib import Path

import pytest

from morphit.formats import Domain, FormatRegistry, extension_of
from morphit.formats.document import DOCUMENT_FORMATS


@pytest.fixture
def registry():
    return FormatRegistry()


class TestExtensionOf:
    """Tests for extension_of."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [("photo.JPG", "jpg"), ("archive.tar.gz", "gz"), ("Makefile", ""), (Path("a/b.md"), "md")],
    )
    def test_lowercase_without_dot(self, path, expected):
        """Only the last suffix counts, lowercased."""
        assert extension_of(path) == expected


class TestDetect:
    """Tests for FormatRegistry.detect."""

    @pytest.mark.parametrize(
        ("name", "domain", "format_id"),
        [
            ("notes.md", Domain.DOCUMENT, "markdown"),
            ("notes.txt", Domain.DOCUMENT, "plain"),
            ("table.csv", Domain.DOCUMENT, "csv"),
            ("photo.jpeg", Domain.IMAGE, "jpeg"),
            ("scan.TIF", Domain.IMAGE, "tiff"),
            ("song.m4a", Domain.MEDIA, "aac"),
            ("clip.mov", Domain.MEDIA, "mov"),
        ],
    )
    def test_by_extension(self, registry, name, domain, format_id):
        """Each extension maps to one domain's format."""
        fmt = registry.detect(name)
        assert fmt is not None
        assert (fmt.domain, fmt.id) == (domain, format_id)

    def test_unknown(self, registry):
        """Unknown or missing extensions are not detected."""
        assert registry.detect("data.xyz") is None
        assert registry.detect("README") is None

    def test_pdf_depends_on_batch(self, registry):
        """A PDF is a document unless the whole batch is PDFs."""
        assert registry.detect("a.pdf").domain is Domain.DOCUMENT
        assert registry.detect("a.pdf", all_pdf=True).domain is Domain.IMAGE

    def test_is_pdf(self, registry):
        """PDF check ignores case."""
        assert registry.is_pdf("A.PDF")
        assert not registry.is_pdf("a.png")

    def test_speech_input(self, registry):
        """Only plain text is read aloud."""
        assert registry.is_speech_input("notes.txt")
        assert not registry.is_speech_input("notes.md")


class TestCatalogs:
    """Tests for catalog lookup."""

    def test_get_ignores_case(self, registry):
        """Ids are matched case-insensitively."""
        assert registry.get(Domain.IMAGE, "PNG").id == "png"

    def test_get_unknown(self, registry):
        """Unknown ids raise KeyError naming the domain."""
        with pytest.raises(KeyError, match="Unknown media format"):
            registry.get(Domain.MEDIA, "betamax")

    def test_catalog_is_read_only(self, registry):
        """Catalogs cannot be modified through the registry."""
        with pytest.raises(TypeError):
            registry.catalog(Domain.ARCHIVE)["rar"] = None  # type: ignore[index]

    def test_every_domain_populated(self, registry):
        """No catalog is empty."""
        assert all(registry.catalog(domain) for domain in Domain)

    def test_pdf_is_write_only_for_pandoc(self):
        """pandoc can produce PDF but not read it."""
        pdf = DOCUMENT_FORMATS["pdf"]
        assert pdf.writable and not pdf.readable

    def test_plain_text_reader(self):
        """Plain text is read as markdown."""
        assert DOCUMENT_FORMATS["plain"].reader == "markdown"
