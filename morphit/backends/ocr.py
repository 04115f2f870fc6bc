"""Text recognition backend using RapidOCR and PyMuPDF."""

from __future__ import annotations

import re
import threading
from collections.abc import Callable, Iterator
from pathlib import Path
from typing import Any

import anyio
import fitz

from morphit.backends.base import Backend
from morphit.config.constants import PDF_PAGE_SEPARATOR
from morphit.core.models import BackendKind, ConversionJob, ConvertedArtifact
from morphit.core.options import OCROptions
from morphit.exceptions import ConversionError, NoOutputError
from morphit.formats.models import OCRFormat
from morphit.process.runner import CancellationToken
from morphit.utils.logging import get_logger

log = get_logger(__name__)

_EXCESS_NEWLINES = re.compile(r"\n{3,}")

# OCR option language names to RapidOCR recognition models
_LANGUAGES = {
    "zh": "CH",
    "ch": "CH",
    "en": "EN",
    "ja": "JAPAN",
    "ko": "KOREAN",
    "ar": "ARABIC",
    "th": "TH",
    "latin": "LATIN",
}


class TextRecognizer:
    """RapidOCR wrapper sharing engines across instances.

    ONNX Runtime start-up is expensive, so engines are created once per
    parameter set and reused by every job.
    """

    _engines: dict[tuple[tuple[str, Any], ...], Any] = {}
    _lock = threading.Lock()

    def __init__(self, options: OCROptions | None = None) -> None:
        self.options = options or OCROptions()

    def _params(self) -> dict[str, Any]:
        params: dict[str, Any] = {"Global.log_level": "warning"}
        if self.options.recognition_level == "fast":
            params["Global.use_cls"] = False
        codes = [lang.lower() for lang in self.options.languages]
        language = next((_LANGUAGES[code] for code in codes if code in _LANGUAGES), None)
        if language is not None:
            params["Rec.lang_type"] = language
        return params

    @property
    def engine(self) -> Any:
        params = self._params()
        key = tuple(sorted(params.items()))
        with self._lock:
            if key not in self._engines:
                log.debug("Creating OCR engine", params=params)
                self._engines[key] = self._create_engine(params)
            return self._engines[key]

    @staticmethod
    def _create_engine(params: dict[str, Any]) -> Any:
        try:
            from rapidocr import LangRec, RapidOCR
        except ImportError as e:
            raise ImportError(
                "RapidOCR is not installed. Install with: pip install 'morphit[ocr]'"
            ) from e

        if "Rec.lang_type" in params:
            params = {**params, "Rec.lang_type": LangRec[params["Rec.lang_type"]]}
        return RapidOCR(params=params)

    def recognize(self, image: Path | bytes) -> str:
        """Recognize the text of one image (a path or encoded bytes)."""
        source = str(image) if isinstance(image, Path) else image
        result = self.engine(source)
        texts = list(result.txts) if result.txts is not None else []
        log.debug("OCR completed", blocks=len(texts))
        return "\n".join(texts)


def join_pages(pages: list[tuple[int, str]]) -> str:
    """Join page texts under ``--- Page N ---`` headers.

    Line endings are normalized and blank runs collapsed to one empty line.
    """
    parts = [f"{PDF_PAGE_SEPARATOR.format(number=number)}\n\n{text}" for number, text in pages]
    text = "\n\n".join(parts).replace("\r\n", "\n").replace("\r", "\n")
    return _EXCESS_NEWLINES.sub("\n\n", text).strip()


def _pages(source: Path) -> Iterator[tuple[int, fitz.Page]]:
    with fitz.open(source) as doc:
        for index, page in enumerate(doc):
            yield index + 1, page


def extract_pdf_text(source: Path, check: Callable[[], None]) -> str:
    """Copy the embedded text layer of every page; empty if there is none."""
    pages: list[tuple[int, str]] = []
    found = False
    for number, page in _pages(source):
        check()
        text = page.get_text().strip()
        found = found or bool(text)
        pages.append((number, text))
    return join_pages(pages) if found else ""


def ocr_pdf_pages(
    source: Path, recognizer: TextRecognizer, dpi: int, check: Callable[[], None]
) -> str:
    """Render every page at ``dpi`` and recognize it; empty if nothing was read."""
    pages: list[tuple[int, str]] = []
    found = False
    for number, page in _pages(source):
        check()
        png = page.get_pixmap(dpi=dpi).tobytes("png")
        text = recognizer.recognize(png).strip()
        found = found or bool(text)
        pages.append((number, text))
    return join_pages(pages) if found else ""


class OCRBackend(Backend):
    """Recognizes text in images and PDFs in a worker thread.

    Cancellation is checked between pages; a page already handed to the
    engine runs to completion.
    """

    kind = BackendKind.OCR

    def recognize(
        self, source: Path, fmt: OCRFormat, options: OCROptions, check: Callable[[], None]
    ) -> str:
        if fmt.mode == "extract":
            return extract_pdf_text(source, check)

        recognizer = TextRecognizer(options)
        if fmt.mode == "pdf_ocr" or self.runtime.registry.is_pdf(source):
            return ocr_pdf_pages(source, recognizer, self.runtime.settings.ocr.render_dpi, check)

        check()
        return recognizer.recognize(source).strip()

    async def convert(
        self, job: ConversionJob, token: CancellationToken | None = None
    ) -> list[ConvertedArtifact]:
        source: Path = job.source
        fmt = job.service.format
        assert isinstance(fmt, OCRFormat)
        output, name = self.output_for(source, fmt)

        def check() -> None:
            if token is not None:
                token.raise_if_cancelled(source)

        log.info("Recognizing text", file=str(source), mode=fmt.mode)
        with self.discard_on_error(output):
            try:
                text = await anyio.to_thread.run_sync(
                    self.recognize, source, fmt, job.options.ocr, check
                )
            except (RuntimeError, ValueError) as e:
                raise ConversionError(source, f"Text recognition failed: {e}", cause=e) from e
            if not text:
                raise NoOutputError(source, "No text found")
            output.write_text(text + "\n", encoding="utf-8")
        return [ConvertedArtifact((source,), output, name)]
