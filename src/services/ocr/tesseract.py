import logging
import shutil
import tempfile
from statistics import fmean

import opik
import pytesseract
from pdf2image import convert_from_bytes
from pdf2image.exceptions import PDFInfoNotInstalledError, PDFPageCountError, PDFSyntaxError
from PIL import Image
from pytesseract import Output, TesseractError, TesseractNotFoundError

from src.core.errors import ExtractionFailed
from src.services.ocr.base import OCRResult, OCRService

logger = logging.getLogger("pickup_intake.ocr")


def _read_page(data: dict) -> tuple[str, list[float]]:
    """Rebuild page text line by line from `image_to_data` output.

    Returns the text and the confidences of recognized words (Tesseract reports -1
    for layout rows that carry no word).
    """
    lines: dict[tuple[int, int, int], list[str]] = {}
    confidences: list[float] = []
    for i, word in enumerate(data["text"]):
        word = (word or "").strip()
        if not word:
            continue
        key = (data["block_num"][i], data["par_num"][i], data["line_num"][i])
        lines.setdefault(key, []).append(word)
        conf = float(data["conf"][i])
        if conf >= 0:
            confidences.append(conf)
    return "\n".join(" ".join(words) for words in lines.values()), confidences


class TesseractOCR(OCRService):
    """Tesseract OCR via image-based extraction.

    PDF bytes → images (via pdf2image/poppler) → Tesseract word data → text + mean word
    confidence. While open, rasterized pages go to a scratch directory that lives until
    `close()`.
    """

    def __init__(self, lang: str = "ita", dpi: int = 300):
        self._lang = lang
        self._dpi = dpi
        self._workdir: str | None = None

    def open(self) -> None:
        try:
            version = pytesseract.get_tesseract_version()
        except TesseractNotFoundError as e:
            raise ExtractionFailed(f"backend unavailable: {e}") from e
        self._workdir = tempfile.mkdtemp(prefix="pickup-ocr-")
        logger.info(f"Tesseract {version} ready (lang={self._lang}, dpi={self._dpi}, workdir={self._workdir})")

    def close(self) -> None:
        if self._workdir is None:
            return
        workdir, self._workdir = self._workdir, None
        shutil.rmtree(workdir)

    @opik.track(name="ocr_extract_text")
    def extract_text(self, pdf_bytes: bytes) -> OCRResult:
        try:
            images: list[Image.Image] = convert_from_bytes(
                pdf_bytes, dpi=self._dpi, output_folder=self._workdir
            )
        except PDFInfoNotInstalledError as e:
            raise ExtractionFailed(f"backend unavailable: {e}") from e
        except (PDFPageCountError, PDFSyntaxError) as e:
            raise ExtractionFailed(f"corrupt document: {e}") from e

        texts = []
        confidences: list[float] = []
        for img in images:
            try:
                data = pytesseract.image_to_data(img, lang=self._lang, output_type=Output.DICT)
            except TesseractError as e:
                raise ExtractionFailed(f"recognition failed: {e}") from e
            page_text, page_confidences = _read_page(data)
            texts.append(page_text)
            confidences.extend(page_confidences)

        return OCRResult(
            text="\n".join(texts).strip(),
            mean_confidence=round(fmean(confidences), 1) if confidences else None,
            page_count=len(images),
        )
